"""Tests for the completion chime."""

import wave

from focus_flow import sound


def test_render_chime_length_and_range():
    samples = sound.render_chime()
    assert len(samples) == int(sound.CHIME_SECONDS * sound.SAMPLE_RATE)
    assert max(abs(s) for s in samples) <= 32767
    assert any(samples)


def test_write_chime(tmp_path):
    path = sound.write_chime(str(tmp_path / "chime.wav"), sample_rate=8000)
    with wave.open(path, "rb") as w:
        assert w.getnchannels() == 1
        assert w.getsampwidth() == 2
        assert w.getframerate() == 8000
        assert w.getnframes() == int(sound.CHIME_SECONDS * 8000)


def test_play_writes_chime_once(tmp_path, monkeypatch):
    played = []
    target = str(tmp_path / "chime.wav")
    monkeypatch.setattr(sound, "CHIME_FILE", target)
    monkeypatch.setattr(sound, "_play_file", lambda path: played.append(path) or True)
    assert sound.play_completion_sound()
    assert played == [target]
    assert (tmp_path / "chime.wav").exists()


def test_play_custom_file(tmp_path, monkeypatch):
    custom = tmp_path / "ding.wav"
    custom.write_bytes(b"RIFF")
    played = []
    monkeypatch.setattr(sound, "_play_file", lambda path: played.append(path) or True)
    assert sound.play_completion_sound(str(custom))
    assert played == [str(custom)]


def test_play_errors_are_not_fatal(tmp_path, monkeypatch):
    def broken(path):
        raise OSError("no audio device")

    monkeypatch.setattr(sound, "CHIME_FILE", str(tmp_path / "chime.wav"))
    monkeypatch.setattr(sound, "_play_file", broken)
    assert sound.play_completion_sound() is False
