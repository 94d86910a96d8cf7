"""
Completion chime.

A three-note C major chord (C5, E5, G5) with staggered starts and an
exponential fade, rendered once to a WAV file and played through whatever
the platform offers.
"""
from __future__ import annotations

import math
import os
import platform
import subprocess
import tempfile
import wave
from array import array
from typing import Optional

IS_MAC = platform.system() == "Darwin"
IS_WIN = platform.system() == "Windows"

SAMPLE_RATE = 22050
CHIME_SECONDS = 0.7

# (frequency Hz, start s, stop s, peak gain)
CHIME_NOTES = (
    (523.25, 0.00, 0.30, 0.30),   # C5
    (659.25, 0.15, 0.50, 0.30),   # E5
    (783.99, 0.30, 0.70, 0.25),   # G5
)
FADE_FLOOR = 0.01

CHIME_FILE = os.path.join(tempfile.gettempdir(), "focus_flow_chime.wav")


def render_chime(sample_rate: int = SAMPLE_RATE) -> array:
    """16-bit mono samples for the completion chord."""
    total = int(CHIME_SECONDS * sample_rate)
    mix = [0.0] * total
    for freq, start, stop, gain in CHIME_NOTES:
        first, last = int(start * sample_rate), min(total, int(stop * sample_rate))
        length = max(1, last - first)
        # exponential ramp from gain down to FADE_FLOOR over the note
        decay = math.log(FADE_FLOOR / gain) / length
        for n in range(length):
            mix[first + n] += gain * math.exp(decay * n) * math.sin(2 * math.pi * freq * n / sample_rate)
    peak = max(1.0, max(abs(v) for v in mix))
    return array("h", (int(32767 * v / peak) for v in mix))


def write_chime(path: str = CHIME_FILE, sample_rate: int = SAMPLE_RATE) -> str:
    samples = render_chime(sample_rate)
    with wave.open(path, "wb") as w:
        w.setnchannels(1)
        w.setsampwidth(2)
        w.setframerate(sample_rate)
        w.writeframes(samples.tobytes())
    return path


def _play_file(path: str) -> bool:
    if IS_WIN:
        import winsound
        winsound.PlaySound(path, winsound.SND_FILENAME | winsound.SND_ASYNC)
        return True
    if IS_MAC:
        subprocess.Popen(["afplay", path])
        return True
    # Linux: try common players in order of likelihood
    for cmd in (["paplay", path],
                ["aplay", "-q", path],
                ["ffplay", "-nodisp", "-autoexit", "-loglevel", "quiet", path]):
        try:
            subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
            return True
        except FileNotFoundError:
            continue
    return False


def play_completion_sound(custom_path: Optional[str] = None) -> bool:
    """Play the chime (or a custom file). Returns False when nothing played."""
    try:
        if custom_path and os.path.exists(custom_path):
            return _play_file(custom_path)
        if not os.path.exists(CHIME_FILE):
            write_chime(CHIME_FILE)
        return _play_file(CHIME_FILE)
    except (OSError, RuntimeError, wave.Error):
        return False  # sound is optional
