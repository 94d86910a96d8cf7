"""Tests for the tray icon drawing."""

from PIL import Image

from focus_flow.icon import GRAY, GREEN, LIGHT_GREEN, TRACK, create_tray_icon, generate_icon


def test_tray_icon_basics():
    img = create_tray_icon()
    assert img.size == (64, 64)
    assert img.mode == "RGBA"
    assert img.getpixel((0, 0))[3] == 0
    assert img.getpixel((32, 32)) == GREEN
    assert create_tray_icon(paused=True).getpixel((32, 32)) == GRAY


def test_progress_ring():
    # 3 o'clock on the ring
    assert create_tray_icon(progress=0.0).getpixel((58, 32)) == TRACK
    assert create_tray_icon(progress=0.5).getpixel((58, 32)) == LIGHT_GREEN
    assert create_tray_icon(progress=1.0).getpixel((58, 32)) == GREEN
    assert create_tray_icon(progress=7).getpixel((58, 32)) == GREEN


def test_generate_icon_files(tmp_path):
    ico, png = generate_icon(str(tmp_path))
    with Image.open(png) as img:
        assert img.size == (256, 256)
    with Image.open(ico) as img:
        assert img.format == "ICO"
