"""
Tray icon for Focus Flow.

A round badge with a progress ring for today's completed sessions and a
"pause" glyph in the middle. Drawn at 64px and scaled by a factor, so the
same code serves the tray and the .ico/.png files for packaging.
"""
from __future__ import annotations

import math
import os

from PIL import Image, ImageDraw

GREEN = (34, 160, 110, 255)
DARK_GREEN = (18, 96, 66, 255)
LIGHT_GREEN = (150, 220, 190, 255)
TRACK = (220, 228, 224, 255)
WHITE = (255, 255, 255, 255)
SHADOW = (0, 0, 0, 90)

GRAY = (120, 128, 126, 255)
DARK_GRAY = (80, 86, 84, 255)
LIGHT_GRAY = (170, 176, 174, 255)

ICON_SIZES = (16, 32, 48, 64, 128, 256)


def create_tray_icon(progress: float = 0.0, paused: bool = False, size: int = 64) -> Image.Image:
    """Badge icon. ``progress`` is the share of today's sessions done (0-1)."""
    progress = min(1.0, max(0.0, progress))
    base, dark, light = (GRAY, DARK_GRAY, LIGHT_GRAY) if paused else (GREEN, DARK_GREEN, LIGHT_GREEN)

    img = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    s = size / 64
    w = max(1, int(s))
    cx = cy = size / 2
    r_outer = 29 * s
    ring_w = max(2, int(6 * s))
    r_face = r_outer - ring_w - w

    # Drop shadow
    draw.ellipse([cx - r_outer + w, cy - r_outer + 2 * w,
                  cx + r_outer + w, cy + r_outer + 2 * w], fill=SHADOW)

    # Ring track, then the completed arc from 12 o'clock clockwise
    box = [cx - r_outer, cy - r_outer, cx + r_outer, cy + r_outer]
    draw.ellipse(box, fill=TRACK)
    if progress > 0:
        draw.pieslice(box, -90, -90 + 360 * progress, fill=light if progress < 1 else base)

    # Face
    draw.ellipse([cx - r_face, cy - r_face, cx + r_face, cy + r_face], fill=base)

    # Upper-left highlight on the face
    for angle_deg in range(200, 300, 2):
        a = math.radians(angle_deg)
        r = r_face - 2 * w
        draw.point((cx + r * math.cos(a), cy + r * math.sin(a)), fill=light)

    # Pause glyph
    bar_w = 5 * s
    bar_h = 18 * s
    gap = 4 * s
    for x0 in (cx - gap / 2 - bar_w, cx + gap / 2):
        draw.rectangle([x0 + w, cy - bar_h / 2 + w, x0 + bar_w + w, cy + bar_h / 2 + w], fill=dark)
        draw.rectangle([x0, cy - bar_h / 2, x0 + bar_w, cy + bar_h / 2], fill=WHITE)

    return img


def generate_icon(directory: str = ".") -> list[str]:
    """Write icon.ico (all sizes) and icon.png (256px) into ``directory``."""
    images = [create_tray_icon(progress=0.75, size=s) for s in ICON_SIZES]
    ico = os.path.join(directory, "icon.ico")
    png = os.path.join(directory, "icon.png")
    # ICO: save largest first, append smaller ones
    images[-1].save(ico, format="ICO", append_images=images[:-1])
    images[-1].save(png, format="PNG")
    return [ico, png]
