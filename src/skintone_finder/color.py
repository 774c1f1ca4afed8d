from __future__ import annotations

import math
from typing import Sequence

import cv2
import numpy as np

from .errors import EmptyInputError
from .types import HSLColor, RGBColor


def to_hsl(rgb: RGBColor) -> HSLColor:
    """
    Convert an 8-bit RGB triple to HSL.

    Returns (hue in [0, 360), saturation in [0, 100], lightness in [0, 100]).
    OpenCV's float HLS transform is the standard RGB->HSL formula; channels come
    back as H, L, S and are reordered here.
    """

    if len(rgb) != 3:
        raise ValueError(f"Expected 3 RGB channels, got {len(rgb)}")
    for c in rgb:
        if not (0 <= c <= 255):
            raise ValueError(f"RGB channel out of range 0..255: {c}")

    px = np.array([[rgb]], dtype=np.float32) / 255.0
    h, l, s = cv2.cvtColor(px, cv2.COLOR_RGB2HLS)[0, 0]
    hue = float(h) % 360.0
    return (hue, float(s) * 100.0, float(l) * 100.0)


def average_hsl(colors: Sequence[HSLColor], circular_hue: bool = False) -> HSLColor:
    """
    Average HSL colors channel by channel, unweighted.

    Hue is averaged arithmetically by default, which is wrong across the 0/360
    wrap (350 and 10 average to 180). Pass `circular_hue=True` for the circular
    mean; saturation and lightness are unaffected by the flag.
    """

    if len(colors) == 0:
        raise EmptyInputError("Cannot average an empty list of HSL colors")

    arr = np.asarray(colors, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(f"Expected a sequence of 3-channel HSL colors, got shape {arr.shape}")

    hue, sat, lit = (float(v) for v in arr.mean(axis=0))
    if circular_hue:
        hue = circular_mean_degrees(arr[:, 0])
    return (hue, sat, lit)


def circular_mean_degrees(angles: Sequence[float]) -> float:
    rad = np.radians(np.asarray(angles, dtype=np.float64))
    mean = math.degrees(math.atan2(float(np.sin(rad).sum()), float(np.cos(rad).sum())))
    return mean % 360.0
