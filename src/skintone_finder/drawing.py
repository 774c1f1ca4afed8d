from __future__ import annotations

from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from .types import HSLColor, RGBColor, SamplePoints
from .utils import floor_pixel


_FONT = cv2.FONT_HERSHEY_SIMPLEX
_FONT_SCALE = 0.4


def _mark_sample(frame, pt: Tuple[int, int], radius: int = 5) -> None:
    # ring plus crosshair so the sampled pixel itself stays visible
    cv2.circle(frame, pt, radius, (0, 0, 255), 1, lineType=cv2.LINE_AA)
    cv2.drawMarker(frame, pt, (0, 255, 255), cv2.MARKER_CROSS, radius * 2, 1)


def _label(frame, text: str, org: Tuple[int, int]) -> None:
    """Text on a filled black box, clipped to stay inside the frame."""
    (tw, th), base = cv2.getTextSize(text, _FONT, _FONT_SCALE, 1)
    h, w = frame.shape[:2]
    x = max(0, min(org[0], w - tw - 2))
    y = max(th + 2, min(org[1], h - base - 2))
    cv2.rectangle(frame, (x - 1, y - th - 2), (x + tw + 1, y + base), (0, 0, 0), -1)
    cv2.putText(frame, text, (x, y), _FONT, _FONT_SCALE, (255, 255, 255), 1, cv2.LINE_AA)


def hsl_to_bgr(hsl: HSLColor) -> Tuple[int, int, int]:
    h, s, l = hsl
    px = np.array([[[h, l / 100.0, s / 100.0]]], dtype=np.float32)
    b, g, r = cv2.cvtColor(px, cv2.COLOR_HLS2BGR)[0, 0]
    return (int(round(b * 255)), int(round(g * 255)), int(round(r * 255)))


def draw_samples(
    frame_bgr,
    points: SamplePoints,
    rgb_samples: Optional[Sequence[RGBColor]] = None,
    hsl: Optional[HSLColor] = None,
    swatch_size: int = 40,
):
    """
    Annotate a BGR frame in place with the sample points and, optionally, a swatch
    of the averaged color in the top-left corner.
    """

    for i, (name, p) in enumerate(zip(points.names(), points)):
        pt = floor_pixel(p)
        _mark_sample(frame_bgr, pt)
        label = name
        if rgb_samples is not None and i < len(rgb_samples):
            label = f"{name} {tuple(rgb_samples[i])}"
        _label(frame_bgr, label, (pt[0] + 6, pt[1] - 6))

    if hsl is not None:
        h, w = frame_bgr.shape[:2]
        size = max(1, min(swatch_size, h, w))
        frame_bgr[0:size, 0:size] = hsl_to_bgr(hsl)
        _label(frame_bgr, "hsl(%.0f, %.0f%%, %.0f%%)" % hsl, (4, min(h - 4, size + 16)))

    return frame_bgr
