from __future__ import annotations

import numpy as np

from skintone_finder.color import to_hsl
from skintone_finder.drawing import draw_samples, hsl_to_bgr
from skintone_finder.types import Point, SamplePoints


def test_hsl_to_bgr_inverts_to_hsl():
    for rgb in [(200, 150, 120), (10, 200, 30), (255, 255, 255)]:
        b, g, r = hsl_to_bgr(to_hsl(rgb))
        assert max(abs(r - rgb[0]), abs(g - rgb[1]), abs(b - rgb[2])) <= 1


def test_draw_samples_marks_points_and_swatch():
    frame = np.zeros((200, 200, 3), dtype=np.uint8)
    pts = SamplePoints(forehead=Point(100, 60), right_cheek=Point(70, 130), left_cheek=Point(130.5, 130.5))
    hsl = to_hsl((200, 150, 120))

    out = draw_samples(frame, pts, [(1, 2, 3)] * 3, hsl, swatch_size=20)

    assert out is frame
    assert tuple(int(c) for c in frame[5, 5]) == hsl_to_bgr(hsl)
    # something was drawn around each point
    for p in pts:
        x, y = int(p.x), int(p.y)
        assert frame[y - 6 : y + 7, x - 6 : x + 7].any()


def test_points_at_the_frame_edge_are_drawn():
    frame = np.zeros((60, 60, 3), dtype=np.uint8)
    pts = SamplePoints(forehead=Point(58, 1), right_cheek=Point(1, 58), left_cheek=Point(58, 58))

    out = draw_samples(frame, pts, [(255, 255, 255)] * 3)

    assert out.shape == (60, 60, 3)
    # right cheek crosshair runs below its label box
    assert frame[57:60, 0:4].any()
