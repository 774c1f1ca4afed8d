from __future__ import annotations

import os
from typing import Iterable, List, Union

import cv2
import numpy as np

from .errors import DecodeError, OutOfBoundsError
from .types import Point, RGBColor
from .utils import floor_pixel


def decode_image_bytes(data: bytes, *, source: str = "<bytes>"):
    """
    Decode encoded image bytes (PNG, JPEG, ...) into a **BGR** uint8 buffer (OpenCV default).
    """

    if not data:
        raise DecodeError(f"Image data is empty: {source}", path=source)
    buf = np.frombuffer(data, dtype=np.uint8)
    try:
        image = cv2.imdecode(buf, cv2.IMREAD_COLOR)
    except cv2.error as e:
        raise DecodeError(f"Could not decode image: {source} ({e})", path=source) from e
    if image is None:
        raise DecodeError(f"Malformed or unsupported image data: {source}", path=source)
    return image


def decode_image_file(path: Union[str, os.PathLike]):
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise DecodeError(f"Could not read image file: {path} ({e})", path=str(path)) from e
    return decode_image_bytes(data, source=str(path))


def sample_pixel(image, point: Point) -> RGBColor:
    """
    Read the RGB color of the pixel that contains `point`.

    Fractional coordinates are floored to the pixel they fall inside. Points
    outside the image raise OutOfBoundsError; nothing is clamped.
    Accepts grayscale, BGR and BGRA buffers. The buffer is never written.
    """

    h, w = image.shape[:2]
    x, y = floor_pixel(point)
    if not (0 <= x < w and 0 <= y < h):
        raise OutOfBoundsError(point, (w, h))

    px = image[y, x]
    if image.ndim == 2:
        v = int(px)
        return (v, v, v)
    b, g, r = (int(c) for c in px[:3])
    return (r, g, b)


def sample_points(image, points: Iterable[Point]) -> List[RGBColor]:
    return [sample_pixel(image, p) for p in points]
