from __future__ import annotations

import asyncio
from typing import Any, Dict, List

import cv2
import httpx
import numpy as np
import pytest

from skintone_finder.config import SkinToneSettings
from skintone_finder.types import FaceDetectionResult

IMAGE_URL = "https://images.example.com/portrait.png"
FACE_ENDPOINT = "https://face.example.com"
DETECT_URL = FACE_ENDPOINT + "/face/v1.0/detect"

# Sample locations implied by the face below (height 200):
#   forehead    = (120, 80 - 24)  = (120, 56)
#   right cheek = (90, 110 + 30)  = (90, 140)
#   left cheek  = (150, 110 + 30) = (150, 140)
FOREHEAD_PX = (120, 56)
RIGHT_CHEEK_PX = (90, 140)
LEFT_CHEEK_PX = (150, 140)


def face_json() -> Dict[str, Any]:
    return {
        "faceId": "c5c24a82-6845-4031-9d5d-978df9175426",
        "faceRectangle": {"left": 60, "top": 20, "width": 180, "height": 200},
        "faceLandmarks": {
            "eyebrowLeftInner": {"x": 100.0, "y": 80.0},
            "eyebrowRightInner": {"x": 140.0, "y": 80.0},
            "eyeLeftBottom": {"x": 150.0, "y": 110.0},
            "eyeRightBottom": {"x": 90.0, "y": 110.0},
            "noseTip": {"x": 120.0, "y": 130.0},
            "mouthLeft": {"x": 100.0, "y": 170.0},
        },
    }


@pytest.fixture
def face_dict() -> Dict[str, Any]:
    return face_json()


@pytest.fixture
def face(face_dict) -> FaceDetectionResult:
    return FaceDetectionResult.from_dict(face_dict)


def paint_rgb(image_bgr: np.ndarray, xy, rgb) -> None:
    x, y = xy
    r, g, b = rgb
    image_bgr[y, x] = (b, g, r)


@pytest.fixture
def portrait_bgr() -> np.ndarray:
    img = np.zeros((240, 240, 3), dtype=np.uint8)
    paint_rgb(img, FOREHEAD_PX, (200, 150, 120))
    paint_rgb(img, LEFT_CHEEK_PX, (190, 140, 110))
    paint_rgb(img, RIGHT_CHEEK_PX, (210, 160, 130))
    return img


def encode_png(image_bgr: np.ndarray) -> bytes:
    ok, buf = cv2.imencode(".png", image_bgr)
    assert ok
    return buf.tobytes()


class StallingBody(httpx.AsyncByteStream):
    """Response body that sends one chunk, then hangs."""

    async def __aiter__(self):
        yield b"first-chunk"
        await asyncio.sleep(5)
        yield b"never-sent"


class FakeServices:
    """httpx MockTransport handler that plays both the image host and the face API."""

    def __init__(self, image_bytes: bytes, faces: Any, *, image_status: int = 200, face_status: int = 200):
        self.image_bytes = image_bytes
        self.faces = faces
        self.image_status = image_status
        self.face_status = face_status
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "GET" and str(request.url) == IMAGE_URL:
            return httpx.Response(self.image_status, content=self.image_bytes, headers={"Content-Type": "image/png"})
        if request.method == "POST" and request.url.path == "/face/v1.0/detect":
            return httpx.Response(self.face_status, json=self.faces)
        return httpx.Response(404, text="not found")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def settings(tmp_path) -> SkinToneSettings:
    return SkinToneSettings(
        face_api_key="test-subscription-key",
        face_api_endpoint=FACE_ENDPOINT,
        scratch_dir=tmp_path / "scratch",
        fetch_timeout_s=5.0,
        face_api_timeout_s=5.0,
    )
