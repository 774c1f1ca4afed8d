from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from numbers import Real
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from .errors import MissingDataError


RGBColor = Tuple[int, int, int]  # 0..255 per channel
HSLColor = Tuple[float, float, float]  # hue [0, 360), saturation/lightness [0, 100]


class PipelineStage(str, Enum):
    """Linear states of a single skin tone run."""

    INIT = "init"
    SCRATCH_SPACE_READY = "scratch_space_ready"
    IMAGE_FETCHED = "image_fetched"
    IMAGE_DECODED = "image_decoded"
    FACE_DATA_FETCHED = "face_data_fetched"
    POINTS_RESOLVED = "points_resolved"
    PIXELS_SAMPLED = "pixels_sampled"
    DONE = "done"


@dataclass(frozen=True)
class Point:
    """Pixel coordinates in the source image (origin top-left, y down). May be sub-pixel."""

    x: float
    y: float

    @classmethod
    def from_dict(cls, key: str, raw: Any) -> "Point":
        if not isinstance(raw, Mapping):
            raise MissingDataError(f"Landmark '{key}' is not an object with x/y", key=key)
        x = raw.get("x")
        y = raw.get("y")
        if not _is_number(x) or not _is_number(y):
            raise MissingDataError(f"Landmark '{key}' is missing numeric x/y coordinates", key=key)
        return cls(x=float(x), y=float(y))


@dataclass(frozen=True)
class FaceRectangle:
    """Bounding box of a detected face. Only `height` feeds the geometry."""

    left: Optional[float] = None
    top: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "FaceRectangle":
        def num(name: str) -> Optional[float]:
            v = raw.get(name)
            return float(v) if _is_number(v) else None

        return cls(left=num("left"), top=num("top"), width=num("width"), height=num("height"))


@dataclass(frozen=True)
class FaceDetectionResult:
    """One face as reported by the face detection service."""

    face_rectangle: Optional[FaceRectangle]
    face_landmarks: Mapping[str, Point] = field(default_factory=dict)
    face_id: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "FaceDetectionResult":
        """
        Parse one element of the service's JSON response.

        Unknown keys are ignored. Landmark entries must carry numeric x/y.
        """

        if not isinstance(raw, Mapping):
            raise MissingDataError("Face entry is not a JSON object")

        rect_raw = raw.get("faceRectangle")
        rect = FaceRectangle.from_dict(rect_raw) if isinstance(rect_raw, Mapping) else None

        lms_raw = raw.get("faceLandmarks") or {}
        if not isinstance(lms_raw, Mapping):
            raise MissingDataError("faceLandmarks is not a JSON object", key="faceLandmarks")
        landmarks: Dict[str, Point] = {str(k): Point.from_dict(str(k), v) for k, v in lms_raw.items()}

        face_id = raw.get("faceId")
        return cls(
            face_rectangle=rect,
            face_landmarks=landmarks,
            face_id=str(face_id) if face_id is not None else None,
        )


@dataclass(frozen=True)
class SamplePoints:
    """The three facial sample points, iterated as forehead, right cheek, left cheek."""

    forehead: Point
    right_cheek: Point
    left_cheek: Point

    def __iter__(self) -> Iterator[Point]:
        return iter((self.forehead, self.right_cheek, self.left_cheek))

    def __len__(self) -> int:
        return 3

    def names(self) -> List[str]:
        return ["forehead", "right_cheek", "left_cheek"]


@dataclass(frozen=True)
class SkinToneEstimate:
    """Result of a successful run together with the trace that produced it."""

    hsl: HSLColor
    points: SamplePoints
    rgb_samples: List[RGBColor]
    hsl_samples: List[HSLColor]
    image_path: Optional[Path]
    face: FaceDetectionResult


def _is_number(v: Any) -> bool:
    # JSON from the service may carry Infinity or NaN; those are not coordinates.
    return isinstance(v, Real) and not isinstance(v, bool) and math.isfinite(v)
