from __future__ import annotations

from .errors import MissingDataError, MissingLandmarkError
from .types import FaceDetectionResult, Point, SamplePoints
from .utils import midpoint, offset


# Offsets are a percentage of face height so the sample points scale with the face.
FOREHEAD_OFFSET_PERCENT = 12.0  # above the inner brows, below the hairline
CHEEK_OFFSET_PERCENT = 15.0  # below the lower eyelid

EYEBROW_LEFT_INNER = "eyebrowLeftInner"
EYEBROW_RIGHT_INNER = "eyebrowRightInner"
EYE_LEFT_BOTTOM = "eyeLeftBottom"
EYE_RIGHT_BOTTOM = "eyeRightBottom"


def face_height_fraction(percent: float, result: FaceDetectionResult) -> float:
    """Number of pixels that `percent` of the detected face height represents."""
    rect = result.face_rectangle
    if rect is None:
        raise MissingDataError("Detection result has no faceRectangle", key="faceRectangle")
    if rect.height is None:
        raise MissingDataError("faceRectangle has no height", key="faceRectangle.height")
    return (rect.height / 100.0) * percent


def landmark(result: FaceDetectionResult, key: str) -> Point:
    try:
        return result.face_landmarks[key]
    except KeyError:
        raise MissingLandmarkError(key) from None


def resolve_forehead(result: FaceDetectionResult) -> Point:
    """Midpoint of the inner eyebrows, lifted by 12% of face height."""
    left = landmark(result, EYEBROW_LEFT_INNER)
    right = landmark(result, EYEBROW_RIGHT_INNER)
    return offset(midpoint(left, right), dy=-face_height_fraction(FOREHEAD_OFFSET_PERCENT, result))


def resolve_cheek(eye_bottom: Point, result: FaceDetectionResult) -> Point:
    """Straight below an eye-bottom landmark by 15% of face height."""
    return offset(eye_bottom, dy=face_height_fraction(CHEEK_OFFSET_PERCENT, result))


def resolve_right_cheek(result: FaceDetectionResult) -> Point:
    return resolve_cheek(landmark(result, EYE_RIGHT_BOTTOM), result)


def resolve_left_cheek(result: FaceDetectionResult) -> Point:
    return resolve_cheek(landmark(result, EYE_LEFT_BOTTOM), result)


def resolve_sample_points(result: FaceDetectionResult) -> SamplePoints:
    # All three points resolve before any is returned, so a missing key never
    # leaves a caller holding a partial set.
    return SamplePoints(
        forehead=resolve_forehead(result),
        right_cheek=resolve_right_cheek(result),
        left_cheek=resolve_left_cheek(result),
    )
