from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Tuple

if TYPE_CHECKING:  # pragma: no cover
    from .types import PipelineStage, Point


class SkinToneError(Exception):
    """
    Base class for every failure a skin tone run can report.

    `stage` is the pipeline stage that was being attempted when the error was
    raised. Pure helpers leave it unset; the pipeline fills it in on the way out.
    """

    def __init__(self, message: str, *, stage: Optional["PipelineStage"] = None) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage

    def __str__(self) -> str:
        if self.stage is None:
            return self.message
        return f"[{self.stage.value}] {self.message}"


class ScratchSpaceError(SkinToneError):
    """Scratch directory could not be created or written."""


class FetchError(SkinToneError):
    """Source image could not be downloaded."""

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        stage: Optional["PipelineStage"] = None,
    ) -> None:
        super().__init__(message, stage=stage)
        self.url = url
        self.status_code = status_code


class DecodeError(SkinToneError):
    """Fetched bytes are not a decodable image."""

    def __init__(self, message: str, *, path: Optional[str] = None, stage: Optional["PipelineStage"] = None) -> None:
        super().__init__(message, stage=stage)
        self.path = path


class FaceServiceError(SkinToneError):
    """Face detection service failed (transport, auth, quota or bad payload)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        stage: Optional["PipelineStage"] = None,
    ) -> None:
        super().__init__(message, stage=stage)
        self.status_code = status_code
        self.code = code


class NoFaceDetectedError(FaceServiceError):
    """Face detection service answered with an empty face list."""


class MissingDataError(SkinToneError):
    """A field required from the face detection result is absent."""

    def __init__(self, message: str, *, key: Optional[str] = None, stage: Optional["PipelineStage"] = None) -> None:
        super().__init__(message, stage=stage)
        self.key = key


class MissingLandmarkError(MissingDataError):
    def __init__(self, key: str, *, stage: Optional["PipelineStage"] = None) -> None:
        super().__init__(f"Face landmark '{key}' is missing from the detection result", key=key, stage=stage)


class OutOfBoundsError(SkinToneError):
    """Sample point falls outside the decoded image."""

    def __init__(
        self,
        point: "Point",
        size: Tuple[int, int],
        *,
        stage: Optional["PipelineStage"] = None,
    ) -> None:
        w, h = size
        super().__init__(
            f"Sample point ({point.x}, {point.y}) is outside the {w}x{h} image",
            stage=stage,
        )
        self.point = point
        self.size = size


class EmptyInputError(SkinToneError, ValueError):
    """Aggregation was asked to average zero colors."""
