from .color import average_hsl, to_hsl
from .config import SkinToneSettings
from .errors import (
    DecodeError,
    EmptyInputError,
    FaceServiceError,
    FetchError,
    MissingDataError,
    MissingLandmarkError,
    NoFaceDetectedError,
    OutOfBoundsError,
    ScratchSpaceError,
    SkinToneError,
)
from .face_api import AzureFaceClient, FaceDetector, first_face
from .geometry import face_height_fraction, resolve_cheek, resolve_forehead, resolve_sample_points
from .pipeline import RunContext, SkinToneFinder, find_skin_tone, find_skin_tone_sync
from .sampler import sample_pixel
from .types import FaceDetectionResult, FaceRectangle, PipelineStage, Point, SamplePoints, SkinToneEstimate

__all__ = [
    "SkinToneFinder",
    "SkinToneSettings",
    "find_skin_tone",
    "find_skin_tone_sync",
    "RunContext",
    "AzureFaceClient",
    "FaceDetector",
    "first_face",
    "face_height_fraction",
    "resolve_forehead",
    "resolve_cheek",
    "resolve_sample_points",
    "sample_pixel",
    "to_hsl",
    "average_hsl",
    "Point",
    "FaceRectangle",
    "FaceDetectionResult",
    "SamplePoints",
    "SkinToneEstimate",
    "PipelineStage",
    "SkinToneError",
    "ScratchSpaceError",
    "FetchError",
    "DecodeError",
    "FaceServiceError",
    "NoFaceDetectedError",
    "MissingDataError",
    "MissingLandmarkError",
    "OutOfBoundsError",
    "EmptyInputError",
]
