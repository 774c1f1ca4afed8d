from __future__ import annotations

import asyncio
import dataclasses
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional, Tuple

import httpx

from .color import average_hsl, to_hsl
from .config import SkinToneSettings
from .errors import FaceServiceError, FetchError, NoFaceDetectedError, SkinToneError
from .face_api import AzureFaceClient, FaceDetector, FaceSelector, first_face
from .geometry import resolve_sample_points
from .sampler import decode_image_file, sample_points
from .scratch import download_image, ensure_scratch_dir
from .types import (
    FaceDetectionResult,
    HSLColor,
    PipelineStage,
    RGBColor,
    SamplePoints,
    SkinToneEstimate,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunContext:
    """Everything a single run owns. Each stage returns a new context."""

    image_url: str
    stage: PipelineStage = PipelineStage.INIT
    scratch_dir: Optional[Path] = None
    image_path: Optional[Path] = None
    image: Any = None  # BGR numpy array once decoded
    face: Optional[FaceDetectionResult] = None
    points: Optional[SamplePoints] = None
    rgb_samples: Optional[List[RGBColor]] = None
    hsl_samples: Optional[List[HSLColor]] = None
    hsl: Optional[HSLColor] = None

    def advance(self, stage: PipelineStage, **changes: Any) -> "RunContext":
        return dataclasses.replace(self, stage=stage, **changes)


@dataclass(frozen=True)
class _Deps:
    settings: SkinToneSettings
    client: httpx.AsyncClient
    detector: FaceDetector
    face_selector: FaceSelector


def _expect(ctx: RunContext, stage: PipelineStage) -> None:
    if ctx.stage is not stage:
        raise RuntimeError(f"Pipeline stage expected {stage.value}, context is at {ctx.stage.value}")


async def prepare_scratch(ctx: RunContext, deps: _Deps) -> RunContext:
    _expect(ctx, PipelineStage.INIT)
    scratch_dir = ensure_scratch_dir(deps.settings.scratch_dir)
    return ctx.advance(PipelineStage.SCRATCH_SPACE_READY, scratch_dir=scratch_dir)


async def fetch_image(ctx: RunContext, deps: _Deps) -> RunContext:
    _expect(ctx, PipelineStage.SCRATCH_SPACE_READY)
    timeout = deps.settings.fetch_timeout_s
    try:
        path = await asyncio.wait_for(download_image(deps.client, ctx.image_url, ctx.scratch_dir), timeout)
    except asyncio.TimeoutError as e:
        raise FetchError(f"Downloading {ctx.image_url} timed out after {timeout}s", url=ctx.image_url) from e
    return ctx.advance(PipelineStage.IMAGE_FETCHED, image_path=path)


async def decode_image(ctx: RunContext, deps: _Deps) -> RunContext:
    _expect(ctx, PipelineStage.IMAGE_FETCHED)
    image = await asyncio.to_thread(decode_image_file, ctx.image_path)
    return ctx.advance(PipelineStage.IMAGE_DECODED, image=image)


async def fetch_face_data(ctx: RunContext, deps: _Deps) -> RunContext:
    _expect(ctx, PipelineStage.IMAGE_DECODED)
    timeout = deps.settings.face_api_timeout_s
    try:
        # The service fetches the original URL, not our local copy.
        faces = await asyncio.wait_for(deps.detector.detect_faces(ctx.image_url), timeout)
    except asyncio.TimeoutError as e:
        raise FaceServiceError(f"Face detection timed out after {timeout}s") from e
    if not faces:
        raise NoFaceDetectedError(f"No face detected in {ctx.image_url}")
    face = deps.face_selector(faces)
    return ctx.advance(PipelineStage.FACE_DATA_FETCHED, face=face)


async def resolve_points(ctx: RunContext, deps: _Deps) -> RunContext:
    _expect(ctx, PipelineStage.FACE_DATA_FETCHED)
    return ctx.advance(PipelineStage.POINTS_RESOLVED, points=resolve_sample_points(ctx.face))


async def sample_pixels(ctx: RunContext, deps: _Deps) -> RunContext:
    _expect(ctx, PipelineStage.POINTS_RESOLVED)
    if ctx.image is None:
        raise RuntimeError("Cannot sample before the image is decoded")
    return ctx.advance(PipelineStage.PIXELS_SAMPLED, rgb_samples=sample_points(ctx.image, ctx.points))


async def aggregate(ctx: RunContext, deps: _Deps) -> RunContext:
    _expect(ctx, PipelineStage.PIXELS_SAMPLED)
    hsl_samples = [to_hsl(rgb) for rgb in ctx.rgb_samples]
    hsl = average_hsl(hsl_samples, circular_hue=deps.settings.circular_hue)
    return ctx.advance(PipelineStage.DONE, hsl_samples=hsl_samples, hsl=hsl)


Stage = Callable[[RunContext, _Deps], Awaitable[RunContext]]

# Each entry: (stage being attempted, step that reaches it)
STAGES: List[Tuple[PipelineStage, Stage]] = [
    (PipelineStage.SCRATCH_SPACE_READY, prepare_scratch),
    (PipelineStage.IMAGE_FETCHED, fetch_image),
    (PipelineStage.IMAGE_DECODED, decode_image),
    (PipelineStage.FACE_DATA_FETCHED, fetch_face_data),
    (PipelineStage.POINTS_RESOLVED, resolve_points),
    (PipelineStage.PIXELS_SAMPLED, sample_pixels),
    (PipelineStage.DONE, aggregate),
]


class SkinToneFinder:
    """
    Estimate a skin tone (HSL) for the face in a publicly reachable image.

    The finder only holds configuration; every call runs with its own context,
    so concurrent calls on one instance are independent.
    """

    def __init__(
        self,
        settings: Optional[SkinToneSettings] = None,
        *,
        detector: Optional[FaceDetector] = None,
        face_selector: FaceSelector = first_face,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings or SkinToneSettings()
        self._detector = detector
        self.face_selector = face_selector
        self._transport = transport

    async def run(self, image_url: str) -> RunContext:
        """Run every stage and return the final context. Raises the first SkinToneError."""
        ctx = RunContext(image_url=image_url)
        async with httpx.AsyncClient(transport=self._transport, timeout=self.settings.fetch_timeout_s) as client:
            detector = self._detector or AzureFaceClient(
                self.settings.face_api_key,
                self.settings.face_api_endpoint,
                client=client,
                timeout_s=self.settings.face_api_timeout_s,
            )
            deps = _Deps(settings=self.settings, client=client, detector=detector, face_selector=self.face_selector)

            for target, step in STAGES:
                logger.debug("%s: %s -> %s", image_url, ctx.stage.value, target.value)
                try:
                    ctx = await step(ctx, deps)
                except SkinToneError as e:
                    if e.stage is None:
                        e.stage = target
                    logger.warning("Skin tone run for %s failed: %s", image_url, e)
                    raise

        logger.info("Skin tone for %s: hsl=%s", image_url, ctx.hsl)
        return ctx

    async def estimate(self, image_url: str) -> SkinToneEstimate:
        ctx = await self.run(image_url)
        return SkinToneEstimate(
            hsl=ctx.hsl,
            points=ctx.points,
            rgb_samples=list(ctx.rgb_samples),
            hsl_samples=list(ctx.hsl_samples),
            image_path=ctx.image_path,
            face=ctx.face,
        )

    async def find_average_color_sample(self, image_url: str) -> HSLColor:
        ctx = await self.run(image_url)
        return ctx.hsl


async def find_skin_tone(credential: str, image_url: str, **settings_overrides: Any) -> HSLColor:
    """
    Public entry point: the averaged HSL skin tone of the face in `image_url`.

    Raises a SkinToneError subclass naming the failed stage.
    """

    settings = SkinToneSettings(face_api_key=credential, **settings_overrides)
    return await SkinToneFinder(settings).find_average_color_sample(image_url)


def find_skin_tone_sync(credential: str, image_url: str, **settings_overrides: Any) -> HSLColor:
    return asyncio.run(find_skin_tone(credential, image_url, **settings_overrides))
