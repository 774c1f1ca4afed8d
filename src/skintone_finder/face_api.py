"""
Face detection capability and the Azure Face API client that provides it.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Protocol, Sequence

import httpx

from .config import DEFAULT_FACE_API_ENDPOINT
from .errors import FaceServiceError, MissingDataError, NoFaceDetectedError
from .types import FaceDetectionResult
from .utils import redact_secret

logger = logging.getLogger(__name__)

DETECT_PATH = "/face/v1.0/detect"
DETECT_PARAMS = {"returnFaceId": "true", "returnFaceLandmarks": "true"}

FaceSelector = Callable[[Sequence[FaceDetectionResult]], FaceDetectionResult]


class FaceDetector(Protocol):
    """Anything that can turn a public image URL into detected faces."""

    async def detect_faces(self, image_url: str) -> List[FaceDetectionResult]:
        ...


def first_face(faces: Sequence[FaceDetectionResult]) -> FaceDetectionResult:
    """Selection policy: use the first face the service reports."""
    if not faces:
        raise NoFaceDetectedError("Face detection returned no faces")
    return faces[0]


class AzureFaceClient:
    """
    Client for the Azure Cognitive Services Face `detect` endpoint.

    The service fetches the image itself, so it is given the original public URL.
    """

    def __init__(
        self,
        api_key: str,
        endpoint: str = DEFAULT_FACE_API_ENDPOINT,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout_s: float = 30.0,
    ) -> None:
        self.api_key = api_key
        self.endpoint = endpoint.rstrip("/")
        self.timeout_s = timeout_s
        self._client = client

    @property
    def detect_url(self) -> str:
        return self.endpoint + DETECT_PATH

    async def detect_faces(self, image_url: str) -> List[FaceDetectionResult]:
        if self._client is not None:
            return await self._detect(self._client, image_url)
        async with httpx.AsyncClient(timeout=self.timeout_s) as client:
            return await self._detect(client, image_url)

    async def _detect(self, client: httpx.AsyncClient, image_url: str) -> List[FaceDetectionResult]:
        headers = {
            "Content-Type": "application/json",
            "Ocp-Apim-Subscription-Key": self.api_key,
        }
        logger.debug("POST %s (key=%s) url=%s", self.detect_url, redact_secret(self.api_key), image_url)
        try:
            resp = await client.post(
                self.detect_url,
                params=DETECT_PARAMS,
                headers=headers,
                json={"url": image_url},
                timeout=self.timeout_s,
            )
        except httpx.HTTPError as e:
            raise FaceServiceError(f"Face API request failed: {e}") from e

        try:
            payload = resp.json()
        except ValueError as e:
            raise FaceServiceError(
                f"Face API returned non-JSON body (HTTP {resp.status_code})",
                status_code=resp.status_code,
            ) from e

        if resp.status_code >= 400:
            code, message = _error_details(payload)
            raise FaceServiceError(
                f"Face API error HTTP {resp.status_code}: {code or 'unknown'}: {message or resp.reason_phrase}",
                status_code=resp.status_code,
                code=code,
            )

        if not isinstance(payload, list):
            raise FaceServiceError(
                "Face API response is not a list of faces",
                status_code=resp.status_code,
            )

        try:
            faces = [FaceDetectionResult.from_dict(f) for f in payload]
        except MissingDataError as e:
            raise FaceServiceError(f"Face API returned a malformed face: {e}", status_code=resp.status_code) from e

        logger.debug("Face API returned %d face(s)", len(faces))
        return faces


def _error_details(payload: Any):
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        err = payload["error"]
        return err.get("code"), err.get("message")
    return None, None
