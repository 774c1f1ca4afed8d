from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


DEFAULT_FACE_API_ENDPOINT = "https://westcentralus.api.cognitive.microsoft.com"
DEFAULT_SCRATCH_DIR = "public"

_ENV_FIELDS = {
    "FACE_API_KEY": "face_api_key",
    "FACE_API_ENDPOINT": "face_api_endpoint",
    "SKINTONE_SCRATCH_DIR": "scratch_dir",
    "SKINTONE_FETCH_TIMEOUT": "fetch_timeout_s",
    "SKINTONE_FACE_API_TIMEOUT": "face_api_timeout_s",
    "SKINTONE_CIRCULAR_HUE": "circular_hue",
}


class SkinToneSettings(BaseModel):
    """Runtime settings for a SkinToneFinder."""

    face_api_key: str = ""
    face_api_endpoint: str = DEFAULT_FACE_API_ENDPOINT
    scratch_dir: Path = Path(DEFAULT_SCRATCH_DIR)
    fetch_timeout_s: float = Field(default=30.0, gt=0)
    face_api_timeout_s: float = Field(default=30.0, gt=0)
    circular_hue: bool = False

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, **overrides: Any) -> "SkinToneSettings":
        """
        Build settings from environment variables (and a .env file if present).

        Keyword overrides win over the environment.
        """

        load_dotenv(env_file)
        values: Dict[str, Any] = {}
        for env_name, field_name in _ENV_FIELDS.items():
            raw = os.getenv(env_name)
            if raw is not None and raw != "":
                values[field_name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
