from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path
from typing import Union

import httpx

from .errors import FetchError, ScratchSpaceError

logger = logging.getLogger(__name__)


def ensure_scratch_dir(path: Union[str, os.PathLike]) -> Path:
    """
    Ensure the scratch directory exists. Succeeds if it is already there.
    """

    p = Path(path)
    try:
        p.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ScratchSpaceError(f"Could not create scratch directory {p}: {e}") from e
    if not p.is_dir():
        raise ScratchSpaceError(f"Scratch location {p} exists but is not a directory")
    return p


def new_scratch_path(scratch_dir: Union[str, os.PathLike]) -> Path:
    return Path(scratch_dir) / uuid.uuid4().hex


async def download_image(client: httpx.AsyncClient, url: str, scratch_dir: Union[str, os.PathLike]) -> Path:
    """
    Stream `url` into a freshly named file under `scratch_dir`.

    The partial file is removed if the download fails.
    """

    dest = new_scratch_path(scratch_dir)
    try:
        async with client.stream("GET", url, follow_redirects=True) as resp:
            if resp.status_code >= 400:
                raise FetchError(
                    f"GET {url} returned HTTP {resp.status_code}",
                    url=url,
                    status_code=resp.status_code,
                )
            with open(dest, "wb") as f:
                async for chunk in resp.aiter_bytes():
                    f.write(chunk)
    except FetchError:
        _remove_partial(dest)
        raise
    except httpx.HTTPError as e:
        _remove_partial(dest)
        raise FetchError(f"Could not download {url}: {e}", url=url) from e
    except OSError as e:
        _remove_partial(dest)
        raise ScratchSpaceError(f"Could not write {dest}: {e}") from e
    except BaseException:
        # cancelled (stage timeout or caller) mid-stream
        _remove_partial(dest)
        raise

    logger.debug("Downloaded %s -> %s (%d bytes)", url, dest, dest.stat().st_size)
    return dest


def _remove_partial(path: Path) -> None:
    try:
        if path.exists():
            path.unlink()
    except OSError:
        logger.warning("Could not remove partial download %s", path)
