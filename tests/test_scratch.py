from __future__ import annotations

import asyncio

import httpx
import pytest

from skintone_finder.errors import FetchError, ScratchSpaceError
from skintone_finder.scratch import download_image, ensure_scratch_dir

from conftest import IMAGE_URL, StallingBody


def test_ensure_scratch_dir_is_idempotent(tmp_path):
    target = tmp_path / "a" / "b"
    assert ensure_scratch_dir(target) == target
    assert ensure_scratch_dir(target) == target
    assert target.is_dir()


def test_ensure_scratch_dir_on_a_file(tmp_path):
    f = tmp_path / "taken"
    f.write_text("x")
    with pytest.raises(ScratchSpaceError):
        ensure_scratch_dir(f)


def _download(handler, scratch_dir):
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await download_image(client, IMAGE_URL, scratch_dir)

    return asyncio.run(go())


def test_download_writes_unique_files(tmp_path):
    handler = lambda r: httpx.Response(200, content=b"image-bytes")  # noqa: E731
    p1 = _download(handler, tmp_path)
    p2 = _download(handler, tmp_path)
    assert p1 != p2
    assert p1.parent == tmp_path
    assert p1.read_bytes() == b"image-bytes"


def test_download_follows_redirects(tmp_path):
    def handler(request):
        if str(request.url) == IMAGE_URL:
            return httpx.Response(302, headers={"Location": "https://cdn.example.com/real.png"})
        return httpx.Response(200, content=b"moved")

    assert _download(handler, tmp_path).read_bytes() == b"moved"


def test_http_error_leaves_no_partial_file(tmp_path):
    with pytest.raises(FetchError) as exc:
        _download(lambda r: httpx.Response(404, text="gone"), tmp_path)
    assert exc.value.status_code == 404
    assert exc.value.url == IMAGE_URL
    assert list(tmp_path.iterdir()) == []


def test_transport_error_is_fetch_error(tmp_path):
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(FetchError):
        _download(handler, tmp_path)
    assert list(tmp_path.iterdir()) == []


def test_cancelled_download_leaves_no_partial_file(tmp_path):
    handler = lambda r: httpx.Response(200, stream=StallingBody())  # noqa: E731

    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            await asyncio.wait_for(download_image(client, IMAGE_URL, tmp_path), 0.2)

    with pytest.raises(asyncio.TimeoutError):
        asyncio.run(go())
    assert list(tmp_path.iterdir()) == []
