import base64
from io import BytesIO
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import UploadFile
from PIL import Image
from fastapi.datastructures import Headers

from virtual_tryon.core.config import Settings
from virtual_tryon.services.session import TryOnSession

MB = 1024 * 1024


def make_upload(data: bytes, mime: str, filename: str = "photo.jpg", with_size: bool = True) -> UploadFile:
    return UploadFile(
        file=BytesIO(data),
        size=len(data) if with_size else None,
        filename=filename,
        headers=Headers({"content-type": mime}),
    )


@pytest.fixture
def settings():
    return Settings(_env_file=None, gemini_api_key="test-key", api_txt_path="")


@pytest.fixture
def jpeg_2mb():
    return b"\xff\xd8\xff\xe0" + b"\x00" * (2 * MB - 4)


@pytest.fixture
def png_2mb():
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * (2 * MB - 8)


@pytest.fixture
def real_png_base64():
    """A decodable 4x4 PNG, base64-encoded the way the service returns it."""
    out = BytesIO()
    Image.new("RGB", (4, 4), "red").save(out, format="PNG")
    return base64.b64encode(out.getvalue()).decode("utf-8")


@pytest.fixture
def fake_client():
    client = MagicMock()
    client.generate = AsyncMock(return_value="AAAA")
    return client


@pytest.fixture
def session(settings, fake_client):
    return TryOnSession(settings, fake_client)
