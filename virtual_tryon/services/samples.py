import logging
import time
from io import BytesIO
from typing import List, Optional
from urllib.parse import urlparse

import httpx
from fastapi import UploadFile
from fastapi.datastructures import Headers

from ..core.config import Settings
from ..core.errors import FETCH_ERROR_MESSAGE, ErrorKind, UploadError
from ..core.http import make_httpx_client
from ..core.prompts import SAMPLE_CLOTHING, SAMPLE_PEOPLE
from ..schemas.tryon import Slot

logger = logging.getLogger(__name__)


def sample_urls(slot: Slot) -> List[str]:
    return SAMPLE_PEOPLE if slot is Slot.PERSON else SAMPLE_CLOTHING


def sample_url(slot: Slot, index: int) -> str:
    urls = sample_urls(slot)
    if index < 0 or index >= len(urls):
        raise IndexError(f"no {slot.value} sample #{index}")
    return urls[index]


async def fetch_sample(
    url: str,
    slot: Slot,
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> UploadFile:
    """Download a sample picture and wrap it like a user upload.

    The result still has to go through validation and encoding.
    """
    parsed = urlparse(url)
    headers = {
        "Accept": "image/avif,image/webp,image/apng,image/*,*/*;q=0.8",
        "Referer": f"{parsed.scheme}://{parsed.netloc}/",
    }

    timeout = httpx.Timeout(settings.sample_timeout)
    try:
        async with make_httpx_client(timeout, settings.proxy_url, transport) as client:
            r = await client.get(url, headers=headers, follow_redirects=True)
            r.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning("sample %s failed: %s", url, e)
        raise UploadError(ErrorKind.FETCH_ERROR, FETCH_ERROR_MESSAGE) from e

    content = r.content
    mime = (r.headers.get("content-type") or "image/jpeg").split(";")[0].strip()
    filename = f"sample-{slot.value}-{int(time.time() * 1000)}.jpg"

    return UploadFile(
        file=BytesIO(content),
        size=len(content),
        filename=filename,
        headers=Headers({"content-type": mime}),
    )
