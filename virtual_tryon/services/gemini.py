import logging
from typing import Any, Dict, List, Optional

import httpx

from ..core.config import Settings
from ..core.errors import ErrorKind, GenerationError
from ..core.http import make_httpx_client
from ..core.prompts import TRYON_PROMPT
from ..schemas.tryon import ImagePart

logger = logging.getLogger(__name__)


def classify_failure(detail: str, status_code: Optional[int] = None) -> ErrorKind:
    """Map a failed call to an error kind.

    Gemini reports a bad key as HTTP 400 with "API key not valid", so the
    credential check must run before the generic 400 check.
    """
    if "API key not valid" in detail or status_code in (401, 403):
        return ErrorKind.AUTH_ERROR
    if status_code == 429 or "429" in detail:
        return ErrorKind.RATE_LIMITED
    if status_code == 400 or "400" in detail:
        return ErrorKind.INVALID_REQUEST
    return ErrorKind.UNKNOWN


def build_payload(person: ImagePart, clothing: ImagePart) -> Dict[str, Any]:
    parts: List[Dict[str, Any]] = [
        person.to_request_part(),
        clothing.to_request_part(),
        {"text": TRYON_PROMPT},
    ]
    return {
        "contents": [{"role": "user", "parts": parts}],
        "generationConfig": {"responseModalities": ["IMAGE", "TEXT"]},
    }


def extract_inline_image(data: Dict[str, Any]) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    candidates = data.get("candidates") or []
    if not candidates:
        return None

    content = (candidates[0] or {}).get("content") or {}
    for part in (content.get("parts") or []):
        inline = (part or {}).get("inlineData")
        if inline and inline.get("data"):
            return inline["data"]
    return None


class GeminiClient:
    """One-shot try-on call against Gemini generateContent.

    Never retries; the caller decides whether to try again.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport

    @property
    def url(self) -> str:
        return f"{self.settings.gemini_base_url}/models/{self.settings.gemini_model}:generateContent"

    async def generate(self, person: ImagePart, clothing: ImagePart) -> Optional[str]:
        api_key = self.settings.gemini_api_key.strip()
        if not api_key:
            logger.warning("GEMINI_API_KEY is not configured")
            raise GenerationError.of(ErrorKind.AUTH_ERROR)

        payload = build_payload(person, clothing)
        timeout = httpx.Timeout(connect=30.0, read=self.settings.gemini_read_timeout, write=60.0, pool=60.0)

        try:
            async with make_httpx_client(timeout, self.settings.proxy_url, self.transport) as client:
                r = await client.post(
                    self.url,
                    params={"key": api_key},
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
        except httpx.HTTPError as e:
            logger.warning("gemini request failed: %s", e)
            raise GenerationError.of(classify_failure(str(e))) from e

        if r.status_code < 200 or r.status_code >= 300:
            body = (r.text or "")[:1500]
            logger.warning("gemini %s: %s", r.status_code, body)
            raise GenerationError.of(classify_failure(body, r.status_code))

        try:
            data = r.json()
        except ValueError as e:
            logger.warning("gemini returned non-JSON body: %s", (r.text or "")[:500])
            raise GenerationError.of(ErrorKind.UNKNOWN) from e

        image = extract_inline_image(data)
        if image is None:
            logger.warning("gemini returned no image: %s", str(data)[:2000])
        return image
