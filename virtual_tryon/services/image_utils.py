import base64
import binascii
import logging
import os
from io import BytesIO
from typing import Optional

from fastapi import HTTPException, UploadFile
from PIL import Image, ImageOps, UnidentifiedImageError

from ..core.errors import (
    READ_ERROR_MESSAGE,
    UNSUPPORTED_TYPE_MESSAGE,
    ErrorKind,
    UploadError,
    too_large_message,
)
from ..schemas.tryon import ImagePart

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = ("image/jpeg", "image/png", "image/webp")


def check_upload(content_type: Optional[str], size: int, max_bytes: int) -> None:
    """Reject files the generation service should never see.

    Size goes first, so an oversized file is TOO_LARGE whatever its type.
    """
    if size > max_bytes:
        max_mb = max_bytes // (1024 * 1024)
        raise UploadError(ErrorKind.TOO_LARGE, too_large_message(max_mb))
    if content_type not in ALLOWED_MIME_TYPES:
        raise UploadError(ErrorKind.UNSUPPORTED_TYPE, UNSUPPORTED_TYPE_MESSAGE)


def declared_size(file: UploadFile) -> int:
    if file.size is not None:
        return file.size
    # UploadFile built by hand may lack a size; measure the spooled file without consuming it
    pos = file.file.tell()
    file.file.seek(0, os.SEEK_END)
    size = file.file.tell()
    file.file.seek(pos)
    return size


async def encode_image_part(file: UploadFile) -> ImagePart:
    try:
        await file.seek(0)
        raw = await file.read()
    except Exception as e:
        logger.warning("Cannot read upload %r: %s", file.filename, e)
        raise UploadError(ErrorKind.READ_ERROR, READ_ERROR_MESSAGE) from e

    b64 = base64.b64encode(raw).decode("utf-8")
    return ImagePart(mime_type=file.content_type or "", data=b64)


def to_data_url(mime_type: str, b64: str) -> str:
    return f"data:{mime_type};base64,{b64}"


def open_image(image_bytes: bytes) -> Image.Image:
    try:
        img = Image.open(BytesIO(image_bytes))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise HTTPException(502, f"Cannot decode generated image: {e}")

    img = ImageOps.exif_transpose(img)

    if img.mode != "RGB":
        img = img.convert("RGB")
    return img


def encode_jpeg(img: Image.Image, quality: int = 92) -> bytes:
    out = BytesIO()
    img.save(out, format="JPEG", quality=quality, optimize=True)
    return out.getvalue()


def result_to_jpeg(b64: str) -> bytes:
    """The service may answer with PNG; downloads are always real JPEG files."""
    try:
        raw = base64.b64decode(b64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise HTTPException(502, f"Generated image is not valid base64: {e}")
    return encode_jpeg(open_image(raw))
