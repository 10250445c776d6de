"""
Media utility functions for script generation

Handles conversion of uploaded images and videos into Base64 payloads for the Gemini API
"""

import base64
import binascii
import logging
from typing import Optional, TypedDict

logger = logging.getLogger(__name__)


class MediaEncodingError(ValueError):
    """Raised when a file cannot be converted to a Base64 payload"""


class MediaTooLargeError(MediaEncodingError):
    """Raised when a file exceeds the caller's size limit"""


class EncodedMedia(TypedDict):
    """Universal media format consumed by GeminiLLM: {"data": base64 str, "media_type": str}"""
    data: str
    media_type: str


def encode_media(data: bytes, media_type: str, max_bytes: Optional[int] = None) -> EncodedMedia:
    """
    Convert raw file bytes to a Base64 payload plus its declared media type

    Args:
        data: File content
        media_type: Declared MIME type of the file
        max_bytes: Optional size limit, checked before encoding

    Returns:
        EncodedMedia with a Base64 string (without data: prefix)
    """
    if not media_type:
        raise MediaEncodingError("Missing media type")

    if max_bytes is not None and len(data) > max_bytes:
        raise MediaTooLargeError(
            f"File is {len(data)} bytes, limit is {max_bytes} bytes"
        )

    try:
        base64_string = base64.b64encode(data).decode('utf-8')
    except (TypeError, binascii.Error) as e:
        logger.error(f"Error converting {media_type} to Base64: {str(e)}")
        raise MediaEncodingError(f"Could not encode {media_type}: {e}") from e

    logger.info(f"{media_type} converted to Base64 ({len(data)} bytes)")
    return {"data": base64_string, "media_type": media_type}
