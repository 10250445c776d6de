"""
Script generation agent - turns a product image plus a reference into a shooting script
"""

import logging
import time
from typing import Optional
from ...core.config import MAX_REFERENCE_VIDEO_BYTES, SCRIPT_TEMPERATURE
from ...core.llm import get_llm
from ...core.state import MediaFile
from ...prompts.script import build_generation_prompt, build_polish_prompt
from .util_media import MediaTooLargeError, encode_media

logger = logging.getLogger(__name__)

GENERATE_EMPTY_FALLBACK = "生成脚本失败，请重试。"
GENERATE_ERROR_FALLBACK = "API请求失败，请检查网络或图片/视频格式。"
VIDEO_TOO_LARGE_MESSAGE = "参考视频过大，请上传小于 20MB 的视频文件。"
POLISH_EMPTY_FALLBACK = "润色失败，请重试。"
POLISH_ERROR_MESSAGE = "润色请求失败。"


class ScriptGenerationError(Exception):
    """Human-readable failure of a generate or polish request"""


def generate_script(
    image: MediaFile,
    reference_script: str,
    duration: str,
    reference_video: Optional[MediaFile] = None,
    llm=None
) -> str:
    """
    Generate an ad shooting script from a product image and a reference

    Attachments are sent image first, optional video second, prompt text last.
    A reference video switches the prompt to video mode; otherwise the
    reference script text is interpolated.

    Args:
        image: Product image
        reference_script: Reference script text (script mode)
        duration: Target duration label, e.g. "15s"
        reference_video: Reference video (video mode)
        llm: Model wrapper exposing invoke(); defaults to GeminiLLM

    Returns:
        Raw Markdown script

    Raises:
        ScriptGenerationError: on any validation, encoding or model failure
    """
    logger.info("[Script Agent] Starting script generation...")
    start_time = time.time()

    try:
        media = [encode_media(image["data"], image["media_type"])]

        if reference_video:
            media.append(encode_media(
                reference_video["data"],
                reference_video["media_type"],
                max_bytes=MAX_REFERENCE_VIDEO_BYTES
            ))
            prompt = build_generation_prompt("video", duration)
        else:
            prompt = build_generation_prompt("script", duration, reference_script)

        script_llm = llm or get_llm()
        response_text = script_llm.invoke(prompt, media=media, temperature=SCRIPT_TEMPERATURE)

    except MediaTooLargeError as e:
        logger.error(f"[Script Agent] Reference video rejected: {str(e)}")
        raise ScriptGenerationError(VIDEO_TOO_LARGE_MESSAGE) from e
    except Exception as e:
        logger.error(f"[Script Agent] Error generating script: {type(e).__name__}: {str(e)}")
        raise ScriptGenerationError(str(e) or GENERATE_ERROR_FALLBACK) from e

    logger.info(f"[Script Agent] Completed in {time.time() - start_time:.2f}s ({len(response_text or '')} chars)")
    return response_text or GENERATE_EMPTY_FALLBACK


def polish_script(current_script: str, llm=None) -> str:
    """
    Rewrite a generated script for stronger copy, keeping its section structure

    Args:
        current_script: Previously generated script text
        llm: Model wrapper exposing invoke(); defaults to GeminiLLM

    Returns:
        Polished script

    Raises:
        ScriptGenerationError: with a fixed message on any model failure
    """
    logger.info("[Script Agent] Polishing script...")

    try:
        script_llm = llm or get_llm()
        response_text = script_llm.invoke(build_polish_prompt(current_script))
    except Exception as e:
        logger.error(f"[Script Agent] Error polishing script: {type(e).__name__}: {str(e)}")
        raise ScriptGenerationError(POLISH_ERROR_MESSAGE) from e

    return response_text or POLISH_EMPTY_FALLBACK
