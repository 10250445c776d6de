"""Application state controller

Pure update functions over AppState snapshots plus the generate/polish drivers.
Every function returns a new snapshot; inputs are never mutated.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from .config import DEFAULT_VIDEO_DURATION, MAX_REFERENCE_VIDEO_BYTES
from .state import AppState, MediaFile, ProductContext, ScriptState
from ..agents.creative.agent_script import (
    VIDEO_TOO_LARGE_MESSAGE,
    ScriptGenerationError,
    generate_script,
    polish_script
)
from ..prompts.script import DEFAULT_REFERENCE_SCRIPT

logger = logging.getLogger(__name__)

MISSING_IMAGE_MESSAGE = "请上传产品图片"
MISSING_SCRIPT_MESSAGE = "内置脚本缺失，请刷新页面重试"
MISSING_VIDEO_MESSAGE = "请上传参考视频"
GENERATE_FAILED_MESSAGE = "生成失败"

StateCallback = Callable[[AppState], None]


def create_app_state(session_id: str) -> AppState:
    """Initial snapshot for a new page session"""
    return {
        "session_id": session_id,
        "created_at": datetime.now().isoformat(),
        "context": {
            "image": None,
            "reference_type": "script",
            "reference_script": DEFAULT_REFERENCE_SCRIPT,
            "reference_video": None,
            "duration": DEFAULT_VIDEO_DURATION,
        },
        "script": {
            "is_loading": False,
            "generated_script": "",
            "error": None,
        },
    }


def _with_context(state: AppState, **changes) -> AppState:
    context: ProductContext = {**state["context"], **changes}
    return {**state, "context": context}


def _with_script(state: AppState, script: ScriptState) -> AppState:
    return {**state, "script": script}


def set_product_image(state: AppState, image: MediaFile) -> AppState:
    return _with_context(state, image=image)


def remove_product_image(state: AppState) -> AppState:
    return _with_context(state, image=None)


def set_reference_video(state: AppState, video: MediaFile) -> AppState:
    return _with_context(state, reference_video=video)


def remove_reference_video(state: AppState) -> AppState:
    """Drop the video and its retained bytes"""
    return _with_context(state, reference_video=None)


def set_reference_type(state: AppState, reference_type: str) -> AppState:
    # The other mode's input is retained
    return _with_context(state, reference_type=reference_type)


def set_reference_script(state: AppState, reference_script: str) -> AppState:
    return _with_context(state, reference_script=reference_script)


def set_duration(state: AppState, duration: str) -> AppState:
    return _with_context(state, duration=duration)


def edit_generated_script(state: AppState, text: str) -> AppState:
    """Edit-mode change of the generated script"""
    return _with_script(state, {**state["script"], "generated_script": text})


def validate_generation_request(context: ProductContext) -> Optional[str]:
    """Return a user-facing message when the inputs cannot be sent, else None"""
    if not context["image"]:
        return MISSING_IMAGE_MESSAGE

    if context["reference_type"] == "script" and not context["reference_script"].strip():
        return MISSING_SCRIPT_MESSAGE

    if context["reference_type"] == "video":
        video = context["reference_video"]
        if not video:
            return MISSING_VIDEO_MESSAGE
        if video["size"] > MAX_REFERENCE_VIDEO_BYTES:
            return VIDEO_TOO_LARGE_MESSAGE

    return None


def handle_generate(state: AppState, llm=None, on_update: Optional[StateCallback] = None) -> AppState:
    """
    Run one generation for the current context

    Validation failures set the error and keep the previous script without any
    network call. Otherwise the loading snapshot is published through
    on_update before the model is called.
    """
    error = validate_generation_request(state["context"])
    if error:
        logger.info(f"[Workflow] Generation rejected: {error}")
        return _with_script(state, {**state["script"], "error": error})

    state = _with_script(state, {"is_loading": True, "generated_script": "", "error": None})
    if on_update:
        on_update(state)

    context = state["context"]
    try:
        script = generate_script(
            context["image"],
            context["reference_script"],
            context["duration"],
            context["reference_video"] if context["reference_type"] == "video" else None,
            llm=llm
        )
    except ScriptGenerationError as e:
        return _with_script(state, {
            "is_loading": False,
            "generated_script": "",
            "error": str(e) or GENERATE_FAILED_MESSAGE
        })

    return _with_script(state, {"is_loading": False, "generated_script": script, "error": None})


def handle_polish(state: AppState, llm=None, on_update: Optional[StateCallback] = None) -> AppState:
    """Polish the current script; no-op when nothing has been generated"""
    current_script = state["script"]["generated_script"]
    if not current_script:
        return state

    state = _with_script(state, {**state["script"], "is_loading": True})
    if on_update:
        on_update(state)

    try:
        polished = polish_script(current_script, llm=llm)
    except ScriptGenerationError as e:
        return _with_script(state, {**state["script"], "is_loading": False, "error": str(e)})

    return _with_script(state, {"is_loading": False, "generated_script": polished, "error": None})
