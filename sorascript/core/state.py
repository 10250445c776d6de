"""State definitions for the script generation workflow"""

from typing import Literal, Optional, TypedDict

ReferenceType = Literal["script", "video"]
VideoDuration = Literal["10s", "15s", "30s", "60s", "120s"]


class MediaFile(TypedDict):
    """An uploaded file held in memory for the lifetime of the session"""
    filename: str
    media_type: str  # declared MIME type, e.g. "image/png"
    data: bytes
    size: int


class ProductContext(TypedDict):
    """User inputs for a generation run"""
    image: Optional[MediaFile]
    reference_type: ReferenceType
    reference_script: str
    # Kept while in script mode; switching modes never clears it
    reference_video: Optional[MediaFile]
    duration: VideoDuration


class ScriptState(TypedDict):
    """Generation result, replaced wholesale on every transition"""
    is_loading: bool
    generated_script: str
    error: Optional[str]


class AppState(TypedDict):
    session_id: str
    created_at: str
    context: ProductContext
    script: ScriptState
