"""Type definitions for API request/response validation"""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Literal

from ..core.state import AppState, MediaFile

ReferenceTypeField = Literal["script", "video"]
DurationField = Literal["10s", "15s", "30s", "60s", "120s"]
SectionField = Literal["all", "overall", "shots", "music"]


class SessionResponse(BaseModel):
    """Response type for session creation"""
    session_id: str
    status: str


class MediaInfo(BaseModel):
    """Uploaded file metadata (content bytes are never returned)"""
    filename: str
    media_type: str
    size: int


class ContextResponse(BaseModel):
    image: Optional[MediaInfo] = None
    reference_type: ReferenceTypeField
    reference_script: str
    reference_video: Optional[MediaInfo] = None
    duration: DurationField


class ScriptResponse(BaseModel):
    is_loading: bool
    generated_script: str
    error: Optional[str] = None


class StateResponse(BaseModel):
    """Session snapshot as seen by the page"""
    session_id: str
    created_at: str
    context: ContextResponse
    script: ScriptResponse


class SettingsRequest(BaseModel):
    """Partial update of the reference settings"""
    reference_type: Optional[ReferenceTypeField] = None
    reference_script: Optional[str] = None
    duration: Optional[DurationField] = None


class EditScriptRequest(BaseModel):
    """Edit-mode replacement of the generated script"""
    generated_script: str


class SectionView(BaseModel):
    title: str
    content: str
    html: str


class SectionsResponse(BaseModel):
    """Parsed sections; `fallback_html` is set when no structure was found"""
    session_id: str
    structured: bool
    sections: Dict[str, SectionView] = Field(default_factory=dict)
    fallback_html: Optional[str] = None


class ConfigResponse(BaseModel):
    """Limits and choices the page builds its controls from"""
    max_product_image_bytes: int
    max_reference_video_bytes: int
    video_durations: List[DurationField]
    default_video_duration: DurationField
    reference_types: List[ReferenceTypeField]


class ErrorResponse(BaseModel):
    """Body of the 400/404/409 JSON errors"""
    error: str
    session_id: Optional[str] = None


def media_info(media: Optional[MediaFile]) -> Optional[MediaInfo]:
    if not media:
        return None
    return MediaInfo(filename=media["filename"], media_type=media["media_type"], size=media["size"])


def state_response(state: AppState) -> StateResponse:
    """Project an AppState onto the wire model"""
    context = state["context"]
    return StateResponse(
        session_id=state["session_id"],
        created_at=state["created_at"],
        context=ContextResponse(
            image=media_info(context["image"]),
            reference_type=context["reference_type"],
            reference_script=context["reference_script"],
            reference_video=media_info(context["reference_video"]),
            duration=context["duration"]
        ),
        script=ScriptResponse(**state["script"])
    )
