"""Main FastAPI application for the script generation page"""

import uuid
import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Callable
from werkzeug.utils import secure_filename

from fastapi import Depends, FastAPI, File, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse

from .api_types import (
    ConfigResponse,
    EditScriptRequest,
    ErrorResponse,
    SectionView,
    SectionsResponse,
    SectionField,
    SessionResponse,
    SettingsRequest,
    StateResponse,
    state_response
)
from .session_state import SessionBusyError, SessionStateManager
from ..core.config import (
    CORS_ALLOW_ORIGINS,
    DEFAULT_VIDEO_DURATION,
    MAX_PRODUCT_IMAGE_BYTES,
    MAX_REFERENCE_VIDEO_BYTES,
    REFERENCE_TYPES,
    VIDEO_DURATIONS
)
from ..core.line_formatter import format_section, render_html
from ..core.llm import get_llm
from ..core.script_parser import has_structured_sections, parse_script
from ..core.state import AppState, MediaFile
from ..core import workflow

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"

SECTION_TITLES = {
    "overall": "总体分析",
    "shots": "镜头分析 (Sora Prompt)",
    "music": "背景音乐分析",
}

ERROR_RESPONSES = {404: {"model": ErrorResponse}}
RUN_RESPONSES = {404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan"""
    # Startup
    app.state.sessions = SessionStateManager()

    yield

    # Shutdown
    app.state.sessions = None


# Initialize FastAPI app
app = FastAPI(
    title="SoraScript Pro",
    description="E-commerce video ad shooting script generator",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration for client applications
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_script_llm():
    """Model wrapper used by generate/polish (overridden in tests)"""
    return get_llm()


def _error(status_code: int, message: str, session_id: str = None) -> JSONResponse:
    body = ErrorResponse(error=message, session_id=session_id)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _session_not_found(session_id: str) -> JSONResponse:
    return _error(404, "Session not found", session_id)


async def _read_upload(file: UploadFile, expected_prefix: str) -> MediaFile:
    """Read an upload into memory after checking its declared type"""
    media_type = file.content_type or ""
    if not media_type.startswith(expected_prefix):
        raise ValueError(f"Unsupported file type: {media_type or 'unknown'} ({file.filename})")

    data = await file.read()
    return {
        "filename": secure_filename(file.filename or "") or f"upload_{uuid.uuid4().hex[:8]}",
        "media_type": media_type,
        "data": data,
        "size": len(data),
    }


async def _update(session_id: str, change: Callable[[AppState], AppState]):
    """Apply a context change to the live snapshot and return the wire view"""
    state = await app.state.sessions.update_state(session_id, change)
    if state is None:
        return _session_not_found(session_id)
    return state_response(state)


async def _run_model(session_id: str, handler, llm):
    """
    Run generate/polish in a worker thread

    The loading flag is claimed under the store lock before the thread starts.
    The worker's snapshots only ever replace the script part of the live
    session, so settings, uploads and deletions made during the run survive.
    """
    sessions: SessionStateManager = app.state.sessions
    try:
        state = await sessions.claim_run(session_id)
    except SessionBusyError:
        return _error(409, "A request is already running for this session", session_id)
    if state is None:
        return _session_not_found(session_id)

    loop = asyncio.get_running_loop()

    def publish(snapshot: AppState):
        # Worker thread: hand the write to the event loop and wait for it
        asyncio.run_coroutine_threadsafe(
            sessions.update_script(session_id, snapshot["script"]), loop
        ).result()

    try:
        result = await asyncio.to_thread(handler, state, llm, publish)
    except Exception:
        await sessions.update_script(session_id, {**state["script"], "is_loading": False})
        raise

    state = await sessions.update_script(session_id, result["script"])
    if state is None:
        logger.info(f"[API] Session {session_id} was deleted during the run; result dropped")
        return _session_not_found(session_id)
    return state_response(state)


@app.get("/", response_class=HTMLResponse)
async def index():
    """Single-page UI"""
    return HTMLResponse((STATIC_DIR / "index.html").read_text(encoding="utf-8"))


@app.get("/health")
async def health():
    """Health check endpoint"""
    sessions = await app.state.sessions.list_sessions()
    return {
        "status": "healthy",
        "active_sessions": len(sessions),
        "timestamp": datetime.now().isoformat()
    }


@app.get("/config", response_model=ConfigResponse)
async def get_config():
    """Upload limits and choices used to build the page controls"""
    return ConfigResponse(
        max_product_image_bytes=MAX_PRODUCT_IMAGE_BYTES,
        max_reference_video_bytes=MAX_REFERENCE_VIDEO_BYTES,
        video_durations=VIDEO_DURATIONS,
        default_video_duration=DEFAULT_VIDEO_DURATION,
        reference_types=REFERENCE_TYPES
    )


@app.post("/sessions", response_model=SessionResponse)
async def create_session():
    """Create a new page session"""
    session_id = str(uuid.uuid4())
    await app.state.sessions.save_state(session_id, workflow.create_app_state(session_id))
    logger.info(f"[API] Created new session: {session_id}")
    return SessionResponse(session_id=session_id, status="created")


@app.get("/sessions/{session_id}", response_model=StateResponse, responses=ERROR_RESPONSES)
async def get_session(session_id: str):
    """Get the session snapshot"""
    state = await app.state.sessions.get_state(session_id)
    if state is None:
        return _session_not_found(session_id)
    return state_response(state)


@app.delete("/sessions/{session_id}")
async def delete_session(session_id: str):
    """Drop a session and its uploaded media"""
    if await app.state.sessions.delete_state(session_id):
        return {"status": "deleted", "session_id": session_id}
    return {"status": "not_found", "session_id": session_id}


@app.post("/sessions/{session_id}/image", response_model=StateResponse, responses=ERROR_RESPONSES)
async def upload_image(session_id: str, file: UploadFile = File(...)):
    """Set the product image (JPG/PNG, 10MB label)"""
    if await app.state.sessions.get_state(session_id) is None:
        return _session_not_found(session_id)

    try:
        image = await _read_upload(file, "image/")
    except ValueError as e:
        return _error(400, str(e), session_id)

    logger.info(f"[API] Image set for {session_id}: {image['filename']} ({image['size']} bytes)")
    return await _update(session_id, lambda state: workflow.set_product_image(state, image))


@app.delete("/sessions/{session_id}/image", response_model=StateResponse, responses=ERROR_RESPONSES)
async def remove_image(session_id: str):
    return await _update(session_id, workflow.remove_product_image)


@app.post("/sessions/{session_id}/video", response_model=StateResponse, responses=ERROR_RESPONSES)
async def upload_video(session_id: str, file: UploadFile = File(...)):
    """Set the reference video (MP4/WebM, 20MB checked before generation)"""
    if await app.state.sessions.get_state(session_id) is None:
        return _session_not_found(session_id)

    try:
        video = await _read_upload(file, "video/")
    except ValueError as e:
        return _error(400, str(e), session_id)

    logger.info(f"[API] Reference video set for {session_id}: {video['filename']} ({video['size']} bytes)")
    return await _update(session_id, lambda state: workflow.set_reference_video(state, video))


@app.delete("/sessions/{session_id}/video", response_model=StateResponse, responses=ERROR_RESPONSES)
async def remove_video(session_id: str):
    return await _update(session_id, workflow.remove_reference_video)


@app.patch("/sessions/{session_id}/settings", response_model=StateResponse, responses=ERROR_RESPONSES)
async def update_settings(session_id: str, request: SettingsRequest):
    """Reference mode toggle, reference script text and target duration"""

    def apply(state: AppState) -> AppState:
        if request.reference_type is not None:
            state = workflow.set_reference_type(state, request.reference_type)
        if request.reference_script is not None:
            state = workflow.set_reference_script(state, request.reference_script)
        if request.duration is not None:
            state = workflow.set_duration(state, request.duration)
        return state

    return await _update(session_id, apply)


@app.post("/sessions/{session_id}/generate", response_model=StateResponse, responses=RUN_RESPONSES)
async def generate(session_id: str, llm=Depends(get_script_llm)):
    """Generate a script from the current context"""
    return await _run_model(session_id, workflow.handle_generate, llm)


@app.post("/sessions/{session_id}/polish", response_model=StateResponse, responses=RUN_RESPONSES)
async def polish(session_id: str, llm=Depends(get_script_llm)):
    """Polish the generated script"""
    return await _run_model(session_id, workflow.handle_polish, llm)


@app.put("/sessions/{session_id}/script", response_model=StateResponse, responses=ERROR_RESPONSES)
async def edit_script(session_id: str, request: EditScriptRequest):
    """Save edits made to the generated script"""
    return await _update(
        session_id,
        lambda state: workflow.edit_generated_script(state, request.generated_script)
    )


@app.get("/sessions/{session_id}/sections", response_model=SectionsResponse, responses=ERROR_RESPONSES)
async def get_sections(session_id: str):
    """Parsed sections with rendered HTML for the preview pane"""
    state = await app.state.sessions.get_state(session_id)
    if state is None:
        return _session_not_found(session_id)

    script = state["script"]["generated_script"]
    parsed = parse_script(script)

    if not has_structured_sections(parsed):
        return SectionsResponse(
            session_id=session_id,
            structured=False,
            fallback_html=render_html(format_section(script)) if script else None
        )

    sections = {}
    for name, title in SECTION_TITLES.items():
        if parsed[name]:
            sections[name] = SectionView(
                title=title,
                content=parsed[name],
                html=render_html(format_section(parsed[name]))
            )

    return SectionsResponse(session_id=session_id, structured=True, sections=sections)


@app.get("/sessions/{session_id}/copy", response_class=PlainTextResponse, responses=ERROR_RESPONSES)
async def copy_text(session_id: str, section: SectionField = "all"):
    """Plain text payload for the copy buttons (whole script or one section)"""
    state = await app.state.sessions.get_state(session_id)
    if state is None:
        return _session_not_found(session_id)

    script = state["script"]["generated_script"]
    text = script if section == "all" else parse_script(script)[section]
    if not text:
        return _error(404, f"Nothing to copy for section '{section}'", session_id)
    return PlainTextResponse(text)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)
