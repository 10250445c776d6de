"""In-memory session state manager"""

import asyncio
import time
from typing import Callable, Dict, List, Optional, Tuple

from ..core.config import SESSION_TTL_SECONDS
from ..core.state import AppState, ScriptState


class SessionBusyError(Exception):
    """Raised when a generate or polish run is already in flight"""


class SessionStateManager:
    """
    Holds one AppState snapshot per page session with a sliding TTL.

    Every read-modify-write goes through `update_state` under the lock, so a
    finished model run only replaces the script part of whatever the session
    holds at that moment. Nothing is written to disk.
    """

    def __init__(self, ttl_seconds: int = SESSION_TTL_SECONDS):
        self.default_ttl = ttl_seconds
        self._sessions: Dict[str, Tuple[AppState, float]] = {}
        self._lock = asyncio.Lock()

    def _expired(self, expires_at: float) -> bool:
        return expires_at <= time.monotonic()

    def _purge_expired(self):
        for session_id in [sid for sid, (_, exp) in self._sessions.items() if self._expired(exp)]:
            del self._sessions[session_id]

    def _current(self, session_id: str) -> Optional[AppState]:
        entry = self._sessions.get(session_id)
        if entry is None:
            return None
        state, expires_at = entry
        if self._expired(expires_at):
            del self._sessions[session_id]
            return None
        return state

    def _store(self, session_id: str, state: AppState):
        self._sessions[session_id] = (state, time.monotonic() + self.default_ttl)

    async def save_state(self, session_id: str, state: AppState):
        """Replace the session snapshot and refresh its TTL"""
        async with self._lock:
            self._store(session_id, state)

    async def get_state(self, session_id: str) -> Optional[AppState]:
        """Return the current snapshot, or None when missing or expired"""
        async with self._lock:
            state = self._current(session_id)
            if state is not None:
                # Refresh TTL on access
                self._store(session_id, state)
            return state

    async def update_state(
        self,
        session_id: str,
        change: Callable[[AppState], AppState]
    ) -> Optional[AppState]:
        """Apply `change` to the current snapshot atomically

        Returns the new snapshot, or None when the session is missing or
        expired (nothing is stored in that case).
        """
        async with self._lock:
            state = self._current(session_id)
            if state is None:
                return None
            state = change(state)
            self._store(session_id, state)
            return state

    async def update_script(self, session_id: str, script: ScriptState) -> Optional[AppState]:
        """Replace only the generation result, keeping the current context"""
        return await self.update_state(session_id, lambda state: {**state, "script": script})

    async def claim_run(self, session_id: str) -> Optional[AppState]:
        """Flag the session as loading unless a run is already in flight

        Returns the snapshot as it was before flagging, or None when the
        session is missing.

        Raises:
            SessionBusyError: when the session is already loading
        """
        async with self._lock:
            state = self._current(session_id)
            if state is None:
                return None
            if state["script"]["is_loading"]:
                raise SessionBusyError(session_id)
            self._store(session_id, {**state, "script": {**state["script"], "is_loading": True}})
            return state

    async def delete_state(self, session_id: str) -> bool:
        async with self._lock:
            return self._sessions.pop(session_id, None) is not None

    async def list_sessions(self) -> List[str]:
        """List all active sessions"""
        async with self._lock:
            self._purge_expired()
            return list(self._sessions.keys())
