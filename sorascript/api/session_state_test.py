import asyncio

import pytest

from sorascript.api.session_state import SessionBusyError, SessionStateManager
from sorascript.core.workflow import create_app_state, set_duration


def test_save_get_delete():
    async def scenario():
        sessions = SessionStateManager(ttl_seconds=60)
        state = create_app_state("one")
        await sessions.save_state("one", state)

        assert await sessions.get_state("one") is state
        assert await sessions.list_sessions() == ["one"]
        assert await sessions.delete_state("one") is True
        assert await sessions.get_state("one") is None
        assert await sessions.delete_state("one") is False

    asyncio.run(scenario())


def test_expired_sessions_are_dropped():
    async def scenario():
        sessions = SessionStateManager(ttl_seconds=0)
        await sessions.save_state("old", create_app_state("old"))

        assert await sessions.get_state("old") is None
        assert await sessions.list_sessions() == []

    asyncio.run(scenario())


def test_update_script_keeps_live_context():
    async def scenario():
        sessions = SessionStateManager(ttl_seconds=60)
        await sessions.save_state("one", create_app_state("one"))
        await sessions.update_state("one", lambda state: set_duration(state, "60s"))

        state = await sessions.update_script(
            "one", {"is_loading": False, "generated_script": "新脚本", "error": None}
        )
        assert state["context"]["duration"] == "60s"
        assert state["script"]["generated_script"] == "新脚本"

    asyncio.run(scenario())


def test_update_on_missing_session_stores_nothing():
    async def scenario():
        sessions = SessionStateManager(ttl_seconds=60)
        script = {"is_loading": False, "generated_script": "x", "error": None}

        assert await sessions.update_script("gone", script) is None
        assert await sessions.list_sessions() == []

    asyncio.run(scenario())


def test_claim_run_flags_loading_once():
    async def scenario():
        sessions = SessionStateManager(ttl_seconds=60)
        await sessions.save_state("one", create_app_state("one"))

        before = await sessions.claim_run("one")
        assert before["script"]["is_loading"] is False
        assert (await sessions.get_state("one"))["script"]["is_loading"] is True

        with pytest.raises(SessionBusyError):
            await sessions.claim_run("one")
        assert await sessions.claim_run("missing") is None

    asyncio.run(scenario())
