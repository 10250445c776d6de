import asyncio
import threading

import httpx
import pytest
from fastapi.testclient import TestClient

from sorascript.api.main import app, get_script_llm
from sorascript.api.session_state import SessionStateManager


@pytest.fixture
def client(fake_llm):
    app.dependency_overrides[get_script_llm] = lambda: fake_llm
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def session_id(client):
    response = client.post("/sessions")
    assert response.status_code == 200
    return response.json()["session_id"]


def upload_image(client, session_id):
    return client.post(
        f"/sessions/{session_id}/image",
        files={"file": ("cup shot.png", b"\x89PNG fake", "image/png")},
    )


def test_index_and_health(client, session_id):
    assert "SoraScript Pro" in client.get("/").text
    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["active_sessions"] == 1


def test_new_session_snapshot(client, session_id):
    state = client.get(f"/sessions/{session_id}").json()

    assert state["context"]["reference_type"] == "script"
    assert state["context"]["duration"] == "15s"
    assert state["context"]["image"] is None
    assert state["script"]["generated_script"] == ""


def test_unknown_session_is_404(client):
    response = client.get("/sessions/missing")
    assert response.status_code == 404
    assert response.json() == {"error": "Session not found", "session_id": "missing"}
    assert client.post("/sessions/missing/generate").status_code == 404


def test_upload_image_returns_metadata(client, session_id):
    image = upload_image(client, session_id).json()["context"]["image"]
    assert image == {"filename": "cup_shot.png", "media_type": "image/png", "size": 9}

    state = client.delete(f"/sessions/{session_id}/image").json()
    assert state["context"]["image"] is None


def test_upload_rejects_wrong_type(client, session_id):
    response = client.post(
        f"/sessions/{session_id}/video",
        files={"file": ("notes.txt", b"text", "text/plain")},
    )
    assert response.status_code == 400
    assert "text/plain" in response.json()["error"]


def test_settings_update(client, session_id):
    state = client.patch(
        f"/sessions/{session_id}/settings",
        json={"reference_type": "video", "duration": "60s"},
    ).json()

    assert state["context"]["reference_type"] == "video"
    assert state["context"]["duration"] == "60s"


def test_settings_reject_unknown_duration(client, session_id):
    response = client.patch(f"/sessions/{session_id}/settings", json={"duration": "45s"})
    assert response.status_code == 422


def test_generate_without_image_reports_error(client, session_id, fake_llm):
    state = client.post(f"/sessions/{session_id}/generate").json()

    assert state["script"]["error"] == "请上传产品图片"
    assert fake_llm.calls == []


def test_generate_sections_and_copy(client, session_id, sample_script):
    upload_image(client, session_id)
    state = client.post(f"/sessions/{session_id}/generate").json()
    assert state["script"] == {"is_loading": False, "generated_script": sample_script, "error": None}

    view = client.get(f"/sessions/{session_id}/sections").json()
    assert view["structured"] is True
    assert list(view["sections"]) == ["overall", "shots", "music"]
    assert view["sections"]["shots"]["title"] == "镜头分析 (Sora Prompt)"
    assert '<div class="line-badge">00:00-00:03</div>' in view["sections"]["shots"]["html"]

    assert client.get(f"/sessions/{session_id}/copy").text == sample_script
    music = client.get(f"/sessions/{session_id}/copy", params={"section": "music"})
    assert music.text == "轻快的 Lo-fi 节拍"


def test_unstructured_script_falls_back(client, session_id):
    client.put(f"/sessions/{session_id}/script", json={"generated_script": "随便写写"})
    view = client.get(f"/sessions/{session_id}/sections").json()

    assert view["structured"] is False
    assert view["sections"] == {}
    assert '<div class="line-text">随便写写</div>' in view["fallback_html"]


def test_copy_empty_section_is_404(client, session_id):
    assert client.get(f"/sessions/{session_id}/copy").status_code == 404


def test_polish_updates_script(client, session_id, fake_llm):
    upload_image(client, session_id)
    client.post(f"/sessions/{session_id}/generate")
    fake_llm.reply = "润色版脚本"

    state = client.post(f"/sessions/{session_id}/polish").json()
    assert state["script"]["generated_script"] == "润色版脚本"


def test_delete_session(client, session_id):
    assert client.delete(f"/sessions/{session_id}").json()["status"] == "deleted"
    assert client.get(f"/sessions/{session_id}").status_code == 404
    assert client.delete(f"/sessions/{session_id}").json()["status"] == "not_found"


def test_config_drives_page_controls(client):
    config = client.get("/config").json()

    assert config["max_product_image_bytes"] == 10 * 1024 * 1024
    assert config["max_reference_video_bytes"] == 20 * 1024 * 1024
    assert config["video_durations"] == ["10s", "15s", "30s", "60s", "120s"]
    assert config["default_video_duration"] == "15s"
    assert config["reference_types"] == ["script", "video"]


class BlockingLLM:
    """Holds invoke() until released so requests can overlap a running model call"""

    def __init__(self, reply):
        self.reply = reply
        self.calls = 0
        self.started = threading.Event()
        self.release = threading.Event()

    def invoke(self, prompt, **kwargs):
        self.calls += 1
        self.started.set()
        self.release.wait(timeout=5)
        return self.reply


def run_concurrently(llm, scenario):
    async def main():
        app.state.sessions = SessionStateManager()
        app.dependency_overrides[get_script_llm] = lambda: llm
        try:
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
                response = await client.post("/sessions")
                session_id = response.json()["session_id"]
                await client.post(
                    f"/sessions/{session_id}/image",
                    files={"file": ("cup.png", b"\x89PNG fake", "image/png")},
                )
                await scenario(client, session_id)
        finally:
            llm.release.set()
            app.dependency_overrides.clear()

    asyncio.run(main())


def test_changes_made_during_generation_survive(sample_script):
    llm = BlockingLLM(sample_script)

    async def scenario(client, session_id):
        run = asyncio.create_task(client.post(f"/sessions/{session_id}/generate"))
        assert await asyncio.to_thread(llm.started.wait, 5)

        loading = (await client.get(f"/sessions/{session_id}")).json()
        assert loading["script"] == {"is_loading": True, "generated_script": "", "error": None}

        await client.patch(f"/sessions/{session_id}/settings", json={"duration": "60s"})
        await client.delete(f"/sessions/{session_id}/image")
        llm.release.set()

        response = await run
        assert response.status_code == 200
        stored = (await client.get(f"/sessions/{session_id}")).json()
        for state in (response.json(), stored):
            assert state["context"]["duration"] == "60s"
            assert state["context"]["image"] is None
            assert state["script"] == {"is_loading": False, "generated_script": sample_script, "error": None}

    run_concurrently(llm, scenario)


def test_session_deleted_during_generation_stays_deleted(sample_script):
    llm = BlockingLLM(sample_script)

    async def scenario(client, session_id):
        run = asyncio.create_task(client.post(f"/sessions/{session_id}/generate"))
        assert await asyncio.to_thread(llm.started.wait, 5)

        assert (await client.delete(f"/sessions/{session_id}")).json()["status"] == "deleted"
        llm.release.set()

        assert (await run).status_code == 404
        assert (await client.get(f"/sessions/{session_id}")).status_code == 404
        assert (await client.get("/health")).json()["active_sessions"] == 0

    run_concurrently(llm, scenario)


def test_simultaneous_generates_run_the_model_once(sample_script):
    llm = BlockingLLM(sample_script)

    async def scenario(client, session_id):
        runs = [asyncio.create_task(client.post(f"/sessions/{session_id}/generate")) for _ in range(2)]
        done, _ = await asyncio.wait(runs, timeout=5, return_when=asyncio.FIRST_COMPLETED)
        assert [task.result().status_code for task in done] == [409]

        llm.release.set()
        responses = await asyncio.gather(*runs)
        assert sorted(response.status_code for response in responses) == [200, 409]
        assert llm.calls == 1

    run_concurrently(llm, scenario)
