import pytest

from downloader.config.settings import config
from downloader.core.errors import ExternalToolError, ToolErrorKind
from downloader.core.state import state
from downloader.main import detect_ytdlp_version, shutdown_event, startup_event


@pytest.mark.asyncio
async def test_health_check(client):
    """Test public health endpoint"""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_health_check_ignores_stored_files(client, fake_ytdlp):
    await client.post("/api/download", json={"url": "https://youtu.be/dQw4w9WgXcQ"})
    response = await client.get("/health")
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_root_reports_service(client):
    response = await client.get("/")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "running"
    assert "ytdlp_version" in body


@pytest.mark.asyncio
async def test_request_id_header(client):
    response = await client.get("/health")
    assert len(response.headers["x-request-id"]) == 8


@pytest.mark.asyncio
async def test_request_without_origin_is_allowed(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert "access-control-allow-origin" not in response.headers


@pytest.mark.asyncio
async def test_allowed_origin_gets_cors_headers(client):
    response = await client.get("/health", headers={"Origin": "http://localhost:5173"})
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert response.headers["access-control-allow-credentials"] == "true"


@pytest.mark.asyncio
async def test_disallowed_origin_is_rejected(client):
    response = await client.get("/health", headers={"Origin": "https://evil.example"})
    assert response.status_code == 403
    assert response.json() == {"error": "Not allowed by CORS"}


@pytest.mark.asyncio
async def test_disallowed_origin_never_reaches_download(client, fake_ytdlp):
    response = await client.post(
        "/api/download",
        json={"url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ"},
        headers={"Origin": "https://evil.example"},
    )
    assert response.status_code == 403
    assert fake_ytdlp.calls == []


@pytest.mark.asyncio
async def test_preflight_from_allowed_origin(client):
    response = await client.options(
        "/api/download",
        headers={
            "Origin": "http://localhost:4173",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:4173"


@pytest.mark.asyncio
async def test_static_downloads_are_not_origin_gated(client):
    response = await client.get("/downloads/does-not-exist.mp4", headers={"Origin": "https://evil.example"})
    assert response.status_code == 404


@pytest.fixture
def lifecycle_state(monkeypatch):
    monkeypatch.setattr(state, "sweeper", None)
    monkeypatch.setattr(state, "ytdlp_version", "unknown")
    return state


@pytest.mark.asyncio
async def test_startup_starts_and_shutdown_stops_cleanup(lifecycle_state, fake_ytdlp, monkeypatch):
    monkeypatch.setattr(config.retention, "enabled", True)

    await startup_event()
    sweeper = lifecycle_state.sweeper
    try:
        assert sweeper is not None
        assert sweeper.running
        assert sweeper.interval_seconds == config.retention.interval_seconds
        assert lifecycle_state.ytdlp_version == "2024.08.06"
    finally:
        await shutdown_event()

    assert not sweeper.running
    assert lifecycle_state.sweeper is None


@pytest.mark.asyncio
async def test_startup_without_retention(lifecycle_state, fake_ytdlp, monkeypatch):
    monkeypatch.setattr(config.retention, "enabled", False)

    await startup_event()

    assert lifecycle_state.sweeper is None
    await shutdown_event()


@pytest.mark.asyncio
async def test_startup_without_ytdlp(lifecycle_state, fake_ytdlp, monkeypatch):
    monkeypatch.setattr(config.retention, "enabled", False)
    fake_ytdlp.error = ExternalToolError(ToolErrorKind.NOT_FOUND, "yt-dlp executable not found")

    await startup_event()

    assert lifecycle_state.ytdlp_version == "unknown"
    assert await detect_ytdlp_version() == "unknown"


@pytest.mark.asyncio
async def test_root_reports_running_cleanup(client, lifecycle_state, fake_ytdlp, monkeypatch):
    monkeypatch.setattr(config.retention, "enabled", True)

    await startup_event()
    try:
        response = await client.get("/")
    finally:
        await shutdown_event()

    assert response.json()["cleanup_running"] is True
    assert response.json()["ytdlp_version"] == "2024.08.06"
