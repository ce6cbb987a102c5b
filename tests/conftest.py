import json
import os
import shutil
import tempfile

# Configuration is read at import time, so point it at a scratch directory first
os.environ["DOWNLOADS_DIR"] = tempfile.mkdtemp(prefix="yt-downloader-tests-")
os.environ["ALLOWED_ORIGINS"] = "http://localhost:5173,http://localhost:4173"
os.environ["CONFIG_PATH"] = os.path.join(os.environ["DOWNLOADS_DIR"], "missing-config.json")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from downloader.main import app
from downloader.services.ytdlp import CompletedProcess, SubprocessExecutor

VIDEO_URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

DEFAULT_INFO = {
    "id": "dQw4w9WgXcQ",
    "title": "Test_Video",
    "thumbnail": "https://i.ytimg.com/vi/dQw4w9WgXcQ/maxresdefault.jpg",
    "duration": 212,
    "uploader": "Test Channel",
    "formats": [],
}


class FakeYtDlp:
    """Stands in for SubprocessExecutor.run and records every command"""

    def __init__(self):
        self.calls = []
        self.info = dict(DEFAULT_INFO)
        self.info_returncode = 0
        self.download_returncode = 0
        self.stderr = b""
        self.error = None
        self.version = "2024.08.06"

    @property
    def info_calls(self):
        return [cmd for cmd in self.calls if "--dump-single-json" in cmd]

    @property
    def download_calls(self):
        return [cmd for cmd in self.calls if "-o" in cmd]

    async def run(self, cmd, timeout=None):
        self.calls.append(list(cmd))
        if self.error is not None:
            raise self.error

        if "--version" in cmd:
            return CompletedProcess(0, f"{self.version}\n".encode(), b"")

        if "--dump-single-json" in cmd:
            if self.info_returncode:
                return CompletedProcess(self.info_returncode, b"", self.stderr)
            return CompletedProcess(0, json.dumps(self.info).encode(), b"")

        if self.download_returncode:
            return CompletedProcess(self.download_returncode, b"", self.stderr)

        output = cmd[cmd.index("-o") + 1].replace("%%", "%")
        with open(output, "wb") as f:
            f.write(b"fake mp4 data")
        return CompletedProcess(0, b"", b"")


@pytest.fixture(scope="session", autouse=True)
def downloads_dir():
    directory = os.environ["DOWNLOADS_DIR"]
    yield directory
    shutil.rmtree(directory, ignore_errors=True)


@pytest.fixture
def fake_ytdlp(monkeypatch):
    fake = FakeYtDlp()
    monkeypatch.setattr(SubprocessExecutor, "run", fake.run)
    return fake


@pytest_asyncio.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
