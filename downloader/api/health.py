from fastapi import APIRouter

from downloader.config.settings import config
from downloader.core.state import state
from downloader.i18n import i18n
from downloader.models.response import HealthResponse

router = APIRouter()


@router.get("/")
async def root():
    """Root endpoint"""
    return {
        "status": i18n.get("response.status_running"),
        "service": config.api.title,
        "version": config.api.version,
        "ytdlp_version": state.ytdlp_version,
        "cleanup_running": state.sweeper is not None and state.sweeper.running
    }


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Liveness check, independent of the downloads directory"""
    return HealthResponse(status="ok")
