from .request import DownloadRequest
from .response import DownloadResponse, HealthResponse, VideoInfo

__all__ = ["DownloadRequest", "DownloadResponse", "HealthResponse", "VideoInfo"]
