from typing import Optional, Union

from pydantic import BaseModel, Field


class VideoInfo(BaseModel):
    """Video metadata passed through from yt-dlp"""
    title: Optional[str] = None
    thumbnail: Optional[str] = None
    duration: Optional[Union[int, float]] = None
    uploader: Optional[str] = None


class DownloadResponse(BaseModel):
    """Successful download response"""
    success: bool = True
    message: str
    download_url: str = Field(..., alias="downloadUrl")
    video_info: VideoInfo = Field(..., alias="videoInfo")


class HealthResponse(BaseModel):
    status: str
