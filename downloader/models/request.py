from pydantic import BaseModel, Field, validator
from typing import Any, Optional

DEFAULT_QUALITY = "360p"

class DownloadRequest(BaseModel):
    # Presence and host checks happen in the endpoint so they answer 400, not 422
    url: Any = Field(None, description="YouTube video URL")
    quality: Optional[str] = Field(DEFAULT_QUALITY, description="Quality tier: 360p, 480p, 720p or 1080p")

    @validator('quality', pre=True)
    def stringify_quality(cls, v):
        """Unrecognised values, numbers included, are labels like any other"""
        if v is None or isinstance(v, str):
            return v
        return str(v)

    @property
    def quality_label(self) -> str:
        """Requested quality, defaulting to the lowest tier when unset"""
        return self.quality or DEFAULT_QUALITY
