"""yt-dlp backed video download API."""

__version__ = "1.0.0"
