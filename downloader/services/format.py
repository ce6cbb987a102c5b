from typing import Dict, Optional

DEFAULT_HEIGHT = 360

QUALITY_HEIGHTS: Dict[str, int] = {
    "1080p": 1080,
    "720p": 720,
    "480p": 480,
}

class FormatDecision:
    """Make format decisions"""

    @staticmethod
    def height_for(quality: Optional[str]) -> int:
        """Resolution ceiling for a quality label; unknown labels fall to the lowest tier"""
        return QUALITY_HEIGHTS.get(quality or "", DEFAULT_HEIGHT)

    @staticmethod
    def decide(quality: Optional[str]) -> str:
        """
        Decide format string for a quality label.
        Best video stream under the ceiling merged with best audio,
        falling back to the best single file when merging is not possible.
        """
        height = FormatDecision.height_for(quality)
        return f"bestvideo[height<={height}]+bestaudio/best"
