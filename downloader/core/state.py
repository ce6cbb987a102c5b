from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from downloader.services.cleanup import RetentionSweeper

@dataclass
class RuntimeState:
    """Centralized runtime state"""
    sweeper: Optional["RetentionSweeper"] = None
    ytdlp_version: str = "unknown"

state = RuntimeState()
