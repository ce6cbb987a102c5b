from fastapi import Request
import logging
import sys
from typing import Any, Optional
from rich.console import Console
from rich.logging import RichHandler
from downloader.config.settings import LoggingConfig

logger = logging.getLogger("downloader")
console = Console(stderr=True)

_configured = False

def setup_logging(logging_config: LoggingConfig) -> None:
    """
    Configure the package logger once.
    Uses rich when enabled, a plain stderr handler otherwise.
    """
    global _configured
    if _configured:
        return

    if logging_config.enable_rich:
        handler: logging.Handler = RichHandler(console=console, rich_tracebacks=True, show_path=False)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(logging_config.format))

    logger.addHandler(handler)
    logger.setLevel(logging_config.level)
    _configured = True

def log_with_context(
    request: Optional[Request],
    level: int,
    message: str,
    **kwargs: Any
) -> None:
    """
    Log with request context.
    Automatically includes request_id for tracing.
    """
    if request is None:
        request_id = "-"
    else:
        request_id = getattr(request.state, "request_id", "unknown")
    extra = {
        "request_id": request_id,
        **kwargs
    }
    logger.log(level, f"[{request_id}] {message}", extra=extra)

def log_info(request: Optional[Request], message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.INFO, message, **kwargs)

def log_error(request: Optional[Request], message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.ERROR, message, **kwargs)

def log_warning(request: Optional[Request], message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.WARNING, message, **kwargs)

def log_debug(request: Optional[Request], message: str, **kwargs: Any) -> None:
    log_with_context(request, logging.DEBUG, message, **kwargs)
