import re
from enum import Enum, auto
from typing import Any, Iterable, Optional

YOUTUBE_URL_PATTERN = re.compile(r"(https?://)?(www\.)?(youtube\.com|youtu\.be)/.+")


class UrlValidationResult(Enum):
    """URL validation result without throwing exceptions"""
    OK = auto()
    MISSING = auto()
    INVALID = auto()


class SecurityValidator:
    """
    Validate request input without throwing exceptions.
    Returns result enum for separation of concerns.
    """

    @staticmethod
    def validate_url(url: Any) -> UrlValidationResult:
        """Check that a URL is present and points at youtube.com or youtu.be"""
        if not url:
            return UrlValidationResult.MISSING

        if not isinstance(url, str):
            return UrlValidationResult.INVALID

        if not YOUTUBE_URL_PATTERN.fullmatch(url):
            return UrlValidationResult.INVALID

        return UrlValidationResult.OK


class OriginPolicy:
    """Cross-origin allow-list. Requests without an Origin header always pass."""

    def __init__(self, allowed_origins: Iterable[str], exempt_prefixes: Iterable[str] = ()):
        self.allowed_origins = frozenset(allowed_origins)
        self.exempt_prefixes = tuple(exempt_prefixes)

    def is_allowed(self, origin: Optional[str]) -> bool:
        return not origin or origin in self.allowed_origins

    def is_exempt(self, path: str) -> bool:
        return any(path == prefix or path.startswith(prefix + "/") for prefix in self.exempt_prefixes)

    def permits(self, path: str, origin: Optional[str]) -> bool:
        return self.is_exempt(path) or self.is_allowed(origin)
