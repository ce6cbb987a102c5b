from enum import Enum, auto
from typing import Optional


class ToolErrorKind(Enum):
    """Why an external tool invocation failed"""
    NOT_FOUND = auto()
    FAILED = auto()
    BAD_OUTPUT = auto()
    TIMEOUT = auto()


class ExternalToolError(Exception):
    """
    Failure of a yt-dlp invocation.
    Callers match on `kind`; `raw_message` is what gets reported to clients.
    """

    def __init__(self, kind: ToolErrorKind, raw_message: str):
        super().__init__(raw_message)
        self.kind = kind
        self.raw_message = raw_message


class ApiError(Exception):
    """Error rendered as a JSON body of the form {error, details?}"""

    def __init__(self, status_code: int, error: str, details: Optional[str] = None):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body
