from .errors import ApiError, ExternalToolError, ToolErrorKind

__all__ = ["ApiError", "ExternalToolError", "ToolErrorKind"]
