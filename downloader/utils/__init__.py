from .filename import sanitize_filename

__all__ = ["sanitize_filename"]
