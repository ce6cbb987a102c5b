import re
import unicodedata


def truncate_bytes(text: str, max_bytes: int) -> str:
    """Cut text to at most max_bytes of UTF-8 without splitting a character"""
    return text.encode("utf-8")[:max_bytes].decode("utf-8", errors="ignore")


def sanitize_filename(name: str, max_bytes: int = 200) -> str:
    """Sanitize a filename component so it stays inside its directory on any platform"""
    name = unicodedata.normalize("NFKC", name)
    name = re.sub(r'[\\/:*?"<>|\x00-\x1f]', '_', name)
    # Limits such as NAME_MAX are in bytes, not characters
    name = truncate_bytes(name, max_bytes).strip()

    # "." and ".." would escape or alias the directory
    if name.strip(".") == "":
        name = name.replace(".", "_")

    windows_reserved = {
        'CON', 'PRN', 'AUX', 'NUL',
        'COM1', 'COM2', 'COM3', 'COM4', 'COM5', 'COM6', 'COM7', 'COM8', 'COM9',
        'LPT1', 'LPT2', 'LPT3', 'LPT4', 'LPT5', 'LPT6', 'LPT7', 'LPT8', 'LPT9'
    }
    if name.upper() in windows_reserved:
        name = f"_{name}"

    return name or "video"
