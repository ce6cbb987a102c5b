from typing import Optional
from urllib.parse import parse_qs, urlparse
from downloader.config.settings import config

def get_locale(accept_language: Optional[str] = None) -> str:
    """Extract locale from Accept-Language header"""
    if not accept_language:
        return config.i18n.default_locale

    languages = []
    for lang in accept_language.split(","):
        parts = lang.strip().split(";")
        locale = parts[0].split("-")[0].lower()
        languages.append(locale)

    for locale in languages:
        if locale in config.i18n.supported_locales:
            return locale

    return config.i18n.default_locale

def safe_url_for_log(url: str) -> str:
    """Safe URL for logging: keeps the video id, drops other query parameters"""
    try:
        parsed = urlparse(url)
    except ValueError:
        return "invalid_url"

    base_url = f"{parsed.scheme}://{parsed.netloc}{parsed.path}" if parsed.scheme else parsed.path
    video_ids = parse_qs(parsed.query).get("v")
    if video_ids:
        return f"{base_url}?v={video_ids[0]}"
    if parsed.query:
        return f"{base_url}?..."
    return base_url
