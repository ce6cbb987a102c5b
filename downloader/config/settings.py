import json
import os
import logging
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, validator

logger = logging.getLogger(__name__)

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
CONFIG_PATH = os.getenv("CONFIG_PATH", "config.json")

DEFAULT_ALLOWED_ORIGINS = ["http://localhost:5173", "http://localhost:4173"]

class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=3000, ge=1, le=65535, description="Listen port")

class CorsConfig(BaseModel):
    allowed_origins: List[str] = Field(default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS), description="Origins allowed to call the API")
    allow_credentials: bool = Field(default=True, description="Allow credentialed cross-origin requests")

class StorageConfig(BaseModel):
    downloads_dir: str = Field(default=os.path.join(PROJECT_ROOT, "downloads"), description="Directory holding finished downloads")

class RetentionConfig(BaseModel):
    enabled: bool = Field(default=True, description="Run the periodic cleanup task")
    interval_seconds: int = Field(default=3600, ge=1, description="Seconds between cleanup sweeps")
    max_age_seconds: int = Field(default=3600, ge=0, description="Files older than this are deleted")

class YtDlpConfig(BaseModel):
    binary: str = Field(default="yt-dlp", description="yt-dlp executable")
    check_certificates: bool = Field(default=False, description="Verify TLS certificates")
    prefer_free_formats: bool = Field(default=True, description="Prefer free container formats")
    merge_output_format: str = Field(default="mp4", description="Container used when merging streams")
    force_overwrites: bool = Field(default=False, description="Overwrite an existing file with the same name")

class DownloadConfig(BaseModel):
    timeout_seconds: Optional[int] = Field(default=None, ge=1, description="Per-invocation timeout, unset waits forever")
    stderr_max_lines: int = Field(default=50, ge=1, description="stderr lines kept for error details")

class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field(default="%(message)s", description="Log format")
    enable_rich: bool = Field(default=True, description="Enable rich console logging")

    @validator('level')
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

class I18nConfig(BaseModel):
    default_locale: str = Field(default="en", description="Default locale")
    supported_locales: list = Field(default=["en", "ja"], description="Supported locales")

class ApiConfig(BaseModel):
    title: str = Field(default="yt-dlp Downloader API", description="API title")
    version: str = Field(default="1.0.0", description="API version")
    debug: bool = Field(default=False, description="Enable debug mode")

class Config(BaseModel):
    """Main configuration model"""
    server: ServerConfig = Field(default_factory=ServerConfig)
    cors: CorsConfig = Field(default_factory=CorsConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    retention: RetentionConfig = Field(default_factory=RetentionConfig)
    ytdlp: YtDlpConfig = Field(default_factory=YtDlpConfig)
    download: DownloadConfig = Field(default_factory=DownloadConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    i18n: I18nConfig = Field(default_factory=I18nConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    @staticmethod
    def read_file(config_path: str) -> Dict[str, Any]:
        """Read raw configuration data from a JSON file"""
        if not os.path.exists(config_path):
            logger.info(f"Config file {config_path} not found, using defaults")
            return {}

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = json.load(f)
            if not isinstance(config_data, dict):
                logger.error(f"Config file {config_path} must hold a JSON object, ignoring it")
                return {}
            logger.info(f"Configuration loaded from {config_path}")
            return config_data
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load config from {config_path}: {str(e)}")
            logger.info("Using default configuration")
            return {}

    @staticmethod
    def read_env() -> Dict[str, Any]:
        """Read configuration overrides from environment variables"""
        config_data: Dict[str, Any] = {}

        # Server
        server = {}
        if os.getenv("HOST"):
            server["host"] = os.getenv("HOST")
        if os.getenv("PORT"):
            server["port"] = int(os.getenv("PORT"))
        if server:
            config_data["server"] = server

        # CORS
        if os.getenv("ALLOWED_ORIGINS"):
            config_data["cors"] = {"allowed_origins": parse_origins(os.getenv("ALLOWED_ORIGINS"))}

        # Storage
        if os.getenv("DOWNLOADS_DIR"):
            config_data["storage"] = {"downloads_dir": os.getenv("DOWNLOADS_DIR")}

        # Retention
        retention = {}
        if os.getenv("RETENTION_ENABLED"):
            retention["enabled"] = os.getenv("RETENTION_ENABLED").lower() == "true"
        if os.getenv("RETENTION_INTERVAL_SECONDS"):
            retention["interval_seconds"] = int(os.getenv("RETENTION_INTERVAL_SECONDS"))
        if os.getenv("RETENTION_MAX_AGE_SECONDS"):
            retention["max_age_seconds"] = int(os.getenv("RETENTION_MAX_AGE_SECONDS"))
        if retention:
            config_data["retention"] = retention

        # yt-dlp
        if os.getenv("YT_DLP_BINARY"):
            config_data["ytdlp"] = {"binary": os.getenv("YT_DLP_BINARY")}

        # Download
        if os.getenv("DOWNLOAD_TIMEOUT"):
            config_data["download"] = {"timeout_seconds": int(os.getenv("DOWNLOAD_TIMEOUT"))}

        # Logging
        if os.getenv("LOG_LEVEL"):
            config_data["logging"] = {"level": os.getenv("LOG_LEVEL")}

        # i18n
        if os.getenv("DEFAULT_LOCALE"):
            config_data["i18n"] = {"default_locale": os.getenv("DEFAULT_LOCALE")}

        # API
        if os.getenv("API_DEBUG"):
            config_data["api"] = {"debug": os.getenv("API_DEBUG").lower() == "true"}

        return config_data

def parse_origins(raw: str) -> List[str]:
    """Split a comma-separated origin list"""
    return [origin.strip() for origin in raw.split(",") if origin.strip()]

def merge_sections(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Merge section dicts one level deep, overrides winning"""
    merged = {key: dict(value) if isinstance(value, dict) else value for key, value in base.items()}
    for section, values in overrides.items():
        if isinstance(values, dict) and isinstance(merged.get(section), dict):
            merged[section].update(values)
        else:
            merged[section] = values
    return merged

def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration with priority: env vars > config.json > defaults"""
    file_data = Config.read_file(config_path or CONFIG_PATH)
    return Config(**merge_sections(file_data, Config.read_env()))

# Global config instance
config = load_config()
