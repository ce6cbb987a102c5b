import json
from typing import NamedTuple, Optional
from fastapi import Request
from downloader.config.settings import config
from downloader.core.errors import ExternalToolError, ToolErrorKind
from downloader.core.logging import log_info
from downloader.infra.storage import store
from downloader.models.request import DEFAULT_QUALITY
from downloader.models.response import VideoInfo
from downloader.services.format import FormatDecision
from downloader.services.ytdlp import YTDLPCommandBuilder, SubprocessExecutor, check_returncode
from downloader.utils.filename import sanitize_filename
from downloader.utils.locale import safe_url_for_log
from downloader.i18n import i18n

TITLE_MAX_BYTES = 180
QUALITY_MAX_BYTES = 32

class DownloadResult(NamedTuple):
    filename: str
    download_url: str
    video_info: VideoInfo

def build_filename(title: str, quality: str) -> str:
    """
    Stored file name: the same title and quality always map to the same file.
    Kept well under 255 bytes so yt-dlp's .part and .fNNN temp names still fit.
    """
    return f"{sanitize_filename(title, TITLE_MAX_BYTES)}-{sanitize_filename(quality, QUALITY_MAX_BYTES)}.{config.ytdlp.merge_output_format}"

class DownloadService:
    """Fetch a video into the downloads store"""

    @staticmethod
    async def probe(url: str) -> dict:
        """Run yt-dlp in metadata-only mode and return its JSON document"""
        cmd = YTDLPCommandBuilder.build_info_command(url)
        result = await SubprocessExecutor.run(cmd, timeout=config.download.timeout_seconds)
        check_returncode(cmd, result)

        try:
            info = json.loads(result.stdout.decode())
        except ValueError as e:
            raise ExternalToolError(ToolErrorKind.BAD_OUTPUT, f"Could not parse yt-dlp output: {e}") from e

        if not isinstance(info, dict):
            raise ExternalToolError(ToolErrorKind.BAD_OUTPUT, "yt-dlp output is not a JSON object")
        return info

    @staticmethod
    async def download(url: str, quality: Optional[str] = None, request: Optional[Request] = None) -> DownloadResult:
        """
        Probe metadata, then download and remux to MP4.
        Failures of either yt-dlp run surface as ExternalToolError; a partially
        written file is left in place.
        """
        quality = quality or DEFAULT_QUALITY
        safe_url = safe_url_for_log(url)

        format_str = FormatDecision.decide(quality)
        log_info(request, i18n.get("log.format_decided", format=format_str))

        log_info(request, i18n.get("log.probing", url=safe_url))
        info = await DownloadService.probe(url)

        title = str(info.get("title") or info.get("id") or "video")
        filename = build_filename(title, quality)
        output_path = store.path_for(filename)

        cmd = YTDLPCommandBuilder.build_download_command(url, output_path, format_str)
        log_info(request, i18n.get("log.downloading", path=output_path))
        result = await SubprocessExecutor.run(cmd, timeout=config.download.timeout_seconds)
        check_returncode(cmd, result)

        log_info(request, i18n.get("log.download_finished", name=filename))

        return DownloadResult(
            filename=filename,
            download_url=store.public_url(filename),
            video_info=VideoInfo(
                title=info.get("title"),
                thumbnail=info.get("thumbnail"),
                duration=info.get("duration"),
                uploader=info.get("uploader"),
            ),
        )
