import functools
from typing import Optional
from fastapi import APIRouter, Request
from downloader.core.errors import ApiError, ExternalToolError
from downloader.core.logging import log_info, log_error
from downloader.core.security import SecurityValidator, UrlValidationResult
from downloader.models.request import DownloadRequest
from downloader.models.response import DownloadResponse
from downloader.services.download import DownloadService
from downloader.utils.locale import get_locale, safe_url_for_log
from downloader.i18n import i18n

router = APIRouter()

@router.post("/download", response_model=DownloadResponse)
async def download_video(request: Request, video_request: Optional[DownloadRequest] = None):
    """Download a YouTube video into the downloads directory and return its link"""

    locale = get_locale(request.headers.get("accept-language"))
    _ = functools.partial(i18n.get, locale=locale)

    video_request = video_request or DownloadRequest()

    validation_result = SecurityValidator.validate_url(video_request.url)
    if validation_result == UrlValidationResult.MISSING:
        raise ApiError(400, _("error.url_required"))
    if validation_result == UrlValidationResult.INVALID:
        raise ApiError(400, _("error.invalid_url"))

    quality = video_request.quality_label
    log_info(request, i18n.get("log.download_requested", url=safe_url_for_log(video_request.url), quality=quality))

    try:
        result = await DownloadService.download(video_request.url, quality, request)
    except ExternalToolError as e:
        log_error(request, i18n.get("log.download_failed", reason=f"{e.kind.name}: {e.raw_message}"))
        raise ApiError(500, _("error.download_failed"), details=e.raw_message)
    except Exception as e:
        log_error(request, i18n.get("log.download_failed", reason=str(e)))
        raise ApiError(500, _("error.download_failed"), details=str(e))

    return DownloadResponse(
        message=_("response.download_completed"),
        downloadUrl=result.download_url,
        videoInfo=result.video_info,
    )
