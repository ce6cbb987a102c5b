import uuid
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from downloader.api import health, download
from downloader.config.settings import config
from downloader.core.errors import ApiError, ExternalToolError
from downloader.core.logging import console, setup_logging, log_warning
from downloader.core.security import OriginPolicy
from downloader.core.state import state
from downloader.infra.storage import store, DOWNLOADS_ROUTE
from downloader.services.cleanup import RetentionSweeper
from downloader.services.ytdlp import YTDLPCommandBuilder, SubprocessExecutor
from downloader.utils.locale import get_locale
from downloader.i18n import i18n

setup_logging(config.logging)

# The static mount needs the directory to exist when the app is built
store.ensure()

app = FastAPI(
    title=config.api.title,
    version=config.api.version,
    docs_url="/docs" if config.api.debug else None,
    redoc_url=None
)

origin_policy = OriginPolicy(config.cors.allowed_origins, exempt_prefixes=[DOWNLOADS_ROUTE])

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors.allowed_origins,
    allow_credentials=config.cors.allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def enforce_origin_policy(request: Request, call_next):
    """Reject requests from origins outside the allow-list before routing"""
    origin = request.headers.get("origin")
    if not origin_policy.permits(request.url.path, origin):
        log_warning(request, i18n.get("log.origin_rejected", origin=origin))
        locale = get_locale(request.headers.get("accept-language"))
        error = ApiError(403, i18n.get("error.origin_not_allowed", locale=locale))
        return JSONResponse(status_code=error.status_code, content=error.to_dict())
    return await call_next(request)

@app.middleware("http")
async def assign_request_id(request: Request, call_next):
    request.state.request_id = uuid.uuid4().hex[:8]
    response = await call_next(request)
    response.headers["X-Request-ID"] = request.state.request_id
    return response

@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

# Routes
app.include_router(health.router, tags=["Health"])
app.include_router(download.router, prefix="/api", tags=["Download"])
app.mount(DOWNLOADS_ROUTE, StaticFiles(directory=store.directory), name="downloads")

async def detect_ytdlp_version() -> str:
    try:
        result = await SubprocessExecutor.run(YTDLPCommandBuilder.build_version_command(), timeout=10.0)
    except ExternalToolError as e:
        console.print(f"[yellow]⚠ yt-dlp unavailable: {e.raw_message}[/yellow]")
        return "unknown"
    if result.returncode != 0:
        console.print("[yellow]⚠ yt-dlp --version failed[/yellow]")
        return "unknown"
    return result.stdout.decode().strip() or "unknown"

@app.on_event("startup")
async def startup_event():
    store.ensure()
    console.print(f"[green]✓ Downloads directory ready: {store.directory}[/green]")

    state.ytdlp_version = await detect_ytdlp_version()
    console.print(f"[green]✓ yt-dlp version: {state.ytdlp_version}[/green]")

    if config.retention.enabled:
        state.sweeper = RetentionSweeper(
            store,
            interval_seconds=config.retention.interval_seconds,
            max_age_seconds=config.retention.max_age_seconds,
        )
        state.sweeper.start()
        console.print(f"[green]✓ Cleanup every {config.retention.interval_seconds}s "
                      f"(max age {config.retention.max_age_seconds}s)[/green]")

@app.on_event("shutdown")
async def shutdown_event():
    if state.sweeper:
        await state.sweeper.stop()
        state.sweeper = None
        console.print("[dim]✓ Cleanup stopped[/dim]")

def run() -> None:
    """Serve the app with uvicorn on the configured port"""
    console.print(f"[bold]Server running on port {config.server.port}[/bold]")
    uvicorn.run(app, host=config.server.host, port=config.server.port, log_level=config.logging.level.lower())
