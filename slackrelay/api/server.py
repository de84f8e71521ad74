"""FastAPI server — forwards uploaded files and submitted URLs to Slack."""

from __future__ import annotations

import asyncio
import logging
import pathlib
from contextlib import asynccontextmanager

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse
from pydantic import BaseModel

from slackrelay.config import Settings, with_legacy_upload_credentials
from slackrelay.slack.uploader import SlackUploader, UploadResult

logger = logging.getLogger("slackrelay")

STATIC_DIR = pathlib.Path(__file__).resolve().parents[1] / "static"

URL_MESSAGE = "새 웹사이트 주소가 입력되었습니다: {url}"
URL_SENT = "URL이 전송되었습니다."
URL_FAILED = "URL 전송에 실패했습니다."
FILES_ALL_OK = "모든 파일이 성공적으로 업로드되었습니다."
FILES_PARTIAL = "일부 또는 모든 파일 업로드에 실패했습니다."
FILES_FAILED = "파일 전송에 실패했습니다."


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------

class SendUrlRequest(BaseModel):
    url: str


class SendFilesResponse(BaseModel):
    message: str
    results: list[UploadResult]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _read_url_payload(request: Request) -> SendUrlRequest:
    """Accept ``url`` from either a JSON body or an HTML form."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        data = await request.json()
    else:
        data = dict(await request.form())
    return SendUrlRequest.model_validate(data)


async def _upload_one(uploader: SlackUploader, upload: UploadFile) -> UploadResult:
    content = await upload.read()
    return await uploader.upload_file(upload.filename or "upload", content)


# ---------------------------------------------------------------------------
# Route registration
# ---------------------------------------------------------------------------

def _register_routes(application: FastAPI) -> None:
    """Attach all endpoint handlers to *application*."""

    def _get_uploader(app: FastAPI) -> SlackUploader:
        return app.state.uploader

    @application.get("/")
    async def index():
        """Serve the upload form."""
        return FileResponse(str(STATIC_DIR / "index.html"))

    @application.post("/send-url")
    async def send_url(request: Request):
        """Post a submitted website address to the Slack webhook."""
        try:
            payload = await _read_url_payload(request)
            await _get_uploader(application).post_webhook(URL_MESSAGE.format(url=payload.url))
        except Exception as e:
            logger.error("URL forwarding failed: %s", e)
            return PlainTextResponse(URL_FAILED, status_code=500)
        return PlainTextResponse(URL_SENT, status_code=200)

    @application.post("/send-files")
    async def send_files(files: list[UploadFile] = File(default=[])):
        """Upload every submitted file to the configured channel."""
        uploader = _get_uploader(application)
        try:
            results = await asyncio.gather(*(_upload_one(uploader, f) for f in files))
        except Exception as e:
            logger.error("File forwarding failed: %s", e)
            return JSONResponse(
                status_code=500,
                content={"message": FILES_FAILED, "error": str(e)},
            )

        all_ok = all(r.success for r in results)
        body = SendFilesResponse(
            message=FILES_ALL_OK if all_ok else FILES_PARTIAL,
            results=list(results),
        )
        return JSONResponse(status_code=200 if all_ok else 207, content=body.model_dump())

    @application.get("/api/health")
    async def health():
        return {"status": "ok", "service": "slackrelay"}


# ---------------------------------------------------------------------------
# Lifespan — initialise shared state once on startup
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(application: FastAPI):
    # --- Load and validate settings ---
    settings = with_legacy_upload_credentials(Settings())

    if not settings.slack_bot_token:
        raise RuntimeError("Missing required: SLACK_BOT_TOKEN")
    if not settings.slack_channel_id:
        raise RuntimeError("Missing required: SLACK_CHANNEL_ID")
    if not settings.slack_webhook_url:
        logger.warning("SLACK_WEBHOOK_URL not set — /send-url will fail")

    uploader = _build_uploader(settings)
    application.state.settings = settings
    application.state.uploader = uploader

    logger.info("Upload server started on %s:%s", settings.host, settings.port)
    yield


def _build_uploader(settings: Settings) -> SlackUploader:
    return SlackUploader(
        token=settings.slack_bot_token,
        channel_id=settings.slack_channel_id,
        webhook_url=settings.slack_webhook_url,
    )


# ---------------------------------------------------------------------------
# App factory + default instance
# ---------------------------------------------------------------------------

def create_app(
    settings: Settings | None = None,
    uploader: SlackUploader | None = None,
) -> FastAPI:
    """Create and return the FastAPI application.

    When *settings* is provided the lifespan hook is skipped and the uploader
    is built from it unless one is passed in (useful for testing).
    """
    use_lifespan = settings is None

    application = FastAPI(
        title="Slack Relay Upload API",
        description="Forward files and URLs to Slack",
        version="0.1.0",
        lifespan=lifespan if use_lifespan else None,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if settings is not None:
        application.state.settings = settings
        application.state.uploader = uploader or _build_uploader(settings)

    _register_routes(application)
    return application


# Default app instance — used by ``uvicorn slackrelay.api.server:app``
app = create_app()
