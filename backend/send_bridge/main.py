"""
send-bridge API
FastAPI application that merges two Google Drive PDFs with Gotenberg and
emails the result through Brevo.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from send_bridge.config import Settings
from send_bridge.routers import send

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI app.

    Settings are resolved once here (from the environment unless given) and
    exposed to request handlers through ``app.state.settings``.
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"send-bridge listening on {settings.port} "
            f"(merge service: {settings.gotenberg_url}, max file: {settings.max_file_mb}MB)"
        )
        if not settings.brevo_api_key:
            logger.warning("BREVO_API_KEY is not set; every /send request will fail")
        if not settings.brevo_sender_email:
            logger.warning("BREVO_SENDER_EMAIL is not set; every /send request will fail")
        yield

    app = FastAPI(
        title="send-bridge",
        description="Merge two Google Drive PDFs and email the result",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        # Bodies without Content-Length (chunked) are not checked here.
        length = request.headers.get("content-length")
        if length and length.isdigit() and int(length) > settings.max_body_bytes:
            return JSONResponse(
                status_code=413,
                content={"ok": False, "message": "Request body too large"},
            )
        return await call_next(request)

    app.include_router(send.router, tags=["send"])

    @app.get("/health", response_class=PlainTextResponse)
    async def health():
        return "ok"

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
