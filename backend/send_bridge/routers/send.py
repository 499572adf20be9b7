"""
Send relay router.

Endpoints:
  POST /send   — merge two Drive-shared PDFs and email the result

Request body (JSON):
  toEmail         recipient address                  (required)
  emailSubject    subject line                       (required)
  emailHtml       HTML body                          (required)
  driveLink1      share link of the first PDF        (required)
  driveLink2      share link of the second PDF       (required)
  mergedFileName  attachment name (default: merged-<epoch ms>.pdf)

Responses:
  200  {"ok": true, "mergedSizeMB": 1.2, "brevo": {...}}
  400  {"ok": false, "message": "Missing required fields", "missing": [...]}
  400  {"ok": false, "message": "Could not extract Drive fileId", "detail": {"id1": ..., "id2": ...}}
  500  {"ok": false, "message": "Send failed", "error": "<reason>"}
"""

import json
import logging
from typing import AsyncIterator

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from send_bridge.config import Settings
from send_bridge.models.send import ErrorResponse, SendRequest, SendResponse
from send_bridge.services.drive_fetcher import DriveFetcher
from send_bridge.services.drive_links import extract_drive_file_id
from send_bridge.services.email_sender import BrevoClient
from send_bridge.services.http_client import new_http_client
from send_bridge.services.merge_client import GotenbergClient
from send_bridge.services.pipeline import SendJob, SendPipeline

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_http_client(
    settings: Settings = Depends(get_settings),
) -> AsyncIterator[httpx.AsyncClient]:
    """
    Yield an HTTP client scoped to a single /send request.

    A fresh client per request keeps connections from leaking between
    concurrent requests; its cookie jar stores nothing.
    """
    async with new_http_client(settings) as client:
        yield client


def get_pipeline(
    settings: Settings = Depends(get_settings),
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> SendPipeline:
    return SendPipeline(
        fetcher=DriveFetcher(settings, http_client),
        merger=GotenbergClient(settings, http_client),
        mailer=BrevoClient(settings, http_client),
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _error(status_code: int, **fields) -> JSONResponse:
    # Only drop unset top-level keys; detail must keep null ids.
    body = {k: v for k, v in ErrorResponse(**fields).model_dump().items() if v is not None}
    return JSONResponse(status_code=status_code, content=body)


async def _read_json_object(request: Request) -> dict:
    """Return the body as a dict; invalid JSON or a non-object body becomes {}."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------

@router.post("/send")
async def send(request: Request, pipeline: SendPipeline = Depends(get_pipeline)):
    """Merge the two linked PDFs and email the result."""
    try:
        payload = SendRequest.model_validate(await _read_json_object(request))
    except ValidationError as e:
        return _error(400, message="Invalid request body", error=str(e))

    missing = payload.missing_fields()
    if missing:
        return _error(400, message="Missing required fields", missing=missing)

    id1 = extract_drive_file_id(payload.drive_link1)
    id2 = extract_drive_file_id(payload.drive_link2)
    if not id1 or not id2:
        logger.warning(f"Could not extract Drive fileId (id1={id1}, id2={id2})")
        return _error(
            400,
            message="Could not extract Drive fileId",
            detail={"id1": id1, "id2": id2},
        )

    job = SendJob(
        file_ids=[id1, id2],
        to_email=payload.to_email,
        subject=payload.email_subject,
        html=payload.email_html,
        merged_file_name=payload.merged_file_name,
    )

    try:
        result = await pipeline.run(job)
    except Exception as e:
        logger.error(f"Send failed for files {id1}, {id2}: {e}")
        return _error(500, message="Send failed", error=str(e) or type(e).__name__)

    logger.info(
        f"Sent merged PDF of files {id1}, {id2} ({result.merged_size_bytes} bytes)"
    )
    return SendResponse(merged_size_mb=result.merged_size_mb, brevo=result.brevo).model_dump(
        by_alias=True
    )
