"""
Google Drive PDF downloader.

Drive serves small files directly from the download URL. For files above its
virus-scan threshold it answers with an HTML interstitial instead, embedding a
one-time ``confirm=<token>`` link and setting session cookies. The download
then has to be repeated with the token appended and those cookies sent back.

The flow is split into two steps so each can be tested on its own:

  first_attempt(file_id)                   -> DirectDownload | ConfirmationRequired
  confirm_download(file_id, token, cookie) -> bytes

fetch_pdf() chains them.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional, Union

import httpx

from send_bridge.config import Settings
from send_bridge.services.drive_links import build_drive_download_url
from send_bridge.services.errors import (
    ConfirmTokenNotFoundError,
    FileTooLargeError,
    RemoteServiceError,
    UnexpectedContentTypeError,
)
from send_bridge.services.sizes import bytes_to_mb

logger = logging.getLogger(__name__)

SERVICE_NAME = "Google Drive"
PDF_CONTENT_TYPE = "application/pdf"
USER_AGENT = "Mozilla/5.0"

_CONFIRM_TOKEN_RE = re.compile(r"confirm=([0-9A-Za-z_]+)&")


@dataclass
class DirectDownload:
    """The first response already was the PDF."""
    content: bytes


@dataclass
class ConfirmationRequired:
    """The first response was the large-file interstitial."""
    token: str
    cookie_header: str = ""   # "name=value; name2=value2", empty when none were set


FirstAttempt = Union[DirectDownload, ConfirmationRequired]


def cookie_header_from(response: httpx.Response) -> str:
    """Collapse a response's Set-Cookie headers into a single Cookie request header value."""
    pairs = [c.split(";", 1)[0].strip() for c in response.headers.get_list("set-cookie")]
    return "; ".join(p for p in pairs if p)


def find_confirm_token(html: str) -> Optional[str]:
    m = _CONFIRM_TOKEN_RE.search(html)
    return m.group(1) if m else None


class DriveFetcher:
    """Downloads publicly shared PDFs from Google Drive."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self._settings = settings
        self._http = http_client

    async def fetch_pdf(self, file_id: str) -> bytes:
        """
        Download the PDF behind a Drive file id.

        Raises:
            FileTooLargeError: The PDF exceeds MAX_FILE_MB.
            ConfirmTokenNotFoundError: Not a PDF and no interstitial token found.
            UnexpectedContentTypeError: The confirmed download is still not a PDF.
            RemoteServiceError: Drive returned 4xx/5xx, timed out, or the
                                connection failed.
        """
        step = await self.first_attempt(file_id)
        if isinstance(step, DirectDownload):
            return step.content

        logger.info(f"Drive file {file_id} needs download confirmation")
        return await self.confirm_download(file_id, step.token, step.cookie_header)

    async def first_attempt(self, file_id: str) -> FirstAttempt:
        response = await self._get(build_drive_download_url(file_id))
        content_type = _content_type(response)

        if PDF_CONTENT_TYPE in content_type:
            content = self._check_size(response.content)
            logger.info(f"Downloaded Drive file {file_id} directly ({len(content)} bytes)")
            return DirectDownload(content=content)

        html = response.content.decode("utf-8", errors="replace")
        token = find_confirm_token(html)
        if not token:
            raise ConfirmTokenNotFoundError(
                content_type,
                f"Not PDF and confirm token not found (content-type: {content_type or 'unknown'})",
            )

        return ConfirmationRequired(token=token, cookie_header=cookie_header_from(response))

    async def confirm_download(self, file_id: str, token: str, cookie_header: str = "") -> bytes:
        headers = {"Cookie": cookie_header} if cookie_header else None
        response = await self._get(build_drive_download_url(file_id, token), headers)
        content_type = _content_type(response)

        if PDF_CONTENT_TYPE not in content_type:
            raise UnexpectedContentTypeError(
                content_type,
                f"Confirm download still not PDF (content-type: {content_type or 'unknown'})",
            )

        content = self._check_size(response.content)
        logger.info(f"Downloaded Drive file {file_id} after confirmation ({len(content)} bytes)")
        return content

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _get(self, url: str, extra_headers: Optional[dict] = None) -> httpx.Response:
        """
        GET a Drive URL, following at most ``max_redirects`` hops.

        Redirects are followed here rather than by the client so the cap comes
        from Settings and the same headers (including an explicit Cookie) go
        to every hop.
        """
        headers = {"User-Agent": USER_AGENT}
        if extra_headers:
            headers.update(extra_headers)

        target = httpx.URL(url)
        hops = 0
        while True:
            response = await self._get_once(target, headers)
            if not response.is_redirect:
                break
            if hops >= self._settings.max_redirects:
                raise RemoteServiceError(
                    SERVICE_NAME,
                    f"download exceeded {self._settings.max_redirects} redirects",
                    status_code=response.status_code,
                )
            hops += 1
            target = response.url.join(response.headers["location"])

        if response.status_code >= 400:
            raise RemoteServiceError(
                SERVICE_NAME,
                f"download returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response

    async def _get_once(self, url: httpx.URL, headers: dict) -> httpx.Response:
        try:
            return await self._http.get(
                url,
                headers=headers,
                timeout=self._settings.timeout_seconds,
                follow_redirects=False,
            )
        except httpx.TimeoutException:
            raise RemoteServiceError(
                SERVICE_NAME, f"download timed out after {self._settings.timeout_ms}ms"
            )
        except httpx.HTTPError as e:
            raise RemoteServiceError(SERVICE_NAME, f"download failed: {e}")

    def _check_size(self, content: bytes) -> bytes:
        if len(content) > self._settings.max_file_bytes:
            raise FileTooLargeError(len(content), f"PDF too large: {bytes_to_mb(len(content))}MB")
        return content


def _content_type(response: httpx.Response) -> str:
    return (response.headers.get("content-type") or "").lower()
