"""
Gotenberg PDF merge client.

Gotenberg's PDF engines module concatenates the uploaded files in the order
they appear in the multipart body:

  POST {GOTENBERG_URL}/forms/pdfengines/merge
  files=part-1.pdf, files=part-2.pdf, ...   -> merged PDF bytes
"""

import logging

import httpx

from send_bridge.config import Settings
from send_bridge.services.errors import RemoteServiceError

logger = logging.getLogger(__name__)

SERVICE_NAME = "Gotenberg"
MERGE_PATH = "/forms/pdfengines/merge"
FORM_FIELD = "files"


class GotenbergClient:
    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self._settings = settings
        self._http = http_client
        self._merge_url = settings.gotenberg_url.rstrip("/") + MERGE_PATH

    async def merge_pdfs(self, pdfs: list[bytes]) -> bytes:
        """
        Merge PDFs in the given order and return the merged document.

        Raises:
            RemoteServiceError: Non-2xx response, timeout, or transport error.
        """
        files = [
            (FORM_FIELD, (f"part-{idx}.pdf", pdf, "application/pdf"))
            for idx, pdf in enumerate(pdfs, start=1)
        ]

        try:
            response = await self._http.post(
                self._merge_url,
                files=files,
                timeout=self._settings.timeout_seconds,
            )
        except httpx.TimeoutException:
            raise RemoteServiceError(
                SERVICE_NAME, f"merge timed out after {self._settings.timeout_ms}ms"
            )
        except httpx.HTTPError as e:
            raise RemoteServiceError(SERVICE_NAME, f"merge request failed: {e}")

        if not response.is_success:
            raise RemoteServiceError(
                SERVICE_NAME,
                f"merge returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        logger.info(f"Merged {len(pdfs)} PDFs into {len(response.content)} bytes")
        return response.content
