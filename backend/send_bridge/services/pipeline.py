"""
Merge-and-deliver orchestration.

  fetch both PDFs concurrently -> merge (in link order) -> base64 -> email

Any failure aborts the run before the email step, so a caller either gets the
complete merged file delivered or nothing is sent.
"""

import asyncio
import base64
import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

from send_bridge.models.send import DeliveryPayload
from send_bridge.services.drive_fetcher import DriveFetcher
from send_bridge.services.email_sender import BrevoClient
from send_bridge.services.merge_client import GotenbergClient
from send_bridge.services.sizes import bytes_to_mb

logger = logging.getLogger(__name__)


@dataclass
class SendJob:
    """A validated /send request with both Drive ids already resolved."""
    file_ids: list[str]
    to_email: str
    subject: str
    html: str
    merged_file_name: Optional[str] = None


@dataclass
class SendResult:
    merged_size_bytes: int
    merged_size_mb: float
    attachment_name: str
    brevo: dict[str, Any]


def default_attachment_name() -> str:
    return f"merged-{int(time.time() * 1000)}.pdf"


class SendPipeline:
    def __init__(self, fetcher: DriveFetcher, merger: GotenbergClient, mailer: BrevoClient):
        self._fetcher = fetcher
        self._merger = merger
        self._mailer = mailer

    async def fetch_all(self, file_ids: list[str]) -> list[bytes]:
        """Download every file concurrently; the first failure cancels the rest."""
        tasks = [asyncio.create_task(self._fetcher.fetch_pdf(fid)) for fid in file_ids]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            # Let cancelled siblings unwind before the caller closes the HTTP client.
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def run(self, job: SendJob) -> SendResult:
        pdfs = await self.fetch_all(job.file_ids)
        merged = await self._merger.merge_pdfs(pdfs)

        attachment_name = job.merged_file_name or default_attachment_name()
        brevo_response = await self._mailer.send_email(
            DeliveryPayload(
                to_email=job.to_email,
                subject=job.subject,
                html=job.html,
                attachment_name=attachment_name,
                attachment_b64=base64.b64encode(merged).decode("ascii"),
            )
        )

        return SendResult(
            merged_size_bytes=len(merged),
            merged_size_mb=bytes_to_mb(len(merged)),
            attachment_name=attachment_name,
            brevo=brevo_response,
        )
