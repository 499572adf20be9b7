"""
Unit tests for SendPipeline orchestration.

The fetcher, merger and mailer are replaced with AsyncMocks so only the
ordering, concurrency and abort semantics are exercised.
"""

import asyncio
import base64
import re
from unittest.mock import AsyncMock, MagicMock

import pytest

from send_bridge.services.errors import FileTooLargeError, RemoteServiceError
from send_bridge.services.pipeline import SendJob, SendPipeline


def _job(**overrides) -> SendJob:
    base = dict(
        file_ids=["id-one", "id-two"],
        to_email="recipient@example.com",
        subject="Merged",
        html="<p>hi</p>",
        merged_file_name="contract.pdf",
    )
    return SendJob(**{**base, **overrides})


def _pipeline(fetch=None, merged=b"%PDF merged", brevo=None):
    fetcher = MagicMock()
    fetcher.fetch_pdf = fetch or AsyncMock(side_effect=lambda fid: f"pdf:{fid}".encode())
    merger = MagicMock()
    merger.merge_pdfs = AsyncMock(return_value=merged)
    mailer = MagicMock()
    mailer.send_email = AsyncMock(return_value=brevo or {"messageId": "<m1>"})
    return SendPipeline(fetcher, merger, mailer), fetcher, merger, mailer


class TestRun:
    @pytest.mark.asyncio
    async def test_merges_in_link_order_and_emails_base64(self):
        merged = b"%PDF merged" * 1000
        pipeline, fetcher, merger, mailer = _pipeline(merged=merged)

        result = await pipeline.run(_job())

        merger.merge_pdfs.assert_awaited_once_with([b"pdf:id-one", b"pdf:id-two"])
        delivery = mailer.send_email.await_args.args[0]
        assert delivery.to_email == "recipient@example.com"
        assert delivery.subject == "Merged"
        assert delivery.html == "<p>hi</p>"
        assert delivery.attachment_name == "contract.pdf"
        assert base64.b64decode(delivery.attachment_b64) == merged

        assert result.merged_size_bytes == len(merged)
        assert result.merged_size_mb == 0.0
        assert result.brevo == {"messageId": "<m1>"}

    @pytest.mark.asyncio
    async def test_default_attachment_name_uses_epoch_millis(self):
        pipeline, _, _, mailer = _pipeline()

        result = await pipeline.run(_job(merged_file_name=None))

        assert re.fullmatch(r"merged-\d{13}\.pdf", result.attachment_name)
        assert mailer.send_email.await_args.args[0].attachment_name == result.attachment_name

    @pytest.mark.asyncio
    async def test_fetch_failure_sends_nothing(self):
        fetch = AsyncMock(side_effect=FileTooLargeError(30 * 1024 * 1024, "PDF too large: 30.0MB"))
        pipeline, _, merger, mailer = _pipeline(fetch=fetch)

        with pytest.raises(FileTooLargeError):
            await pipeline.run(_job())

        merger.merge_pdfs.assert_not_awaited()
        mailer.send_email.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_merge_failure_sends_nothing(self):
        pipeline, _, merger, mailer = _pipeline()
        merger.merge_pdfs.side_effect = RemoteServiceError("Gotenberg", "merge returned HTTP 500", 500)

        with pytest.raises(RemoteServiceError):
            await pipeline.run(_job())

        mailer.send_email.assert_not_awaited()


class TestFetchAll:
    @pytest.mark.asyncio
    async def test_fetches_run_concurrently(self):
        started = []
        release = asyncio.Event()

        async def fetch(fid):
            started.append(fid)
            if len(started) == 2:
                release.set()
            await asyncio.wait_for(release.wait(), timeout=1)
            return fid.encode()

        pipeline, *_ = _pipeline(fetch=fetch)

        # Would time out if the second fetch only started after the first finished.
        assert await pipeline.fetch_all(["a", "b"]) == [b"a", b"b"]

    @pytest.mark.asyncio
    async def test_first_failure_cancels_sibling_before_raising(self):
        """The sibling has finished unwinding by the time fetch_all raises."""
        cancelled = asyncio.Event()
        unwound = asyncio.Event()

        async def fetch(fid):
            if fid == "bad":
                raise RemoteServiceError("Google Drive", "download returned HTTP 404", 404)
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                await asyncio.sleep(0)  # cleanup that itself yields
                unwound.set()
                raise
            return b"never"

        pipeline, *_ = _pipeline(fetch=fetch)

        with pytest.raises(RemoteServiceError):
            await pipeline.fetch_all(["slow", "bad"])

        assert cancelled.is_set()
        assert unwound.is_set()
