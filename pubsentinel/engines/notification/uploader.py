"""ReportUploader — attach a file to a Slack thread via the external upload flow.

The flow has three phases that run strictly in order, each exactly once:

1. request  — ``files.getUploadURLExternal`` with filename and byte length,
   answered with an upload URL and a file id.
2. transfer — the full file body is sent to the upload URL in one request.
3. complete — ``files.completeUploadExternal`` shares the file in the channel,
   inside the thread when a thread ``ts`` is known.

Any failure raises :class:`UploadError` naming the phase.
"""

from __future__ import annotations

from enum import Enum

import httpx
import structlog

from pubsentinel.engines.notification.slack_client import SlackClient
from pubsentinel.exceptions import SlackApiError, UploadError

log = structlog.get_logger("pubsentinel.engine.notification")


class UploadPhase(str, Enum):
    REQUEST = "request"
    TRANSFER = "transfer"
    COMPLETE = "complete"


class ReportUploader:
    def __init__(self, slack: SlackClient) -> None:
        self._slack = slack

    async def upload(
        self,
        content: bytes,
        filename: str,
        title: str,
        channel_id: str,
        thread_ts: str | None = None,
    ) -> str:
        """Upload *content* and return the Slack file id."""
        upload_url, file_id = await self._request(filename, len(content))
        await self._transfer(upload_url, content)
        await self._complete(file_id, title, channel_id, thread_ts)
        log.info(
            "upload.completed",
            filename=filename,
            file_id=file_id,
            size=len(content),
            thread_ts=thread_ts,
        )
        return file_id

    async def _request(self, filename: str, length: int) -> tuple[str, str]:
        try:
            data = await self._slack.get_upload_url_external(filename, length)
        except (SlackApiError, httpx.HTTPError) as exc:
            raise UploadError(UploadPhase.REQUEST.value, str(exc) or type(exc).__name__) from exc

        upload_url = data.get("upload_url") if data else None
        file_id = data.get("file_id") if data else None
        if not upload_url or not file_id:
            raise UploadError(UploadPhase.REQUEST.value, "response missing upload_url or file_id")
        return upload_url, file_id

    async def _transfer(self, upload_url: str, content: bytes) -> None:
        try:
            resp = await self._slack.upload_to_url(upload_url, content)
        except httpx.HTTPError as exc:
            raise UploadError(UploadPhase.TRANSFER.value, str(exc) or type(exc).__name__) from exc

        if resp.status_code >= 300:
            raise UploadError(
                UploadPhase.TRANSFER.value,
                f"HTTP {resp.status_code} {resp.reason_phrase}".rstrip(),
            )

    async def _complete(
        self,
        file_id: str,
        title: str,
        channel_id: str,
        thread_ts: str | None,
    ) -> None:
        try:
            await self._slack.complete_upload_external(file_id, title, channel_id, thread_ts)
        except (SlackApiError, httpx.HTTPError) as exc:
            raise UploadError(UploadPhase.COMPLETE.value, str(exc) or type(exc).__name__) from exc
