"""NotificationRunner — post the check summary to Slack and attach the spreadsheet."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import structlog

from pubsentinel.engines.notification.slack_client import SlackClient
from pubsentinel.engines.notification.template import render_notification
from pubsentinel.engines.notification.uploader import ReportUploader
from pubsentinel.engines.report.builder import Report
from pubsentinel.exceptions import UploadError

log = structlog.get_logger("pubsentinel.engine.notification")

BOT_USERNAME = "Flutter Version Bot"
BOT_ICON = ":flutter:"
REPORT_TITLE = "Flutter dependency report"


@dataclass(frozen=True)
class NotificationOutcome:
    thread_ts: str
    file_id: str | None = None
    upload_error: str | None = None


class NotificationRunner:
    """Deliver one report: the message first, then the file in its thread."""

    def __init__(self, slack: SlackClient, channel: str) -> None:
        self._slack = slack
        self._uploader = ReportUploader(slack)
        self._channel = channel

    async def notify(
        self,
        report: Report,
        checked_at: datetime,
        workbook: bytes | None = None,
        filename: str | None = None,
    ) -> NotificationOutcome:
        """Post the summary, then upload *workbook* as a thread reply.

        An upload failure is logged and reported in the outcome; the posted
        message stays as it is.
        """
        text, blocks = render_notification(report, checked_at)
        thread_ts = await self._slack.post_message(
            self._channel,
            text,
            blocks,
            username=BOT_USERNAME,
            icon_emoji=BOT_ICON,
        )
        log.info(
            "notification.sent",
            channel=self._channel,
            thread_ts=thread_ts,
            repositories=report.total,
            failed=report.failed,
        )

        if workbook is None or filename is None:
            return NotificationOutcome(thread_ts=thread_ts)

        try:
            file_id = await self._uploader.upload(
                workbook,
                filename=filename,
                title=REPORT_TITLE,
                channel_id=self._channel,
                thread_ts=thread_ts or None,
            )
        except UploadError as exc:
            log.error(
                "upload.failed",
                phase=exc.phase,
                reason=exc.reason,
                filename=filename,
                exc_info=True,
            )
            return NotificationOutcome(thread_ts=thread_ts, upload_error=str(exc))

        return NotificationOutcome(thread_ts=thread_ts, file_id=file_id)
