"""Notification engine — Slack message and report upload."""

from pubsentinel.engines.notification.runner import NotificationOutcome, NotificationRunner
from pubsentinel.engines.notification.slack_client import SlackClient
from pubsentinel.engines.notification.uploader import ReportUploader, UploadPhase

__all__ = [
    "NotificationOutcome",
    "NotificationRunner",
    "ReportUploader",
    "SlackClient",
    "UploadPhase",
]
