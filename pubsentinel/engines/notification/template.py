"""Slack Block Kit rendering for dependency check results."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pubsentinel.engines.report.builder import Report

MAX_LISTED_PACKAGES = 5

UPDATES_TITLE = "Flutter dependency update notice"
NO_UPDATES_TITLE = "Flutter dependency check result"


def render_notification(report: Report, checked_at: datetime) -> tuple[str, list[dict[str, Any]]]:
    """Return (fallback_text, blocks) for the check summary message."""
    title = UPDATES_TITLE if report.has_updates else NO_UPDATES_TITLE
    header_text = f"🔄 {title}" if report.has_updates else f"✅ {title}"

    blocks: list[dict[str, Any]] = [
        {"type": "header", "text": {"type": "plain_text", "text": header_text}},
        {
            "type": "section",
            "fields": [
                {"type": "mrkdwn", "text": f"*Repositories*\n{report.total}"},
                {"type": "mrkdwn", "text": f"*Succeeded*\n{report.succeeded}"},
                {"type": "mrkdwn", "text": f"*Failed*\n{report.failed}"},
            ],
        },
    ]

    for result in report.results:
        if result.error:
            blocks.append(
                _section(f"*❌ {result.repository.name}*\nError: {result.error}")
            )
            continue

        if not result.has_updates:
            continue

        lines = [f"*{result.repository.name}*"]
        if result.runtime.update_available:
            lines.append(f"Flutter: {result.runtime.current} → {result.runtime.latest}")

        outdated = result.outdated_packages
        if outdated:
            lines.append(f"Packages with updates ({len(outdated)}):")
            lines.extend(
                f"• {p.name}: {p.record.current} → {p.record.latest}"
                for p in outdated[:MAX_LISTED_PACKAGES]
            )
            if len(outdated) > MAX_LISTED_PACKAGES:
                lines.append(f"… and {len(outdated) - MAX_LISTED_PACKAGES} more")

        blocks.append(_section("\n".join(lines)))

    blocks.append(
        {
            "type": "context",
            "elements": [
                {
                    "type": "mrkdwn",
                    "text": f"Last checked: {checked_at.strftime('%Y-%m-%d %H:%M:%S %Z').strip()}",
                }
            ],
        }
    )
    return title, blocks


def _section(text: str) -> dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}
