"""One full check run: resolve Flutter, check every repository, report to Slack."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

import structlog

from pubsentinel.config import Config, Settings, require_slack
from pubsentinel.core.github import ManifestFetcher
from pubsentinel.engines.notification.runner import NotificationOutcome, NotificationRunner
from pubsentinel.engines.notification.slack_client import SlackClient
from pubsentinel.engines.report.builder import Report, build_report
from pubsentinel.engines.report.spreadsheet import render_workbook, report_filename
from pubsentinel.engines.version_checker.checker import RepositoryChecker
from pubsentinel.engines.version_checker.registry import RegistryClient

log = structlog.get_logger("pubsentinel.pipeline")


@dataclass(frozen=True)
class RunResult:
    report: Report
    latest_runtime: str
    filename: str
    workbook: bytes | None
    notification: NotificationOutcome | None = None


async def run_checks(
    config: Config,
    settings: Settings,
    *,
    dry_run: bool = False,
    output_dir: Path | None = None,
) -> RunResult:
    """Run every check and deliver the report.

    Missing Slack credentials (unless *dry_run*) and an unresolvable latest
    Flutter release abort before any repository is checked.
    """
    slack_target = None if dry_run else require_slack(settings)
    checked_at = datetime.now(timezone.utc)

    async with RegistryClient() as registry, ManifestFetcher(settings.github_token) as fetcher:
        latest_runtime = await registry.latest_runtime_version()
        log.info("pipeline.latest_runtime", version=latest_runtime)

        checker = RepositoryChecker(
            fetcher,
            registry,
            include_dev_dependencies=config.settings.include_dev_deps,
        )
        results = await checker.check_all(config.repositories, latest_runtime)

    report = build_report(results)
    log.info(
        "pipeline.checked",
        total=report.total,
        succeeded=report.succeeded,
        failed=report.failed,
        outdated_packages=report.outdated_package_count,
    )

    filename = report_filename(checked_at)
    workbook: bytes | None
    try:
        workbook = render_workbook(report)
    except Exception:
        # The summary message still goes out; only the attachment is lost.
        log.error("pipeline.render_failed", filename=filename, exc_info=True)
        workbook = None

    if output_dir is not None and workbook is not None:
        output_dir.mkdir(parents=True, exist_ok=True)
        (output_dir / filename).write_bytes(workbook)
        log.info("pipeline.workbook_written", path=str(output_dir / filename))

    notification: NotificationOutcome | None = None
    if slack_target is not None:
        token, channel = slack_target
        async with SlackClient(token) as slack:
            notification = await NotificationRunner(slack, channel).notify(
                report, checked_at, workbook=workbook, filename=filename
            )

    return RunResult(
        report=report,
        latest_runtime=latest_runtime,
        filename=filename,
        workbook=workbook,
        notification=notification,
    )
