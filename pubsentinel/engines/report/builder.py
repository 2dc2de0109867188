"""Report building — fold check results into summary rows."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from pubsentinel.engines.version_checker.models import CheckResult


class OverallStatus(str, Enum):
    UP_TO_DATE = "upToDate"
    NEEDS_UPDATE = "needsUpdate"
    ERROR = "error"


@dataclass(frozen=True)
class SummaryRow:
    repository: str
    runtime_current: str
    runtime_latest: str
    runtime_update_needed: bool
    outdated_package_count: int
    total_package_count: int
    overall_status: OverallStatus
    error: str | None = None


@dataclass(frozen=True)
class Report:
    """Check results in input order, one per repository."""

    results: tuple[CheckResult, ...]

    @property
    def summary(self) -> list[SummaryRow]:
        return [summarize(result) for result in self.results]

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.error)

    @property
    def succeeded(self) -> int:
        return self.total - self.failed

    @property
    def has_updates(self) -> bool:
        return any(r.has_updates for r in self.results)

    @property
    def outdated_package_count(self) -> int:
        """Outdated packages across all repositories that were checked successfully."""
        return sum(len(r.outdated_packages) for r in self.results if not r.error)


def build_report(results: Iterable[CheckResult]) -> Report:
    return Report(results=tuple(results))


def summarize(result: CheckResult) -> SummaryRow:
    """Derive the summary-sheet row for one repository."""
    if result.error:
        return SummaryRow(
            repository=result.repository.name,
            runtime_current=result.runtime.current,
            runtime_latest=result.runtime.latest,
            runtime_update_needed=False,
            outdated_package_count=0,
            total_package_count=0,
            overall_status=OverallStatus.ERROR,
            error=result.error,
        )

    outdated = len(result.outdated_packages)
    runtime_update = result.runtime.update_available
    status = (
        OverallStatus.NEEDS_UPDATE if runtime_update or outdated > 0 else OverallStatus.UP_TO_DATE
    )
    return SummaryRow(
        repository=result.repository.name,
        runtime_current=result.runtime.current,
        runtime_latest=result.runtime.latest,
        runtime_update_needed=runtime_update,
        outdated_package_count=outdated,
        total_package_count=len(result.packages),
        overall_status=status,
    )
