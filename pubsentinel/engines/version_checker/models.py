"""Data models for the version checker engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# Placeholder ``latest`` for a dependency whose registry lookup failed.
UNRESOLVED = "N/A"


class Severity(str, Enum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    NONE = "none"


@dataclass(frozen=True)
class Repository:
    """A fleet member, as declared in the repositories config."""

    name: str
    url: str
    description: str | None = None


@dataclass(frozen=True)
class Manifest:
    """Raw manifest content fetched for one run; never persisted."""

    content: str
    pin_file: str | None = None


@dataclass(frozen=True)
class StringConstraint:
    """``name: ^1.2.0`` — the value is the constraint verbatim."""

    value: str

    @property
    def expression(self) -> str:
        return self.value or "any"


@dataclass(frozen=True)
class ObjectConstraint:
    """``name: {version: ^1.2.0, git: ...}`` — only the nested version counts."""

    version: str | None = None
    source: str | None = None

    @property
    def expression(self) -> str:
        return self.version or "any"


ConstraintSpec = StringConstraint | ObjectConstraint


@dataclass(frozen=True)
class DependencyDeclaration:
    """One dependency entry of a manifest after extraction."""

    name: str
    constraint: str
    dev: bool = False
    source: str | None = None


@dataclass(frozen=True)
class DivergenceRecord:
    """Comparison outcome of one declared constraint against the latest version."""

    current: str
    latest: str
    update_available: bool = False
    severity: Severity = Severity.NONE


@dataclass(frozen=True)
class PackageCheck:
    name: str
    record: DivergenceRecord


@dataclass
class CheckResult:
    """Everything learned about one repository in one run.

    When ``error`` is set, ``runtime`` is a placeholder and ``packages`` is empty.
    """

    repository: Repository
    runtime: DivergenceRecord
    packages: list[PackageCheck] = field(default_factory=list)
    error: str | None = None

    @classmethod
    def failed(cls, repository: Repository, latest_runtime: str, error: str) -> CheckResult:
        return cls(
            repository=repository,
            runtime=DivergenceRecord(current="unknown", latest=latest_runtime),
            packages=[],
            error=error,
        )

    @property
    def outdated_packages(self) -> list[PackageCheck]:
        if self.error:
            return []
        return [p for p in self.packages if p.record.update_available]

    @property
    def has_updates(self) -> bool:
        if self.error:
            return False
        return self.runtime.update_available or bool(self.outdated_packages)
