"""Divergence classification — declared constraint vs. latest published version."""

from __future__ import annotations

import re

from semver import Version

from pubsentinel.engines.version_checker.constraints import satisfies
from pubsentinel.engines.version_checker.models import DivergenceRecord, Severity

_OPERATOR_PREFIX_RE = re.compile(r"^[\^~>=<\s]+")


def base_version(constraint: str) -> str:
    """Strip leading range operators and return the first version token.

    ``"^1.2.0"`` -> ``"1.2.0"``, ``">=1.2.0 <2.0.0"`` -> ``"1.2.0"``.
    """
    stripped = _OPERATOR_PREFIX_RE.sub("", constraint)
    tokens = stripped.split()
    return tokens[0] if tokens else ""


def severity_between(base: Version, latest: Version) -> Severity:
    """First differing component wins: major, then minor, then patch."""
    if latest.major > base.major:
        return Severity.MAJOR
    if latest.minor > base.minor:
        return Severity.MINOR
    if latest.patch > base.patch:
        return Severity.PATCH
    return Severity.NONE


def classify(constraint: str, latest: str) -> DivergenceRecord:
    """Compare *constraint* against *latest*.

    An update is available only when *latest* is newer than the constraint's
    base version and the constraint itself does not already admit it. Never
    raises; anything that is not a semantic version yields no update.
    """
    try:
        base = Version.parse(base_version(constraint))
        newest = Version.parse(latest)
    except (ValueError, TypeError):
        return DivergenceRecord(current=constraint, latest=latest)

    update_available = newest > base and not satisfies(newest, constraint)
    severity = severity_between(base, newest) if update_available else Severity.NONE
    return DivergenceRecord(
        current=constraint,
        latest=latest,
        update_available=update_available,
        severity=severity,
    )


def classify_runtime(pin: str | None, latest_runtime: str) -> DivergenceRecord:
    """Classify the runtime pin; a missing pin is assumed to track *latest_runtime*."""
    return classify(pin or latest_runtime, latest_runtime)
