"""Shared fixtures for pubsentinel tests (no network, no Slack)."""

import pytest

from pubsentinel.engines.version_checker.models import (
    CheckResult,
    DivergenceRecord,
    PackageCheck,
    Repository,
    Severity,
)


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def repository():
    return Repository(name="shop-app", url="https://github.com/acme/shop-app")


@pytest.fixture
def mixed_results():
    """One up-to-date repo, one with updates, one failed."""
    fresh = CheckResult(
        repository=Repository(name="fresh", url="https://github.com/acme/fresh"),
        runtime=DivergenceRecord(current="3.24.0", latest="3.24.0"),
        packages=[
            PackageCheck("http", DivergenceRecord(current="^1.2.0", latest="1.2.2")),
        ],
    )
    stale = CheckResult(
        repository=Repository(name="stale", url="https://github.com/acme/stale"),
        runtime=DivergenceRecord(
            current="3.10.0", latest="3.24.0", update_available=True, severity=Severity.MINOR
        ),
        packages=[
            PackageCheck(
                "provider",
                DivergenceRecord(
                    current="^5.0.0", latest="6.1.2", update_available=True, severity=Severity.MAJOR
                ),
            ),
            PackageCheck(
                "intl",
                DivergenceRecord(
                    current="0.18.0", latest="0.18.1", update_available=True, severity=Severity.PATCH
                ),
            ),
            PackageCheck("path", DivergenceRecord(current="^1.8.0", latest="N/A")),
        ],
    )
    broken = CheckResult.failed(
        Repository(name="broken", url="https://github.com/acme/broken"),
        "3.24.0",
        "failed to fetch pubspec.yaml from acme/broken: HTTP 404 Not Found",
    )
    return [fresh, stale, broken]

