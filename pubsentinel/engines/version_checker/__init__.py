"""Version checker engine — compare declared Flutter and package versions with upstream."""

from pubsentinel.engines.version_checker.checker import RepositoryChecker
from pubsentinel.engines.version_checker.classifier import classify
from pubsentinel.engines.version_checker.models import (
    CheckResult,
    DivergenceRecord,
    PackageCheck,
    Repository,
    Severity,
)
from pubsentinel.engines.version_checker.registry import RegistryClient

__all__ = [
    "CheckResult",
    "DivergenceRecord",
    "PackageCheck",
    "RegistryClient",
    "Repository",
    "RepositoryChecker",
    "Severity",
    "classify",
]
