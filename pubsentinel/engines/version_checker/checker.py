"""RepositoryChecker — fetch, extract, resolve and classify one repository at a time."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Protocol

import structlog

from pubsentinel.engines.version_checker.classifier import classify, classify_runtime
from pubsentinel.engines.version_checker.dependencies import (
    extract_dependencies,
    is_registry_dependency,
    parse_manifest,
)
from pubsentinel.engines.version_checker.extractors import (
    extract_pin_file_version,
    extract_runtime_pin,
)
from pubsentinel.engines.version_checker.models import (
    UNRESOLVED,
    CheckResult,
    DependencyDeclaration,
    DivergenceRecord,
    Manifest,
    PackageCheck,
    Repository,
)
from pubsentinel.exceptions import ManifestFetchError, ManifestParseError, RegistryError

log = structlog.get_logger("pubsentinel.engine")


class ManifestSource(Protocol):
    async def fetch_manifest(self, repo_url: str) -> Manifest: ...


class PackageResolver(Protocol):
    async def latest_package_version(self, name: str) -> str: ...


class CheckState(str, Enum):
    FETCHING = "fetching"
    PARSING = "parsing"
    RESOLVING = "resolving"
    DONE = "done"
    FAILED = "failed"


class RepositoryChecker:
    """Run the check pipeline for repositories, strictly one after another.

    Only a fetch failure or a broken manifest fails a repository. A package
    whose latest version cannot be resolved is kept with ``latest = "N/A"``.
    """

    def __init__(
        self,
        fetcher: ManifestSource,
        registry: PackageResolver,
        include_dev_dependencies: bool = True,
    ) -> None:
        self._fetcher = fetcher
        self._registry = registry
        self._include_dev = include_dev_dependencies

    async def check_all(
        self,
        repositories: Iterable[Repository],
        latest_runtime: str,
    ) -> list[CheckResult]:
        """Check every repository in input order; one result per repository."""
        results: list[CheckResult] = []
        for repository in repositories:
            try:
                result = await self.check(repository, latest_runtime)
            except Exception as exc:
                log.error(
                    "checker.unexpected_error",
                    repository=repository.name,
                    exc_info=True,
                )
                result = CheckResult.failed(repository, latest_runtime, str(exc) or repr(exc))
            results.append(result)
        return results

    async def check(self, repository: Repository, latest_runtime: str) -> CheckResult:
        """Check one repository against *latest_runtime* and pub.dev."""
        state = CheckState.FETCHING
        try:
            manifest = await self._fetcher.fetch_manifest(repository.url)

            state = CheckState.PARSING
            pubspec = parse_manifest(manifest.content)
        except (ManifestFetchError, ManifestParseError) as exc:
            log.error(
                "checker.repository_failed",
                repository=repository.name,
                state=CheckState.FAILED.value,
                stage=state.value,
                error=str(exc),
            )
            return CheckResult.failed(repository, latest_runtime, str(exc))

        pin = extract_pin_file_version(manifest.pin_file) or extract_runtime_pin(manifest.content)
        runtime = classify_runtime(pin, latest_runtime)
        declarations = extract_dependencies(pubspec, self._include_dev)

        state = CheckState.RESOLVING
        packages: list[PackageCheck] = []
        for declaration in declarations:
            if not is_registry_dependency(declaration):
                continue
            packages.append(await self._resolve(repository, declaration))

        state = CheckState.DONE
        log.info(
            "checker.repository_checked",
            repository=repository.name,
            state=state.value,
            runtime_pin=pin,
            packages=len(packages),
            outdated=sum(1 for p in packages if p.record.update_available),
        )
        return CheckResult(repository=repository, runtime=runtime, packages=packages)

    async def _resolve(
        self,
        repository: Repository,
        declaration: DependencyDeclaration,
    ) -> PackageCheck:
        try:
            latest = await self._registry.latest_package_version(declaration.name)
        except RegistryError as exc:
            log.warning(
                "checker.package_unresolved",
                repository=repository.name,
                package=declaration.name,
                error=str(exc),
            )
            return PackageCheck(
                name=declaration.name,
                record=DivergenceRecord(current=declaration.constraint, latest=UNRESOLVED),
            )
        return PackageCheck(name=declaration.name, record=classify(declaration.constraint, latest))
