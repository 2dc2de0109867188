"""Dependency extraction from a parsed pubspec.yaml."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog
import yaml

from pubsentinel.engines.version_checker.models import (
    ConstraintSpec,
    DependencyDeclaration,
    ObjectConstraint,
    StringConstraint,
)
from pubsentinel.exceptions import ManifestParseError

log = structlog.get_logger("pubsentinel.engine")

# The SDK's own packages are pinned by the SDK, not by pub.dev.
RUNTIME_PACKAGES = frozenset({"flutter", "flutter_test"})

_PRIMARY_SECTION = "dependencies"
_DEV_SECTION = "dev_dependencies"

# Keys naming where a dependency comes from.
_SOURCE_KEYS = ("git", "path", "sdk", "hosted")
# Sources that are never published on pub.dev, whatever the version says.
_NON_REGISTRY_SOURCES = frozenset({"git", "path", "sdk"})
_NON_REGISTRY_MARKERS = ("git:", "path:")


def parse_manifest(content: str) -> Mapping[str, Any] | None:
    """Parse pubspec content; ``None`` for an empty or non-mapping document.

    Raises :class:`ManifestParseError` when the YAML itself is broken.
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ManifestParseError(f"invalid pubspec.yaml: {exc}") from exc
    if not isinstance(data, Mapping):
        return None
    return data


def decode_constraint(spec: Any) -> ConstraintSpec:
    """Decode one dependency value into its constraint shape."""
    if isinstance(spec, str):
        return StringConstraint(spec)
    if isinstance(spec, Mapping):
        version = spec.get("version")
        source = next((key for key in _SOURCE_KEYS if key in spec), None)
        return ObjectConstraint(
            version=str(version) if version not in (None, "") else None,
            source=source,
        )
    return ObjectConstraint()


def extract_dependencies(
    manifest: Mapping[str, Any] | None,
    include_dev_dependencies: bool,
) -> list[DependencyDeclaration]:
    """Return dependency declarations in manifest order.

    Development dependencies follow the primary ones. A name declared twice
    keeps its last declaration.
    """
    if manifest is None:
        log.warning("extractor.manifest_missing")
        return []

    sections = [(_PRIMARY_SECTION, False)]
    if include_dev_dependencies:
        sections.append((_DEV_SECTION, True))

    found: dict[str, DependencyDeclaration] = {}
    for section, dev in sections:
        table = manifest.get(section)
        if not isinstance(table, Mapping):
            continue
        for name, spec in table.items():
            name = str(name)
            if name in RUNTIME_PACKAGES:
                continue
            decoded = decode_constraint(spec)
            declaration = DependencyDeclaration(
                name=name,
                constraint=decoded.expression,
                dev=dev,
                source=decoded.source if isinstance(decoded, ObjectConstraint) else None,
            )
            if name in found:
                log.debug(
                    "extractor.dep_overwritten",
                    package=name,
                    old_constraint=found.pop(name).constraint,
                    new_constraint=declaration.constraint,
                )
            found[name] = declaration

    return list(found.values())


def is_registry_dependency(declaration: DependencyDeclaration) -> bool:
    """True when the declaration can be looked up on pub.dev."""
    if declaration.source in _NON_REGISTRY_SOURCES:
        return False
    constraint = declaration.constraint
    if constraint == "any":
        return False
    return not any(marker in constraint for marker in _NON_REGISTRY_MARKERS)
