"""Runtime version pin extraction from pubspec.yaml and .fvmrc content.

Both extractors return the first ``MAJOR.MINOR.PATCH`` triple found for the
``flutter`` key, or ``None``. Malformed input never raises.
"""

from __future__ import annotations

import re
from enum import Enum

import yaml

RUNTIME_KEY = "flutter"
ENVIRONMENT_HEADER = "environment:"

# Older FVM releases wrote .fvm/fvm_config.json with this key.
_LEGACY_PIN_KEY = "flutterSdkVersion"

_TRIPLE_RE = re.compile(r"(\d+\.\d+\.\d+)")
_KEY_RE = re.compile(r"""^\s*["']?([A-Za-z_][\w-]*)["']?\s*:(.*)$""")


class _ScanState(Enum):
    OUTSIDE = "outside"
    IN_ENVIRONMENT = "in_environment"


def _strip_comment(line: str) -> str:
    hash_pos = line.find(" #")
    if hash_pos != -1:
        line = line[:hash_pos]
    return line.rstrip()


def _first_triple(value: str) -> str | None:
    match = _TRIPLE_RE.search(value)
    return match.group(1) if match else None


def extract_runtime_pin(content: str | None, runtime: str = RUNTIME_KEY) -> str | None:
    """Return the runtime pin from the ``environment:`` block of a pubspec.

    ``environment:`` must be an unindented line of its own. Inside it, the
    nested ``flutter:`` key is searched; the block ends at the next
    unindented key.
    """
    if not content:
        return None

    state = _ScanState.OUTSIDE
    for raw_line in content.splitlines():
        line = _strip_comment(raw_line)
        if not line.strip() or line.lstrip().startswith("#"):
            continue

        top_level = not line[0].isspace()

        if state is _ScanState.OUTSIDE:
            if line == ENVIRONMENT_HEADER:
                state = _ScanState.IN_ENVIRONMENT
            continue

        if top_level:
            # Leaving the environment block; pubspec has only one.
            return None

        m = _KEY_RE.match(line)
        if m and m.group(1) == runtime:
            version = _first_triple(m.group(2))
            if version:
                return version

    return None


def extract_pin_file_version(content: str | None, runtime: str = RUNTIME_KEY) -> str | None:
    """Return the runtime pin from an FVM pin file (JSON or ``key: value`` lines)."""
    if not content or not content.strip():
        return None

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError:
        data = None

    if isinstance(data, dict):
        for key in (runtime, _LEGACY_PIN_KEY):
            value = data.get(key)
            if isinstance(value, (str, int, float)):
                version = _first_triple(str(value))
                if version:
                    return version

    return _scan_pin_lines(content, runtime)


def _scan_pin_lines(content: str, runtime: str) -> str | None:
    for raw_line in content.splitlines():
        m = _KEY_RE.match(raw_line)
        if m and m.group(1) == runtime:
            value = m.group(2).strip().rstrip(",").replace('"', "").replace("'", "")
            version = _first_triple(value)
            if version:
                return version
    return None
