"""Version range expressions over semantic versions.

Supports the range syntax pub and npm share: caret (``^1.2.0``), tilde
(``~1.2.0``), comparator sets (``>=1.2.0 <2.0.0``), hyphen ranges
(``1.2.0 - 1.4.0``), partial and wildcard versions (``1.x``, ``*``, ``any``)
and ``||`` alternatives.

A prerelease version only satisfies a comparator set that names a prerelease
of the same ``MAJOR.MINOR.PATCH``.
"""

from __future__ import annotations

import operator
import re
from collections.abc import Callable
from dataclasses import dataclass

from semver import Version

_OPS: dict[str, Callable[[Version, Version], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "=": operator.eq,
}

_PARTIAL_RE = re.compile(
    r"^v?(?P<major>0|[1-9]\d*|[xX*])"
    r"(?:\.(?P<minor>0|[1-9]\d*|[xX*]))?"
    r"(?:\.(?P<patch>0|[1-9]\d*|[xX*]))?"
    r"(?:-(?P<prerelease>[0-9A-Za-z.-]+))?"
    r"(?:\+[0-9A-Za-z.-]+)?$"
)
_COMPARATOR_RE = re.compile(r"^(?P<op>\^|~>?|>=|<=|>|<|=)?(?P<version>.*)$")
_OP_SPACE_RE = re.compile(r"(\^|~>?|>=|<=|>|<|=)\s+")
_HYPHEN_RE = re.compile(r"^(\S+)\s+-\s+(\S+)$")


@dataclass(frozen=True)
class _Partial:
    major: int | None
    minor: int | None
    patch: int | None
    prerelease: str | None = None

    def floor(self) -> Version:
        return Version(self.major or 0, self.minor or 0, self.patch or 0, prerelease=self.prerelease)


@dataclass(frozen=True)
class Comparator:
    op: str
    version: Version

    def matches(self, version: Version) -> bool:
        return _OPS[self.op](version, self.version)

    def __str__(self) -> str:
        return f"{self.op}{self.version}"


# Matches no version at all (``<*``, ``>*``).
_NOTHING = Comparator("<", Version(0, 0, 0, prerelease="0"))


@dataclass(frozen=True)
class VersionConstraint:
    """A parsed range: any one of ``alternatives`` must match in full."""

    expression: str
    alternatives: tuple[tuple[Comparator, ...], ...]

    def allows(self, version: Version) -> bool:
        return any(_set_allows(comparators, version) for comparators in self.alternatives)


def _set_allows(comparators: tuple[Comparator, ...], version: Version) -> bool:
    if not all(c.matches(version) for c in comparators):
        return False
    if not version.prerelease:
        return True
    release = (version.major, version.minor, version.patch)
    return any(
        c.version.prerelease and (c.version.major, c.version.minor, c.version.patch) == release
        for c in comparators
    )


def _parse_partial(text: str) -> _Partial:
    m = _PARTIAL_RE.match(text)
    if not m:
        raise ValueError(f"invalid version in range: {text!r}")

    parts: list[int | None] = []
    wildcard = False
    for key in ("major", "minor", "patch"):
        value = m.group(key)
        if wildcard or value is None or value in ("x", "X", "*"):
            wildcard = True
            parts.append(None)
        else:
            parts.append(int(value))

    prerelease = m.group("prerelease") if parts[2] is not None else None
    return _Partial(parts[0], parts[1], parts[2], prerelease)


def _next_up(p: _Partial) -> Version:
    """The first version above everything *p* covers."""
    assert p.major is not None
    if p.minor is None:
        return Version(p.major + 1, 0, 0)
    return Version(p.major, p.minor + 1, 0)


def _desugar(op: str, p: _Partial) -> list[Comparator]:
    if p.major is None:
        return [_NOTHING] if op in ("<", ">") else []

    exact = p.patch is not None

    if op in ("", "="):
        if exact:
            return [Comparator("=", p.floor())]
        return [Comparator(">=", p.floor()), Comparator("<", _next_up(p))]

    if op == "^":
        if p.major > 0 or p.minor is None:
            upper = Version(p.major + 1, 0, 0)
        elif p.minor > 0 or p.patch is None:
            upper = Version(0, p.minor + 1, 0)
        else:
            upper = Version(0, 0, p.patch + 1)
        return [Comparator(">=", p.floor()), Comparator("<", upper)]

    if op in ("~", "~>"):
        return [Comparator(">=", p.floor()), Comparator("<", _next_up(p))]

    if op == ">=":
        return [Comparator(">=", p.floor())]
    if op == "<":
        return [Comparator("<", p.floor())]
    if op == ">":
        return [Comparator(">", p.floor())] if exact else [Comparator(">=", _next_up(p))]
    if op == "<=":
        return [Comparator("<=", p.floor())] if exact else [Comparator("<", _next_up(p))]

    raise ValueError(f"unsupported range operator: {op!r}")


def _parse_set(raw: str) -> tuple[Comparator, ...]:
    raw = raw.strip()

    hyphen = _HYPHEN_RE.match(raw)
    if hyphen:
        low, high = _parse_partial(hyphen.group(1)), _parse_partial(hyphen.group(2))
        comparators = [] if low.major is None else [Comparator(">=", low.floor())]
        if high.major is not None:
            if high.patch is not None:
                comparators.append(Comparator("<=", high.floor()))
            else:
                comparators.append(Comparator("<", _next_up(high)))
        return tuple(comparators)

    comparators: list[Comparator] = []
    for token in _OP_SPACE_RE.sub(r"\1", raw).split():
        if token == "any":
            continue
        m = _COMPARATOR_RE.match(token)
        assert m is not None
        comparators.extend(_desugar(m.group("op") or "", _parse_partial(m.group("version"))))
    return tuple(comparators)


def parse_constraint(expression: str) -> VersionConstraint:
    """Parse a range expression; raises ``ValueError`` on malformed syntax."""
    if not isinstance(expression, str):
        raise ValueError(f"range must be a string, got {type(expression).__name__}")
    alternatives = tuple(_parse_set(raw) for raw in expression.split("||"))
    return VersionConstraint(expression, alternatives)


def satisfies(version: str | Version, expression: str) -> bool:
    """True when *version* is inside *expression*; False for malformed input."""
    try:
        parsed = version if isinstance(version, Version) else Version.parse(version)
        return parse_constraint(expression).allows(parsed)
    except (ValueError, TypeError):
        return False
