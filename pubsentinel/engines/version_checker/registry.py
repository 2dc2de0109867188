"""Latest-version lookups against pub.dev and the Flutter release channels."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from pubsentinel.exceptions import RegistryError

log = structlog.get_logger("pubsentinel.engine")

PUB_API_URL = "https://pub.dev/api/packages"
FLUTTER_RELEASES_URL = (
    "https://storage.googleapis.com/flutter_infra_release/releases/releases_linux.json"
)
FLUTTER_GITHUB_RELEASES_URL = "https://api.github.com/repos/flutter/flutter/releases"

USER_AGENT = "pubsentinel"
DEFAULT_TIMEOUT = 10.0


class RegistryClient:
    """Resolve latest published versions. One request per lookup, no retries."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._client = httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> RegistryClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def latest_package_version(self, name: str) -> str:
        """Return ``latest.version`` of a pub.dev package."""
        data = await self._get_json(f"{PUB_API_URL}/{name}", subject=name)
        latest = data.get("latest") if isinstance(data, dict) else None
        version = latest.get("version") if isinstance(latest, dict) else None
        if not isinstance(version, str) or not version:
            raise RegistryError(name, "response has no latest.version")
        return version

    async def latest_runtime_version(self) -> str:
        """Return the newest stable Flutter release.

        The release manifest is authoritative; GitHub releases are the fallback.
        """
        try:
            return await self._latest_from_release_manifest()
        except RegistryError as exc:
            log.warning("registry.release_manifest_failed", error=str(exc))
        return await self._latest_from_github()

    # ── internal ───────────────────────────────────────────────────────────

    async def _latest_from_release_manifest(self) -> str:
        data = await self._get_json(FLUTTER_RELEASES_URL, subject="flutter")
        releases = data.get("releases") if isinstance(data, dict) else None
        for release in releases if isinstance(releases, list) else []:
            if isinstance(release, dict) and release.get("channel") == "stable":
                version = release.get("version")
                if isinstance(version, str) and version:
                    return version
        raise RegistryError("flutter", "no stable release in release manifest")

    async def _latest_from_github(self) -> str:
        data = await self._get_json(
            FLUTTER_GITHUB_RELEASES_URL,
            subject="flutter",
            headers={"Accept": "application/vnd.github+json"},
        )
        for release in data if isinstance(data, list) else []:
            if not isinstance(release, dict):
                continue
            tag = release.get("tag_name")
            if not isinstance(tag, str) or not tag:
                continue
            if release.get("draft") or release.get("prerelease") or "-" in tag:
                continue
            return tag.removeprefix("v")
        raise RegistryError("flutter", "no stable release on GitHub")

    async def _get_json(
        self,
        url: str,
        *,
        subject: str,
        headers: dict[str, str] | None = None,
    ) -> Any:
        try:
            resp = await self._client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise RegistryError(subject, str(exc) or type(exc).__name__) from exc

        if resp.status_code >= 300:
            raise RegistryError(subject, resp.reason_phrase or "request failed", resp.status_code)

        try:
            return resp.json()
        except ValueError as exc:
            raise RegistryError(subject, "response is not valid JSON", resp.status_code) from exc
