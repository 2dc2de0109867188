"""GitHub API utilities — repo URL parsing and manifest fetching."""

from __future__ import annotations

import base64
import binascii

import httpx
import structlog

from pubsentinel.engines.version_checker.models import Manifest
from pubsentinel.exceptions import ManifestFetchError

log = structlog.get_logger("pubsentinel.github")

MANIFEST_PATH = "pubspec.yaml"
PIN_FILE_PATH = ".fvmrc"


def parse_repo_url(repo_url: str) -> tuple[str, str]:
    """Split a GitHub repository URL into (owner, repo).

    Accepts https URLs (with or without ``.git``, a trailing slash or a
    ``/tree/<branch>`` suffix) and ``git@github.com:owner/repo.git``.
    Raises ValueError for anything else.
    """
    url = repo_url.strip().rstrip("/")
    if url.startswith("git@github.com:"):
        path = url.partition(":")[2]
    else:
        _, marker, path = url.partition("github.com/")
        if not marker:
            raise ValueError(f"not a GitHub URL: {repo_url!r}")

    owner, _, rest = path.partition("/")
    repo = rest.split("/", 1)[0].removesuffix(".git")
    if not owner or not repo:
        raise ValueError(f"cannot parse GitHub repo URL: {repo_url!r}")
    return owner, repo


class ManifestFetcher:
    """Read manifest files through the GitHub contents API.

    *token* is optional; it is only needed for private repositories.
    """

    def __init__(self, token: str | None = None, timeout: float = 10.0) -> None:
        headers: dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "pubsentinel",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url="https://api.github.com",
            headers=headers,
            timeout=timeout,
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> ManifestFetcher:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def fetch_manifest(self, repo_url: str) -> Manifest:
        """Fetch pubspec.yaml and, when present, the .fvmrc pin file."""
        content = await self.fetch_file(repo_url, MANIFEST_PATH)
        pin_file = await self.fetch_optional_file(repo_url, PIN_FILE_PATH)
        return Manifest(content=content, pin_file=pin_file)

    async def fetch_file(self, repo_url: str, path: str) -> str:
        """Return the decoded text of *path*; raises ManifestFetchError."""
        content = await self._fetch(repo_url, path, missing_ok=False)
        assert content is not None
        return content

    async def fetch_optional_file(self, repo_url: str, path: str) -> str | None:
        """Like :meth:`fetch_file`, but a missing file (404) yields None.

        Any other failure on an optional file is logged and treated as absent.
        """
        try:
            return await self._fetch(repo_url, path, missing_ok=True)
        except ManifestFetchError as exc:
            log.warning("github.optional_file_failed", repo_url=repo_url, path=path, error=str(exc))
            return None

    # ── internal ───────────────────────────────────────────────────────────

    async def _fetch(self, repo_url: str, path: str, *, missing_ok: bool) -> str | None:
        try:
            owner, repo = parse_repo_url(repo_url)
        except ValueError as exc:
            raise ManifestFetchError(f"Invalid GitHub URL: {repo_url}") from exc

        try:
            resp = await self._client.get(f"/repos/{owner}/{repo}/contents/{path}")
        except httpx.HTTPError as exc:
            raise ManifestFetchError(
                f"failed to fetch {path} from {owner}/{repo}: {str(exc) or type(exc).__name__}"
            ) from exc

        if resp.status_code == 404 and missing_ok:
            return None
        if resp.status_code != 200:
            raise ManifestFetchError(
                f"failed to fetch {path} from {owner}/{repo}: "
                f"HTTP {resp.status_code} {resp.reason_phrase}".rstrip()
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise ManifestFetchError(f"{path} in {owner}/{repo}: response is not JSON") from exc

        encoded = data.get("content") if isinstance(data, dict) else None
        if not isinstance(encoded, str):
            raise ManifestFetchError(f"{path} in {owner}/{repo}: response has no content")

        try:
            return base64.b64decode(encoded).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise ManifestFetchError(f"{path} in {owner}/{repo}: cannot decode content") from exc
