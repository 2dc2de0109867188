"""Tests for GitHub URL parsing and manifest fetching (mocked transport)."""

from __future__ import annotations

import base64

import httpx
import pytest

from pubsentinel.core.github import ManifestFetcher, parse_repo_url
from pubsentinel.exceptions import ManifestFetchError

PUBSPEC = "name: shop_app\nenvironment:\n  flutter: 3.22.1\n"
FVMRC = '{"flutter": "3.24.3"}'


def _encoded(text: str) -> dict:
    # GitHub wraps base64 content at 60 columns.
    raw = base64.b64encode(text.encode("utf-8")).decode("ascii")
    wrapped = "\n".join(raw[i : i + 60] for i in range(0, len(raw), 60))
    return {"type": "file", "encoding": "base64", "content": wrapped}


def _fetcher(handler) -> ManifestFetcher:
    fetcher = ManifestFetcher.__new__(ManifestFetcher)
    fetcher._client = httpx.AsyncClient(
        base_url="https://api.github.com",
        transport=httpx.MockTransport(handler),
    )
    return fetcher


# ── parse_repo_url ───────────────────────────────────────────────────────


class TestParseRepoUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "https://github.com/acme/shop-app",
            "https://github.com/acme/shop-app.git",
            "https://github.com/acme/shop-app/",
            "https://github.com/acme/shop-app/tree/main",
            "git@github.com:acme/shop-app.git",
        ],
    )
    def test_forms(self, url):
        assert parse_repo_url(url) == ("acme", "shop-app")

    @pytest.mark.parametrize("url", ["https://gitlab.com/acme/x", "https://github.com/acme", ""])
    def test_invalid(self, url):
        with pytest.raises(ValueError):
            parse_repo_url(url)


# ── ManifestFetcher ──────────────────────────────────────────────────────


class TestManifestFetcher:
    @pytest.mark.anyio
    async def test_fetches_manifest_and_pin_file(self):
        paths: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            if request.url.path.endswith("/pubspec.yaml"):
                return httpx.Response(200, json=_encoded(PUBSPEC))
            return httpx.Response(200, json=_encoded(FVMRC))

        async with _fetcher(handler) as fetcher:
            manifest = await fetcher.fetch_manifest("https://github.com/acme/shop-app")

        assert manifest.content == PUBSPEC
        assert manifest.pin_file == FVMRC
        assert paths == [
            "/repos/acme/shop-app/contents/pubspec.yaml",
            "/repos/acme/shop-app/contents/.fvmrc",
        ]

    @pytest.mark.anyio
    async def test_missing_pin_file_is_none(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/pubspec.yaml"):
                return httpx.Response(200, json=_encoded(PUBSPEC))
            return httpx.Response(404, json={"message": "Not Found"})

        async with _fetcher(handler) as fetcher:
            manifest = await fetcher.fetch_manifest("https://github.com/acme/shop-app")

        assert manifest.content == PUBSPEC
        assert manifest.pin_file is None

    @pytest.mark.anyio
    async def test_pin_file_server_error_treated_as_absent(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/pubspec.yaml"):
                return httpx.Response(200, json=_encoded(PUBSPEC))
            return httpx.Response(500)

        async with _fetcher(handler) as fetcher:
            manifest = await fetcher.fetch_manifest("https://github.com/acme/shop-app")

        assert manifest.pin_file is None

    @pytest.mark.anyio
    async def test_missing_manifest_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"message": "Not Found"})

        async with _fetcher(handler) as fetcher:
            with pytest.raises(ManifestFetchError, match="HTTP 404 Not Found"):
                await fetcher.fetch_manifest("https://github.com/acme/shop-app")

    @pytest.mark.anyio
    async def test_invalid_url_raises_without_request(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        async with _fetcher(handler) as fetcher:
            with pytest.raises(ManifestFetchError, match="Invalid GitHub URL"):
                await fetcher.fetch_manifest("https://example.com/not-github")

    @pytest.mark.anyio
    async def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _fetcher(handler) as fetcher:
            with pytest.raises(ManifestFetchError, match="connection refused"):
                await fetcher.fetch_file("https://github.com/acme/shop-app", "pubspec.yaml")

    @pytest.mark.anyio
    async def test_response_without_content(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[{"name": "pubspec.yaml"}])

        async with _fetcher(handler) as fetcher:
            with pytest.raises(ManifestFetchError, match="no content"):
                await fetcher.fetch_file("https://github.com/acme/shop-app", "pubspec.yaml")

    @pytest.mark.anyio
    async def test_undecodable_content(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"content": "!!!not base64!!!"})

        async with _fetcher(handler) as fetcher:
            with pytest.raises(ManifestFetchError, match="cannot decode"):
                await fetcher.fetch_file("https://github.com/acme/shop-app", "pubspec.yaml")
