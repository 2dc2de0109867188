"""Async Slack Web API client — message posting and external file upload primitives."""

from __future__ import annotations

import json
from typing import Any

import httpx
import structlog

from pubsentinel.exceptions import SlackApiError

log = structlog.get_logger("pubsentinel.slack")

SLACK_API_URL = "https://slack.com/api"


class SlackClient:
    """Thin async wrapper around the Slack Web API methods we use."""

    def __init__(self, token: str, timeout: float = 10.0) -> None:
        self._client = httpx.AsyncClient(
            base_url=SLACK_API_URL,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> SlackClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── messages ───────────────────────────────────────────────────────────

    async def post_message(
        self,
        channel: str,
        text: str,
        blocks: list[dict[str, Any]],
        *,
        username: str | None = None,
        icon_emoji: str | None = None,
    ) -> str:
        """Post a block message and return its ``ts`` (the thread anchor)."""
        payload: dict[str, Any] = {"channel": channel, "text": text, "blocks": blocks}
        if username:
            payload["username"] = username
        if icon_emoji:
            payload["icon_emoji"] = icon_emoji
        data = await self.call("chat.postMessage", json_body=payload)
        return data.get("ts", "")

    # ── external upload primitives ─────────────────────────────────────────

    async def get_upload_url_external(self, filename: str, length: int) -> dict[str, Any]:
        """``files.getUploadURLExternal`` — returns the raw response body."""
        return await self.call(
            "files.getUploadURLExternal",
            form={"filename": filename, "length": str(length)},
        )

    async def upload_to_url(self, upload_url: str, content: bytes) -> httpx.Response:
        """Send the whole file body to the URL handed out by Slack."""
        return await self._client.put(
            upload_url,
            content=content,
            headers={"Content-Type": "application/octet-stream"},
        )

    async def complete_upload_external(
        self,
        file_id: str,
        title: str,
        channel_id: str,
        thread_ts: str | None = None,
    ) -> dict[str, Any]:
        """``files.completeUploadExternal`` — share the file in a channel or thread."""
        form = {
            "files": json.dumps([{"id": file_id, "title": title}]),
            "channel_id": channel_id,
        }
        if thread_ts:
            form["thread_ts"] = thread_ts
        return await self.call("files.completeUploadExternal", form=form)

    # ── internal ───────────────────────────────────────────────────────────

    async def call(
        self,
        method: str,
        *,
        form: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """POST to a Web API method; raises SlackApiError unless ``ok`` is true."""
        log.debug("slack.call", method=method)
        if json_body is not None:
            resp = await self._client.post(f"/{method}", json=json_body)
        else:
            resp = await self._client.post(f"/{method}", data=form or {})

        if resp.status_code >= 300:
            raise SlackApiError(method, f"HTTP {resp.status_code} {resp.reason_phrase}".rstrip())

        try:
            data = resp.json()
        except ValueError as exc:
            raise SlackApiError(method, "response is not JSON") from exc

        if not isinstance(data, dict) or not data.get("ok"):
            error = data.get("error", "unknown_error") if isinstance(data, dict) else "bad_response"
            raise SlackApiError(method, error)
        return data
