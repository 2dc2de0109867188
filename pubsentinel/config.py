"""Run configuration — the repositories document and environment settings."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from pubsentinel.engines.version_checker.models import Repository
from pubsentinel.exceptions import ConfigError

DEFAULT_CONFIG_PATH = "repositories.json"


@dataclass(frozen=True)
class CheckSettings:
    include_dev_deps: bool = True


@dataclass(frozen=True)
class Config:
    repositories: list[Repository]
    settings: CheckSettings = field(default_factory=CheckSettings)


@dataclass(frozen=True)
class Settings:
    """Credentials and targets read from the environment."""

    slack_bot_token: str | None
    slack_channel: str | None
    github_token: str | None = None


def resolve_config_path(path: str | os.PathLike[str] | None = None) -> Path:
    """``path``, else ``$REPOSITORIES_CONFIG``, else ``./repositories.json``."""
    if path:
        return Path(path)
    return Path(os.environ.get("REPOSITORIES_CONFIG") or DEFAULT_CONFIG_PATH)


def load_config(path: str | os.PathLike[str] | None = None) -> Config:
    """Load the repositories document (JSON, or YAML by suffix).

    Raises ConfigError when the file is missing or malformed.
    """
    config_path = resolve_config_path(path)
    if not config_path.is_file():
        raise ConfigError(
            f"{config_path} not found; create it or set REPOSITORIES_CONFIG"
        )

    text = config_path.read_text(encoding="utf-8")
    try:
        if config_path.suffix.lower() in (".yaml", ".yml"):
            raw = yaml.safe_load(text)
        else:
            raw = json.loads(text)
    except (ValueError, yaml.YAMLError) as exc:
        raise ConfigError(f"{config_path} is not valid: {exc}") from exc

    return parse_config(raw, source=str(config_path))


def parse_config(raw: Any, source: str = "config") -> Config:
    if not isinstance(raw, Mapping):
        raise ConfigError(f"{source}: top level must be an object")

    entries = raw.get("repositories")
    if not isinstance(entries, list):
        raise ConfigError(f"{source}: 'repositories' must be a list")

    repositories: list[Repository] = []
    for idx, entry in enumerate(entries):
        if not isinstance(entry, Mapping) or not entry.get("name") or not entry.get("url"):
            raise ConfigError(f"{source}: repositories[{idx}] needs 'name' and 'url'")
        description = entry.get("description")
        repositories.append(
            Repository(
                name=str(entry["name"]),
                url=str(entry["url"]),
                description=str(description) if description is not None else None,
            )
        )

    settings_raw = raw.get("settings") or {}
    if not isinstance(settings_raw, Mapping):
        raise ConfigError(f"{source}: 'settings' must be an object")
    include_dev = settings_raw.get("includeDevDeps", True)

    return Config(
        repositories=repositories,
        settings=CheckSettings(include_dev_deps=bool(include_dev)),
    )


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    return Settings(
        slack_bot_token=env.get("SLACK_BOT_TOKEN") or None,
        slack_channel=env.get("SLACK_CHANNEL") or None,
        github_token=env.get("GH_TOKEN") or env.get("GITHUB_TOKEN") or None,
    )


def require_slack(settings: Settings) -> tuple[str, str]:
    """Return (token, channel); raises ConfigError when either is missing."""
    if not settings.slack_bot_token:
        raise ConfigError("SLACK_BOT_TOKEN environment variable is required")
    if not settings.slack_channel:
        raise ConfigError("SLACK_CHANNEL environment variable is required")
    return settings.slack_bot_token, settings.slack_channel
