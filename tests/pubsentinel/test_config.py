"""Tests for the repositories config and environment settings."""

from __future__ import annotations

import json

import pytest

from pubsentinel.config import (
    load_config,
    load_settings,
    parse_config,
    require_slack,
    resolve_config_path,
)
from pubsentinel.engines.version_checker.models import Repository
from pubsentinel.exceptions import ConfigError

DOCUMENT = {
    "repositories": [
        {"name": "shop-app", "url": "https://github.com/acme/shop-app", "description": "Storefront"},
        {"name": "admin", "url": "https://github.com/acme/admin"},
    ],
    "settings": {"includeDevDeps": False},
}


class TestLoadConfig:
    def test_json(self, tmp_path):
        path = tmp_path / "repositories.json"
        path.write_text(json.dumps(DOCUMENT))
        config = load_config(path)

        assert config.repositories == [
            Repository("shop-app", "https://github.com/acme/shop-app", "Storefront"),
            Repository("admin", "https://github.com/acme/admin"),
        ]
        assert config.settings.include_dev_deps is False

    def test_yaml(self, tmp_path):
        path = tmp_path / "repositories.yaml"
        path.write_text(
            "repositories:\n"
            "  - name: shop-app\n"
            "    url: https://github.com/acme/shop-app\n"
        )
        config = load_config(path)
        assert [r.name for r in config.repositories] == ["shop-app"]
        assert config.settings.include_dev_deps is True

    def test_env_var_location(self, tmp_path, monkeypatch):
        path = tmp_path / "fleet.json"
        path.write_text(json.dumps(DOCUMENT))
        monkeypatch.setenv("REPOSITORIES_CONFIG", str(path))
        assert resolve_config_path() == path
        assert len(load_config().repositories) == 2

    def test_default_location(self, monkeypatch):
        monkeypatch.delenv("REPOSITORIES_CONFIG", raising=False)
        assert resolve_config_path().name == "repositories.json"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.json")

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "repositories.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="not valid"):
            load_config(path)


class TestParseConfig:
    def test_empty_fleet(self):
        assert parse_config({"repositories": []}).repositories == []

    @pytest.mark.parametrize(
        "raw",
        [
            [],
            {},
            {"repositories": {"name": "x"}},
            {"repositories": [{"name": "x"}]},
            {"repositories": [{"url": "https://github.com/acme/x"}]},
            {"repositories": [], "settings": ["includeDevDeps"]},
        ],
    )
    def test_invalid(self, raw):
        with pytest.raises(ConfigError):
            parse_config(raw)


class TestSettings:
    def test_from_environment(self):
        settings = load_settings(
            {"SLACK_BOT_TOKEN": "xoxb-1", "SLACK_CHANNEL": "C1", "GITHUB_TOKEN": "ghp_1"}
        )
        assert settings.slack_bot_token == "xoxb-1"
        assert settings.slack_channel == "C1"
        assert settings.github_token == "ghp_1"

    def test_gh_token_preferred(self):
        settings = load_settings({"GH_TOKEN": "a", "GITHUB_TOKEN": "b"})
        assert settings.github_token == "a"

    def test_blank_values_are_missing(self):
        settings = load_settings({"SLACK_BOT_TOKEN": "", "SLACK_CHANNEL": ""})
        assert settings.slack_bot_token is None
        assert settings.slack_channel is None

    def test_require_slack(self):
        assert require_slack(load_settings({"SLACK_BOT_TOKEN": "t", "SLACK_CHANNEL": "c"})) == ("t", "c")

    @pytest.mark.parametrize(
        "environ, missing",
        [({"SLACK_CHANNEL": "c"}, "SLACK_BOT_TOKEN"), ({"SLACK_BOT_TOKEN": "t"}, "SLACK_CHANNEL")],
    )
    def test_require_slack_missing(self, environ, missing):
        with pytest.raises(ConfigError, match=missing):
            require_slack(load_settings(environ))
