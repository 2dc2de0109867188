"""Tests for runtime pin extraction (pubspec environment block and .fvmrc)."""

from __future__ import annotations

import pytest

from pubsentinel.engines.version_checker.extractors import (
    extract_pin_file_version,
    extract_runtime_pin,
)

PUBSPEC = """\
name: shop_app
description: A shop.
version: 1.0.0+1

environment:
  sdk: ">=3.0.0 <4.0.0"
  flutter: ">=3.16.5"

dependencies:
  flutter:
    sdk: flutter
  http: ^1.2.0
"""


# ── extract_runtime_pin ──────────────────────────────────────────────────


class TestExtractRuntimePin:
    def test_pin_after_sdk_key(self):
        assert extract_runtime_pin(PUBSPEC) == "3.16.5"

    def test_pin_first_in_block(self):
        content = "environment:\n  flutter: 3.22.1\n  sdk: '>=3.0.0 <4.0.0'\n"
        assert extract_runtime_pin(content) == "3.22.1"

    def test_range_takes_first_triple(self):
        content = "environment:\n  flutter: '>=3.10.0 <4.0.0'\n"
        assert extract_runtime_pin(content) == "3.10.0"

    def test_no_environment_block(self):
        assert extract_runtime_pin("name: x\ndependencies:\n  http: ^1.0.0\n") is None

    def test_environment_without_flutter(self):
        assert extract_runtime_pin("environment:\n  sdk: '>=3.0.0 <4.0.0'\n") is None

    def test_flutter_outside_environment_is_ignored(self):
        content = (
            "environment:\n"
            "  sdk: '>=3.0.0 <4.0.0'\n"
            "dependencies:\n"
            "  flutter: 3.19.0\n"
        )
        assert extract_runtime_pin(content) is None

    def test_flutter_without_version(self):
        assert extract_runtime_pin("environment:\n  flutter: any\n") is None

    def test_indented_header_is_not_a_block(self):
        assert extract_runtime_pin("  environment:\n    flutter: 3.19.0\n") is None

    def test_comments_and_blank_lines(self):
        content = (
            "environment: # toolchain\n"
            "\n"
            "  # pinned by CI\n"
            "  flutter: 3.19.6 # keep in sync\n"
        )
        assert extract_runtime_pin(content) == "3.19.6"

    def test_crlf_line_endings(self):
        assert extract_runtime_pin("environment:\r\n  flutter: 3.19.6\r\n") == "3.19.6"

    @pytest.mark.parametrize("content", [None, "", "   \n", ":::\n\t- [", "environment:"])
    def test_malformed_input_returns_none(self, content):
        assert extract_runtime_pin(content) is None


# ── extract_pin_file_version ─────────────────────────────────────────────


class TestExtractPinFileVersion:
    def test_json(self):
        assert extract_pin_file_version('{"flutter": "3.32.8"}') == "3.32.8"

    def test_json_with_extra_keys(self):
        content = '{\n  "flutter": "3.24.3",\n  "flavors": {"prod": "3.22.0"}\n}\n'
        assert extract_pin_file_version(content) == "3.24.3"

    def test_legacy_fvm_config(self):
        assert extract_pin_file_version('{"flutterSdkVersion": "3.13.9"}') == "3.13.9"

    def test_yaml_quoted(self):
        assert extract_pin_file_version('flutter: "3.24.0"\n') == "3.24.0"

    def test_yaml_bare(self):
        assert extract_pin_file_version("flutter: 3.24.0\n") == "3.24.0"

    def test_channel_name_has_no_version(self):
        assert extract_pin_file_version('{"flutter": "stable"}') is None

    def test_broken_json_falls_back_to_line_scan(self):
        content = '{\n  "flutter": "3.27.1",\n  "flavors": {\n'
        assert extract_pin_file_version(content) == "3.27.1"

    @pytest.mark.parametrize("content", [None, "", "{", "[1, 2]", "just text"])
    def test_malformed_input_returns_none(self, content):
        assert extract_pin_file_version(content) is None
