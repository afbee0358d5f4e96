# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for compiler configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from cmdattr.config import CompilerConfig, DuplicatePolicy, OutputFormat, build_config, load_config
from cmdattr.errors import ConfigError


def test_defaults_without_pyproject(tmp_path: Path) -> None:
    config = load_config(root=tmp_path)

    assert config == CompilerConfig()
    assert config.framework_module == "framework.standard"
    assert config.strict_duplicates is False


def test_pyproject_without_table_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "bot"\n', encoding="utf-8")

    assert load_config(root=tmp_path) == CompilerConfig()


def test_pyproject_table_with_hyphenated_keys(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        "\n".join(
            [
                "[tool.cmdattr]",
                'framework-module = "mybot.framework"',
                'duplicate-options = "error"',
                'output-format = "json"',
                'return-types = ["CommandResult", "Awaitable[CommandResult]"]',
            ],
        ),
        encoding="utf-8",
    )

    config = load_config(root=tmp_path)

    assert config.framework_module == "mybot.framework"
    assert config.duplicate_options is DuplicatePolicy.ERROR
    assert config.strict_duplicates is True
    assert config.output_format is OutputFormat.JSON
    assert config.return_types == ("CommandResult", "Awaitable[CommandResult]")


def test_unknown_key_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "pyproject.toml"
    path.write_text("[tool.cmdattr]\nframework = 1\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="invalid configuration"):
        load_config(path)


def test_malformed_toml_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "pyproject.toml"
    path.write_text("[tool.cmdattr\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="failed to parse TOML"):
        load_config(path)


def test_missing_explicit_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="configuration file not found"):
        load_config(tmp_path / "missing.toml")


def test_invalid_framework_module() -> None:
    with pytest.raises(ConfigError, match="not a dotted module path"):
        build_config({"framework_module": "my-bot.framework"}, source="test")


def test_empty_return_types_rejected() -> None:
    with pytest.raises(ConfigError, match="return_types"):
        build_config({"return_types": []}, source="test")


def test_with_overrides_ignores_unset_values() -> None:
    config = CompilerConfig()

    assert config.with_overrides(framework_module=None) is config
    updated = config.with_overrides(framework_module="other.framework", duplicate_options=DuplicatePolicy.ERROR)
    assert updated.framework_module == "other.framework"
    assert updated.strict_duplicates is True
    assert config.framework_module == "framework.standard"
