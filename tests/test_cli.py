# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the ``compile`` and ``check`` CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from cmdattr.cli.app import app

VALID = '''
@command
@aliases("p")
def ping(ctx: Context, msg: Message, args: Args) -> CommandResult:
    ...
'''

INVALID = '''
@command
@colour(RED)
def ping(ctx: Context, msg: Message, args: Args) -> CommandResult:
    ...
'''


def _write_source(root: Path, text: str) -> Path:
    package = root / "bot"
    package.mkdir(exist_ok=True)
    source = package / "commands.py"
    source.write_text(text, encoding="utf-8")
    return source


def test_compile_writes_output_file(tmp_path: Path) -> None:
    runner = CliRunner()
    source = _write_source(tmp_path, VALID)
    output = tmp_path / "generated" / "commands.py"

    result = runner.invoke(
        app,
        ["compile", str(source), "--root", str(tmp_path), "--output", str(output), "--no-emoji"],
    )

    assert result.exit_code == 0, result.output
    generated = output.read_text(encoding="utf-8")
    assert "import bot.commands as _source_0" in generated
    assert "PING_COMMAND = Command(fun=_source_0.ping, options=PING_COMMAND_OPTIONS)" in generated
    assert "1 artifact(s) from 1 source(s)" in result.stdout


def test_compile_prints_module_to_stdout(tmp_path: Path) -> None:
    runner = CliRunner()
    source = _write_source(tmp_path, VALID)

    result = runner.invoke(
        app,
        ["compile", str(source), "--root", str(tmp_path), "--module", "mybot.framework"],
    )

    assert result.exit_code == 0, result.output
    assert "from mybot.framework import (" in result.stdout
    assert "names=('ping', 'p')," in result.stdout


def test_compile_json_format(tmp_path: Path) -> None:
    runner = CliRunner()
    source = _write_source(tmp_path, VALID)

    result = runner.invoke(app, ["compile", str(source), "--root", str(tmp_path), "--format", "json"])

    assert result.exit_code == 0, result.output
    document = json.loads(result.stdout)
    assert [command["symbol"] for command in document["commands"]] == ["PING_COMMAND"]


def test_compile_reads_pyproject_settings(tmp_path: Path) -> None:
    runner = CliRunner()
    source = _write_source(tmp_path, VALID)
    (tmp_path / "pyproject.toml").write_text(
        '[tool.cmdattr]\nframework-module = "serenity.framework"\n',
        encoding="utf-8",
    )

    result = runner.invoke(app, ["compile", str(source), "--root", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert "from serenity.framework import (" in result.stdout


def test_check_reports_diagnostics(tmp_path: Path) -> None:
    runner = CliRunner()
    source = _write_source(tmp_path, INVALID)

    result = runner.invoke(app, ["check", str(source), "--root", str(tmp_path), "--no-emoji"])

    assert result.exit_code == 1
    assert 'error[unknown-option]: invalid attribute: "colour"' in result.stdout
    assert "check: 1 diagnostic(s), 0 artifact(s) compiled" in result.stdout


def test_check_json_output(tmp_path: Path) -> None:
    runner = CliRunner()
    source = _write_source(tmp_path, INVALID)

    result = runner.invoke(app, ["check", str(source), "--root", str(tmp_path), "--json"])

    assert result.exit_code == 1
    (payload,) = json.loads(result.stdout)
    assert payload["kind"] == "unknown-option"
    assert payload["declaration"] == "ping"
    assert payload["line"] == 3


def test_check_passes_clean_sources(tmp_path: Path) -> None:
    runner = CliRunner()
    source = _write_source(tmp_path, VALID)

    result = runner.invoke(app, ["check", str(source), "--root", str(tmp_path), "--no-emoji"])

    assert result.exit_code == 0
    assert "check: 1 artifact(s) from 1 source(s)" in result.stdout


def test_invalid_configuration_exits_with_usage_code(tmp_path: Path) -> None:
    runner = CliRunner()
    source = _write_source(tmp_path, VALID)
    (tmp_path / "pyproject.toml").write_text("[tool.cmdattr]\nunknown = 1\n", encoding="utf-8")

    result = runner.invoke(app, ["check", str(source), "--root", str(tmp_path), "--no-emoji"])

    assert result.exit_code == 2
    assert "invalid configuration" in result.output


def test_check_warns_when_nothing_is_declared(tmp_path: Path) -> None:
    runner = CliRunner()
    source = _write_source(tmp_path, "import sys\n")

    result = runner.invoke(app, ["check", str(source), "--root", str(tmp_path), "--no-emoji"])

    assert result.exit_code == 0
    assert "check: no annotated declarations found in 1 source(s)" in result.stdout
