# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI commands compiling annotation sources and reporting diagnostics."""

from __future__ import annotations

from pathlib import Path

import typer

from ..compiler import BuildResult, compile_sources
from ..config import DuplicatePolicy, OutputFormat
from ..diagnostics import diagnostics_json, render_diagnostics
from .shared import CLIError, CLILogger, build_cli_logger, resolve_config
from .typer_ext import SortedTyper

SOURCES_HELP = "Annotation source files to compile."


def _report(result: BuildResult, logger: CLILogger, *, json_output: bool, to_stderr: bool) -> None:
    """Print the diagnostics of ``result`` in the requested format."""

    if json_output:
        typer.echo(diagnostics_json(result.diagnostics), err=to_stderr)
        return
    render_diagnostics(result.diagnostics, logger.error_console if to_stderr else logger.console)


def _summary(result: BuildResult, logger: CLILogger, label: str) -> None:
    count = len(result.artifacts)
    if result.ok and not count:
        logger.warn(f"{label}: no annotated declarations found in {len(result.sources)} source(s)")
    elif result.ok:
        logger.ok(f"{label}: {count} artifact(s) from {len(result.sources)} source(s)")
    else:
        logger.fail(f"{label}: {len(result.diagnostics)} diagnostic(s), {count} artifact(s) compiled")


def compile_command(
    sources: list[Path] = typer.Argument(..., exists=True, dir_okay=False, readable=True, help=SOURCES_HELP),
    module: str | None = typer.Option(
        None,
        "--module",
        "-m",
        help="Framework module providing the record classes.",
    ),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the artifacts here instead of stdout."),
    output_format: OutputFormat | None = typer.Option(
        None,
        "--format",
        case_sensitive=False,
        help="Artifact format: a Python module or a JSON manifest.",
    ),
    strict_duplicates: bool = typer.Option(
        False,
        "--strict-duplicates",
        help="Reject options written more than once on one declaration.",
    ),
    config_path: Path | None = typer.Option(None, "--config", help="Read settings from this pyproject.toml."),
    root: Path | None = typer.Option(None, "--root", "-r", help="Import root used to name source modules."),
    json_output: bool = typer.Option(False, "--json", help="Print diagnostics as JSON."),
    emoji: bool = typer.Option(True, "--emoji/--no-emoji", help="Toggle emoji in status messages."),
    debug: bool = typer.Option(False, "--debug", help="Print debug details."),
) -> None:
    """Compile annotated declarations into static configuration records."""

    logger = build_cli_logger(emoji=emoji, debug=debug)
    project_root = (root or Path.cwd()).resolve()
    try:
        config = resolve_config(
            config_path,
            project_root,
            framework_module=module,
            output_format=output_format,
            duplicate_options=DuplicatePolicy.ERROR if strict_duplicates else None,
        )
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc

    logger.debug(f"framework={config.framework_module} format={config.output_format.value}")
    result = compile_sources(sources, config, root=project_root)
    text = result.render(config)
    if output is None:
        typer.echo(text, nl=False)
        _report(result, logger, json_output=json_output, to_stderr=True)
    else:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text, encoding="utf-8")
        _report(result, logger, json_output=json_output, to_stderr=False)
        _summary(result, logger, f"wrote {output}")
    raise typer.Exit(code=0 if result.ok else 1)


def check_command(
    sources: list[Path] = typer.Argument(..., exists=True, dir_okay=False, readable=True, help=SOURCES_HELP),
    strict_duplicates: bool = typer.Option(
        False,
        "--strict-duplicates",
        help="Reject options written more than once on one declaration.",
    ),
    config_path: Path | None = typer.Option(None, "--config", help="Read settings from this pyproject.toml."),
    root: Path | None = typer.Option(None, "--root", "-r", help="Import root used to name source modules."),
    json_output: bool = typer.Option(False, "--json", help="Print diagnostics as JSON."),
    emoji: bool = typer.Option(True, "--emoji/--no-emoji", help="Toggle emoji in status messages."),
) -> None:
    """Validate annotated declarations without writing artifacts."""

    logger = build_cli_logger(emoji=emoji)
    project_root = (root or Path.cwd()).resolve()
    try:
        config = resolve_config(
            config_path,
            project_root,
            duplicate_options=DuplicatePolicy.ERROR if strict_duplicates else None,
        )
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc

    result = compile_sources(sources, config, root=project_root)
    _report(result, logger, json_output=json_output, to_stderr=False)
    if not json_output:
        _summary(result, logger, "check")
    raise typer.Exit(code=0 if result.ok else 1)


def register(app: SortedTyper) -> None:
    """Register the ``compile`` and ``check`` commands on ``app``."""

    app.command(name="compile")(compile_command)
    app.command(name="check")(check_command)


__all__ = ["check_command", "compile_command", "register"]
