# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Drive a build: parse sources, compile declarations and collect diagnostics.

Each declaration either yields an artifact or a diagnostic. A failure never
stops unrelated declarations; only artifacts that depend on a failed
declaration (a group listing a failed command, a group inheriting from a failed
record) fail with it.
"""

from __future__ import annotations

import graphlib
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from pathlib import Path

from .artifacts import Artifact, CommandArtifact, GroupArtifact, GroupOptionsArtifact, HelpArtifact
from .config import CompilerConfig
from .declarations import DeclarationRole, FunctionDeclaration, SourceModule, module_name_for, read_source
from .diagnostics import Diagnostic, sort_diagnostics
from .dispatch import COMMAND_TABLE, HELP_TABLE
from .emission import artifact_symbols, render, validate_symbols
from .errors import AttributeCompileError, ReferenceResolutionError
from .groups import GroupResolver, PendingGroup, link_groups
from .help_text import apply_strike_texts
from .schemas import CommandOptions, HelpOptions
from .types import SourceSpan, qualify
from .validation import validate_declaration, validate_return_type

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BuildResult:
    """Outcome of one build.

    Attributes:
        sources: Parsed source modules, in input order.
        artifacts: Compiled artifacts in emission order (producers first).
        diagnostics: One diagnostic per failed declaration, in source order.
    """

    sources: tuple[SourceModule, ...]
    artifacts: tuple[Artifact, ...]
    diagnostics: tuple[Diagnostic, ...]

    @property
    def ok(self) -> bool:
        """Return ``True`` when the build produced no diagnostics."""

        return not self.diagnostics

    @property
    def commands(self) -> tuple[CommandArtifact, ...]:
        return tuple(artifact for artifact in self.artifacts if isinstance(artifact, CommandArtifact))

    @property
    def help_commands(self) -> tuple[HelpArtifact, ...]:
        return tuple(artifact for artifact in self.artifacts if isinstance(artifact, HelpArtifact))

    @property
    def group_options(self) -> tuple[GroupOptionsArtifact, ...]:
        return tuple(artifact for artifact in self.artifacts if isinstance(artifact, GroupOptionsArtifact))

    @property
    def groups(self) -> tuple[GroupArtifact, ...]:
        return tuple(artifact for artifact in self.artifacts if isinstance(artifact, GroupArtifact))

    def render(self, config: CompilerConfig) -> str:
        """Render the artifacts of this build in the configured output format."""

        return render(self.artifacts, self.sources, config)


def compile_function(
    declaration: FunctionDeclaration,
    *,
    module: str,
    config: CompilerConfig,
) -> CommandArtifact | HelpArtifact:
    """Compile one annotated function into an artifact.

    Option parsing, the signature check and the return-type check all run; the
    first failure in that order is raised.

    Args:
        declaration: Annotated function to compile.
        module: Import path of the declaring module.
        config: Build configuration.

    Returns:
        CommandArtifact | HelpArtifact: Artifact matching the declaration's role.

    Raises:
        AttributeCompileError: If any check fails.
    """

    failures: list[AttributeCompileError] = []
    options: CommandOptions | HelpOptions | None = None
    try:
        attributes = declaration.parse_attributes()
        if declaration.role is DeclarationRole.HELP:
            options = apply_strike_texts(HELP_TABLE.parse(attributes, strict=config.strict_duplicates))
        else:
            options = COMMAND_TABLE.parse(attributes, strict=config.strict_duplicates)
    except AttributeCompileError as exc:
        failures.append(exc)
    for check in (validate_declaration, validate_return_type):
        try:
            check(declaration, config)
        except AttributeCompileError as exc:
            failures.append(exc)
    if failures:
        raise failures[0]

    artifact: CommandArtifact | HelpArtifact
    if isinstance(options, HelpOptions):
        artifact = HelpArtifact(
            identifier=declaration.identifier,
            module=module,
            options=options,
            cfgs=declaration.cfgs,
            span=declaration.span,
        )
    else:
        assert isinstance(options, CommandOptions)
        options = replace(options, checks=tuple(qualify(module, check) for check in options.checks))
        artifact = CommandArtifact(
            name=declaration.name,
            identifier=declaration.identifier,
            module=module,
            options=options,
            cfgs=declaration.cfgs,
            span=declaration.span,
        )
    validate_symbols(artifact)
    return artifact


@dataclass(slots=True)
class _Build:
    """Mutable state of one build."""

    config: CompilerConfig
    diagnostics: list[Diagnostic] = field(default_factory=list)
    symbols: dict[str, SourceSpan] = field(default_factory=dict)

    def report(self, error: AttributeCompileError, declaration: str | None) -> None:
        LOGGER.debug("declaration %s failed: %s", declaration, error)
        self.diagnostics.append(Diagnostic.from_error(error, declaration=declaration))

    def claim_symbols(self, artifact: Artifact) -> None:
        """Reserve the generated symbols of ``artifact``.

        Raises:
            ReferenceResolutionError: If another artifact already generates one of the symbols.
        """

        validate_symbols(artifact)
        for symbol in artifact_symbols(artifact):
            claimed = self.symbols.get(symbol)
            if claimed is not None:
                raise ReferenceResolutionError(
                    f"`{symbol}` is already generated by the declaration at {claimed}",
                    span=artifact.span,
                )
        for symbol in artifact_symbols(artifact):
            self.symbols[symbol] = artifact.span


def compile_sources(
    paths: Iterable[Path],
    config: CompilerConfig | None = None,
    *,
    root: Path | None = None,
) -> BuildResult:
    """Compile every annotation source in ``paths``.

    Args:
        paths: Python source files to compile.
        config: Build configuration; defaults to :class:`CompilerConfig` defaults.
        root: Import root used to derive module names (defaults to the working directory).

    Returns:
        BuildResult: Artifacts and diagnostics of the build.
    """

    settings = config or CompilerConfig()
    modules: list[SourceModule] = []
    syntax_errors: list[Diagnostic] = []
    for path in paths:
        try:
            modules.append(read_source(path, module_name=module_name_for(path, root)))
        except AttributeCompileError as exc:
            syntax_errors.append(Diagnostic.from_error(exc))
    result = compile_modules(modules, settings)
    if not syntax_errors:
        return result
    return replace(result, diagnostics=tuple(sort_diagnostics([*syntax_errors, *result.diagnostics])))


def compile_modules(modules: Sequence[SourceModule], config: CompilerConfig | None = None) -> BuildResult:
    """Compile already parsed source modules.

    Commands and help commands of every module are compiled first, then group
    option records and groups in declaration order, then group references are
    linked.

    Args:
        modules: Parsed annotation sources.
        config: Build configuration; defaults to :class:`CompilerConfig` defaults.

    Returns:
        BuildResult: Artifacts and diagnostics of the build.
    """

    build = _Build(config=config or CompilerConfig())
    commands: list[CommandArtifact] = []
    helps: list[HelpArtifact] = []
    for module in modules:
        for declaration in module.functions:
            try:
                artifact = compile_function(declaration, module=module.module_name, config=build.config)
                build.claim_symbols(artifact)
            except AttributeCompileError as exc:
                build.report(exc, declaration.identifier)
                continue
            if isinstance(artifact, HelpArtifact):
                helps.append(artifact)
            else:
                commands.append(artifact)

    linked_commands = _link_commands(commands, build)
    lookup = command_lookup(linked_commands)

    resolver = GroupResolver(strict=build.config.strict_duplicates)
    records: list[GroupOptionsArtifact] = []
    pending: list[PendingGroup] = []
    for module in modules:
        for declaration in module.groups:
            try:
                resolved = resolver.declare(declaration, module=module.module_name)
                if isinstance(resolved, GroupOptionsArtifact):
                    record = _link_default_command(resolved, lookup)
                    build.claim_symbols(record)
                    records.append(record)
                else:
                    pending.append(resolved)
            except AttributeCompileError as exc:
                build.report(exc, None)

    linked_groups, failures = link_groups(pending, lookup)
    for error in failures:
        build.report(error, None)
    groups: list[GroupArtifact] = []
    failed: set[str] = set()
    for group in linked_groups:
        if any(name in failed for name in group.sub):
            build.report(
                ReferenceResolutionError(f"a sub-group of group `{group.name}` failed to compile", span=group.span),
                group.name,
            )
            failed.add(group.symbol)
            continue
        try:
            build.claim_symbols(group)
        except AttributeCompileError as exc:
            build.report(exc, group.name)
            failed.add(group.symbol)
            continue
        groups.append(group)

    artifacts: tuple[Artifact, ...] = (*linked_commands, *helps, *records, *groups)
    LOGGER.debug(
        "compiled %d artifact(s) from %d module(s) with %d diagnostic(s)",
        len(artifacts),
        len(modules),
        len(build.diagnostics),
    )
    return BuildResult(
        sources=tuple(modules),
        artifacts=artifacts,
        diagnostics=tuple(sort_diagnostics(build.diagnostics)),
    )


def command_lookup(commands: Iterable[CommandArtifact]) -> dict[str, CommandArtifact]:
    """Return ``commands`` keyed by function identifier and by command name.

    A command name takes precedence over another command's identifier.
    """

    items = list(commands)
    lookup = {command.identifier: command for command in items}
    lookup.update({command.name: command for command in items})
    return lookup


def _link_default_command(
    record: GroupOptionsArtifact,
    lookup: Mapping[str, CommandArtifact],
) -> GroupOptionsArtifact:
    name = record.options.default_command
    if name is None:
        return record
    command = lookup.get(name)
    if command is None:
        raise ReferenceResolutionError(
            f"default command `{name}` of options `{record.name}` is not a known command",
            span=record.span,
        )
    return replace(record, default_command=command.symbol)


def _link_commands(commands: Sequence[CommandArtifact], build: _Build) -> list[CommandArtifact]:
    """Resolve ``sub`` references between commands and order sub-commands first."""

    lookup = command_lookup(commands)
    valid = {command.symbol: command for command in commands}
    edges: dict[str, tuple[str, ...]] = {}
    for command in commands:
        symbols: list[str] = []
        for reference in command.options.sub:
            target = lookup.get(reference)
            if target is None:
                build.report(
                    ReferenceResolutionError(
                        f"command `{command.name}` lists unknown sub-command `{reference}`",
                        span=command.span,
                    ),
                    command.identifier,
                )
                valid.pop(command.symbol, None)
                break
            symbols.append(target.symbol)
        edges[command.symbol] = tuple(symbols)

    while True:
        sorter: graphlib.TopologicalSorter[str] = graphlib.TopologicalSorter()
        for symbol in valid:
            sorter.add(symbol, *(item for item in edges[symbol] if item in valid))
        try:
            order = list(sorter.static_order())
        except graphlib.CycleError as exc:
            cycle: list[str] = exc.args[1]
            for symbol in dict.fromkeys(cycle):
                command = valid.pop(symbol)
                build.report(
                    ReferenceResolutionError(
                        f"command `{command.name}` is part of a sub-command cycle",
                        span=command.span,
                    ),
                    command.identifier,
                )
            continue
        break

    linked: dict[str, CommandArtifact] = {}
    for symbol in order:
        command = valid[symbol]
        missing = next((item for item in edges[symbol] if item not in linked), None)
        if missing is not None:
            build.report(
                ReferenceResolutionError(
                    f"sub-command `{missing}` of command `{command.name}` failed to compile",
                    span=command.span,
                ),
                command.identifier,
            )
            continue
        linked[symbol] = replace(command, sub_commands=edges[symbol])
    return list(linked.values())


__all__ = [
    "BuildResult",
    "command_lookup",
    "compile_function",
    "compile_modules",
    "compile_sources",
]
