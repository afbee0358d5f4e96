# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Render compiled artifacts as a Python module or a JSON manifest.

The Python rendering instantiates the runtime framework's record classes.
Every record is wrapped in the conditional tests captured from its source
declaration, so a declaration guarded by ``if sys.platform == "linux":`` is
only registered under the same condition.
"""

from __future__ import annotations

import ast
import builtins
import json
import keyword
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Final

from .artifacts import Artifact, CommandArtifact, GroupArtifact, GroupOptionsArtifact, HelpArtifact
from .config import CompilerConfig, OutputFormat
from .constants import COLOURS, HelpBehaviour, OnlyIn
from .declarations import SourceModule
from .errors import MalformedDeclarationError
from .permissions import permission_names
from .schemas import GroupOptions, HelpOptions
from .types import JSONValue, split_reference

LOGGER = logging.getLogger(__name__)

GENERATED_HEADER: Final[str] = "# Generated by cmdattr. Do not edit by hand."
FRAMEWORK_NAMES: Final[tuple[str, ...]] = (
    "Colour",
    "Command",
    "CommandGroup",
    "CommandOptions",
    "GroupOptions",
    "HelpBehaviour",
    "HelpCommand",
    "HelpOptions",
    "OnlyIn",
    "Permissions",
)
MANIFEST_VERSION: Final[int] = 1
MARKERS_MODULE: Final[str] = "cmdattr.markers"
_SKIPPED_MODULES: Final[frozenset[str]] = frozenset({"__future__", MARKERS_MODULE})
_BUILTIN_NAMES: Final[frozenset[str]] = frozenset(dir(builtins))
_INDENT: Final[str] = "    "
_HELP_TEXT_FIELDS: Final[tuple[str, ...]] = (
    "suggestion_text",
    "no_help_available_text",
    "usage_label",
    "usage_sample_label",
    "ungrouped_label",
    "grouped_label",
    "aliases_label",
    "description_label",
    "guild_only_text",
    "checks_label",
    "dm_only_text",
    "dm_and_guild_text",
    "available_text",
    "command_not_found_text",
    "individual_command_tip",
    "group_prefix",
    "strikethrough_commands_tip_in_dm",
    "strikethrough_commands_tip_in_guild",
)
_BEHAVIOUR_FIELDS: Final[tuple[str, ...]] = (
    "lacking_role",
    "lacking_permissions",
    "lacking_ownership",
    "wrong_channel",
)


def is_valid_symbol(symbol: str) -> bool:
    """Return ``True`` when ``symbol`` can be assigned in generated Python."""

    return symbol.isidentifier() and not keyword.iskeyword(symbol)


def artifact_symbols(artifact: Artifact) -> tuple[str, ...]:
    """Return every module-level symbol ``artifact`` defines when emitted."""

    if isinstance(artifact, GroupOptionsArtifact):
        return (artifact.symbol,)
    return (artifact.options_symbol, artifact.symbol)


def validate_symbols(artifact: Artifact) -> None:
    """Reject artifacts whose generated symbols are not valid identifiers.

    Args:
        artifact: Artifact about to be emitted.

    Raises:
        MalformedDeclarationError: If a derived symbol is not a Python identifier.
    """

    for symbol in artifact_symbols(artifact):
        if not is_valid_symbol(symbol):
            raise MalformedDeclarationError(
                f"cannot derive a valid symbol from this name: `{symbol}` is not a Python identifier",
                span=artifact.span,
            )


def render(
    artifacts: Sequence[Artifact],
    sources: Sequence[SourceModule],
    config: CompilerConfig,
) -> str:
    """Render ``artifacts`` in the configured output format.

    Args:
        artifacts: Compiled artifacts in emission order.
        sources: Parsed source modules the artifacts were compiled from.
        config: Build configuration selecting the output format.

    Returns:
        str: Generated Python source or JSON manifest text.
    """

    if config.output_format is OutputFormat.JSON:
        return render_json(artifacts, config)
    return render_python(artifacts, sources, config)


@dataclass(slots=True)
class _ModuleWriter:
    """Accumulate the lines of the generated module."""

    aliases: Mapping[str, str]
    imported: Mapping[str, frozenset[str]]
    lines: list[str]

    def record(self, artifact: Artifact, statements: Sequence[str]) -> None:
        self.lines.append("")
        depth = 0
        for test in artifact.cfgs:
            guard = qualify_guard(
                test,
                alias=self.aliases[artifact.module],
                imported=self.imported.get(artifact.module, frozenset()),
            )
            self.lines.append(f"{_INDENT * depth}if {guard}:")
            depth += 1
        for statement in statements:
            self.lines.extend(f"{_INDENT * depth}{line}" for line in statement.splitlines())

    def reference(self, module: str, name: str) -> str:
        return f"{self.aliases[module]}.{name}"

    def qualified(self, reference: str) -> str:
        return self.reference(*split_reference(reference))


class _GuardRewriter(ast.NodeTransformer):
    """Route free names of a guard through the alias of its source module."""

    def __init__(self, alias: str, keep: frozenset[str]) -> None:
        self.alias = alias
        self.keep = keep

    def visit_Name(self, node: ast.Name) -> ast.expr:
        if not isinstance(node.ctx, ast.Load) or node.id in self.keep:
            return node
        attribute = ast.Attribute(value=ast.Name(id=self.alias, ctx=ast.Load()), attr=node.id, ctx=ast.Load())
        return ast.copy_location(attribute, node)


def qualify_guard(test: str, *, alias: str, imported: frozenset[str]) -> str:
    """Return ``test`` rewritten so it evaluates inside the generated module.

    Names bound by a copied import and builtins are kept; every other free name
    (a module-level constant such as ``DEBUG``) is read from the source module
    through ``alias``.

    Args:
        test: Guard expression captured from the source module.
        alias: Name the generated module imports the source module under.
        imported: Names the copied imports of the source module bind.

    Returns:
        str: Guard expression valid in the generated module.
    """

    tree = ast.parse(test, mode="eval")
    local = {node.id for node in ast.walk(tree) if isinstance(node, ast.Name) and isinstance(node.ctx, ast.Store)}
    keep = (imported - frozenset(FRAMEWORK_NAMES)) | _BUILTIN_NAMES | local
    return ast.unparse(_GuardRewriter(alias, frozenset(keep)).visit(tree))


def render_python(
    artifacts: Sequence[Artifact],
    sources: Sequence[SourceModule],
    config: CompilerConfig,
) -> str:
    """Render ``artifacts`` as an importable Python module.

    Args:
        artifacts: Compiled artifacts in emission order.
        sources: Parsed source modules whose top-level imports are copied.
        config: Build configuration naming the framework module.

    Returns:
        str: Generated module source ending with a newline.
    """

    modules = list(dict.fromkeys([source.module_name for source in sources] + [a.module for a in artifacts]))
    aliases = {module: f"_source_{index}" for index, module in enumerate(modules)}
    lines = [GENERATED_HEADER, "", "from __future__ import annotations", ""]
    copied = copied_imports(sources)
    if copied:
        lines.extend(copied)
        lines.append("")
    # framework names are imported after the copied imports so they cannot be shadowed
    lines.append(f"from {config.framework_module} import (")
    lines.extend(f"{_INDENT}{name}," for name in FRAMEWORK_NAMES)
    lines.append(")")
    lines.extend(f"import {module} as {alias}" for module, alias in aliases.items())

    imported = {source.module_name: imported_names(source) for source in sources}
    writer = _ModuleWriter(aliases=aliases, imported=imported, lines=lines)
    for artifact in artifacts:
        writer.record(artifact, _statements(artifact, writer))

    LOGGER.debug("rendered %d artifact(s) as Python", len(artifacts))
    return "\n".join(writer.lines) + "\n"


def _source_imports(source: SourceModule) -> list[ast.Import | ast.ImportFrom]:
    """Return the copyable top-level imports of ``source`` as absolute imports.

    ``__future__`` imports and imports of the runtime marker module are dropped.
    """

    is_package = source.path.name == "__init__.py"
    kept: list[ast.Import | ast.ImportFrom] = []
    for node in source.imports:
        if isinstance(node, ast.ImportFrom):
            if node.module in _SKIPPED_MODULES and not node.level:
                continue
            if node.level:
                absolute = resolve_relative(source.module_name, node.module, node.level, is_package=is_package)
                if absolute is None:
                    LOGGER.warning(
                        "%s:%d: skipping relative import beyond the top-level package",
                        source.path,
                        node.lineno,
                    )
                    continue
                node = ast.ImportFrom(module=absolute, names=node.names, level=0)
        elif any(alias.name in _SKIPPED_MODULES for alias in node.names):
            continue
        kept.append(node)
    return kept


def copied_imports(sources: Iterable[SourceModule]) -> list[str]:
    """Return the top-level imports of ``sources`` rewritten as absolute imports.

    ``__future__`` imports are dropped and duplicates are emitted once.
    """

    rendered = [ast.unparse(node) for source in sources for node in _source_imports(source)]
    return list(dict.fromkeys(rendered))


def imported_names(source: SourceModule) -> frozenset[str]:
    """Return the names bound by the copied imports of ``source``."""

    names: set[str] = set()
    for node in _source_imports(source):
        for alias in node.names:
            if alias.name == "*":
                continue
            if isinstance(node, ast.Import):
                names.add(alias.asname or alias.name.partition(".")[0])
            else:
                names.add(alias.asname or alias.name)
    return frozenset(names)


def resolve_relative(module_name: str, target: str | None, level: int, *, is_package: bool) -> str | None:
    """Return the absolute module named by a relative import.

    Args:
        module_name: Dotted name of the importing module.
        target: Module part of the import (``None`` for ``from . import x``).
        level: Number of leading dots.
        is_package: Whether the importing module is a package ``__init__``.

    Returns:
        str | None: Absolute module path, or ``None`` when the import escapes the top-level package.
    """

    parts = module_name.split(".")
    drop = level - 1 if is_package else level
    if drop >= len(parts):
        return None
    base = parts[: len(parts) - drop] if drop else parts
    if target:
        base = [*base, target]
    return ".".join(base)


def _tuple(values: Iterable[str]) -> str:
    items = list(values)
    if len(items) == 1:
        return f"({items[0]},)"
    return f"({', '.join(items)})"


def _optional(value: str | None) -> str:
    return repr(value) if value is not None else "None"


def _permissions(bits: int) -> str:
    names = permission_names(bits)
    if not names:
        return "Permissions(0)"
    return " | ".join(f"Permissions.{name}" for name in names)


def _only_in(value: OnlyIn) -> str:
    return f"OnlyIn.{value.name}"


def _behaviour(value: HelpBehaviour) -> str:
    return f"HelpBehaviour.{value.name}"


def _call(target: str, arguments: Sequence[tuple[str, str]]) -> str:
    body = "".join(f"\n{_INDENT}{name}={value}," for name, value in arguments)
    return f"{target}({body}\n)"


def _statements(artifact: Artifact, writer: _ModuleWriter) -> list[str]:
    if isinstance(artifact, CommandArtifact):
        return _command_statements(artifact, writer)
    if isinstance(artifact, HelpArtifact):
        return _help_statements(artifact, writer)
    if isinstance(artifact, GroupArtifact):
        return _group_statements(artifact, writer)
    return [f"{artifact.symbol} = {_call('GroupOptions', _group_arguments(artifact, writer, artifact.default_command))}"]


def _command_statements(artifact: CommandArtifact, writer: _ModuleWriter) -> list[str]:
    options = artifact.options
    arguments = [
        ("checks", _tuple(writer.qualified(check) for check in options.checks)),
        ("bucket", _optional(options.bucket)),
        ("names", _tuple(repr(name) for name in artifact.names)),
        ("desc", _optional(options.description)),
        ("usage", _optional(options.usage)),
        ("example", _optional(options.example)),
        ("min_args", repr(options.min_args)),
        ("max_args", repr(options.max_args)),
        ("allowed_roles", _tuple(repr(role) for role in options.allowed_roles)),
        ("required_permissions", _permissions(options.required_permissions)),
        ("help_available", repr(options.help_available)),
        ("only_in", _only_in(options.only_in)),
        ("owners_only", repr(options.owners_only)),
        ("owner_privilege", repr(options.owner_privilege)),
        ("sub_commands", _tuple(artifact.sub_commands)),
    ]
    return [
        f"{artifact.options_symbol} = {_call('CommandOptions', arguments)}",
        f"{artifact.symbol} = Command(fun={writer.reference(artifact.module, artifact.identifier)}, "
        f"options={artifact.options_symbol})",
    ]


def _help_arguments(options: HelpOptions) -> list[tuple[str, str]]:
    arguments = [(name, _optional(getattr(options, name))) for name in _HELP_TEXT_FIELDS]
    arguments.extend((name, _behaviour(getattr(options, name))) for name in _BEHAVIOUR_FIELDS)
    arguments.append(("embed_error_colour", f"Colour.{options.embed_error_colour}"))
    arguments.append(("embed_success_colour", f"Colour.{options.embed_success_colour}"))
    arguments.append(("max_levenshtein_distance", repr(options.max_levenshtein_distance)))
    return arguments


def _help_statements(artifact: HelpArtifact, writer: _ModuleWriter) -> list[str]:
    return [
        f"{artifact.options_symbol} = {_call('HelpOptions', _help_arguments(artifact.options))}",
        f"{artifact.symbol} = HelpCommand(fun={writer.reference(artifact.module, artifact.identifier)}, "
        f"options={artifact.options_symbol})",
    ]


def _group_arguments(
    artifact: GroupArtifact | GroupOptionsArtifact,
    writer: _ModuleWriter,
    default_command: str | None,
) -> list[tuple[str, str]]:
    options: GroupOptions = artifact.options
    return [
        ("prefixes", _tuple(repr(prefix) for prefix in options.prefixes)),
        ("allowed_roles", _tuple(repr(role) for role in options.allowed_roles)),
        ("only_in", _only_in(options.only_in)),
        ("owners_only", repr(options.owners_only)),
        ("owner_privilege", repr(options.owner_privilege)),
        ("help_available", repr(options.help_available)),
        ("checks", _tuple(writer.qualified(check) for check in options.checks)),
        ("required_permissions", _permissions(options.required_permissions)),
        ("default_command", default_command or "None"),
        ("description", _optional(options.description)),
    ]


def _group_statements(artifact: GroupArtifact, writer: _ModuleWriter) -> list[str]:
    arguments = _group_arguments(artifact, writer, artifact.default_command)
    arguments.append(("commands", _tuple(artifact.commands)))
    arguments.append(("sub_groups", _tuple(artifact.sub)))
    return [
        f"{artifact.options_symbol} = {_call('GroupOptions', arguments)}",
        f"{artifact.symbol} = CommandGroup(name={artifact.name!r}, options={artifact.options_symbol})",
    ]


def _permissions_payload(bits: int) -> dict[str, JSONValue]:
    return {"bits": bits, "names": list(permission_names(bits))}


def _command_payload(artifact: CommandArtifact) -> dict[str, JSONValue]:
    options = artifact.options
    return {
        "symbol": artifact.symbol,
        "options_symbol": artifact.options_symbol,
        "function": f"{artifact.module}:{artifact.identifier}",
        "cfgs": list(artifact.cfgs),
        "options": {
            "checks": list(options.checks),
            "bucket": options.bucket,
            "names": list(artifact.names),
            "description": options.description,
            "usage": options.usage,
            "example": options.example,
            "min_args": options.min_args,
            "max_args": options.max_args,
            "allowed_roles": list(options.allowed_roles),
            "required_permissions": _permissions_payload(options.required_permissions),
            "help_available": options.help_available,
            "only_in": options.only_in.value,
            "owners_only": options.owners_only,
            "owner_privilege": options.owner_privilege,
            "sub_commands": list(artifact.sub_commands),
        },
    }


def _help_payload(artifact: HelpArtifact) -> dict[str, JSONValue]:
    options = artifact.options
    payload: dict[str, JSONValue] = {name: getattr(options, name) for name in _HELP_TEXT_FIELDS}
    payload.update({name: getattr(options, name).value for name in _BEHAVIOUR_FIELDS})
    for name in ("embed_error_colour", "embed_success_colour"):
        colour = getattr(options, name)
        payload[name] = {"name": colour, "value": COLOURS[colour]}
    payload["max_levenshtein_distance"] = options.max_levenshtein_distance
    return {
        "symbol": artifact.symbol,
        "options_symbol": artifact.options_symbol,
        "function": f"{artifact.module}:{artifact.identifier}",
        "cfgs": list(artifact.cfgs),
        "options": payload,
    }


def _group_options_payload(
    artifact: GroupArtifact | GroupOptionsArtifact,
    default_command: str | None,
) -> dict[str, JSONValue]:
    options = artifact.options
    return {
        "prefixes": list(options.prefixes),
        "allowed_roles": list(options.allowed_roles),
        "only_in": options.only_in.value,
        "owners_only": options.owners_only,
        "owner_privilege": options.owner_privilege,
        "help_available": options.help_available,
        "checks": list(options.checks),
        "required_permissions": _permissions_payload(options.required_permissions),
        "default_command": default_command,
        "description": options.description,
    }


def manifest(artifacts: Iterable[Artifact], config: CompilerConfig) -> dict[str, JSONValue]:
    """Return the JSON-compatible manifest describing ``artifacts``.

    Args:
        artifacts: Compiled artifacts in emission order.
        config: Build configuration naming the framework module.

    Returns:
        dict[str, JSONValue]: Manifest grouped by artifact kind.
    """

    commands: list[JSONValue] = []
    help_commands: list[JSONValue] = []
    option_records: list[JSONValue] = []
    groups: list[JSONValue] = []
    for artifact in artifacts:
        if isinstance(artifact, CommandArtifact):
            commands.append(_command_payload(artifact))
        elif isinstance(artifact, HelpArtifact):
            help_commands.append(_help_payload(artifact))
        elif isinstance(artifact, GroupArtifact):
            options = _group_options_payload(artifact, artifact.default_command)
            options["commands"] = list(artifact.commands)
            options["sub_groups"] = list(artifact.sub)
            groups.append(
                {
                    "name": artifact.name,
                    "symbol": artifact.symbol,
                    "options_symbol": artifact.options_symbol,
                    "cfgs": list(artifact.cfgs),
                    "options": options,
                },
            )
        else:
            option_records.append(
                {
                    "name": artifact.name,
                    "symbol": artifact.symbol,
                    "cfgs": list(artifact.cfgs),
                    "options": _group_options_payload(artifact, artifact.default_command),
                },
            )
    return {
        "version": MANIFEST_VERSION,
        "framework_module": config.framework_module,
        "commands": commands,
        "help_commands": help_commands,
        "group_options": option_records,
        "groups": groups,
    }


def render_json(artifacts: Iterable[Artifact], config: CompilerConfig) -> str:
    """Render ``artifacts`` as an indented JSON manifest."""

    return json.dumps(manifest(artifacts, config), indent=2) + "\n"


__all__ = [
    "FRAMEWORK_NAMES",
    "GENERATED_HEADER",
    "MARKERS_MODULE",
    "artifact_symbols",
    "copied_imports",
    "imported_names",
    "is_valid_symbol",
    "manifest",
    "qualify_guard",
    "render",
    "render_json",
    "render_python",
    "resolve_relative",
    "validate_symbols",
]
