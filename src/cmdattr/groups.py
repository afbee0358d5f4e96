# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Resolve ``group`` and ``group_options`` declarations.

Option records are registered in declaration order so that ``inherit`` can
only reference records resolved earlier in the build. Inheritance starts from
the referenced record and applies local options on top; list-valued fields
written locally replace the inherited list rather than extending it.
Records are registered under their declared name and, when the call is
assigned, under the variable name too, matching what the runtime markers see.

Command, sub-group and default-command references are linked in a second pass
once every group is registered.
"""

from __future__ import annotations

import ast
import graphlib
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Final

from .artifacts import CommandArtifact, GroupArtifact, GroupOptionsArtifact
from .declarations import GroupCallKind, GroupDeclaration
from .dispatch import GROUP_TABLE
from .errors import AttributeCompileError, MalformedDeclarationError, ReferenceResolutionError
from .schemas import GroupOptions
from .types import SourceSpan, qualify
from .values import AttributeValues, Identifier, dotted_name, parse_item, parse_payload

LOGGER = logging.getLogger(__name__)

INHERIT_KEY: Final[str] = "inherit"
OPTIONS_ACCESSOR: Final[str] = "options"
CHECKS_KEY: Final[str] = "checks"
_GROUP_KEYS: Final[frozenset[str]] = frozenset({"name", "options", "commands", "sub"})


@dataclass(frozen=True, slots=True)
class PendingGroup:
    """A group whose options are resolved but whose references are not yet linked."""

    name: str
    module: str
    options: GroupOptions
    commands: tuple[Identifier, ...]
    sub: tuple[Identifier, ...]
    default_command: AttributeValues | None
    cfgs: tuple[str, ...]
    span: SourceSpan


@dataclass(slots=True)
class GroupRegistry:
    """Per-build registry of option records and groups, in declaration order."""

    options: dict[str, GroupOptions] = field(default_factory=dict)
    groups: dict[str, PendingGroup] = field(default_factory=dict)

    def register_options(self, key: str, options: GroupOptions, *, span: SourceSpan) -> None:
        """Register ``options`` under ``key`` for later ``inherit`` references.

        Raises:
            ReferenceResolutionError: If ``key`` is already registered.
        """

        if key in self.options:
            raise ReferenceResolutionError(f"options `{key}` are defined more than once", span=span)
        self.options[key] = options

    def lookup_options(self, reference: Identifier) -> GroupOptions:
        """Return the options registered under ``reference``.

        Raises:
            ReferenceResolutionError: If nothing was registered under the name yet.
        """

        try:
            return self.options[reference.name]
        except KeyError:
            raise ReferenceResolutionError(
                f"cannot inherit from `{reference.name}`: no options with that name are defined before this point",
                span=reference.span,
            ) from None


def _string_key(node: ast.expr | None, *, path: Path, span: SourceSpan) -> tuple[str, SourceSpan]:
    if node is None:
        raise MalformedDeclarationError("dictionary unpacking is not supported here", span=span)
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        return node.value, SourceSpan.of(node, path)
    raise MalformedDeclarationError(
        f"expected a string key, found `{ast.unparse(node)}`",
        span=SourceSpan.of(node, path),
    )


def _dict_literal(node: ast.expr, *, what: str, path: Path) -> ast.Dict:
    if not isinstance(node, ast.Dict):
        raise MalformedDeclarationError(
            f"{what} must be a dictionary literal",
            span=SourceSpan.of(node, path),
        )
    return node


def options_attributes(
    node: ast.Dict,
    *,
    path: Path,
) -> tuple[tuple[AttributeValues, ...], Identifier | None]:
    """Split an ``options`` dictionary literal into annotations and its inherit reference.

    Args:
        node: Dictionary literal holding group options.
        path: Source file used to anchor errors.

    Returns:
        tuple[tuple[AttributeValues, ...], Identifier | None]: Options in source
        order and the ``inherit`` reference if one was written.

    Raises:
        MalformedDeclarationError: If a key is not a string or ``inherit`` is not a name.
    """

    attributes: list[AttributeValues] = []
    inherit: Identifier | None = None
    span = SourceSpan.of(node, path)
    for key_node, value_node in zip(node.keys, node.values, strict=True):
        key, key_span = _string_key(key_node, path=path, span=span)
        if key == INHERIT_KEY:
            item = parse_item(value_node, path=path)
            if not isinstance(item, Identifier):
                raise MalformedDeclarationError(
                    "`inherit` must name an options record (`base`) or a group's options (`group.options`)",
                    span=item.span,
                )
            inherit = item
            continue
        attributes.append(AttributeValues(name=key, value=parse_payload(value_node, path=path), span=key_span))
    return tuple(attributes), inherit


def _identifier_list(node: ast.expr, *, key: str, path: Path) -> tuple[Identifier, ...]:
    if not isinstance(node, (ast.List, ast.Tuple)):
        raise MalformedDeclarationError(f"`{key}` must be a list of identifiers", span=SourceSpan.of(node, path))
    identifiers: list[Identifier] = []
    for element in node.elts:
        item = parse_item(element, path=path)
        if not isinstance(item, Identifier):
            raise MalformedDeclarationError(f"`{key}` must be a list of identifiers", span=item.span)
        identifiers.append(item)
    return tuple(identifiers)


@dataclass(slots=True)
class GroupResolver:
    """Resolve group declarations of one build against a shared registry."""

    strict: bool = False
    registry: GroupRegistry = field(default_factory=GroupRegistry)

    def resolve_options(
        self,
        node: ast.Dict,
        *,
        path: Path,
        module: str,
    ) -> tuple[GroupOptions, tuple[AttributeValues, ...]]:
        """Parse an options literal, applying its ``inherit`` reference first.

        Args:
            node: Dictionary literal holding group options.
            path: Source file used to anchor errors.
            module: Import path of the declaring module, used to qualify checks.

        Returns:
            tuple[GroupOptions, tuple[AttributeValues, ...]]: Resolved options and
            the raw annotations they were built from.
        """

        attributes, inherit = options_attributes(node, path=path)
        base = self.registry.lookup_options(inherit) if inherit is not None else None
        options = GROUP_TABLE.parse(attributes, strict=self.strict, base=base)
        # inherited checks are already qualified; checks written here replace them
        if any(attribute.name == CHECKS_KEY for attribute in attributes):
            options = replace(options, checks=tuple(qualify(module, check) for check in options.checks))
        return options, attributes

    def declare(self, declaration: GroupDeclaration, *, module: str) -> GroupOptionsArtifact | PendingGroup:
        """Resolve one ``group`` or ``group_options`` call and register it.

        Args:
            declaration: Module-level call to resolve.
            module: Import path of the module declaring it.

        Returns:
            GroupOptionsArtifact | PendingGroup: Standalone record or group awaiting linking.

        Raises:
            AttributeCompileError: If the declaration is malformed or references unknown names.
        """

        if declaration.kind is GroupCallKind.GROUP_OPTIONS:
            return self._declare_options(declaration, module=module)
        return self._declare_group(declaration, module=module)

    def _declare_options(self, declaration: GroupDeclaration, *, module: str) -> GroupOptionsArtifact:
        call = declaration.call
        path = declaration.span.path
        if call.keywords or len(call.args) != 2:
            raise MalformedDeclarationError(
                "group_options takes exactly two arguments: a name and an options dictionary",
                span=declaration.span,
            )
        name_node, options_node = call.args
        name = dotted_name(name_node)
        if name is None and isinstance(name_node, ast.Constant) and isinstance(name_node.value, str):
            name = name_node.value
        if not name or "." in name:
            raise MalformedDeclarationError(
                "group_options must be named by an identifier or a string",
                span=SourceSpan.of(name_node, path),
            )
        options, _ = self.resolve_options(
            _dict_literal(options_node, what="group options", path=path),
            path=path,
            module=module,
        )
        self.registry.register_options(name, options, span=declaration.span)
        if declaration.target is not None and declaration.target != name:
            self.registry.register_options(declaration.target, options, span=declaration.span)
        LOGGER.debug("registered group options %s", name)
        return GroupOptionsArtifact(
            name=name,
            module=module,
            options=options,
            cfgs=declaration.cfgs,
            span=declaration.span,
        )

    def _declare_group(self, declaration: GroupDeclaration, *, module: str) -> PendingGroup:
        call = declaration.call
        path = declaration.span.path
        if call.keywords or len(call.args) != 1:
            raise MalformedDeclarationError(
                "group takes exactly one dictionary literal argument",
                span=declaration.span,
            )
        literal = _dict_literal(call.args[0], what="a group", path=path)
        entries: dict[str, ast.expr] = {}
        for key_node, value_node in zip(literal.keys, literal.values, strict=True):
            key, key_span = _string_key(key_node, path=path, span=declaration.span)
            if key not in _GROUP_KEYS:
                raise MalformedDeclarationError(
                    f"unknown group field `{key}`; expected one of {', '.join(sorted(_GROUP_KEYS))}",
                    span=key_span,
                )
            if key in entries:
                raise MalformedDeclarationError(f"group field `{key}` is written more than once", span=key_span)
            entries[key] = value_node

        name_node = entries.get("name")
        if not (isinstance(name_node, ast.Constant) and isinstance(name_node.value, str) and name_node.value):
            raise MalformedDeclarationError("a group needs a non-empty string `name`", span=declaration.span)
        name = name_node.value
        if "options" in entries:
            options, attributes = self.resolve_options(
                _dict_literal(entries["options"], what="group options", path=path),
                path=path,
                module=module,
            )
        else:
            options, attributes = GroupOptions(), ()
        if "commands" not in entries:
            raise MalformedDeclarationError(f"group `{name}` needs a `commands` list", span=declaration.span)
        commands = _identifier_list(entries["commands"], key="commands", path=path)
        sub = _identifier_list(entries["sub"], key="sub", path=path) if "sub" in entries else ()

        if name in self.registry.groups:
            raise ReferenceResolutionError(f"group `{name}` is defined more than once", span=declaration.span)
        self.registry.register_options(f"{name}.{OPTIONS_ACCESSOR}", options, span=declaration.span)
        # ``admin = group({"name": "administration", ...})`` is inherited as ``admin.options``
        if declaration.target is not None and declaration.target != name:
            self.registry.register_options(f"{declaration.target}.{OPTIONS_ACCESSOR}", options, span=declaration.span)
        default_command = next(
            (attribute for attribute in reversed(attributes) if attribute.name == "default_command"),
            None,
        )
        pending = PendingGroup(
            name=name,
            module=module,
            options=options,
            commands=commands,
            sub=sub,
            default_command=default_command,
            cfgs=declaration.cfgs,
            span=declaration.span,
        )
        self.registry.groups[name] = pending
        LOGGER.debug("registered group %s", name)
        return pending


def link_groups(
    pending: Iterable[PendingGroup],
    commands: Mapping[str, CommandArtifact],
) -> tuple[list[GroupArtifact], list[AttributeCompileError]]:
    """Link command and sub-group references of every pending group.

    A group whose references cannot be resolved is dropped, and so is every
    group that lists it as a sub-group. Returned groups are ordered so that
    sub-groups precede the groups referencing them.

    Args:
        pending: Groups in declaration order.
        commands: Compiled commands keyed by command name and function identifier.

    Returns:
        tuple[list[GroupArtifact], list[AttributeCompileError]]: Linked groups in
        emission order and one error per failed group, in declaration order.
    """

    candidates = {group.name: group for group in pending}
    errors: dict[str, AttributeCompileError] = {}
    linked: dict[str, GroupArtifact] = {}

    for group in candidates.values():
        try:
            linked[group.name] = _link_commands(group, commands)
        except AttributeCompileError as exc:
            errors[group.name] = exc

    _reject_cycles(candidates, linked, errors)

    changed = True
    while changed:
        changed = False
        for name in list(linked):
            failure = _check_sub_groups(candidates[name], candidates, errors)
            if failure is not None:
                errors[name] = failure
                del linked[name]
                changed = True

    sorter: graphlib.TopologicalSorter[str] = graphlib.TopologicalSorter()
    for name in linked:
        sorter.add(name, *(reference.name for reference in candidates[name].sub))
    ordered = [
        replace(linked[name], sub=tuple(linked[item.name].symbol for item in candidates[name].sub))
        for name in sorter.static_order()
        if name in linked
    ]
    return ordered, [errors[name] for name in candidates if name in errors]


def _reject_cycles(
    candidates: Mapping[str, PendingGroup],
    linked: dict[str, GroupArtifact],
    errors: dict[str, AttributeCompileError],
) -> None:
    while True:
        sorter: graphlib.TopologicalSorter[str] = graphlib.TopologicalSorter()
        for name in linked:
            sorter.add(name, *(item.name for item in candidates[name].sub if item.name in linked))
        try:
            sorter.prepare()
        except graphlib.CycleError as exc:
            cycle: list[str] = exc.args[1]
            rendered = " -> ".join(reversed(cycle))
            for name in dict.fromkeys(cycle):
                errors[name] = ReferenceResolutionError(
                    f"group `{name}` is part of a sub-group cycle: {rendered}",
                    span=candidates[name].span,
                )
                linked.pop(name, None)
            LOGGER.debug("rejected sub-group cycle %s", rendered)
            continue
        return


def _link_commands(group: PendingGroup, commands: Mapping[str, CommandArtifact]) -> GroupArtifact:
    symbols: list[str] = []
    for reference in group.commands:
        command = commands.get(reference.name)
        if command is None:
            raise ReferenceResolutionError(
                f"group `{group.name}` lists unknown command `{reference.name}`",
                span=reference.span,
            )
        symbols.append(command.symbol)

    default_symbol: str | None = None
    default_name = group.options.default_command
    if default_name is not None:
        command = commands.get(default_name)
        if command is None:
            span = group.default_command.span if group.default_command is not None else group.span
            raise ReferenceResolutionError(
                f"default command `{default_name}` of group `{group.name}` is not a known command",
                span=span,
            )
        default_symbol = command.symbol

    return GroupArtifact(
        name=group.name,
        module=group.module,
        options=group.options,
        commands=tuple(symbols),
        sub=(),
        default_command=default_symbol,
        cfgs=group.cfgs,
        span=group.span,
    )


def _check_sub_groups(
    group: PendingGroup,
    candidates: Mapping[str, PendingGroup],
    errors: Mapping[str, AttributeCompileError],
) -> ReferenceResolutionError | None:
    for reference in group.sub:
        sub_group = candidates.get(reference.name)
        if sub_group is None:
            return ReferenceResolutionError(
                f"group `{group.name}` lists unknown sub-group `{reference.name}`",
                span=reference.span,
            )
        if reference.name in errors:
            return ReferenceResolutionError(
                f"sub-group `{reference.name}` of group `{group.name}` failed to compile",
                span=reference.span,
            )
        if not sub_group.options.prefixes:
            return ReferenceResolutionError(
                f"sub-group `{reference.name}` of group `{group.name}` must define at least one prefix",
                span=reference.span,
            )
    return None


__all__ = [
    "CHECKS_KEY",
    "GroupRegistry",
    "GroupResolver",
    "INHERIT_KEY",
    "OPTIONS_ACCESSOR",
    "PendingGroup",
    "link_groups",
    "options_attributes",
]
