# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Collect annotated declarations from an annotation source module.

The source is parsed with :mod:`ast` and never imported. Functions decorated
with a ``command`` or ``help`` marker become :class:`FunctionDeclaration`
entries; module-level ``group(...)`` and ``group_options(...)`` calls become
:class:`GroupDeclaration` entries, whether used as statements or assigned to a
name. The tests of enclosing module-level ``if`` statements are captured as
conditional markers.
"""

from __future__ import annotations

import ast
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .errors import MalformedDeclarationError, SourceSyntaxError
from .types import COMMAND_MARKER, GROUP_CALL, GROUP_OPTIONS_CALL, HELP_MARKER, SourceSpan
from .values import AttributeValues, dotted_name, parse_attribute

LOGGER = logging.getLogger(__name__)

FunctionNode = ast.FunctionDef | ast.AsyncFunctionDef


class DeclarationRole(str, Enum):
    """Enumerate the roles an annotated function can play."""

    COMMAND = COMMAND_MARKER
    HELP = HELP_MARKER


class ParameterKind(str, Enum):
    """Enumerate the parameter kinds of an annotated function."""

    POSITIONAL = "positional"
    VARIADIC = "variadic"
    KEYWORD_ONLY = "keyword-only"
    VARIADIC_KEYWORD = "variadic-keyword"


@dataclass(frozen=True, slots=True)
class Parameter:
    """A single parameter of an annotated function."""

    name: str
    kind: ParameterKind
    annotation: str | None
    span: SourceSpan


@dataclass(frozen=True, slots=True)
class FunctionDeclaration:
    """One function carrying a role marker and its option annotations."""

    identifier: str
    role: DeclarationRole
    explicit_name: str | None
    parameters: tuple[Parameter, ...]
    return_annotation: str | None
    decorators: tuple[ast.expr, ...]
    cfgs: tuple[str, ...]
    span: SourceSpan
    marker_error: MalformedDeclarationError | None = None

    @property
    def name(self) -> str:
        """Return the command name, falling back to the function identifier."""

        return self.explicit_name if self.explicit_name is not None else self.identifier

    def parse_attributes(self) -> tuple[AttributeValues, ...]:
        """Return the option annotations in source order.

        Raises:
            MalformedDeclarationError: If the marker or an annotation is malformed.
        """

        if self.marker_error is not None:
            raise self.marker_error
        return tuple(parse_attribute(decorator, path=self.span.path) for decorator in self.decorators)


class GroupCallKind(str, Enum):
    """Enumerate the module-level calls declaring groups and option records."""

    GROUP = GROUP_CALL
    GROUP_OPTIONS = GROUP_OPTIONS_CALL


@dataclass(frozen=True, slots=True)
class GroupDeclaration:
    """A module-level ``group(...)`` or ``group_options(...)`` call.

    ``target`` is the variable the call is assigned to, if any.
    """

    kind: GroupCallKind
    call: ast.Call
    cfgs: tuple[str, ...]
    span: SourceSpan
    target: str | None = None


@dataclass(frozen=True, slots=True)
class SourceModule:
    """Declarations collected from one annotation source file."""

    path: Path
    module_name: str
    functions: tuple[FunctionDeclaration, ...]
    groups: tuple[GroupDeclaration, ...]
    imports: tuple[ast.Import | ast.ImportFrom, ...]


def module_name_for(path: Path, root: Path | None = None) -> str:
    """Return the dotted import path of ``path`` relative to ``root``.

    Args:
        path: Python source file.
        root: Import root; defaults to the current working directory.

    Returns:
        str: Dotted module name such as ``"bot.commands"``.
    """

    base = (root or Path.cwd()).resolve()
    resolved = path.resolve()
    try:
        relative = resolved.relative_to(base)
    except ValueError:
        relative = Path(resolved.name)
    parts = list(relative.with_suffix("").parts)
    if parts and parts[-1] == "__init__":
        parts.pop()
    return ".".join(parts) or resolved.stem


def read_source(path: Path, *, module_name: str | None = None) -> SourceModule:
    """Parse ``path`` and collect its declarations.

    Args:
        path: Annotation source file.
        module_name: Import path of the module; derived from ``path`` when omitted.

    Returns:
        SourceModule: Declarations in source order.

    Raises:
        SourceSyntaxError: If the file cannot be read or parsed.
    """

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceSyntaxError(f"cannot read source: {exc}", span=SourceSpan(path=path, line=1, column=1)) from exc
    return parse_source(text, path=path, module_name=module_name or module_name_for(path))


def parse_source(text: str, *, path: Path, module_name: str) -> SourceModule:
    """Parse ``text`` and collect its declarations.

    Args:
        text: Python source code.
        path: File the code was read from, used for spans.
        module_name: Import path of the module.

    Returns:
        SourceModule: Declarations in source order.

    Raises:
        SourceSyntaxError: If ``text`` is not valid Python.
    """

    try:
        tree = ast.parse(text, filename=str(path))
    except SyntaxError as exc:
        span = SourceSpan(path=path, line=exc.lineno or 1, column=exc.offset or 1)
        raise SourceSyntaxError(f"invalid syntax: {exc.msg}", span=span) from exc

    collector = _Collector(path)
    collector.visit_body(tree.body, ())
    imports = tuple(node for node in tree.body if isinstance(node, (ast.Import, ast.ImportFrom)))
    LOGGER.debug(
        "collected %d function(s) and %d group declaration(s) from %s",
        len(collector.functions),
        len(collector.groups),
        path,
    )
    return SourceModule(
        path=path,
        module_name=module_name,
        functions=tuple(collector.functions),
        groups=tuple(collector.groups),
        imports=imports,
    )


class _Collector:
    """Walk module-level statements tracking enclosing ``if`` tests."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.functions: list[FunctionDeclaration] = []
        self.groups: list[GroupDeclaration] = []

    def visit_body(self, body: Sequence[ast.stmt], cfgs: tuple[str, ...]) -> None:
        for statement in body:
            if isinstance(statement, (ast.FunctionDef, ast.AsyncFunctionDef)):
                declaration = self._function(statement, cfgs)
                if declaration is not None:
                    self.functions.append(declaration)
            elif isinstance(statement, ast.If):
                test = ast.unparse(statement.test)
                self.visit_body(statement.body, (*cfgs, test))
                if statement.orelse:
                    self.visit_body(statement.orelse, (*cfgs, f"not ({test})"))
            elif isinstance(statement, (ast.Expr, ast.Assign, ast.AnnAssign)) and isinstance(
                statement.value,
                ast.Call,
            ):
                self._group_call(statement.value, cfgs, _assigned_name(statement))

    def _group_call(self, call: ast.Call, cfgs: tuple[str, ...], target: str | None) -> None:
        name = dotted_name(call.func)
        if name is None:
            return
        stem = name.rsplit(".", 1)[-1]
        if stem not in {GROUP_CALL, GROUP_OPTIONS_CALL}:
            return
        # qualified calls such as ``match.group(1)`` only count with a literal
        if isinstance(call.func, ast.Attribute) and not any(isinstance(arg, ast.Dict) for arg in call.args):
            return
        self.groups.append(
            GroupDeclaration(
                kind=GroupCallKind(stem),
                call=call,
                cfgs=cfgs,
                span=SourceSpan.of(call, self.path),
                target=target,
            ),
        )

    def _function(self, node: FunctionNode, cfgs: tuple[str, ...]) -> FunctionDeclaration | None:
        marker_index: int | None = None
        role: DeclarationRole | None = None
        for index, decorator in enumerate(node.decorator_list):
            found = _marker_role(decorator)
            if found is None:
                continue
            if role is not None:
                error = MalformedDeclarationError(
                    f"function `{node.name}` carries more than one role marker",
                    span=SourceSpan.of(decorator, self.path),
                )
                return self._declaration(node, role, None, marker_index, cfgs, error)
            role, marker_index = found, index
        if role is None or marker_index is None:
            return None

        marker = node.decorator_list[marker_index]
        explicit_name: str | None = None
        error: MalformedDeclarationError | None = None
        try:
            explicit_name = _marker_name(marker, path=self.path)
        except MalformedDeclarationError as exc:
            error = exc
        return self._declaration(node, role, explicit_name, marker_index, cfgs, error)

    def _declaration(
        self,
        node: FunctionNode,
        role: DeclarationRole,
        explicit_name: str | None,
        marker_index: int | None,
        cfgs: tuple[str, ...],
        error: MalformedDeclarationError | None,
    ) -> FunctionDeclaration:
        decorators = tuple(
            decorator for index, decorator in enumerate(node.decorator_list) if index != marker_index
        )
        return FunctionDeclaration(
            identifier=node.name,
            role=role,
            explicit_name=explicit_name,
            parameters=_parameters(node, self.path),
            return_annotation=ast.unparse(node.returns) if node.returns is not None else None,
            decorators=decorators,
            cfgs=cfgs,
            span=SourceSpan.of(node, self.path),
            marker_error=error,
        )


def _assigned_name(statement: ast.stmt) -> str | None:
    if isinstance(statement, ast.Assign) and len(statement.targets) == 1:
        target: ast.expr = statement.targets[0]
    elif isinstance(statement, ast.AnnAssign):
        target = statement.target
    else:
        return None
    return target.id if isinstance(target, ast.Name) else None


def _marker_role(decorator: ast.expr) -> DeclarationRole | None:
    target = decorator.func if isinstance(decorator, ast.Call) else decorator
    name = dotted_name(target)
    if name is None:
        return None
    stem = name.rsplit(".", 1)[-1]
    if stem == COMMAND_MARKER:
        return DeclarationRole.COMMAND
    if stem == HELP_MARKER:
        return DeclarationRole.HELP
    return None


def _marker_name(decorator: ast.expr, *, path: Path) -> str | None:
    if not isinstance(decorator, ast.Call):
        return None
    if decorator.keywords or len(decorator.args) > 1:
        raise MalformedDeclarationError(
            "the role marker accepts at most one positional name",
            span=SourceSpan.of(decorator, path),
        )
    if not decorator.args:
        return None
    argument = decorator.args[0]
    if isinstance(argument, ast.Constant) and isinstance(argument.value, str) and argument.value:
        return argument.value
    raise MalformedDeclarationError(
        "the command name must be a non-empty string literal",
        span=SourceSpan.of(argument, path),
    )


def _parameters(node: FunctionNode, path: Path) -> tuple[Parameter, ...]:
    arguments = node.args
    parameters: list[Parameter] = []

    def add(argument: ast.arg, kind: ParameterKind) -> None:
        annotation = ast.unparse(argument.annotation) if argument.annotation is not None else None
        parameters.append(
            Parameter(name=argument.arg, kind=kind, annotation=annotation, span=SourceSpan.of(argument, path)),
        )

    for argument in (*arguments.posonlyargs, *arguments.args):
        add(argument, ParameterKind.POSITIONAL)
    if arguments.vararg is not None:
        add(arguments.vararg, ParameterKind.VARIADIC)
    for argument in arguments.kwonlyargs:
        add(argument, ParameterKind.KEYWORD_ONLY)
    if arguments.kwarg is not None:
        add(arguments.kwarg, ParameterKind.VARIADIC_KEYWORD)
    return tuple(parameters)


__all__ = [
    "DeclarationRole",
    "FunctionDeclaration",
    "GroupCallKind",
    "GroupDeclaration",
    "Parameter",
    "ParameterKind",
    "SourceModule",
    "module_name_for",
    "parse_source",
    "read_source",
]
