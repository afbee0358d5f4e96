# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Normalised value model for raw annotation payloads.

Every annotation occurrence is reduced to one of three shapes before any
option-specific logic runs:

* :class:`FlagValue` for the bare decorator form (``@owners_only``);
* :class:`ScalarValue` for a single payload (``@description("Pings")``);
* :class:`ListValue` for the list form (``@aliases("p", "pong")``).

Payload items are either :class:`Literal` values or :class:`Identifier`
references. The helpers here only inspect syntax; they never import or
evaluate the annotated module.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass
from pathlib import Path
from typing import TypeAlias

from .errors import MalformedDeclarationError
from .types import SourceSpan

LiteralScalar: TypeAlias = str | int | bool


@dataclass(frozen=True, slots=True)
class Literal:
    """Literal payload item such as a string, integer or boolean."""

    value: LiteralScalar
    span: SourceSpan


@dataclass(frozen=True, slots=True)
class Identifier:
    """Identifier payload item, possibly dotted (``base.options``)."""

    name: str
    span: SourceSpan


Item: TypeAlias = Literal | Identifier


@dataclass(frozen=True, slots=True)
class FlagValue:
    """Option present without a payload."""


@dataclass(frozen=True, slots=True)
class ScalarValue:
    """Option carrying exactly one payload item."""

    item: Item


@dataclass(frozen=True, slots=True)
class ListValue:
    """Option carrying an ordered sequence of payload items."""

    items: tuple[Item, ...]


Value: TypeAlias = FlagValue | ScalarValue | ListValue


@dataclass(frozen=True, slots=True)
class AttributeValues:
    """A single annotation occurrence: its option name, payload and location."""

    name: str
    value: Value
    span: SourceSpan


def describe_value(value: Value) -> str:
    """Return a short human description of ``value`` for error messages.

    Args:
        value: Normalised payload to describe.

    Returns:
        str: Description such as ``"no value"`` or ``"a list of 2 values"``.
    """

    if isinstance(value, FlagValue):
        return "no value"
    if isinstance(value, ScalarValue):
        return f"a single {_describe_item(value.item)}"
    count = len(value.items)
    return f"a list of {count} value{'s' if count != 1 else ''}"


def _describe_item(item: Item) -> str:
    if isinstance(item, Identifier):
        return "identifier"
    if isinstance(item.value, bool):
        return "boolean"
    if isinstance(item.value, int):
        return "integer"
    return "string"


def dotted_name(node: ast.expr) -> str | None:
    """Return the dotted name spelled by ``node`` or ``None`` when it is not a name.

    Args:
        node: Expression node such as ``foo`` or ``foo.options``.

    Returns:
        str | None: ``"foo.options"`` style text, or ``None`` for other expressions.
    """

    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        owner = dotted_name(node.value)
        return f"{owner}.{node.attr}" if owner is not None else None
    return None


def parse_item(node: ast.expr, *, path: Path) -> Item:
    """Convert a payload expression into a :class:`Literal` or :class:`Identifier`.

    Args:
        node: Expression appearing inside an annotation payload.
        path: Source file used to anchor errors.

    Returns:
        Item: Normalised payload item.

    Raises:
        MalformedDeclarationError: If ``node`` is neither a supported literal nor a name.
    """

    span = SourceSpan.of(node, path)
    if isinstance(node, ast.Constant) and isinstance(node.value, (str, int)):
        return Literal(value=node.value, span=span)
    if (
        isinstance(node, ast.UnaryOp)
        and isinstance(node.op, ast.USub)
        and isinstance(node.operand, ast.Constant)
        and type(node.operand.value) is int
    ):
        return Literal(value=-node.operand.value, span=span)
    name = dotted_name(node)
    if name is not None:
        return Identifier(name=name, span=span)
    raise MalformedDeclarationError(
        f"unsupported annotation payload `{ast.unparse(node)}`; expected a literal or an identifier",
        span=span,
    )


def parse_payload(node: ast.expr, *, path: Path) -> Value:
    """Convert a payload expression into a scalar or list value.

    Args:
        node: Expression used as a payload (a literal, a name, or a list/tuple literal).
        path: Source file used to anchor errors.

    Returns:
        Value: :class:`ListValue` for list and tuple literals, :class:`ScalarValue` otherwise.
    """

    if isinstance(node, (ast.List, ast.Tuple)):
        return ListValue(items=tuple(parse_item(element, path=path) for element in node.elts))
    return ScalarValue(item=parse_item(node, path=path))


def parse_attribute(decorator: ast.expr, *, path: Path) -> AttributeValues:
    """Normalise one decorator into an :class:`AttributeValues` occurrence.

    Args:
        decorator: Decorator expression attached to an annotated function.
        path: Source file used to anchor errors.

    Returns:
        AttributeValues: Option name, payload and location of the annotation.

    Raises:
        MalformedDeclarationError: If the decorator does not follow a supported form.
    """

    span = SourceSpan.of(decorator, path)
    if isinstance(decorator, ast.Call):
        name = dotted_name(decorator.func)
        if name is None:
            raise MalformedDeclarationError(f"unsupported annotation `{ast.unparse(decorator)}`", span=span)
        if decorator.keywords:
            raise MalformedDeclarationError(
                f"annotation `{name}` does not accept keyword arguments",
                span=span,
            )
        if any(isinstance(argument, ast.Starred) for argument in decorator.args):
            raise MalformedDeclarationError(f"annotation `{name}` does not accept unpacked arguments", span=span)
        option = name.rsplit(".", 1)[-1]
        if len(decorator.args) == 1:
            return AttributeValues(name=option, value=parse_payload(decorator.args[0], path=path), span=span)
        items = tuple(parse_item(argument, path=path) for argument in decorator.args)
        return AttributeValues(name=option, value=ListValue(items=items), span=span)

    name = dotted_name(decorator)
    if name is None:
        raise MalformedDeclarationError(f"unsupported annotation `{ast.unparse(decorator)}`", span=span)
    return AttributeValues(name=name.rsplit(".", 1)[-1], value=FlagValue(), span=span)


__all__ = [
    "AttributeValues",
    "FlagValue",
    "Identifier",
    "Item",
    "ListValue",
    "Literal",
    "ScalarValue",
    "Value",
    "describe_value",
    "dotted_name",
    "parse_attribute",
    "parse_item",
    "parse_payload",
]
