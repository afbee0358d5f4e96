# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Coercion rules from the normalised value model into typed option values."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from enum import Enum
from typing import Final

from .errors import ShapeMismatchError
from .values import AttributeValues, FlagValue, Identifier, Item, ListValue, Literal, ScalarValue, describe_value


class ValueShape(str, Enum):
    """Enumerate the value shapes an option may expect."""

    FLAG = "flag"
    TEXT = "text"
    OPTIONAL_TEXT = "optional-text"
    COUNT = "count"
    IDENTIFIER = "identifier"
    IDENTIFIERS = "identifiers"
    STRINGS = "strings"

    @property
    def expectation(self) -> str:
        """Return the human description used when a value has the wrong shape."""

        return _EXPECTATIONS[self]


_EXPECTATIONS: Final[dict[ValueShape, str]] = {
    ValueShape.FLAG: "no value, or a single boolean",
    ValueShape.TEXT: "a single string",
    ValueShape.OPTIONAL_TEXT: "a single string, or no value to generate the text",
    ValueShape.COUNT: "a single non-negative integer",
    ValueShape.IDENTIFIER: "a single identifier",
    ValueShape.IDENTIFIERS: "a list of identifiers",
    ValueShape.STRINGS: "a list of strings",
}


def _mismatch(attribute: AttributeValues, shape: ValueShape) -> ShapeMismatchError:
    return ShapeMismatchError(
        f"invalid value for `{attribute.name}`: got {describe_value(attribute.value)}, "
        f"expected {shape.expectation}",
        span=attribute.span,
    )


def _single_item(attribute: AttributeValues) -> Item | None:
    value = attribute.value
    if isinstance(value, ScalarValue):
        return value.item
    if isinstance(value, ListValue) and len(value.items) == 1:
        return value.items[0]
    return None


def _items(attribute: AttributeValues) -> tuple[Item, ...] | None:
    value = attribute.value
    if isinstance(value, ListValue):
        return value.items
    if isinstance(value, ScalarValue):
        return (value.item,)
    return None


def coerce_flag(attribute: AttributeValues) -> bool:
    """Return the boolean carried by a flag option.

    Args:
        attribute: Annotation occurrence to coerce.

    Returns:
        bool: ``True`` for the bare form, otherwise the explicit boolean literal.

    Raises:
        ShapeMismatchError: If the payload is not absent or a single boolean.
    """

    if isinstance(attribute.value, FlagValue):
        return True
    item = _single_item(attribute)
    if isinstance(item, Literal) and isinstance(item.value, bool):
        return item.value
    raise _mismatch(attribute, ValueShape.FLAG)


def coerce_text(attribute: AttributeValues) -> str:
    """Return the string payload of ``attribute``.

    Raises:
        ShapeMismatchError: If the payload is not a single string literal.
    """

    item = _single_item(attribute)
    if isinstance(item, Literal) and isinstance(item.value, str):
        return item.value
    raise _mismatch(attribute, ValueShape.TEXT)


def coerce_optional_text(attribute: AttributeValues) -> str:
    """Return the string payload, or ``""`` (generate text) for the bare form.

    Raises:
        ShapeMismatchError: If a payload is present but is not a single string.
    """

    if isinstance(attribute.value, FlagValue):
        return ""
    item = _single_item(attribute)
    if isinstance(item, Literal) and isinstance(item.value, str):
        return item.value
    raise _mismatch(attribute, ValueShape.OPTIONAL_TEXT)


def coerce_count(attribute: AttributeValues) -> int:
    """Return the non-negative integer payload of ``attribute``.

    Raises:
        ShapeMismatchError: If the payload is not a single non-negative integer.
    """

    item = _single_item(attribute)
    if (
        isinstance(item, Literal)
        and isinstance(item.value, int)
        and not isinstance(item.value, bool)
        and item.value >= 0
    ):
        return item.value
    raise _mismatch(attribute, ValueShape.COUNT)


def coerce_identifier(attribute: AttributeValues) -> str:
    """Return the identifier payload of ``attribute``.

    Raises:
        ShapeMismatchError: If the payload is not a single identifier.
    """

    item = _single_item(attribute)
    if isinstance(item, Identifier):
        return item.name
    raise _mismatch(attribute, ValueShape.IDENTIFIER)


def coerce_identifier_items(attribute: AttributeValues) -> tuple[Identifier, ...]:
    """Return the identifier items of ``attribute`` with their source spans.

    Raises:
        ShapeMismatchError: If the payload contains anything but identifiers.
    """

    items = _items(attribute)
    if items is None or not all(isinstance(item, Identifier) for item in items):
        raise _mismatch(attribute, ValueShape.IDENTIFIERS)
    return tuple(item for item in items if isinstance(item, Identifier))


def coerce_identifiers(attribute: AttributeValues) -> tuple[str, ...]:
    """Return the identifier names of ``attribute`` in source order."""

    return tuple(item.name for item in coerce_identifier_items(attribute))


def coerce_strings(attribute: AttributeValues) -> tuple[str, ...]:
    """Return the string payloads of ``attribute`` in source order.

    Raises:
        ShapeMismatchError: If the payload contains anything but string literals.
    """

    items = _items(attribute)
    if items is None:
        raise _mismatch(attribute, ValueShape.STRINGS)
    strings: list[str] = []
    for item in items:
        if not isinstance(item, Literal) or not isinstance(item.value, str):
            raise _mismatch(attribute, ValueShape.STRINGS)
        strings.append(item.value)
    return tuple(strings)


COERCERS: Final[Mapping[ValueShape, Callable[[AttributeValues], object]]] = {
    ValueShape.FLAG: coerce_flag,
    ValueShape.TEXT: coerce_text,
    ValueShape.OPTIONAL_TEXT: coerce_optional_text,
    ValueShape.COUNT: coerce_count,
    ValueShape.IDENTIFIER: coerce_identifier,
    ValueShape.IDENTIFIERS: coerce_identifiers,
    ValueShape.STRINGS: coerce_strings,
}


def coerce(shape: ValueShape, attribute: AttributeValues) -> object:
    """Coerce ``attribute`` into ``shape`` using the registered rule."""

    return COERCERS[shape](attribute)


__all__ = [
    "COERCERS",
    "ValueShape",
    "coerce",
    "coerce_count",
    "coerce_flag",
    "coerce_identifier",
    "coerce_identifier_items",
    "coerce_identifiers",
    "coerce_optional_text",
    "coerce_strings",
    "coerce_text",
]
