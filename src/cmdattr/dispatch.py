# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Dispatch tables routing option names to their coercion and target field."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from functools import partial
from typing import Final, Generic

from .coercion import (
    ValueShape,
    coerce,
    coerce_count,
    coerce_identifier,
    coerce_identifier_items,
    coerce_text,
)
from .constants import COLOURS, HelpBehaviour, OnlyIn
from .errors import ShapeMismatchError, UnknownBehaviourError, UnknownOptionError
from .permissions import resolve_permissions
from .schemas import CommandOptions, GroupOptions, HelpOptions, OptionsBuilder, SchemaKind, SchemaT
from .values import AttributeValues

CompositeHandler = Callable[[OptionsBuilder, AttributeValues], None]


@dataclass(frozen=True, slots=True)
class OptionField:
    """Generic option that coerces its value and stores it in one schema field."""

    shape: ValueShape
    target: str


@dataclass(frozen=True, slots=True)
class DispatchTable(Generic[SchemaT]):
    """Static option table for one schema.

    Composite handlers are consulted before the generic field table; a name in
    neither is rejected as an unknown option.
    """

    kind: SchemaKind
    schema: type[SchemaT]
    fields: Mapping[str, OptionField]
    composites: Mapping[str, CompositeHandler]

    @property
    def option_names(self) -> frozenset[str]:
        """Return every option name accepted by this table."""

        return frozenset(self.fields) | frozenset(self.composites)

    def apply(self, builder: OptionsBuilder[SchemaT], attribute: AttributeValues) -> None:
        """Coerce ``attribute`` and store it into ``builder``.

        Args:
            builder: Builder accumulating the declaration's options.
            attribute: Annotation occurrence to apply.

        Raises:
            UnknownOptionError: If the option name is not part of this table.
        """

        handler = self.composites.get(attribute.name)
        spec = self.fields.get(attribute.name)
        if handler is None and spec is None:
            raise UnknownOptionError(f'invalid attribute: "{attribute.name}"', span=attribute.span)
        builder.mark(attribute)
        if handler is not None:
            handler(builder, attribute)
            return
        assert spec is not None
        builder.set(spec.target, coerce(spec.shape, attribute))

    def parse(
        self,
        attributes: Iterable[AttributeValues],
        *,
        strict: bool = False,
        base: SchemaT | None = None,
    ) -> SchemaT:
        """Build a frozen record from ``attributes`` processed in order.

        Args:
            attributes: Annotation occurrences in source order.
            strict: Reject options written more than once.
            base: Record providing starting values instead of the schema defaults.

        Returns:
            SchemaT: Finalised option record.
        """

        builder: OptionsBuilder[SchemaT] = OptionsBuilder(self.schema, strict=strict)
        for attribute in attributes:
            self.apply(builder, attribute)
        return builder.finalize(base)


def _num_args(builder: OptionsBuilder, attribute: AttributeValues) -> None:
    count = coerce_count(attribute)
    builder.set("min_args", count)
    builder.set("max_args", count)


def _required_permissions(builder: OptionsBuilder, attribute: AttributeValues) -> None:
    builder.set("required_permissions", resolve_permissions(coerce_identifier_items(attribute)))


def _only_in(builder: OptionsBuilder, attribute: AttributeValues) -> None:
    raw = coerce_text(attribute)
    context = OnlyIn.from_str(raw)
    if context is None:
        raise ShapeMismatchError(
            f'invalid value for `{attribute.name}`: "{raw}", expected "guilds" or "dms"',
            span=attribute.span,
        )
    builder.set("only_in", context)


def _behaviour(target: str, builder: OptionsBuilder, attribute: AttributeValues) -> None:
    raw = coerce_text(attribute)
    behaviour = HelpBehaviour.from_str(raw)
    if behaviour is None:
        raise UnknownBehaviourError(f'invalid help behaviour: "{raw}"', span=attribute.span)
    builder.set(target, behaviour)


def _colour(target: str, builder: OptionsBuilder, attribute: AttributeValues) -> None:
    name = coerce_identifier(attribute).rsplit(".", 1)[-1]
    if name not in COLOURS:
        raise ShapeMismatchError(
            f'invalid value for `{attribute.name}`: "{name}" is not a colour constant',
            span=attribute.span,
        )
    builder.set(target, name)


def _prefix(builder: OptionsBuilder, attribute: AttributeValues) -> None:
    builder.set("prefixes", (coerce_text(attribute),))


def _fields(**shapes: ValueShape) -> Mapping[str, OptionField]:
    return {name: OptionField(shape=shape, target=name) for name, shape in shapes.items()}


COMMAND_TABLE: Final[DispatchTable[CommandOptions]] = DispatchTable(
    kind=SchemaKind.COMMAND,
    schema=CommandOptions,
    fields=_fields(
        checks=ValueShape.IDENTIFIERS,
        bucket=ValueShape.TEXT,
        description=ValueShape.TEXT,
        usage=ValueShape.TEXT,
        example=ValueShape.TEXT,
        min_args=ValueShape.COUNT,
        max_args=ValueShape.COUNT,
        aliases=ValueShape.STRINGS,
        allowed_roles=ValueShape.STRINGS,
        help_available=ValueShape.FLAG,
        owners_only=ValueShape.FLAG,
        owner_privilege=ValueShape.FLAG,
        sub=ValueShape.IDENTIFIERS,
    ),
    composites={
        "num_args": _num_args,
        "required_permissions": _required_permissions,
        "only_in": _only_in,
    },
)

HELP_TABLE: Final[DispatchTable[HelpOptions]] = DispatchTable(
    kind=SchemaKind.HELP,
    schema=HelpOptions,
    fields=_fields(
        suggestion_text=ValueShape.TEXT,
        no_help_available_text=ValueShape.TEXT,
        usage_label=ValueShape.TEXT,
        usage_sample_label=ValueShape.TEXT,
        ungrouped_label=ValueShape.TEXT,
        grouped_label=ValueShape.TEXT,
        aliases_label=ValueShape.TEXT,
        description_label=ValueShape.TEXT,
        guild_only_text=ValueShape.TEXT,
        checks_label=ValueShape.TEXT,
        dm_only_text=ValueShape.TEXT,
        dm_and_guild_text=ValueShape.TEXT,
        available_text=ValueShape.TEXT,
        command_not_found_text=ValueShape.TEXT,
        individual_command_tip=ValueShape.TEXT,
        group_prefix=ValueShape.TEXT,
        strikethrough_commands_tip_in_dm=ValueShape.OPTIONAL_TEXT,
        strikethrough_commands_tip_in_guild=ValueShape.OPTIONAL_TEXT,
        max_levenshtein_distance=ValueShape.COUNT,
    ),
    composites={
        "lacking_role": partial(_behaviour, "lacking_role"),
        "lacking_permissions": partial(_behaviour, "lacking_permissions"),
        "lacking_ownership": partial(_behaviour, "lacking_ownership"),
        "wrong_channel": partial(_behaviour, "wrong_channel"),
        "embed_error_colour": partial(_colour, "embed_error_colour"),
        "embed_success_colour": partial(_colour, "embed_success_colour"),
    },
)

GROUP_TABLE: Final[DispatchTable[GroupOptions]] = DispatchTable(
    kind=SchemaKind.GROUP,
    schema=GroupOptions,
    fields=_fields(
        prefixes=ValueShape.STRINGS,
        allowed_roles=ValueShape.STRINGS,
        owners_only=ValueShape.FLAG,
        owner_privilege=ValueShape.FLAG,
        help_available=ValueShape.FLAG,
        checks=ValueShape.IDENTIFIERS,
        default_command=ValueShape.IDENTIFIER,
        description=ValueShape.TEXT,
    ),
    composites={
        "prefix": _prefix,
        "only_in": _only_in,
        "required_permissions": _required_permissions,
    },
)

TABLES: Final[Mapping[SchemaKind, DispatchTable]] = {
    SchemaKind.COMMAND: COMMAND_TABLE,
    SchemaKind.HELP: HELP_TABLE,
    SchemaKind.GROUP: GROUP_TABLE,
}

__all__ = [
    "COMMAND_TABLE",
    "CompositeHandler",
    "DispatchTable",
    "GROUP_TABLE",
    "HELP_TABLE",
    "OptionField",
    "TABLES",
]
