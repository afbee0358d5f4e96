# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for signature and return-type validation."""

from __future__ import annotations

import pytest

from cmdattr.config import CompilerConfig
from cmdattr.errors import ReturnTypeMismatchError, SignatureMismatchError
from cmdattr.validation import normalize_annotation, validate_declaration, validate_return_type

CONFIG = CompilerConfig()


def _function(parse_module, signature: str, *, marker: str = "command"):
    module = parse_module(f"@{marker}\ndef target{signature}:\n    ...\n")
    return module.functions[0]


def test_normalize_annotation() -> None:
    assert normalize_annotation("list[ CommandGroup ]") == "list[CommandGroup]"
    assert normalize_annotation('"Context"') == "Context"


def test_valid_command_signature(parse_module) -> None:
    declaration = _function(parse_module, "(ctx: Context, msg: Message, args: Args) -> CommandResult")

    validate_declaration(declaration, CONFIG)
    validate_return_type(declaration, CONFIG)


def test_valid_help_signature(parse_module) -> None:
    declaration = _function(
        parse_module,
        "(ctx: Context, msg: Message, args: Args, options: HelpOptions, "
        'groups: "list[CommandGroup]", owners: set[UserId]) -> CommandResult',
        marker="help",
    )

    validate_declaration(declaration, CONFIG)


def test_wrong_arity(parse_module) -> None:
    declaration = _function(parse_module, "(ctx: Context, msg: Message) -> CommandResult")

    with pytest.raises(SignatureMismatchError, match="found 2 parameters"):
        validate_declaration(declaration, CONFIG)


def test_wrong_annotation(parse_module) -> None:
    declaration = _function(parse_module, "(ctx: Context, msg: str, args: Args) -> CommandResult")

    with pytest.raises(SignatureMismatchError, match="parameter `msg` is annotated `str`, expected `Message`"):
        validate_declaration(declaration, CONFIG)


def test_unannotated_parameter(parse_module) -> None:
    declaration = _function(parse_module, "(ctx: Context, msg, args: Args) -> CommandResult")

    with pytest.raises(SignatureMismatchError, match="parameter `msg` has no annotation"):
        validate_declaration(declaration, CONFIG)


def test_variadic_parameter(parse_module) -> None:
    declaration = _function(parse_module, "(ctx: Context, msg: Message, *args: Args) -> CommandResult")

    with pytest.raises(SignatureMismatchError, match="parameter `args` is variadic"):
        validate_declaration(declaration, CONFIG)


def test_help_contract_is_reported(parse_module) -> None:
    declaration = _function(
        parse_module,
        "(ctx: Context, msg: Message, args: Args) -> CommandResult",
        marker="help",
    )

    with pytest.raises(SignatureMismatchError, match="help function `target` must have the signature"):
        validate_declaration(declaration, CONFIG)


def test_return_type_mismatch(parse_module) -> None:
    declaration = _function(parse_module, "(ctx: Context, msg: Message, args: Args) -> None")

    with pytest.raises(ReturnTypeMismatchError, match="must return `CommandResult`; found `None`"):
        validate_return_type(declaration, CONFIG)


def test_missing_return_annotation(parse_module) -> None:
    declaration = _function(parse_module, "(ctx: Context, msg: Message, args: Args)")

    with pytest.raises(ReturnTypeMismatchError, match="found no return annotation"):
        validate_return_type(declaration, CONFIG)


def test_contract_comes_from_configuration(parse_module) -> None:
    config = CompilerConfig(command_parameters=("Request",), return_types=("Response", "Awaitable[Response]"))
    declaration = _function(parse_module, "(request: Request) -> Awaitable[Response]")

    validate_declaration(declaration, config)
    validate_return_type(declaration, config)
