# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Signature and return-type contracts for annotated functions."""

from __future__ import annotations

import ast
from collections.abc import Sequence

from .config import CompilerConfig
from .declarations import DeclarationRole, FunctionDeclaration, ParameterKind
from .errors import ReturnTypeMismatchError, SignatureMismatchError


def normalize_annotation(text: str) -> str:
    """Return ``text`` re-rendered through :mod:`ast` so spacing and quotes match.

    String annotations (``"Context"``) are unwrapped before comparison.
    """

    try:
        node = ast.parse(text, mode="eval").body
    except SyntaxError:
        return text.strip()
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        return normalize_annotation(node.value)
    return ast.unparse(node)


def expected_parameters(role: DeclarationRole, config: CompilerConfig) -> tuple[str, ...]:
    """Return the parameter annotations required for ``role``."""

    if role is DeclarationRole.HELP:
        return config.help_parameters
    return config.command_parameters


def _contract(parameters: Sequence[str], return_types: Sequence[str]) -> str:
    return f"`({', '.join(parameters)}) -> {' | '.join(return_types)}`"


def validate_declaration(declaration: FunctionDeclaration, config: CompilerConfig) -> None:
    """Check the parameter list of ``declaration`` against its role contract.

    Args:
        declaration: Annotated function to validate.
        config: Build configuration naming the accepted annotation types.

    Raises:
        SignatureMismatchError: If the arity, parameter kinds or annotations differ.
    """

    expected = expected_parameters(declaration.role, config)
    contract = _contract(expected, config.return_types)
    message = f"{declaration.role.value} function `{declaration.identifier}` must have the signature {contract}"
    parameters = declaration.parameters
    if len(parameters) != len(expected):
        raise SignatureMismatchError(
            f"{message}; found {len(parameters)} parameter{'s' if len(parameters) != 1 else ''}",
            span=declaration.span,
        )
    for parameter, wanted in zip(parameters, expected, strict=True):
        if parameter.kind is not ParameterKind.POSITIONAL:
            raise SignatureMismatchError(
                f"{message}; parameter `{parameter.name}` is {parameter.kind.value}",
                span=parameter.span,
            )
        if parameter.annotation is None:
            raise SignatureMismatchError(
                f"{message}; parameter `{parameter.name}` has no annotation",
                span=parameter.span,
            )
        if normalize_annotation(parameter.annotation) != normalize_annotation(wanted):
            raise SignatureMismatchError(
                f"{message}; parameter `{parameter.name}` is annotated `{parameter.annotation}`, expected `{wanted}`",
                span=parameter.span,
            )


def validate_return_type(declaration: FunctionDeclaration, config: CompilerConfig) -> None:
    """Check that ``declaration`` returns one of the configured result types.

    Args:
        declaration: Annotated function to validate.
        config: Build configuration naming the accepted result types.

    Raises:
        ReturnTypeMismatchError: If the return annotation is missing or differs.
    """

    accepted = {normalize_annotation(value) for value in config.return_types}
    found = declaration.return_annotation
    if found is not None and normalize_annotation(found) in accepted:
        return
    expected = " or ".join(f"`{value}`" for value in config.return_types)
    detail = f"`{found}`" if found is not None else "no return annotation"
    raise ReturnTypeMismatchError(
        f"{declaration.role.value} function `{declaration.identifier}` must return {expected}; found {detail}",
        span=declaration.span,
    )


__all__ = [
    "expected_parameters",
    "normalize_annotation",
    "validate_declaration",
    "validate_return_type",
]
