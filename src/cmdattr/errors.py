# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Custom exceptions raised while compiling command annotations."""

from __future__ import annotations

from enum import Enum

from .types import SourceSpan


class ErrorKind(str, Enum):
    """Enumerate the diagnostic categories produced by the compiler."""

    UNKNOWN_OPTION = "unknown-option"
    SHAPE_MISMATCH = "shape-mismatch"
    UNKNOWN_PERMISSION = "unknown-permission"
    UNKNOWN_BEHAVIOUR = "unknown-behaviour"
    SIGNATURE_MISMATCH = "signature-mismatch"
    RETURN_TYPE_MISMATCH = "return-type-mismatch"
    REFERENCE = "duplicate-or-missing-reference"
    DUPLICATE_OPTION = "duplicate-option"
    MALFORMED_DECLARATION = "malformed-declaration"
    SYNTAX = "syntax"


class AttributeCompileError(RuntimeError):
    """Raised when a declaration cannot be compiled into configuration records."""

    kind: ErrorKind = ErrorKind.MALFORMED_DECLARATION

    def __init__(self, message: str, *, span: SourceSpan) -> None:
        """Initialise the error with a message anchored at ``span``.

        Args:
            message: Human-readable description of the failure.
            span: Source location of the offending annotation or identifier.
        """

        super().__init__(message)
        self.message = message
        self.span = span

    def __str__(self) -> str:
        return f"{self.span}: {self.message}"


class UnknownOptionError(AttributeCompileError):
    """Raised when an option name is not part of the schema's dispatch table."""

    kind = ErrorKind.UNKNOWN_OPTION


class ShapeMismatchError(AttributeCompileError):
    """Raised when an option value cannot be coerced to the expected shape."""

    kind = ErrorKind.SHAPE_MISMATCH


class UnknownPermissionError(AttributeCompileError):
    """Raised when a permission identifier has no matching bit constant."""

    kind = ErrorKind.UNKNOWN_PERMISSION


class UnknownBehaviourError(AttributeCompileError):
    """Raised when a help behaviour is not one of ``strike``, ``hide`` or ``nothing``."""

    kind = ErrorKind.UNKNOWN_BEHAVIOUR


class SignatureMismatchError(AttributeCompileError):
    """Raised when an annotated function's parameters break its role contract."""

    kind = ErrorKind.SIGNATURE_MISMATCH


class ReturnTypeMismatchError(AttributeCompileError):
    """Raised when an annotated function does not return the expected result type."""

    kind = ErrorKind.RETURN_TYPE_MISMATCH


class ReferenceResolutionError(AttributeCompileError):
    """Raised when a group references an undefined name or redefines an existing one."""

    kind = ErrorKind.REFERENCE


class DuplicateOptionError(AttributeCompileError):
    """Raised in strict mode when an option is specified more than once."""

    kind = ErrorKind.DUPLICATE_OPTION


class MalformedDeclarationError(AttributeCompileError):
    """Raised when a declaration uses syntax the compiler does not understand."""

    kind = ErrorKind.MALFORMED_DECLARATION


class SourceSyntaxError(AttributeCompileError):
    """Raised when an annotation source file cannot be parsed at all."""

    kind = ErrorKind.SYNTAX


class ConfigError(Exception):
    """Raised when compiler configuration input is invalid."""


__all__ = [
    "AttributeCompileError",
    "ConfigError",
    "DuplicateOptionError",
    "ErrorKind",
    "MalformedDeclarationError",
    "ReferenceResolutionError",
    "ReturnTypeMismatchError",
    "ShapeMismatchError",
    "SignatureMismatchError",
    "SourceSyntaxError",
    "UnknownBehaviourError",
    "UnknownOptionError",
    "UnknownPermissionError",
]
