"""
Typed runtime values for the Tortuga interpreter.

A runtime value is a `TypedValue`: an immutable pair of a `TypeTag` and the raw
Python payload. The set of tags is closed (Number, Boolean, String, Null) and every
consumer branches on the tag, never on the payload's Python type.

Classes:
    TypeTag: Enum of the four runtime types, compared by identity.
    TypedValue: Frozen tag/payload pair; validates that the payload matches the tag.

Functions:
    as_number(value): Coerce to float or raise `TypeMismatch`.
    as_integer(value): Truncate a finite Number toward zero.
    truncate(x): Truncate a finite float toward zero.
    as_boolean(value): Coerce to bool (nonzero Number is true) or raise `TypeMismatch`.
    wrap(raw): Build a TypedValue from a plain Python value.
    type_named(name): Look up a tag in the type registry.

Example:
    >>> as_boolean(TypedValue.number(2))
    True
    >>> str(TypedValue.number(3.0))
    '3'
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from tortuga.tortuga_errors import TypeMismatch


class TypeTag(Enum):
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING = "string"
    NULL = "null"

    def __repr__(self) -> str:
        return f"TypeTag.{self.name}"


TYPE_REGISTRY: dict[str, TypeTag] = {tag.value: tag for tag in TypeTag}


def _matches(tag: TypeTag, raw: Any) -> bool:
    if tag is TypeTag.NUMBER:
        return isinstance(raw, (int, float)) and not isinstance(raw, bool)
    if tag is TypeTag.BOOLEAN:
        return isinstance(raw, bool)
    if tag is TypeTag.STRING:
        return isinstance(raw, str)
    if tag is TypeTag.NULL:
        return raw is None
    raise AssertionError(f"Unhandled type tag: {tag!r}")  # pragma: no cover


@dataclass(frozen=True)
class TypedValue:
    """A runtime value together with its type tag.

    Attributes:
        type (TypeTag): The value's runtime type.
        raw (int | float | bool | str | None): The payload, matching `type`.

    Raises:
        ValueError: If the payload does not match the tag.
    """

    type: TypeTag
    raw: Any = None

    def __post_init__(self) -> None:
        if not _matches(self.type, self.raw):
            raise ValueError(
                f"Payload {self.raw!r} does not match type {self.type.value}"
            )

    @classmethod
    def number(cls, raw: int | float) -> "TypedValue":
        return cls(TypeTag.NUMBER, raw)

    @classmethod
    def boolean(cls, raw: bool) -> "TypedValue":
        return cls(TypeTag.BOOLEAN, raw)

    @classmethod
    def string(cls, raw: str) -> "TypedValue":
        return cls(TypeTag.STRING, raw)

    @property
    def is_null(self) -> bool:
        return self.type is TypeTag.NULL

    def __str__(self) -> str:
        if self.type is TypeTag.NUMBER:
            raw = self.raw
            if isinstance(raw, float) and math.isfinite(raw) and raw.is_integer():
                return str(int(raw))
            return str(raw)
        if self.type is TypeTag.BOOLEAN:
            return "true" if self.raw else "false"
        if self.type is TypeTag.STRING:
            return str(self.raw)
        return "null"


NULL = TypedValue(TypeTag.NULL)
TRUE = TypedValue.boolean(True)
FALSE = TypedValue.boolean(False)


def as_number(value: TypedValue) -> float:
    """Widens a Number to float.

    Raises:
        TypeMismatch: If the value is not a Number.
    """
    if value.type is TypeTag.NUMBER:
        return float(value.raw)
    raise TypeMismatch(f"Expected a number, got {value.type.value} {str(value)!r}")


def truncate(x: float) -> int:
    """Truncates toward zero.

    Raises:
        TypeMismatch: If `x` is inf or nan.
    """
    if not math.isfinite(x):
        raise TypeMismatch(f"Cannot truncate {x}")
    return math.trunc(x)


def as_integer(value: TypedValue) -> int:
    return truncate(as_number(value))


def as_boolean(value: TypedValue) -> bool:
    """Coerces a Boolean or Number to bool; zero is false, any other number is true.

    Raises:
        TypeMismatch: If the value is a String or Null.
    """
    if value.type is TypeTag.BOOLEAN:
        return bool(value.raw)
    if value.type is TypeTag.NUMBER:
        return value.raw != 0
    raise TypeMismatch(f"Expected a boolean, got {value.type.value} {str(value)!r}")


def wrap(raw: Any) -> TypedValue:
    """Builds the TypedValue matching a plain Python value."""
    if raw is None:
        return NULL
    if isinstance(raw, bool):
        return TypedValue.boolean(raw)
    if isinstance(raw, (int, float)):
        return TypedValue.number(raw)
    if isinstance(raw, str):
        return TypedValue.string(raw)
    raise TypeMismatch(f"No runtime type for Python value {raw!r}")


def type_named(name: str) -> TypeTag:
    try:
        return TYPE_REGISTRY[name.lower()]
    except KeyError:
        raise TypeMismatch(f"Unknown type name: {name}") from None


__all__ = [
    "TypeTag",
    "TypedValue",
    "TYPE_REGISTRY",
    "NULL",
    "TRUE",
    "FALSE",
    "as_number",
    "as_boolean",
    "as_integer",
    "truncate",
    "wrap",
    "type_named",
]
