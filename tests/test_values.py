import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from tortuga.tortuga_errors import TypeMismatch
from tortuga.tortuga_values import (
    FALSE,
    NULL,
    TRUE,
    TypedValue,
    TypeTag,
    as_boolean,
    as_integer,
    as_number,
    truncate,
    type_named,
    wrap,
)


def test_constructors_tag_payloads() -> None:
    assert TypedValue.number(3).type is TypeTag.NUMBER
    assert TypedValue.boolean(True).type is TypeTag.BOOLEAN
    assert TypedValue.string("hi").type is TypeTag.STRING
    assert NULL.is_null
    assert not TRUE.is_null


def test_payload_must_match_tag() -> None:
    with pytest.raises(ValueError):
        TypedValue(TypeTag.NUMBER, "3")
    with pytest.raises(ValueError):
        TypedValue(TypeTag.NUMBER, True)
    with pytest.raises(ValueError):
        TypedValue(TypeTag.NULL, 0)


def test_values_are_immutable() -> None:
    value = TypedValue.number(1)
    with pytest.raises(AttributeError):
        value.raw = 2  # type: ignore[misc]


def test_str_rendering() -> None:
    assert str(TypedValue.number(3.0)) == "3"
    assert str(TypedValue.number(2.5)) == "2.5"
    assert str(TypedValue.number(math.inf)) == "inf"
    assert str(TRUE) == "true"
    assert str(FALSE) == "false"
    assert str(NULL) == "null"
    assert str(TypedValue.string("abc")) == "abc"


def test_as_number_rejects_non_numbers() -> None:
    assert as_number(TypedValue.number(4)) == 4.0
    for value in (TRUE, NULL, TypedValue.string("4")):
        with pytest.raises(TypeMismatch):
            as_number(value)


def test_as_boolean_accepts_numbers() -> None:
    assert as_boolean(TRUE) is True
    assert as_boolean(FALSE) is False
    assert as_boolean(TypedValue.number(0)) is False
    assert as_boolean(TypedValue.number(-0.5)) is True
    with pytest.raises(TypeMismatch):
        as_boolean(TypedValue.string("true"))
    with pytest.raises(TypeMismatch):
        as_boolean(NULL)


@given(st.floats(allow_nan=False) | st.integers())  # type: ignore[misc]
def test_as_boolean_is_nonzero(n: float) -> None:
    assert as_boolean(TypedValue.number(n)) == (n != 0)


def test_wrap_and_registry() -> None:
    assert wrap(None) is NULL
    assert wrap(True) == TRUE
    assert wrap(2) == TypedValue.number(2)
    assert wrap("x") == TypedValue.string("x")
    with pytest.raises(TypeMismatch):
        wrap([1])
    assert type_named("Number") is TypeTag.NUMBER
    with pytest.raises(TypeMismatch):
        type_named("list")


def test_as_integer_truncates_toward_zero() -> None:
    assert as_integer(TypedValue.number(2.9)) == 2
    assert as_integer(TypedValue.number(-2.9)) == -2
    with pytest.raises(TypeMismatch):
        as_integer(TRUE)


@pytest.mark.parametrize("x", [math.inf, -math.inf, math.nan])  # type: ignore[misc]
def test_truncate_rejects_non_finite(x: float) -> None:
    with pytest.raises(TypeMismatch, match="Cannot truncate"):
        truncate(x)


@given(st.floats(allow_nan=False, allow_infinity=False))  # type: ignore[misc]
def test_truncate_matches_int(x: float) -> None:
    assert truncate(x) == int(x)
