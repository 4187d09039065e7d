"""
Expression evaluation for the Tortuga interpreter.

Expressions arrive as grammar-shaped parse trees. Each precedence level is a node
whose children interleave operands and operator tokens:

    expression   relational (("and" | "or") relational)*
    relational   adding (("=" | "<>" | "<" | ">" | "<=" | ">=") adding)*
    adding       multiplying (("+" | "-") multiplying)*
    multiplying  exponent (("*" | "/" | "%" | "\\") exponent)*
    exponent     sign ("^" sign)*
    sign         ("+" | "-" | "not")* primary
    primary      number | float | string | literal | identifier | call

Evaluating a level collects the values of its operands and folds them pairwise, left
to right, with the operator found between each pair, so `1 - 2 - 3` is `(1 - 2) - 3`.
A level with a single operand never needs a node of its own; the parser collapses it.

Folds:
    - Arithmetic: operands widened to float; the result is always a Number.
    - Relational: operands widened to float; the result is a Boolean.
    - Boolean: operands coerced to Boolean; the result is a Boolean.

An operator the grammar admits but a fold does not implement produces the Null
sentinel instead of an error. These paths are logged at WARNING level.

Functions:
    evaluate(scope, node, block=None, halt=None): Evaluate one expression tree.

Raises:
    TypeMismatch: Operand of the wrong type at a coercion site.
    UndefinedVariable: Identifier not bound in any frame.
    UndefinedProcedure: Call to an unknown procedure or built-in.
    ProcedureError: Wrong arity, or a procedure that returns no value.
    HaltRequested: A procedure called from the expression was halted.
"""

import logging
import math
from collections.abc import Callable
from typing import Any

from tortuga.tortuga_ast import ASTNode
from tortuga.tortuga_errors import (
    ProcedureError,
    TortugaError,
    TypeMismatch,
    UndefinedProcedure,
)
from tortuga.tortuga_halt import HaltMonitor
from tortuga.tortuga_scope import Scope
from tortuga.tortuga_signal import HaltRequested, ProcessResult
from tortuga.tortuga_values import (
    NULL,
    TypedValue,
    TypeTag,
    as_boolean,
    as_number,
    truncate,
)

logger = logging.getLogger(__name__)

Fold = Callable[[TypedValue, TypedValue, str, ASTNode], TypedValue]


def _divide(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _power(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        return math.inf
    except ValueError:
        # 0 to a negative power, or a negative base with a fractional exponent
        return math.inf if a == 0 else math.nan


def _remainder(a: float, b: float) -> float:
    if b == 0 or math.isinf(a):
        return math.nan
    return math.fmod(a, b)


def _truncating_divide(a: float, b: float) -> float:
    if b == 0:
        raise TortugaError("Integer division by zero")
    return float(truncate(a / b))


ARITHMETIC: dict[str, Callable[[float, float], float]] = {
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "*": lambda a, b: a * b,
    "/": _divide,
    "%": _remainder,
    "\\": _truncating_divide,
    "^": _power,
}

RELATIONAL: dict[str, Callable[[float, float], bool]] = {
    ">=": lambda a, b: a >= b,
    "=>": lambda a, b: a >= b,
    "<=": lambda a, b: a <= b,
    "=<": lambda a, b: a <= b,
    "<": lambda a, b: a < b,
    ">": lambda a, b: a > b,
    "=": lambda a, b: a == b,
    "<>": lambda a, b: a != b,
}

BOOLEAN: dict[str, Callable[[bool, bool], bool]] = {
    "and": lambda a, b: a and b,
    "or": lambda a, b: a or b,
}


def fold_arithmetic(
    left: TypedValue, right: TypedValue, op: str, node: ASTNode
) -> TypedValue:
    a = as_number(left)
    b = as_number(right)
    fn = ARITHMETIC.get(op)
    if fn is None:
        logger.warning(
            "Unsupported arithmetic operator %r at line %s, col %s; keeping left operand",
            op,
            node.line,
            node.col,
        )
        return TypedValue.number(a)
    return TypedValue.number(fn(a, b))


def fold_relational(
    left: TypedValue, right: TypedValue, op: str, node: ASTNode
) -> TypedValue:
    a = as_number(left)
    b = as_number(right)
    fn = RELATIONAL.get(op)
    if fn is None:
        logger.warning(
            "Unsupported relational operator %r at line %s, col %s; result is null",
            op,
            node.line,
            node.col,
        )
        return NULL
    return TypedValue.boolean(fn(a, b))


def fold_boolean(
    left: TypedValue, right: TypedValue, op: str, node: ASTNode
) -> TypedValue:
    a = as_boolean(left)
    b = as_boolean(right)
    fn = BOOLEAN.get(op.lower())
    if fn is None:
        logger.warning(
            "Unsupported boolean operator %r at line %s, col %s; result is null",
            op,
            node.line,
            node.col,
        )
        return NULL
    return TypedValue.boolean(fn(a, b))


LEVEL_FOLDS: dict[str, Fold] = {
    "expression": fold_boolean,
    "relational": fold_relational,
    "adding": fold_arithmetic,
    "multiplying": fold_arithmetic,
    "exponent": fold_arithmetic,
}


def _trig(fn: Callable[[float], float]) -> Callable[[float], float]:
    return lambda degrees: fn(math.radians(degrees))


def _sqrt(x: float) -> float:
    return math.sqrt(x) if x >= 0 else math.nan


# name -> numeric function of one argument; trigonometry works in degrees
NUMERIC_BUILTINS: dict[str, Callable[[float], float]] = {
    "abs": abs,
    "sqrt": _sqrt,
    "sin": _trig(math.sin),
    "cos": _trig(math.cos),
    "tan": _trig(math.tan),
    "atan": lambda x: math.degrees(math.atan(x)),
    "int": lambda x: float(truncate(x)),
    "sgn": lambda x: float((x > 0) - (x < 0)),
}


def _call_builtin(name: str, args: list[TypedValue]) -> TypedValue:
    if len(args) != 1:
        raise ProcedureError(f"{name} expects 1 argument, got {len(args)}")
    if name == "len":
        arg = args[0]
        if arg.type is not TypeTag.STRING:
            raise TypeMismatch(f"len expects a string, got {arg.type.value}")
        return TypedValue.number(len(arg.raw))
    return TypedValue.number(NUMERIC_BUILTINS[name](as_number(args[0])))


BUILTIN_NAMES: set[str] = set(NUMERIC_BUILTINS) | {"len"}


class ExpressionEvaluator:
    """Evaluates expression trees against a scope.

    Attributes:
        scope (Scope): Variable frames used for identifier lookup.
        block (Any): The code block evaluating the expression; user procedures are
            resolved lexically from it. None restricts calls to the built-ins.
        halt (HaltMonitor): Token passed to procedures called from the expression.
    """

    def __init__(
        self, scope: Scope, block: Any = None, halt: HaltMonitor | None = None
    ) -> None:
        self.scope = scope
        self.block = block
        self.halt = halt if halt is not None else HaltMonitor()

    def evaluate(self, node: ASTNode) -> TypedValue:
        try:
            fold = LEVEL_FOLDS.get(node.kind)
            if fold is not None:
                return self._fold_level(node, fold)
            method = getattr(self, f"eval_{node.kind}", None)
            if method is None:
                raise NotImplementedError(
                    f"No evaluator for node kind '{node.kind}' "
                    f"(line {node.line}, col {node.col})"
                )
            value: TypedValue = method(node)
            return value
        except TortugaError as e:
            raise e.locate(node)

    def _fold_level(self, node: ASTNode, fold: Fold) -> TypedValue:
        operands = [self.evaluate(child) for child in node.children[0::2]]
        operators = [child.text for child in node.children[1::2]]
        if len(operands) != len(operators) + 1:
            raise TortugaError(f"Malformed '{node.kind}' expression")
        result = operands[0]
        for op, right in zip(operators, operands[1:]):
            result = fold(result, right, op, node)
        return result

    def eval_number(self, node: ASTNode) -> TypedValue:
        return TypedValue.number(int(node.text))

    def eval_float(self, node: ASTNode) -> TypedValue:
        return TypedValue.number(float(node.text))

    def eval_string(self, node: ASTNode) -> TypedValue:
        return TypedValue.string(node.text)

    def eval_literal(self, node: ASTNode) -> TypedValue:
        text = node.text.lower()
        if text in ("true", "false"):
            return TypedValue.boolean(text == "true")
        if text == "null":
            return NULL
        raise TypeMismatch(f"Unknown literal: {node.text}")

    def eval_identifier(self, node: ASTNode) -> TypedValue:
        return self.scope.lookup(node.text)

    def eval_sign(self, node: ASTNode) -> TypedValue:
        *prefix, operand = node.children
        signs = [child.text.lower() for child in prefix]
        negatives = signs.count("-")
        positives = signs.count("+")
        nots = signs.count("not")

        if (negatives and positives) or positives > 1:
            logger.warning(
                "Ambiguous sign prefix %r at line %s, col %s",
                " ".join(signs),
                node.line,
                node.col,
            )

        value = self.evaluate(operand)
        if value.type is TypeTag.NUMBER:
            n = as_number(value) * (-1) ** negatives
            if nots:
                # odd count negates the truth value of n
                return TypedValue.boolean((n == 0) if nots % 2 else (n != 0))
            return TypedValue.number(n)
        if value.type is TypeTag.BOOLEAN:
            if negatives or positives:
                raise TypeMismatch("Cannot apply a numeric sign to a boolean")
            return TypedValue.boolean(bool(value.raw) != bool(nots % 2))
        raise TypeMismatch(f"Cannot apply {' '.join(signs)!r} to a {value.type.value}")

    def eval_call(self, node: ASTNode) -> TypedValue:
        name = node.text
        args = [self.evaluate(child) for child in node.children]

        procedure = self.block.get_function(name) if self.block is not None else None
        if procedure is None:
            if name.lower() in BUILTIN_NAMES:
                return _call_builtin(name.lower(), args)
            raise UndefinedProcedure(name)

        result = procedure.invoke(args, self.scope, self.halt)
        if result.result is ProcessResult.HALT:
            raise HaltRequested()
        if result.result is ProcessResult.RETURN and result.value is not None:
            return result.value
        raise ProcedureError(f"{name} did not return a value")


def evaluate(
    scope: Scope,
    node: ASTNode,
    block: Any = None,
    halt: HaltMonitor | None = None,
) -> TypedValue:
    """Evaluates one expression tree.

    Args:
        scope: Frames used to resolve identifiers.
        node: Root of the expression tree.
        block: Block used to resolve user procedures (optional).
        halt: Cancellation token handed to called procedures (optional).

    Returns:
        The resulting TypedValue.
    """
    return ExpressionEvaluator(scope, block, halt).evaluate(node)


__all__ = [
    "ExpressionEvaluator",
    "evaluate",
    "fold_arithmetic",
    "fold_relational",
    "fold_boolean",
    "LEVEL_FOLDS",
    "BUILTIN_NAMES",
]
