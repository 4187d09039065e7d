"""
Runtime error hierarchy for the Tortuga interpreter.

Every fault that aborts a run derives from `TortugaError`. Errors are usually raised
deep inside the evaluator or the scope, where no source position is known; the code
block that ran the failing statement attaches the statement's line and column on the
way out (see `TortugaError.locate`).

Classes:
    TortugaError: Base class, carries an optional source position.
    UndefinedVariable: A variable lookup exhausted the whole scope chain.
    UndefinedProcedure: A call names a procedure that is not defined.
    TypeMismatch: A value could not be coerced to the type an operation needs.
    ProcedureError: A procedure was called with the wrong arity or used as a
        function without returning a value.
"""

from typing import Any


class TortugaError(Exception):
    """Base class for runtime faults.

    Attributes:
        message (str): Human readable description without position.
        line (int | None): Source line of the originating node.
        col (int | None): Source column of the originating node.
    """

    def __init__(self, message: str, line: int | None = None, col: int | None = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.col = col

    def locate(self, node: Any) -> "TortugaError":
        """Attach the position of `node` unless a position is already known."""
        if self.line is None and node is not None:
            self.line = getattr(node, "line", None)
            self.col = getattr(node, "col", None)
        return self

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.message} (line {self.line}, col {self.col})"


class UndefinedVariable(TortugaError):
    def __init__(self, name: str, line: int | None = None, col: int | None = None):
        super().__init__(f"Undefined variable: {name}", line, col)
        self.name = name


class UndefinedProcedure(TortugaError):
    def __init__(self, name: str, line: int | None = None, col: int | None = None):
        super().__init__(f"Undefined procedure: {name}", line, col)
        self.name = name


class TypeMismatch(TortugaError):
    """Raised at the coercion site when a value has the wrong type tag."""


class ProcedureError(TortugaError):
    """Raised for arity mismatches and procedures that produce no value."""


__all__ = [
    "TortugaError",
    "UndefinedVariable",
    "UndefinedProcedure",
    "TypeMismatch",
    "ProcedureError",
]
