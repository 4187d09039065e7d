"""
Control signals produced by executing a code block.

Every call to `CodeBlock.process` returns exactly one `ReturnValue`. SUCCESS lets the
caller carry on with the next sibling; BREAK, RETURN and HALT stop the enclosing block
and travel upward until a construct that owns them (a procedure call for RETURN and
BREAK, the top of the run for HALT) consumes them.
"""

from dataclasses import dataclass
from enum import Enum

from tortuga.tortuga_values import TypedValue


class ProcessResult(Enum):
    SUCCESS = "success"
    BREAK = "break"
    RETURN = "return"
    HALT = "halt"


@dataclass(frozen=True)
class ReturnValue:
    """Outcome of a block execution.

    Attributes:
        result (ProcessResult): The control signal.
        value (TypedValue | None): Payload of a RETURN that outputs a value.
    """

    result: ProcessResult
    value: TypedValue | None = None

    @property
    def is_success(self) -> bool:
        return self.result is ProcessResult.SUCCESS

    @classmethod
    def returning(cls, value: TypedValue | None = None) -> "ReturnValue":
        return cls(ProcessResult.RETURN, value)


SUCCESS = ReturnValue(ProcessResult.SUCCESS)
BREAK = ReturnValue(ProcessResult.BREAK)
HALT = ReturnValue(ProcessResult.HALT)


class HaltRequested(Exception):
    """Unwinds an expression whose procedure call was halted.

    Expressions produce values, not signals, so a HALT raised by a procedure used as a
    function travels as this exception until the statement that evaluated the
    expression turns it back into the HALT signal.
    """


__all__ = [
    "ProcessResult",
    "ReturnValue",
    "SUCCESS",
    "BREAK",
    "HALT",
    "HaltRequested",
]
