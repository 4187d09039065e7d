"""
Control constructs and statements of the Tortuga interpreter.

Every construct is a `CodeBlock` specialization. Compound constructs (loops, IF,
procedures) run their body through `CodeBlock.process`, which gives each body
execution its own frame; leaf statements run in the frame of their container.

Signals:
    A body result other than SUCCESS (BREAK, RETURN, HALT) ends the construct and is
    returned unchanged. Only a procedure call consumes RETURN and BREAK.

Classes:
    LogoFor: `FOR [var start stop step?] [...]`, direction inferred from the bounds.
    BasicFor: `FOR var = start TO stop [STEP s] ... NEXT`, inclusive bound.
    WhileBlock, RepeatBlock, IfBlock: Conditional and counted loops, conditionals.
    Procedure: User-defined procedure body with parameters.
    DefineProcedure, CallStatement: Procedure registration and invocation.
    Assign, Declare, PrintStatement, PrimitiveStatement, PauseStatement,
    ReturnStatement, BreakStatement, HaltStatement: Leaf statements.
"""

import logging
import math
from enum import Enum
from typing import Any

from tortuga.tortuga_ast import ASTNode
from tortuga.tortuga_block import CodeBlock, Statement
from tortuga.tortuga_errors import (
    ProcedureError,
    TortugaError,
    TypeMismatch,
    UndefinedProcedure,
)
from tortuga.tortuga_halt import HaltMonitor
from tortuga.tortuga_scope import Scope
from tortuga.tortuga_signal import (
    BREAK,
    HALT,
    SUCCESS,
    ProcessResult,
    ReturnValue,
)
from tortuga.tortuga_values import TypedValue, as_boolean, as_integer, as_number

logger = logging.getLogger(__name__)


class Direction(Enum):
    UNDETERMINED = "undetermined"
    INCREASE = "increase"
    DECREASE = "decrease"


class LoopState(Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    DONE = "done"


class LogoFor(CodeBlock):
    """Counted loop whose direction follows from its bounds.

    Start and stop are evaluated once. Counting goes up when start < stop and down
    when start > stop; equal bounds run nothing. An explicit step is added to the loop
    variable as given, even when its sign points away from stop, in which case the
    loop only ends when halted (a warning is logged). The stop value itself is
    excluded.

    Attributes:
        variable (str): Loop variable name.
        start, stop, step (ASTNode): Bound expressions; `step` may be None.
        direction (Direction): Set when the bounds are evaluated.
        state (LoopState): NOT_STARTED, RUNNING or DONE.
    """

    def __init__(
        self,
        node: ASTNode | None,
        parent: CodeBlock | None,
        variable: str,
        start: ASTNode,
        stop: ASTNode,
        step: ASTNode | None = None,
    ) -> None:
        super().__init__(node, parent)
        self.variable = variable
        self.start = start
        self.stop = stop
        self.step = step
        self.direction = Direction.UNDETERMINED
        self.state = LoopState.NOT_STARTED

    def _more(self, current: float, stop: float) -> bool:
        if self.direction is Direction.INCREASE:
            return current < stop
        if self.direction is Direction.DECREASE:
            return stop < current
        return False

    def process(self, scope: Scope, halt: HaltMonitor) -> ReturnValue:
        self.state = LoopState.NOT_STARTED
        with scope.frame(self):
            start = as_number(self.evaluate(scope, self.start, halt))
            stop = as_number(self.evaluate(scope, self.stop, halt))
            logger.debug(
                "[LogoFor] line %s, start %s, stop %s", self.line, start, stop
            )

            if start < stop:
                self.direction, step = Direction.INCREASE, 1.0
            elif start > stop:
                self.direction, step = Direction.DECREASE, -1.0
            else:
                self.direction, step = Direction.UNDETERMINED, 0.0

            if self.step is not None:
                implied = step
                step = as_number(self.evaluate(scope, self.step, halt))
                if step * implied < 0:
                    logger.warning(
                        "FOR step %s moves away from %s at line %s; "
                        "the loop runs until halted",
                        step,
                        stop,
                        self.line,
                    )

            self.state = LoopState.RUNNING
            result = SUCCESS
            current = start
            if step != 0:
                while self._more(current, stop):
                    scope.declare(self.variable, TypedValue.number(current))
                    result = super().process(scope, halt)
                    if not result.is_success:
                        break
                    current += step
            self.state = LoopState.DONE
            return result


class BasicFor(CodeBlock):
    """Counted loop with an inclusive bound and a default step of 1.

    A positive step runs while the variable is <= stop, a negative one while it is
    >= stop. A zero step runs nothing.
    """

    def __init__(
        self,
        node: ASTNode | None,
        parent: CodeBlock | None,
        variable: str,
        start: ASTNode,
        stop: ASTNode,
        step: ASTNode | None = None,
    ) -> None:
        super().__init__(node, parent)
        self.variable = variable
        self.start = start
        self.stop = stop
        self.step = step
        self.state = LoopState.NOT_STARTED

    def process(self, scope: Scope, halt: HaltMonitor) -> ReturnValue:
        self.state = LoopState.NOT_STARTED
        with scope.frame(self):
            current = as_number(self.evaluate(scope, self.start, halt))
            stop = as_number(self.evaluate(scope, self.stop, halt))
            step = 1.0
            if self.step is not None:
                step = as_number(self.evaluate(scope, self.step, halt))
            if step == 0:
                logger.warning("FOR with STEP 0 at line %s never runs", self.line)

            self.state = LoopState.RUNNING
            result = SUCCESS
            while (step > 0 and current <= stop) or (step < 0 and current >= stop):
                scope.declare(self.variable, TypedValue.number(current))
                result = super().process(scope, halt)
                if not result.is_success:
                    break
                current += step
            self.state = LoopState.DONE
            return result


class WhileBlock(CodeBlock):
    def __init__(
        self, node: ASTNode | None, parent: CodeBlock | None, condition: ASTNode
    ) -> None:
        super().__init__(node, parent)
        self.condition = condition

    def process(self, scope: Scope, halt: HaltMonitor) -> ReturnValue:
        while True:
            if halt.checkpoint():
                return HALT
            if not as_boolean(self.evaluate(scope, self.condition, halt)):
                return SUCCESS
            result = super().process(scope, halt)
            if not result.is_success:
                return result


class RepeatBlock(CodeBlock):
    """`REPEAT n [...]`; the count is truncated toward zero."""

    def __init__(
        self, node: ASTNode | None, parent: CodeBlock | None, count: ASTNode
    ) -> None:
        super().__init__(node, parent)
        self.count = count

    def process(self, scope: Scope, halt: HaltMonitor) -> ReturnValue:
        times = as_integer(self.evaluate(scope, self.count, halt))
        for _ in range(times):
            result = super().process(scope, halt)
            if not result.is_success:
                return result
        return SUCCESS


class IfBlock(CodeBlock):
    """`IF cond THEN ... [ELSE ...] END IF`; the ELSE branch is its own block."""

    def __init__(
        self, node: ASTNode | None, parent: CodeBlock | None, condition: ASTNode
    ) -> None:
        super().__init__(node, parent)
        self.condition = condition
        self.else_block: CodeBlock | None = None

    def process(self, scope: Scope, halt: HaltMonitor) -> ReturnValue:
        if as_boolean(self.evaluate(scope, self.condition, halt)):
            return super().process(scope, halt)
        if self.else_block is not None:
            return self.else_block.process(scope, halt)
        return SUCCESS


class Procedure(CodeBlock):
    """A user-defined procedure.

    The procedure's lexical parent is the block containing its definition, so nested
    procedures see the procedures defined around them.
    """

    def __init__(
        self,
        node: ASTNode | None,
        parent: CodeBlock | None,
        name: str,
        params: list[str],
    ) -> None:
        super().__init__(node, parent)
        self.name = name
        self.params = params

    def invoke(
        self, args: list[TypedValue], scope: Scope, halt: HaltMonitor
    ) -> ReturnValue:
        """Binds the arguments in a fresh frame and runs the body.

        Returns:
            The body's signal, unchanged; callers decide what RETURN and BREAK mean.

        Raises:
            ProcedureError: If the number of arguments does not match the parameters.
        """
        if len(args) != len(self.params):
            raise ProcedureError(
                f"{self.name} expects {len(self.params)} argument(s), got {len(args)}"
            )
        with scope.frame(self):
            for param, value in zip(self.params, args):
                scope.declare(param, value)
            return self.process_commands(scope, halt)


class DefineProcedure(Statement):
    """Registers a procedure in the enclosing block when executed."""

    def __init__(
        self, node: ASTNode | None, parent: CodeBlock | None, procedure: Procedure
    ) -> None:
        super().__init__(node, parent)
        self.procedure = procedure

    def process(self, scope: Scope, halt: HaltMonitor) -> ReturnValue:
        if self.parent is None:
            raise TortugaError(f"Procedure {self.procedure.name} has no enclosing block")
        self.parent.add_function(self.procedure)
        return SUCCESS


class CallStatement(Statement):
    def __init__(
        self,
        node: ASTNode | None,
        parent: CodeBlock | None,
        name: str,
        args: list[ASTNode],
    ) -> None:
        super().__init__(node, parent)
        self.name = name
        self.args = args

    def process(self, scope: Scope, halt: HaltMonitor) -> ReturnValue:
        procedure = self.get_function(self.name)
        if procedure is None:
            raise UndefinedProcedure(self.name)
        values = [self.evaluate(scope, arg, halt) for arg in self.args]
        result = procedure.invoke(values, scope, halt)
        if result.result is ProcessResult.HALT:
            return HALT
        return SUCCESS


class Assign(Statement):
    """`[LET] name = expr`: rebinds the nearest declaration or declares locally."""

    def __init__(
        self, node: ASTNode | None, parent: CodeBlock | None, name: str, expr: ASTNode
    ) -> None:
        super().__init__(node, parent)
        self.name = name
        self.expr = expr

    def process(self, scope: Scope, halt: HaltMonitor) -> ReturnValue:
        scope.assign(self.name, self.evaluate(scope, self.expr, halt))
        return SUCCESS


class Declare(Assign):
    """`LOCAL name = expr`: always binds in the current frame."""

    def process(self, scope: Scope, halt: HaltMonitor) -> ReturnValue:
        scope.declare(self.name, self.evaluate(scope, self.expr, halt))
        return SUCCESS


class PrintStatement(Statement):
    def __init__(
        self,
        node: ASTNode | None,
        parent: CodeBlock | None,
        items: list[ASTNode],
        host: Any,
    ) -> None:
        super().__init__(node, parent)
        self.items = items
        self.host = host

    def process(self, scope: Scope, halt: HaltMonitor) -> ReturnValue:
        text = " ".join(str(self.evaluate(scope, item, halt)) for item in self.items)
        self.host.print(text)
        return SUCCESS


class PrimitiveStatement(Statement):
    """Turtle primitive forwarded to the host with numeric arguments."""

    def __init__(
        self,
        node: ASTNode | None,
        parent: CodeBlock | None,
        name: str,
        args: list[ASTNode],
        host: Any,
    ) -> None:
        super().__init__(node, parent)
        self.name = name
        self.args = args
        self.host = host

    def process(self, scope: Scope, halt: HaltMonitor) -> ReturnValue:
        values = [as_number(self.evaluate(scope, arg, halt)) for arg in self.args]
        getattr(self.host, self.name.lower())(*values)
        return SUCCESS


class PauseStatement(Statement):
    """`PAUSE ms`: bounded sleep that ends early when the run is halted."""

    def __init__(
        self, node: ASTNode | None, parent: CodeBlock | None, duration: ASTNode
    ) -> None:
        super().__init__(node, parent)
        self.duration = duration

    def process(self, scope: Scope, halt: HaltMonitor) -> ReturnValue:
        millis = as_number(self.evaluate(scope, self.duration, halt))
        if not math.isfinite(millis):
            raise TypeMismatch(f"Cannot pause for {millis} ms")
        if halt.sleep(millis / 1000.0):
            return HALT
        return SUCCESS


class ReturnStatement(Statement):
    """`RETURN [expr]`, and `STOP` when there is no expression."""

    def __init__(
        self,
        node: ASTNode | None,
        parent: CodeBlock | None,
        expr: ASTNode | None = None,
    ) -> None:
        super().__init__(node, parent)
        self.expr = expr

    def process(self, scope: Scope, halt: HaltMonitor) -> ReturnValue:
        if self.expr is None:
            return ReturnValue.returning()
        return ReturnValue.returning(self.evaluate(scope, self.expr, halt))


class BreakStatement(Statement):
    def process(self, scope: Scope, halt: HaltMonitor) -> ReturnValue:
        return BREAK


class HaltStatement(Statement):
    def process(self, scope: Scope, halt: HaltMonitor) -> ReturnValue:
        halt.halt()
        return HALT


__all__ = [
    "Direction",
    "LoopState",
    "LogoFor",
    "BasicFor",
    "WhileBlock",
    "RepeatBlock",
    "IfBlock",
    "Procedure",
    "DefineProcedure",
    "CallStatement",
    "Assign",
    "Declare",
    "PrintStatement",
    "PrimitiveStatement",
    "PauseStatement",
    "ReturnStatement",
    "BreakStatement",
    "HaltStatement",
]
