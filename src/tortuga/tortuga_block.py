"""
Executable code blocks.

A `CodeBlock` is built from a parse node and owns an ordered list of child blocks,
a map of procedures defined inside it, the set of variable names declared in its
frames, and a link to its lexical parent. Running a block pushes a scope frame, runs
the children in order and stops early on any signal other than SUCCESS. The halt
monitor is polled before every child and after the last one.

Classes:
    InterpreterListener: Protocol for observers of a run (debugger, tracing, UI).
    CodeBlock: Block with children and its own frame.
    Statement: Leaf block; runs in the frame of the block that contains it.
    ProgramBlock: Root block; runs in the interpreter's global frame.
"""

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol

from tortuga.tortuga_ast import ASTNode
from tortuga.tortuga_errors import TortugaError
from tortuga.tortuga_eval import ExpressionEvaluator
from tortuga.tortuga_halt import HaltMonitor
from tortuga.tortuga_scope import Scope
from tortuga.tortuga_signal import HALT, SUCCESS, HaltRequested, ReturnValue
from tortuga.tortuga_values import TypedValue

if TYPE_CHECKING:  # pragma: no cover
    from tortuga.tortuga_control import Procedure

logger = logging.getLogger(__name__)


class InterpreterListener(Protocol):  # pragma: no cover
    """Observer of a running program.

    Methods:
        started(): The run is about to begin.
        finished(result): The run ended with the given signal.
        error(exc): The run was aborted by an exception.
        current_statement(block, scope): `block` is about to execute.
    """

    def started(self) -> None: ...

    def finished(self, result: ReturnValue) -> None: ...

    def error(self, exc: BaseException) -> None: ...

    def current_statement(self, block: "CodeBlock", scope: Scope) -> None: ...


class CodeBlock:
    """Executable node of the program tree.

    Attributes:
        node (ASTNode | None): Parse node the block was built from (diagnostics).
        parent (CodeBlock | None): Lexical parent block.
        commands (list[CodeBlock]): Child blocks in execution order.
        functions (dict[str, Procedure]): Procedures defined in this block.
        variables (set[str]): Names declared in frames owned by this block.
        listeners (list[InterpreterListener]): Observers notified per statement.
    """

    def __init__(
        self, node: ASTNode | None = None, parent: "CodeBlock | None" = None
    ) -> None:
        self.node = node
        self.parent = parent
        self.commands: list[CodeBlock] = []
        self.functions: dict[str, "Procedure"] = {}
        self.variables: set[str] = set()
        self.listeners: list[InterpreterListener] = (
            parent.listeners if parent is not None else []
        )

    @property
    def line(self) -> int:
        return self.node.line if self.node is not None else 0

    @property
    def col(self) -> int:
        return self.node.col if self.node is not None else 0

    def add_command(self, command: "CodeBlock | Iterable[CodeBlock]") -> None:
        if isinstance(command, CodeBlock):
            self.commands.append(command)
        else:
            self.commands.extend(command)

    def get_commands(self) -> tuple["CodeBlock", ...]:
        return tuple(self.commands)

    def add_listener(self, listener: InterpreterListener) -> None:
        self.listeners.append(listener)

    def remove_listener(self, listener: InterpreterListener) -> None:
        if listener in self.listeners:
            self.listeners.remove(listener)

    def add_function(self, function: "Procedure") -> None:
        self.functions[function.name] = function

    def has_function(self, name: str) -> bool:
        return self.get_function(name) is not None

    def get_function(self, name: str) -> "Procedure | None":
        """Finds a procedure here or in the nearest lexical ancestor defining it."""
        block: CodeBlock | None = self
        while block is not None:
            if name in block.functions:
                return block.functions[name]
            block = block.parent
        return None

    def has_variable(self, name: str) -> bool:
        block: CodeBlock | None = self
        while block is not None:
            if name in block.variables:
                return True
            block = block.parent
        return False

    def local_variables(self) -> set[str]:
        return set(self.variables)

    def evaluate(
        self, scope: Scope, node: ASTNode, halt: HaltMonitor | None = None
    ) -> TypedValue:
        return ExpressionEvaluator(scope, self, halt).evaluate(node)

    def process(self, scope: Scope, halt: HaltMonitor) -> ReturnValue:
        """Runs the children inside a fresh frame owned by this block."""
        with scope.frame(self):
            return self.process_commands(scope, halt)

    def process_commands(self, scope: Scope, halt: HaltMonitor) -> ReturnValue:
        """Runs the children in the current frame, stopping on the first non-SUCCESS."""
        for command in self.commands:
            if halt.checkpoint():
                return HALT
            for listener in self.listeners:
                listener.current_statement(command, scope)
            logger.debug(
                "[%s] line %s, col %s", type(command).__name__, command.line, command.col
            )
            try:
                result = command.process(scope, halt)
            except HaltRequested:
                return HALT
            except TortugaError as e:
                raise e.locate(command.node)
            if not result.is_success:
                return result
        if halt.is_halted():
            return HALT
        return SUCCESS

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(line={self.line}, col={self.col}, "
            f"commands={len(self.commands)})"
        )


class Statement(CodeBlock):
    """Leaf block. Runs in its container's frame instead of pushing its own."""

    def process(self, scope: Scope, halt: HaltMonitor) -> ReturnValue:
        raise NotImplementedError(f"{type(self).__name__} must implement process()")


class ProgramBlock(CodeBlock):
    """Root of a program.

    The interpreter pushes one global frame owned by the program block and keeps it
    for the lifetime of the interpreter, so top-level variables and procedures
    survive between runs (the REPL relies on this).
    """

    def process(self, scope: Scope, halt: HaltMonitor) -> ReturnValue:
        return self.process_commands(scope, halt)


__all__ = ["InterpreterListener", "CodeBlock", "Statement", "ProgramBlock"]
