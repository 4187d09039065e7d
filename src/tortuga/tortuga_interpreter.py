"""
Interpreter facade tying the pipeline together.

    source -> tokenize (with aliases) -> Parser -> BlockBuilder -> ProgramBlock.process

The interpreter owns one `Scope` with a global frame and one `ProgramBlock` for its
whole lifetime. Every `run` rebuilds the program's statements but keeps the frame
and the procedures registered so far, so successive REPL entries see each other's
variables and definitions.

Runs can also be started on a background thread with `start`; `halt` then stops
them at the next statement boundary, loop iteration or pause tick.
"""

import logging
import threading

from tortuga.tortuga_ast import ASTNode
from tortuga.tortuga_block import InterpreterListener, ProgramBlock
from tortuga.tortuga_builder import BlockBuilder
from tortuga.tortuga_errors import TortugaError
from tortuga.tortuga_halt import HaltMonitor
from tortuga.tortuga_host import ConsoleHost, Host
from tortuga.tortuga_lexer import CharacterStream, Lexer, Token
from tortuga.tortuga_parser import Parser
from tortuga.tortuga_scope import Scope
from tortuga.tortuga_signal import HaltRequested, ReturnValue
from tortuga.tortuga_uimap import UserInterfaceMapper
from tortuga.tortuga_values import TypedValue

logger = logging.getLogger(__name__)


class Interpreter:
    """Runs Tortuga programs against a host.

    Attributes:
        host (Host): Receiver of turtle primitives and PRINT output.
        halt_monitor (HaltMonitor): Cancellation token shared by every run.
        uimap (UserInterfaceMapper): Alias table applied while tokenizing.
        program (ProgramBlock): Persistent root block (keeps top-level procedures).
        scope (Scope): Persistent scope whose bottom frame holds the globals.
        last_result (ReturnValue | None): Result of the most recent background run.
        last_error (BaseException | None): Error of the most recent background run.
    """

    def __init__(
        self,
        host: Host | None = None,
        halt: HaltMonitor | None = None,
        uimap: UserInterfaceMapper | None = None,
    ) -> None:
        self.host: Host = host if host is not None else ConsoleHost()
        self.halt_monitor = halt if halt is not None else HaltMonitor()
        self.uimap = uimap if uimap is not None else UserInterfaceMapper.from_canonical()
        self.builder = BlockBuilder(self.host)
        self.program = ProgramBlock()
        self.scope = Scope()
        self.scope.push(self.program)
        self.last_result: ReturnValue | None = None
        self.last_error: BaseException | None = None
        self._thread: threading.Thread | None = None

    # Pipeline stages

    def tokenize(self, source: str) -> list[Token]:
        tokens = Lexer(CharacterStream(source)).tokens()
        return [self._resolve_alias(tok) for tok in tokens]

    def _resolve_alias(self, tok: Token) -> Token:
        if tok.type != "IDENT":
            return tok
        mapped = self.uimap.get_token(tok.value, tok.line, tok.col)
        return mapped if mapped is not None else tok

    def parse(self, source: str) -> ASTNode:
        return Parser(self.tokenize(source)).parse()

    def build(self, tree: ASTNode) -> ProgramBlock:
        """Replaces the program's statements with those built from `tree`."""
        self.program.commands.clear()
        return self.builder.build(tree, self.program)

    # Running

    def run(self, source: str | ASTNode) -> ReturnValue:
        """Parses (if needed), builds and runs a program in the global frame.

        Returns:
            The program's final signal (SUCCESS, HALT, or BREAK from a top-level EXIT).

        Raises:
            SyntaxError: If the source does not parse.
            TortugaError: On a run-time error; listeners get `error` first.
        """
        tree = source if isinstance(source, ASTNode) else self.parse(source)
        self.halt_monitor.reset()
        return self._execute(tree)

    def _execute(self, tree: ASTNode) -> ReturnValue:
        program = self.build(tree)
        for listener in list(self.program.listeners):
            listener.started()
        try:
            result = program.process(self.scope, self.halt_monitor)
        except RecursionError as e:
            err = TortugaError("Maximum recursion depth exceeded")
            self._notify_error(err)
            raise err from e
        except TortugaError as e:
            self._notify_error(e)
            raise
        logger.debug("Run finished with %s", result.result.name)
        for listener in list(self.program.listeners):
            listener.finished(result)
        return result

    def evaluate(self, source: str) -> TypedValue:
        """Evaluates a single expression against the global frame.

        Raises:
            SyntaxError: If `source` is not a single expression.
            TortugaError: On a run-time error, or when a procedure called from the
                expression halts (an expression has no HALT signal to return).
        """
        tree = Parser(self.tokenize(source)).parse_expr_entrypoint()
        self.halt_monitor.reset()
        try:
            return self.program.evaluate(self.scope, tree, self.halt_monitor)
        except HaltRequested:
            raise TortugaError("Program halted").locate(tree) from None
        except RecursionError as e:
            raise TortugaError("Maximum recursion depth exceeded") from e

    def _notify_error(self, exc: BaseException) -> None:
        logger.debug("Run aborted: %s", exc)
        for listener in list(self.program.listeners):
            listener.error(exc)

    def start(self, source: str | ASTNode) -> threading.Thread:
        """Runs `source` on a daemon thread; see `last_result` and `last_error`."""
        if self.is_running():
            raise TortugaError("A program is already running")
        tree = source if isinstance(source, ASTNode) else self.parse(source)
        self.last_result = None
        self.last_error = None
        # reset before the worker starts; halt() may follow immediately
        self.halt_monitor.reset()

        def target() -> None:
            try:
                self.last_result = self._execute(tree)
            except TortugaError as e:
                self.last_error = e

        self._thread = threading.Thread(target=target, name="tortuga-run", daemon=True)
        self._thread.start()
        return self._thread

    def join(self, timeout: float | None = None) -> bool:
        """Waits for a background run; returns True when it has finished."""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def halt(self) -> None:
        self.halt_monitor.halt()

    # Listeners and inspection

    def add_listener(self, listener: InterpreterListener) -> None:
        self.program.add_listener(listener)

    def remove_listener(self, listener: InterpreterListener) -> None:
        self.program.remove_listener(listener)

    def variables(self) -> dict[str, TypedValue]:
        return self.scope.snapshot()

    def procedures(self) -> list[str]:
        return sorted(self.program.functions)


__all__ = ["Interpreter"]
