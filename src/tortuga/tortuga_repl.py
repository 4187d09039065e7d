"""
Interactive Tortuga REPL.

Each entry runs in the same interpreter, so variables and procedures persist between
entries. Lines are accumulated while the input is an unfinished block (an open
`FOR`, `WHILE`, `IF`, `SUB` or `[`); an empty line ends a block that will not close.
A lone expression prints its value.

Commands:
    exit / quit       Leave the REPL.
    SUGAR             Show the alias table.
    SUGAR LOAD path   Load aliases from a JSON file.
    VARS              Show the visible variables.
"""

import logging
from collections.abc import Callable

from tortuga.tortuga_errors import TortugaError
from tortuga.tortuga_interpreter import Interpreter
from tortuga.tortuga_parser import Parser
from tortuga.tortuga_uimap import MappingError

logger = logging.getLogger(__name__)


def is_incomplete(exc: SyntaxError) -> bool:
    """True when parsing failed only because the input ended inside a block."""
    return "EOF" in str(exc)


def handle_command(interp: Interpreter, src: str) -> bool:
    """Runs a REPL command; returns False when `src` is not one."""
    words = src.split(maxsplit=2)
    head = words[0].upper()
    if head == "SUGAR":
        if len(words) == 1:
            print(interp.uimap.report(verbose=True))
        elif words[1].upper() == "LOAD" and len(words) == 3:
            path = words[2].strip().strip('"').strip("'")
            try:
                interp.uimap.load_from_json(path)
                print(f"[ok] >>> Sugar aliases loaded from {path}")
            except MappingError as e:
                print(f"[error] >>> {e}")
                for conflict in e.conflicts:
                    print(" -", conflict)
        else:
            print("[error] >>> Usage: SUGAR [LOAD path]")
        return True
    if head == "VARS" and len(words) == 1:
        for name, value in sorted(interp.variables().items()):
            print(f"{name:>12} = {value}")
        return True
    return False


def execute(interp: Interpreter, src: str) -> None:
    """Evaluates a lone expression or runs `src` as a program."""
    try:
        tree = Parser(interp.tokenize(src)).parse_expr_entrypoint()
    except SyntaxError:
        tree = None

    if tree is not None and tree.kind not in ("call", "identifier"):
        print(interp.evaluate(src))
        return
    if tree is not None and tree.kind == "identifier" and interp.scope.has(tree.text):
        print(interp.evaluate(src))
        return
    interp.run(src)


def start_repl(
    interp: Interpreter | None = None,
    input_fn: Callable[[str], str] = input,
) -> None:
    interp = interp if interp is not None else Interpreter()
    print("Tortuga REPL. Type 'exit' or 'quit' to leave.")

    while True:
        src_lines: list[str] = []
        try:
            while True:
                line = input_fn(">>> " if not src_lines else "... ")
                if not src_lines and line.strip().lower() in ("exit", "quit"):
                    print("Exiting Tortuga REPL.")
                    return
                if src_lines and not line.strip():
                    break
                src_lines.append(line)
                try:
                    interp.parse("\n".join(src_lines))
                except SyntaxError as e:
                    if is_incomplete(e):
                        continue
                break
        except (EOFError, KeyboardInterrupt):
            print("\nExiting Tortuga REPL.")
            return

        src = "\n".join(src_lines).strip()
        if not src or src.startswith("#"):
            continue
        if handle_command(interp, src):
            continue
        try:
            execute(interp, src)
        except (SyntaxError, TortugaError) as e:
            logger.debug("REPL entry failed: %r", src, exc_info=True)
            print(f"[error] >>> {e}")


__all__ = ["start_repl", "handle_command", "execute", "is_incomplete"]
