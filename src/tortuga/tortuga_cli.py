"""
Tortuga CLI Entrypoint.

Runs Tortuga programs from `.tortuga`/`.logo`/`.bas` files or inline strings, or starts
the interactive REPL.

Features:
    - Read source from a file or, with `-s`, from the command line.
    - Load alias files (`--sugar FILE`, or the `TORTUGA_SUGAR` environment variable).
    - Print the recorded turtle commands after the run (`--trace`).
    - Configure logging (`--log-level`, or the `TORTUGA_LOG_LEVEL` environment variable).

Example usage:
    tortuga square.logo
    tortuga -s "REPEAT 4 [FD 100 RT 90]" --trace
    tortuga --repl --sugar spanish.json

Functions:
    run_tortuga(source, is_string=False, trace=False, sugar=None) -> ReturnValue
    main(argv=None) -> int
"""

import argparse
import logging
import os
import sys

from tortuga.tortuga_errors import TortugaError
from tortuga.tortuga_host import ConsoleHost
from tortuga.tortuga_interpreter import Interpreter
from tortuga.tortuga_signal import ReturnValue
from tortuga.tortuga_uimap import MappingError, UserInterfaceMapper

SOURCE_SUFFIXES = (".tortuga", ".logo", ".bas")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

logger = logging.getLogger(__name__)


def build_mapper(sugar: str | None = None) -> UserInterfaceMapper:
    """Default aliases plus, if given, the aliases in the JSON file `sugar`."""
    uimap = UserInterfaceMapper.from_canonical()
    if sugar:
        uimap.load_from_json(sugar)
    return uimap


def run_tortuga(
    source: str,
    is_string: bool = False,
    trace: bool = False,
    sugar: str | None = None,
) -> ReturnValue:
    """
    Run a Tortuga program to completion.

    Args:
        source (str): Program text, or the path to a source file.
        is_string (bool): If True, treats `source` as program text. Defaults to False.
        trace (bool): If True, prints every recorded host call after the run.
        sugar (str | None): Optional JSON alias file.

    Returns:
        The program's final signal.

    Raises:
        ValueError: If `source` is a path without a known source suffix.
        SyntaxError, TortugaError: If the program does not parse or fails at run time.
        MappingError: If the alias file is invalid.
    """
    if not is_string:
        if not source.endswith(SOURCE_SUFFIXES):
            raise ValueError(f"Only {', '.join(SOURCE_SUFFIXES)} files are supported.")
        with open(source, encoding="utf-8") as f:
            source = f.read()

    host = ConsoleHost()
    interp = Interpreter(host=host, uimap=build_mapper(sugar))
    try:
        return interp.run(source)
    finally:
        if trace:
            print(host.format_calls())


def configure_logging(level: str | None) -> None:
    level = (level or os.environ.get("TORTUGA_LOG_LEVEL") or "WARNING").upper()
    if level not in LOG_LEVELS:
        level = "WARNING"
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for the `tortuga` console script.

    Launches the REPL when no source is given or `--repl` is passed; otherwise runs the
    program. Errors are reported as `[error] >>> message` on stderr with exit status 1.
    """
    parser = argparse.ArgumentParser(prog="tortuga")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "--trace", action="store_true", help="Print the turtle commands after the run"
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default: $TORTUGA_LOG_LEVEL or WARNING)",
    )
    parser.add_argument(
        "--sugar",
        metavar="FILE",
        default=os.environ.get("TORTUGA_SUGAR"),
        help="JSON alias file (default: $TORTUGA_SUGAR)",
    )
    parser.add_argument(
        "--repl", action="store_true", help="Launch the interactive REPL"
    )

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        if args.repl or args.source is None:
            from tortuga.tortuga_repl import start_repl

            start_repl(Interpreter(uimap=build_mapper(args.sugar)))
            return 0
        run_tortuga(
            source=args.source,
            is_string=args.string,
            trace=args.trace,
            sugar=args.sugar,
        )
    except (SyntaxError, TortugaError, MappingError, ValueError, OSError) as e:
        print(f"[error] >>> {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
