"""
Host collaborators that receive the interpreter's side effects.

The interpreter never draws or writes anything itself. Turtle primitives and PRINT
are forwarded, fire and forget, to a host object implementing the `Host` protocol.
The method names are the lowercase primitive names from `PRIMITIVES` plus `print`.

Classes and Features:
    - Host (Protocol): Interface every host implements.
    - RecordingHost: Records every call in order; used for tracing and tests.
    - ConsoleHost: RecordingHost that also writes PRINT output to a text stream.

Usage:
    >>> host = RecordingHost()
    >>> host.forward(10.0)
    >>> host.calls
    [('forward', (10.0,))]
"""

import logging
import sys
from typing import Any, Protocol, TextIO

logger = logging.getLogger(__name__)


class Host(Protocol):  # pragma: no cover
    """Protocol for drawing/console collaborators.

    Methods correspond one to one to the turtle primitives. Return values are ignored.
    """

    def forward(self, distance: float) -> None: ...

    def back(self, distance: float) -> None: ...

    def left(self, degrees: float) -> None: ...

    def right(self, degrees: float) -> None: ...

    def penup(self) -> None: ...

    def pendown(self) -> None: ...

    def home(self) -> None: ...

    def clearscreen(self) -> None: ...

    def setxy(self, x: float, y: float) -> None: ...

    def setheading(self, degrees: float) -> None: ...

    def setpencolor(self, color: float) -> None: ...

    def hideturtle(self) -> None: ...

    def showturtle(self) -> None: ...

    def print(self, text: str) -> None: ...


class RecordingHost:
    """Host that remembers every call.

    Attributes:
        calls (list[tuple[str, tuple[Any, ...]]]): (method name, arguments) in call order.
        output (list[str]): Text passed to `print`, one entry per PRINT statement.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.output: list[str] = []

    def _record(self, name: str, *args: Any) -> None:
        logger.debug("host.%s%r", name, args)
        self.calls.append((name, args))

    def forward(self, distance: float) -> None:
        self._record("forward", distance)

    def back(self, distance: float) -> None:
        self._record("back", distance)

    def left(self, degrees: float) -> None:
        self._record("left", degrees)

    def right(self, degrees: float) -> None:
        self._record("right", degrees)

    def penup(self) -> None:
        self._record("penup")

    def pendown(self) -> None:
        self._record("pendown")

    def home(self) -> None:
        self._record("home")

    def clearscreen(self) -> None:
        self._record("clearscreen")

    def setxy(self, x: float, y: float) -> None:
        self._record("setxy", x, y)

    def setheading(self, degrees: float) -> None:
        self._record("setheading", degrees)

    def setpencolor(self, color: float) -> None:
        self._record("setpencolor", color)

    def hideturtle(self) -> None:
        self._record("hideturtle")

    def showturtle(self) -> None:
        self._record("showturtle")

    def print(self, text: str) -> None:
        self._record("print", text)
        self.output.append(text)

    def format_calls(self) -> str:
        """One line per recorded call, e.g. `forward 10`."""
        lines = []
        for name, args in self.calls:
            rendered = " ".join(_format_arg(a) for a in args)
            lines.append(f"{name} {rendered}".rstrip())
        return "\n".join(lines)


def _format_arg(arg: Any) -> str:
    if isinstance(arg, float) and arg.is_integer():
        return str(int(arg))
    if isinstance(arg, str):
        return repr(arg)
    return str(arg)


class ConsoleHost(RecordingHost):
    """Recording host that also writes PRINT output to `stream` (stdout by default)."""

    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__()
        self.stream = stream

    def print(self, text: str) -> None:
        super().print(text)
        stream = self.stream if self.stream is not None else sys.stdout
        stream.write(text + "\n")
        stream.flush()


__all__ = ["Host", "RecordingHost", "ConsoleHost"]
