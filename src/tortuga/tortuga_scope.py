"""
Chained variable frames for the Tortuga interpreter.

A `Scope` is a stack of `Frame` objects. Each frame belongs to the code block that
pushed it and links to the frame that was on top when it was created, so lookups walk
from the innermost frame outward. Frames live exactly as long as their block runs;
`Scope.frame()` is the context manager blocks use so the pop happens on every exit
path, including exceptions.

Classes:
    Frame: One level of bindings plus a parent link.
    Scope: The frame stack with declare / assign / lookup.

Raises:
    UndefinedVariable: When `lookup` exhausts the frame chain.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from tortuga.tortuga_errors import TortugaError, UndefinedVariable
from tortuga.tortuga_values import TypedValue


class Frame:
    """Bindings for one lexical level.

    Attributes:
        owner (Any): The code block that pushed the frame (None for a bare frame).
        bindings (dict[str, TypedValue]): Names declared at this level.
        parent (Frame | None): The frame that was on top when this one was pushed.
    """

    def __init__(self, owner: Any = None, parent: "Frame | None" = None) -> None:
        self.owner = owner
        self.bindings: dict[str, TypedValue] = {}
        self.parent = parent

    def chain(self) -> Iterator["Frame"]:
        frame: Frame | None = self
        while frame is not None:
            yield frame
            frame = frame.parent

    def __repr__(self) -> str:
        owner = type(self.owner).__name__ if self.owner is not None else None
        return f"Frame(owner={owner}, bindings={self.bindings!r})"


class Scope:
    """Stack of frames implementing lexical shadowing."""

    def __init__(self) -> None:
        self._frames: list[Frame] = []

    @property
    def depth(self) -> int:
        return len(self._frames)

    @property
    def current(self) -> Frame:
        if not self._frames:
            raise TortugaError("No active scope frame")
        return self._frames[-1]

    def push(self, owner: Any = None) -> Frame:
        parent = self._frames[-1] if self._frames else None
        frame = Frame(owner, parent)
        self._frames.append(frame)
        return frame

    def pop(self) -> Frame:
        if not self._frames:
            raise TortugaError("Scope stack underflow")
        return self._frames.pop()

    @contextmanager
    def frame(self, owner: Any = None) -> Iterator[Frame]:
        """Pushes a frame for the duration of the `with` body and always pops it."""
        frame = self.push(owner)
        try:
            yield frame
        finally:
            self.pop()

    def declare(self, name: str, value: TypedValue) -> None:
        """Binds `name` in the current frame, shadowing any outer binding."""
        frame = self.current
        frame.bindings[name] = value
        variables = getattr(frame.owner, "variables", None)
        if variables is not None:
            variables.add(name)

    def _find(self, name: str) -> Frame | None:
        if not self._frames:
            return None
        for frame in self._frames[-1].chain():
            if name in frame.bindings:
                return frame
        return None

    def assign(self, name: str, value: TypedValue) -> None:
        """Rebinds the nearest declaration of `name`, declaring it here if there is none."""
        frame = self._find(name)
        if frame is None:
            self.declare(name, value)
        else:
            frame.bindings[name] = value

    def lookup(self, name: str) -> TypedValue:
        frame = self._find(name)
        if frame is None:
            raise UndefinedVariable(name)
        return frame.bindings[name]

    def has(self, name: str) -> bool:
        return self._find(name) is not None

    def snapshot(self) -> dict[str, TypedValue]:
        """Returns every visible binding, inner frames shadowing outer ones."""
        visible: dict[str, TypedValue] = {}
        if not self._frames:
            return visible
        for frame in reversed(list(self._frames[-1].chain())):
            visible.update(frame.bindings)
        return visible

    def __repr__(self) -> str:
        return f"Scope(depth={self.depth})"


__all__ = ["Frame", "Scope"]
