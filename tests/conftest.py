import os
from collections.abc import Callable
from typing import Any

import pytest

from tortuga.tortuga_halt import HaltMonitor
from tortuga.tortuga_host import RecordingHost
from tortuga.tortuga_interpreter import Interpreter
from tortuga.tortuga_scope import Scope

# Monkeypatch coverage to bypass teardown crash in act/docker
if os.getenv("COVERAGE_PROCESS_START"):
    import coverage

    coverage.process_startup()

    import coverage.collector

    def safe_stop(self: Any) -> None:
        if self in getattr(self, "_collectors", []):
            self._collectors.remove(self)

    coverage.collector.Collector.stop = safe_stop


@pytest.fixture  # type: ignore[misc]
def host() -> RecordingHost:
    return RecordingHost()


@pytest.fixture  # type: ignore[misc]
def halt() -> HaltMonitor:
    return HaltMonitor(poll_interval=0.01)


@pytest.fixture  # type: ignore[misc]
def scope() -> Scope:
    s = Scope()
    s.push()
    return s


@pytest.fixture  # type: ignore[misc]
def interp(host: RecordingHost, halt: HaltMonitor) -> Interpreter:
    return Interpreter(host=host, halt=halt)


@pytest.fixture  # type: ignore[misc]
def run_output(interp: Interpreter, host: RecordingHost) -> Callable[[str], list[str]]:
    """Runs a program and returns the PRINT lines that run produced."""

    def _run(source: str) -> list[str]:
        start = len(host.output)
        interp.run(source)
        return host.output[start:]

    return _run
