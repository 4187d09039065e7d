import logging
from collections.abc import Callable
from typing import Any

import pytest

from tortuga.tortuga_errors import (
    ProcedureError,
    TypeMismatch,
    UndefinedProcedure,
    UndefinedVariable,
)
from tortuga.tortuga_control import BasicFor, Direction, LogoFor, LoopState
from tortuga.tortuga_host import RecordingHost
from tortuga.tortuga_interpreter import Interpreter
from tortuga.tortuga_signal import ProcessResult, ReturnValue

RunOutput = Callable[[str], list[str]]


# BASIC FOR: inclusive bound, default step 1


def test_basic_for_visits_each_value(run_output: RunOutput) -> None:
    assert run_output("FOR i = 1 TO 3\n PRINT i\nNEXT i") == ["1", "2", "3"]


def test_basic_for_descending_bounds_never_run(run_output: RunOutput) -> None:
    assert run_output("FOR i = 5 TO 1\n PRINT i\nNEXT") == []


def test_basic_for_equal_bounds_run_once(run_output: RunOutput) -> None:
    assert run_output("FOR i = 1 TO 1\n PRINT i\nNEXT") == ["1"]


def test_basic_for_negative_step(run_output: RunOutput) -> None:
    assert run_output("FOR i = 3 TO 1 STEP -1\n PRINT i\nNEXT") == ["3", "2", "1"]


def test_basic_for_fractional_step(run_output: RunOutput) -> None:
    assert run_output("FOR i = 0 TO 1 STEP 0.5\n PRINT i\nNEXT") == ["0", "0.5", "1"]


def test_basic_for_zero_step_never_runs(
    run_output: RunOutput, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING, logger="tortuga.tortuga_control"):
        assert run_output("FOR i = 1 TO 3 STEP 0\n PRINT i\nNEXT") == []
    assert "STEP 0" in caplog.text


def test_basic_for_exit_ends_run_with_break(
    interp: Interpreter, host: RecordingHost
) -> None:
    source = """
FOR i = 1 TO 5
  PRINT i
  IF i = 2 THEN
    EXIT
  END IF
NEXT
PRINT "after"
"""
    assert interp.run(source).result is ProcessResult.BREAK
    assert host.output == ["1", "2"]


def test_basic_for_halt_stops_run(interp: Interpreter, host: RecordingHost) -> None:
    source = "FOR i = 1 TO 5\n PRINT i\n HALT\nNEXT\nPRINT \"after\""
    assert interp.run(source).result is ProcessResult.HALT
    assert host.output == ["1"]


def test_return_from_basic_for_reaches_caller(run_output: RunOutput) -> None:
    source = """
SUB f
  FOR i = 1 TO 5
    IF i = 3 THEN
      RETURN i
    END IF
  NEXT
  RETURN 0
END SUB
PRINT f()
"""
    assert run_output(source) == ["3"]


def test_loop_variable_is_local_to_loop(interp: Interpreter) -> None:
    with pytest.raises(UndefinedVariable):
        interp.run("FOR i = 1 TO 2\nNEXT\nPRINT i")


# Logo FOR: direction from the bounds, stop excluded


def test_logo_for_counts_up(run_output: RunOutput) -> None:
    assert run_output("FOR [i 1 4] [PRINT i]") == ["1", "2", "3"]


def test_logo_for_counts_down(run_output: RunOutput) -> None:
    assert run_output("FOR [i 4 1] [PRINT i]") == ["4", "3", "2"]


def test_logo_for_equal_bounds_never_run(run_output: RunOutput) -> None:
    assert run_output("FOR [i 2 2] [PRINT i]") == []


def test_logo_for_explicit_step(run_output: RunOutput) -> None:
    assert run_output("FOR [i 0 10 5] [PRINT i]") == ["0", "5"]
    assert run_output("FOR [i 0 3 0] [PRINT i]") == []


def test_logo_for_step_against_direction_runs_until_halted(
    interp: Interpreter, run_output: RunOutput, caplog: pytest.LogCaptureFixture
) -> None:
    source = """
FOR [i 0 10 (-1)] [
  PRINT i
  IF i < -2 THEN
    HALT
  END IF
]
PRINT "after"
"""
    with caplog.at_level(logging.WARNING, logger="tortuga.tortuga_control"):
        assert run_output(source) == ["0", "-1", "-2", "-3"]
    assert "runs until halted" in caplog.text


def test_return_from_logo_for_reaches_caller(run_output: RunOutput) -> None:
    source = """
SUB g
  FOR [i 10 0 (-2)] [
    IF i < 5 THEN
      RETURN i
    END IF
  ]
  RETURN -1
END SUB
PRINT g()
"""
    assert run_output(source) == ["4"]


def test_logo_for_exit_inside_procedure(run_output: RunOutput) -> None:
    source = """
SUB walk
  FOR [i 0 5] [
    PRINT i
    IF i = 1 THEN
      EXIT
    END IF
  ]
  PRINT "unreached"
END SUB
walk
PRINT "back"
"""
    assert run_output(source) == ["0", "1", "back"]


class LoopStateRecorder:
    def __init__(self) -> None:
        self.states: list[LoopState] = []

    def started(self) -> None:
        pass

    def finished(self, result: ReturnValue) -> None:
        pass

    def error(self, exc: BaseException) -> None:
        pass

    def current_statement(self, block: Any, scope: Any) -> None:
        if isinstance(block.parent, (LogoFor, BasicFor)):
            self.states.append(block.parent.state)


@pytest.mark.parametrize(  # type: ignore[misc]
    "source, cls",
    [("FOR [i 1 3] [PRINT i]", LogoFor), ("FOR i = 1 TO 2\n PRINT i\nNEXT", BasicFor)],
)
def test_for_state_lifecycle(interp: Interpreter, source: str, cls: type) -> None:
    program = interp.build(interp.parse(source))
    loop = program.commands[0]
    assert isinstance(loop, cls)
    assert loop.state is LoopState.NOT_STARTED

    recorder = LoopStateRecorder()
    interp.add_listener(recorder)
    program.process(interp.scope, interp.halt_monitor)
    assert recorder.states == [LoopState.RUNNING, LoopState.RUNNING]
    assert loop.state is LoopState.DONE


@pytest.mark.parametrize(  # type: ignore[misc]
    "bounds, direction",
    [
        ("1 4", Direction.INCREASE),
        ("4 1", Direction.DECREASE),
        ("2 2", Direction.UNDETERMINED),
        ("0 3 0", Direction.INCREASE),
    ],
)
def test_logo_for_direction_from_bounds(
    interp: Interpreter, bounds: str, direction: Direction
) -> None:
    program = interp.build(interp.parse(f"FOR [i {bounds}] [PRINT i]"))
    loop = program.commands[0]
    assert isinstance(loop, LogoFor)
    assert loop.direction is Direction.UNDETERMINED
    program.process(interp.scope, interp.halt_monitor)
    assert loop.direction is direction


# REPEAT / WHILE / IF


def test_repeat_truncates_count(run_output: RunOutput) -> None:
    assert run_output("REPEAT 2.9 [PRINT 1]") == ["1", "1"]
    assert run_output("REPEAT -1 [PRINT 2]") == []


def test_while_loop(run_output: RunOutput) -> None:
    source = "n = 0\nWHILE n < 3\n n = n + 1\n PRINT n\nWEND"
    assert run_output(source) == ["1", "2", "3"]


def test_while_condition_must_be_boolean(interp: Interpreter) -> None:
    with pytest.raises(TypeMismatch):
        interp.run('WHILE "yes"\nWEND')


def test_if_else(run_output: RunOutput) -> None:
    source = """
FOR i = 1 TO 2
  IF i = 1 THEN
    PRINT "one"
  ELSE
    PRINT "other"
  END IF
NEXT
"""
    assert run_output(source) == ["one", "other"]


def test_exit_leaves_loop_and_procedure(run_output: RunOutput) -> None:
    source = """
SUB f
  REPEAT 10 [PRINT 1 EXIT]
  PRINT 2
END SUB
f
PRINT 3
"""
    assert run_output(source) == ["1", "3"]


def test_exit_at_top_level_returns_break(interp: Interpreter) -> None:
    assert interp.run("EXIT").result is ProcessResult.BREAK


# Scope


def test_local_shadows_outer_variable(run_output: RunOutput) -> None:
    source = "x = 1\nREPEAT 1 [LOCAL x = 5 PRINT x]\nPRINT x"
    assert run_output(source) == ["5", "1"]


def test_assignment_updates_outer_variable(run_output: RunOutput) -> None:
    assert run_output("x = 1\nREPEAT 2 [x = x + 1]\nPRINT x") == ["3"]


def test_procedure_local_does_not_leak(run_output: RunOutput) -> None:
    source = """
x = 1
SUB f
  LOCAL x = 2
  PRINT x
END SUB
f
PRINT x
"""
    assert run_output(source) == ["2", "1"]


def test_procedure_sees_callers_locals(run_output: RunOutput) -> None:
    source = """
SUB show
  PRINT depth
END SUB
SUB outer
  LOCAL depth = 7
  show
END SUB
outer
"""
    assert run_output(source) == ["7"]


# Procedures


def test_recursive_function(run_output: RunOutput) -> None:
    source = """
SUB fact(n)
  IF n <= 1 THEN
    RETURN 1
  END IF
  RETURN n * fact(n - 1)
END SUB
PRINT fact(5)
"""
    assert run_output(source) == ["120"]


def test_stop_ends_procedure(run_output: RunOutput) -> None:
    source = "SUB f\n PRINT 1\n STOP\n PRINT 2\nEND SUB\nf\nPRINT 3"
    assert run_output(source) == ["1", "3"]


def test_procedure_without_value_in_expression(interp: Interpreter) -> None:
    with pytest.raises(ProcedureError, match="did not return a value"):
        interp.run("SUB f\n x = 1\nEND SUB\ny = f()")


def test_arity_mismatch(interp: Interpreter) -> None:
    with pytest.raises(ProcedureError, match="expects 1 argument"):
        interp.run("SUB f(a)\nEND SUB\nf(1, 2)")


def test_procedure_must_be_defined_before_use(interp: Interpreter) -> None:
    with pytest.raises(UndefinedProcedure) as exc:
        interp.run("f\nSUB f\nEND SUB")
    assert exc.value.line == 1


def test_nested_procedure_is_lexically_scoped(interp: Interpreter) -> None:
    source = """
SUB outer
  SUB inner
    PRINT "in"
  END SUB
  inner
END SUB
outer
"""
    interp.run(source)
    with pytest.raises(UndefinedProcedure):
        interp.run("inner")


# Primitives and PAUSE


def test_primitives_reach_host(interp: Interpreter) -> None:
    interp.run("SETXY 1, 2\nPENUP\nFD 3 * 2")
    assert interp.host.calls == [  # type: ignore[attr-defined]
        ("setxy", (1.0, 2.0)),
        ("penup", ()),
        ("forward", (6.0,)),
    ]


def test_primitive_needs_numbers(interp: Interpreter) -> None:
    with pytest.raises(TypeMismatch):
        interp.run('FORWARD "far"')


def test_pause(run_output: RunOutput) -> None:
    assert run_output("PAUSE 1\nPRINT 1") == ["1"]


@pytest.mark.parametrize("count", ["1/0", "0/0", "-1/0"])  # type: ignore[misc]
def test_repeat_rejects_non_finite_count(interp: Interpreter, count: str) -> None:
    with pytest.raises(TypeMismatch, match="Cannot truncate") as exc:
        interp.run(f"x = 1\nREPEAT {count} [\n PRINT 1\n]")
    assert exc.value.line == 2


def test_pause_rejects_non_finite_duration(interp: Interpreter) -> None:
    with pytest.raises(TypeMismatch, match="Cannot pause"):
        interp.run("PAUSE 1/0")
