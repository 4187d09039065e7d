import pytest

from tortuga.tortuga_ast import ASTNode
from tortuga.tortuga_block import CodeBlock, ProgramBlock
from tortuga.tortuga_builder import BlockBuilder
from tortuga.tortuga_control import (
    Assign,
    BasicFor,
    CallStatement,
    Declare,
    DefineProcedure,
    IfBlock,
    LogoFor,
    PrimitiveStatement,
    RepeatBlock,
    ReturnStatement,
    WhileBlock,
)
from tortuga.tortuga_host import RecordingHost
from tortuga.tortuga_lexer import CharacterStream, Lexer
from tortuga.tortuga_parser import Parser


def build(source: str) -> ProgramBlock:
    tree = Parser(Lexer(CharacterStream(source)).tokens()).parse()
    return BlockBuilder(RecordingHost()).build(tree)


def test_statement_blocks() -> None:
    program = build("x = 1\nLOCAL y = 2\nFORWARD 3\nsquare(4)")
    assert [type(b) for b in program.commands] == [
        Assign,
        Declare,
        PrimitiveStatement,
        CallStatement,
    ]
    assert all(b.parent is program for b in program.commands)


def test_loop_blocks() -> None:
    program = build(
        "FOR i = 1 TO 2\nNEXT\nFOR [j 1 2] [x = j]\nREPEAT 2 [x = 1]\nWHILE false\nWEND"
    )
    assert [type(b) for b in program.commands] == [BasicFor, LogoFor, RepeatBlock, WhileBlock]
    logo = program.commands[1]
    assert isinstance(logo, LogoFor)
    assert logo.variable == "j"
    assert logo.step is None
    assert logo.commands[0].parent is logo


def test_if_else_blocks() -> None:
    program = build("IF x THEN\n a = 1\nELSE\n a = 2\n b = 3\nEND IF")
    block = program.commands[0]
    assert isinstance(block, IfBlock)
    assert len(block.commands) == 1
    assert block.else_block is not None
    assert len(block.else_block.commands) == 2
    assert block.else_block.parent is program


def test_sub_becomes_definition() -> None:
    program = build("SUB poly(n, size)\n RETURN n\nEND SUB")
    define = program.commands[0]
    assert isinstance(define, DefineProcedure)
    proc = define.procedure
    assert proc.name == "poly"
    assert proc.params == ["n", "size"]
    assert proc.parent is program
    assert isinstance(proc.commands[0], ReturnStatement)
    assert program.functions == {}


def test_build_into_existing_root() -> None:
    root = ProgramBlock()
    builder = BlockBuilder(RecordingHost())
    tree = Parser(Lexer(CharacterStream("x = 1")).tokens()).parse()
    assert builder.build(tree, root) is root
    assert root.node is tree
    assert len(root.commands) == 1


def test_rejects_non_program_root() -> None:
    with pytest.raises(TypeError):
        BlockBuilder(RecordingHost()).build(ASTNode("assign", "x"))


def test_unknown_node_kind() -> None:
    builder = BlockBuilder(RecordingHost())
    with pytest.raises(NotImplementedError, match="goto"):
        builder.visit(ASTNode("goto", "10", line=1, col=1), CodeBlock())


def test_unknown_loop_kind() -> None:
    builder = BlockBuilder(RecordingHost())
    with pytest.raises(NotImplementedError, match="UNTIL"):
        builder.visit(ASTNode("loop", "UNTIL"), CodeBlock())
