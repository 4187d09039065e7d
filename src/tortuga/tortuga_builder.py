"""
Builds executable code blocks from a parse tree.

The `BlockBuilder` walks a `program` node and turns every statement node into the
matching `CodeBlock` from `tortuga_control`, wiring each block to its lexical parent.
Expression subtrees are not converted; blocks keep them and hand them to the
evaluator at run time.

Dispatch:
    Statement nodes are routed to `build_<kind>` methods. Loops are routed a second
    time on their value (`FOR`, `LOGO_FOR`, `WHILE`, `REPEAT`).

Raises:
    TypeError: If the root is not a `program` node.
    NotImplementedError: If a node kind has no builder.

Example:
    >>> builder = BlockBuilder(RecordingHost())
    >>> program = builder.build(Parser(tokens).parse())
"""

from tortuga.tortuga_ast import ASTNode
from tortuga.tortuga_block import CodeBlock, ProgramBlock
from tortuga.tortuga_control import (
    Assign,
    BasicFor,
    BreakStatement,
    CallStatement,
    Declare,
    DefineProcedure,
    HaltStatement,
    IfBlock,
    LogoFor,
    PauseStatement,
    PrimitiveStatement,
    PrintStatement,
    Procedure,
    RepeatBlock,
    ReturnStatement,
    WhileBlock,
)
from tortuga.tortuga_host import Host


class BlockBuilder:
    """Converts statement nodes into code blocks.

    Attributes:
        host (Host): Receiver for PRINT and turtle primitives, shared by every
            statement the builder creates.
    """

    def __init__(self, host: Host) -> None:
        self.host = host

    def build(self, program: ASTNode, root: ProgramBlock | None = None) -> ProgramBlock:
        """Builds the children of `program` into `root` (a new ProgramBlock by default).

        Args:
            program: A `program` node from the parser.
            root: Block to append to. Passing the same root on every run keeps the
                procedures it collects.

        Returns:
            The root block.
        """
        if not isinstance(program, ASTNode) or program.kind != "program":
            raise TypeError("BlockBuilder.build expects a 'program' ASTNode")
        if root is None:
            root = ProgramBlock(program)
        else:
            root.node = program
        self.build_body(program.children, root)
        return root

    def build_body(self, nodes: list[ASTNode], block: CodeBlock) -> CodeBlock:
        for node in nodes:
            block.add_command(self.visit(node, block))
        return block

    def visit(self, node: ASTNode, parent: CodeBlock) -> CodeBlock:
        method_name = f"build_{node.kind}"
        if hasattr(self, method_name):
            return getattr(self, method_name)(node, parent)
        raise NotImplementedError(
            f"No builder for node kind '{node.kind}' (line {node.line}, col {node.col})"
        )

    def build_assign(self, node: ASTNode, parent: CodeBlock) -> CodeBlock:
        return Assign(node, parent, node.text, node.children[0])

    def build_local(self, node: ASTNode, parent: CodeBlock) -> CodeBlock:
        return Declare(node, parent, node.text, node.children[0])

    def build_loop(self, node: ASTNode, parent: CodeBlock) -> CodeBlock:
        method_name = f"build_loop_{node.text.lower()}"
        if not hasattr(self, method_name):
            raise NotImplementedError(
                f"Unsupported loop type '{node.value}' (line {node.line}, col {node.col})"
            )
        return getattr(self, method_name)(node, parent)

    def _range(self, node: ASTNode) -> tuple[str, ASTNode, ASTNode, ASTNode | None]:
        range_node = node.children[0]
        var, start, stop, *rest = range_node.children
        return var.text, start, stop, (rest[0] if rest else None)

    def build_loop_for(self, node: ASTNode, parent: CodeBlock) -> CodeBlock:
        variable, start, stop, step = self._range(node)
        block = BasicFor(node, parent, variable, start, stop, step)
        return self.build_body(node.children[1:], block)

    def build_loop_logo_for(self, node: ASTNode, parent: CodeBlock) -> CodeBlock:
        variable, start, stop, step = self._range(node)
        block = LogoFor(node, parent, variable, start, stop, step)
        return self.build_body(node.children[1:], block)

    def build_loop_while(self, node: ASTNode, parent: CodeBlock) -> CodeBlock:
        block = WhileBlock(node, parent, node.children[0])
        return self.build_body(node.children[1:], block)

    def build_loop_repeat(self, node: ASTNode, parent: CodeBlock) -> CodeBlock:
        block = RepeatBlock(node, parent, node.children[0])
        return self.build_body(node.children[1:], block)

    def build_if(self, node: ASTNode, parent: CodeBlock) -> CodeBlock:
        block = IfBlock(node, parent, node.children[0])
        self.build_body(node.children[1:], block)
        if node.else_children:
            block.else_block = self.build_body(node.else_children, CodeBlock(node, parent))
        return block

    def build_func(self, node: ASTNode, parent: CodeBlock) -> CodeBlock:
        params_node, *body = node.children
        procedure = Procedure(node, parent, node.text, [p.text for p in params_node.children])
        self.build_body(body, procedure)
        return DefineProcedure(node, parent, procedure)

    def build_call(self, node: ASTNode, parent: CodeBlock) -> CodeBlock:
        return CallStatement(node, parent, node.text, list(node.children))

    def build_command(self, node: ASTNode, parent: CodeBlock) -> CodeBlock:
        return PrimitiveStatement(node, parent, node.text, list(node.children), self.host)

    def build_print(self, node: ASTNode, parent: CodeBlock) -> CodeBlock:
        return PrintStatement(node, parent, list(node.children), self.host)

    def build_pause(self, node: ASTNode, parent: CodeBlock) -> CodeBlock:
        return PauseStatement(node, parent, node.children[0])

    def build_return(self, node: ASTNode, parent: CodeBlock) -> CodeBlock:
        return ReturnStatement(node, parent, node.children[0] if node.children else None)

    def build_break(self, node: ASTNode, parent: CodeBlock) -> CodeBlock:
        return BreakStatement(node, parent)

    def build_halt(self, node: ASTNode, parent: CodeBlock) -> CodeBlock:
        return HaltStatement(node, parent)


__all__ = ["BlockBuilder"]
