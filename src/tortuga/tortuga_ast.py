"""
Defines the parse tree node consumed by the Tortuga interpreter.

Classes:
    ASTNode:
        A node of the parse tree. The interpreter only relies on the node kind, the
        ordered children, the token or literal text held in `value`, and the source
        position used in diagnostics.

    ASTDict:
        TypedDict representation for serializing ASTNode instances to plain Python
        dictionaries, suitable for JSON output or debugging.

Each ASTNode tracks:
    kind (str): The grammar construct (e.g. "adding", "loop", "call").
    value (Union[str, ASTNode], optional): Token text, literal text, or a nested node
        (the callee of a call).
    children (list[ASTNode]): Ordered child nodes. Expression levels interleave
        operands with "operator" nodes: [operand, operator, operand, ...].
    else_children (list[ASTNode]): The ELSE branch of an IF.
    line (int): Source line number for error messages.
    col (int): Source column number for error messages.

Example:
    node = ASTNode("adding", children=[
        ASTNode("number", "1"), ASTNode("operator", "-"), ASTNode("number", "2"),
    ])
"""

from typing import Any, TypedDict, Union


class ASTDict(TypedDict, total=False):
    """
    TypedDict representation of an ASTNode used for serialization.

    Fields:
        kind (str): The type of node (e.g., "loop", "call", "if").
        value (Any): The node's value, which may be a string, nested ASTDict, or literal.
        line (int): Line number in the source code where the node originates.
        col (int): Column number in the source code where the node originates.
        children (List[ASTDict]): Child nodes in order.
        else_children (List[ASTDict]): Alternate branch nodes.
    """

    kind: str
    value: Any
    line: int
    col: int
    children: list["ASTDict"]
    else_children: list["ASTDict"]


class ASTNode:
    """
    Represents a node in the Tortuga parse tree.

    Args:
        kind (str): The grammar construct of the node.
        value (Union[str, ASTNode], optional): Token text or a nested node.
        children (list[ASTNode], optional): Child nodes in grammar order.
        line (int): Source line number (default is 0).
        col (int): Source column number (default is 0).

    Methods:
        __repr__(): Returns a structured string representation for debugging.
        __eq__(other): Checks structural equality with another ASTNode.
        to_dict(): Converts the node (and all descendants) into a nested dictionary.
    """

    def __init__(
        self,
        kind: str,
        value: Union[str, "ASTNode"] | None = None,
        children: list["ASTNode"] | None = None,
        line: int = 0,
        col: int = 0,
    ):
        self.kind = kind
        self.value = value
        self.children: list["ASTNode"] = children or []
        self.line = line
        self.col = col
        self.else_children: list["ASTNode"] = []

    @property
    def text(self) -> str:
        """The token or literal text of the node ('' when it has none)."""
        if self.value is None:
            return ""
        if isinstance(self.value, ASTNode):
            return self.value.text
        return str(self.value)

    def __repr__(self) -> str:
        parts = [f"{self.kind}"]
        if self.value is not None:
            parts.append(f"value={repr(self.value)}")
        if self.children:
            preview = ", ".join(repr(c) for c in self.children[:3])
            if len(self.children) > 3:
                preview += ", ..."
            parts.append(f"children=[{preview}]")
        if self.else_children:
            preview = ", ".join(repr(c) for c in self.else_children[:3])
            if len(self.else_children) > 3:
                preview += ", ..."
            parts.append(f"else_children=[{preview}]")
        return f"ASTNode({', '.join(parts)})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ASTNode):
            return False
        return (
            self.kind == other.kind
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
            and self.children == other.children
            and self.else_children == other.else_children
        )

    def to_dict(self) -> ASTDict:
        val: Any = self.value
        if isinstance(val, ASTNode):
            val = val.to_dict()

        return {
            "kind": self.kind,
            "value": val,
            "line": self.line,
            "col": self.col,
            "children": [c.to_dict() for c in self.children],
            "else_children": [c.to_dict() for c in self.else_children],
        }
