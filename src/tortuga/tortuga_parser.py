"""
Tortuga Language Parser

Turns the token list produced by the lexer into the parse tree the interpreter walks.
The interpreter treats this module as a replaceable collaborator: any producer of the
same node shapes can feed it.

Supported Constructs
--------------------
- Expressions (precedence lowest to highest, all levels left-associative):
    * `and` / `or` (and `xor`, which parses but has no evaluation rule)
    * relational `= <> < > <= >= =< =>`
    * `+ -`, then `* / % \\`, then `^`
    * prefix `+`, `-`, `not`; literals, variables, calls `f(a, b)`, `( ... )`

- Statements:
    * `[LET] x = expr`, `LOCAL x = expr`
    * `FOR i = a TO b [STEP s] ... NEXT [i]` (BASIC form)
    * `FOR [i a b [s]] [ ... ]` (Logo form), `REPEAT n [ ... ]`
    * `WHILE cond ... WEND`, `IF cond THEN ... [ELSE ...] END IF`
    * `SUB name(a, b) ... END SUB`, `name(args)`, `name`, `CALL name(args)`
    * `RETURN [expr]`, `STOP`, `EXIT`, `HALT`
    * `PRINT expr[, expr ...]`, `PAUSE ms`, turtle primitives (`FORWARD 10`)

Tree Shape
----------
Every expression level with more than one operand becomes a node of kind
`expression`, `relational`, `adding`, `multiplying` or `exponent` whose children
alternate operand, `operator`, operand, ... A prefixed operand becomes a `sign` node
whose children are the prefix operators followed by the operand. Identifiers are
case-insensitive and stored lowercase.

Raises
------
SyntaxError
    On malformed input, with the offending line and column in the message.
"""

from __future__ import annotations

from collections.abc import Callable

from tortuga.tortuga_ast import ASTNode
from tortuga.tortuga_constants import (
    ADDING_OPS,
    BOOL_OPS,
    EXPONENT_OPS,
    MULTIPLYING_OPS,
    PRIMITIVES,
    RELATIONAL_OPS,
    SIGN_OPS,
)
from tortuga.tortuga_lexer import Token

EXPRESSION_START: set[str] = {
    "NUMBER",
    "FLOAT",
    "STRING",
    "LITERAL",
    "IDENT",
    "LPAREN",
} | SIGN_OPS


class Parser:
    """
    Recursive-descent parser for Tortuga programs.

    Attributes
    ----------
    tokens : list[Token]
        The input token stream (an EOF token is appended when missing).
    position : int
        Current index into the token stream.
    in_procedure : bool
        Whether the parser is inside a SUB body (RETURN and STOP are only legal there).

    Methods
    -------
    parse() -> ASTNode
        Parse a complete program into a `program` node.
    parse_statement() -> ASTNode
        Parse a single statement.
    parse_expression() -> ASTNode
        Parse an expression starting at the lowest precedence level.
    parse_expr_entrypoint() -> ASTNode
        Parse input that must consist of exactly one expression (REPL).
    """

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens: list[Token] = list(tokens)
        if not self.tokens or self.tokens[-1].type != "EOF":
            last = self.tokens[-1] if self.tokens else Token("EOF", "EOF", 1, 1)
            self.tokens.append(Token("EOF", "EOF", last.line, last.col))
        self.position: int = 0
        self.in_procedure: bool = False

        self.statement_parsers = {
            "LET": self.parse_let,
            "LOCAL": self.parse_local,
            "FOR": self.parse_for,
            "REPEAT": self.parse_repeat,
            "WHILE": self.parse_while,
            "IF": self.parse_if,
            "SUB": self.parse_sub,
            "CALL": self.parse_call_statement,
            "RETURN": self.parse_return,
            "STOP": self.parse_stop,
            "EXIT": self.parse_exit,
            "HALT": self.parse_halt,
            "PRINT": self.parse_print,
            "PAUSE": self.parse_pause,
            "PRIMITIVE": self.parse_primitive,
            "IDENT": self.parse_ident_statement,
        }

    def current(self) -> Token:
        return self.tokens[min(self.position, len(self.tokens) - 1)]

    def peek(self, offset: int = 1) -> Token:
        index = self.position + offset
        return self.tokens[index] if index < len(self.tokens) else self.tokens[-1]

    def advance(self) -> Token:
        tok = self.current()
        if self.position < len(self.tokens) - 1:
            self.position += 1
        return tok

    def match(self, *types: str) -> Token:
        tok = self.current()
        if tok.type in types:
            return self.advance()
        raise self.error(f"Expected {' or '.join(types)}, got {tok.value!r}", tok)

    def error(self, message: str, tok: Token | None = None) -> SyntaxError:
        tok = tok or self.current()
        return SyntaxError(f"{message} at line {tok.line}, col {tok.col}")

    def on_same_line(self, tok: Token) -> bool:
        """True if the current token continues the line `tok` is on."""
        cur = self.current()
        return cur.type != "EOF" and cur.line == tok.line

    @staticmethod
    def name_of(tok: Token) -> str:
        return tok.value.lower()

    # Program and blocks

    def parse(self) -> ASTNode:
        """Parse a full program and return its `program` node."""
        body = self.parse_statements(set(), "program")
        return ASTNode("program", None, body, line=1, col=1)

    def parse_statements(self, terminators: set[str], context: str) -> list[ASTNode]:
        stmts: list[ASTNode] = []
        while self.current().type not in terminators:
            if self.current().type == "EOF":
                if terminators:
                    raise self.error(f"Unterminated {context}, got EOF")
                break
            stmts.append(self.parse_statement())
        return stmts

    def parse_bracket_block(self, context: str) -> list[ASTNode]:
        self.match("LBRACK")
        body = self.parse_statements({"RBRACK"}, context)
        self.match("RBRACK")
        return body

    def parse_statement(self) -> ASTNode:
        """Parse a single top-level or block-level statement."""
        tok = self.current()
        handler = self.statement_parsers.get(tok.type)
        if handler is None:
            if tok.type == "ERROR":
                raise self.error(f"Unexpected character {tok.value!r}", tok)
            raise self.error(f"Unexpected {tok.value!r}", tok)
        return handler()

    # Statements

    def parse_assignment(self, kind: str = "assign") -> ASTNode:
        name_tok = self.match("IDENT")
        self.match("EQ")
        expr = self.parse_expression()
        return ASTNode(
            kind, self.name_of(name_tok), [expr], line=name_tok.line, col=name_tok.col
        )

    def parse_let(self) -> ASTNode:
        self.match("LET")
        return self.parse_assignment()

    def parse_local(self) -> ASTNode:
        tok = self.match("LOCAL")
        node = self.parse_assignment("local")
        node.line, node.col = tok.line, tok.col
        return node

    def parse_ident_statement(self) -> ASTNode:
        if self.peek().type == "EQ":
            return self.parse_assignment()
        name_tok = self.match("IDENT")
        return self.finish_call(name_tok, name_tok)

    def parse_call_statement(self) -> ASTNode:
        call_tok = self.match("CALL")
        name_tok = self.match("IDENT")
        return self.finish_call(name_tok, call_tok)

    def finish_call(self, name_tok: Token, start_tok: Token) -> ASTNode:
        args: list[ASTNode] = []
        if self.current().type == "LPAREN":
            args = self.parse_call_args()
        callee = ASTNode(
            "identifier", self.name_of(name_tok), line=name_tok.line, col=name_tok.col
        )
        return ASTNode("call", callee, args, line=start_tok.line, col=start_tok.col)

    def parse_call_args(self) -> list[ASTNode]:
        self.match("LPAREN")
        args: list[ASTNode] = []
        if self.current().type != "RPAREN":
            while True:
                args.append(self.parse_expression())
                if self.current().type != "COMMA":
                    break
                self.advance()
        self.match("RPAREN")
        return args

    def parse_for(self) -> ASTNode:
        """Parse either FOR form; the token after FOR decides which."""
        for_tok = self.match("FOR")
        if self.current().type == "LBRACK":
            return self.parse_logo_for(for_tok)

        var_tok = self.match("IDENT")
        self.match("EQ")
        start = self.parse_expression()
        self.match("TO")
        stop = self.parse_expression()
        range_children = [
            ASTNode("identifier", self.name_of(var_tok), line=var_tok.line, col=var_tok.col),
            start,
            stop,
        ]
        if self.current().type == "STEP":
            self.advance()
            range_children.append(self.parse_expression())

        body = self.parse_statements({"NEXT"}, "FOR loop (missing NEXT)")
        next_tok = self.match("NEXT")
        if self.current().type == "IDENT" and self.on_same_line(next_tok):
            if self.name_of(self.current()) != self.name_of(var_tok):
                raise self.error(
                    f"NEXT {self.current().value} does not match FOR {var_tok.value}"
                )
            self.advance()

        return ASTNode(
            "loop",
            value="FOR",
            children=[
                ASTNode("range", None, range_children, line=var_tok.line, col=var_tok.col),
                *body,
            ],
            line=for_tok.line,
            col=for_tok.col,
        )

    def parse_logo_for(self, for_tok: Token) -> ASTNode:
        """Parse `FOR [var start stop [step]] [body]`; commas between bounds are optional."""
        self.match("LBRACK")
        var_tok = self.match("IDENT")
        range_children = [
            ASTNode("identifier", self.name_of(var_tok), line=var_tok.line, col=var_tok.col)
        ]
        if self.current().type == "COMMA":
            self.advance()
        while self.current().type != "RBRACK":
            if len(range_children) == 4:
                raise self.error("FOR range takes at most start, stop and step")
            range_children.append(self.parse_expression())
            if self.current().type == "COMMA":
                self.advance()
        self.match("RBRACK")
        if len(range_children) < 3:
            raise self.error("FOR range needs a start and a stop", for_tok)

        body = self.parse_bracket_block("FOR loop")
        return ASTNode(
            "loop",
            value="LOGO_FOR",
            children=[
                ASTNode("range", None, range_children, line=var_tok.line, col=var_tok.col),
                *body,
            ],
            line=for_tok.line,
            col=for_tok.col,
        )

    def parse_repeat(self) -> ASTNode:
        tok = self.match("REPEAT")
        count = self.parse_expression()
        body = self.parse_bracket_block("REPEAT block")
        return ASTNode("loop", "REPEAT", [count, *body], line=tok.line, col=tok.col)

    def parse_while(self) -> ASTNode:
        tok = self.match("WHILE")
        cond = self.parse_expression()
        body = self.parse_statements({"WEND"}, "WHILE loop (missing WEND)")
        self.match("WEND")
        return ASTNode("loop", "WHILE", [cond, *body], line=tok.line, col=tok.col)

    def parse_if(self) -> ASTNode:
        """Parse an IF condition with optional ELSE block."""
        tok = self.match("IF")
        cond = self.parse_expression()
        self.match("THEN")
        then_block = self.parse_statements({"ELSE", "END"}, "IF block (missing END IF)")
        else_block: list[ASTNode] = []
        if self.current().type == "ELSE":
            self.advance()
            else_block = self.parse_statements({"END"}, "ELSE block (missing END IF)")
        self.match("END")
        self.match("IF")

        node = ASTNode("if", None, [cond, *then_block], line=tok.line, col=tok.col)
        node.else_children = else_block
        return node

    def parse_sub(self) -> ASTNode:
        """Parse a SUB definition including parameters and body."""
        tok = self.match("SUB")
        name_tok = self.match("IDENT")

        params: list[ASTNode] = []
        if self.current().type == "LPAREN":
            self.advance()
            if self.current().type != "RPAREN":
                while True:
                    param_tok = self.match("IDENT")
                    params.append(
                        ASTNode(
                            "identifier",
                            self.name_of(param_tok),
                            line=param_tok.line,
                            col=param_tok.col,
                        )
                    )
                    if self.current().type != "COMMA":
                        break
                    self.advance()
            self.match("RPAREN")

        names = [p.text for p in params]
        if len(set(names)) != len(names):
            raise self.error(f"Duplicate parameter in SUB {name_tok.value}", name_tok)

        prev_in_procedure = self.in_procedure
        self.in_procedure = True
        try:
            body = self.parse_statements({"END"}, f"SUB {name_tok.value} (missing END SUB)")
        finally:
            self.in_procedure = prev_in_procedure
        self.match("END")
        self.match("SUB")

        params_node = ASTNode("params", None, params, line=name_tok.line, col=name_tok.col)
        return ASTNode(
            "func",
            self.name_of(name_tok),
            [params_node, *body],
            line=tok.line,
            col=tok.col,
        )

    def parse_return(self) -> ASTNode:
        """Parse a RETURN statement with an optional value on the same line."""
        tok = self.match("RETURN")
        if not self.in_procedure:
            raise self.error("RETURN is only allowed inside SUB blocks", tok)
        if self.on_same_line(tok) and self.current().type in EXPRESSION_START:
            return ASTNode("return", None, [self.parse_expression()], line=tok.line, col=tok.col)
        return ASTNode("return", line=tok.line, col=tok.col)

    def parse_stop(self) -> ASTNode:
        tok = self.match("STOP")
        if not self.in_procedure:
            raise self.error("STOP is only allowed inside SUB blocks", tok)
        return ASTNode("return", line=tok.line, col=tok.col)

    def parse_exit(self) -> ASTNode:
        tok = self.match("EXIT")
        return ASTNode("break", line=tok.line, col=tok.col)

    def parse_halt(self) -> ASTNode:
        tok = self.match("HALT")
        return ASTNode("halt", line=tok.line, col=tok.col)

    def parse_print(self) -> ASTNode:
        tok = self.match("PRINT")
        items: list[ASTNode] = []
        if self.on_same_line(tok) and self.current().type in EXPRESSION_START:
            items.append(self.parse_expression())
            while self.current().type in ("COMMA", "SEMI"):
                self.advance()
                items.append(self.parse_expression())
        return ASTNode("print", None, items, line=tok.line, col=tok.col)

    def parse_pause(self) -> ASTNode:
        tok = self.match("PAUSE")
        return ASTNode("pause", None, [self.parse_expression()], line=tok.line, col=tok.col)

    def parse_primitive(self) -> ASTNode:
        tok = self.match("PRIMITIVE")
        args: list[ASTNode] = []
        for i in range(PRIMITIVES[tok.value]):
            if i and self.current().type == "COMMA":
                self.advance()
            args.append(self.parse_expression())
        return ASTNode("command", tok.value, args, line=tok.line, col=tok.col)

    # Expressions

    def parse_expr_entrypoint(self) -> ASTNode:
        """Parse input consisting of exactly one expression."""
        expr = self.parse_expression()
        if self.current().type != "EOF":
            raise self.error(f"Unexpected {self.current().value!r} after expression")
        return expr

    def parse_level(
        self, kind: str, operators: set[str], operand: Callable[[], ASTNode]
    ) -> ASTNode:
        """Parse one precedence level; a single operand is returned without a node."""
        first = operand()
        children = [first]
        while self.current().type in operators:
            op_tok = self.advance()
            children.append(
                ASTNode("operator", op_tok.value, line=op_tok.line, col=op_tok.col)
            )
            children.append(operand())
        if len(children) == 1:
            return first
        return ASTNode(kind, None, children, line=first.line, col=first.col)

    def parse_expression(self) -> ASTNode:
        return self.parse_level("expression", BOOL_OPS, self.parse_relational)

    def parse_relational(self) -> ASTNode:
        return self.parse_level("relational", RELATIONAL_OPS, self.parse_adding)

    def parse_adding(self) -> ASTNode:
        return self.parse_level("adding", ADDING_OPS, self.parse_multiplying)

    def parse_multiplying(self) -> ASTNode:
        return self.parse_level("multiplying", MULTIPLYING_OPS, self.parse_exponent)

    def parse_exponent(self) -> ASTNode:
        return self.parse_level("exponent", EXPONENT_OPS, self.parse_sign)

    def parse_sign(self) -> ASTNode:
        prefix: list[ASTNode] = []
        while self.current().type in SIGN_OPS:
            op_tok = self.advance()
            prefix.append(
                ASTNode("operator", op_tok.value, line=op_tok.line, col=op_tok.col)
            )
        operand = self.parse_primary()
        if not prefix:
            return operand
        return ASTNode(
            "sign", None, [*prefix, operand], line=prefix[0].line, col=prefix[0].col
        )

    def parse_primary(self) -> ASTNode:
        tok = self.current()
        if tok.type == "NUMBER":
            self.advance()
            return ASTNode("number", tok.value, line=tok.line, col=tok.col)
        if tok.type == "FLOAT":
            self.advance()
            return ASTNode("float", tok.value, line=tok.line, col=tok.col)
        if tok.type == "STRING":
            self.advance()
            return ASTNode("string", tok.value, line=tok.line, col=tok.col)
        if tok.type == "LITERAL":
            self.advance()
            return ASTNode("literal", tok.value.lower(), line=tok.line, col=tok.col)
        if tok.type == "IDENT":
            self.advance()
            if self.current().type == "LPAREN":
                callee = ASTNode(
                    "identifier", self.name_of(tok), line=tok.line, col=tok.col
                )
                return ASTNode(
                    "call", callee, self.parse_call_args(), line=tok.line, col=tok.col
                )
            return ASTNode("identifier", self.name_of(tok), line=tok.line, col=tok.col)
        if tok.type == "LPAREN":
            self.advance()
            expr = self.parse_expression()
            self.match("RPAREN")
            return expr
        if tok.type == "EOF":
            raise self.error("Expected expression, got EOF", tok)
        raise self.error(f"Expected expression, got {tok.value!r}", tok)


__all__ = ["Parser", "EXPRESSION_START"]
