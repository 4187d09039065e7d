"""
Shared lexical tables for the Tortuga language.

Exports:
    token_hashmap: Maps keyword and operator spellings (lowercase) to token types.
    PRIMITIVES: Turtle/console primitives handled by the host, with their arity.
    CANONICAL_TOKENS: Every canonical name an alias may resolve to.
    CANONICAL_TOKEN_MAP: Default aliases (classic Logo abbreviations).
"""

token_hashmap: dict[str, str] = {
    # Keywords
    "let": "LET",
    "local": "LOCAL",
    "for": "FOR",
    "to": "TO",
    "step": "STEP",
    "next": "NEXT",
    "while": "WHILE",
    "wend": "WEND",
    "repeat": "REPEAT",
    "if": "IF",
    "then": "THEN",
    "else": "ELSE",
    "end": "END",
    "sub": "SUB",
    "call": "CALL",
    "return": "RETURN",
    "stop": "STOP",
    "exit": "EXIT",
    "halt": "HALT",
    "print": "PRINT",
    "pause": "PAUSE",
    "and": "AND",
    "or": "OR",
    "xor": "XOR",
    "not": "NOT",
    "true": "LITERAL",
    "false": "LITERAL",
    # Operators
    "+": "PLUS",
    "-": "MINUS",
    "*": "MULT",
    "/": "DIV",
    "%": "MOD",
    "\\": "IDIV",
    "^": "POW",
    "=": "EQ",
    "<>": "NE",
    "<": "LT",
    ">": "GT",
    "<=": "LE",
    ">=": "GE",
    "=<": "LE",
    "=>": "GE",
    # Punctuation
    "(": "LPAREN",
    ")": "RPAREN",
    "[": "LBRACK",
    "]": "RBRACK",
    ",": "COMMA",
    ";": "SEMI",
}

# Operator token groups per precedence level
BOOL_OPS: set[str] = {"AND", "OR", "XOR"}
RELATIONAL_OPS: set[str] = {"EQ", "NE", "LT", "GT", "LE", "GE"}
ADDING_OPS: set[str] = {"PLUS", "MINUS"}
MULTIPLYING_OPS: set[str] = {"MULT", "DIV", "MOD", "IDIV"}
EXPONENT_OPS: set[str] = {"POW"}
SIGN_OPS: set[str] = {"PLUS", "MINUS", "NOT"}

# name -> number of numeric arguments
PRIMITIVES: dict[str, int] = {
    "FORWARD": 1,
    "BACK": 1,
    "LEFT": 1,
    "RIGHT": 1,
    "PENUP": 0,
    "PENDOWN": 0,
    "HOME": 0,
    "CLEARSCREEN": 0,
    "SETXY": 2,
    "SETHEADING": 1,
    "SETPENCOLOR": 1,
    "HIDETURTLE": 0,
    "SHOWTURTLE": 0,
}

CANONICAL_TOKENS: list[str] = sorted(PRIMITIVES) + sorted(
    {v for k, v in token_hashmap.items() if k.isalpha() and v != "LITERAL"}
)

CANONICAL_TOKEN_MAP: dict[str, str] = {
    "FD": "FORWARD",
    "BK": "BACK",
    "LT": "LEFT",
    "RT": "RIGHT",
    "PU": "PENUP",
    "PD": "PENDOWN",
    "CS": "CLEARSCREEN",
    "SETH": "SETHEADING",
    "SETPC": "SETPENCOLOR",
    "HT": "HIDETURTLE",
    "ST": "SHOWTURTLE",
    "PR": "PRINT",
    "WAIT": "PAUSE",
    "BYE": "HALT",
}

__all__ = [
    "token_hashmap",
    "BOOL_OPS",
    "RELATIONAL_OPS",
    "ADDING_OPS",
    "MULTIPLYING_OPS",
    "EXPONENT_OPS",
    "SIGN_OPS",
    "PRIMITIVES",
    "CANONICAL_TOKENS",
    "CANONICAL_TOKEN_MAP",
]
