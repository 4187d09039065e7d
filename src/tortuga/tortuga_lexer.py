"""
Lexical analyzer for the Tortuga language.

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: A single token with type, text, and source location.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Features:
    - Skips whitespace and single-line comments (`#`)
    - Keywords are case-insensitive (`FOR`, `for` and `For` are the same token)
    - Turtle primitives become `PRIMITIVE` tokens carrying the canonical name
    - Longest-match recognition of operators (`<=` before `<`)
    - Numbers (integer and float) and double-quoted strings with `\\` escapes

Raises:
    SyntaxError: If invalid floats or unterminated strings are encountered.

Example:
    >>> lexer = Lexer(CharacterStream("fd 10"))
    >>> lexer.next_token()
    Token(IDENT, fd)
"""

from typing import Any

from tortuga.tortuga_constants import PRIMITIVES, token_hashmap

ESCAPES = {"n": "\n", "t": "\t", '"': '"', "\\": "\\"}


class CharacterStream:
    """
    Reads characters from a source string while tracking line and column.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        """
        Initializes the character stream.

        Args:
            source (str): The program text.
            position (int, optional): Starting index. Defaults to 0.
            line (int, optional): Starting line number. Defaults to 1.
            column (int, optional): Starting column number. Defaults to 1.
        """
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Returns:
            str: The next character; line and column advance past it.

        Raises:
            EOFError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise EOFError(
                f"Attempted to read past end of source at line {self.line}, col {self.column}"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """
        Returns the character at `offset` from the current position without advancing.

        Args:
            offset (int, optional): Number of characters to look ahead. Defaults to 0.

        Returns:
            str: The character at the offset, or an empty string if out of bounds.
        """
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        """Returns True once every character has been consumed."""
        return self.position >= len(self.source)


class Token:
    """A lexical token.

    Attributes:
        type (str): Token type (e.g. 'IDENT', 'NUMBER', 'PRIMITIVE', 'EOF').
        value (str): Source text, or the canonical name for keywords and primitives
            reached through an alias.
        line (int): 1-based line number where the token starts.
        col (int): 1-based column number where the token starts.
    """

    def __init__(self, type_: str, value: str, line: int = 0, col: int = 0):
        self.type = type_
        self.value = value
        self.line = line
        self.col = col

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, self.value, self.line, self.col))


def classify_word(word: str, line: int = 0, col: int = 0) -> Token:
    """Builds the token for an identifier-shaped word (keyword, primitive or IDENT)."""
    lowered = word.lower()
    if lowered in token_hashmap:
        return Token(token_hashmap[lowered], word, line, col)
    if word.upper() in PRIMITIVES:
        return Token("PRIMITIVE", word.upper(), line, col)
    return Token("IDENT", word, line, col)


class Lexer:
    """Lexical analyzer for Tortuga source.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        """Initializes the lexer over a character stream.

        Args:
            stream (CharacterStream): The input character stream to lex.
        """
        self.stream = stream

    def peek(self) -> str:
        """Returns the upcoming character without consuming it ('' at EOF)."""
        return self.stream.peek()

    def advance(self) -> str:
        """Consumes and returns the next character from the stream.

        Returns:
            str: The consumed character.
        """
        return self.stream.next()

    def skip_whitespace(self) -> None:
        """Skips all whitespace and comments in the stream."""
        while not self.stream.end_of_file():
            if self.peek() in " \t\r\n":
                self.advance()
            elif self.peek() == "#":
                self.skip_comment()
            else:
                break

    def skip_comment(self) -> None:
        """Advances to the end of a `#` comment line."""
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()

    def match_operator(self) -> Token | None:
        """Attempts to match the longest operator or punctuation at the current position.

        Returns:
            Token | None: The matched token, or None when no operator starts here.
        """
        line, col = self.stream.line, self.stream.column
        max_token = None
        match_len = 0
        candidate = ""

        for i in range(2):  # longest operator spelling
            ch = self.stream.peek(i)
            if ch == "":
                break
            candidate += ch
            if candidate in token_hashmap:
                max_token = candidate
                match_len = i + 1

        if max_token:
            for _ in range(match_len):
                self.advance()
            return Token(token_hashmap[max_token], max_token, line, col)

        return None

    def read_string(self, line: int, col: int) -> Token:
        self.advance()  # opening quote
        val = ""
        while not self.stream.end_of_file():
            ch = self.peek()
            if ch == "\\":
                self.advance()
                if self.stream.end_of_file():
                    break
                escaped = self.advance()
                val += ESCAPES.get(escaped, escaped)
            elif ch == '"':
                self.advance()
                return Token("STRING", val, line, col)
            elif ch == "\n":
                break
            else:
                val += self.advance()
        raise SyntaxError(f"Unterminated string at line {line}, col {col}")

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Raises:
            SyntaxError: If a malformed token is encountered.
        """
        self.skip_whitespace()

        if self.stream.end_of_file():
            return Token("EOF", "EOF", self.stream.line, self.stream.column)

        ch = self.peek()
        line, col = self.stream.line, self.stream.column

        # 1. Identifier, keyword or primitive
        if ch.isalpha() or ch == "_":
            ident = ""
            while not self.stream.end_of_file() and (
                self.peek().isalnum() or self.peek() == "_"
            ):
                ident += self.advance()
            return classify_word(ident, line, col)

        # 2. Number or float (".5" is accepted as a float)
        if ch.isdigit() or (ch == "." and self.stream.peek(1).isdigit()):
            num = ""
            has_dot = False
            while not self.stream.end_of_file() and (
                self.peek().isdigit() or self.peek() == "."
            ):
                if self.peek() == ".":
                    if has_dot:
                        raise SyntaxError(
                            f"Invalid float format at line {line}, col {col}"
                        )
                    has_dot = True
                num += self.advance()
            return Token("FLOAT" if has_dot else "NUMBER", num, line, col)

        # 3. String
        if ch == '"':
            return self.read_string(line, col)

        # 4. Operator or punctuation
        token = self.match_operator()
        if token:
            return token

        # 5. Unknown character
        return Token("ERROR", self.advance(), line, col)

    def tokens(self) -> list[Token]:
        """Lexes the whole stream; the returned list ends with the EOF token."""
        result: list[Token] = []
        while True:
            tok = self.next_token()
            result.append(tok)
            if tok.type == "EOF":
                return result


__all__ = ["CharacterStream", "Lexer", "Token", "classify_word", "token_hashmap"]
