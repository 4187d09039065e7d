import pytest
from hypothesis import given
from hypothesis import strategies as st

from tortuga.tortuga_lexer import CharacterStream, Lexer, Token, classify_word


def tokenize(source: str) -> list[Token]:
    return Lexer(CharacterStream(source)).tokens()[:-1]


def types(source: str) -> list[str]:
    return [tok.type for tok in tokenize(source)]


def test_operator_tokens() -> None:
    code = "+ - * / % \\ ^ = <> < > <= >= =< => ( ) [ ] , ;"
    assert types(code) == [
        "PLUS",
        "MINUS",
        "MULT",
        "DIV",
        "MOD",
        "IDIV",
        "POW",
        "EQ",
        "NE",
        "LT",
        "GT",
        "LE",
        "GE",
        "LE",
        "GE",
        "LPAREN",
        "RPAREN",
        "LBRACK",
        "RBRACK",
        "COMMA",
        "SEMI",
    ]


def test_longest_match_without_spaces() -> None:
    assert types("a<=b") == ["IDENT", "LE", "IDENT"]
    assert types("a<-1") == ["IDENT", "LT", "MINUS", "NUMBER"]


def test_keywords_are_case_insensitive() -> None:
    assert types("for For FOR") == ["FOR", "FOR", "FOR"]
    tok = tokenize("While")[0]
    assert tok.type == "WHILE"
    assert tok.value == "While"


def test_primitives_carry_canonical_name() -> None:
    tok = tokenize("forward")[0]
    assert tok.type == "PRIMITIVE"
    assert tok.value == "FORWARD"


def test_abbreviations_are_plain_identifiers() -> None:
    assert classify_word("fd") == Token("IDENT", "fd")


def test_numbers() -> None:
    toks = tokenize("42 3.14 .5")
    assert [(t.type, t.value) for t in toks] == [
        ("NUMBER", "42"),
        ("FLOAT", "3.14"),
        ("FLOAT", ".5"),
    ]


def test_invalid_float() -> None:
    with pytest.raises(SyntaxError, match="Invalid float"):
        tokenize("1.2.3")


def test_string_escapes() -> None:
    tok = tokenize(r'"say \"hi\"\n"')[0]
    assert tok.type == "STRING"
    assert tok.value == 'say "hi"\n'


def test_unterminated_string() -> None:
    with pytest.raises(SyntaxError, match="Unterminated string"):
        tokenize('"oops')


def test_comments_and_positions() -> None:
    toks = tokenize("# heading\n  fd 10 # move\nrt 90")
    assert [(t.value, t.line, t.col) for t in toks] == [
        ("fd", 2, 3),
        ("10", 2, 6),
        ("rt", 3, 1),
        ("90", 3, 4),
    ]


def test_unknown_character_is_error_token() -> None:
    assert types("@") == ["ERROR"]


def test_eof_token() -> None:
    toks = Lexer(CharacterStream("")).tokens()
    assert toks == [Token("EOF", "EOF", 1, 1)]


def test_character_stream_read_past_end() -> None:
    cs = CharacterStream("a")
    assert cs.next() == "a"
    assert cs.peek() == ""
    with pytest.raises(EOFError):
        cs.next()


@given(st.from_regex(r"[a-z_][a-z0-9_]{0,10}", fullmatch=True))  # type: ignore[misc]
def test_words_lex_to_one_token(word: str) -> None:
    toks = tokenize(word)
    assert len(toks) == 1
    assert toks[0].value.lower() == word


@given(st.integers(min_value=0, max_value=10**12))  # type: ignore[misc]
def test_integers_round_trip(n: int) -> None:
    toks = tokenize(str(n))
    assert toks == [Token("NUMBER", str(n), 1, 1)]
