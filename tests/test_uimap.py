import json
import os
import tempfile

import pytest

from tortuga.tortuga_constants import CANONICAL_TOKEN_MAP, CANONICAL_TOKENS
from tortuga.tortuga_lexer import Token
from tortuga.tortuga_uimap import MappingError, UserInterfaceMapper


def test_dict_mode_basic() -> None:
    uimap = UserInterfaceMapper()
    uimap.configure({"avanza": "FORWARD", "Mientras": "while"})
    assert uimap.token_map["avanza"] == "FORWARD"
    assert uimap.token_map["mientras"] == "WHILE"


def test_dict_mode_alias_conflict_raises() -> None:
    uimap = UserInterfaceMapper()
    uimap.configure({"go": "FORWARD"})
    with pytest.raises(MappingError) as e:
        uimap.configure({"go": "BACK"})
    assert "Alias collision" in str(e.value)
    assert e.value.conflicts == ["'go' -> conflict between FORWARD and BACK"]


def test_same_alias_same_target_is_not_a_conflict() -> None:
    uimap = UserInterfaceMapper()
    uimap.configure({"go": "FORWARD"})
    uimap.configure({("go", "avanza"): "FORWARD"})
    assert uimap.summary() == {"go": "FORWARD", "avanza": "FORWARD"}


def test_dict_mode_invalid_name_raises() -> None:
    uimap = UserInterfaceMapper()
    with pytest.raises(MappingError, match="Unknown canonical name"):
        uimap.configure({"foo": "TELEPORT"})


def test_list_mode_positional() -> None:
    uimap = UserInterfaceMapper()
    uimap.configure([["atras"], None, ("limpia", "borra")])
    assert uimap.token_map["atras"] == CANONICAL_TOKENS[0]
    assert uimap.token_map["limpia"] == CANONICAL_TOKENS[2]
    assert uimap.token_map["borra"] == CANONICAL_TOKENS[2]


def test_list_mode_too_many_entries_raises() -> None:
    uimap = UserInterfaceMapper()
    with pytest.raises(MappingError, match="Too many entries"):
        uimap.configure([["x"]] * (len(CANONICAL_TOKENS) + 1))


def test_list_mode_conflicting_aliases() -> None:
    uimap = UserInterfaceMapper()
    with pytest.raises(MappingError, match="Alias collision"):
        uimap.configure([["x"], ["x"]])


def test_configure_invalid_type_raises() -> None:
    uimap = UserInterfaceMapper()
    with pytest.raises(MappingError, match="must be either a list or a dict"):
        uimap.configure("not a list or dict")  # type: ignore


def test_extract_aliases_all_types() -> None:
    uimap = UserInterfaceMapper()

    class Dummy:
        pass

    assert uimap._extract_aliases(None) == []
    assert uimap._extract_aliases("ABC") == ["abc"]
    assert uimap._extract_aliases(123) == ["123"]
    assert uimap._extract_aliases(["a", ("b",)]) == ["a", "b"]
    assert uimap._extract_aliases({"K": 2}) == ["k"]
    assert uimap._extract_aliases(Dummy()) == []


def test_get_token_for_primitive_and_keyword() -> None:
    uimap = UserInterfaceMapper.from_canonical()
    tok = uimap.get_token("FD", line=2, col=3)
    assert tok == Token("PRIMITIVE", "FORWARD", 2, 3)
    tok = uimap.get_token("pr", 1, 1)
    assert tok == Token("PRINT", "pr", 1, 1)
    assert uimap.get_token("missing") is None


def test_from_canonical_covers_default_abbreviations() -> None:
    uimap = UserInterfaceMapper.from_canonical()
    assert uimap.summary() == {k.lower(): v for k, v in CANONICAL_TOKEN_MAP.items()}
    assert uimap.session_diff() == {}
    uimap.configure({"avanza": "FORWARD"})
    assert uimap.session_diff() == {"avanza": "FORWARD"}


def test_reports() -> None:
    uimap = UserInterfaceMapper()
    uimap.configure({"avanza": "FORWARD"})
    assert "avanza -> FORWARD" in uimap.report()
    verbose = uimap.report(verbose=True)
    assert f"(slot {CANONICAL_TOKENS.index('FORWARD')})" in verbose


def test_load_from_json_success() -> None:
    uimap = UserInterfaceMapper()
    cfg = {"avanza , adelante": "FORWARD", "gira": "RIGHT"}
    with tempfile.NamedTemporaryFile("w+", delete=False, suffix=".json") as tmp:
        json.dump(cfg, tmp)
        path = tmp.name
    try:
        uimap.load_from_json(path)
    finally:
        os.remove(path)
    assert uimap.token_map == {"avanza": "FORWARD", "adelante": "FORWARD", "gira": "RIGHT"}


def test_load_from_json_errors() -> None:
    uimap = UserInterfaceMapper()
    with pytest.raises(MappingError, match="Failed to load"):
        uimap.load_from_json("/nonexistent/sugar.json")

    with tempfile.NamedTemporaryFile("w+", delete=False, suffix=".json") as tmp:
        tmp.write("[1, 2]")
        path = tmp.name
    try:
        with pytest.raises(MappingError, match="JSON object"):
            uimap.load_from_json(path)
    finally:
        os.remove(path)
