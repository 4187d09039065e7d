"""
Provides the `UserInterfaceMapper` class for user-defined aliases ("sugar") in Tortuga.

Learners and instructors can rename primitives and keywords (`fd` for FORWARD, `avanza`
for FORWARD, `mientras` for WHILE). The interpreter consults the mapper for every
identifier token, so an alias behaves exactly like the canonical word it stands for.

Classes:
    - UserInterfaceMapper: Maps aliases to canonical primitive or keyword names.
    - MappingError: Raised when configuration or alias conflicts occur.

Features:
    - Canonical names come from `CANONICAL_TOKENS`
    - Dict mode (alias or alias group -> name) and list mode (positional against
      `CANONICAL_TOKENS`)
    - Aliases are case-insensitive, like the keywords they stand for
    - Conflict detection, JSON loading, reports and session diffs

Usage:
    >>> mapper = UserInterfaceMapper.from_canonical()
    >>> mapper.configure({"avanza": "FORWARD"})
    >>> mapper.get_token("avanza").type
    'PRIMITIVE'
"""

import json
import logging
from typing import Any

from tortuga.tortuga_constants import CANONICAL_TOKEN_MAP, CANONICAL_TOKENS, PRIMITIVES
from tortuga.tortuga_lexer import Token

logger = logging.getLogger(__name__)


class MappingError(Exception):
    """Raised for invalid alias configurations.

    Attributes:
        conflicts (list[str]): One description per conflicting alias.

    Example:
        raise MappingError("Alias conflict", ["'go' -> FORWARD vs BACK"])
    """

    def __init__(self, message: str, conflicts: list[str] | None = None):
        super().__init__(message)
        self.conflicts = conflicts or []


class UserInterfaceMapper:
    """Alias table consulted while tokenizing.

    Attributes:
        token_map (dict[str, str]): Lowercase alias -> canonical name.
        alias_report (dict[str, str]): Same mapping, kept for reports.
    """

    def __init__(self) -> None:
        self.token_map: dict[str, str] = {}
        self.alias_report: dict[str, str] = {}

    def get_token(self, alias: str, line: int = 0, col: int = 0) -> Token | None:
        """Resolves an alias to the token its canonical name would have produced.

        Primitives become `PRIMITIVE` tokens carrying the canonical name; keywords keep
        the alias text as their value.

        Returns:
            The resolved token, or None when `alias` is not mapped.
        """
        sym = self.token_map.get(alias.lower())
        if sym is None:
            return None
        if sym in PRIMITIVES:
            return Token("PRIMITIVE", sym, line, col)
        return Token(sym, alias, line, col)

    def report(self, verbose: bool = False) -> str:
        """Formats the alias table, one `alias -> CANONICAL` line per alias.

        Args:
            verbose: If True, also shows each canonical name's slot in the list mode.

        Returns:
            The report as a newline-separated string, sorted by alias.
        """
        lines: list[str] = []
        for alias, sym in sorted(self.alias_report.items()):
            if verbose:
                idx = CANONICAL_TOKENS.index(sym)
                lines.append(f"{alias:>12} -> {sym:<16} (slot {idx})")
            else:
                lines.append(f"{alias:>12} -> {sym}")
        return "\n".join(lines)

    def summary(self) -> dict[str, str]:
        """Returns a copy of the alias table (lowercase alias to canonical name)."""
        return dict(self.alias_report)

    def _extract_aliases(self, entry: Any) -> list[str]:
        """Recursively extracts lowercase aliases from a configuration entry.

        Args:
            entry: A string, number, iterable of entries, or dict (its keys are used).

        Returns:
            A flat list of aliases; unsupported entries contribute nothing.
        """
        if entry is None:
            return []
        if isinstance(entry, str):
            return [entry.lower()]
        if isinstance(entry, (int, float)):
            return [str(entry)]
        if isinstance(entry, (list, tuple, set)):
            aliases: list[str] = []
            for item in entry:
                aliases.extend(self._extract_aliases(item))
            return aliases
        if isinstance(entry, dict):
            return [str(k).lower() for k in entry.keys()]
        return []

    @classmethod
    def from_canonical(cls) -> "UserInterfaceMapper":
        """Builds a mapper preloaded with the classic Logo abbreviations."""
        instance = cls()
        instance.configure(dict(CANONICAL_TOKEN_MAP))
        return instance

    def load_from_json(self, path: str) -> None:
        """Loads aliases from a JSON object and applies them via `configure`.

        Keys may list several comma-separated aliases:
            {
                "avanza,adelante": "FORWARD",
                "mientras": "WHILE"
            }

        Raises:
            MappingError: If the file cannot be read or the configuration is invalid.
        """
        try:
            with open(path, encoding="utf-8") as f:
                raw_cfg = json.load(f)
            if not isinstance(raw_cfg, dict):
                raise MappingError("Sugar file must contain a JSON object")

            parsed_cfg: dict[tuple[str, ...], str] = {}
            for key, value in raw_cfg.items():
                aliases = tuple(alias.strip() for alias in key.split(",") if alias.strip())
                parsed_cfg[aliases] = value

            self.configure(parsed_cfg)
        except MappingError:
            raise
        except (OSError, ValueError, AttributeError) as e:
            raise MappingError(f"Failed to load sugar file: {e}") from e
        logger.info("Loaded %d alias group(s) from %s", len(parsed_cfg), path)

    def configure(self, cfg: list[Any] | dict[Any, Any]) -> None:
        """Applies a new alias configuration on top of the current one.

        Args:
            cfg: Either a dict mapping aliases (or groups of aliases) to canonical
                names, or a list whose entry `i` holds the aliases for
                `CANONICAL_TOKENS[i]`.

        Raises:
            MappingError: If a name is not canonical, an alias maps to two names, or a
                list-mode config has more entries than there are canonical names.
        """
        new_token_map: dict[str, str] = {}
        conflicts: list[str] = []
        valid_symbols = set(CANONICAL_TOKENS)

        if isinstance(cfg, dict):
            pairs = [(group, str(sym).upper()) for group, sym in cfg.items()]
            for _, sym in pairs:
                if sym not in valid_symbols:
                    raise MappingError(f"Unknown canonical name: {sym}")
        elif isinstance(cfg, list):
            if len(cfg) > len(CANONICAL_TOKENS):
                raise MappingError("Too many entries in list-mode config")
            pairs = [(entry, CANONICAL_TOKENS[idx]) for idx, entry in enumerate(cfg)]
        else:
            raise MappingError("Configuration must be either a list or a dict")

        for group, sym in pairs:
            for alias in self._extract_aliases(group):
                previous = new_token_map.get(alias, self.token_map.get(alias))
                if previous is not None and previous != sym:
                    conflicts.append(f"'{alias}' -> conflict between {previous} and {sym}")
                else:
                    new_token_map[alias] = sym

        if conflicts:
            raise MappingError("Alias collision(s) detected", conflicts)

        self.token_map.update(new_token_map)
        self.alias_report.update(new_token_map)

    def session_diff(self) -> dict[str, str]:
        """Aliases added on top of the default abbreviations."""
        defaults = {k.lower(): v for k, v in CANONICAL_TOKEN_MAP.items()}
        return {
            alias: sym
            for alias, sym in self.token_map.items()
            if defaults.get(alias) != sym
        }


__all__ = ["UserInterfaceMapper", "MappingError"]
