"""Identifier to column name conversion and table name pluralization."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import List, Tuple

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")

# Ordered; the first matching rule is applied once.
PLURAL_RULES: List[Tuple[re.Pattern[str], str]] = [
    (re.compile(r"ch$"), "ches"),
    (re.compile(r"ss$"), "sses"),
    (re.compile(r"sh$"), "shes"),
    (re.compile(r"day$"), "days"),
    (re.compile(r"y$"), "ies"),
    (re.compile(r"x$"), "xes"),
    (re.compile(r"([^s])s$"), r"\1sses"),
    (re.compile(r"([^s])s?$"), r"\1s"),
]


@lru_cache(maxsize=None)
def to_db_name(name: str) -> str:
    """Convert `CamelCase` / `mixedCase` identifiers to `snake_case`.

    Runs of capitals are kept together as one word (`HTTPServer` becomes
    `http_server`, `UserID` becomes `user_id`). Names that are already
    snake_case are returned unchanged.
    """

    value = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    value = _WORD_BOUNDARY.sub(r"\1_\2", value)
    return value.lower()


def pluralize(name: str) -> str:
    """Pluralize one snake_case table name."""

    for pattern, replacement in PLURAL_RULES:
        if pattern.search(name):
            return pattern.sub(replacement, name, count=1)
    return name


def default_table_name(type_name: str, *, singular: bool = False) -> str:
    """Derive the table name of a model type without any override."""

    name = to_db_name(type_name)
    return name if singular else pluralize(name)
