"""
Search term parsing.

Splits the query text into terms. A term ending in one or more ``*`` is a
prefix search: the run of wildcards becomes a single SQL ``%`` and the
term is compared with LIKE. Anything else is compared with ``=``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

_TRAILING_WILDCARDS = re.compile(r"\*+$")


class Comparator(str, Enum):
    EXACT = "="
    PREFIX = "LIKE"

    @property
    def sql(self) -> str:
        return self.value


@dataclass(frozen=True)
class SearchTerm:
    operator: Comparator
    value: str

    @property
    def fulltext_value(self) -> str:
        """Value for MySQL boolean-mode MATCH ... AGAINST ('+word*')."""
        return "+" + self.value.replace("%", "*")

    def bind_params(self) -> dict[str, str]:
        return {"key": self.value, "fulltext_key": self.fulltext_value}


def tokenize(raw_query: Optional[str]) -> list[SearchTerm]:
    """
    Split a query into search terms, preserving their order.

    Example:
        >>> [(t.operator.sql, t.value) for t in tokenize("BRCA2 rs123**")]
        [('=', 'BRCA2'), ('LIKE', 'rs123%')]

    Empty or blank input returns an empty list; callers treat that as
    "no search performed".
    """
    if not raw_query:
        return []

    terms = []
    for word in raw_query.split():
        value, replaced = _TRAILING_WILDCARDS.subn("%", word)
        operator = Comparator.PREFIX if replaced else Comparator.EXACT
        terms.append(SearchTerm(operator=operator, value=value))
    return terms
