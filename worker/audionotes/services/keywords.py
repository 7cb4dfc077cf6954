"""Keyword tables used by the extractive summarizer.

The tables are plain data: each scoring category is a list of words or
phrases, matched case-insensitively on word boundaries. A JSON file with the
same shape can replace them::

    {
      "categories": {"importance": ["important", "key"], ...},
      "obligation": ["need to", "must", ...]
    }
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Pattern, Sequence, Tuple

DEFAULT_CATEGORIES: Dict[str, List[str]] = {
    "importance": ["important", "key", "main", "critical", "essential", "significant", "crucial"],
    "conclusion": ["conclusion", "summary", "result", "finding", "decided", "agreed"],
    "obligation": ["must", "need to", "have to", "should", "required", "necessary"],
    "goal": ["goal", "objective", "purpose", "aim", "target"],
    "problem": ["problem", "issue", "challenge", "solution", "resolve"],
    "ordinal": ["first", "second", "third", "finally", "lastly", "in conclusion"],
}

DEFAULT_OBLIGATION: List[str] = [
    "need to", "have to", "must", "should", "will", "going to", "plan to",
    "todo", "task", "action", "deadline", "by", "until", "before",
]


def compile_terms(terms: Sequence[str]) -> Pattern[str]:
    """One case-insensitive alternation over ``terms`` bounded by word edges."""
    cleaned = [t.strip() for t in terms if t and t.strip()]
    if not cleaned:
        # never matches
        return re.compile(r"(?!x)x")
    alternation = "|".join(r"\s+".join(re.escape(w) for w in t.split()) for t in cleaned)
    return re.compile(rf"\b(?:{alternation})\b", re.IGNORECASE)


@dataclass(frozen=True)
class KeywordTable:
    categories: Tuple[Tuple[str, Pattern[str]], ...]
    obligation: Pattern[str]

    @classmethod
    def from_mapping(
        cls,
        categories: Mapping[str, Sequence[str]],
        obligation: Sequence[str],
    ) -> "KeywordTable":
        compiled = tuple((name, compile_terms(terms)) for name, terms in categories.items())
        return cls(categories=compiled, obligation=compile_terms(obligation))

    def matched_categories(self, text: str) -> List[str]:
        return [name for name, pattern in self.categories if pattern.search(text)]

    def is_action(self, text: str) -> bool:
        return self.obligation.search(text) is not None


DEFAULT_TABLE = KeywordTable.from_mapping(DEFAULT_CATEGORIES, DEFAULT_OBLIGATION)


def load_keyword_table(path: Optional[str]) -> KeywordTable:
    """Load a keyword table from JSON, falling back to the defaults.

    Missing keys keep their default value. A missing or unreadable file is
    logged and the default table is returned.
    """
    if not path:
        return DEFAULT_TABLE
    try:
        raw = json.loads(Path(path).expanduser().read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logging.getLogger("app.analytics").warning(f"keyword table {path} not loaded: {e}")
        return DEFAULT_TABLE
    if not isinstance(raw, dict):
        logging.getLogger("app.analytics").warning(f"keyword table {path} is not a JSON object")
        return DEFAULT_TABLE
    categories = raw.get("categories")
    obligation = raw.get("obligation")
    if not isinstance(categories, dict):
        categories = DEFAULT_CATEGORIES
    if not isinstance(obligation, list):
        obligation = DEFAULT_OBLIGATION
    return KeywordTable.from_mapping(
        {str(k): [str(t) for t in v] for k, v in categories.items() if isinstance(v, list)},
        [str(t) for t in obligation],
    )
