# -*- coding: utf-8 -*-
"""Text normalization + typo-tolerant matching used by the search index.

Matching rules (per field, best field wins after weighting)
- whole normalized query is a substring of the field -> full score
- otherwise every query token must hit a field token, either as a substring
  or with a difflib similarity >= threshold (whole token or same-length prefix)
- tokens shorter than `min_fuzzy_len` only match as substrings
- punctuation inside words is also dropped ("al'ar" -> "alar") so both spellings hit
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import Iterable, List, Optional, Sequence, Tuple

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)
_PUNCT_RE = re.compile(r"[^\w\s]+", re.UNICODE)


def normalize_text(text: Optional[str]) -> str:
    """Casefold, strip diacritics, collapse whitespace."""
    s = unicodedata.normalize("NFKD", str(text or "").casefold())
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    return " ".join(s.split())


def tokenize(text: str) -> Tuple[str, ...]:
    return tuple(_TOKEN_RE.findall(text))


@dataclass(frozen=True)
class TextField:
    weight: float
    text: str
    tokens: Tuple[str, ...]
    compact: str = ""

    @classmethod
    def build(cls, weight: float, values: Iterable[Optional[str]]) -> "TextField":
        norm = normalize_text(" ".join(v for v in values if v))
        compact = _PUNCT_RE.sub("", norm)
        tokens = tokenize(norm)
        extra = tuple(t for t in tokenize(compact) if t not in tokens)
        return cls(weight=float(weight), text=norm, tokens=tokens + extra, compact=compact)


@dataclass(frozen=True)
class PreparedQuery:
    text: str
    tokens: Tuple[str, ...]

    @classmethod
    def build(cls, raw: str) -> "PreparedQuery":
        norm = normalize_text(raw)
        return cls(text=norm, tokens=tokenize(norm))

    def __bool__(self) -> bool:
        return bool(self.text)


class FuzzyMatcher:
    def __init__(self, threshold: float = 0.75, min_fuzzy_len: int = 3):
        self.threshold = float(threshold)
        self.min_fuzzy_len = int(min_fuzzy_len)

    def token_score(self, qtok: str, tokens: Sequence[str]) -> float:
        best = 0.0
        for tok in tokens:
            if qtok in tok:
                return 1.0
            if len(qtok) < self.min_fuzzy_len:
                continue
            sm = SequenceMatcher(None, qtok, tok)
            ratio = sm.ratio() if sm.quick_ratio() >= self.threshold else 0.0
            if len(tok) > len(qtok):
                # partially typed words: compare against the same-length prefix
                ratio = max(ratio, SequenceMatcher(None, qtok, tok[: len(qtok)]).ratio())
            if ratio > best:
                best = ratio
        return best if best >= self.threshold else 0.0

    def field_score(self, query: PreparedQuery, fld: TextField) -> float:
        if not fld.text or not query:
            return 0.0
        if query.text in fld.text or (fld.compact and query.text in fld.compact):
            return 1.0
        scores: List[float] = []
        for qtok in query.tokens:
            s = self.token_score(qtok, fld.tokens)
            if s <= 0.0:
                return 0.0
            scores.append(s)
        return min(scores) if scores else 0.0

    def score(self, query: PreparedQuery, fields: Sequence[TextField]) -> float:
        best = 0.0
        for fld in fields:
            s = self.field_score(query, fld) * fld.weight
            if s > best:
                best = s
        return best
