"""Text normalization and tolerant keyword matching.

Matching is layered, cheapest first:

1. substring containment of the normalized keyword,
2. a word-bounded regex whose tokens accept Spanish gender/number endings
   (``borroso`` also matches ``borrosa``, ``borrosos``, ``borrosas``),
3. a fuzzy token cover: every keyword token must be within a small edit
   distance of *some* text token. Order and adjacency are not enforced.
"""
from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, List, Optional, Pattern, Sequence, Tuple, Union

_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_WHITESPACE_RE = re.compile(r"\s+")

# Minimum stem length for the gender/number suffix alternation.
_MIN_STEM = 3
_SUFFIX_ALTERNATION = "(o|a|os|as)"

# Tokens shorter than this must match exactly in the fuzzy tier.
_FUZZY_MIN_LEN = 6
_FUZZY_LONG_LEN = 9


def normalize(text: Optional[str]) -> str:
    """Lowercase, strip accents and punctuation, collapse whitespace.

    Total over any input (``None`` included) and idempotent.
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    stripped = _NON_ALNUM_RE.sub(" ", stripped)
    return _WHITESPACE_RE.sub(" ", stripped).strip()


def tokenize(normalized: str) -> List[str]:
    """Split already-normalized text on whitespace."""
    if not normalized:
        return []
    return [tok for tok in normalized.split(" ") if tok]


@dataclass(frozen=True)
class NormalizedMessage:
    """A raw message with its normalized form and tokens computed once."""

    raw: str
    text: str
    tokens: Tuple[str, ...]

    @classmethod
    def of(cls, raw: Optional[str]) -> "NormalizedMessage":
        raw = raw or ""
        text = normalize(raw)
        return cls(raw=raw, text=text, tokens=tuple(tokenize(text)))

    @classmethod
    def coerce(cls, message: Union[str, "NormalizedMessage", None]) -> "NormalizedMessage":
        """Accept either a raw string or an already-normalized message."""
        if isinstance(message, NormalizedMessage):
            return message
        return cls.of(message)

    def contains_any(self, phrases: Iterable[str]) -> bool:
        return contains_any(self.text, phrases)

    def matches(self, keyword: str) -> bool:
        return match_keyword(self.text, self.tokens, keyword)

    def matches_any(self, keywords: Iterable[str]) -> bool:
        return any(match_keyword(self.text, self.tokens, kw) for kw in keywords)


def contains_any(normalized: str, phrases: Iterable[str]) -> bool:
    """Plain substring check of any phrase against normalized text."""
    return any(phrase in normalized for phrase in phrases)


def levenshtein_with_cap(a: str, b: str, cap: int) -> int:
    """Edit distance between *a* and *b*, or ``cap + 1`` as soon as it must exceed *cap*.

    Keeps two rows only.
    """
    if a == b:
        return 0
    la, lb = len(a), len(b)
    if abs(la - lb) > cap:
        return cap + 1

    prev = list(range(lb + 1))
    for i in range(1, la + 1):
        curr = [i] + [0] * lb
        row_min = i
        ai = a[i - 1]
        for j in range(1, lb + 1):
            cost = 0 if ai == b[j - 1] else 1
            curr[j] = min(prev[j] + 1, curr[j - 1] + 1, prev[j - 1] + cost)
            if curr[j] < row_min:
                row_min = curr[j]
        if row_min > cap:
            return cap + 1
        prev = curr
    return prev[lb]


def fuzzy_token_equals(a: str, b: str) -> bool:
    """Typo-tolerant token equality: exact under 6 chars, 1 edit up to 8, 2 edits from 9."""
    if a == b:
        return True
    length = max(len(a), len(b))
    if length < _FUZZY_MIN_LEN:
        return False
    cap = 2 if length >= _FUZZY_LONG_LEN else 1
    return levenshtein_with_cap(a, b, cap) <= cap


def fuzzy_phrase_match(text_tokens: Sequence[str], phrase_tokens: Sequence[str]) -> bool:
    """True when every phrase token is fuzzily present somewhere in the text."""
    if not phrase_tokens or not text_tokens:
        return False
    return all(
        any(fuzzy_token_equals(tt, pt) for tt in text_tokens)
        for pt in phrase_tokens
    )


def _expand_token(token: str) -> str:
    if token.endswith(("os", "as")) and len(token) - 2 >= _MIN_STEM:
        return re.escape(token[:-2]) + _SUFFIX_ALTERNATION
    if token.endswith(("o", "a")) and len(token) - 1 >= _MIN_STEM:
        return re.escape(token[:-1]) + _SUFFIX_ALTERNATION
    return re.escape(token)


@lru_cache(maxsize=4096)
def keyword_regex(keyword_normalized: str) -> Optional[Pattern[str]]:
    """Compile the gender/number tolerant pattern for a normalized keyword."""
    tokens = tokenize(keyword_normalized.strip())
    if not tokens:
        return None
    body = r"\s+".join(_expand_token(tok) for tok in tokens)
    return re.compile(r"\b" + body + r"\b", re.IGNORECASE)


def match_keyword(normalized: str, tokens: Sequence[str], keyword: str) -> bool:
    """Match *keyword* against already-normalized text and its tokens."""
    kw = normalize(keyword)
    if not kw:
        return False
    if kw in normalized:
        return True
    pattern = keyword_regex(kw)
    if pattern is not None and pattern.search(normalized):
        return True
    return fuzzy_phrase_match(tokens, tokenize(kw))
