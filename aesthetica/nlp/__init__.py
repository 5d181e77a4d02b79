"""Lexical helpers shared by every classifier: normalization, tokens, keyword matching."""
from aesthetica.nlp.text import (
    NormalizedMessage,
    contains_any,
    fuzzy_phrase_match,
    fuzzy_token_equals,
    keyword_regex,
    levenshtein_with_cap,
    match_keyword,
    normalize,
    tokenize,
)

__all__ = [
    "NormalizedMessage",
    "contains_any",
    "fuzzy_phrase_match",
    "fuzzy_token_equals",
    "keyword_regex",
    "levenshtein_with_cap",
    "match_keyword",
    "normalize",
    "tokenize",
]
