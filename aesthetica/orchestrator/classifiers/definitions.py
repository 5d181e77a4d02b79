"""Definition lookup: pick the most specific matching term across all records."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from aesthetica.knowledge.models import DefinitionRecord
from aesthetica.nlp import NormalizedMessage, normalize, tokenize
from aesthetica.orchestrator.classifiers.intent import definition_query_tail

_MIN_CANDIDATE_CHARS = 3
_PUNCTUATION_RE = re.compile(r"[¿?¡!.:,;()\"'“”]")


@dataclass(frozen=True)
class _Candidate:
    raw: str
    norm: str
    score: int
    length: int


@dataclass(frozen=True)
class DefinitionMatch:
    record: DefinitionRecord
    score: int
    matched_phrase: str


def _candidates(record: DefinitionRecord) -> Tuple[_Candidate, ...]:
    out: List[_Candidate] = []
    for raw in (record.term,) + record.keywords:
        raw = (raw or "").strip()
        norm = normalize(raw)
        if len(norm) < _MIN_CANDIDATE_CHARS:
            continue
        # more tokens = more specific phrase
        out.append(_Candidate(raw=raw, norm=norm, score=max(1, len(tokenize(norm))), length=len(norm)))
    return tuple(out)


def _beats(candidate: _Candidate, best: Optional[_Candidate]) -> bool:
    if best is None:
        return True
    return (candidate.score, candidate.length) > (best.score, best.length)


class DefinitionMatcher:
    """Best (score, then phrase length) match; earlier records win exact ties."""

    def __init__(self, definitions: Sequence[DefinitionRecord]) -> None:
        self._compiled = [(d, _candidates(d)) for d in definitions]

    def find(self, message: Union[str, NormalizedMessage]) -> Optional[DefinitionMatch]:
        msg = NormalizedMessage.coerce(message)
        best: Optional[Tuple[DefinitionRecord, _Candidate]] = None
        for record, candidates in self._compiled:
            local: Optional[_Candidate] = None
            for cand in candidates:
                if _beats(cand, local) and msg.matches(cand.norm):
                    local = cand
            if local is not None and _beats(local, best[1] if best else None):
                best = (record, local)
        if best is None:
            return None
        record, cand = best
        return DefinitionMatch(record=record, score=cand.score, matched_phrase=cand.raw)


def extract_likely_term(message: Union[str, NormalizedMessage]) -> Optional[str]:
    """Best-effort literal term for lookups that have no table entry.

    One or two tokens: the raw text without common punctuation. Otherwise the
    words following an explicit "qué es / definición de" pattern.
    """
    msg = NormalizedMessage.coerce(message)
    raw = msg.raw.strip()
    if not raw:
        return None
    if 0 < len(msg.tokens) <= 2:
        cleaned = _PUNCTUATION_RE.sub("", raw).strip()
        return cleaned or None
    return definition_query_tail(msg)
