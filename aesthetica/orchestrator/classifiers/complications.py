"""Complication triage matching: highest severity wins."""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple, Union

from aesthetica.knowledge.models import ComplicationRecord
from aesthetica.nlp import NormalizedMessage, normalize

_MIN_KEYWORD_CHARS = 3


class ComplicationMatcher:
    """Return the matching record with the highest severity.

    Ties keep the first record in table order (strictly-greater comparison).
    """

    def __init__(self, complications: Sequence[ComplicationRecord]) -> None:
        self._compiled: List[Tuple[ComplicationRecord, Tuple[str, ...]]] = []
        for record in complications:
            keywords = tuple(
                norm for norm in (normalize(k) for k in record.keywords)
                if len(norm) >= _MIN_KEYWORD_CHARS
            )
            if keywords:
                self._compiled.append((record, keywords))

    def find_highest_severity(
        self, message: Union[str, NormalizedMessage]
    ) -> Optional[ComplicationRecord]:
        msg = NormalizedMessage.coerce(message)
        best: Optional[ComplicationRecord] = None
        for record, keywords in self._compiled:
            if best is not None and record.severity <= best.severity:
                continue
            if msg.matches_any(keywords):
                best = record
        return best
