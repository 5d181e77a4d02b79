"""Abstract base layer for the response pipeline."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from aesthetica.orchestrator.classifiers.definitions import DefinitionMatch
from aesthetica.orchestrator.facts import MessageFacts
from aesthetica.orchestrator.types import ChatRequest, Layer, RouteDecision, SessionDomain


@dataclass
class TurnContext:
    """Everything a layer may read for one message.

    ``carried_signals`` is written by the triage guard when it declines to
    escalate a definition-only lookup; the definition layer reads it.
    """

    request: ChatRequest
    facts: MessageFacts
    session_domain: SessionDomain
    emergency_line: str
    bot_name: str
    definition_match: Optional[DefinitionMatch] = None
    carried_signals: List[str] = field(default_factory=list)

    @property
    def quick(self) -> bool:
        return self.request.quick


@dataclass(frozen=True)
class LayerReply:
    """A terminal answer from one layer.

    ``route`` is None for the domain gate, whose replies are not logged.
    """

    reply: str
    route: Optional[RouteDecision]


class BaseLayer(ABC):
    """Every pipeline layer implements ``handle()``; None means fall through."""

    layer: Layer

    @abstractmethod
    async def handle(self, ctx: TurnContext) -> Optional[LayerReply]:
        ...
