"""Core data structures for the classification and routing engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Dict, Optional, Tuple, Union

if TYPE_CHECKING:
    from aesthetica.orchestrator.facts import MessageFacts

QUICK_MODE = "quick"
DANGER_PSEUDO_SEVERITY = 4
_BOOL_STRINGS = {"true": True, "si": True, "sí": True, "yes": True, "1": True, "false": False, "no": False, "0": False}


class SessionDomain(str, Enum):
    """Persisted per-session topic hint."""
    UNKNOWN = "unknown"
    ESTHETIC = "esthetic"
    OFFTOPIC = "offtopic"

    @classmethod
    def parse(cls, value: Any) -> "SessionDomain":
        """Lenient read of a stored value; anything unrecognised is UNKNOWN."""
        try:
            return cls(str(value))
        except ValueError:
            return cls.UNKNOWN


class MaterialContext(str, Enum):
    CONSIDERING = "considering"
    ALREADY = "already"
    UNKNOWN = "unknown"

    @property
    def is_known(self) -> bool:
        return self is not MaterialContext.UNKNOWN


class Layer(str, Enum):
    """Pipeline layer that produced the reply."""
    DOMAIN_GATE = "domain_gate"
    TRIAGE_GUARD = "triage_guard"
    DEFINITION = "definition"
    COMPLICATION = "complication"
    MATERIAL = "material"
    BRAIN = "brain"
    GENERAL = "general"


# ── Route decision ──────────────────────────────────────────────────


class Route(str, Enum):
    DETERMINISTIC = "deterministic"
    BRAIN = "brain"
    GENERAL = "general"


class DeterministicReason(str, Enum):
    EMERGENCY = "emergency"
    DEFINITION = "definition"
    HIGH_RISK_MATERIAL = "high_risk_material"
    TRIAGE_COMPLICATION = "triage_complication"


class BrainReason(str, Enum):
    PLAN_DECISION = "plan_decision"
    EDUCATIONAL_BROAD = "educational_broad"
    DEFINITION_UNKNOWN = "definition_unknown"
    GENERAL_QUESTION = "general_question"


class GeneralReason(str, Enum):
    SMALL_TALK = "small_talk"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class DeterministicRoute:
    reason: DeterministicReason
    route: ClassVar[Route] = Route.DETERMINISTIC


@dataclass(frozen=True)
class BrainRoute:
    reason: BrainReason
    route: ClassVar[Route] = Route.BRAIN


@dataclass(frozen=True)
class GeneralRoute:
    reason: GeneralReason
    route: ClassVar[Route] = Route.GENERAL


RouteDecision = Union[DeterministicRoute, BrainRoute, GeneralRoute]


def route_label(decision: RouteDecision) -> str:
    """``"<route>/<reason>"``, e.g. ``"brain/plan_decision"``."""
    return f"{decision.route.value}/{decision.reason.value}"


# ── Quality events ──────────────────────────────────────────────────


class QualityEventKind(str, Enum):
    COMPLICATION = "complication"
    MATERIAL = "material"
    DANGER_SIGNAL = "danger_signal"
    NONE = "none"


@dataclass(frozen=True)
class ComplicationEvent:
    id: str
    severity: int
    urgent: bool
    kind: ClassVar[QualityEventKind] = QualityEventKind.COMPLICATION

    def event_key(self) -> str:
        return f"complication:{self.id}:sev{self.severity}:urgent{int(self.urgent)}"


@dataclass(frozen=True)
class MaterialEvent:
    id: str
    risk: int
    blacklisted: bool
    urgent: bool
    context: MaterialContext
    danger_signals: Tuple[str, ...] = ()
    kind: ClassVar[QualityEventKind] = QualityEventKind.MATERIAL

    @property
    def is_high_risk(self) -> bool:
        return self.blacklisted or self.risk >= 4

    def event_key(self) -> str:
        return (
            f"material:{self.id}:risk{self.risk}:blk{int(self.blacklisted)}"
            f":urgent{int(self.urgent)}:ctx{self.context.value}"
        )


@dataclass(frozen=True)
class DangerSignalEvent:
    danger_signals: Tuple[str, ...]
    urgent: bool = True
    pseudo_severity: int = DANGER_PSEUDO_SEVERITY
    kind: ClassVar[QualityEventKind] = QualityEventKind.DANGER_SIGNAL

    def event_key(self) -> str:
        return "danger:" + "|".join(self.danger_signals)


@dataclass(frozen=True)
class NoEvent:
    reason: str  # "small_talk" | "general"
    kind: ClassVar[QualityEventKind] = QualityEventKind.NONE


QualityEvent = Union[ComplicationEvent, MaterialEvent, DangerSignalEvent, NoEvent]


# ── Request-side types ──────────────────────────────────────────────


@dataclass(frozen=True)
class ProcedureContext:
    likely_post_procedure: bool = False
    has_injection_verb: bool = False
    has_energy_device_hint: bool = False


@dataclass(frozen=True)
class UserProfile:
    """Profile collected by the client. Every field is optional."""

    name: Optional[str] = None
    age_range: Optional[str] = None
    country: Optional[str] = None
    area: Optional[str] = None
    interests: Tuple[str, ...] = ()
    previous_procedures: Tuple[str, ...] = ()
    is_pregnant: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["UserProfile"]:
        """Accepts snake_case or camelCase keys; returns None for an empty payload."""
        if not data:
            return None

        def _pick(*keys: str) -> Any:
            for key in keys:
                if data.get(key) is not None:
                    return data[key]
            return None

        def _str(*keys: str) -> Optional[str]:
            value = _pick(*keys)
            if value is None:
                return None
            return str(value).strip() or None

        def _list(*keys: str) -> Tuple[str, ...]:
            value = _pick(*keys)
            if not isinstance(value, (list, tuple)):
                return ()
            return tuple(str(v) for v in value if v)

        def _bool(*keys: str) -> Optional[bool]:
            value = _pick(*keys)
            if isinstance(value, bool):
                return value
            if isinstance(value, str):
                return _BOOL_STRINGS.get(value.strip().lower())
            return None

        return cls(
            name=_str("name"),
            age_range=_str("age_range", "ageRange"),
            country=_str("country"),
            area=_str("area"),
            interests=_list("interests"),
            previous_procedures=_list("previous_procedures", "previousProcedures"),
            is_pregnant=_bool("is_pregnant", "isPregnant"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "ageRange": self.age_range,
            "country": self.country,
            "area": self.area,
            "interests": list(self.interests),
            "previousProcedures": list(self.previous_procedures),
            "isPregnant": self.is_pregnant,
        }


@dataclass(frozen=True)
class ChatRequest:
    """A single inbound message with its optional mode, profile and session id."""

    message: str
    mode: Optional[str] = None
    profile: Optional[UserProfile] = None
    session_id: Optional[str] = None

    @property
    def quick(self) -> bool:
        return self.mode == QUICK_MODE

    @property
    def effective_profile(self) -> Optional[UserProfile]:
        """Quick mode ignores the profile entirely."""
        return None if self.quick else self.profile

    @property
    def country(self) -> Optional[str]:
        profile = self.effective_profile
        return profile.country if profile else None


# ── Config ──────────────────────────────────────────────────────────


@dataclass
class AssistantConfig:
    """Tunable orchestrator behaviour."""

    bot_name: str = "DrBeautyBot"
    max_materials: int = 3
    """How many materials a single message may report."""

    log_cooldown_seconds: float = 15.0
    """Identical quality events inside this window only refresh the timestamp."""

    preview_chars: int = 220
    default_emergency_country: Optional[str] = None
    """Country used for the emergency line when the profile has none. None = generic line."""

    brain_timeout_seconds: Optional[float] = 45.0
    """Timeout for the generative call. None = no timeout."""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bot_name": self.bot_name,
            "max_materials": self.max_materials,
            "log_cooldown_seconds": self.log_cooldown_seconds,
            "preview_chars": self.preview_chars,
            "default_emergency_country": self.default_emergency_country,
            "brain_timeout_seconds": self.brain_timeout_seconds,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]] = None) -> "AssistantConfig":
        """Load from a dict. Missing or invalid values use defaults."""
        if not data:
            return cls()
        defaults = cls()

        def _positive_int(key: str, default: int) -> int:
            try:
                value = int(data.get(key, default))
            except (TypeError, ValueError):
                return default
            return value if value > 0 else default

        def _nonnegative_float(key: str, default: float) -> float:
            try:
                value = float(data.get(key, default))
            except (TypeError, ValueError):
                return default
            return value if value >= 0 else default

        timeout = data.get("brain_timeout_seconds", defaults.brain_timeout_seconds)
        if timeout is not None:
            try:
                timeout = float(timeout)
            except (TypeError, ValueError):
                timeout = defaults.brain_timeout_seconds
        return cls(
            bot_name=str(data.get("bot_name") or defaults.bot_name),
            max_materials=_positive_int("max_materials", defaults.max_materials),
            log_cooldown_seconds=_nonnegative_float("log_cooldown_seconds", defaults.log_cooldown_seconds),
            preview_chars=_positive_int("preview_chars", defaults.preview_chars),
            default_emergency_country=data.get("default_emergency_country") or None,
            brain_timeout_seconds=timeout,
        )


# ── Results ─────────────────────────────────────────────────────────


@dataclass
class PipelineMetrics:
    """Timing for a single pipeline call."""

    total_ms: float = 0.0
    brain_ms: float = 0.0
    brain_called: bool = False
    brain_failure: Optional[str] = None


@dataclass
class PipelineResult:
    """Final output of the orchestrator for one message.

    ``route`` is None only when the domain gate answered, since the gate
    runs before any routing decision is made.
    """

    reply: str
    layer: Layer
    route: Optional[RouteDecision] = None
    facts: Optional["MessageFacts"] = None
    quality_event: Optional[QualityEvent] = None
    metrics: PipelineMetrics = field(default_factory=PipelineMetrics)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def route_label(self) -> Optional[str]:
        return route_label(self.route) if self.route is not None else None
