"""Data models for the emotional-state fusion pipeline.

Closed label sets are ``str`` enums so they serialize as plain strings.
Everything that crosses a component boundary is an immutable dataclass;
per-turn derivations build new instances instead of mutating old ones.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, fields, replace
from enum import Enum
from typing import Any, Literal

# ---------------------------------------------------------------------------
# Label vocabularies
# ---------------------------------------------------------------------------


class CrisisLevel(str, Enum):
    """Discrete crisis risk tier, ordered from ``none`` to ``critical``."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _CRISIS_ORDER.index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, CrisisLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, CrisisLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, CrisisLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, CrisisLevel):
            return NotImplemented
        return self.rank >= other.rank


_CRISIS_ORDER: tuple[CrisisLevel, ...] = (
    CrisisLevel.NONE,
    CrisisLevel.LOW,
    CrisisLevel.MEDIUM,
    CrisisLevel.HIGH,
    CrisisLevel.CRITICAL,
)


class Emotion(str, Enum):
    """Discrete emotion labels produced by the classifiers."""

    NEUTRAL = "neutral"
    JOY = "joy"
    CONTENTMENT = "contentment"
    SADNESS = "sadness"
    ANXIETY = "anxiety"
    ANGER = "anger"
    SURPRISE = "surprise"
    DISGUST = "disgust"
    CONTEMPT = "contempt"
    FEAR = "fear"
    RELIEF = "relief"
    PRIDE = "pride"
    SHAME = "shame"
    BITTERSWEET = "bittersweet"
    EXCITED = "excited"
    CRISIS = "crisis"


class StyleTag(str, Enum):
    """Speaking style hint handed to the speech synthesizer."""

    COMFORTING = "comforting"
    CALM = "calm"
    GENTLE = "gentle"
    EXCITED = "excited"
    HAPPY = "happy"
    WARM = "warm"
    NEUTRAL = "neutral"
    SARCASTIC = "sarcastic"
    CONTEMPLATIVE = "contemplative"


Trend = Literal["positive", "negative", "neutral"]


# ---------------------------------------------------------------------------
# Numeric helpers
# ---------------------------------------------------------------------------


def clamp(value: float, low: float, high: float) -> float:
    """Clamp *value* into ``[low, high]``; NaN collapses to *low*."""
    if math.isnan(value):
        return low
    return float(max(low, min(high, value)))


# Declared interval of every bounded ``EmotionalState`` field.
STATE_BOUNDS: dict[str, tuple[float, float]] = {
    "pleasure": (-1.0, 1.0),
    "arousal": (0.0, 1.0),
    "dominance": (-1.0, 1.0),
    "confidence": (0.0, 1.0),
    "stress": (0.0, 1.0),
    "empathy": (0.0, 1.0),
    "engagement": (0.0, 1.0),
    "trust": (0.0, 1.0),
    "emotional_intensity": (0.0, 1.0),
    "emotional_stability": (0.0, 1.0),
    "conversational_flow": (0.0, 1.0),
}


# ---------------------------------------------------------------------------
# Voice features
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProsodyFeatures:
    """Scalar acoustic features of one audio frame."""

    intonation: float
    pitch_variation: float
    rhythm: float
    tempo: float
    tremor: float
    clarity: float
    breathiness: float
    resonance: float
    stability: float
    stress_pattern: tuple[float, ...] = ()

    @classmethod
    def neutral(cls) -> ProsodyFeatures:
        """Feature set for silence or an empty frame."""
        return cls(
            intonation=0.0,
            pitch_variation=0.5,
            rhythm=0.5,
            tempo=0.5,
            tremor=0.0,
            clarity=0.5,
            breathiness=0.5,
            resonance=0.5,
            stability=1.0,
        )


@dataclass(frozen=True)
class CrisisIndicators:
    """Voice-level distress indicators, each in [0, 1]."""

    voice_stress: float = 0.0
    breath_irregularity: float = 0.0
    voice_tremor: float = 0.0
    pitch_instability: float = 0.0
    volume_inconsistency: float = 0.0

    def as_tuple(self) -> tuple[float, float, float, float, float]:
        return (
            self.voice_stress,
            self.breath_irregularity,
            self.voice_tremor,
            self.pitch_instability,
            self.volume_inconsistency,
        )

    def dominated_by(self, other: CrisisIndicators) -> bool:
        """True when every indicator here is ``<=`` the one in *other*."""
        return all(a <= b for a, b in zip(self.as_tuple(), other.as_tuple()))


@dataclass(frozen=True)
class VoiceAnalysis:
    """Everything the voice branch derives from one frame."""

    features: ProsodyFeatures
    indicators: CrisisIndicators
    score: int
    level: CrisisLevel


@dataclass(frozen=True)
class BehavioralIndicators:
    """Session-level patterns in the recent sequence of crisis readings.

    ``risk`` weights mood swings 0.3, agitation 0.25 and impulsivity 0.2.
    """

    rapid_mood_swings: float = 0.0
    agitation: float = 0.0
    impulsivity: float = 0.0
    risk: float = 0.0


# ---------------------------------------------------------------------------
# Emotional state
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EmotionalState:
    """Continuous PAD-plus affect estimate with discrete labels.

    Bounded fields are listed in :data:`STATE_BOUNDS`; components always
    hand out :meth:`clamped` instances.
    """

    pleasure: float = 0.0
    arousal: float = 0.5
    dominance: float = 0.5
    confidence: float = 0.5
    stress: float = 0.5
    empathy: float = 0.5
    engagement: float = 0.5
    trust: float = 0.5
    primary_emotion: Emotion = Emotion.NEUTRAL
    secondary_emotion: Emotion = Emotion.NEUTRAL
    emotional_intensity: float = 0.5
    emotional_stability: float = 0.5
    conversational_flow: float = 0.5
    crisis_level: CrisisLevel = CrisisLevel.NONE
    sarcasm_detected: bool = False

    @classmethod
    def neutral(cls) -> EmotionalState:
        return cls()

    def clamped(self) -> EmotionalState:
        """Return a copy with every bounded field clamped to its interval."""
        return replace(
            self,
            **{
                name: clamp(float(getattr(self, name)), low, high)
                for name, (low, high) in STATE_BOUNDS.items()
            },
        )

    def in_bounds(self) -> bool:
        for name, (low, high) in STATE_BOUNDS.items():
            value = getattr(self, name)
            if math.isnan(value) or not low <= value <= high:
                return False
        return True

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            out[f.name] = value.value if isinstance(value, Enum) else value
        return out


# ---------------------------------------------------------------------------
# Session memory
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MemoryEntry:
    """One recorded turn: a state snapshot and when it was recorded."""

    timestamp: float
    state: EmotionalState


@dataclass(frozen=True)
class EmotionalBaseline:
    """Slow-moving average of a session's affect."""

    pleasure: float = 0.0
    arousal: float = 0.5
    dominance: float = 0.5
    intensity: float = 0.5


@dataclass(frozen=True)
class MemoryContext:
    """Aggregates over a session's retention window."""

    session_id: str
    trend: Trend
    dominant_emotion: Emotion
    stability: float
    sample_count: int
    baseline: EmotionalBaseline = field(default_factory=EmotionalBaseline)
    drift: float = 0.0


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CrisisTransitionEvent:
    """A committed crisis level change for one session."""

    session_id: str
    from_level: CrisisLevel
    to_level: CrisisLevel
    timestamp: float
    reason: Literal["escalation", "deescalation", "acknowledged"] = "escalation"

    kind = "crisis_transition"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "session_id": self.session_id,
            "from": self.from_level.value,
            "to": self.to_level.value,
            "timestamp": self.timestamp,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class TurnTelemetry:
    """Per-turn pipeline telemetry."""

    session_id: str
    timestamp: float
    latency_ms: float
    modalities: tuple[str, ...]
    degraded: bool
    faults: tuple[str, ...]
    crisis_level: CrisisLevel
    primary_emotion: Emotion
    text_risk: float = 0.0
    behavioral_risk: float = 0.0

    kind = "turn_telemetry"

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind
        data["modalities"] = list(self.modalities)
        data["faults"] = list(self.faults)
        data["crisis_level"] = self.crisis_level.value
        data["primary_emotion"] = self.primary_emotion.value
        return data


# ---------------------------------------------------------------------------
# Outputs for external collaborators
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VoiceRenderParams:
    """Synthesis parameters; multipliers are relative to the voice default."""

    voice: str
    speed: float
    pitch: float
    volume: float
    style_tag: StyleTag

    def to_dict(self) -> dict[str, Any]:
        return {
            "voice": self.voice,
            "speed": self.speed,
            "pitch": self.pitch,
            "volume": self.volume,
            "style_tag": self.style_tag.value,
        }


@dataclass(frozen=True)
class ResponseStyle:
    """Response-shaping hints for the text-generation collaborator."""

    tone: str
    length: str
    style: str
    urgency: str
    recommended_action: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "tone": self.tone,
            "length": self.length,
            "style": self.style,
            "urgency": self.urgency,
            "recommended_action": self.recommended_action,
        }


@dataclass(frozen=True)
class InteractionResult:
    """Everything one conversational turn hands back to the caller."""

    emotional_state: EmotionalState
    crisis_level: CrisisLevel
    voice_params: VoiceRenderParams
    response_style: ResponseStyle
    voice_analysis: VoiceAnalysis | None = None
    behavioral: BehavioralIndicators = field(default_factory=BehavioralIndicators)
    degraded: bool = False
    faults: tuple[str, ...] = ()
    latency_ms: float = 0.0
