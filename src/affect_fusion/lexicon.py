"""Keyword tables for lexical emotion and crisis detection.

Every table is a tuple of frozen dataclasses keyed by the closed
:class:`~affect_fusion.models.Emotion` and
:class:`~affect_fusion.models.CrisisLevel` vocabularies.
:data:`EMOTION_PATTERNS` is scanned in order, and that order breaks ties
between equally scored emotions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

from .models import CrisisLevel, Emotion


@dataclass(frozen=True)
class EmotionPattern:
    """Keyword set, base intensity and PAD triple for one emotion."""

    emotion: Emotion
    keywords: tuple[str, ...]
    base_intensity: float
    pleasure: float
    arousal: float
    dominance: float


@dataclass(frozen=True)
class CrisisCategory:
    """A family of distress phrases and the crisis level a hit implies."""

    name: str
    keywords: tuple[str, ...]
    weight: float
    level: CrisisLevel


# ---------------------------------------------------------------------------
# Emotion table (registration order is the tie-break order)
# ---------------------------------------------------------------------------

EMOTION_PATTERNS: tuple[EmotionPattern, ...] = (
    EmotionPattern(
        Emotion.JOY,
        ("happy", "joy", "excited", "thrilled", "amazing", "wonderful",
         "fantastic", "great", "love", "blessed", "grateful"),
        base_intensity=0.8, pleasure=0.9, arousal=0.7, dominance=0.6,
    ),
    EmotionPattern(
        Emotion.SADNESS,
        ("sad", "depressed", "down", "lonely", "hurt", "crying", "empty",
         "hopeless", "miserable", "grief", "heartbroken"),
        base_intensity=0.8, pleasure=-0.8, arousal=0.2, dominance=-0.3,
    ),
    EmotionPattern(
        Emotion.ANXIETY,
        ("anxious", "worried", "nervous", "panic", "stressed", "overwhelmed",
         "uneasy", "tense", "restless"),
        base_intensity=0.75, pleasure=-0.6, arousal=0.8, dominance=-0.4,
    ),
    EmotionPattern(
        Emotion.ANGER,
        ("angry", "mad", "furious", "hate", "annoyed", "frustrated", "rage",
         "upset", "livid", "enraged"),
        base_intensity=0.8, pleasure=-0.4, arousal=0.9, dominance=0.2,
    ),
    EmotionPattern(
        Emotion.FEAR,
        ("afraid", "scared", "fear", "terrified", "horrified", "petrified",
         "dread", "terror"),
        base_intensity=0.85, pleasure=-0.9, arousal=0.9, dominance=-0.8,
    ),
    EmotionPattern(
        Emotion.SURPRISE,
        ("surprised", "shocked", "amazed", "astonished", "stunned", "wow",
         "unexpected"),
        base_intensity=0.7, pleasure=0.3, arousal=0.8, dominance=0.1,
    ),
    EmotionPattern(
        Emotion.DISGUST,
        ("disgusted", "revolted", "sickened", "gross", "nasty", "repulsive"),
        base_intensity=0.7, pleasure=-0.9, arousal=0.6, dominance=-0.2,
    ),
    EmotionPattern(
        Emotion.CONTEMPT,
        ("contempt", "disdain", "scorn", "mock", "ridicule", "despise",
         "loathe"),
        base_intensity=0.65, pleasure=-0.7, arousal=0.4, dominance=0.3,
    ),
    EmotionPattern(
        Emotion.RELIEF,
        ("relieved", "thankful", "peaceful", "calm", "serene", "phew"),
        base_intensity=0.6, pleasure=0.7, arousal=0.2, dominance=0.4,
    ),
    EmotionPattern(
        Emotion.PRIDE,
        ("proud", "accomplished", "achieved", "successful", "confident",
         "triumphant"),
        base_intensity=0.75, pleasure=0.8, arousal=0.6, dominance=0.8,
    ),
    EmotionPattern(
        Emotion.SHAME,
        ("ashamed", "embarrassed", "guilty", "humiliated", "mortified"),
        base_intensity=0.75, pleasure=-0.6, arousal=0.5, dominance=-0.7,
    ),
    EmotionPattern(
        Emotion.BITTERSWEET,
        ("bittersweet", "mixed feelings", "conflicted", "torn",
         "complicated"),
        base_intensity=0.6, pleasure=0.1, arousal=0.5, dominance=0.0,
    ),
)

NEUTRAL_PAD: tuple[float, float, float] = (0.0, 0.5, 0.5)
NEUTRAL_INTENSITY = 0.5


# ---------------------------------------------------------------------------
# Crisis phrases
# ---------------------------------------------------------------------------

# Any hit forces a critical crisis level.
CRISIS_PHRASES: tuple[str, ...] = (
    "kill myself",
    "want to die",
    "end it all",
    "suicide",
    "suicidal",
    "hurt myself",
    "no reason to live",
    "end my life",
    "take my life",
    "better off dead",
    "don't want to live",
    "tired of living",
)

CRISIS_CATEGORIES: tuple[CrisisCategory, ...] = (
    CrisisCategory(
        "self_harm",
        ("cut myself", "self harm", "self-harm", "self injury", "burn myself",
         "hit myself", "bang my head"),
        weight=0.8, level=CrisisLevel.HIGH,
    ),
    CrisisCategory(
        "hopelessness",
        ("hopeless", "helpless", "worthless", "no hope", "nothing matters",
         "pointless", "no future", "no way out", "can't go on",
         "can't fix this"),
        weight=0.7, level=CrisisLevel.MEDIUM,
    ),
    CrisisCategory(
        "acute_distress",
        ("panic attack", "anxiety attack", "can't breathe", "heart racing",
         "breaking down", "losing control", "freaking out",
         "mental breakdown", "nervous breakdown"),
        weight=0.7, level=CrisisLevel.MEDIUM,
    ),
    CrisisCategory(
        "isolation",
        ("alone", "lonely", "no friends", "no one cares", "no one understands",
         "isolated", "abandoned", "no one to talk to"),
        weight=0.6, level=CrisisLevel.LOW,
    ),
    CrisisCategory(
        "substance_abuse",
        ("drunk", "drugs", "alcohol", "overdose", "overdosed", "substance",
         "pills", "drinking too much", "getting high"),
        weight=0.6, level=CrisisLevel.MEDIUM,
    ),
    # Bare anger words stay in the ANGER pattern, not here.
    CrisisCategory(
        "violence",
        ("hurt someone", "kill someone", "attack someone", "violent",
         "revenge", "payback", "make them pay"),
        weight=0.8, level=CrisisLevel.HIGH,
    ),
)


# ---------------------------------------------------------------------------
# Modifiers
# ---------------------------------------------------------------------------

SARCASM_MARKERS: tuple[str, ...] = (
    "yeah right",
    "oh great",
    "like i care",
    "oh wonderful",
    "just what i needed",
    "sure you are",
    "whatever",
)

STRESS_WORDS: tuple[str, ...] = (
    "stressed", "overwhelmed", "anxious", "worried", "panic", "pressure",
)
CALM_WORDS: tuple[str, ...] = (
    "calm", "peaceful", "relaxed", "serene", "tranquil",
)
UNCERTAIN_WORDS: tuple[str, ...] = (
    "maybe", "perhaps", "unsure", "doubt", "confused", "uncertain",
)
CERTAIN_WORDS: tuple[str, ...] = (
    "know", "sure", "certain", "definitely", "absolutely",
)

STRESS_STEP = 0.2
CALM_STEP = 0.15
CONFIDENCE_STEP = 0.1


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------


def normalize(text: str) -> str:
    """Lowercase *text* and fold typographic apostrophes to ASCII."""
    return text.lower().replace("’", "'").replace("‘", "'")


@lru_cache(maxsize=None)
def _phrase_regex(phrase: str) -> re.Pattern[str]:
    return re.compile(r"(?<![\w'])" + re.escape(phrase) + r"(?![\w'])")


def contains(text: str, phrase: str) -> bool:
    """True when *phrase* occurs in normalized *text* on word boundaries."""
    return _phrase_regex(phrase).search(text) is not None


def matches(text: str, phrases: tuple[str, ...]) -> list[str]:
    """Return the phrases that occur in normalized *text*, in table order."""
    return [p for p in phrases if contains(text, p)]
