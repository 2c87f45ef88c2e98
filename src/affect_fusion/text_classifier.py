"""LexicalEmotionClassifier -- emotion and crisis cues from transcript text.

Keyword-fraction scoring over the tables in :mod:`affect_fusion.lexicon`:
for every emotion the candidate intensity is ``base_intensity * matched /
len(keywords)`` and the highest candidate wins. A crisis phrase scan runs
independently and overrides the label and crisis level when it hits.
"""

from __future__ import annotations

from dataclasses import dataclass

from .exceptions import InputError
from .lexicon import (
    CALM_STEP,
    CALM_WORDS,
    CERTAIN_WORDS,
    CONFIDENCE_STEP,
    CRISIS_CATEGORIES,
    CRISIS_PHRASES,
    EMOTION_PATTERNS,
    NEUTRAL_INTENSITY,
    NEUTRAL_PAD,
    SARCASM_MARKERS,
    STRESS_STEP,
    STRESS_WORDS,
    UNCERTAIN_WORDS,
    EmotionPattern,
    matches,
    normalize,
)
from .models import CrisisLevel, Emotion, EmotionalState


@dataclass(frozen=True)
class TextCrisisScan:
    """Crisis cues found in one transcript.

    ``level`` is ``critical`` when any crisis phrase matched, otherwise the
    highest level among matched categories, otherwise ``none``.
    """

    level: CrisisLevel = CrisisLevel.NONE
    phrases: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    risk: float = 0.0

    @property
    def is_critical(self) -> bool:
        return self.level is CrisisLevel.CRITICAL


@dataclass(frozen=True)
class TextAnalysis:
    """Output of :meth:`LexicalEmotionClassifier.classify`."""

    state: EmotionalState
    scan: TextCrisisScan
    sarcasm_markers: tuple[str, ...] = ()


def scan_crisis(normalized: str) -> TextCrisisScan:
    """Scan already-normalized text for crisis phrases and categories."""
    phrases = tuple(matches(normalized, CRISIS_PHRASES))
    level = CrisisLevel.CRITICAL if phrases else CrisisLevel.NONE
    risk = 1.0 if phrases else 0.0

    categories: list[str] = []
    for category in CRISIS_CATEGORIES:
        hits = matches(normalized, category.keywords)
        if not hits:
            continue
        categories.append(category.name)
        level = max(level, category.level)
        risk = max(risk, min(1.0, category.weight * (0.5 + 0.5 * len(hits) / len(category.keywords))))

    return TextCrisisScan(level=level, phrases=phrases, categories=tuple(categories), risk=risk)


class LexicalEmotionClassifier:
    """Rule-based transcript classifier.

    Ties between equally scored emotions go to the one registered first
    in :data:`~affect_fusion.lexicon.EMOTION_PATTERNS`.

    Usage::

        classifier = LexicalEmotionClassifier()
        analysis = classifier.classify("I am so happy today!")
        analysis.state.primary_emotion  # Emotion.JOY
    """

    def __init__(self, patterns: tuple[EmotionPattern, ...] = EMOTION_PATTERNS) -> None:
        self.patterns = patterns

    def classify(self, text: str) -> TextAnalysis:
        """Classify *text*.

        Blank text yields the neutral state and an empty crisis scan.

        Raises
        ------
        InputError
            If *text* is not a string.
        """
        if not isinstance(text, str):
            raise InputError(f"Transcript must be a string, got {type(text).__name__}")

        norm = normalize(text)
        ranked = self._rank(norm)
        scan = scan_crisis(norm)
        sarcasm = tuple(matches(norm, SARCASM_MARKERS))

        if ranked:
            top, intensity = ranked[0]
            primary = top.emotion
            pleasure, arousal, dominance = top.pleasure, top.arousal, top.dominance
        else:
            primary = Emotion.NEUTRAL
            intensity = NEUTRAL_INTENSITY
            pleasure, arousal, dominance = NEUTRAL_PAD
        secondary = ranked[1][0].emotion if len(ranked) > 1 else Emotion.NEUTRAL

        if sarcasm:
            pleasure = -pleasure * 0.5
            arousal = arousal * 1.2

        stress = (
            0.5
            + STRESS_STEP * len(matches(norm, STRESS_WORDS))
            - CALM_STEP * len(matches(norm, CALM_WORDS))
        )
        confidence = (
            0.5
            + CONFIDENCE_STEP * len(matches(norm, CERTAIN_WORDS))
            - CONFIDENCE_STEP * len(matches(norm, UNCERTAIN_WORDS))
        )
        empathy = 0.5 + 0.4 * max(0.0, -pleasure)

        if scan.is_critical:
            # The lexical label is kept as the secondary emotion.
            if primary is not Emotion.NEUTRAL:
                secondary = primary
            primary = Emotion.CRISIS
            empathy = 1.0

        state = EmotionalState(
            pleasure=pleasure,
            arousal=arousal,
            dominance=dominance,
            confidence=confidence,
            stress=stress,
            empathy=empathy,
            primary_emotion=primary,
            secondary_emotion=secondary,
            emotional_intensity=intensity,
            crisis_level=scan.level,
            sarcasm_detected=bool(sarcasm),
        )
        return TextAnalysis(state=state.clamped(), scan=scan, sarcasm_markers=sarcasm)

    def _rank(self, norm: str) -> list[tuple[EmotionPattern, float]]:
        """Matched patterns ordered by candidate intensity, stable on ties."""
        scored = []
        for pattern in self.patterns:
            hits = len(matches(norm, pattern.keywords))
            if hits:
                scored.append((pattern, pattern.base_intensity * hits / len(pattern.keywords)))
        # sorted() is stable, so equal candidates keep registration order.
        return sorted(scored, key=lambda item: item[1], reverse=True)
