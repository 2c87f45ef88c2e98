"""Emotion classification from voice analysis.

Provides a protocol for voice emotion classifiers and a rule-based
baseline that maps prosodic features and crisis indicators to a
continuous affect estimate plus a discrete label.
"""

from __future__ import annotations

from typing import Protocol

from .models import CrisisLevel, Emotion, EmotionalState, VoiceAnalysis


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class VoiceEmotionClassifier(Protocol):
    """Protocol for voice emotion classifiers."""

    def classify(self, analysis: VoiceAnalysis) -> EmotionalState:
        """Estimate the speaker's emotional state from one analyzed frame.

        Parameters
        ----------
        analysis:
            Features, crisis indicators and crisis level of the frame.

        Returns
        -------
        EmotionalState
            A clamped state whose ``crisis_level`` equals ``analysis.level``.
        """
        ...


# ---------------------------------------------------------------------------
# Rule-based baseline
# ---------------------------------------------------------------------------


class RuleBasedVoiceClassifier:
    """Linear feature-to-affect mapping with threshold labelling."""

    def classify(self, analysis: VoiceAnalysis) -> EmotionalState:
        f = analysis.features
        ind = analysis.indicators
        stress = ind.voice_stress

        pleasure = 0.5 + 0.3 * f.intonation - 0.4 * stress
        arousal = 0.5 + 0.4 * f.tempo + 0.3 * stress
        state = EmotionalState(
            pleasure=pleasure,
            arousal=arousal,
            dominance=0.5 + 0.3 * f.clarity - 0.4 * ind.voice_tremor,
            confidence=0.5 + 0.4 * f.stability - 0.3 * ind.pitch_instability,
            stress=stress,
            engagement=0.5 + 0.3 * f.rhythm,
            trust=0.5 + 0.3 * f.stability,
            primary_emotion=self._label(analysis.level, stress, pleasure, arousal),
            emotional_intensity=max(0.5, (stress + arousal) / 2.0),
            emotional_stability=f.stability,
            conversational_flow=0.5 + 0.2 * f.rhythm,
            crisis_level=analysis.level,
        )
        return state.clamped()

    @staticmethod
    def _label(level: CrisisLevel, stress: float, pleasure: float, arousal: float) -> Emotion:
        if level is CrisisLevel.CRITICAL:
            return Emotion.CRISIS
        if stress > 0.7:
            return Emotion.ANXIETY
        if pleasure > 0.7:
            return Emotion.JOY
        if pleasure < 0.3:
            return Emotion.SADNESS
        if arousal > 0.7:
            return Emotion.EXCITED
        return Emotion.NEUTRAL
