"""Weighted fusion of voice- and text-derived emotional states."""

from __future__ import annotations

from dataclasses import replace

from .config import FusionConfig
from .exceptions import InputError
from .models import CrisisLevel, Emotion, EmotionalState

# Continuous fields blended by the modality weights.
BLENDED_FIELDS: tuple[str, ...] = (
    "pleasure",
    "arousal",
    "dominance",
    "confidence",
    "stress",
    "engagement",
    "trust",
    "emotional_intensity",
    "conversational_flow",
)


class FusionEngine:
    """Combine per-modality :class:`EmotionalState` estimates for one turn.

    Voice is authoritative for real-time safety signals (stability and
    crisis level); a critical text crisis hit still forces ``critical``.
    """

    def __init__(self, voice_weight: float = 0.7, text_weight: float = 0.3) -> None:
        self.voice_weight = voice_weight
        self.text_weight = text_weight

    @classmethod
    def from_config(cls, config: FusionConfig) -> FusionEngine:
        return cls(voice_weight=config.voice_weight, text_weight=config.text_weight)

    def fuse(
        self,
        voice: EmotionalState | None,
        text: EmotionalState | None,
    ) -> EmotionalState:
        """Return the fused state.

        A single present modality is returned unchanged (clamped).

        Raises
        ------
        InputError
            If both modalities are absent.
        """
        if voice is None and text is None:
            raise InputError("At least one of voice or text state is required")
        if text is None:
            return voice.clamped()
        if voice is None:
            return text.clamped()

        blended = {
            name: self.voice_weight * getattr(voice, name)
            + self.text_weight * getattr(text, name)
            for name in BLENDED_FIELDS
        }

        text_forces_crisis = text.crisis_level is CrisisLevel.CRITICAL
        if voice.crisis_level is CrisisLevel.CRITICAL or text_forces_crisis:
            primary = Emotion.CRISIS
        else:
            primary = text.primary_emotion
        crisis_level = CrisisLevel.CRITICAL if text_forces_crisis else voice.crisis_level

        fused = replace(
            voice,
            **blended,
            empathy=text.empathy,
            primary_emotion=primary,
            secondary_emotion=text.secondary_emotion,
            emotional_stability=voice.emotional_stability,
            crisis_level=crisis_level,
            sarcasm_detected=text.sarcasm_detected,
        )
        return fused.clamped()
