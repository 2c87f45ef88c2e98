"""Map an emotional state to speech synthesis parameters.

Rules are tried in order and the first match wins. Every multiplier is
clamped to [0.5, 2.0] before it leaves the mapper.
"""

from __future__ import annotations

from dataclasses import dataclass

from .config import FusionConfig
from .models import CrisisLevel, Emotion, EmotionalState, StyleTag, VoiceRenderParams, clamp

MIN_MULTIPLIER = 0.5
MAX_MULTIPLIER = 2.0


@dataclass(frozen=True)
class VoiceSetting:
    speed: float
    pitch: float
    volume: float
    style: StyleTag


CRISIS_SETTING = VoiceSetting(0.75, 0.9, 0.85, StyleTag.COMFORTING)
STRESSED_SETTING = VoiceSetting(0.85, 0.92, 0.9, StyleTag.CALM)
NEGATIVE_SETTING = VoiceSetting(0.9, 0.95, 0.9, StyleTag.COMFORTING)
EXCITED_SETTING = VoiceSetting(1.1, 1.1, 1.05, StyleTag.EXCITED)
INTENSE_SETTING = VoiceSetting(0.95, 0.95, 0.95, StyleTag.CALM)
SARCASM_SETTING = VoiceSetting(0.9, 1.1, 0.95, StyleTag.SARCASTIC)
DEFAULT_SETTING = VoiceSetting(1.0, 1.0, 1.0, StyleTag.WARM)

EMOTION_SETTINGS: dict[Emotion, VoiceSetting] = {
    Emotion.JOY: VoiceSetting(1.05, 1.1, 1.05, StyleTag.HAPPY),
    Emotion.EXCITED: VoiceSetting(1.05, 1.1, 1.05, StyleTag.EXCITED),
    Emotion.CONTENTMENT: VoiceSetting(1.0, 1.0, 1.0, StyleTag.WARM),
    Emotion.SADNESS: VoiceSetting(0.9, 0.9, 0.9, StyleTag.GENTLE),
    Emotion.ANXIETY: VoiceSetting(0.9, 0.95, 0.9, StyleTag.CALM),
    Emotion.ANGER: VoiceSetting(0.95, 0.95, 0.95, StyleTag.CALM),
    Emotion.SURPRISE: VoiceSetting(1.1, 1.2, 1.1, StyleTag.EXCITED),
    Emotion.DISGUST: VoiceSetting(0.85, 0.9, 0.85, StyleTag.NEUTRAL),
    Emotion.CONTEMPT: VoiceSetting(0.9, 0.95, 0.9, StyleTag.CALM),
    Emotion.FEAR: VoiceSetting(0.9, 0.9, 0.85, StyleTag.COMFORTING),
    Emotion.RELIEF: VoiceSetting(0.95, 1.0, 0.95, StyleTag.WARM),
    Emotion.PRIDE: VoiceSetting(1.0, 1.1, 1.05, StyleTag.HAPPY),
    Emotion.SHAME: VoiceSetting(0.85, 0.85, 0.8, StyleTag.GENTLE),
    Emotion.BITTERSWEET: VoiceSetting(0.9, 0.95, 0.9, StyleTag.CONTEMPLATIVE),
    Emotion.CRISIS: CRISIS_SETTING,
}


def _is_blended(state: EmotionalState) -> bool:
    return (
        state.secondary_emotion is not Emotion.NEUTRAL
        and state.secondary_emotion is not state.primary_emotion
    )


class VoiceParameterMapper:
    """Pure ``EmotionalState -> VoiceRenderParams`` rule table."""

    def __init__(self, voice_id: str = "nova") -> None:
        self.voice_id = voice_id

    @classmethod
    def from_config(cls, config: FusionConfig) -> VoiceParameterMapper:
        return cls(voice_id=config.voice_id)

    def map(self, state: EmotionalState) -> VoiceRenderParams:
        setting = self.select(state)
        return VoiceRenderParams(
            voice=self.voice_id,
            speed=clamp(setting.speed, MIN_MULTIPLIER, MAX_MULTIPLIER),
            pitch=clamp(setting.pitch, MIN_MULTIPLIER, MAX_MULTIPLIER),
            volume=clamp(setting.volume, MIN_MULTIPLIER, MAX_MULTIPLIER),
            style_tag=setting.style,
        )

    def neutral(self) -> VoiceRenderParams:
        """Parameters used when no emotional state is available."""
        return self.map(EmotionalState.neutral())

    @staticmethod
    def select(state: EmotionalState) -> VoiceSetting:
        """Return the unclamped setting of the first matching rule."""
        if state.crisis_level is CrisisLevel.CRITICAL:
            return CRISIS_SETTING
        if state.stress > 0.7:
            return STRESSED_SETTING
        if state.pleasure < -0.3:
            return NEGATIVE_SETTING
        if state.emotional_intensity > 0.7:
            return EXCITED_SETTING if state.pleasure > 0.5 else INTENSE_SETTING
        if state.sarcasm_detected:
            return SARCASM_SETTING

        primary = EMOTION_SETTINGS.get(state.primary_emotion, DEFAULT_SETTING)
        if _is_blended(state) and state.primary_emotion is not Emotion.BITTERSWEET:
            secondary = EMOTION_SETTINGS.get(state.secondary_emotion, DEFAULT_SETTING)
            return VoiceSetting(
                speed=(primary.speed + secondary.speed) / 2.0,
                pitch=(primary.pitch + secondary.pitch) / 2.0,
                volume=(primary.volume + secondary.volume) / 2.0,
                style=primary.style,
            )
        return primary
