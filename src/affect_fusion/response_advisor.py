"""Response-shaping hints for the text-generation collaborator."""

from __future__ import annotations

from .models import CrisisLevel, Emotion, EmotionalState, ResponseStyle

RECOMMENDED_ACTIONS: dict[CrisisLevel, str] = {
    CrisisLevel.CRITICAL: (
        "Immediate intervention required. Provide crisis hotline information "
        "and encourage professional help."
    ),
    CrisisLevel.HIGH: (
        "High risk detected. Offer emotional support and suggest professional counseling."
    ),
    CrisisLevel.MEDIUM: (
        "Moderate risk. Continue supportive conversation and monitor for escalation."
    ),
    CrisisLevel.LOW: (
        "Low risk. Maintain supportive presence and encourage healthy coping strategies."
    ),
    CrisisLevel.NONE: "No immediate risk detected. Continue normal conversation.",
}

HIGH_INTENSITY = 0.7


class ResponseStyleAdvisor:
    """Deterministic ``(EmotionalState, CrisisLevel) -> ResponseStyle`` table."""

    def advise(self, state: EmotionalState, level: CrisisLevel) -> ResponseStyle:
        tone, length, style, urgency = self._select(state, level)
        return ResponseStyle(
            tone=tone,
            length=length,
            style=style,
            urgency=urgency,
            recommended_action=RECOMMENDED_ACTIONS[level],
        )

    def default(self) -> ResponseStyle:
        return self.advise(EmotionalState.neutral(), CrisisLevel.NONE)

    @staticmethod
    def _select(state: EmotionalState, level: CrisisLevel) -> tuple[str, str, str, str]:
        if level is CrisisLevel.CRITICAL:
            return ("urgent", "short", "crisis", "immediate")
        emotion = state.primary_emotion
        intense = state.emotional_intensity > HIGH_INTENSITY
        if emotion is Emotion.SADNESS and intense:
            return ("gentle", "medium", "supportive", "high")
        if emotion is Emotion.JOY and intense:
            return ("enthusiastic", "short", "celebratory", "normal")
        if level is CrisisLevel.HIGH:
            return ("calming", "short", "reassuring", "high")
        if emotion in (Emotion.ANXIETY, Emotion.FEAR):
            return ("calm", "short", "grounding", "elevated")
        return ("neutral", "medium", "conversational", "normal")
