"""Tests for affect_fusion.response_advisor."""

from __future__ import annotations

import pytest

from affect_fusion.models import CrisisLevel, Emotion, EmotionalState
from affect_fusion.response_advisor import RECOMMENDED_ACTIONS, ResponseStyleAdvisor


@pytest.fixture()
def advisor() -> ResponseStyleAdvisor:
    return ResponseStyleAdvisor()


def _fields(style) -> tuple[str, str, str, str]:
    return (style.tone, style.length, style.style, style.urgency)


class TestTable:
    def test_critical_overrides_everything(self, advisor: ResponseStyleAdvisor) -> None:
        state = EmotionalState(primary_emotion=Emotion.JOY, emotional_intensity=0.95)
        style = advisor.advise(state, CrisisLevel.CRITICAL)
        assert _fields(style) == ("urgent", "short", "crisis", "immediate")
        assert "crisis hotline" in style.recommended_action

    def test_intense_sadness(self, advisor: ResponseStyleAdvisor) -> None:
        state = EmotionalState(primary_emotion=Emotion.SADNESS, emotional_intensity=0.8)
        assert _fields(advisor.advise(state, CrisisLevel.NONE)) == (
            "gentle",
            "medium",
            "supportive",
            "high",
        )

    def test_intense_joy(self, advisor: ResponseStyleAdvisor) -> None:
        state = EmotionalState(primary_emotion=Emotion.JOY, emotional_intensity=0.8)
        assert _fields(advisor.advise(state, CrisisLevel.NONE)) == (
            "enthusiastic",
            "short",
            "celebratory",
            "normal",
        )

    def test_high_crisis(self, advisor: ResponseStyleAdvisor) -> None:
        style = advisor.advise(EmotionalState.neutral(), CrisisLevel.HIGH)
        assert _fields(style) == ("calming", "short", "reassuring", "high")

    @pytest.mark.parametrize("emotion", [Emotion.ANXIETY, Emotion.FEAR])
    def test_anxiety_and_fear(self, advisor: ResponseStyleAdvisor, emotion: Emotion) -> None:
        style = advisor.advise(EmotionalState(primary_emotion=emotion), CrisisLevel.LOW)
        assert _fields(style) == ("calm", "short", "grounding", "elevated")

    def test_mild_sadness_is_default(self, advisor: ResponseStyleAdvisor) -> None:
        state = EmotionalState(primary_emotion=Emotion.SADNESS, emotional_intensity=0.4)
        assert _fields(advisor.advise(state, CrisisLevel.NONE)) == (
            "neutral",
            "medium",
            "conversational",
            "normal",
        )

    def test_default(self, advisor: ResponseStyleAdvisor) -> None:
        assert _fields(advisor.default()) == ("neutral", "medium", "conversational", "normal")


class TestRecommendedAction:
    @pytest.mark.parametrize("level", list(CrisisLevel))
    def test_every_level_has_action(self, advisor: ResponseStyleAdvisor, level: CrisisLevel) -> None:
        style = advisor.advise(EmotionalState.neutral(), level)
        assert style.recommended_action == RECOMMENDED_ACTIONS[level]
        assert style.recommended_action
