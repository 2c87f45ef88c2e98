"""Tests for affect_fusion.text_classifier and affect_fusion.lexicon.

Covers:
- Keyword-fraction scoring and registration-order tie-break
- Neutral fallback
- Crisis phrase override and crisis categories
- Sarcasm, stress and confidence modifiers
- Word-boundary matching
- Range invariant on random word salads
"""

from __future__ import annotations

import numpy as np
import pytest

from affect_fusion.exceptions import InputError
from affect_fusion.lexicon import (
    CRISIS_PHRASES,
    EMOTION_PATTERNS,
    SARCASM_MARKERS,
    EmotionPattern,
    contains,
    normalize,
)
from affect_fusion.models import CrisisLevel, Emotion
from affect_fusion.text_classifier import LexicalEmotionClassifier, scan_crisis


@pytest.fixture()
def classifier() -> LexicalEmotionClassifier:
    return LexicalEmotionClassifier()


# ---------------------------------------------------------------------------
# Lexicon
# ---------------------------------------------------------------------------


class TestLexicon:
    def test_registration_order_starts_with_joy(self) -> None:
        assert EMOTION_PATTERNS[0].emotion is Emotion.JOY

    def test_keywords_are_lowercase(self) -> None:
        for pattern in EMOTION_PATTERNS:
            assert all(k == k.lower() for k in pattern.keywords)
        assert all(p == p.lower() for p in CRISIS_PHRASES + SARCASM_MARKERS)

    def test_word_boundaries(self) -> None:
        assert contains("i feel down today", "down")
        assert not contains("the downtown cafe", "down")
        assert contains("happy!", "happy")
        assert not contains("unhappy", "happy")

    def test_normalize_folds_apostrophes(self) -> None:
        assert normalize("I CAN’T Breathe") == "i can't breathe"


# ---------------------------------------------------------------------------
# Emotion scoring
# ---------------------------------------------------------------------------


class TestScoring:
    def test_joy(self, classifier: LexicalEmotionClassifier) -> None:
        state = classifier.classify("I am so happy today! This is amazing!").state
        joy = EMOTION_PATTERNS[0]
        assert state.primary_emotion is Emotion.JOY
        assert state.pleasure == pytest.approx(0.9)
        assert state.arousal == pytest.approx(0.7)
        assert state.dominance == pytest.approx(0.6)
        assert state.emotional_intensity == pytest.approx(joy.base_intensity * 2 / len(joy.keywords))
        assert state.crisis_level is CrisisLevel.NONE

    def test_no_match_is_neutral(self, classifier: LexicalEmotionClassifier) -> None:
        state = classifier.classify("The meeting is at noon.").state
        assert state.primary_emotion is Emotion.NEUTRAL
        assert state.secondary_emotion is Emotion.NEUTRAL
        assert state.emotional_intensity == 0.5
        assert (state.pleasure, state.arousal, state.dominance) == (0.0, 0.5, 0.5)

    def test_blank_is_neutral(self, classifier: LexicalEmotionClassifier) -> None:
        analysis = classifier.classify("   ")
        assert analysis.state.primary_emotion is Emotion.NEUTRAL
        assert analysis.scan.level is CrisisLevel.NONE

    def test_secondary_is_runner_up(self, classifier: LexicalEmotionClassifier) -> None:
        # anxiety 0.75/9 beats joy 0.8/11
        state = classifier.classify("I'm happy but also worried").state
        assert state.primary_emotion is Emotion.ANXIETY
        assert state.secondary_emotion is Emotion.JOY

    def test_tie_goes_to_first_registered(self) -> None:
        red = EmotionPattern(Emotion.ANGER, ("red",), 0.5, -0.4, 0.9, 0.2)
        blue = EmotionPattern(Emotion.SADNESS, ("blue",), 0.5, -0.8, 0.2, -0.3)
        text = "red and blue"
        first = LexicalEmotionClassifier(patterns=(red, blue)).classify(text).state
        assert first.primary_emotion is Emotion.ANGER
        assert first.secondary_emotion is Emotion.SADNESS
        second = LexicalEmotionClassifier(patterns=(blue, red)).classify(text).state
        assert second.primary_emotion is Emotion.SADNESS

    def test_more_matches_raise_intensity(self, classifier: LexicalEmotionClassifier) -> None:
        one = classifier.classify("I am sad").state.emotional_intensity
        two = classifier.classify("I am sad and miserable").state.emotional_intensity
        assert two > one


# ---------------------------------------------------------------------------
# Crisis detection
# ---------------------------------------------------------------------------


class TestCrisis:
    def test_crisis_phrase_forces_critical(self, classifier: LexicalEmotionClassifier) -> None:
        analysis = classifier.classify("I want to end my life, I have a plan")
        assert analysis.state.crisis_level is CrisisLevel.CRITICAL
        assert analysis.state.primary_emotion is Emotion.CRISIS
        assert analysis.scan.is_critical
        assert "end my life" in analysis.scan.phrases

    def test_crisis_keeps_lexical_label_as_secondary(
        self, classifier: LexicalEmotionClassifier
    ) -> None:
        state = classifier.classify("I'm so sad, I want to die").state
        assert state.primary_emotion is Emotion.CRISIS
        assert state.secondary_emotion is Emotion.SADNESS
        # PAD still comes from the lexical table.
        assert state.pleasure == pytest.approx(-0.8)

    def test_crisis_despite_positive_words(self, classifier: LexicalEmotionClassifier) -> None:
        state = classifier.classify("Great day to kill myself").state
        assert state.crisis_level is CrisisLevel.CRITICAL

    @pytest.mark.parametrize("phrase", CRISIS_PHRASES)
    def test_every_phrase(self, classifier: LexicalEmotionClassifier, phrase: str) -> None:
        assert classifier.classify(f"honestly {phrase} now").scan.is_critical

    def test_categories(self, classifier: LexicalEmotionClassifier) -> None:
        analysis = classifier.classify("I feel so hopeless and alone")
        assert analysis.scan.categories == ("hopelessness", "isolation")
        assert analysis.scan.level is CrisisLevel.MEDIUM
        assert analysis.state.crisis_level is CrisisLevel.MEDIUM
        assert analysis.state.primary_emotion is Emotion.SADNESS

    def test_self_harm_is_high(self) -> None:
        scan = scan_crisis(normalize("Sometimes I cut myself"))
        assert scan.level is CrisisLevel.HIGH
        assert 0.0 < scan.risk <= 1.0

    def test_violence_and_substance(self) -> None:
        scan = scan_crisis(
            normalize("I want to hurt someone and I took too many pills, overdose")
        )
        assert scan.categories == ("substance_abuse", "violence")
        assert scan.level is CrisisLevel.HIGH
        assert scan.risk == pytest.approx(0.8 * (0.5 + 0.5 / 7))

    def test_substance_is_medium(self) -> None:
        scan = scan_crisis(normalize("I've been drinking too much lately"))
        assert scan.categories == ("substance_abuse",)
        assert scan.level is CrisisLevel.MEDIUM

    def test_panic_attack_is_not_violence(self) -> None:
        assert scan_crisis(normalize("I had a panic attack")).categories == ("acute_distress",)

    def test_anger_alone_is_not_a_crisis(self, classifier: LexicalEmotionClassifier) -> None:
        analysis = classifier.classify("I am so angry and furious")
        assert analysis.state.primary_emotion is Emotion.ANGER
        assert analysis.scan.level is CrisisLevel.NONE

    def test_curly_apostrophe(self) -> None:
        assert scan_crisis(normalize("I can’t go on like this")).categories == ("hopelessness",)

    def test_no_crisis(self) -> None:
        scan = scan_crisis(normalize("lovely weather"))
        assert scan.level is CrisisLevel.NONE
        assert scan.risk == 0.0


# ---------------------------------------------------------------------------
# Modifiers
# ---------------------------------------------------------------------------


class TestModifiers:
    def test_sarcasm_inverts_pleasure(self, classifier: LexicalEmotionClassifier) -> None:
        analysis = classifier.classify("Oh great, another Monday")
        state = analysis.state
        assert state.sarcasm_detected
        assert analysis.sarcasm_markers == ("oh great",)
        assert state.pleasure == pytest.approx(-0.45)
        assert state.arousal == pytest.approx(0.84)

    def test_stress_words(self, classifier: LexicalEmotionClassifier) -> None:
        state = classifier.classify("I feel stressed and under pressure").state
        assert state.stress == pytest.approx(0.9)

    def test_calm_words(self, classifier: LexicalEmotionClassifier) -> None:
        state = classifier.classify("I feel calm and relaxed").state
        assert state.stress == pytest.approx(0.2)
        assert state.primary_emotion is Emotion.RELIEF

    def test_uncertainty_lowers_confidence(self, classifier: LexicalEmotionClassifier) -> None:
        assert classifier.classify("maybe, I am unsure").state.confidence == pytest.approx(0.3)

    def test_certainty_raises_confidence(self, classifier: LexicalEmotionClassifier) -> None:
        assert classifier.classify("I definitely know").state.confidence == pytest.approx(0.7)

    def test_negative_text_raises_empathy(self, classifier: LexicalEmotionClassifier) -> None:
        sad = classifier.classify("I am sad").state
        happy = classifier.classify("I am happy").state
        assert sad.empathy > happy.empathy


# ---------------------------------------------------------------------------
# Properties and validation
# ---------------------------------------------------------------------------


class TestProperties:
    def test_range_invariant(self, classifier: LexicalEmotionClassifier, rng: np.random.Generator) -> None:
        vocabulary = [k for p in EMOTION_PATTERNS for k in p.keywords]
        vocabulary += list(SARCASM_MARKERS) + ["stressed", "calm", "maybe", "sure", "the", "and"]
        for _ in range(300):
            words = rng.choice(vocabulary, size=int(rng.integers(1, 20)))
            state = classifier.classify(" ".join(words)).state
            assert state.in_bounds()

    def test_deterministic(self, classifier: LexicalEmotionClassifier) -> None:
        text = "Yeah right, I'm thrilled and terrified"
        assert classifier.classify(text) == classifier.classify(text)

    def test_non_string_rejected(self, classifier: LexicalEmotionClassifier) -> None:
        with pytest.raises(InputError):
            classifier.classify(42)  # type: ignore[arg-type]
