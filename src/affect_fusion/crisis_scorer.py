"""Voice crisis scoring by weighted threshold banding.

Each indicator contributes points according to the highest band it
exceeds; the summed score maps to a :class:`CrisisLevel` through the
configured thresholds. Bands are strict ``>`` comparisons and level
thresholds are ``>=`` comparisons.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from .config import CrisisThresholds
from .models import CrisisIndicators, CrisisLevel, VoiceAnalysis
from .prosody_extractor import ProsodyExtractor

# (threshold, points) pairs, highest threshold first.
STRESS_BANDS: tuple[tuple[float, int], ...] = ((0.8, 3), (0.6, 2), (0.4, 1))
BREATH_BANDS: tuple[tuple[float, int], ...] = ((0.7, 3), (0.5, 2), (0.3, 1))
TREMOR_BANDS: tuple[tuple[float, int], ...] = ((0.7, 3), (0.5, 2), (0.3, 1))
PITCH_BANDS: tuple[tuple[float, int], ...] = ((0.6, 2), (0.4, 1))
VOLUME_BANDS: tuple[tuple[float, int], ...] = ((0.6, 2), (0.4, 1))

MAX_SCORE = sum(
    bands[0][1]
    for bands in (STRESS_BANDS, BREATH_BANDS, TREMOR_BANDS, PITCH_BANDS, VOLUME_BANDS)
)


def _band(value: float, bands: tuple[tuple[float, int], ...]) -> int:
    for threshold, points in bands:
        if value > threshold:
            return points
    return 0


class VoiceCrisisScorer:
    """Score crisis risk from voice indicators.

    Parameters
    ----------
    thresholds:
        Minimum score for each crisis level. Defaults to 2/4/6/8.
    extractor:
        Extractor used by :meth:`indicators` and :meth:`analyze`.
    """

    def __init__(
        self,
        thresholds: CrisisThresholds | None = None,
        extractor: ProsodyExtractor | None = None,
    ) -> None:
        self.thresholds = thresholds or CrisisThresholds()
        self.extractor = extractor or ProsodyExtractor()

    def indicators(self, frame: Sequence[float] | np.ndarray) -> CrisisIndicators:
        return self.extractor.indicators(frame)

    def score(self, indicators: CrisisIndicators) -> int:
        """Sum the band points of every indicator (0 to :data:`MAX_SCORE`)."""
        return (
            _band(indicators.voice_stress, STRESS_BANDS)
            + _band(indicators.breath_irregularity, BREATH_BANDS)
            + _band(indicators.voice_tremor, TREMOR_BANDS)
            + _band(indicators.pitch_instability, PITCH_BANDS)
            + _band(indicators.volume_inconsistency, VOLUME_BANDS)
        )

    def level(self, score: int) -> CrisisLevel:
        t = self.thresholds
        if score >= t.critical:
            return CrisisLevel.CRITICAL
        if score >= t.high:
            return CrisisLevel.HIGH
        if score >= t.medium:
            return CrisisLevel.MEDIUM
        if score >= t.low:
            return CrisisLevel.LOW
        return CrisisLevel.NONE

    def analyze(self, frame: Sequence[float] | np.ndarray) -> VoiceAnalysis:
        """Extract, score and level one audio frame."""
        features, indicators = self.extractor.analyze_frame(frame)
        score = self.score(indicators)
        return VoiceAnalysis(
            features=features,
            indicators=indicators,
            score=score,
            level=self.level(score),
        )
