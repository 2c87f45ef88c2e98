"""ProsodyExtractor -- scalar voice features from a raw PCM frame.

Works on amplitude statistics of fixed-size chunks, so it needs no pitch
tracker and no sample-rate information. Chunks are taken left to right;
a trailing partial chunk is kept. All variances are population variances.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from .exceptions import InputError
from .models import CrisisIndicators, ProsodyFeatures

PITCH_CHUNK = 1024
TREMOR_CHUNK = 512
VOLUME_CHUNK = 256
MAX_STRESS_PATTERN = 10


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _chunks(samples: np.ndarray, size: int) -> list[np.ndarray]:
    return [samples[i:i + size] for i in range(0, samples.size, size)]


def _cap(value: float) -> float:
    """Clip *value* into [0, 1]."""
    return float(min(1.0, max(0.0, value)))


def _as_frame(samples: Sequence[float] | np.ndarray) -> np.ndarray:
    """Validate and convert *samples* to a 1-D float64 array."""
    try:
        frame = np.asarray(samples, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InputError(f"Audio frame is not numeric: {exc}") from exc
    if frame.ndim != 1:
        raise InputError(f"Audio frame must be 1-D, got shape {frame.shape}")
    if frame.size and not np.all(np.isfinite(frame)):
        raise InputError("Audio frame contains non-finite samples")
    return frame


@dataclass(frozen=True)
class _ChunkStats:
    """Per-chunk statistics shared by the feature and indicator formulas."""

    abs_mean_1024: np.ndarray
    breath_1024: np.ndarray
    abs_mean_512: np.ndarray
    var_512: np.ndarray
    volume_256: np.ndarray

    @classmethod
    def of(cls, frame: np.ndarray) -> _ChunkStats:
        c1024 = _chunks(frame, PITCH_CHUNK)
        c512 = _chunks(frame, TREMOR_CHUNK)
        c256 = _chunks(frame, VOLUME_CHUNK)
        return cls(
            abs_mean_1024=np.array([abs(c.mean()) for c in c1024]),
            breath_1024=np.array([np.abs(c[::4]).mean() for c in c1024]),
            abs_mean_512=np.array([abs(c.mean()) for c in c512]),
            var_512=np.array([c.var() for c in c512]),
            volume_256=np.array([np.abs(c).mean() for c in c256]),
        )


# ---------------------------------------------------------------------------
# Extractor
# ---------------------------------------------------------------------------


class ProsodyExtractor:
    """Derive :class:`ProsodyFeatures` and :class:`CrisisIndicators` from a frame.

    Stateless; one instance can be shared across threads.

    Usage::

        extractor = ProsodyExtractor()
        features, indicators = extractor.analyze_frame(samples)
    """

    def extract(self, samples: Sequence[float] | np.ndarray) -> ProsodyFeatures:
        """Return the prosodic features of *samples*.

        Empty or all-zero input yields :meth:`ProsodyFeatures.neutral`.

        Raises
        ------
        InputError
            If the buffer is not 1-D or holds NaN/inf samples.
        """
        return self.analyze_frame(samples)[0]

    def indicators(self, samples: Sequence[float] | np.ndarray) -> CrisisIndicators:
        """Return the voice crisis indicators of *samples*."""
        return self.analyze_frame(samples)[1]

    def analyze_frame(
        self, samples: Sequence[float] | np.ndarray
    ) -> tuple[ProsodyFeatures, CrisisIndicators]:
        """Compute features and crisis indicators from one set of chunk statistics."""
        frame = _as_frame(samples)
        if frame.size == 0 or not np.any(frame):
            return ProsodyFeatures.neutral(), CrisisIndicators()

        stats = _ChunkStats.of(frame)
        features = self._features(frame, stats)
        return features, self._indicators(features, stats)

    # -- Features -----------------------------------------------------------

    @staticmethod
    def _features(frame: np.ndarray, stats: _ChunkStats) -> ProsodyFeatures:
        n = frame.size
        abs_frame = np.abs(frame)
        mean_abs = float(abs_frame.mean())

        pitch_variation = _cap(10.0 * float(stats.abs_mean_1024.var()))
        crossings = int(np.count_nonzero(np.diff(np.signbit(frame))))
        tempo = _cap(100.0 * crossings / n)
        rhythm = _cap(5.0 * float(np.abs(np.diff(frame)).mean())) if n > 1 else 0.0
        tremor = _cap(40.0 * float(stats.var_512.var()))
        clarity = _cap(mean_abs / (float(frame.var()) + 0.001))
        breathiness = _cap(2.0 * float(abs_frame[::4].mean()))
        resonance = (min(1.0, mean_abs) + clarity) / 2.0
        intonation = float(np.clip((pitch_variation - 0.5) * 2.0, -1.0, 1.0))
        stress_pattern = tuple(
            _cap(2.0 * float(v)) for v in stats.volume_256[:MAX_STRESS_PATTERN]
        )

        return ProsodyFeatures(
            intonation=intonation,
            pitch_variation=pitch_variation,
            rhythm=rhythm,
            tempo=tempo,
            tremor=tremor,
            clarity=clarity,
            breathiness=breathiness,
            resonance=resonance,
            stability=1.0 - tremor,
            stress_pattern=stress_pattern,
        )

    # -- Crisis indicators --------------------------------------------------

    @staticmethod
    def _indicators(features: ProsodyFeatures, stats: _ChunkStats) -> CrisisIndicators:
        pitch_instability = _cap(10.0 * float(stats.abs_mean_512.var()))
        volume_inconsistency = _cap(5.0 * float(stats.volume_256.var()))
        breath_irregularity = _cap(5.0 * float(stats.breath_1024.var()))
        voice_stress = (features.tremor + pitch_instability + volume_inconsistency) / 3.0
        return CrisisIndicators(
            voice_stress=voice_stress,
            breath_irregularity=breath_irregularity,
            voice_tremor=features.tremor,
            pitch_instability=pitch_instability,
            volume_inconsistency=volume_inconsistency,
        )
