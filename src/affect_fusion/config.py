"""Fusion engine configuration.

Defaults come from environment variables so a deployment can retune the
engine without code changes; :func:`load_config` reads the same settings
from a YAML file.

Environment variables:
    AF_RETENTION_SECONDS: Emotional memory retention window (default 1800)
    AF_HYSTERESIS_TURNS: Consecutive lower readings before a downgrade (default 2)
    AF_VOICE_WEIGHT: Fusion weight of the voice modality (default 0.7)
    AF_TEXT_WEIGHT: Fusion weight of the text modality (default 0.3)
    AF_LATENCY_BUDGET_MS: Soft per-turn latency budget (default 300)
    AF_VOICE_ID: Synthesizer voice identifier (default "nova")
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .exceptions import ConfigError


@dataclass(frozen=True)
class CrisisThresholds:
    """Minimum crisis score for each non-``none`` level."""

    low: int = 2
    medium: int = 4
    high: int = 6
    critical: int = 8

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.low, self.medium, self.high, self.critical)


@dataclass(frozen=True)
class FusionConfig:
    """Tunable values of the fusion engine."""

    retention_seconds: float = field(
        default_factory=lambda: float(os.getenv("AF_RETENTION_SECONDS", "1800"))
    )
    hysteresis_turns: int = field(
        default_factory=lambda: int(os.getenv("AF_HYSTERESIS_TURNS", "2"))
    )
    voice_weight: float = field(
        default_factory=lambda: float(os.getenv("AF_VOICE_WEIGHT", "0.7"))
    )
    text_weight: float = field(
        default_factory=lambda: float(os.getenv("AF_TEXT_WEIGHT", "0.3"))
    )
    latency_budget_ms: float = field(
        default_factory=lambda: float(os.getenv("AF_LATENCY_BUDGET_MS", "300"))
    )
    voice_id: str = field(default_factory=lambda: os.getenv("AF_VOICE_ID", "nova"))
    crisis_thresholds: CrisisThresholds = field(default_factory=CrisisThresholds)
    stability_window: int = 5
    trend_window: int = 3
    baseline_alpha: float = 0.1
    drift_threshold: float = 0.3

    def __post_init__(self) -> None:
        self.validate()

    @property
    def latency_budget_seconds(self) -> float:
        return self.latency_budget_ms / 1000.0

    def validate(self) -> None:
        """Raise :class:`ConfigError` if any value is out of range."""
        if self.retention_seconds <= 0:
            raise ConfigError("retention_seconds must be positive")
        if self.hysteresis_turns < 1:
            raise ConfigError("hysteresis_turns must be at least 1")
        if self.voice_weight < 0 or self.text_weight < 0:
            raise ConfigError("fusion weights must be non-negative")
        if not math.isclose(self.voice_weight + self.text_weight, 1.0, abs_tol=1e-6):
            raise ConfigError(
                f"fusion weights must sum to 1.0, got "
                f"{self.voice_weight} + {self.text_weight}"
            )
        if self.latency_budget_ms <= 0:
            raise ConfigError("latency_budget_ms must be positive")
        if not self.voice_id:
            raise ConfigError("voice_id must be a non-empty string")
        thresholds = self.crisis_thresholds.as_tuple()
        if any(t < 0 for t in thresholds) or list(thresholds) != sorted(thresholds):
            raise ConfigError(
                f"crisis thresholds must be non-negative and ascending, got {thresholds}"
            )
        if self.stability_window < 2 or self.trend_window < 1:
            raise ConfigError("stability_window must be >= 2 and trend_window >= 1")
        if not 0.0 < self.baseline_alpha <= 1.0:
            raise ConfigError("baseline_alpha must be in (0, 1]")


_SCALAR_KEYS = frozenset(
    f.name for f in fields(FusionConfig) if f.name != "crisis_thresholds"
)
_THRESHOLD_KEYS = frozenset(f.name for f in fields(CrisisThresholds))


def config_from_dict(raw: dict[str, Any]) -> FusionConfig:
    """Build a :class:`FusionConfig` from a parsed mapping.

    Keys absent from *raw* keep their (environment-derived) defaults.
    """
    if not isinstance(raw, dict):
        raise ConfigError(f"Config must be a mapping, got {type(raw).__name__}")

    unknown = set(raw) - _SCALAR_KEYS - {"crisis_thresholds"}
    if unknown:
        raise ConfigError(f"Unknown config keys: {sorted(unknown)}")

    kwargs: dict[str, Any] = {k: v for k, v in raw.items() if k in _SCALAR_KEYS}

    thresholds_raw = raw.get("crisis_thresholds")
    if thresholds_raw is not None:
        if not isinstance(thresholds_raw, dict):
            raise ConfigError("crisis_thresholds must be a mapping")
        bad = set(thresholds_raw) - _THRESHOLD_KEYS
        if bad:
            raise ConfigError(f"Unknown crisis threshold keys: {sorted(bad)}")
        try:
            kwargs["crisis_thresholds"] = CrisisThresholds(
                **{k: int(v) for k, v in thresholds_raw.items()}
            )
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid crisis thresholds: {exc}") from exc

    try:
        return FusionConfig(**kwargs)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def load_config(path: str | Path) -> FusionConfig:
    """Load and validate a fusion configuration from a YAML file.

    Raises
    ------
    ConfigError
        If the file is missing, is not a YAML mapping, or holds invalid values.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in config file: {exc}") from exc

    if raw is None:
        raw = {}
    return config_from_dict(raw)
