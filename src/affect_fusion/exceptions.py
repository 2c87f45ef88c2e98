"""Custom exception hierarchy for the affect_fusion engine."""


class AffectFusionError(Exception):
    """Base exception for all affect_fusion errors."""


class InputError(AffectFusionError):
    """Raised when a turn has no usable input.

    Both modalities absent, every modality failing, or an audio buffer
    too malformed to yield even the neutral default.
    """


class TurnTimeoutError(AffectFusionError, TimeoutError):
    """Raised when the latency budget elapsed with no partial result."""

    def __init__(self, message: str, budget_ms: float | None = None) -> None:
        self.budget_ms = budget_ms
        suffix = f" (budget {budget_ms:g} ms)" if budget_ms is not None else ""
        super().__init__(f"{message}{suffix}")


class StateError(AffectFusionError):
    """Raised when session state is touched for an unknown or expired session."""

    def __init__(self, message: str, session_id: str | None = None) -> None:
        self.session_id = session_id
        super().__init__(message)


class ConfigError(AffectFusionError):
    """Raised when a fusion configuration cannot be loaded or is invalid."""
