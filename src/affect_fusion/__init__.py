"""affect_fusion -- multi-modal emotional-state fusion for voice companions.

Public API re-exports for convenient access::

    from affect_fusion import Orchestrator, FusionConfig
"""

from ._version import __version__
from .config import CrisisThresholds, FusionConfig, load_config
from .crisis_scorer import VoiceCrisisScorer
from .crisis_state import CrisisStateMachine, behavioral_indicators
from .events import EventSink, FanoutEventSink, LoggingEventSink, MemoryEventSink
from .exceptions import (
    AffectFusionError,
    ConfigError,
    InputError,
    StateError,
    TurnTimeoutError,
)
from .fusion import FusionEngine
from .memory import SessionMemoryStore
from .models import (
    BehavioralIndicators,
    CrisisIndicators,
    CrisisLevel,
    CrisisTransitionEvent,
    Emotion,
    EmotionalState,
    InteractionResult,
    MemoryContext,
    ProsodyFeatures,
    ResponseStyle,
    StyleTag,
    TurnTelemetry,
    VoiceAnalysis,
    VoiceRenderParams,
)
from .orchestrator import Orchestrator
from .prosody_extractor import ProsodyExtractor
from .response_advisor import ResponseStyleAdvisor
from .ssml import SSMLRenderer
from .text_classifier import LexicalEmotionClassifier, TextAnalysis, TextCrisisScan
from .voice_classifier import RuleBasedVoiceClassifier, VoiceEmotionClassifier
from .voice_mapper import VoiceParameterMapper

__all__ = [
    "__version__",
    # Core
    "Orchestrator",
    "FusionEngine",
    # Configuration
    "FusionConfig",
    "CrisisThresholds",
    "load_config",
    # Models
    "CrisisLevel",
    "Emotion",
    "StyleTag",
    "ProsodyFeatures",
    "CrisisIndicators",
    "BehavioralIndicators",
    "VoiceAnalysis",
    "EmotionalState",
    "MemoryContext",
    "CrisisTransitionEvent",
    "TurnTelemetry",
    "VoiceRenderParams",
    "ResponseStyle",
    "InteractionResult",
    # Voice
    "ProsodyExtractor",
    "VoiceCrisisScorer",
    "VoiceEmotionClassifier",
    "RuleBasedVoiceClassifier",
    # Text
    "LexicalEmotionClassifier",
    "TextAnalysis",
    "TextCrisisScan",
    # Session state
    "SessionMemoryStore",
    "CrisisStateMachine",
    "behavioral_indicators",
    # Output
    "VoiceParameterMapper",
    "ResponseStyleAdvisor",
    "SSMLRenderer",
    # Events
    "EventSink",
    "LoggingEventSink",
    "MemoryEventSink",
    "FanoutEventSink",
    # Exceptions
    "AffectFusionError",
    "InputError",
    "TurnTimeoutError",
    "StateError",
    "ConfigError",
]
