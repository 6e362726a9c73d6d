"""Tempo-over-time estimation by lag correlation."""

from beatspeed.analysis.engine import AnalysisEngine, analyse, analyse_streaming, validate_configuration
from beatspeed.analysis.events import (
    CallbackSink,
    CollectingSink,
    EventSink,
    EventStream,
    ProgressSink,
    TeeSink,
)
from beatspeed.analysis.models import BpmEstimate, Configuration, End, Event, Start, Step
from beatspeed.errors import (
    ConfigurationError,
    DecodeError,
    EngineError,
    InputError,
    StreamAborted,
)

__all__ = [
    "AnalysisEngine",
    "analyse",
    "analyse_streaming",
    "validate_configuration",
    "CallbackSink",
    "CollectingSink",
    "EventSink",
    "EventStream",
    "ProgressSink",
    "TeeSink",
    "BpmEstimate",
    "Configuration",
    "End",
    "Event",
    "Start",
    "Step",
    "ConfigurationError",
    "DecodeError",
    "EngineError",
    "InputError",
    "StreamAborted",
]
