"""Exception hierarchy for the tempo engine.

Everything raised from the public API derives from :class:`EngineError`,
so front-ends can catch a single type and still tell the cases apart.
"""


class EngineError(Exception):
    """Base class for every failure surfaced by ``beatspeed``."""


class ConfigurationError(EngineError):
    """Invalid intervals or BPM bounds, detected before any decoding."""


class InputError(EngineError):
    """The input file is missing or unreadable."""


class DecodeError(EngineError):
    """The audio stream is corrupt or uses an unsupported codec."""


class StreamAborted(EngineError):
    """An event stream was closed before its terminal ``End`` event."""
