# Common utilities, constants and configuration shared across packages
from .constants import *
from .config import RuntimeConfig
from .errors import (
    FragmentEngineError,
    SerializationError,
    AnchorNotFoundError,
    AssetLoadError,
    DuplicateIdError,
    ChannelClosedError,
    EnvelopeError,
)
from .log import configure_logging

__all__ = [
    'RuntimeConfig',
    'FragmentEngineError',
    'SerializationError',
    'AnchorNotFoundError',
    'AssetLoadError',
    'DuplicateIdError',
    'ChannelClosedError',
    'EnvelopeError',
    'configure_logging',
]
