# Message channel: typed envelopes, wire decoding and dispatch
from .envelopes import (
    EnvelopeType,
    Position,
    InsertTab,
    RemoveTab,
    SelectTab,
    UpdateProgress,
    ToastOptions,
    TablerToast,
    ShowDropdown,
    Envelope,
    decode_envelope,
    encode_envelope,
)
from .channel import MessageChannel
from .multiplexer import Multiplexer

__all__ = [
    'EnvelopeType',
    'Position',
    'InsertTab',
    'RemoveTab',
    'SelectTab',
    'UpdateProgress',
    'ToastOptions',
    'TablerToast',
    'ShowDropdown',
    'Envelope',
    'decode_envelope',
    'encode_envelope',
    'MessageChannel',
    'Multiplexer',
]
