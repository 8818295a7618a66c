"""Core components of the Alien RFID library."""

from .exceptions import (
    AlienRfidError,
    TransportError,
    ConnectionError,
    TimeoutError,
    ProtocolError,
    AuthError,
    ValidationError,
    UnknownSettingError,
    OverrideStackError
)
from .status import ConnectionStatus
from .tag import TagRecord, tagcmp
from .reader import ReaderClient

__all__ = [
    'ReaderClient',
    'ConnectionStatus',
    'TagRecord',
    'tagcmp',
    'AlienRfidError',
    'TransportError',
    'ConnectionError',
    'TimeoutError',
    'ProtocolError',
    'AuthError',
    'ValidationError',
    'UnknownSettingError',
    'OverrideStackError'
]
