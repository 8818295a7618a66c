"""Alien RFID Library - Blocking client for Alien RFID readers speaking the ASCII command protocol."""

__version__ = '0.1.0' # Defined before the imports below; the reader emulator reports it

from .core import (
    ReaderClient,
    ConnectionStatus,
    TagRecord,
    tagcmp,
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
from .transport import (
    SerialTransport,
    TcpTransport,
    MockTransport
)
from .protocols.settings import Setting, ReaderVersion

__all__ = [
    # Core components
    'ReaderClient',
    'ConnectionStatus',
    'TagRecord',
    'tagcmp',
    'Setting',
    'ReaderVersion',
    # Exceptions
    'AlienRfidError',
    'TransportError',
    'ConnectionError',
    'TimeoutError',
    'ProtocolError',
    'AuthError',
    'ValidationError',
    'UnknownSettingError',
    'OverrideStackError',
    # Transport
    'SerialTransport',
    'TcpTransport',
    'MockTransport',
]
