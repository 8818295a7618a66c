"""Transport implementations for the Alien RFID library."""

from .base import BaseTransport
from .serial_transport import SerialTransport
from .tcp_transport import TcpTransport
from .mock import MockTransport

__all__ = [
    'BaseTransport',
    'SerialTransport',
    'TcpTransport',
    'MockTransport'
]
