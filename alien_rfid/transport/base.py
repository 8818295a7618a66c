# alien_rfid/transport/base.py

from abc import ABC, abstractmethod
from typing import Any, Optional

from alien_rfid.core.exceptions import ConnectionError

class BaseTransport(ABC):
    """
    Abstract base class for all communication transport layers.

    A transport is a blocking byte channel: ``write`` pushes bytes out and
    ``read_until`` blocks until a delimiter shows up or the timeout runs
    out. The reader client never needs to know whether the medium is a
    serial line, a socket or an in-memory emulator.
    """

    def __init__(self, connection_details: dict[str, Any]):
        """
        Initializes the transport base.

        Args:
            connection_details: A dictionary containing parameters needed to
                                establish the connection (e.g., {'port': '/dev/ttyUSB0', 'baudrate': 115200}
                                for serial, {'host': '192.168.1.100', 'port': 4001} for TCP).
        """
        self._connection_details = connection_details
        self._connected = False

    @abstractmethod
    def connect(self) -> None:
        """
        Establishes the connection to the reader device.

        Raises:
            ConnectionError: If the connection cannot be established.
        """

    @abstractmethod
    def disconnect(self) -> None:
        """
        Closes the connection to the reader device.
        Safe to call even if not connected.
        """

    @abstractmethod
    def write(self, data: bytes, timeout: Optional[float] = None) -> int:
        """
        Writes all of ``data``, blocking for at most ``timeout`` seconds.

        Returns:
            The number of bytes written.

        Raises:
            TimeoutError: If the bytes could not be written in time.
            ConnectionError: If the link is not open or was dropped.
            WriteError: For other write failures.
        """

    @abstractmethod
    def read_until(self, delimiter: str, timeout: Optional[float] = None) -> str:
        """
        Blocks until ``delimiter`` is received and returns the text before it.

        The delimiter itself is consumed and not returned. Bytes after it
        stay buffered for the next read.

        Raises:
            TimeoutError: If the delimiter did not arrive in time.
            ConnectionError: If the link is not open or was dropped.
            ReadError: For other read failures.
        """

    def is_connected(self) -> bool:
        """Returns True if the transport layer is currently connected, False otherwise."""
        return self._connected

    def _ensure_connected(self) -> None:
        if not self.is_connected():
            raise ConnectionError(f"{type(self).__name__} is not connected.")

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()

    @property
    def connection_details(self) -> dict[str, Any]:
        """Returns the connection details provided during initialization."""
        return self._connection_details
