# alien_rfid/transport/tcp_transport.py

import logging
import re
import socket
import time
from typing import Optional, Any, Dict

from alien_rfid.transport.base import BaseTransport
from alien_rfid.protocols import constants as alien_const
from alien_rfid.core.exceptions import NetworkConnectionError, ReadError, WriteError, TimeoutError

logger = logging.getLogger(__name__)

DEFAULT_TCP_BUFFER_SIZE = 4096 # Bytes to read at a time

class TcpTransport(BaseTransport):
    """
    Blocking TCP communication transport using the socket module.

    Works against the reader's built-in command service as well as a
    serial-to-Ethernet adapter on the reader's serial port.
    """

    def __init__(self, connection_details: Dict[str, Any]):
        """
        Initializes the TCP Transport.

        Args:
            connection_details: Dictionary containing TCP connection settings.
                Required: 'host' (string, IP address or hostname)
                Optional: 'port' (integer, default 4001),
                          'connect_timeout' (seconds), 'buffer_size' (bytes)
        """
        super().__init__(connection_details)

        if 'host' not in self._connection_details:
            raise ValueError("Missing 'host' in connection_details for TcpTransport.")

        self._host = str(self._connection_details['host'])
        self._port = int(self._connection_details.get('port') or alien_const.DEFAULT_TCP_PORT)
        self._connect_timeout = self._connection_details.get('connect_timeout', alien_const.DEFAULT_TIMEOUT)
        self._read_buffer_size = self._connection_details.get('buffer_size', DEFAULT_TCP_BUFFER_SIZE)

        self._sock: Optional[socket.socket] = None
        self._buffer = bytearray()

        logger.info(f"TcpTransport initialized for {self._host}:{self._port}")

    @classmethod
    def from_address(cls, address: str, **details: Any) -> "TcpTransport":
        """Builds a transport from ``"host"`` or ``"host:port"``."""
        match = re.fullmatch(r'([\w.-]+):(\d+)', address)
        if match:
            host, port = match.group(1), int(match.group(2))
        else:
            host, port = address, alien_const.DEFAULT_TCP_PORT
        return cls({'host': host, 'port': port, **details})

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port

    def connect(self) -> None:
        """Opens the TCP connection."""
        if self._connected:
            logger.warning(f"TCP connection to {self.host}:{self.port} already established.")
            return

        logger.info(f"Connecting to TCP endpoint {self.host}:{self.port}...")
        try:
            self._sock = socket.create_connection((self.host, self.port), timeout=self._connect_timeout)
        except socket.timeout as e:
            logger.error(f"Timeout during TCP connection attempt to {self.host}:{self.port}: {e}")
            raise NetworkConnectionError(host=self.host, port=self.port, message="Connection attempt timed out.", original_exception=e) from e
        except ConnectionRefusedError as e:
            logger.error(f"Connection refused when connecting to {self.host}:{self.port}: {e}")
            raise NetworkConnectionError(host=self.host, port=self.port, message="Connection refused.", original_exception=e) from e
        except OSError as e:
            logger.error(f"OS error connecting to {self.host}:{self.port}: {e}")
            raise NetworkConnectionError(host=self.host, port=self.port, message=f"OS error: {e}", original_exception=e) from e

        self._buffer.clear()
        self._connected = True
        logger.info(f"TCP connection to {self.host}:{self.port} established.")

    def disconnect(self) -> None:
        """Closes the TCP connection."""
        sock, self._sock = self._sock, None
        if sock is None and not self._connected:
            return

        logger.info(f"Disconnecting from TCP endpoint {self.host}:{self.port}...")
        self._connected = False
        self._buffer.clear()
        if sock is not None:
            try:
                sock.close()
            except OSError as e:
                logger.error(f"Error closing TCP socket for {self.host}:{self.port}: {e}")
        logger.info(f"TCP connection to {self.host}:{self.port} disconnected.")

    def write(self, data: bytes, timeout: Optional[float] = None) -> int:
        """Sends all bytes over the TCP connection."""
        self._ensure_connected()

        logger.debug(f"TCP sending ({len(data)} bytes) to {self.host}:{self.port}: {data.hex(' ').upper()}")
        try:
            self._sock.settimeout(timeout)
            self._sock.sendall(data)
        except socket.timeout as e:
            logger.error(f"Write timeout to {self.host}:{self.port}")
            raise TimeoutError(f"Write timeout to {self.host}:{self.port}", original_exception=e) from e
        except (ConnectionResetError, BrokenPipeError) as e:
            logger.error(f"Connection error while writing to {self.host}:{self.port}: {e}")
            self._connected = False
            raise NetworkConnectionError(host=self.host, port=self.port, message="Connection lost during send.", original_exception=e) from e
        except OSError as e:
            logger.error(f"OS error while writing to {self.host}:{self.port}: {e}")
            raise WriteError(f"OS error during send to {self.host}:{self.port}", original_exception=e) from e
        return len(data)

    def read_until(self, delimiter: str, timeout: Optional[float] = None) -> str:
        """Receives from the socket until the delimiter is buffered."""
        self._ensure_connected()

        expected = delimiter.encode(alien_const.ENCODING)
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            index = self._buffer.find(expected)
            if index != -1:
                data = bytes(self._buffer[:index])
                del self._buffer[:index + len(expected)]
                return data.decode(alien_const.ENCODING, errors='replace')

            remaining = None
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    logger.error(f"Timed out waiting for {delimiter!r} from {self.host}:{self.port}")
                    raise TimeoutError(f"Timed out waiting for {delimiter!r} from {self.host}:{self.port}")
            try:
                self._sock.settimeout(remaining)
                chunk = self._sock.recv(self._read_buffer_size)
            except socket.timeout as e:
                logger.error(f"Timed out waiting for {delimiter!r} from {self.host}:{self.port}")
                raise TimeoutError(f"Timed out waiting for {delimiter!r} from {self.host}:{self.port}", original_exception=e) from e
            except (ConnectionResetError, BrokenPipeError) as e:
                logger.error(f"Connection error while reading from {self.host}:{self.port}: {e}")
                self._connected = False
                raise NetworkConnectionError(host=self.host, port=self.port, message="Connection lost during read.", original_exception=e) from e
            except OSError as e:
                logger.error(f"OS error while reading from {self.host}:{self.port}: {e}")
                raise ReadError(f"OS error during read from {self.host}:{self.port}", original_exception=e) from e

            if not chunk:
                logger.warning(f"TCP connection closed by peer {self.host}:{self.port}.")
                self._connected = False
                raise NetworkConnectionError(host=self.host, port=self.port, message="Connection closed by peer.")
            logger.debug(f"TCP received ({len(chunk)} bytes) from {self.host}:{self.port}: {chunk.hex(' ').upper()}")
            self._buffer.extend(chunk)
