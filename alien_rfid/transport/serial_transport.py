# alien_rfid/transport/serial_transport.py

import logging
import time
from typing import Optional, Any, Dict

import serial

from alien_rfid.transport.base import BaseTransport
from alien_rfid.protocols import constants as alien_const
from alien_rfid.core.exceptions import SerialConnectionError, ReadError, WriteError, TimeoutError

logger = logging.getLogger(__name__)

DEFAULT_SERIAL_SETTINGS = {
    'baudrate': alien_const.DEFAULT_BAUDRATE,
    'bytesize': serial.EIGHTBITS,
    'parity': serial.PARITY_NONE,
    'stopbits': serial.STOPBITS_ONE,
    'xonxoff': False,
    'rtscts': False,
    'dsrdtr': False,
}

PURGE_READ_WINDOW = 0.25 # Seconds of silence that end the connect-time purge
PURGE_CHUNK_SIZE = 4096
PURGE_MAX_ROUNDS = 40

class SerialTransport(BaseTransport):
    """
    Blocking serial communication transport using pyserial.
    """

    def __init__(self, connection_details: Dict[str, Any]):
        """
        Initializes the Serial Transport.

        Args:
            connection_details: Dictionary containing serial port settings.
                Required: 'port' (e.g., '/dev/ttyUSB0', 'COM3')
                Optional: 'baudrate' (or 'baud'), 'bytesize', 'parity', 'stopbits', etc.
                          Defaults are taken from DEFAULT_SERIAL_SETTINGS.
        """
        super().__init__(connection_details)

        if 'port' not in self._connection_details:
            raise ValueError("Missing 'port' in connection_details for SerialTransport.")

        settings = dict(self._connection_details)
        self._port = settings.pop('port')
        settings.pop('timeout', None) # Per-call timeouts come from the client
        if 'baud' in settings:
            settings['baudrate'] = int(settings.pop('baud'))

        self._serial_settings = DEFAULT_SERIAL_SETTINGS.copy()
        self._serial_settings.update(settings)
        self._serial: Optional[serial.Serial] = None

        logger.info(f"SerialTransport initialized for port {self._port} with settings: {self._serial_settings}")

    @property
    def port(self) -> str:
        return self._port

    def connect(self) -> None:
        """Opens the serial port and purges any stale bytes from the line."""
        if self._connected:
            logger.warning(f"Serial port {self._port} already connected.")
            return

        logger.info(f"Connecting to serial port {self._port}...")
        try:
            self._serial = serial.Serial(
                port=self._port, timeout=PURGE_READ_WINDOW, **self._serial_settings
            )
            self._connected = True
            self._purge()
        except serial.SerialException as e:
            logger.error(f"Failed to connect to serial port {self._port}: {e}")
            self._close_port()
            raise SerialConnectionError(port=self._port, message=str(e), original_exception=e) from e
        logger.info(f"Serial port {self._port} connected successfully.")

    def _purge(self) -> None:
        """Drops whatever the reader had queued before we connected."""
        self._serial.reset_input_buffer()
        self._serial.reset_output_buffer()
        self._serial.write(alien_const.LINE_TERMINATOR)
        self._serial.timeout = PURGE_READ_WINDOW
        for _ in range(PURGE_MAX_ROUNDS):
            junk = self._serial.read(PURGE_CHUNK_SIZE)
            if not junk:
                break
            logger.debug(f"Discarding {len(junk)} bytes of junk data on {self._port}: {junk!r}")
        else:
            logger.warning(f"Serial port {self._port} kept sending data during purge; continuing anyway.")
        self._serial.reset_input_buffer()

    def disconnect(self) -> None:
        """Closes the serial port."""
        if not self._connected and self._serial is None:
            return
        logger.info(f"Disconnecting from serial port {self._port}...")
        self._close_port()
        logger.info(f"Serial port {self._port} disconnected.")

    def _close_port(self) -> None:
        port, self._serial = self._serial, None
        self._connected = False
        if port is not None:
            try:
                port.close()
            except serial.SerialException as e:
                logger.error(f"Error closing serial port {self._port}: {e}")

    def write(self, data: bytes, timeout: Optional[float] = None) -> int:
        """Writes all bytes to the serial port."""
        self._ensure_connected()

        logger.debug(f"Serial sending ({len(data)} bytes) on {self._port}: {data.hex(' ').upper()}")
        deadline = None if timeout is None else time.monotonic() + timeout
        self._serial.write_timeout = timeout
        sent = 0
        try:
            while sent < len(data):
                if deadline is not None and time.monotonic() > deadline:
                    raise serial.SerialTimeoutException("Write timeout")
                sent += self._serial.write(data[sent:]) or 0
        except serial.SerialTimeoutException as e:
            logger.error(f"Write timeout on serial port {self._port} after {sent} of {len(data)} bytes")
            raise TimeoutError(f"Write timeout on serial port {self._port}", original_exception=e) from e
        except serial.SerialException as e:
            logger.error(f"Failed to write to serial port {self._port}: {e}")
            raise WriteError(f"Failed to write to serial port {self._port}", original_exception=e) from e
        return sent

    def read_until(self, delimiter: str, timeout: Optional[float] = None) -> str:
        """Reads from the serial port until the delimiter is seen."""
        self._ensure_connected()

        expected = delimiter.encode(alien_const.ENCODING)
        self._serial.timeout = timeout
        try:
            data = self._serial.read_until(expected)
        except serial.SerialException as e:
            logger.error(f"Serial error during read on {self._port}: {e}")
            raise ReadError(f"Failed to read from serial port {self._port}", original_exception=e) from e

        logger.debug(f"Serial received ({len(data)} bytes) on {self._port}: {data.hex(' ').upper()}")
        if not data.endswith(expected):
            logger.error(f"Timed out waiting for {delimiter!r} on {self._port} ({len(data)} bytes received)")
            raise TimeoutError(f"Timed out waiting for {delimiter!r} on serial port {self._port}")
        return data[:-len(expected)].decode(alien_const.ENCODING, errors='replace')
