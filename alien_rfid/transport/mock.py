# alien_rfid/transport/mock.py

import logging
import re
from typing import Optional, Any, Dict, List, Tuple

from alien_rfid import __version__
from alien_rfid.transport.base import BaseTransport
from alien_rfid.protocols import constants as alien_const
from alien_rfid.core.exceptions import ProtocolError, TimeoutError

logger = logging.getLogger(__name__)

INITIAL_SETTINGS: Dict[str, str] = {
    'time': '',
    'persisttime': '5',
    'acquiremode': 'Inventory',
    'taglistantennacombine': 'off',
    'mask': 'All Tags',
    'antennasequence': '0',
    'readerversion': f"Reader Type: RFID-Alien-Reader-Test, Ent. SW Rev: {__version__}",
}

CANNED_TAGLIST = (
    "Tag:8000 8004 3306 5081, CRC:CB1D, Disc:2004/06/09 11:01:43, Count:3, Ant:0\r\n"
    "Tag:8000 8004 2812 6165, CRC:DA08, Disc:2004/06/09 11:01:43, Count:1, Ant:0"
)

_COMMAND_LINE = re.compile(rb'^\x01?([^\r\n]*)\r?\n')

class MockTransport(BaseTransport):
    """
    An in-memory emulation of an Alien reader, for testing and simulation.

    Commands written to it are answered from a case-insensitive settings
    table seeded with INITIAL_SETTINGS. ``get TagList`` returns two canned
    tags while antenna 0 is in the AntennaSequence, and ``(No Tags)``
    otherwise. Every command received is recorded for inspection.
    """

    def __init__(self, connection_details: Optional[Dict[str, Any]] = None, name: str = "Mock",
                 credentials: Optional[Tuple[str, str]] = None):
        """
        Initializes the Mock Transport.

        Args:
            connection_details: Not used but kept for interface compatibility.
            name: A name for this mock instance for logging purposes.
            credentials: Optional (login, password) pair; when given, the
                         emulator expects the login handshake first.
        """
        super().__init__(connection_details if connection_details is not None else {})
        self._name = name
        self._credentials = credentials
        self._auth_state = 'login' if credentials else 'ready'
        self._pending_login: Optional[str] = None
        self.settings: Dict[str, str] = dict(INITIAL_SETTINGS)
        self._inbound = bytearray()
        self._outbound = ''
        self._received_commands: List[str] = []
        self._connected = True

        logger.info(f"MockTransport '{self._name}' initialized.")

    def connect(self) -> None:
        self._connected = True
        logger.info(f"[{self._name}] Mock connection established.")

    def disconnect(self) -> None:
        if not self._connected:
            return
        self._connected = False
        logger.info(f"[{self._name}] Mock connection closed.")

    def write(self, data: bytes, timeout: Optional[float] = None) -> int:
        """Buffers the bytes and answers every complete command line."""
        self._ensure_connected()
        logger.debug(f"[{self._name}] Received: {data.hex(' ').upper()}")
        self._inbound.extend(data)
        while True:
            match = _COMMAND_LINE.match(self._inbound)
            if not match:
                break
            line = match.group(1).decode(alien_const.ENCODING, errors='replace')
            del self._inbound[:match.end()]
            self._handle_line(line)
        return len(data)

    def read_until(self, delimiter: str, timeout: Optional[float] = None) -> str:
        """Returns buffered answer text up to the delimiter."""
        self._ensure_connected()
        index = self._outbound.find(delimiter)
        if index == -1:
            raise TimeoutError(f"[{self._name}] Attempt to read {delimiter!r} with no data buffered.")
        data = self._outbound[:index]
        self._outbound = self._outbound[index + len(delimiter):]
        return data

    # --- Reader emulation ---

    def _respond(self, text: str) -> None:
        self._outbound += text

    def _handle_line(self, line: str) -> None:
        if self._auth_state != 'ready':
            self._handle_login_line(line)
            return

        self._received_commands.append(line)
        parts = line.split(' ', 2)
        verb = parts[0].lower()
        var = parts[1] if len(parts) > 1 else ''
        rest = parts[2] if len(parts) > 2 else ''

        if verb == alien_const.VERB_GET:
            self._handle_get(var)
        elif verb == alien_const.VERB_SET:
            self._handle_set(var, rest)
        elif verb == alien_const.CMD_REBOOT:
            logger.info(f"[{self._name}] Rebooting; settings reset to defaults.")
            self.settings = dict(INITIAL_SETTINGS)
        elif verb in (alien_const.CMD_SLEEP.lower(), alien_const.CMD_WAKE.lower()):
            self._respond(f"{parts[0]}\r\n\0")
        elif line:
            self._respond(f"Error 1: Command not understood: {line}\r\n\0")

    def _handle_get(self, var: str) -> None:
        key = var.lower()
        if key == 'taglist':
            if re.search(r'\b0\b', self.settings.get('antennasequence', '')):
                self._respond(CANNED_TAGLIST + "\r\n\0")
            else:
                self._respond(alien_const.NO_TAGS_MARKER + "\r\n\0")
        elif key == 'readerversion':
            self._respond(self.settings[key] + "\r\n\0")
        else:
            self._respond(f"{var} = {self.settings.get(key, '')}\r\n\0")

    def _handle_set(self, var: str, rest: str) -> None:
        match = re.match(r'^\s*=\s*', rest)
        if not match:
            raise ProtocolError(f"[{self._name}] Received invalid set command: set {var} {rest}")
        self.settings[var.lower()] = rest[match.end():]
        self._respond(f"{var} = {self.settings[var.lower()]}\r\n\0")

    def _handle_login_line(self, line: str) -> None:
        login, password = self._credentials
        if self._auth_state == 'login':
            self._pending_login = line
            self._auth_state = 'password'
            self._respond(alien_const.PASSWORD_PROMPT)
            return
        if self._pending_login == login and line == password:
            logger.info(f"[{self._name}] Login accepted for '{login}'.")
            self._auth_state = 'ready'
            self._respond("\r\nAlien>")
        else:
            logger.info(f"[{self._name}] Login rejected for '{self._pending_login}'.")
            self._auth_state = 'login'
            self._respond("\r\nError: Invalid login\r\nUsername>")

    # --- Mock Control Methods ---

    def get_received_commands(self) -> List[str]:
        """Retrieves and clears the record of received command lines."""
        commands = list(self._received_commands)
        self._received_commands.clear()
        return commands

    def add_response(self, text: str) -> None:
        """Queues raw answer text, e.g. to emulate unsolicited output."""
        self._outbound += text

    def clear_responses(self) -> None:
        """Drops any buffered answer text."""
        self._outbound = ''
