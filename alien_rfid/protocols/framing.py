# alien_rfid/protocols/framing.py

import re
from typing import List, Optional

from alien_rfid.protocols import constants as alien_const
from alien_rfid.core.exceptions import ValidationError

# --- Command Building ---

def build_command(command: str) -> bytes:
    """
    Frames a command for the wire.

    The frame is the 0x01 prefix, the ASCII command text and CRLF. The
    prefix tells the reader the command comes from a program, so it
    answers with a NUL-terminated response instead of an interactive
    prompt.

    Args:
        command: The command text, e.g. ``"get PersistTime"``.

    Returns:
        The complete command frame.

    Raises:
        ValidationError: If the text is empty, is not ASCII, or contains
            CR, LF or NUL (which would break the framing).
    """
    if not command:
        raise ValidationError("Command text must not be empty.")
    if any(c in command for c in ('\r', '\n', '\x00', '\x01')):
        raise ValidationError(f"Command text contains framing characters: {command!r}")
    try:
        payload = command.encode(alien_const.ENCODING)
    except UnicodeEncodeError as e:
        raise ValidationError(f"Command text must be ASCII: {command!r}") from e
    return alien_const.COMMAND_PREFIX + payload + alien_const.LINE_TERMINATOR


def build_line(text: str) -> bytes:
    """Frames a bare line (no command prefix), as used during login."""
    return text.encode(alien_const.ENCODING) + alien_const.LINE_TERMINATOR

# --- Response Handling ---

def strip_echo(response: str, command: str) -> str:
    """Removes an echoed ``<command>\\n`` from the start of a response body."""
    echo = command + alien_const.ECHO_TERMINATOR
    if response.startswith(echo):
        return response[len(echo):]
    return response


def parse_get_response(response: str, name: str) -> Optional[str]:
    """
    Extracts the value from a ``<Name> = <value>`` answer.

    The name is matched case-insensitively, and trailing whitespace and
    line endings are dropped from the value.

    Returns:
        The raw value string, or None when the answer has another shape.
    """
    match = re.match(
        rf'^{re.escape(name)}\s+.*?=\s*(.*?)[\s\r\n]*$',
        response,
        re.IGNORECASE | re.DOTALL,
    )
    if match:
        return match.group(1)
    return None


def is_set_acknowledged(response: str, name: str) -> bool:
    """True when a set answer starts with the setting name and a space."""
    return re.match(rf'^{re.escape(name)} ', response, re.IGNORECASE) is not None


def split_lines(payload: str) -> List[str]:
    """Splits a multi-line response payload on CRLF."""
    return payload.split(alien_const.RESPONSE_LINE_SEPARATOR)
