# alien_rfid/core/exceptions.py

"""Custom exceptions for the alien_rfid library."""

from typing import Optional


class AlienRfidError(Exception):
    """Base exception class for all alien_rfid errors."""
    def __init__(self, message="An unspecified RFID error occurred."):
        super().__init__(message)


# --- Transport Layer Exceptions ---

class TransportError(AlienRfidError):
    """
    Base exception for errors related to the communication transport layer
    (Serial, TCP, Mock). It often wraps a lower-level exception.
    """
    def __init__(self, message="Transport layer error.", original_exception: Exception | None = None):
        """
        Args:
            message: A description of the transport error.
            original_exception: The underlying exception that caused this error (e.g., from pyserial or socket).
        """
        super().__init__(message)
        self.original_exception = original_exception

    def __str__(self):
        base_msg = super().__str__()
        if self.original_exception:
            orig_exc_type = type(self.original_exception).__name__
            orig_exc_msg = str(self.original_exception)
            return f"{base_msg} Original exception: [{orig_exc_type}] {orig_exc_msg}"
        return base_msg


class ConnectionError(TransportError):
    """
    Raised when opening or closing the link fails, when the peer drops the
    link, or when a closed or stale client is used again.
    """
    def __init__(self, message="Failed to establish connection.", original_exception: Exception | None = None):
        super().__init__(message, original_exception)


class SerialConnectionError(ConnectionError):
    """
    Specific connection error related to Serial transport.
    Common reasons include:
    - Port does not exist.
    - Insufficient permissions to access the port.
    - Port is already in use by another application.
    """
    def __init__(self, port: str | None = None, message="Serial connection error.", original_exception: Exception | None = None):
        msg = "Serial connection error"
        if port:
            msg += f" on port '{port}'"
        msg += f": {message}"
        super().__init__(msg, original_exception)
        self.port = port


class NetworkConnectionError(ConnectionError):
    """
    Specific connection error related to TCP transport.
    Common reasons include:
    - Host unreachable.
    - Connection refused (no service listening on the target port).
    - DNS resolution failed.
    """
    def __init__(self, host: str | None = None, port: int | None = None, message="Network connection error.", original_exception: Exception | None = None):
        msg = "Network connection error"
        if host and port:
            msg += f" to {host}:{port}"
        elif host:
            msg += f" to host '{host}'"
        msg += f": {message}"
        super().__init__(msg, original_exception)
        self.host = host
        self.port = port


class ReadError(TransportError):
    """Exception raised when reading data from the transport fails unexpectedly."""
    def __init__(self, message="Failed to read data from transport.", original_exception: Exception | None = None):
        super().__init__(message, original_exception)


class WriteError(TransportError):
    """Exception raised when writing data to the transport fails unexpectedly."""
    def __init__(self, message="Failed to write data to transport.", original_exception: Exception | None = None):
        super().__init__(message, original_exception)


class TimeoutError(TransportError):
    """
    Exception raised when a write or a delimiter read does not complete
    within the configured timeout. The byte stream position is undefined
    afterwards; the client that saw it must be discarded.
    """
    def __init__(self, message="Operation timed out waiting for reader response.", original_exception: Exception | None = None):
        super().__init__(message, original_exception)


# --- Protocol Layer Exceptions ---

class ProtocolError(AlienRfidError):
    """Exception related to command framing or response parsing."""
    def __init__(self, message="Protocol error."):
        super().__init__(message)


class UnexpectedResponseError(ProtocolError):
    """
    Exception raised when the reader answers a command with text the
    client cannot make sense of.
    """
    def __init__(self, message="Received unexpected response from reader.", command: Optional[str] = None, response: Optional[str] = None):
        super().__init__(message)
        self.command = command
        self.response = response

    def __str__(self):
        base_msg = super().__str__()
        details = []
        if self.command is not None:
            details.append(f"Command: {self.command!r}")
        if self.response is not None:
            details.append(f"Response: {self.response[:64]!r}{'...' if len(self.response) > 64 else ''}")
        if details:
            return f"{base_msg} ({'; '.join(details)})"
        return base_msg


class OverrideStackError(ProtocolError):
    """Raised when the settings overlay stack is used out of balance."""
    def __init__(self, message="Settings override stack is out of balance."):
        super().__init__(message)


# --- Session / Input Exceptions ---

class AuthError(AlienRfidError):
    """Raised when the reader rejects the login handshake."""
    def __init__(self, message="Login failed.", reply: Optional[str] = None):
        super().__init__(message)
        self.reply = reply


class ValidationError(AlienRfidError, ValueError):
    """Raised when caller input does not follow the expected grammar."""
    def __init__(self, message="Invalid value."):
        super().__init__(message)


class UnknownSettingError(AlienRfidError, KeyError):
    """Raised when a setting name is not in the setting registry."""
    def __init__(self, name: str):
        super().__init__(f"Unknown setting '{name}'")
        self.name = name

    def __str__(self):
        # KeyError would otherwise repr() the message
        return self.args[0]
