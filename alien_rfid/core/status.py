# alien_rfid/core/status.py

from enum import Enum, auto

class ConnectionStatus(Enum):
    """Represents the session state of a reader client."""
    CONNECTING = auto() # Login and initialization in progress
    CONNECTED = auto()
    STALE = auto() # After reboot or a failed exchange; discard the client
    CLOSED = auto()

    def __str__(self):
        return self.name
