# alien_rfid/core/overrides.py

import logging
from typing import Any, Dict, List

from alien_rfid.core.exceptions import OverrideStackError

logger = logging.getLogger(__name__)

Snapshot = Dict[str, Any]

class OverrideStack:
    """
    LIFO stack of setting snapshots.

    Each snapshot maps lowercase setting names to the decoded values they
    had before an override was applied. A pop hands back exactly the
    snapshot of the matching push.
    """

    def __init__(self):
        self._snapshots: List[Snapshot] = []

    def push(self, snapshot: Snapshot) -> int:
        """Stores a snapshot and returns the new depth."""
        self._snapshots.append({name.lower(): value for name, value in snapshot.items()})
        logger.debug(f"Pushed override snapshot {sorted(snapshot)} (depth {len(self._snapshots)})")
        return len(self._snapshots)

    def pop(self) -> Snapshot:
        """
        Removes and returns the most recent snapshot.

        Raises:
            OverrideStackError: If the stack is empty.
        """
        if not self._snapshots:
            logger.error("Attempt to pop settings overrides from an empty stack")
            raise OverrideStackError("No settings overrides to pop.")
        snapshot = self._snapshots.pop()
        logger.debug(f"Popped override snapshot {sorted(snapshot)} (depth {len(self._snapshots)})")
        return snapshot

    def __len__(self) -> int:
        return len(self._snapshots)

    def __bool__(self) -> bool:
        return bool(self._snapshots)
