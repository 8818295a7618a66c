# alien_rfid/core/tag.py

"""Value object for one tag seen by the reader."""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from alien_rfid.core.exceptions import ValidationError


def normalize_tag_id(raw_id: str) -> str:
    """Uppercases a tag id and drops every non-hex character (spaces, dashes)."""
    return re.sub(r'[^0-9A-F]', '', str(raw_id).upper())


@dataclass(frozen=True, order=True)
class TagRecord:
    """
    One tag observation.

    Equality, ordering and hashing use the id only, so two reads of the
    same tag from different antennas compare equal. Auxiliary fields from
    the tag list (``crc``, ``disc``, ``count``, ...) are kept in
    ``attributes`` as a read-only mapping.
    """
    id: str
    antenna: Optional[int] = field(default=None, compare=False)
    attributes: Mapping[str, str] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self):
        tag_id = normalize_tag_id(self.id)
        if not tag_id:
            raise ValidationError(f"Tag id {self.id!r} holds no hex digits")
        object.__setattr__(self, 'id', tag_id)
        object.__setattr__(self, 'antenna', self._coerce_antenna(self.antenna))
        object.__setattr__(self, 'attributes', MappingProxyType(dict(self.attributes)))

    @staticmethod
    def _coerce_antenna(antenna: Any) -> Optional[int]:
        if antenna is None or antenna == '':
            return None
        try:
            value = int(str(antenna).strip())
        except ValueError as e:
            raise ValidationError(f"Invalid antenna {antenna!r}") from e
        if value < 0:
            raise ValidationError(f"Invalid antenna {antenna!r}: must not be negative")
        return value

    @property
    def ant(self) -> Optional[int]:
        """Alias for ``antenna``, matching the tag-list field name."""
        return self.antenna

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Returns an auxiliary tag-list field by (case-insensitive) name."""
        return self.attributes.get(key.lower(), default)

    def __str__(self):
        return self.id


def tagcmp(first: TagRecord, second: TagRecord) -> int:
    """Compares two tags by id; returns -1, 0 or 1."""
    return (first.id > second.id) - (first.id < second.id)
