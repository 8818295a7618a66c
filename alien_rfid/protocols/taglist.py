# alien_rfid/protocols/taglist.py

"""
Parsing of the reader's text tag list.

A tag list answer holds one line per tag, e.g.::

    Tag:8000 8004 3306 5081, CRC:CB1D, Disc:2004/06/09 11:01:43, Count:3, Ant:0

Lines that do not start with ``Tag:`` (such as ``(No Tags)``) are skipped,
and so are tag lines whose id or antenna cannot be parsed.
"""

import logging
import re
from typing import Dict, List, Optional

from alien_rfid.protocols import constants as alien_const
from alien_rfid.protocols.framing import split_lines
from alien_rfid.core.tag import TagRecord
from alien_rfid.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

_FIELD_PATTERN = re.compile(r'^(.*?):(.*)', re.DOTALL)


def parse_tag_line(line: str) -> Optional[Dict[str, str]]:
    """
    Splits one tag line into lowercase-keyed fields.

    Returns:
        A dict holding ``id`` (the raw ``Tag`` value) and every other field,
        or None when the line is not a tag line.
    """
    if not line.lower().startswith(alien_const.TAG_LINE_PREFIX.lower()):
        return None
    fields: Dict[str, str] = {}
    for prop in re.split(r',\s*', line):
        match = _FIELD_PATTERN.match(prop)
        if not match:
            continue
        key, value = match.group(1).lower(), match.group(2)
        if key == alien_const.TAG_ID_FIELD:
            fields['id'] = value
        else:
            fields[key] = value
    return fields


def parse_taglist(payload: str) -> List[TagRecord]:
    """Parses a tag list answer into TagRecords, in reader order."""
    tags: List[TagRecord] = []
    for line in split_lines(payload):
        fields = parse_tag_line(line)
        if fields is None:
            continue
        raw_id = fields.pop('id', '')
        try:
            tags.append(TagRecord(
                id=raw_id,
                antenna=fields.get(alien_const.TAG_ANTENNA_FIELD),
                attributes=fields,
            ))
        except ValidationError as e:
            logger.warning(f"Skipping malformed tag line {line!r}: {e}")
    logger.debug(f"Parsed {len(tags)} tag(s) from tag list")
    return tags
