# alien_rfid/protocols/settings.py

"""
Setting registry and codecs for the Alien reader properties.

Every property the client understands is a member of :class:`Setting`.
The static :data:`REGISTRY` binds each member to an access class and an
(encode, decode) pair: ``encode`` turns the value a caller passes to
``set()`` into the raw string sent on the wire, ``decode`` turns the raw
string the reader reports into the value ``get()`` returns.
"""

import datetime
import re
import time
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional

from alien_rfid.protocols import constants as alien_const
from alien_rfid.core.exceptions import ValidationError, UnknownSettingError


class Access(Enum):
    """How a setting is reached."""
    REMOTE = auto()     # get/set round trip to the reader
    READ_ONLY = auto()  # reader reports it, set is refused
    INTERNAL = auto()   # forced by the client itself, set is refused
    LOCAL = auto()      # client state only, never sent


class Setting(Enum):
    """Recognized setting identifiers. Values are the names used on the wire."""
    ACQUIRE_MODE = 'AcquireMode'
    PERSIST_TIME = 'PersistTime'
    ACQ_CYCLES = 'AcqCycles'
    ACQ_ENTER_WAKE_COUNT = 'AcqEnterWakeCount'
    ACQ_COUNT = 'AcqCount'
    ACQ_SLEEP_COUNT = 'AcqSleepCount'
    ACQ_EXIT_WAKE_COUNT = 'AcqExitWakeCount'
    TAG_LIST_ANTENNA_COMBINE = 'TagListAntennaCombine'
    MASK = 'Mask'
    TIME = 'Time'
    ANTENNA_SEQUENCE = 'AntennaSequence'
    READER_VERSION = 'ReaderVersion'
    READER_VERSION_STRING = 'ReaderVersionString'
    TAG_LIST_FORMAT = 'TagListFormat'
    DEBUG = 'Debug'
    TIMEOUT = 'Timeout'

    @property
    def wire_name(self) -> str:
        return self.value

    @classmethod
    def lookup(cls, name: str) -> Optional["Setting"]:
        """Case-insensitive lookup by name. Returns None for unknown names."""
        if isinstance(name, Setting):
            return name
        if not isinstance(name, str):
            return None
        return _SETTINGS_BY_LOWER_NAME.get(name.lower())


_SETTINGS_BY_LOWER_NAME: Dict[str, Setting] = {s.value.lower(): s for s in Setting}


@dataclass(frozen=True)
class ReaderVersion:
    """Parsed form of the reader's version report."""
    string: str
    software: Optional[str] = None
    country_code: Optional[str] = None
    reader_type: Optional[str] = None
    firmware: Optional[str] = None

    _FIELD_BY_KEY = {
        alien_const.VERSION_KEY_SOFTWARE: 'software',
        alien_const.VERSION_KEY_COUNTRY_CODE: 'country_code',
        alien_const.VERSION_KEY_READER_TYPE: 'reader_type',
        alien_const.VERSION_KEY_FIRMWARE: 'firmware',
    }

    @classmethod
    def decode(cls, text: str) -> "ReaderVersion":
        """Decodes comma-separated ``Key: Value`` pairs. Unknown keys are ignored."""
        fields: Dict[str, str] = {}
        for match in re.finditer(r'([^:]+):\s*([^\r\s,]+),?\s*', text, re.DOTALL):
            field_name = cls._FIELD_BY_KEY.get(match.group(1).strip())
            if field_name:
                fields[field_name] = match.group(2)
        return cls(string=text, **fields)


# --- Plain values ---

def encode_passthrough(value: Any) -> str:
    return str(value)


def decode_passthrough(raw: str) -> str:
    return raw

# --- Mask ---

_MASK_PATTERN = re.compile(r'([0-9a-fA-F]*)(?:/(\d*))?(?:/(\d*))?')
_MASK_RAW_PATTERN = re.compile(r'^(\d+),\s*(\d+),\s*(.*)$')


def encode_mask(value: Any) -> str:
    """
    Encodes ``<hex>[/<len>[/<start>]]`` into ``"<len>, <start>, <hex byte pairs>"``.

    The bit length defaults to four bits per hex digit given and the start
    offset to 0. An odd number of digits is padded with a trailing ``0``.
    An empty mask (length 0) matches all tags.

    Raises:
        ValidationError: If the value does not follow the mask grammar.
    """
    text = '' if value is None else str(value)
    match = _MASK_PATTERN.fullmatch(text)
    if not match:
        raise ValidationError(f"Invalid mask {text!r}: expected <hex>[/<len>[/<start>]]")
    bits, length, start = match.groups()
    bit_length = int(length) if length else 0
    if not bit_length:
        bit_length = len(bits) * 4
    if len(bits) % 2 == 1:
        bits += '0'
    start_bit = int(start) if start else 0
    byte_groups = ' '.join(bits[i:i + 2] for i in range(0, len(bits), 2))
    return f"{bit_length}, {start_bit}, {byte_groups}"


def decode_mask(raw: str) -> Optional[str]:
    """Decodes the reader's mask report back to ``<hex>/<len>[/<start>]``."""
    if alien_const.MASK_ALL_TAGS in raw.lower():
        return ''
    match = _MASK_RAW_PATTERN.match(raw)
    if not match:
        return None
    bit_length, start_bit = int(match.group(1)), int(match.group(2))
    if bit_length == 0:
        return ''
    bits = re.sub(r'\s', '', match.group(3))
    result = f"{bits}/{bit_length}"
    if start_bit:
        result += f"/{start_bit}"
    return result

# --- Time ---

_TIME_RAW_PATTERN = re.compile(r'(\d+)/(\d+)/(\d+) (\d+):(\d+):(\d+)')


def encode_time(value: Any) -> str:
    """
    Encodes a reader clock value.

    Accepts epoch seconds, a ``datetime`` or a preformatted string. Any
    string holding a non-digit is sent as is. An empty or zero value means
    the host's current time. No timezone correction is attempted: numbers
    are rendered in host-local time.
    """
    if isinstance(value, datetime.datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.strftime(alien_const.TIME_FORMAT)
    if isinstance(value, str):
        if re.search(r'\D', value):
            return value
        seconds = int(value) if value else 0
    elif value is None:
        seconds = 0
    else:
        seconds = value
    if not seconds:
        seconds = time.time()
    return time.strftime(alien_const.TIME_FORMAT, time.localtime(seconds))


def decode_time(raw: str) -> Optional[int]:
    """
    Decodes ``YYYY/MM/DD HH:MM:SS`` (reader-local) to epoch seconds.

    Years past 2045 do not fit a 32-bit epoch and decode to 0xFFFFFFFF.
    """
    match = _TIME_RAW_PATTERN.search(raw)
    if not match:
        return None
    year, month, day, hour, minute, second = (int(g) for g in match.groups())
    if year > alien_const.TIME_MAX_YEAR:
        return alien_const.TIME_OVERFLOW_SENTINEL
    try:
        return int(time.mktime((year, month, day, hour, minute, second, 0, 0, -1)))
    except (OverflowError, ValueError):
        return None

# --- AntennaSequence ---

def encode_antenna_sequence(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ', '.join(str(antenna) for antenna in value)
    return str(value)


def decode_antenna_sequence(raw: str) -> List[str]:
    """Splits ``"1, 0*"`` into ``["1", "0"]``; the ``*`` marks the current antenna."""
    tokens = [re.sub(r'\*$', '', token) for token in re.split(r',\s*', raw)]
    while tokens and tokens[-1] == '':
        tokens.pop()
    return tokens

# --- Local settings ---

def encode_debug(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ('', '0', 'off', 'false', 'no')
    return bool(value)


def encode_timeout(value: Any) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid timeout {value!r}: expected seconds as a number") from e
    if timeout <= 0:
        raise ValidationError(f"Invalid timeout {value!r}: must be positive")
    return timeout


def decode_local(value: Any) -> Any:
    return value


@dataclass(frozen=True)
class SettingSpec:
    """Registry entry binding a setting to its access class and codec."""
    setting: Setting
    access: Access
    encode: Callable[[Any], Any]
    decode: Callable[[Any], Any]
    query: Optional[str] = None # Raw command whose whole answer is decoded

    @property
    def name(self) -> str:
        return self.setting.wire_name


def _remote(setting: Setting,
            encode: Callable[[Any], Any] = encode_passthrough,
            decode: Callable[[Any], Any] = decode_passthrough) -> SettingSpec:
    return SettingSpec(setting, Access.REMOTE, encode, decode)


REGISTRY: Dict[Setting, SettingSpec] = {
    spec.setting: spec for spec in (
        _remote(Setting.ACQUIRE_MODE),
        _remote(Setting.PERSIST_TIME),
        _remote(Setting.ACQ_CYCLES),
        _remote(Setting.ACQ_ENTER_WAKE_COUNT),
        _remote(Setting.ACQ_COUNT),
        _remote(Setting.ACQ_SLEEP_COUNT),
        _remote(Setting.ACQ_EXIT_WAKE_COUNT),
        _remote(Setting.TAG_LIST_ANTENNA_COMBINE),
        _remote(Setting.MASK, encode_mask, decode_mask),
        _remote(Setting.TIME, encode_time, decode_time),
        _remote(Setting.ANTENNA_SEQUENCE, encode_antenna_sequence, decode_antenna_sequence),
        SettingSpec(Setting.READER_VERSION, Access.READ_ONLY, encode_passthrough,
                    ReaderVersion.decode, query=alien_const.CMD_GET_READER_VERSION),
        SettingSpec(Setting.READER_VERSION_STRING, Access.READ_ONLY, encode_passthrough,
                    decode_passthrough, query=alien_const.CMD_GET_READER_VERSION),
        SettingSpec(Setting.TAG_LIST_FORMAT, Access.INTERNAL, encode_passthrough, decode_passthrough),
        SettingSpec(Setting.DEBUG, Access.LOCAL, encode_debug, decode_local),
        SettingSpec(Setting.TIMEOUT, Access.LOCAL, encode_timeout, decode_local),
    )
}


def resolve(name: str) -> Optional[SettingSpec]:
    """Returns the registry entry for a (case-insensitive) name, or None."""
    setting = Setting.lookup(name)
    if setting is None:
        return None
    return REGISTRY[setting]


def require(name: str) -> SettingSpec:
    """Like :func:`resolve` but raises UnknownSettingError for unknown names."""
    spec = resolve(name)
    if spec is None:
        raise UnknownSettingError(str(name))
    return spec


def encode(name: str, value: Any) -> Any:
    """Encodes a caller value for the named setting."""
    return require(name).encode(value)


def decode(name: str, raw: Any) -> Any:
    """Decodes a raw reader value for the named setting."""
    return require(name).decode(raw)
