# alien_rfid/protocols/constants.py

"""
Constants for the Alien reader ASCII command protocol.
"""

# --- Framing ---
COMMAND_PREFIX = b'\x01' # Marks a command as machine-issued (no prompt echo)
LINE_TERMINATOR = b'\r\n'
RESPONSE_TERMINATOR = '\x00' # One NUL ends every response
RESPONSE_LINE_SEPARATOR = '\r\n'
ECHO_TERMINATOR = '\n'
ENCODING = 'ascii'

# --- Verbs ---
VERB_GET = 'get'
VERB_SET = 'set'
CMD_SLEEP = 'Sleep'
CMD_WAKE = 'Wake'
CMD_REBOOT = 'reboot'
CMD_GET_TAGLIST = 'get TagList'
CMD_GET_READER_VERSION = 'get ReaderVersion'

# --- Login handshake ---
PASSWORD_PROMPT = 'Password>'
COMMAND_PROMPT = '>'
LOGIN_BANNER = 'Alien' # Text right before the prompt after a good login

# --- Tag list ---
TAG_LINE_PREFIX = 'Tag:'
TAG_ID_FIELD = 'tag'
TAG_ANTENNA_FIELD = 'ant'
NO_TAGS_MARKER = '(No Tags)'
TAGLIST_FORMAT_TEXT = 'text'

# --- Setting values ---
MASK_ALL_TAGS = 'all tags'
TIME_FORMAT = '%Y/%m/%d %H:%M:%S'
TIME_MAX_YEAR = 2045 # Reader clock values past this overflow a 32-bit epoch
TIME_OVERFLOW_SENTINEL = 0xFFFFFFFF

# --- Reader version keys ---
VERSION_KEY_SOFTWARE = 'Ent. SW Rev'
VERSION_KEY_COUNTRY_CODE = 'Country Code'
VERSION_KEY_READER_TYPE = 'Reader Type'
VERSION_KEY_FIRMWARE = 'Firmware Rev'

# --- Defaults ---
DEFAULT_TIMEOUT = 2.0 # Seconds, applies to every write and read
DEFAULT_TCP_PORT = 4001
DEFAULT_BAUDRATE = 115200

# --- Error message prefixes returned by set() ---
UNKNOWN_SETTING_PREFIX = 'Unknown setting'
