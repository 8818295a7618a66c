# tests/protocols/test_framing.py

import pytest
from alien_rfid.protocols import framing
from alien_rfid.core.exceptions import ValidationError

# --- Command Building ---

@pytest.mark.parametrize("command, expected_bytes", [
    ("get PersistTime", b'\x01get PersistTime\r\n'),
    ("set Mask = 16, 0, 80 00", b'\x01set Mask = 16, 0, 80 00\r\n'),
    ("reboot", b'\x01reboot\r\n'),
])
def test_build_command(command, expected_bytes):
    assert framing.build_command(command) == expected_bytes


@pytest.mark.parametrize("command", [
    "",
    "get Time\r\nreboot",
    "get Time\n",
    "get\x00Time",
    "\x01get Time",
    "set AcquireMode = Inventöry",
])
def test_build_command_rejects_bad_text(command):
    with pytest.raises(ValidationError):
        framing.build_command(command)


def test_build_line_has_no_prefix():
    assert framing.build_line("alien") == b'alien\r\n'

# --- Response Handling ---

def test_strip_echo():
    assert framing.strip_echo("get Mask\nMask = All Tags\r\n", "get Mask") == "Mask = All Tags\r\n"
    assert framing.strip_echo("Mask = All Tags\r\n", "get Mask") == "Mask = All Tags\r\n"


@pytest.mark.parametrize("response, name, expected", [
    ("PersistTime = 5\r\n", "PersistTime", "5"),
    ("persisttime = -1", "PersistTime", "-1"),
    ("AcquireMode = Global Scroll\r\n", "AcquireMode", "Global Scroll"),
    ("AntennaSequence (Comma separated) = 0, 1*\r\n", "AntennaSequence", "0, 1*"),
    ("Time = \r\n", "Time", ""),
    ("Error 1: Command not understood\r\n", "PersistTime", None),
    ("PersistTimeX = 5", "PersistTime", None),
])
def test_parse_get_response(response, name, expected):
    assert framing.parse_get_response(response, name) == expected


@pytest.mark.parametrize("response, expected", [
    ("PersistTime = 0\r\n", True),
    ("persisttime = 0\r\n", True),
    ("Error 2: Invalid value\r\n", False),
    ("PersistTimeout = 0\r\n", False),
])
def test_is_set_acknowledged(response, expected):
    assert framing.is_set_acknowledged(response, "PersistTime") is expected


def test_split_lines():
    assert framing.split_lines("Tag:01\r\nTag:02") == ["Tag:01", "Tag:02"]
