# tests/protocols/test_settings.py

import datetime
import time

import pytest

from alien_rfid.core.exceptions import UnknownSettingError, ValidationError
from alien_rfid.protocols import settings
from alien_rfid.protocols.settings import Access, ReaderVersion, Setting

# --- Registry ---

def test_every_setting_is_registered():
    assert set(settings.REGISTRY) == set(Setting)


@pytest.mark.parametrize("name, expected", [
    ("PersistTime", Setting.PERSIST_TIME),
    ("persisttime", Setting.PERSIST_TIME),
    ("ANTENNASEQUENCE", Setting.ANTENNA_SEQUENCE),
    (Setting.MASK, Setting.MASK),
    ("Colour", None),
    (42, None),
])
def test_lookup(name, expected):
    assert Setting.lookup(name) is expected


@pytest.mark.parametrize("name, access", [
    ("AcquireMode", Access.REMOTE),
    ("Mask", Access.REMOTE),
    ("ReaderVersion", Access.READ_ONLY),
    ("TagListFormat", Access.INTERNAL),
    ("Debug", Access.LOCAL),
    ("Timeout", Access.LOCAL),
])
def test_access_classes(name, access):
    assert settings.require(name).access is access


def test_require_unknown():
    with pytest.raises(UnknownSettingError, match="Unknown setting 'Colour'"):
        settings.require("Colour")
    assert settings.resolve("Colour") is None


def test_encode_decode_dispatch():
    assert settings.encode("antennasequence", [0, 1]) == "0, 1"
    assert settings.decode("AntennaSequence", "0, 1*") == ["0", "1"]

# --- Mask ---

@pytest.mark.parametrize("value, expected", [
    ("8000", "16, 0, 80 00"),
    ("80008004/32", "32, 0, 80 00 80 04"),
    ("8000/12/4", "12, 4, 80 00"),
    ("abc", "12, 0, ab c0"),
    ("", "0, 0, "),
    (None, "0, 0, "),
])
def test_encode_mask(value, expected):
    assert settings.encode_mask(value) == expected


@pytest.mark.parametrize("value", ["xyz", "80/1/2/3", "80/a"])
def test_encode_mask_invalid(value):
    with pytest.raises(ValidationError):
        settings.encode_mask(value)


@pytest.mark.parametrize("raw, expected", [
    ("All Tags", ""),
    ("all tags (no mask)", ""),
    ("0, 0, ", ""),
    ("16, 0, 80 00", "8000/16"),
    ("12, 4, 80 00", "8000/12/4"),
    ("garbage", None),
])
def test_decode_mask(raw, expected):
    assert settings.decode_mask(raw) == expected

# --- Time ---

def test_encode_time_epoch_and_datetime():
    when = datetime.datetime(2020, 5, 17, 8, 30, 0)
    epoch = int(time.mktime(when.timetuple()))

    assert settings.encode_time(epoch) == "2020/05/17 08:30:00"
    assert settings.encode_time(str(epoch)) == "2020/05/17 08:30:00"
    assert settings.encode_time(when) == "2020/05/17 08:30:00"


def test_encode_time_passes_formatted_strings_through():
    assert settings.encode_time("2020/05/17 08:30:00") == "2020/05/17 08:30:00"


@pytest.mark.parametrize("value", [0, "", None])
def test_encode_time_empty_means_now(value):
    before = time.time()
    encoded = settings.encode_time(value)
    decoded = settings.decode_time(encoded)
    assert int(before) - 1 <= decoded <= time.time() + 1


def test_decode_time():
    when = datetime.datetime(2004, 6, 9, 11, 1, 43)
    assert settings.decode_time("2004/06/09 11:01:43") == int(time.mktime(when.timetuple()))


def test_decode_time_past_2045_is_sentinel():
    assert settings.decode_time("2046/01/01 00:00:00") == 0xFFFFFFFF
    assert settings.decode_time("2045/12/31 23:59:59") != 0xFFFFFFFF


def test_decode_time_unparseable():
    assert settings.decode_time("") is None
    assert settings.decode_time("soon") is None

# --- AntennaSequence ---

@pytest.mark.parametrize("value, expected", [
    ([0, 1, 2], "0, 1, 2"),
    ((3,), "3"),
    ("0, 1", "0, 1"),
    (2, "2"),
])
def test_encode_antenna_sequence(value, expected):
    assert settings.encode_antenna_sequence(value) == expected


@pytest.mark.parametrize("raw, expected", [
    ("0", ["0"]),
    ("0, 1*, 2", ["0", "1", "2"]),
    ("0,1,", ["0", "1"]),
    ("", []),
])
def test_decode_antenna_sequence(raw, expected):
    assert settings.decode_antenna_sequence(raw) == expected

# --- Local settings ---

@pytest.mark.parametrize("value, expected", [
    (True, True), (0, False), ("on", True), ("off", False), ("0", False), ("False", False), ("1", True),
])
def test_encode_debug(value, expected):
    assert settings.encode_debug(value) is expected


def test_encode_timeout():
    assert settings.encode_timeout("2.5") == 2.5
    for bad in (0, -1, "soon", None):
        with pytest.raises(ValidationError):
            settings.encode_timeout(bad)

# --- ReaderVersion ---

def test_reader_version_decode():
    text = "Ent. SW Rev: 02.01.05, Country Code: US, Reader Type: Alien RFID Tag Reader Model: ALR-9780, Firmware Rev: 1.03"
    version = ReaderVersion.decode(text)

    assert version.string == text
    assert version.software == "02.01.05"
    assert version.country_code == "US"
    assert version.firmware == "1.03"


def test_reader_version_ignores_unknown_keys():
    version = ReaderVersion.decode("Bootloader: 7, Ent. SW Rev: 2.0")
    assert version.software == "2.0"
    assert version.reader_type is None


@pytest.mark.parametrize("value, expected", [
    ("8000800433065081", "8000800433065081/64"),
    ("80008/20", "800080/20"),
])
def test_mask_encode_decode(value, expected):
    assert settings.decode_mask(settings.encode_mask(value)) == expected
