# tests/protocols/test_taglist.py

from alien_rfid.protocols.taglist import parse_tag_line, parse_taglist

TAGLIST = (
    "Tag:8000 8004 3306 5081, CRC:CB1D, Disc:2004/06/09 11:01:43, Count:3, Ant:0\r\n"
    "Tag:8000 8004 2812 6165, CRC:DA08, Disc:2004/06/09 11:01:43, Count:1, Ant:1\r\n"
)


def test_parse_tag_line():
    fields = parse_tag_line("Tag:8000 8004 3306 5081, CRC:CB1D, Disc:2004/06/09 11:01:43, Count:3, Ant:0")

    assert fields == {
        'id': '8000 8004 3306 5081',
        'crc': 'CB1D',
        'disc': '2004/06/09 11:01:43',
        'count': '3',
        'ant': '0',
    }


def test_parse_tag_line_prefix_is_case_insensitive():
    assert parse_tag_line("TAG:0102, ANT:2") == {'id': '0102', 'ant': '2'}


def test_parse_tag_line_skips_other_lines():
    assert parse_tag_line("(No Tags)") is None
    assert parse_tag_line("") is None


def test_parse_taglist_keeps_reader_order():
    tags = parse_taglist(TAGLIST)

    assert [tag.id for tag in tags] == ['8000800433065081', '8000800428126165']
    assert [tag.antenna for tag in tags] == [0, 1]
    assert tags[1].get('crc') == 'DA08'


def test_parse_taglist_keeps_duplicates():
    tags = parse_taglist("Tag:01, Ant:0\r\nTag:01, Ant:1\r\n")
    assert len(tags) == 2


def test_parse_taglist_without_antenna():
    assert parse_taglist("Tag:0A0B")[0].antenna is None


def test_parse_empty_taglist():
    assert parse_taglist("(No Tags)\r\n") == []
    assert parse_taglist("") == []


def test_parse_taglist_skips_malformed_lines(caplog):
    payload = "Tag:0102, Ant:x\r\nTag:zz, Ant:0\r\nTag:0A0B, Ant:1\r\n"

    tags = parse_taglist(payload)

    assert [(tag.id, tag.antenna) for tag in tags] == [('0A0B', 1)]
    assert 'Skipping malformed tag line' in caplog.text
