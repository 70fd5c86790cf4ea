import pytest

from virtualreader.xml_parser import SegmentParseError, parse_xml, parse_xml_text

DOC = """<?xml version="1.0" encoding="UTF-8"?>
<SWE xmlns="http://example.com/ns">
  <FLASH-SEGMENTS>
    <FLASH-SEGMENT COMPRESSION-STATUS="COMPRESSED">
      <SOURCE-START-ADDRESS>00000000</SOURCE-START-ADDRESS>
      <SOURCE-END-ADDRESS>000000FF</SOURCE-END-ADDRESS>
      <TARGET-START-ADDRESS>80020000</TARGET-START-ADDRESS>
      <TARGET-END-ADDRESS>800203FF</TARGET-END-ADDRESS>
    </FLASH-SEGMENT>
    <FLASH-SEGMENT COMPRESSION-STATUS="UNCOMPRESSED">
      <SOURCE-START-ADDRESS>100</SOURCE-START-ADDRESS>
      <SOURCE-END-ADDRESS>1FF</SOURCE-END-ADDRESS>
      <TARGET-START-ADDRESS>80030000</TARGET-START-ADDRESS>
      <TARGET-END-ADDRESS>800300FF</TARGET-END-ADDRESS>
    </FLASH-SEGMENT>
  </FLASH-SEGMENTS>
</SWE>
"""


def test_parses_segments_in_order():
    segs = parse_xml_text(DOC)
    assert len(segs) == 2
    assert segs[0].is_compressed is True
    assert segs[0].target_start_addr == 0x80020000
    assert segs[0].source_end_addr == 0xFF
    assert segs[1].is_compressed is False
    assert segs[1].source_start_addr == 0x100


def test_reads_from_file(tmp_path):
    path = tmp_path / "a.xml"
    path.write_text(DOC, encoding="utf-8")
    assert parse_xml(path) == parse_xml_text(DOC)


def test_missing_file_raises(tmp_path):
    with pytest.raises(SegmentParseError):
        parse_xml(tmp_path / "missing.xml")


def test_invalid_address_raises():
    doc = DOC.replace("000000FF", "zz")
    with pytest.raises(SegmentParseError):
        parse_xml_text(doc)


def test_prefixed_address_rejected():
    doc = DOC.replace("000000FF", "0xFF")
    with pytest.raises(SegmentParseError):
        parse_xml_text(doc)


def test_address_overflow_rejected():
    doc = DOC.replace("000000FF", "1FFFFFFFF")
    with pytest.raises(SegmentParseError):
        parse_xml_text(doc)


def test_malformed_xml_raises():
    with pytest.raises(SegmentParseError):
        parse_xml_text("<SWE><FLASH-SEGMENT>")


def test_no_segments():
    assert parse_xml_text("<SWE><OTHER>1</OTHER></SWE>") == []