"""Reading flash segment descriptions from container XML files."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from pathlib import Path

from .types import FlashSegment

_XMLNS_RE = re.compile(r' xmlns="[^"]+"')
_HEX_RE = re.compile(r"\+?[0-9A-Fa-f]+")

_ADDRESS_FIELDS = {
    "SOURCE-START-ADDRESS": ("source_start_addr", "source start address"),
    "SOURCE-END-ADDRESS": ("source_end_addr", "source end address"),
    "TARGET-START-ADDRESS": ("target_start_addr", "target start address"),
    "TARGET-END-ADDRESS": ("target_end_addr", "target end address"),
}


class SegmentParseError(ValueError):
    """The XML descriptor could not be read or is malformed."""


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _parse_hex(text: str, what: str) -> int:
    text = text.strip()
    if not _HEX_RE.fullmatch(text):
        raise SegmentParseError(f"Invalid {what}: {text!r}")
    value = int(text, 16)
    if value > 0xFFFFFFFF:
        raise SegmentParseError(f"Invalid {what}: {text!r} does not fit in 32 bits")
    return value


def _attribute(element: ET.Element, name: str) -> str | None:
    for key, value in element.attrib.items():
        if _local_name(key) == name:
            return value
    return None


def parse_xml_text(text: str) -> list[FlashSegment]:
    """Return the flash segments described by an XML document, in order."""
    text = _XMLNS_RE.sub("", text, count=1)
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise SegmentParseError(f"Malformed XML: {exc}") from exc

    segments = []
    for element in root.iter():
        if _local_name(element.tag) != "FLASH-SEGMENT":
            continue
        segment = FlashSegment(
            is_compressed=_attribute(element, "COMPRESSION-STATUS") == "COMPRESSED"
        )
        for child in element.iter():
            field = _ADDRESS_FIELDS.get(_local_name(child.tag))
            if field is not None and child.text and child.text.strip():
                attr, what = field
                setattr(segment, attr, _parse_hex(child.text, what))
        segments.append(segment)
    return segments


def parse_xml(xml_path: str | Path) -> list[FlashSegment]:
    """Read an XML descriptor file and return its flash segments."""
    try:
        text = Path(xml_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SegmentParseError(f"Failed to read XML file: {exc}") from exc
    return parse_xml_text(text)