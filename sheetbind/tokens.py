"""Token stream model for worksheet XML."""

# Module responsibilities:
# - Define the start/end/character-data tokens consumed by the row readers.
# - Adapt raw worksheet XML into that token stream with an incremental parser.

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Iterator, Mapping, Union


@dataclass(frozen=True, slots=True)
class StartElement:
    name: str
    attrs: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class EndElement:
    name: str


@dataclass(frozen=True, slots=True)
class CharData:
    text: str


Token = Union[StartElement, EndElement, CharData]

ROW = "row"
CELL = "c"
REF_ATTR = "r"
TYPE_ATTR = "t"
SHARED_STRING_TYPE = "s"
# Elements whose character data is the cell text (<v> value, <is><t> inline string).
TEXT_ELEMENTS = frozenset({"v", "t"})


def _local(name: str) -> str:
    return name.rsplit("}", 1)[-1]


def iter_xml_tokens(source: Union[str, Path, BinaryIO]) -> Iterator[Token]:
    """Yield tokens for a worksheet XML document.

    Args:
        source: Path to ``sheetN.xml`` or a binary file object positioned at it.

    Yields:
        ``StartElement`` / ``CharData`` / ``EndElement`` tokens with
        namespace-free element and attribute names.
    """

    for event, elem in ET.iterparse(source, events=("start", "end")):
        name = _local(elem.tag)
        if event == "start":
            attrs = {_local(key): value for key, value in elem.attrib.items()}
            yield StartElement(name, attrs)
            continue
        if elem.text and len(elem) == 0:
            yield CharData(elem.text)
        yield EndElement(name)
        if name == ROW:
            elem.clear()
