"""State of one player as the server and lobby keep it."""

from __future__ import annotations

import copy
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass

from showmyside.images import ImageType

DEFAULT_POSITION = (250, 250)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def parse_point(text: str) -> tuple[int, int]:
    """Read an "X,Y" pair; without a comma both coordinates come from the whole text."""
    first, comma, second = text.partition(",")
    if not comma:
        return _atoi(text), _atoi(text)
    return _atoi(first), _atoi(second)


def _format_point(point: tuple[int, int]) -> str:
    return f"{point[0]},{point[1]}"


def _serialize(element: ET.Element) -> str:
    element = copy.deepcopy(element)
    ET.indent(element, space="\t")
    return '<?xml version="1.0"?>\n' + ET.tostring(element, encoding="unicode") + "\n"


@dataclass
class PlayerInfo:
    player_id: int
    username: str
    shape: ImageType = ImageType.TRIANGLE
    destination: tuple[int, int] = DEFAULT_POSITION
    start: tuple[int, int] = DEFAULT_POSITION

    @classmethod
    def new(cls, player_id: int) -> PlayerInfo:
        """A freshly joined player with the default name, shape and position."""
        return cls(player_id, f"Player {player_id}")

    @classmethod
    def from_element(cls, element: ET.Element) -> PlayerInfo:
        return cls(
            player_id=_atoi(element.get("id", "")),
            username=element.get("username", ""),
            shape=ImageType(_atoi(element.get("shape", ""))),
            destination=parse_point(element.get("destination", "")),
            start=parse_point(element.get("start", "")),
        )

    def change_attribute(self, name: str, value: str) -> None:
        """Apply a named attribute change; unknown names are ignored."""
        if name == "shape":
            self.shape = ImageType(_atoi(value))
        elif name == "start":
            self.start = parse_point(value)
        elif name == "destination":
            self.destination = parse_point(value)
        elif name == "username":
            self.username = value

    def to_element(self) -> ET.Element:
        element = ET.Element("Player")
        element.set("id", str(self.player_id))
        element.set("username", self.username)
        element.set("shape", str(int(self.shape)))
        element.set("start", _format_point(self.start))
        element.set("destination", _format_point(self.destination))
        return element

    def to_xml(self) -> str:
        return _serialize(self.to_element())