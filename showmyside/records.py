"""Server-side record of the lobby: players, their XML view and the event log."""

from __future__ import annotations

import contextlib
import copy
import xml.etree.ElementTree as ET
from os import PathLike
from pathlib import Path

from showmyside.playerinfo import PlayerInfo

SERVER_VERSION = "4.20.69"


def _render(elements: list[ET.Element]) -> str:
    parts = ['<?xml version="1.0"?>\n']
    for element in elements:
        element = copy.deepcopy(element)
        ET.indent(element, space="\t")
        parts.append(ET.tostring(element, encoding="unicode") + "\n")
    return "".join(parts)


class ServerRecords:
    """Players known to the server, kept both as objects and as a ServerInfo tree."""

    def __init__(self, log_path: str | PathLike[str] | None = None) -> None:
        self._log_path = Path(log_path) if log_path is not None else None
        created = ET.Element("Event")
        created.set("LobbyCreated", "rightnow")
        self._log: list[ET.Element] = [created]

        self._lobby = ET.Element("ServerInfo")
        self._lobby.set("version", SERVER_VERSION)
        self._players: list[PlayerInfo] = []
        self._player_elements: list[ET.Element] = []
        self._next_player_id = 0

    @property
    def next_player_id(self) -> int:
        return self._next_player_id

    def find_player(self, player_id: int) -> int | None:
        """Index of the player with *player_id*, or None if there is none."""
        return next(
            (index for index, info in enumerate(self._players) if info.player_id == player_id),
            None,
        )

    def _index_of(self, player_id: int) -> int:
        index = self.find_player(player_id)
        if index is None:
            raise KeyError(player_id)
        return index

    def next_player_index(self) -> int:
        """Position the next joining player's connection will have."""
        if self._next_player_id == 0:
            return 0
        return len(self._players)

    def create_player(self) -> int:
        """Add a default player and return its id."""
        info = PlayerInfo.new(self._next_player_id)
        source = info.to_element()

        element = ET.SubElement(self._lobby, "Player")
        for name in ("id", "username", "shape", "destination", "start"):
            element.set(name, source.get(name, ""))

        self._players.append(info)
        self._player_elements.append(element)
        self._next_player_id += 1
        return info.player_id

    def remove_player(self, player_id: int) -> None:
        index = self._index_of(player_id)
        self._lobby.remove(self._player_elements.pop(index))
        del self._players[index]

    def change_attribute(self, player_id: int, name: str, value: str) -> None:
        index = self._index_of(player_id)
        self._players[index].change_attribute(name, value)
        element = self._player_elements[index]
        if name in element.attrib:
            element.set(name, value)

    def log_event(self, event: ET.Element) -> None:
        """Append a copy of *event* to the log and rewrite the log file."""
        self._log.append(copy.deepcopy(event))
        if self._log_path is not None:
            with contextlib.suppress(OSError):
                self._log_path.write_text(_render(self._log), encoding="utf-8")

    def to_xml(self) -> str:
        return _render([self._lobby])