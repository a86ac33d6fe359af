"""Client side of a game session: talks to the server and keeps the lobby in step."""

from __future__ import annotations

import copy
import logging
import re
import time
import xml.etree.ElementTree as ET
from collections.abc import Callable

from showmyside.cipher import Blowfish
from showmyside.connection import DEFAULT_PORT, ClientConnection, NetworkError
from showmyside.lobby import Lobby

TICK_INTERVAL = 1.0 / 120.0
HOST_ID = 0

_logger = logging.getLogger(__name__)
_DOCUMENT_BOUNDARY = re.compile(r"\0+|(?=<\?xml)")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _as_int(text: str | None) -> int:
    match = _LEADING_INT.match(text or "")
    return int(match.group(1)) if match else 0


def _document_text(element: ET.Element) -> str:
    element = copy.deepcopy(element)
    ET.indent(element, space="\t")
    return '<?xml version="1.0"?>\n' + ET.tostring(element, encoding="unicode") + "\n"


def _split_documents(text: str) -> list[str]:
    """Separate documents that arrived together, padded or back to back."""
    return [part.strip() for part in _DOCUMENT_BOUNDARY.split(text) if part.strip()]


class Client:
    """Receives server events, applies them to the lobby and sends the lobby's events back."""

    def __init__(
        self,
        cipher: Blowfish,
        connection_factory: Callable[[Blowfish], ClientConnection] | None = None,
    ) -> None:
        self._cipher = cipher
        self._connection_factory = connection_factory or ClientConnection
        self._connection: ClientConnection | None = None
        self.lobby = Lobby()
        self.log: list[str] = []

    @property
    def connection(self) -> ClientConnection | None:
        return self._connection

    @property
    def log_text(self) -> str:
        return "".join(f"{line}\n" for line in self.log)

    def connect(self, host: str, port: int = DEFAULT_PORT) -> bool:
        """Connect to the server at *host* and announce a new player; True on success."""
        connection = self._connection_factory(self._cipher)
        if not connection.connect(host, port):
            return False
        self._connection = connection

        events = ET.Element("Events")
        ET.SubElement(events, "Event", type="new_plr")
        self.send(events)
        return True

    def handle_message(self, text: str) -> None:
        """Apply everything in a message from the server to the lobby."""
        for fragment in _split_documents(text):
            try:
                root = ET.fromstring(fragment)
            except ET.ParseError:
                _logger.warning("Invalid xml received from server")
                continue
            if root.tag == "ServerInfo":
                self._apply_server_info(root)
            elif root.tag == "Events":
                self._apply_events(root)

    def _apply_server_info(self, root: ET.Element) -> None:
        if not self.lobby.loaded:
            self.lobby.load_lobby_information(root)
        else:
            self.log.append(f"Server Version: {root.get('version', '')}")

    def _apply_events(self, root: ET.Element) -> None:
        for event in root:
            kind = event.get("type", "")
            player_id = _as_int(event.get("id"))

            if kind == "new_plr":
                player = self.lobby.create_player(player_id)
                self.log.append(f"{player.username} has joined")
            elif kind == "plr_leave":
                name = self.lobby.username(player_id)
                self.lobby.remove_player(player_id)
                self.log.append(f"{name} has left")
                if player_id == HOST_ID:
                    self.lobby.closed = True
                    self.log.append("Server closed due to host leaving")
                    break
            elif kind == "attr_change":
                self.lobby.change_attribute(
                    player_id, event.get("attribute", ""), event.get("value", "")
                )
            elif kind == "move":
                self.lobby.change_attribute(player_id, "start", event.get("start", ""))
                self.lobby.change_attribute(
                    player_id, "destination", event.get("destination", "")
                )
            elif kind == "new_message":
                message = event.get("text", "")
                self.lobby.show_message(player_id, message)
                self.log.append(f"{self.lobby.username(player_id)}: {message}")

    def tick(self) -> None:
        """One round: take in server events, update the lobby, send the lobby's events."""
        if self._connection is None:
            return

        message = self._connection.receive()
        if message:
            self.handle_message(message)

        self.lobby.update()
        events = self.lobby.flush_events()
        if len(events):
            self.send(events)

        if self.lobby.closed and self._connection is not None:
            self._connection.close()
            self._connection = None

    def send(self, document: ET.Element) -> None:
        """Serialise *document* and send it to the server."""
        if self._connection is None:
            raise NetworkError("Failed to send data: not connected")
        self._connection.send(_document_text(document))

    def close(self) -> None:
        self.lobby.closed = True
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def closed(self) -> bool:
        return self.lobby.closed

    def run(self, interval: float = TICK_INTERVAL) -> None:
        """Tick every *interval* seconds until the lobby is closed."""
        while not self.closed():
            self.tick()
            time.sleep(interval)