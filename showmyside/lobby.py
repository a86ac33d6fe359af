"""Client-side lobby: the players on screen, the chat box and outgoing events."""

from __future__ import annotations

import copy
import xml.etree.ElementTree as ET
from enum import IntEnum

from showmyside.player import ClientPlayer, Player
from showmyside.playerinfo import PlayerInfo

NO_PLAYER = -1

_LABELS = {
    0: "Enter message:",
    1: "Enter new username:",
}
_SHAPE_KEYS = "1234"


class ChatMode(IntEnum):
    MESSAGE = 0
    USERNAME = 1


def _event(kind: str, **attributes: object) -> ET.Element:
    event = ET.Element("Event")
    event.set("type", kind)
    for name, value in attributes.items():
        event.set(name, str(value))
    return event


class ChatBox:
    """Text box opened for typing a chat message or a new username."""

    def __init__(self) -> None:
        self.mode: ChatMode | None = None
        self.label = "Enter Text"
        self.visible = False
        self.text = ""

    def display(self, mode: ChatMode | int) -> None:
        """Open the box for *mode*."""
        self.mode = ChatMode(mode)
        self.label = _LABELS[int(self.mode)]
        self.visible = True

    def submit(self, text: str) -> None:
        """Enter *text* and close the box, as pressing Enter does."""
        self.text = text
        self.visible = False

    def flush_message(self) -> str:
        """Take the entered text once the box is closed; "" while it is still open."""
        if self.visible:
            return ""
        text, self.text = self.text, ""
        return text


class Lobby:
    """Players in the lobby and the events this client wants to send."""

    def __init__(self) -> None:
        self._events = ET.Element("Events")
        self.players: list[Player] = []
        self.chat_box = ChatBox()
        self.client_player: ClientPlayer | None = None
        self.player_id = NO_PLAYER
        self._closed = False
        self._loaded = False

    @property
    def pending_events(self) -> list[ET.Element]:
        return list(self._events)

    @property
    def closed(self) -> bool:
        return self._closed

    @closed.setter
    def closed(self, value: bool) -> None:
        self._closed = bool(value)

    @property
    def loaded(self) -> bool:
        return self._loaded

    def handle_click(self, x: int, y: int) -> None:
        """Queue a move towards (*x*, *y*) unless the chat box is open."""
        if self.chat_box.visible or self.client_player is None:
            return
        self._events.append(self.client_player.create_movement_event(x, y))

    def handle_key(self, key: str) -> None:
        """React to a key press: t chat, q rename, h server info, 1-4 shape."""
        lowered = key.lower()
        if lowered == "t":
            if not self.chat_box.visible:
                self.chat_box.display(ChatMode.MESSAGE)
        elif lowered == "q":
            if not self.chat_box.visible:
                self.chat_box.display(ChatMode.USERNAME)
        elif lowered == "h":
            self._events.append(_event("server_info_pls", id=self.player_id))
        elif len(key) == 1 and key in _SHAPE_KEYS:
            self._events.append(
                _event(
                    "attr_change",
                    attribute="shape",
                    value=_SHAPE_KEYS.index(key),
                    id=self.player_id,
                )
            )

    def load_lobby_information(self, document: str | ET.Element) -> None:
        """Add every player listed in a ServerInfo document."""
        root = ET.fromstring(document) if isinstance(document, str) else document
        if root.tag == "ServerInfo":
            for element in root:
                self.players.append(Player(PlayerInfo.from_element(element)))
        self._loaded = True

    def update(self) -> None:
        """Move players, expire speech bubbles and queue any chat box input."""
        for player in self.players:
            player.update()
            player.bubble.tick()

        text = self.chat_box.flush_message()
        if not text:
            return
        if self.chat_box.mode is ChatMode.MESSAGE:
            self._events.append(_event("new_message", text=text, id=self.player_id))
        elif self.chat_box.mode is ChatMode.USERNAME:
            self._events.append(
                _event("attr_change", attribute="username", value=text, id=self.player_id)
            )

    def flush_events(self) -> ET.Element:
        """Return the queued events under an Events element and forget them."""
        flushed = ET.Element("Events")
        flushed.extend(copy.deepcopy(event) for event in self._events)
        self._events.clear()
        return flushed

    def find_player(self, player_id: int) -> int | None:
        """Index of the player with *player_id*, or None if there is none."""
        return next(
            (index for index, player in enumerate(self.players) if player.player_id == player_id),
            None,
        )

    def _player(self, player_id: int) -> Player:
        index = self.find_player(player_id)
        if index is None:
            raise KeyError(player_id)
        return self.players[index]

    def create_player(self, player_id: int) -> Player:
        """Add a joining player; the first one created is this client's own."""
        if self.player_id == NO_PLAYER:
            self.client_player = ClientPlayer(player_id)
            self.player_id = self.client_player.player_id
            player = self.client_player.player
        else:
            player = Player.from_id(player_id)
        self.players.append(player)
        return player

    def remove_player(self, player_id: int) -> Player:
        index = self.find_player(player_id)
        if index is None:
            raise KeyError(player_id)
        return self.players.pop(index)

    def change_attribute(self, player_id: int, name: str, value: str) -> None:
        self._player(player_id).change_attribute(name, value)

    def show_message(self, player_id: int, message: str) -> None:
        self._player(player_id).show_message(message)

    def username(self, player_id: int) -> str:
        return self._player(player_id).username

    def client_username(self) -> str:
        return self.username(self.player_id)

    def close(self) -> None:
        """Leave the lobby: queue a plr_leave event and mark it closed."""
        self._events.append(_event("plr_leave", id=self.player_id))
        self._closed = True