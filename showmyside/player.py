"""Players as shown in the lobby: position, movement and speech bubble."""

from __future__ import annotations

import xml.etree.ElementTree as ET

from showmyside.images import ImageType
from showmyside.playerinfo import PlayerInfo
from showmyside.timer import Timer

PLAYER_SIZE = (100, 100)
MESSAGE_DURATION = 6.0
MOVEMENT_STEP = 0.01
BUBBLE_OFFSET = (20, -100)


def _bubble_position(x: int, y: int) -> tuple[int, int]:
    return x + BUBBLE_OFFSET[0], y + BUBBLE_OFFSET[1]


class MessageBubble:
    """Text bubble next to a player that hides itself a few seconds after a message."""

    def __init__(self, x: int = 0, y: int = 0, duration: float = MESSAGE_DURATION) -> None:
        self.position = _bubble_position(x, y)
        self.text = ""
        self.visible = False
        self._timer = Timer(duration, self._expire)

    def _expire(self) -> None:
        self.text = ""
        self.visible = False

    def follow(self, x: int, y: int) -> None:
        """Place the bubble beside a player standing at (*x*, *y*)."""
        self.position = _bubble_position(x, y)

    def show(self, message: str, now: float | None = None) -> None:
        """Show *message*, replacing any current one and restarting the countdown."""
        self.text = message
        self.visible = True
        self._timer.start(now)

    def tick(self, now: float | None = None) -> bool:
        """Hide the bubble if its time is up; True if it was hidden by this call."""
        return self._timer.poll(now)


class Player:
    """Lobby view of one player, wrapping its PlayerInfo."""

    def __init__(self, info: PlayerInfo) -> None:
        self.info = info
        self.movement_step = 0.0
        self.position = info.start
        self.bubble = MessageBubble(*self.position)

    @classmethod
    def from_id(cls, player_id: int) -> Player:
        """A newly joined player with default settings."""
        return cls(PlayerInfo.new(player_id))

    @property
    def player_id(self) -> int:
        return self.info.player_id

    @property
    def username(self) -> str:
        return self.info.username

    @property
    def shape(self) -> ImageType:
        return self.info.shape

    @property
    def size(self) -> tuple[int, int]:
        return PLAYER_SIZE

    def change_attribute(self, name: str, value: str) -> None:
        """Apply an attribute change; a new start restarts the movement."""
        self.info.change_attribute(name, value)
        if name == "start":
            self.movement_step = 0.0

    def show_message(self, message: str, now: float | None = None) -> None:
        self.bubble.show(message, now)

    def update(self) -> None:
        """Advance one step of the straight-line move from start to destination."""
        if self.movement_step < 1:
            (start_x, start_y), (dest_x, dest_y) = self.info.start, self.info.destination
            x = int(start_x + self.movement_step * (dest_x - start_x))
            y = int(start_y + self.movement_step * (dest_y - start_y))
            self.position = (x, y)
            self.bubble.follow(x, y)
            self.movement_step += MOVEMENT_STEP
        else:
            self.info.start = self.info.destination

    def to_xml(self) -> str:
        return self.info.to_xml()


class ClientPlayer:
    """The player controlled from this machine."""

    def __init__(self, player_id: int) -> None:
        self.player = Player.from_id(player_id)

    @property
    def player_id(self) -> int:
        return self.player.player_id

    @property
    def username(self) -> str:
        return self.player.username

    def create_movement_event(self, x: int, y: int) -> ET.Element:
        """A move event from the current position towards a click at (*x*, *y*)."""
        start_x, start_y = self.player.position
        width, height = self.player.size
        event = ET.Element("Event")
        event.set("type", "move")
        event.set("start", f"{start_x},{start_y}")
        event.set("destination", f"{x - width},{y - height}")
        event.set("id", str(self.player_id))
        return event