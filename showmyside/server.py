"""Game server: gathers client events, applies them to the records and echoes them back."""

from __future__ import annotations

import contextlib
import re
import threading
import time
import xml.etree.ElementTree as ET
from os import PathLike
from pathlib import Path

from showmyside.cipher import Blowfish
from showmyside.connection import DEFAULT_PORT, NetworkError, ServerConnection
from showmyside.records import ServerRecords

DEFAULT_LOG_PATH = Path("logs") / "serverlog.txt"

_ECHO_DELAY = 0.02
_IDLE_DELAY = 0.001
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _as_int(text: str | None) -> int:
    match = _LEADING_INT.match(text or "")
    return int(match.group(1)) if match else 0


class Server:
    """Owns the listening connection and the lobby records."""

    def __init__(
        self,
        cipher: Blowfish,
        port: int = DEFAULT_PORT,
        log_path: str | PathLike[str] | None = DEFAULT_LOG_PATH,
    ) -> None:
        self._socket = ServerConnection(cipher, port)
        self._records = ServerRecords(log_path)
        self._closed = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def port(self) -> int:
        return self._socket.port

    @property
    def records(self) -> ServerRecords:
        return self._records

    def process_events(self, events: ET.Element) -> ET.Element:
        """Apply every event in *events* to the records; returns *events*, updated."""
        for event in list(events):
            self._records.log_event(event)

            kind = event.get("type", "")
            player_id = _as_int(event.get("id"))

            if kind == "new_plr":
                self._socket.send_to(self._records.next_player_index(), self._records.to_xml())
                new_id = self._records.create_player()
                self._socket.set_new_player_id(self._records.find_player(new_id))
                event.set("id", str(new_id))
            elif kind == "plr_leave":
                self._records.remove_player(player_id)
                self._socket.remove_connection(player_id)
            elif kind == "attr_change":
                self._records.change_attribute(
                    player_id, event.get("attribute", ""), event.get("value", "")
                )
            elif kind == "move":
                self._records.change_attribute(player_id, "start", event.get("start", ""))
                self._records.change_attribute(
                    player_id, "destination", event.get("destination", "")
                )
            elif kind == "server_info_pls":
                index = self._records.find_player(player_id)
                if index is None:
                    raise KeyError(player_id)
                self._socket.send_to(index, self._records.to_xml())

            self._records.log_event(event)
        return events

    def poll(self) -> ET.Element:
        """Handle one round of incoming events and echo them to every client."""
        events = self._socket.update()
        if len(events):
            self.process_events(events)
            time.sleep(_ECHO_DELAY)
            self._socket.send(events)
        return events

    def monitor_network(self) -> None:
        while not self._closed.is_set():
            if not len(self.poll()):
                self._closed.wait(_IDLE_DELAY)

    def start(self) -> None:
        """Run monitor_network on a background thread."""
        if self._thread is None:
            self._thread = threading.Thread(target=self.monitor_network, daemon=True)
            self._thread.start()

    def close(self) -> bool:
        """Stop the network thread, tell clients the server is closing, then shut down."""
        self._closed.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join()
            self._thread = None

        closing = ET.Element("Events")
        ET.SubElement(closing, "Event", type="close_server")
        with contextlib.suppress(NetworkError):
            self._socket.send(closing)
        self._socket.close()
        return True

    def ip_address(self) -> str:
        return self._socket.ip_address