"""Application shell: window layouts, menu actions and the console entry point."""

from __future__ import annotations

import argparse
import queue
import sys
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from os import PathLike
from pathlib import Path

from showmyside.cipher import Blowfish
from showmyside.client import TICK_INTERVAL, Client
from showmyside.connection import DEFAULT_PORT, NetworkError
from showmyside.lobby import ChatMode
from showmyside.server import Server

DEFAULT_TEXT_DIR = Path("text")
DEFAULT_ABOUT_PATH = DEFAULT_TEXT_DIR / "about.txt"

MENU_BAR = "menu_bar"
SPLASH_IMAGE = "splash_image"
IP_INPUT = "ip_input"
CONNECT_BUTTON = "connect_button"
IP_ADDRESS_BOX = "ip_address_box"
EVENT_LOG = "event_log"
ABOUT_TEXT = "about_text"
LOBBY_BUTTON = "lobby_button"


class LayoutType(IntEnum):
    SPLASH_SCREEN = 0
    JOIN_GAME = 1
    SERVER = 2
    IN_GAME = 3
    ABOUT = 4


_LAYOUT_WIDGETS = {
    LayoutType.SPLASH_SCREEN: (SPLASH_IMAGE,),
    LayoutType.JOIN_GAME: (IP_INPUT, CONNECT_BUTTON),
    LayoutType.SERVER: (IP_ADDRESS_BOX, EVENT_LOG),
    LayoutType.IN_GAME: (EVENT_LOG,),
    LayoutType.ABOUT: (ABOUT_TEXT,),
}


@dataclass(frozen=True)
class MenuItem:
    label: str
    action: Callable[[], object]
    divider: bool = False


def read_text_file(path: str | PathLike[str]) -> str:
    """Contents of *path*, every line ending in a newline; "" if it cannot be read."""
    try:
        with open(path, encoding="utf-8") as handle:
            return "".join(line.rstrip("\r\n") + "\n" for line in handle)
    except OSError:
        print(f"Error opening {path}", file=sys.stderr)
        return ""


def _split_address(address: str) -> tuple[str, int]:
    host, colon, port = address.strip().rpartition(":")
    if colon and port.isdigit():
        return host, int(port)
    return address.strip(), DEFAULT_PORT


def _load_cipher() -> Blowfish:
    return Blowfish.from_directory(DEFAULT_TEXT_DIR)


class MainWindow:
    """What the main window shows and what its menu and buttons do."""

    def __init__(
        self,
        about_path: str | PathLike[str] = DEFAULT_ABOUT_PATH,
        client_factory: Callable[[], Client] | None = None,
        server_factory: Callable[[], Server] | None = None,
    ) -> None:
        self._client_factory = client_factory or (lambda: Client(_load_cipher()))
        self._server_factory = server_factory or (lambda: Server(_load_cipher()))
        self.client: Client | None = None
        self.server: Server | None = None
        self.about_text = read_text_file(about_path)
        self.ip_address_text = ""
        self.shown = True
        self.layout = LayoutType.SPLASH_SCREEN
        self._visible = frozenset({MENU_BAR, SPLASH_IMAGE})

    @property
    def visible(self) -> frozenset[str]:
        return self._visible

    @property
    def event_log(self) -> str:
        return self.client.log_text if self.client is not None else ""

    def menu_items(self) -> list[MenuItem]:
        return [
            MenuItem("&Start/&Join Server", self.on_client_start),
            MenuItem("&Start/&Create Server", self.on_server_start, divider=True),
            MenuItem("&Start/&Exit", self.on_exit),
            MenuItem("&About", self.show_about),
        ]

    def change_layout(self, layout: LayoutType | int) -> None:
        """Hide everything but the menu bar, then show what *layout* needs."""
        layout = LayoutType(layout)
        widgets = {MENU_BAR, *_LAYOUT_WIDGETS[layout]}
        if layout is LayoutType.SERVER:
            if self.server is None:
                raise RuntimeError("no server is running")
            self.ip_address_text = self.server.ip_address()
        elif layout is LayoutType.ABOUT and self.client is not None:
            widgets.add(LOBBY_BUTTON)
        self.layout = layout
        self._visible = frozenset(widgets)

    def tick(self) -> None:
        """Drop a client whose lobby has closed, with its server, and go back to the splash."""
        if self.client is not None and self.client.closed():
            if self.server is not None:
                self.server.close()
                self.server = None
            self.client = None
            self.change_layout(LayoutType.SPLASH_SCREEN)

    def on_client_start(self) -> None:
        self.client = self._client_factory()
        self.change_layout(LayoutType.JOIN_GAME)

    def on_server_start(self) -> None:
        """Start a server on this machine and join it."""
        self.server = self._server_factory()
        self.server.start()
        self.client = self._client_factory()
        self.client.connect(self.server.ip_address(), self.server.port)
        self.change_layout(LayoutType.SERVER)

    def on_join_server(self, address: str) -> bool:
        """Connect to *address* ("host" or "host:port"); True on success."""
        if self.client is None:
            raise RuntimeError("no client has been started")
        host, port = _split_address(address)
        if self.client.connect(host, port):
            self.change_layout(LayoutType.IN_GAME)
            return True
        return False

    def on_exit(self) -> None:
        self.shown = False
        if self.client is not None:
            self.client.close()
            self.client = None
        if self.server is not None:
            self.server.close()
            self.server = None

    def show_about(self) -> None:
        self.change_layout(LayoutType.ABOUT)

    def show_lobby(self) -> None:
        self.change_layout(LayoutType.SERVER if self.server is not None else LayoutType.IN_GAME)


def _read_input(lines: queue.Queue[str | None]) -> None:
    for line in sys.stdin:
        lines.put(line.rstrip("\r\n"))
    lines.put(None)


def _apply_command(client: Client, line: str) -> None:
    lobby = client.lobby
    if line.startswith("/name "):
        lobby.chat_box.display(ChatMode.USERNAME)
        lobby.chat_box.submit(line[len("/name "):])
    elif line.startswith("/shape "):
        lobby.handle_key(line[len("/shape "):].strip())
    elif line:
        lobby.chat_box.display(ChatMode.MESSAGE)
        lobby.chat_box.submit(line)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="showmyside",
        description="Host or join a lobby. Type lines to chat; /name NAME renames, "
        "/shape 1-4 changes shape, end of input leaves.",
    )
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--serve", action="store_true", help="host a lobby and join it")
    mode.add_argument("--join", metavar="HOST", help="join the lobby hosted at HOST")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--data", default=".", help="directory holding text/ and logs/")
    parser.add_argument("--interval", type=float, default=TICK_INTERVAL)
    args = parser.parse_args(argv)

    data = Path(args.data)
    try:
        cipher = Blowfish.from_directory(data / "text")
    except (OSError, ValueError) as err:
        print(f"Could not load cipher boxes: {err}", file=sys.stderr)
        return 1

    window = MainWindow(
        data / "text" / "about.txt",
        client_factory=lambda: Client(cipher),
        server_factory=lambda: Server(cipher, args.port, data / "logs" / "serverlog.txt"),
    )

    try:
        if args.serve:
            window.on_server_start()
            print(f"Server running at {window.ip_address_text}:{args.port}")
        else:
            window.on_client_start()
            if not window.on_join_server(f"{args.join}:{args.port}"):
                print(f"Failed to connect to {args.join}", file=sys.stderr)
                window.on_exit()
                return 1
    except NetworkError as err:
        print(f"Network error: {err}", file=sys.stderr)
        window.on_exit()
        return 1

    lines: queue.Queue[str | None] = queue.Queue()
    threading.Thread(target=_read_input, args=(lines,), daemon=True).start()
    printed = 0
    try:
        while window.client is not None:
            client = window.client
            try:
                line = lines.get_nowait()
            except queue.Empty:
                pass
            else:
                if line is None:
                    client.lobby.close()
                else:
                    _apply_command(client, line)
            client.tick()
            for entry in client.log[printed:]:
                print(entry)
            printed = len(client.log)
            window.tick()
            time.sleep(args.interval)
    except KeyboardInterrupt:
        pass
    finally:
        window.on_exit()
    return 0