"""TCP connections between lobby clients and the server, encrypted with the game cipher."""

from __future__ import annotations

import copy
import socket
import xml.etree.ElementTree as ET

from showmyside.cipher import BLOCK_SIZE, Blowfish

DEFAULT_PORT = 8080

_RECV_SIZE = 255
# Any routable address works: connecting a datagram socket sends nothing,
# it only makes the system pick the outgoing interface.
_PROBE_ADDRESS = ("57.5.0.0", 9)
_WILDCARD_HOSTS = ("", "0.0.0.0")


class NetworkError(RuntimeError):
    """A socket operation failed."""


def local_ip_address() -> str:
    """IPv4 address of the interface this machine uses for outgoing traffic."""
    try:
        probe = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    except OSError as err:
        raise NetworkError("Could not create probe socket") from err
    try:
        probe.connect(_PROBE_ADDRESS)
        address = probe.getsockname()[0]
    except OSError as err:
        raise NetworkError("Could not determine local address") from err
    finally:
        probe.close()
    return str(address)


def _document_text(element: ET.Element) -> str:
    element = copy.deepcopy(element)
    ET.indent(element, space="\t")
    return '<?xml version="1.0"?>\n' + ET.tostring(element, encoding="unicode") + "\n"


class ClientConnection:
    """One end of a client/server link; messages are encrypted on the wire."""

    def __init__(self, cipher: Blowfish, sock: socket.socket | None = None) -> None:
        self._cipher = cipher
        self._sock = sock
        self._pending = b""
        self._closed = False
        self.player_id = -1
        if sock is not None:
            sock.setblocking(False)

    @property
    def closed(self) -> bool:
        return self._closed

    def connect(self, host: str, port: int = DEFAULT_PORT) -> bool:
        """Connect to *host*; True on success, False if it cannot be reached."""
        try:
            infos = socket.getaddrinfo(host, port, socket.AF_INET, socket.SOCK_STREAM)
        except (OSError, UnicodeError):
            return False
        family, kind, proto, _, address = infos[0]
        try:
            sock = socket.socket(family, kind, proto)
        except OSError:
            return False
        try:
            sock.connect(address)
        except OSError:
            sock.close()
            return False
        sock.setblocking(False)

        if self._sock is not None:
            self._sock.close()
        self._sock = sock
        self._pending = b""
        self._closed = False
        return True

    def send(self, message: str | bytes) -> None:
        """Encrypt *message* and send all of it."""
        if self._sock is None or self._closed:
            raise NetworkError("Failed to send data: connection is closed")
        payload = self._cipher.encrypt(message)
        try:
            self._sock.setblocking(True)
            try:
                self._sock.sendall(payload)
            finally:
                self._sock.setblocking(False)
        except OSError as err:
            raise NetworkError("Failed to send data") from err

    def receive(self) -> str:
        """Everything that has arrived so far, decrypted; "" if nothing has.

        Bytes that do not yet fill a whole cipher block are held back until
        the rest arrives. When the peer has hung up the connection is closed.
        """
        if self._sock is None or self._closed:
            return ""

        received = bytearray()
        peer_gone = False
        while True:
            try:
                chunk = self._sock.recv(_RECV_SIZE)
            except BlockingIOError:
                break
            except OSError as err:
                raise NetworkError("Read failed") from err
            if not chunk:
                peer_gone = True
                break
            received += chunk

        data = self._pending + bytes(received)
        whole = len(data) - len(data) % BLOCK_SIZE
        self._pending = data[whole:]
        if peer_gone:
            self.close()
        if not whole:
            return ""
        plain = self._cipher.decrypt(data[:whole])
        return plain.decode("utf-8", errors="replace").rstrip("\0")

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
        self._closed = True


class ServerConnection:
    """Listening socket plus the connections it has accepted."""

    def __init__(self, cipher: Blowfish, port: int = DEFAULT_PORT, host: str = "") -> None:
        self._cipher = cipher
        self._host = host
        self._ip_address: str | None = None
        self._clients: list[ClientConnection] = []

        try:
            infos = socket.getaddrinfo(
                host or None, port, socket.AF_INET, socket.SOCK_STREAM, 0, socket.AI_PASSIVE
            )
        except (OSError, UnicodeError) as err:
            raise NetworkError("Failed to resolve server address or port") from err
        family, kind, proto, _, address = infos[0]

        try:
            listener = socket.socket(family, kind, proto)
        except OSError as err:
            raise NetworkError("Failed to create socket") from err
        try:
            listener.bind(address)
        except OSError as err:
            listener.close()
            raise NetworkError("Failed to bind socket") from err
        try:
            listener.listen(socket.SOMAXCONN)
            listener.setblocking(False)
        except OSError as err:
            listener.close()
            raise NetworkError("Failed to listen on socket") from err

        self._listener = listener
        self._port = listener.getsockname()[1]

    @property
    def port(self) -> int:
        return self._port

    @property
    def ip_address(self) -> str:
        """Address other machines should use to reach this server."""
        if self._ip_address is None:
            if self._host in _WILDCARD_HOSTS:
                self._ip_address = local_ip_address()
            else:
                self._ip_address = self._host
        return self._ip_address

    @property
    def clients(self) -> list[ClientConnection]:
        return self._clients

    def accept(self) -> ClientConnection | None:
        """A newly connected client, or None if nobody is waiting."""
        try:
            sock, _ = self._listener.accept()
        except BlockingIOError:
            return None
        except OSError as err:
            raise NetworkError("Failed to accept socket") from err
        return ClientConnection(self._cipher, sock)

    def update(self) -> ET.Element:
        """Accept one waiting client and gather every event sent since the last call."""
        events = ET.Element("Events")

        client = self.accept()
        if client is not None:
            self._clients.append(client)

        for client in list(self._clients):
            if client.closed:
                self._clients.remove(client)
                continue
            text = client.receive()
            for fragment in text.split("\0"):
                fragment = fragment.strip()
                if not fragment:
                    continue
                try:
                    root = ET.fromstring(fragment)
                except ET.ParseError as err:
                    raise NetworkError(str(err)) from err
                events.extend(list(root))

        return events

    def send(self, document: ET.Element) -> None:
        """Send *document* to every open client."""
        text = _document_text(document)
        for client in list(self._clients):
            if not client.closed:
                client.send(text)

    def send_to(self, index: int, message: str) -> None:
        self._clients[index].send(message)

    def set_new_player_id(self, player_id: int) -> None:
        """Tag the most recently accepted client with *player_id*."""
        self._clients[-1].player_id = player_id

    def remove_connection(self, player_id: int) -> None:
        for client in self._clients:
            if client.player_id == player_id:
                self._clients.remove(client)
                break

    def close(self) -> None:
        for client in self._clients:
            client.close()
        self._clients.clear()
        self._listener.close()

    def __enter__(self) -> ServerConnection:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()