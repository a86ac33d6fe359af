import time
import xml.etree.ElementTree as ET

import pytest

from showmyside.cipher import Blowfish
from showmyside.connection import ClientConnection
from showmyside.server import Server

MASK = 0xFFFFFFFF
NEW_PLAYER = '<Events><Event type="new_plr"/></Events>'


@pytest.fixture
def cipher():
    p_box = [(0x9E3779B9 * (i + 1)) & MASK for i in range(18)]
    s_box = [
        [[(0x85EBCA6B * (b * 256 + c * 32 + r + 1)) & MASK for r in range(32)] for c in range(8)]
        for b in range(4)
    ]
    return Blowfish(p_box, s_box)


@pytest.fixture
def log_path(tmp_path):
    return tmp_path / "serverlog.txt"


@pytest.fixture
def server(cipher, log_path):
    instance = Server(cipher, 0, log_path)
    yield instance
    instance.close()


def _wait_until(probe, timeout=3.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        result = probe()
        if result:
            return result
        time.sleep(0.01)
    raise AssertionError("condition not met in time")


def _documents(text):
    return [ET.fromstring(part.strip()) for part in text.split("\0") if part.strip()]


def _collect(client, predicate):
    roots = []

    def done():
        roots.extend(_documents(client.receive()))
        return predicate(roots)

    _wait_until(done)
    return roots


def _event(kind, **attributes):
    events = ET.Element("Events")
    ET.SubElement(events, "Event", type=kind, **attributes)
    return events


def _player(server, player_id):
    root = ET.fromstring(server.records.to_xml())
    return next(p for p in root.iter("Player") if p.get("id") == str(player_id))


def test_new_player_gets_lobby_info_and_echo(cipher, server):
    client = ClientConnection(cipher)
    assert client.connect("127.0.0.1", server.port)
    client.send(NEW_PLAYER)

    events = _wait_until(lambda: list(server.poll()))
    assert events[0].get("type") == "new_plr"
    assert events[0].get("id") == "0"
    assert server.records.find_player(0) == 0

    roots = _collect(client, lambda found: len(found) >= 2)
    assert roots[0].tag == "ServerInfo"
    assert roots[0].get("version") == "4.20.69"
    assert roots[1].tag == "Events"
    assert [(e.get("type"), e.get("id")) for e in roots[1]] == [("new_plr", "0")]
    client.close()


def test_attr_change_updates_records(server):
    server.records.create_player()
    server.process_events(_event("attr_change", id="0", attribute="username", value="Bob"))
    assert _player(server, 0).get("username") == "Bob"


def test_move_sets_start_and_destination(server):
    server.records.create_player()
    returned = server.process_events(_event("move", id="0", start="1,2", destination="30,40"))
    player = _player(server, 0)
    assert player.get("start") == "1,2"
    assert player.get("destination") == "30,40"
    assert returned[0].get("type") == "move"


def test_player_leave_removes_record(server):
    server.records.create_player()
    server.process_events(_event("plr_leave", id="0"))
    assert server.records.find_player(0) is None


def test_leave_of_unknown_player_raises(server):
    with pytest.raises(KeyError):
        server.process_events(_event("plr_leave", id="9"))


def test_server_info_for_unknown_player_raises(server):
    with pytest.raises(KeyError):
        server.process_events(_event("server_info_pls", id="9"))


def test_each_event_is_logged_twice(server, log_path):
    server.records.create_player()
    server.process_events(_event("attr_change", id="0", attribute="shape", value="2"))
    text = log_path.read_text(encoding="utf-8")
    assert text.count('type="attr_change"') == 2
    assert 'LobbyCreated="rightnow"' in text
    assert _player(server, 0).get("shape") == "2"


def test_unknown_event_passes_through(server):
    events = server.process_events(_event("new_message", id="0", text="hi"))
    assert [(e.get("type"), e.get("text")) for e in events] == [("new_message", "hi")]


def test_poll_without_clients_is_empty(server):
    assert len(server.poll()) == 0


def test_threaded_server_tells_clients_on_close(cipher, server):
    server.start()
    client = ClientConnection(cipher)
    assert client.connect("127.0.0.1", server.port)
    client.send(NEW_PLAYER)

    _collect(client, lambda found: any(root.tag == "ServerInfo" for root in found))
    assert server.close() is True

    def closing(found):
        return any(
            event.get("type") == "close_server"
            for root in found
            if root.tag == "Events"
            for event in root
        )

    roots = _collect(client, closing)
    assert closing(roots) is True
    client.close()


def test_close_twice_is_harmless(server):
    assert server.close() is True
    assert server.close() is True