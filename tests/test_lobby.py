import xml.etree.ElementTree as ET

import pytest

from showmyside.images import ImageType
from showmyside.lobby import ChatBox, ChatMode, Lobby
from showmyside.records import ServerRecords


@pytest.fixture
def lobby():
    lobby = Lobby()
    lobby.create_player(0)
    return lobby


def test_chatbox_labels_and_flush():
    box = ChatBox()
    box.display(ChatMode.USERNAME)
    assert box.label == "Enter new username:"
    assert box.visible
    box.text = "typing"
    assert box.flush_message() == ""
    box.submit("hello")
    assert not box.visible
    assert box.flush_message() == "hello"
    assert box.flush_message() == ""


def test_chatbox_message_label():
    box = ChatBox()
    box.display(0)
    assert box.mode is ChatMode.MESSAGE
    assert box.label == "Enter message:"


def test_first_created_player_is_client(lobby):
    assert lobby.player_id == 0
    assert lobby.client_player.player is lobby.players[0]
    other = lobby.create_player(3)
    assert lobby.player_id == 0
    assert other.player_id == 3
    assert lobby.find_player(3) == 1
    assert lobby.client_username() == "Player 0"


def test_find_missing_player(lobby):
    assert lobby.find_player(42) is None
    with pytest.raises(KeyError):
        lobby.username(42)
    with pytest.raises(KeyError):
        lobby.remove_player(42)


def test_remove_player(lobby):
    lobby.create_player(1)
    removed = lobby.remove_player(1)
    assert removed.player_id == 1
    assert [p.player_id for p in lobby.players] == [0]


def test_click_queues_move_event(lobby):
    expected = lobby.client_player.create_movement_event(400, 300)
    lobby.handle_click(400, 300)
    events = lobby.flush_events()
    assert len(events) == 1
    assert events[0].attrib == expected.attrib
    assert len(lobby.flush_events()) == 0


def test_click_ignored_while_chat_open(lobby):
    lobby.handle_key("t")
    lobby.handle_click(10, 10)
    assert lobby.pending_events == []


def test_shape_key_event(lobby):
    lobby.handle_key("3")
    (event,) = lobby.flush_events()
    assert event.get("type") == "attr_change"
    assert event.get("attribute") == "shape"
    assert int(event.get("value")) == ImageType.PENTAGON
    assert event.get("id") == "0"


def test_server_info_key(lobby):
    lobby.handle_key("H")
    (event,) = lobby.flush_events()
    assert event.get("type") == "server_info_pls"
    assert event.get("id") == "0"


def test_chat_message_becomes_event(lobby):
    lobby.handle_key("T")
    assert lobby.chat_box.mode is ChatMode.MESSAGE
    lobby.chat_box.submit("hi there")
    lobby.update()
    (event,) = lobby.flush_events()
    assert event.get("type") == "new_message"
    assert event.get("text") == "hi there"


def test_username_change_becomes_event(lobby):
    lobby.handle_key("q")
    lobby.chat_box.submit("Alice")
    lobby.update()
    (event,) = lobby.flush_events()
    assert event.get("type") == "attr_change"
    assert event.get("attribute") == "username"
    assert event.get("value") == "Alice"


def test_change_attribute_and_message(lobby):
    lobby.change_attribute(0, "username", "Bob")
    assert lobby.username(0) == "Bob"
    lobby.show_message(0, "hey")
    bubble = lobby.players[0].bubble
    assert bubble.visible
    assert bubble.text == "hey"


def test_load_lobby_information_round_trip():
    records = ServerRecords()
    records.create_player()
    records.create_player()
    records.change_attribute(1, "username", "Carol")
    lobby = Lobby()
    assert not lobby.loaded
    lobby.load_lobby_information(records.to_xml())
    assert lobby.loaded
    assert [p.player_id for p in lobby.players] == [0, 1]
    assert lobby.username(1) == "Carol"


def test_load_accepts_element():
    root = ET.Element("ServerInfo", version="x")
    ET.SubElement(root, "Player", id="5", username="Dan", shape="1",
                  destination="1,2", start="3,4")
    lobby = Lobby()
    lobby.load_lobby_information(root)
    assert lobby.players[0].shape is ImageType.SQUARE
    assert lobby.players[0].info.start == (3, 4)


def test_close_queues_leave(lobby):
    lobby.close()
    assert lobby.closed
    (event,) = lobby.flush_events()
    assert event.get("type") == "plr_leave"
    assert event.get("id") == "0"