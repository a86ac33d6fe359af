from showmyside.images import ImageType
from showmyside.player import (
    BUBBLE_OFFSET,
    MESSAGE_DURATION,
    PLAYER_SIZE,
    ClientPlayer,
    MessageBubble,
    Player,
)
from showmyside.playerinfo import DEFAULT_POSITION, PlayerInfo, parse_point


def _moving_player():
    info = PlayerInfo(7, "mover", ImageType.SQUARE, destination=(500, 100), start=(100, 300))
    return Player(info)


def test_from_id_uses_default_info():
    player = Player.from_id(3)
    assert player.username == "Player 3"
    assert player.player_id == 3
    assert player.shape == ImageType.TRIANGLE
    assert player.position == DEFAULT_POSITION


def test_first_update_places_player_at_start():
    player = _moving_player()
    player.update()
    assert player.position == (100, 300)
    assert player.bubble.position == (100 + BUBBLE_OFFSET[0], 300 + BUBBLE_OFFSET[1])


def test_movement_stays_between_start_and_destination():
    player = _moving_player()
    xs = []
    for _ in range(50):
        player.update()
        xs.append(player.position[0])
        assert 100 <= player.position[0] <= 500
        assert 100 <= player.position[1] <= 300
    assert xs == sorted(xs)


def test_movement_finishes_and_start_becomes_destination():
    player = _moving_player()
    for _ in range(200):
        player.update()
    assert player.movement_step >= 1
    assert player.info.start == player.info.destination
    x, y = player.position
    assert abs(x - 500) <= 5 and abs(y - 100) <= 5


def test_changing_start_restarts_movement():
    player = _moving_player()
    for _ in range(10):
        player.update()
    assert player.movement_step > 0
    player.change_attribute("start", "20,30")
    assert player.movement_step == 0
    assert player.info.start == (20, 30)
    player.update()
    assert player.position == (20, 30)


def test_attribute_changes_show_through():
    player = Player.from_id(1)
    player.change_attribute("username", "alice")
    player.change_attribute("shape", "3")
    assert player.username == "alice"
    assert player.shape == ImageType.HEXAGON


def test_to_xml_matches_info():
    player = _moving_player()
    assert player.to_xml() == player.info.to_xml()


def test_message_bubble_hides_after_duration():
    bubble = MessageBubble(0, 0)
    bubble.show("hello", now=0.0)
    assert bubble.visible and bubble.text == "hello"
    assert bubble.tick(MESSAGE_DURATION - 0.1) is False
    assert bubble.visible
    assert bubble.tick(MESSAGE_DURATION) is True
    assert not bubble.visible
    assert bubble.text == ""


def test_new_message_restarts_countdown():
    bubble = MessageBubble()
    bubble.show("first", now=0.0)
    bubble.show("second", now=4.0)
    assert bubble.tick(MESSAGE_DURATION + 1.0) is False
    assert bubble.text == "second"
    assert bubble.tick(4.0 + MESSAGE_DURATION) is True
    assert not bubble.visible


def test_player_show_message_uses_bubble():
    player = Player.from_id(2)
    player.show_message("hi", now=1.0)
    assert player.bubble.text == "hi"
    assert player.bubble.visible


def test_client_player_movement_event():
    client = ClientPlayer(4)
    event = client.create_movement_event(400, 300)
    assert event.tag == "Event"
    assert event.get("type") == "move"
    assert parse_point(event.get("start")) == DEFAULT_POSITION
    assert parse_point(event.get("destination")) == (400 - PLAYER_SIZE[0], 300 - PLAYER_SIZE[1])
    assert event.get("id") == "4"
    assert client.username == "Player 4"


def test_client_player_event_follows_position():
    client = ClientPlayer(0)
    client.player.change_attribute("start", "10,20")
    client.player.update()
    event = client.create_movement_event(0, 0)
    assert parse_point(event.get("start")) == (10, 20)
    assert client.player_id == 0