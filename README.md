# showmyside

A small networked lobby game. One player hosts a server, others join it by
address, and everyone in the lobby can chat, rename themselves and change
shape. Every message between client and server is an XML document (an
`<Events>` list, or a `<ServerInfo>` description of the lobby), enciphered in
8-byte blocks with a Blowfish-style Feistel cipher.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Running

Host a lobby and join it yourself:

```
showmyside --serve
```

Join a lobby hosted elsewhere:

```
showmyside --join HOST
```

Exactly one of `--serve` and `--join HOST` is required. Other options:

- `--port PORT`: port to listen on or connect to (default 8080).
- `--data DIR`: directory holding `text/` and `logs/` (default: the current
  directory).
- `--interval SECONDS`: how long to wait between ticks (default 1/120 s).

When hosting, the command prints `Server running at ADDRESS:PORT`, the address
other players should join.

The data directory must contain the cipher's key tables in `text/pBox.txt`
and `text/s1.txt` … `text/s4.txt`; without them the command reports that it
could not load the cipher boxes and exits with status 1. Both ends must use the
same tables. A hosting server writes its log of every event to
`logs/serverlog.txt` when that directory exists.

### In the lobby

Type lines on standard input:

- any other text: sends it as a chat message.
- `/name NAME`: changes your username.
- `/shape N` with `N` from 1 to 4: changes your shape (triangle, square,
  pentagon, hexagon).
- end of input (or Ctrl-C): leaves the lobby.

Joins, departures, chat messages and server replies are printed as they
arrive, for example `Player 1 has joined` or `Player 0: hello`. When the host
(player 0) leaves, every client is told `Server closed due to host leaving`.

## Using the pieces

- `showmyside.cipher.Blowfish` enciphers and deciphers bytes or text.
  `Blowfish.from_directory(path)` loads the key tables; `encrypt` zero-pads the
  last block and `decrypt` keeps that padding.
- `showmyside.playerinfo.PlayerInfo` holds one player's id, username, shape,
  start and destination, and converts to and from a `<Player>` element.
- `showmyside.records.ServerRecords` is the server's view of the lobby and its
  event log.
- `showmyside.connection` has `ClientConnection` and `ServerConnection`, TCP
  links that encipher everything they send, and `local_ip_address()`.
- `showmyside.server.Server` applies client events to the records and echoes
  them to every client; `start()` runs it on a background thread.
- `showmyside.client.Client` connects to a server, applies its events to a
  `showmyside.lobby.Lobby` and sends the lobby's queued events back.
- `showmyside.lobby.Lobby` keeps the players, a `ChatBox`, and the events this
  player wants to send (`handle_key`, `handle_click`, `flush_events`).
- `showmyside.player` has `Player` (position, step-by-step movement,
  `MessageBubble`) and `ClientPlayer`, which builds move events.
- `showmyside.timer.Timer` is a one-shot or repeating deadline that fires its
  callback when polled.
- `showmyside.app.MainWindow` tracks which layout is showing and what its menu
  items do; `showmyside.app.main` is the command above.
- `showmyside.images.ImagePool` lists where each image file lives under
  `images/` and its display size.

## What it does not do

- There is no graphical window. `MainWindow` only records which layout and
  widgets would be visible; nothing is drawn, and `ImagePool` does not load or
  display images.
- The command has no way to move your shape. `Lobby.handle_click` queues a
  move event for programs that drive the lobby themselves, and moves made by
  other players still update their positions in the lobby's state.