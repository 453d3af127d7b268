# quizserver

A small multiplayer quiz game served over plain TCP. Players connect with any
line-based client (for example `nc` or `telnet`), register or log in, and once
the table is full and every player is authenticated the quiz begins.

## Installation

```
pip install .
```

## Running the server

```
quizserver
```

Options:

| Option              | Default            | Meaning                         |
|---------------------|--------------------|---------------------------------|
| `--host HOST`       | all interfaces     | address to bind                 |
| `--port PORT`       | `33333`            | TCP port to listen on           |
| `--database PATH`   | `project_data.db`  | SQLite file holding the users   |

The server runs until interrupted (Ctrl+C). If the address cannot be bound it
logs the error and exits with status 1.

## Playing

The server reads text as UTF-8 and treats every line (ended by CR, LF or
both) as one command. Each reply it sends ends with `\r\n`.

| Command                  | Meaning                                   |
|--------------------------|-------------------------------------------|
| `reg login:password`     | create an account                         |
| `auth login:password`    | log in with an existing account           |
| `answer: <text>`         | answer the current question (during quiz) |

The command word is matched without regard to case; `answer:` must be
followed by a space before the answer text. Answers are compared with the
correct one without regard to case.

The command runs a quiz for three players with three built-in questions.
New connections are turned away with `Server is busy. Please try again later.`
when three players are already connected or a quiz is running. Registration
and login are refused while a quiz is running.

When three players are connected and all of them have logged in, the quiz
starts and the questions are broadcast one at a time. Any authenticated
player's answer is checked against the current question and moves the game on
to the next one. After the last question every player is told their score;
the highest scorers (ties included) get `WIN! Your score: N`, the others
`Try again. Your score: N`, and all connections are then closed. If a player
drops out mid-game, the quiz ends at once in the same way.

Passwords are stored as SHA-384 hex digests.

## Using it as a library

- `quizserver.sha384.sha384_hex(text)` returns the SHA-384 digest of the
  UTF-8 bytes of `text` as 96 lower-case hex digits.
- `quizserver.database.UserDatabase(path)` opens (and creates if needed) the
  user table in an SQLite file. It offers `user_exists(login)`,
  `add_user(login, password)` (raises `sqlite3.IntegrityError` for a taken
  login), `password_hash(login)` (returns `None` for an unknown login) and
  `close()`, and works as a context manager. `hash_password(password)` gives
  the stored form of a password.
- `quizserver.quiz.QuizGame(database, questions, max_clients)` holds all the
  game rules and never touches sockets. Feed it with `connect(client)`,
  `disconnect(client)`, `handle_data(client, text)` and
  `handle_line(client, line)`; inspect it through `active`, `clients`,
  `login_of(client)` and `score(client)`. Players are `quizserver.quiz.Client`
  objects; the base class collects what it is sent in `messages`, which makes
  the game easy to drive from tests.
- `quizserver.server.QuizServer(game, host, port)` serves a game over TCP with
  asyncio. `start()`, `serve_forever()` and `close()` are coroutines; after
  `start()`, `port` gives the port actually bound (useful with port `0`).

```python
import asyncio

from quizserver.database import UserDatabase
from quizserver.quiz import QuizGame
from quizserver.server import QuizServer


async def run() -> None:
    with UserDatabase("players.db") as db:
        game = QuizGame(db, [("2 + 2?", "4")], 2)
        server = QuizServer(game, "127.0.0.1", 33333)
        await server.start()
        try:
            await server.serve_forever()
        finally:
            await server.close()


asyncio.run(run())
```

## What it does not do

There is no client program: players use any plain line-based TCP tool. The
`quizserver` command always uses the built-in questions and a three-player
table; other question sets or table sizes are available only through
`QuizGame` when the package is used as a library. Traffic is not encrypted.

## Tests

```
pip install .[test]
pytest
```