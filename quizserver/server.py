"""TCP front end of the quiz and the command that runs it."""

from __future__ import annotations

import argparse
import asyncio
import codecs
import logging
from collections.abc import Sequence

from quizserver.database import DEFAULT_PATH, UserDatabase
from quizserver.quiz import Client, QuizGame

log = logging.getLogger(__name__)

DEFAULT_PORT = 33333
_READ_SIZE = 4096


class _StreamClient(Client):
    """A player reached through an asyncio stream."""

    def __init__(self, writer: asyncio.StreamWriter) -> None:
        super().__init__()
        self._writer = writer

    def send(self, message: str) -> None:
        if self.connected and not self._writer.is_closing():
            self._writer.write(message.encode("utf-8") + b"\r\n")

    def close(self) -> None:
        self.connected = False
        self._writer.close()


class QuizServer:
    """Accepts TCP connections and feeds their lines to a quiz game."""

    def __init__(
        self,
        game: QuizGame,
        host: str | None = None,
        port: int = DEFAULT_PORT,
    ) -> None:
        self._game = game
        self._host = host
        self._port = port
        self._server: asyncio.base_events.Server | None = None
        self._writers: set[asyncio.StreamWriter] = set()

    @property
    def port(self) -> int:
        """The port actually listened on."""
        if self._server is None or not self._server.sockets:
            return self._port
        return self._server.sockets[0].getsockname()[1]

    async def start(self) -> None:
        """Start listening; raises OSError if the address cannot be bound."""
        self._server = await asyncio.start_server(self._handle, self._host, self._port)
        log.info("Server started on port %d", self.port)

    async def serve_forever(self) -> None:
        """Serve connections until cancelled."""
        if self._server is None:
            await self.start()
        await self._server.serve_forever()

    async def close(self) -> None:
        """Stop listening and drop every connection."""
        if self._server is None:
            return
        self._server.close()
        for writer in list(self._writers):
            writer.close()
        await self._server.wait_closed()
        self._server = None

    async def _handle(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        client = _StreamClient(writer)
        self._writers.add(writer)
        try:
            if self._game.connect(client):
                await self._relay(client, reader, writer)
        finally:
            client.close()
            self._writers.discard(writer)
            try:
                await writer.wait_closed()
            except (ConnectionError, OSError):
                pass

    async def _relay(
        self,
        client: _StreamClient,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        decoder = codecs.getincrementaldecoder("utf-8")("replace")
        try:
            while data := await reader.read(_READ_SIZE):
                self._game.handle_data(client, decoder.decode(data))
                if not writer.is_closing():
                    await writer.drain()
        except ConnectionError:
            pass
        finally:
            self._game.disconnect(client)


async def _run(args: argparse.Namespace) -> int:
    with UserDatabase(args.database) as database:
        server = QuizServer(QuizGame(database), args.host, args.port)
        try:
            await server.start()
        except OSError as exc:
            log.critical("Failed to start server: %s", exc)
            return 1
        try:
            await server.serve_forever()
        finally:
            await server.close()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the quiz server until interrupted."""
    parser = argparse.ArgumentParser(description="Multiplayer quiz server.")
    parser.add_argument("--host", default=None, help="address to bind (default: all)")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--database", default=DEFAULT_PATH, help="SQLite file")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    try:
        return asyncio.run(_run(args))
    except KeyboardInterrupt:
        return 0