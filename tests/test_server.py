import asyncio
import socket

import pytest

from quizserver.database import UserDatabase
from quizserver.quiz import QuizGame
from quizserver.server import QuizServer, main

PASSWORD = "password"
TIMEOUT = 5


async def read_line(reader):
    data = await asyncio.wait_for(reader.readline(), TIMEOUT)
    return data.decode("utf-8").rstrip("\r\n")


@pytest.fixture
def database():
    with UserDatabase(":memory:") as db:
        yield db


@pytest.mark.asyncio
async def test_welcome_and_registration(database):
    server = QuizServer(QuizGame(database, max_clients=2), "127.0.0.1", 0)
    await server.start()
    try:
        reader, writer = await asyncio.open_connection("127.0.0.1", server.port)
        assert await read_line(reader) == "Welcome to Quiz Server! Please register or login."
        assert await read_line(reader) == "New client connected. Total clients: 1"
        writer.write(f"reg quinn:{PASSWORD}\r\n".encode())
        await writer.drain()
        assert await read_line(reader) == (
            "Registration successful. Please authenticate with: auth login:password"
        )
        writer.close()
    finally:
        await server.close()
    assert database.user_exists("quinn")


@pytest.mark.asyncio
async def test_busy_server_refuses(database):
    server = QuizServer(QuizGame(database, max_clients=1), "127.0.0.1", 0)
    await server.start()
    try:
        first_reader, first_writer = await asyncio.open_connection("127.0.0.1", server.port)
        await read_line(first_reader)
        reader, writer = await asyncio.open_connection("127.0.0.1", server.port)
        assert await read_line(reader) == "Server is busy. Please try again later."
        assert await asyncio.wait_for(reader.read(), TIMEOUT) == b""
        writer.close()
        first_writer.close()
    finally:
        await server.close()


@pytest.mark.asyncio
async def test_whole_game_over_tcp(database):
    game = QuizGame(database, [("Only?", "yes")], max_clients=1)
    server = QuizServer(game, "127.0.0.1", 0)
    await server.start()
    try:
        reader, writer = await asyncio.open_connection("127.0.0.1", server.port)
        await read_line(reader)
        await read_line(reader)
        writer.write(f"reg rita:{PASSWORD}\nauth rita:{PASSWORD}\n".encode())
        await writer.drain()
        lines = [await read_line(reader) for _ in range(4)]
        assert lines[1:] == [
            "Authentication successful. Waiting for other players...",
            "Quiz started! Get ready for the first question.",
            "Question 1: Only?",
        ]
        writer.write("answer: YES\r\n".encode())
        await writer.drain()
        assert await read_line(reader) == "Correct answer!"
        assert await read_line(reader) == "WIN! Your score: 1"
        assert await asyncio.wait_for(reader.read(), TIMEOUT) == b""
        writer.close()
    finally:
        await server.close()
    assert game.active is False


@pytest.mark.asyncio
async def test_closed_server_refuses_connections(database):
    server = QuizServer(QuizGame(database), "127.0.0.1", 0)
    await server.start()
    port = server.port
    assert isinstance(port, int)
    assert 0 < port < 65536
    reader, writer = await asyncio.open_connection("127.0.0.1", port)
    assert await read_line(reader) == "Welcome to Quiz Server! Please register or login."
    writer.close()
    await server.close()
    with pytest.raises(OSError):
        await asyncio.open_connection("127.0.0.1", port)


def test_main_fails_when_port_taken(tmp_path):
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as taken:
        taken.bind(("127.0.0.1", 0))
        taken.listen()
        port = taken.getsockname()[1]
        result = main(
            ["--host", "127.0.0.1", "--port", str(port), "--database", str(tmp_path / "q.db")]
        )
    assert result == 1
    assert (tmp_path / "q.db").exists()