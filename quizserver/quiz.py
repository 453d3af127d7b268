"""Game rules of the quiz: accounts, turn order, scoring and results."""

from __future__ import annotations

import logging
import re
import sqlite3
from collections.abc import Sequence

from quizserver.database import UserDatabase, hash_password

log = logging.getLogger(__name__)

MAX_CLIENTS = 3

DEFAULT_QUESTIONS: tuple[tuple[str, str], ...] = (
    ("Столица Франции?", "Париж"),
    ("Сколько планет в Солнечной системе?", "8"),
    ("Автор романа 'Война и мир'?", "Толстой"),
)

_LINE_BREAKS = re.compile(r"[\r\n]+")


class Client:
    """A connected player; this base keeps what it is sent in ``messages``."""

    def __init__(self) -> None:
        self.messages: list[str] = []
        self.connected = True

    def send(self, message: str) -> None:
        """Deliver a message, unless the connection has been closed."""
        if self.connected:
            self.messages.append(message)

    def close(self) -> None:
        """Close the connection; later messages are dropped."""
        self.connected = False


class QuizGame:
    """A quiz for a fixed number of players who register and log in first."""

    def __init__(
        self,
        database: UserDatabase,
        questions: Sequence[tuple[str, str]] = DEFAULT_QUESTIONS,
        max_clients: int = MAX_CLIENTS,
    ) -> None:
        self._database = database
        self._questions = list(questions)
        self._max_clients = max_clients
        self._clients: list[Client] = []
        self._names: dict[Client, str] = {}
        self._scores: dict[Client, int] = {}
        self._active = False
        self._current = 0

    @property
    def active(self) -> bool:
        """Whether a quiz is running."""
        return self._active

    @property
    def clients(self) -> tuple[Client, ...]:
        """The connected players, in order of arrival."""
        return tuple(self._clients)

    def login_of(self, client: Client) -> str | None:
        """The login a client authenticated as, or None."""
        return self._names.get(client)

    def score(self, client: Client) -> int:
        """The client's current score."""
        return self._scores.get(client, 0)

    def connect(self, client: Client) -> bool:
        """Admit a new client; refuse and close it if full or a quiz is running."""
        if len(self._clients) >= self._max_clients or self._active:
            client.send("Server is busy. Please try again later.")
            client.close()
            return False
        self._clients.append(client)
        self._scores[client] = 0
        client.send("Welcome to Quiz Server! Please register or login.")
        self._broadcast(f"New client connected. Total clients: {len(self._clients)}")
        return True

    def disconnect(self, client: Client) -> None:
        """Forget a client that went away; a running quiz ends."""
        if client not in self._clients:
            return
        self._clients.remove(client)
        self._names.pop(client, None)
        self._scores.pop(client, None)
        log.info("Client disconnected")
        self._broadcast(f"Client disconnected. Total clients: {len(self._clients)}")
        if self._active:
            self._end_quiz()

    def handle_data(self, client: Client, data: str) -> None:
        """Handle a chunk of received text holding one or more command lines."""
        for line in _LINE_BREAKS.split(data):
            if line:
                self.handle_line(client, line)

    def handle_line(self, client: Client, line: str) -> None:
        """Handle one command line from a client."""
        command = line.strip()
        if not command:
            return
        log.debug("Processing command: %s", command)
        parts = [part for part in command.split(" ") if part]
        if not parts:
            client.send("Error: Empty command")
            return
        name = parts[0].lower()
        args = " ".join(parts[1:])
        if name == "reg":
            self._register(client, args)
        elif name == "auth":
            self._authenticate(client, args)
        elif name == "answer:" and self._active:
            self._answer(client, args)
        else:
            client.send("Error: Unknown command or quiz not started")

    def _register(self, client: Client, credentials: str) -> None:
        if self._active:
            client.send("Quiz is active. Registration not allowed now.")
            return
        parts = credentials.split(":")
        if len(parts) != 2:
            client.send("Error: Use format 'reg login:password'")
            return
        login, secret = (part.strip() for part in parts)
        if not login or not secret:
            client.send("Error: Login and password cannot be empty")
            return
        try:
            if self._database.user_exists(login):
                client.send("Error: User already exists")
                return
            self._database.add_user(login, secret)
        except sqlite3.Error as exc:
            client.send("Error: Registration failed")
            log.warning("Database error: %s", exc)
            return
        client.send(
            "Registration successful. Please authenticate with: auth login:password"
        )

    def _authenticate(self, client: Client, credentials: str) -> None:
        if self._active:
            client.send("Quiz is active. Authentication not allowed now.")
            return
        parts = [part for part in credentials.split(":") if part]
        if len(parts) != 2:
            client.send("Error: Use format 'auth login:password'")
            return
        login, secret = (part.strip() for part in parts)
        if not login or not secret:
            client.send("Error: Login and password cannot be empty")
            return
        try:
            stored = self._database.password_hash(login)
        except sqlite3.Error:
            client.send("Error: Database error")
            return
        if stored is None:
            client.send("Error: User not found. Register first with: reg login:password")
            return
        if stored != hash_password(secret):
            client.send("Error: Invalid password")
            return
        self._names[client] = login
        client.send("Authentication successful. Waiting for other players...")
        if len(self._clients) == self._max_clients and all(
            c in self._names for c in self._clients
        ):
            self._start_quiz()

    def _start_quiz(self) -> None:
        self._active = True
        self._current = 0
        for client in self._clients:
            self._scores[client] = 0
        self._broadcast("Quiz started! Get ready for the first question.")
        self._ask_question()

    def _ask_question(self) -> None:
        if self._current < len(self._questions):
            question, _ = self._questions[self._current]
            self._broadcast(f"Question {self._current + 1}: {question}")
        else:
            self._end_quiz()

    def _answer(self, client: Client, answer: str) -> None:
        if not self._active or client not in self._names:
            client.send("Error: You are not authenticated or quiz not active")
            return
        _, correct = self._questions[self._current]
        if answer.strip().casefold() == correct.casefold():
            self._scores[client] += 1
            client.send("Correct answer!")
        else:
            client.send(f"Wrong answer! Correct answer was: {correct}")
        self._current += 1
        self._ask_question()

    def _end_quiz(self) -> None:
        self._active = False
        best = 0
        winners: list[Client] = []
        for client in self._clients:
            score = self._scores[client]
            if score > best:
                best = score
                winners = [client]
            elif score == best:
                winners.append(client)
        for client in self._clients:
            score = self._scores[client]
            if client in winners:
                client.send(f"WIN! Your score: {score}")
            else:
                client.send(f"Try again. Your score: {score}")
        for client in list(self._clients):
            client.close()

    def _broadcast(self, message: str) -> None:
        for client in list(self._clients):
            client.send(message)