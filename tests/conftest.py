# tests/conftest.py

"""Pytest configuration and fixtures."""

import os

# Keep test runs from writing log files; must happen before announcer is imported
os.environ.setdefault("LOG_DIR", "")

from types import SimpleNamespace
from typing import AsyncGenerator, Dict, List, Optional

import pytest
from announcer.data_models.ctfd import Challenge, LeaderboardSnapshot, Solver
from announcer.database.database import Database
from announcer.utils.exceptions import NotifyError, UpstreamError


class FakeNotifier:
    """Collects messages instead of posting them."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.messages: List[str] = []
        self.attempts = 0

    async def send(self, text: str):
        self.attempts += 1
        if self.fail:
            raise NotifyError("webhook returned 500")
        self.messages.append(text)


class FakeCTFd:
    """In-memory stand-in for the CTFd client."""

    def __init__(self):
        self.board: List = []
        self.standings: List = []
        self.names: Dict[int, str] = {}
        self.fail_board = False
        self.fail_top = False
        self.fail_names = False
        self.name_lookups: List[int] = []

    async def get_solve_board(self):
        if self.fail_board:
            raise UpstreamError("/challenges", "connection refused")
        return [(challenge, list(solvers)) for challenge, solvers in self.board]

    async def get_top(self, top_n: int) -> LeaderboardSnapshot:
        if self.fail_top:
            raise UpstreamError(f"/scoreboard/top/{top_n}", "HTTP 502")
        return LeaderboardSnapshot.from_standings(self.standings, top_n)

    async def get_entity_name(self, entity_id: int) -> str:
        self.name_lookups.append(entity_id)
        if self.fail_names:
            raise UpstreamError(f"/teams/{entity_id}", "HTTP 404")
        return self.names.get(entity_id, f"team-{entity_id}")


def make_settings(**overrides) -> SimpleNamespace:
    """Validated settings for building an Announcer in tests."""
    values = dict(
        WEBHOOK_URL="https://discord.com/api/webhooks/1/token",
        CTFD_URL="https://ctf.example.org",
        CTFD_API_KEY="ctfd_test",
        CTFD_ACCOUNT_TYPE="teams",
        REQUEST_TIMEOUT_SECONDS=30,
        DATABASE_URL="sqlite:///unused.db",
        ANNOUNCE_FIRST_BLOOD_ONLY=True,
        SKIP_EXISTING_SOLVES_ON_STARTUP=False,
        ANNOUNCE_OVERTAKES=True,
        REFRESH_INTERVAL_SECONDS=5,
        TOP_N=10,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def snapshot(ranks: Dict[int, int], names: Optional[Dict[int, str]] = None) -> LeaderboardSnapshot:
    return LeaderboardSnapshot(ranks=dict(ranks), names=dict(names or {}))


@pytest.fixture
def database_url(tmp_path) -> str:
    """A file-backed SQLite URL so a second Database can reopen it."""
    return f"sqlite:///{tmp_path / 'announcer.db'}"


@pytest.fixture
async def database(database_url) -> AsyncGenerator[Database, None]:
    """Fixture to provide an initialized database, closed after the test."""
    db = Database(database_url)
    await db.initialize()
    yield db
    await db.close()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def ctfd() -> FakeCTFd:
    return FakeCTFd()


@pytest.fixture
def web() -> Challenge:
    return Challenge(id=1, name="Baby Web")


@pytest.fixture
def pwn() -> Challenge:
    return Challenge(id=2, name="Heap Heaven")


@pytest.fixture
def solvers() -> List[Solver]:
    return [
        Solver(account_id=11, name="Alpha"),
        Solver(account_id=12, name="Bravo"),
        Solver(account_id=13, name="Charlie"),
    ]
