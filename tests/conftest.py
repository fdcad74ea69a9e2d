"""Shared test fixtures."""

from datetime import datetime
from pathlib import Path

import pytest

from attendance import PlayerEntry, RawSession
from attendance.aliases import build_alias_index


DATA_DIR = Path(__file__).resolve().parent.parent / 'data'


def ms(*args) -> int:
    """Epoch milliseconds for a local datetime."""
    return int(datetime(*args).timestamp() * 1000)


def raw(start_time: int, *names: str) -> RawSession:
    """Create a RawSession with the given player names."""
    return RawSession(
        start_time=start_time,
        players=tuple(PlayerEntry(name=n, presence=1) for n in names),
    )


@pytest.fixture(scope='session')
def data_dir() -> Path:
    """Path to the data directory."""
    return DATA_DIR


@pytest.fixture
def alias_index() -> dict[str, str]:
    return build_alias_index([
        ['Ginshi', 'Jinshi'],
        ['Shaní', 'Manida'],
        ['Kagejinn', 'Ezkage', 'Kagenoroi'],
    ])


@pytest.fixture
def excluded() -> frozenset[str]:
    return frozenset({'Zenrawr', 'Zensham'})


@pytest.fixture
def scenario_sessions() -> list[RawSession]:
    """Two reports on one evening plus one report a week later."""
    return [
        raw(ms(2021, 1, 13, 19, 30), 'Shaní'),
        raw(ms(2021, 1, 6, 19, 30), 'Ginshi'),
        raw(ms(2021, 1, 6, 21, 0), 'Jinshi', 'Zenrawr'),
    ]
