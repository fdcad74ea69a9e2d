"""Normalization pipeline turning raw attendance reports into sessions.

Stages run in a fixed order:

1. sort by start time
2. stamp the local calendar date (dd/mm/yyyy)
3. merge reports sharing a date
4. drop excluded players (matched against raw names)
5. replace aliases with canonical names
6. drop duplicate players within a session

Each stage returns new Session objects; inputs are never modified.
"""

import logging
from datetime import datetime
from typing import Any, Iterable

from attendance import MalformedInput, PlayerEntry, RawSession, Session
from attendance.aliases import resolve_alias

log = logging.getLogger(__name__)

DATE_FORMAT = '%d/%m/%Y'


def parse_raw_session(record: Any) -> RawSession:
    """Build a RawSession from one feed record.

    Args:
        record: Mapping with ``startTime`` and ``players`` keys.

    Raises:
        MalformedInput: If a required field is missing or has the wrong type.
    """
    if not isinstance(record, dict):
        raise MalformedInput(f"Datensatz ist kein Objekt: {record!r}")

    start_time = record.get('startTime')
    # bool is a subclass of int
    if isinstance(start_time, bool) or not isinstance(start_time, int):
        raise MalformedInput(f"Datensatz ohne gueltige startTime: {record!r}")

    raw_players = record.get('players')
    if not isinstance(raw_players, list):
        raise MalformedInput(f"Datensatz ohne Spielerliste: {record!r}")

    players = []
    for entry in raw_players:
        if not isinstance(entry, dict) or not isinstance(entry.get('name'), str):
            raise MalformedInput(f"Spieler ohne Namen in Datensatz {start_time}: {entry!r}")
        players.append(PlayerEntry(name=entry['name'], presence=entry.get('presence')))

    return RawSession(start_time=start_time, players=tuple(players))


def format_session_date(start_time: int) -> str:
    """Format an epoch-milliseconds timestamp as a local dd/mm/yyyy date."""
    return datetime.fromtimestamp(start_time / 1000).strftime(DATE_FORMAT)


def sort_by_date(raw_sessions: Iterable[RawSession]) -> list[RawSession]:
    return sorted(raw_sessions, key=lambda s: s.start_time)


def stamp_dates(raw_sessions: Iterable[RawSession]) -> list[Session]:
    return [
        Session(
            date=format_session_date(raw.start_time),
            start_time=raw.start_time,
            players=raw.players,
        )
        for raw in raw_sessions
    ]


def merge_sessions(sessions: Iterable[Session]) -> list[Session]:
    """Combine sessions sharing a date into one.

    Player lists are concatenated (not unioned) in encounter order. The
    merged session keeps the position and start time of the first session
    seen for its date.
    """
    merged: dict[str, Session] = {}
    for session in sessions:
        existing = merged.get(session.date)
        if existing is None:
            merged[session.date] = session
        else:
            merged[session.date] = Session(
                date=existing.date,
                start_time=existing.start_time,
                players=existing.players + session.players,
            )
    return list(merged.values())


def exclude_players(
    players: Iterable[PlayerEntry], excluded: frozenset[str] | set[str]
) -> tuple[PlayerEntry, ...]:
    return tuple(p for p in players if p.name not in excluded)


def replace_aliases(
    players: Iterable[PlayerEntry], alias_index: dict[str, str]
) -> tuple[PlayerEntry, ...]:
    return tuple(
        PlayerEntry(name=resolve_alias(p.name, alias_index), presence=p.presence)
        for p in players
    )


def dedupe_players(players: Iterable[PlayerEntry]) -> tuple[PlayerEntry, ...]:
    """Keep the first entry per player name, preserving order."""
    seen: set[str] = set()
    unique = []
    for p in players:
        if p.name in seen:
            continue
        seen.add(p.name)
        unique.append(p)
    return tuple(unique)


def _with_players(session: Session, players: tuple[PlayerEntry, ...]) -> Session:
    return Session(date=session.date, start_time=session.start_time, players=players)


def process_sessions(
    raw_sessions: Iterable[RawSession],
    alias_index: dict[str, str] | None = None,
    excluded: frozenset[str] | set[str] = frozenset(),
) -> list[Session]:
    """Run the full normalization pipeline.

    Args:
        raw_sessions: Complete, already fetched attendance reports.
        alias_index: Alias -> canonical name mapping (see build_alias_index).
        excluded: Raw player names to drop before alias resolution.

    Returns:
        Sessions in chronological order with unique dates and
        deduplicated canonical player names.

    Raises:
        MalformedInput: If an element is not a RawSession.
    """
    raw_sessions = list(raw_sessions)
    for raw in raw_sessions:
        if not isinstance(raw, RawSession):
            raise MalformedInput(f"Unerwarteter Datensatz: {raw!r}")

    alias_index = alias_index or {}

    sessions = merge_sessions(stamp_dates(sort_by_date(raw_sessions)))
    sessions = [_with_players(s, exclude_players(s.players, excluded)) for s in sessions]
    sessions = [_with_players(s, replace_aliases(s.players, alias_index)) for s in sessions]
    sessions = [_with_players(s, dedupe_players(s.players)) for s in sessions]

    log.info(
        "%d Berichte zu %d Raid-Tagen zusammengefasst",
        len(raw_sessions), len(sessions),
    )
    return sessions


def collect_players(sessions: Iterable[Session]) -> list[str]:
    """Return every distinct player name in order of first appearance."""
    players: dict[str, None] = {}
    for session in sessions:
        for p in session.players:
            players.setdefault(p.name, None)
    return list(players)
