"""Construction of the players × dates attendance matrix."""

import logging

from attendance import ABSENT, ATTENDED, BEFORE_FIRST_RAID, AttendanceRow, Session
from attendance.pipeline import collect_players

log = logging.getLogger(__name__)


def build_row(player: str, sessions: list[Session]) -> AttendanceRow:
    """Build the attendance row of one player.

    Sessions before the player's first attendance are marked ``n/a``;
    after it, missed sessions are left empty.
    """
    cells: list[tuple[str, str]] = []
    seen_first_raid = False
    for session in sessions:
        if player in session.names:
            marker = ATTENDED
            seen_first_raid = True
        elif not seen_first_raid:
            marker = BEFORE_FIRST_RAID
        else:
            marker = ABSENT
        cells.append((session.date, marker))
    return AttendanceRow(name=player, cells=tuple(cells))


def build_rows(sessions: list[Session], players: list[str]) -> list[AttendanceRow]:
    return [build_row(player, sessions) for player in players]


def sort_rows(rows: list[AttendanceRow]) -> list[AttendanceRow]:
    """Sort rows by attendance count, descending.

    sorted() is stable with reverse=True, so ties keep their input order.
    """
    return sorted(rows, key=lambda r: r.attended_count, reverse=True)


def build_matrix(sessions: list[Session]) -> list[AttendanceRow]:
    """Build the sorted attendance matrix for processed sessions.

    Args:
        sessions: Output of process_sessions (chronological, deduplicated).

    Returns:
        One row per player, most frequent attendees first. Empty if there
        are no sessions.
    """
    players = collect_players(sessions)
    if not players:
        log.info("Keine Spieler gefunden, Matrix bleibt leer")
        return []

    rows = sort_rows(build_rows(sessions, players))
    log.info("Matrix erstellt: %d Spieler x %d Raid-Tage", len(rows), len(sessions))
    return rows
