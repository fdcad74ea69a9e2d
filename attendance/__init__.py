"""Core module for the guild attendance matrix."""

from dataclasses import dataclass, field
from typing import Optional

ATTENDED = 'x'
BEFORE_FIRST_RAID = 'n/a'
ABSENT = ''


class AttendanceError(Exception):
    """Base class for all errors raised by the attendance package."""


class MalformedInput(AttendanceError):
    """A feed record violates the expected data contract."""


class ConfigurationError(AttendanceError):
    """Alias or exclusion configuration is inconsistent."""


class TransportError(AttendanceError):
    """The attendance API could not be reached or returned an error."""


class AuthError(TransportError):
    """The OAuth token exchange failed."""


@dataclass(frozen=True)
class PlayerEntry:
    """A single player listed in an attendance report."""

    name: str
    presence: Optional[int] = None   # carried through, never evaluated


@dataclass(frozen=True)
class RawSession:
    """One attendance record as delivered by the API."""

    start_time: int                   # epoch milliseconds
    players: tuple[PlayerEntry, ...] = ()


@dataclass(frozen=True)
class Session:
    """Attendance of one calendar date after merging."""

    date: str                         # dd/mm/yyyy
    start_time: int
    players: tuple[PlayerEntry, ...] = ()

    @property
    def names(self) -> list[str]:
        return [p.name for p in self.players]


@dataclass(frozen=True)
class AttendanceRow:
    """One output row of the attendance matrix."""

    name: str
    cells: tuple[tuple[str, str], ...] = field(default_factory=tuple)  # (date, marker)

    @property
    def attended_count(self) -> int:
        return sum(1 for _, marker in self.cells if marker == ATTENDED)

    def to_record(self) -> dict[str, str]:
        """Flatten the row into an ordered mapping: name first, then dates."""
        record = {'name': self.name}
        record.update(self.cells)
        return record
