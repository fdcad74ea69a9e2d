"""Warcraft Logs API access: OAuth token exchange and attendance paging."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import requests

from attendance import AuthError, MalformedInput, RawSession, TransportError
from attendance.pipeline import parse_raw_session

log = logging.getLogger(__name__)

TOKEN_URL = 'https://www.warcraftlogs.com/oauth/token'
API_URL = 'https://www.warcraftlogs.com/api/v2/client'
DEFAULT_TIMEOUT = 30

ATTENDANCE_QUERY = """
query getAttendance($guildId: Int!, $zoneId: Int!, $page: Int!) {
  guildData {
    guild(id: $guildId) {
      attendance(zoneID: $zoneId, page: $page) {
        current_page
        has_more_pages
        data {
          startTime
          players {
            name
            presence
          }
        }
      }
    }
  }
}
"""


@dataclass
class AttendancePage:
    """One page of the attendance feed."""

    records: list[RawSession] = field(default_factory=list)
    has_more_pages: bool = False
    current_page: int = 1


def fetch_token(
    client_id: str,
    client_secret: str,
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Obtain a bearer credential via the client-credentials flow.

    Returns:
        Authorization header value, e.g. ``"Bearer abc..."``.

    Raises:
        AuthError: If the token endpoint fails or returns no access token.
    """
    http = session or requests.Session()
    try:
        response = http.post(
            TOKEN_URL,
            data={'grant_type': 'client_credentials'},
            auth=(client_id, client_secret),
            timeout=timeout,
        )
        response.raise_for_status()
        payload = response.json()
    except requests.RequestException as exc:
        raise AuthError(f"Token-Anfrage fehlgeschlagen: {exc}") from exc
    except ValueError as exc:
        raise AuthError("Token-Antwort ist kein JSON") from exc

    token = payload.get('access_token') if isinstance(payload, dict) else None
    if not token:
        raise AuthError("Token-Antwort enthaelt kein access_token")
    return f"{payload.get('token_type', 'Bearer')} {token}"


class AttendanceClient:
    """Authenticated GraphQL client for one guild's attendance feed."""

    def __init__(
        self,
        authorization: str,
        guild_id: int,
        zone_id: int,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.guild_id = guild_id
        self.zone_id = zone_id
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({'Authorization': authorization})

    def request(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """Execute a GraphQL query and return its ``data`` object.

        Raises:
            TransportError: On HTTP failures or GraphQL errors.
        """
        try:
            response = self.session.post(
                API_URL,
                json={'query': query, 'variables': variables},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            raise TransportError(f"API-Anfrage fehlgeschlagen: {exc}") from exc
        except ValueError as exc:
            raise TransportError("API-Antwort ist kein JSON") from exc

        if not isinstance(payload, dict):
            raise TransportError("API-Antwort ist kein Objekt")
        if payload.get('errors'):
            messages = '; '.join(e.get('message', str(e)) for e in payload['errors'])
            raise TransportError(f"GraphQL-Fehler: {messages}")
        return payload.get('data') or {}

    def fetch_attendance_page(self, page: int) -> AttendancePage:
        data = self.request(
            ATTENDANCE_QUERY,
            {'guildId': self.guild_id, 'zoneId': self.zone_id, 'page': page},
        )
        guild = (data.get('guildData') or {}).get('guild')
        if guild is None:
            raise TransportError(f"Gilde {self.guild_id} nicht gefunden")

        report = guild.get('attendance') or {}
        return AttendancePage(
            records=[parse_raw_session(r) for r in report.get('data') or []],
            has_more_pages=bool(report.get('has_more_pages')),
            current_page=report.get('current_page', page),
        )

    def fetch_attendance(self) -> list[RawSession]:
        """Fetch all pages sequentially and concatenate their records."""
        records: list[RawSession] = []
        page = 1
        while True:
            result = self.fetch_attendance_page(page)
            records.extend(result.records)
            if not result.has_more_pages:
                break
            page += 1
            log.info("Weitere Seiten vorhanden, lade Seite %d ...", page)

        log.info("%d Berichte aus %d Seite(n) geladen", len(records), page)
        return records


def save_raw_sessions(sessions: list[RawSession], path: str | Path) -> None:
    """Store fetched reports as JSON in the API's record format."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    records = [
        {
            'startTime': s.start_time,
            'players': [{'name': p.name, 'presence': p.presence} for p in s.players],
        }
        for s in sessions
    ]
    path.write_text(json.dumps(records, ensure_ascii=False, indent=2), encoding='utf-8')
    log.info("Rohdaten gespeichert: %s (%d Berichte)", path, len(records))


def load_raw_sessions(path: str | Path) -> list[RawSession]:
    """Read reports previously written by save_raw_sessions.

    Raises:
        FileNotFoundError: If the file does not exist.
        MalformedInput: If the file is not a JSON list of valid records.
    """
    path = Path(path)
    try:
        records = json.loads(path.read_text(encoding='utf-8'))
    except json.JSONDecodeError as exc:
        raise MalformedInput(f"{path} ist kein gueltiges JSON: {exc}") from exc
    if not isinstance(records, list):
        raise MalformedInput(f"{path} enthaelt keine Liste von Berichten")

    sessions = [parse_raw_session(r) for r in records]
    log.info("%d Berichte gelesen aus %s", len(sessions), path)
    return sessions
