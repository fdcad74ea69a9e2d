"""attendance-matrix – CLI-Tool fuer die Raid-Anwesenheit einer Gilde."""

import argparse
import logging
import os
import sys
from pathlib import Path

import requests

from attendance import AttendanceError, RawSession
from attendance.aliases import DEFAULT_SUGGEST_THRESHOLD, suggest_aliases
from attendance.client import (
    AttendanceClient,
    fetch_token,
    load_raw_sessions,
    save_raw_sessions,
)
from attendance.config import (
    DEFAULT_ALIAS_FILE,
    DEFAULT_EXCLUDE_FILE,
    DEFAULT_GUILD_ID,
    DEFAULT_ZONE_ID,
    load_settings,
)
from attendance.matrix import build_matrix
from attendance.pipeline import collect_players, process_sessions
from attendance.reporter import print_summary, write_csv_report, write_html_report


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        description='Erzeugt eine Anwesenheitsmatrix (Spieler x Raid-Tage) aus Warcraft Logs.',
        prog='attendance_matrix.py',
    )
    parser.add_argument(
        '--output', type=Path, default=Path('out.csv'),
        help='Pfad fuer den CSV-Report (Standard: out.csv)',
    )
    parser.add_argument(
        '--input', type=Path,
        help='Zuvor gespeicherte Rohdaten (JSON) statt API-Abfrage verwenden',
    )
    parser.add_argument(
        '--dump-raw', type=Path,
        help='Geladene Rohdaten zusaetzlich als JSON speichern',
    )
    parser.add_argument(
        '--client-id', default=os.environ.get('WARCRAFT_LOGS_CLIENT'),
        help='OAuth Client-ID (Standard: $WARCRAFT_LOGS_CLIENT)',
    )
    parser.add_argument(
        '--client-secret', default=os.environ.get('WARCRAFT_LOGS_SECRET'),
        help='OAuth Client-Secret (Standard: $WARCRAFT_LOGS_SECRET)',
    )
    parser.add_argument(
        '--guild-id', type=int, default=DEFAULT_GUILD_ID,
        help=f'Gilden-ID (Standard: {DEFAULT_GUILD_ID})',
    )
    parser.add_argument(
        '--zone-id', type=int, default=DEFAULT_ZONE_ID,
        help=f'Zonen-ID (Standard: {DEFAULT_ZONE_ID})',
    )
    parser.add_argument(
        '--aliases', type=Path, default=DEFAULT_ALIAS_FILE,
        help='Alias-Datei (tab-getrennt, eine Gruppe pro Zeile)',
    )
    parser.add_argument(
        '--exclude', type=Path, default=DEFAULT_EXCLUDE_FILE,
        help='Datei mit ausgeschlossenen Spielern (ein Name pro Zeile)',
    )
    parser.add_argument(
        '--html', action='store_true',
        help='Zusaetzlich einen HTML-Report erzeugen',
    )
    parser.add_argument(
        '--summary', action='store_true',
        help='Zusammenfassung auf stdout ausgeben',
    )
    parser.add_argument(
        '--suggest-aliases', action='store_true',
        help='Aehnliche Spielernamen als moegliche Aliase melden',
    )
    parser.add_argument(
        '--fuzzy-threshold', type=float, default=DEFAULT_SUGGEST_THRESHOLD,
        help=f'Schwellenwert fuer Alias-Vorschlaege (Standard: {DEFAULT_SUGGEST_THRESHOLD})',
    )
    parser.add_argument(
        '-v', '--verbose', action='store_true',
        help='Ausfuehrliche Log-Ausgabe',
    )
    return parser


def fetch_raw_sessions(args: argparse.Namespace) -> list[RawSession]:
    """Load raw reports from a dump file or from the API."""
    if args.input:
        return load_raw_sessions(args.input)

    logging.info("Hole OAuth-Token ...")
    with requests.Session() as http:
        authorization = fetch_token(args.client_id, args.client_secret, session=http)
        logging.info("OAuth-Token erhalten.")

        client = AttendanceClient(
            authorization, args.guild_id, args.zone_id, session=http,
        )
        logging.info("Hole Anwesenheitsberichte ...")
        return client.fetch_attendance()


def run(args: argparse.Namespace) -> int:
    """Run one attendance export. Returns the process exit code."""
    settings = load_settings(args.aliases, args.exclude, args.guild_id, args.zone_id)

    raw_sessions = fetch_raw_sessions(args)
    if args.dump_raw:
        save_raw_sessions(raw_sessions, args.dump_raw)

    logging.info("Verarbeite Daten ...")
    sessions = process_sessions(raw_sessions, settings.alias_index, settings.excluded)
    rows = build_matrix(sessions)

    if args.suggest_aliases:
        for s in suggest_aliases(collect_players(sessions), args.fuzzy_threshold):
            logging.warning(
                "Moeglicher Alias: %s / %s (%.2f)", s.first, s.second, s.similarity,
            )

    if not rows:
        logging.warning("Keine Anwesenheitsdaten vorhanden, kein Report geschrieben.")
        return 1

    write_csv_report(rows, args.output)

    title = f"Gilde {settings.guild_id}, Zone {settings.zone_id}"
    if args.html:
        write_html_report(rows, args.output.with_suffix('.html'), title)

    if args.summary:
        print_summary(rows, title)

    return 0


def main() -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s: %(message)s',
    )

    if not args.input and not (args.client_id and args.client_secret):
        parser.error(
            'Ohne --input sind --client-id und --client-secret '
            '(oder WARCRAFT_LOGS_CLIENT/WARCRAFT_LOGS_SECRET) erforderlich.'
        )

    try:
        sys.exit(run(args))
    except (AttendanceError, FileNotFoundError) as exc:
        logging.error("%s", exc)
        sys.exit(1)


if __name__ == '__main__':
    main()
