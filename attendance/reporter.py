"""Report generation for the attendance matrix (CSV, HTML, summary)."""

import csv
import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from attendance import ATTENDED, BEFORE_FIRST_RAID, AttendanceRow

log = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / 'templates'


def _columns(rows: list[AttendanceRow]) -> list[str]:
    """Header derived from the first row: name, then session dates."""
    return list(rows[0].to_record())


def _eligible_count(row: AttendanceRow) -> int:
    return sum(1 for _, marker in row.cells if marker != BEFORE_FIRST_RAID)


def write_csv_report(rows: list[AttendanceRow], output_path: Path) -> None:
    """Write the attendance matrix as a fully quoted CSV file.

    Args:
        rows: Sorted attendance rows.
        output_path: Path for the output CSV file.

    Raises:
        ValueError: If there are no rows to derive a header from.
    """
    if not rows:
        raise ValueError("Keine Zeilen fuer den CSV-Report vorhanden.")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(
            f, fieldnames=_columns(rows), quoting=csv.QUOTE_ALL,
        )
        writer.writeheader()
        for row in rows:
            writer.writerow(row.to_record())

    log.info("CSV-Report geschrieben: %s (%d Zeilen)", output_path, len(rows))


def write_html_report(
    rows: list[AttendanceRow],
    output_path: Path,
    title: str = '',
) -> None:
    """Write the attendance matrix as an HTML report using Jinja2.

    Args:
        rows: Sorted attendance rows.
        output_path: Path for the output HTML file.
        title: Report title (e.g. guild and zone).
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=True,
    )
    template = env.get_template('attendance.html')

    html = template.render(
        title=title,
        dates=_columns(rows)[1:] if rows else [],
        rows=[_row_context(r) for r in rows],
        stats=_compute_stats(rows),
        attended=ATTENDED,
        before_first_raid=BEFORE_FIRST_RAID,
    )

    output_path.write_text(html, encoding='utf-8')
    log.info("HTML-Report geschrieben: %s", output_path)


def _row_context(row: AttendanceRow) -> dict:
    eligible = _eligible_count(row)
    return {
        'name': row.name,
        'cells': [marker for _, marker in row.cells],
        'attended': row.attended_count,
        'eligible': eligible,
        'rate': row.attended_count / eligible if eligible else 0.0,
    }


def _compute_stats(rows: list[AttendanceRow]) -> dict:
    """Compute summary statistics for the attendance matrix."""
    sessions = len(rows[0].cells) if rows else 0
    attendances = sum(r.attended_count for r in rows)
    return {
        'players': len(rows),
        'sessions': sessions,
        'attendances': attendances,
        'average': attendances / sessions if sessions else 0.0,
        'full_attendance': sum(
            1 for r in rows if r.attended_count and r.attended_count == _eligible_count(r)
        ),
    }


def print_summary(rows: list[AttendanceRow], title: str = '', top: int = 10) -> None:
    """Print a summary of the attendance matrix to stdout.

    Args:
        rows: Sorted attendance rows.
        title: Report title.
        top: Number of most frequent attendees to list.
    """
    stats = _compute_stats(rows)

    print(f"\n=== Anwesenheit: {title} ===")
    print(f"Raid-Tage:                 {stats['sessions']:>5}")
    print(f"Spieler:                   {stats['players']:>5}")
    print(f"Teilnahmen gesamt:         {stats['attendances']:>5}")
    print(f"Spieler pro Raid (Schnitt):{stats['average']:>6.1f}")
    print(f"Immer anwesend:            {stats['full_attendance']:>5}")
    if rows:
        print("---")
        for row in rows[:top]:
            print(f"  {row.name:<24}{row.attended_count:>5}")
    print()
