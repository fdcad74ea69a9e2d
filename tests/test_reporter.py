"""Tests for attendance.reporter module."""

import csv

import pytest

from attendance.matrix import build_matrix
from attendance.pipeline import process_sessions
from attendance.reporter import print_summary, write_csv_report, write_html_report


@pytest.fixture
def rows(scenario_sessions, alias_index, excluded):
    return build_matrix(process_sessions(scenario_sessions, alias_index, excluded))


class TestWriteCsvReport:
    """Tests for the CSV report."""

    def test_header_and_rows(self, tmp_path, rows):
        out = tmp_path / 'out.csv'
        write_csv_report(rows, out)
        with open(out, newline='', encoding='utf-8') as f:
            records = list(csv.reader(f))
        assert records == [
            ['name', '06/01/2021', '13/01/2021'],
            ['Ginshi', 'x', ''],
            ['Shaní', 'n/a', 'x'],
        ]

    def test_all_fields_quoted(self, tmp_path, rows):
        out = tmp_path / 'out.csv'
        write_csv_report(rows, out)
        lines = out.read_text(encoding='utf-8').splitlines()
        assert lines[0] == '"name","06/01/2021","13/01/2021"'
        assert lines[1] == '"Ginshi","x",""'

    def test_creates_parent_directory(self, tmp_path, rows):
        out = tmp_path / 'reports' / 'out.csv'
        write_csv_report(rows, out)
        assert out.exists()

    def test_no_rows_raises(self, tmp_path):
        with pytest.raises(ValueError):
            write_csv_report([], tmp_path / 'out.csv')


class TestWriteHtmlReport:
    """Tests for the HTML report."""

    def test_contains_players_and_dates(self, tmp_path, rows):
        out = tmp_path / 'out.html'
        write_html_report(rows, out, 'Gilde 492939')
        html = out.read_text(encoding='utf-8')
        assert 'Gilde 492939' in html
        assert 'Shaní' in html
        assert '13/01/2021' in html
        assert 'class="attended"' in html

    def test_escapes_names(self, tmp_path, rows):
        out = tmp_path / 'out.html'
        write_html_report(rows, out, '<script>')
        assert '<script>' not in out.read_text(encoding='utf-8')

    def test_empty_matrix(self, tmp_path):
        out = tmp_path / 'out.html'
        write_html_report([], out)
        assert 'Keine Anwesenheitsdaten' in out.read_text(encoding='utf-8')


class TestPrintSummary:
    """Tests for the stdout summary."""

    def test_summary(self, capsys, rows):
        print_summary(rows, 'Test')
        out = capsys.readouterr().out
        assert 'Anwesenheit: Test' in out
        assert 'Ginshi' in out
        assert 'Raid-Tage:' in out
