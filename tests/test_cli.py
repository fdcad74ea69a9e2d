"""Tests for the attendance_matrix command line interface."""

import csv

import pytest

from attendance.client import save_raw_sessions
from attendance_matrix import build_parser, main, run
from tests.conftest import ms, raw


@pytest.fixture
def feed(tmp_path, scenario_sessions):
    path = tmp_path / 'feed.json'
    save_raw_sessions(scenario_sessions, path)
    return path


def _args(*argv):
    return build_parser().parse_args(list(argv))


class TestRun:
    """Tests for an offline run from a saved feed."""

    def test_writes_matrix(self, tmp_path, feed, data_dir):
        out = tmp_path / 'out.csv'
        code = run(_args('--input', str(feed), '--output', str(out)))
        assert code == 0
        with open(out, newline='', encoding='utf-8') as f:
            records = list(csv.DictReader(f))
        assert [r['name'] for r in records] == ['Ginshi', 'Shaní']
        assert records[1]['06/01/2021'] == 'n/a'

    def test_html_and_summary(self, tmp_path, feed, capsys):
        out = tmp_path / 'out.csv'
        run(_args('--input', str(feed), '--output', str(out), '--html', '--summary'))
        assert out.with_suffix('.html').exists()
        assert 'Ginshi' in capsys.readouterr().out

    def test_dump_raw(self, tmp_path, feed):
        dump = tmp_path / 'copy.json'
        run(_args('--input', str(feed), '--output', str(tmp_path / 'out.csv'),
                  '--dump-raw', str(dump)))
        assert dump.exists()

    def test_empty_feed_writes_nothing(self, tmp_path):
        feed = tmp_path / 'feed.json'
        save_raw_sessions([], feed)
        out = tmp_path / 'out.csv'
        assert run(_args('--input', str(feed), '--output', str(out))) == 1
        assert not out.exists()

    def test_suggest_aliases(self, tmp_path, caplog):
        feed = tmp_path / 'feed.json'
        save_raw_sessions([raw(ms(2021, 1, 6, 20, 0), 'Flórpdru', 'Florpdru')], feed)
        with caplog.at_level('WARNING'):
            run(_args('--input', str(feed), '--output', str(tmp_path / 'out.csv'),
                      '--suggest-aliases'))
        assert 'Florpdru' in caplog.text


class TestMain:
    """Tests for the entry point."""

    def test_requires_credentials_without_input(self, monkeypatch):
        monkeypatch.delenv('WARCRAFT_LOGS_CLIENT', raising=False)
        monkeypatch.delenv('WARCRAFT_LOGS_SECRET', raising=False)
        monkeypatch.setattr('sys.argv', ['attendance_matrix.py'])
        with pytest.raises(SystemExit) as exc:
            main()
        assert exc.value.code == 2

    def test_malformed_feed_exit_code(self, tmp_path, monkeypatch):
        feed = tmp_path / 'feed.json'
        feed.write_text('[{"players": []}]', encoding='utf-8')
        monkeypatch.setattr('sys.argv', [
            'attendance_matrix.py', '--input', str(feed),
            '--output', str(tmp_path / 'out.csv'),
        ])
        with pytest.raises(SystemExit) as exc:
            main()
        assert exc.value.code == 1
        assert not (tmp_path / 'out.csv').exists()
