"""Loading of alias groups, excluded names and run settings."""

import csv
import io
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from attendance.aliases import build_alias_index

log = logging.getLogger(__name__)

# Matches any sequence of whitespace (including Unicode whitespace like U+2006)
_WHITESPACE_RE = re.compile(r'\s+')

DATA_DIR = Path(__file__).resolve().parent.parent / 'data'
DEFAULT_ALIAS_FILE = DATA_DIR / 'aliases.tsv'
DEFAULT_EXCLUDE_FILE = DATA_DIR / 'exclude.txt'

DEFAULT_GUILD_ID = 492939
DEFAULT_ZONE_ID = 26     # Castle Nathria


@dataclass
class Settings:
    """Static parameters of one attendance run."""

    guild_id: int = DEFAULT_GUILD_ID
    zone_id: int = DEFAULT_ZONE_ID
    alias_groups: list[list[str]] = field(default_factory=list)
    excluded: frozenset[str] = frozenset()
    alias_index: dict[str, str] = field(default_factory=dict)


def detect_encoding(path: Path) -> str:
    """Detect file encoding by checking for BOM bytes.

    Args:
        path: Path to the configuration file.

    Returns:
        Encoding string suitable for open().
    """
    with open(path, 'rb') as f:
        bom = f.read(2)
    if bom == b'\xff\xfe':
        return 'utf-16-le'
    return 'utf-8-sig'


def normalize_whitespace(value: str) -> str:
    """Collapse any whitespace run into a single space and strip the ends."""
    return _WHITESPACE_RE.sub(' ', value).strip()


def _read_text(path: Path) -> str:
    encoding = detect_encoding(path)
    with open(path, 'r', encoding=encoding) as f:
        content = f.read()
    # Strip BOM if present
    return content.lstrip('\ufeff')


def _is_comment(line: str) -> bool:
    return not line.strip() or line.lstrip().startswith('#')


def load_alias_groups(path: str | Path) -> list[list[str]]:
    """Read alias groups from a tab-separated file.

    One group per line, the first column is the canonical name. Blank lines
    and lines starting with ``#`` are ignored.

    Args:
        path: Path to the alias file.

    Returns:
        List of alias groups in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    path = Path(path)
    content = _read_text(path)

    lines = [line for line in content.splitlines() if not _is_comment(line)]
    reader = csv.reader(io.StringIO('\n'.join(lines)), delimiter='\t')

    groups: list[list[str]] = []
    for row in reader:
        names = [normalize_whitespace(n) for n in row]
        names = [n for n in names if n]
        if names:
            groups.append(names)

    log.info("%d Alias-Gruppen gelesen aus %s", len(groups), path)
    return groups


def load_excluded(path: str | Path) -> frozenset[str]:
    """Read excluded player names, one per line.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    path = Path(path)
    content = _read_text(path)
    names = frozenset(
        normalize_whitespace(line)
        for line in content.splitlines()
        if not _is_comment(line)
    )
    log.info("%d ausgeschlossene Spieler gelesen aus %s", len(names), path)
    return names


def load_settings(
    alias_path: str | Path = DEFAULT_ALIAS_FILE,
    exclude_path: str | Path = DEFAULT_EXCLUDE_FILE,
    guild_id: int = DEFAULT_GUILD_ID,
    zone_id: int = DEFAULT_ZONE_ID,
) -> Settings:
    """Load and validate all static configuration.

    Raises:
        FileNotFoundError: If a configuration file does not exist.
        ConfigurationError: If a name appears in more than one alias group.
    """
    groups = load_alias_groups(alias_path)
    return Settings(
        guild_id=guild_id,
        zone_id=zone_id,
        alias_groups=groups,
        excluded=load_excluded(exclude_path),
        alias_index=build_alias_index(groups),
    )
