"""Alias resolution and fuzzy alias suggestions for player names."""

import logging
import unicodedata
from dataclasses import dataclass
from itertools import combinations
from typing import Iterable

from rapidfuzz.distance import JaroWinkler

from attendance import ConfigurationError

log = logging.getLogger(__name__)

DEFAULT_SUGGEST_THRESHOLD = 0.90


@dataclass(frozen=True)
class AliasSuggestion:
    """Two canonical names that probably belong to the same player."""

    first: str
    second: str
    similarity: float    # 0.0 – 1.0


def build_alias_index(groups: Iterable[Iterable[str]]) -> dict[str, str]:
    """Map every known alias to the canonical (first) name of its group.

    Args:
        groups: Alias groups, each an ordered sequence of equivalent names.

    Returns:
        Dict alias -> canonical name. Canonical names map to themselves.

    Raises:
        ConfigurationError: If a name belongs to more than one group.
    """
    index: dict[str, str] = {}
    for group in groups:
        names = list(group)
        if not names:
            continue
        canonical = names[0]
        for name in names:
            existing = index.get(name)
            if existing is not None and existing != canonical:
                log.error(
                    "Alias %r ist sowohl %r als auch %r zugeordnet",
                    name, existing, canonical,
                )
                raise ConfigurationError(
                    f"Alias {name!r} kommt in mehreren Gruppen vor "
                    f"({existing!r}, {canonical!r})"
                )
            index[name] = canonical
    return index


def resolve_alias(name: str, index: dict[str, str]) -> str:
    """Return the canonical name for ``name``, or ``name`` if it has no alias."""
    return index.get(name, name)


def normalize_for_tolerant_comparison(text: str) -> str:
    """Normalize a name for tolerant comparison.

    Removes accents/diacritics via NFD decomposition, strips spaces,
    hyphens, dots, commas and semicolons, then uppercases.
    """
    # NFD decomposition: split base characters from combining marks
    decomposed = unicodedata.normalize('NFD', text)
    stripped = ''.join(ch for ch in decomposed if unicodedata.category(ch) != 'Mn')
    for ch in (' ', '-', '.', ',', ';'):
        stripped = stripped.replace(ch, '')
    return stripped.upper()


def suggest_aliases(
    players: list[str],
    threshold: float = DEFAULT_SUGGEST_THRESHOLD,
) -> list[AliasSuggestion]:
    """Find pairs of player names that look like unconfigured aliases.

    Names whose tolerant-normalized forms are identical get similarity 1.0;
    otherwise Jaro-Winkler on the normalized forms is used.

    Args:
        players: Canonical player names (after alias resolution).
        threshold: Minimum similarity for a pair to be reported (0–1).

    Returns:
        Suggestions ordered by descending similarity, then input order.
    """
    normalized = [(name, normalize_for_tolerant_comparison(name)) for name in players]

    suggestions: list[AliasSuggestion] = []
    for (a, norm_a), (b, norm_b) in combinations(normalized, 2):
        if norm_a == norm_b:
            similarity = 1.0
        else:
            similarity = JaroWinkler.similarity(norm_a, norm_b)
        if similarity >= threshold:
            suggestions.append(AliasSuggestion(a, b, round(similarity, 4)))

    suggestions.sort(key=lambda s: s.similarity, reverse=True)
    log.debug("%d Alias-Vorschlaege gefunden", len(suggestions))
    return suggestions
