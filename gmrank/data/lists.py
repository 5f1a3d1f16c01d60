"""
gmrank — Input Files

Loads the game master buffer and the two plain-text side lists:
  exclusion list  — one creature name per line
  legacy list     — "CREATURE ATTACK" per line (space or comma separated)
'#' starts a comment, blank lines are ignored.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

log = logging.getLogger(__name__)

# Creatures left out of rankings by --exclude-legendaries.
LEGENDARY_NAMES = frozenset({
    "ARTICUNO", "ZAPDOS", "MOLTRES", "MEWTWO", "MEW",
    "RAIKOU", "ENTEI", "SUICUNE", "LUGIA", "HO_OH", "CELEBI",
})

_SEPARATORS = re.compile(r"[\s,]+")


def read_game_master(path: str | Path) -> bytes:
    """Read the whole binary file. Raises OSError if it can't be read."""
    data = Path(path).read_bytes()
    log.info("loaded %s (%d bytes)", path, len(data))
    return data


def _content_lines(path: str | Path) -> list[tuple[int, str]]:
    lines = []
    for lineno, raw in enumerate(Path(path).read_text(encoding="utf-8").splitlines(), 1):
        line = raw.split("#", 1)[0].strip()
        if line:
            lines.append((lineno, line))
    return lines


def load_name_list(path: str | Path) -> set[str]:
    """Creature names, upper-cased."""
    return {line.upper() for _, line in _content_lines(path)}


def load_legacy_pairs(path: str | Path) -> list[tuple[str, str]]:
    """(creature name, attack name) pairs, upper-cased, in file order."""
    pairs = []
    for lineno, line in _content_lines(path):
        parts = _SEPARATORS.split(line)
        if len(parts) != 2:
            log.warning("%s:%d: expected 'CREATURE ATTACK', got %r", path, lineno, line)
            continue
        pairs.append((parts[0].upper(), parts[1].upper()))
    return pairs
