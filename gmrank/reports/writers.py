"""
gmrank — Text Reports

One plain-text file per ranking. Every builder returns its lines so the
reports can be checked without touching the filesystem; write_reports()
puts them all into one directory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from gmrank.combat.matchup import MatchupResults, SortKey, rank
from gmrank.data.models import GameMaster, RankedEntry

log = logging.getLogger(__name__)


def _num(value: float | None) -> str:
    return "-" if value is None else f"{value:g}"


def format_entry(gm: GameMaster, entry: RankedEntry, key: SortKey, with_name: bool = True) -> str:
    """NAME: FAST + CHARGED : value (raw) [flags]"""
    value = getattr(entry, key.value)
    moves = f"{gm.attack_name(entry.fast_attack_id)} + {gm.attack_name(entry.charged_attack_id)}"
    line = f"{moves} : {value:g} ({entry.raw_rate:g})"
    if with_name:
        line = f"{gm.creature_name(entry.creature_id)}: {line}"
    if entry.is_legacy:
        line += " [legacy]"
    if not entry.can_dodge:
        line += " [no dodge]"
    return line


# ---- Creature stat lists ----

def _stat_list(gm: GameMaster, attr: str) -> list[str]:
    creatures = sorted(gm.creatures.values(), key=lambda c: getattr(c, attr), reverse=True)
    return [f"{c.name}: {getattr(c, attr):g}" for c in creatures]


def rating_list(gm: GameMaster) -> list[str]:
    return _stat_list(gm, "max_rating")


def durability_list(gm: GameMaster) -> list[str]:
    return _stat_list(gm, "durability")


def overall_power_list(gm: GameMaster) -> list[str]:
    return _stat_list(gm, "overall_power")


# ---- Attacks ----

def attack_table(gm: GameMaster) -> list[str]:
    lines = [
        f"{'Id':<5}{'Name':<30} {'Type':<12} {'Power':<10} {'Energy':<10} "
        f"{'Duration':<10} {'EPS':<10} {'DPS':<10} {'DPE':<10}"
    ]
    for a in sorted(gm.attacks.values(), key=lambda a: a.name):
        lines.append(
            f"{a.id:<5}{a.name:<30} {gm.type_chart.name(a.type_id):<12} {a.power:<10g} "
            f"{a.energy_delta:<10d} {a.duration:<10g} {_num(a.energy_per_second):<10} "
            f"{_num(a.damage_per_second):<10} {_num(a.damage_per_energy):<10}"
        )
    return lines


# ---- Per creature ----

def creature_list(gm: GameMaster, results: MatchupResults) -> list[str]:
    """Every creature's stats followed by its movesets, best first."""
    lines = []
    for creature_id in sorted(gm.creatures):
        c = gm.creatures[creature_id]
        t1, t2 = (gm.type_chart.name(t) for t in c.types)
        lines.append(
            f"#{c.id} {c.name} (Type: {t1}, {t2}) (Max rating: {c.max_rating:g}, "
            f"ATK: {c.base_attack}, DEF: {c.base_defense}, STA: {c.base_stamina})"
        )
        for entry in rank(results.by_creature.get(c.id, []), SortKey.DPS):
            lines.append(format_entry(gm, entry, SortKey.DPS, with_name=False))
        lines.append("")
    return lines


# ---- Rankings ----

def ranking_list(gm: GameMaster, entries: list[RankedEntry], key: SortKey) -> list[str]:
    return [format_entry(gm, e, key) for e in rank(entries, key)]


def by_type_report(gm: GameMaster, results: MatchupResults, key: SortKey) -> list[str]:
    lines = []
    for type_id in sorted(results.by_type):
        lines.append(f"Best attackers of {gm.type_chart.name(type_id)} type:")
        lines.append("")
        lines.extend(ranking_list(gm, results.by_type[type_id], key))
        lines.extend(["", ""])
    return lines


def counters_report(gm: GameMaster, results: MatchupResults, key: SortKey) -> list[str]:
    lines = []
    for d1, d2 in sorted(results.counters):
        lines.append(f"Best counters of {gm.type_chart.name(d1)}-{gm.type_chart.name(d2)}")
        lines.extend(ranking_list(gm, results.counters[(d1, d2)], key))
        lines.extend(["", ""])
    return lines


# ---- Output ----

ReportBuilder = Callable[[GameMaster, MatchupResults], list[str]]

REPORTS: dict[str, ReportBuilder] = {
    "cplist.txt": lambda gm, r: rating_list(gm),
    "tankiness.txt": lambda gm, r: durability_list(gm),
    "truestrength.txt": lambda gm, r: overall_power_list(gm),
    "moves.txt": lambda gm, r: attack_table(gm),
    "pokemonlist.txt": creature_list,
    "dpslist.txt": lambda gm, r: ranking_list(gm, r.overall, SortKey.DPS),
    "truepowerlist.txt": lambda gm, r: ranking_list(gm, r.overall, SortKey.ENDURANCE),
    "prestigelist.txt": lambda gm, r: ranking_list(gm, r.overall, SortKey.REFERENCE),
    "bestDPSbyType.txt": lambda gm, r: by_type_report(gm, r, SortKey.DPS),
    "bestTruePowerByType.txt": lambda gm, r: by_type_report(gm, r, SortKey.ENDURANCE),
    "bestDPSCounters.txt": lambda gm, r: counters_report(gm, r, SortKey.DPS),
    "bestTruePowerCounters.txt": lambda gm, r: counters_report(gm, r, SortKey.ENDURANCE),
    "bestPrestigeCounters.txt": lambda gm, r: counters_report(gm, r, SortKey.REFERENCE),
}


def write_reports(gm: GameMaster, results: MatchupResults, output_dir: str | Path) -> list[Path]:
    """Write every report into output_dir (created if needed)."""
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    written = []
    for filename, build in REPORTS.items():
        path = out / filename
        lines = build(gm, results)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        log.debug("wrote %s (%d lines)", path, len(lines))
        written.append(path)
    log.info("wrote %d reports to %s", len(written), out)
    return written
