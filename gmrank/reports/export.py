"""
gmrank — JSON Export

Dumps one analysis run (config, counts, overall and per-type rankings)
with every id resolved to its display name.
"""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path

from gmrank.combat.matchup import SortKey, rank
from gmrank.combat.pipeline import AnalysisResult
from gmrank.data.models import GameMaster, RankedEntry


def entry_to_dict(gm: GameMaster, entry: RankedEntry) -> dict:
    return {
        "creature": gm.creature_name(entry.creature_id),
        "fast_attack": gm.attack_name(entry.fast_attack_id),
        "charged_attack": gm.attack_name(entry.charged_attack_id),
        "is_legacy": entry.is_legacy,
        "can_dodge": entry.can_dodge,
        "raw_rate": entry.raw_rate,
        "scaled_rate": entry.scaled_rate,
        "endurance_score": entry.endurance_score,
        "reference_score": entry.reference_score,
        "fast_hits_per_interval": entry.fast_hits_per_interval,
        "charged_used_count": entry.charged_used_count,
    }


def build_export(analysis: AnalysisResult, key: SortKey = SortKey.DPS) -> dict:
    gm = analysis.game_master
    results = analysis.results
    return {
        "config": dataclasses.asdict(analysis.config.sim),
        "sort_key": key.value,
        "creature_count": len(gm.creatures),
        "attack_count": len(gm.attacks),
        "type_count": len(gm.type_chart),
        "pair_count": results.pair_count,
        "excluded_pairs": results.excluded_pairs,
        "skipped_pairs": results.skipped_pairs,
        "lookup_failures": [str(f) for f in analysis.failures],
        "overall": [entry_to_dict(gm, e) for e in rank(results.overall, key)],
        "by_type": {
            gm.type_chart.name(type_id): [entry_to_dict(gm, e) for e in rank(entries, key)]
            for type_id, entries in sorted(results.by_type.items())
        },
    }


def export_analysis(analysis: AnalysisResult, path: str | Path, key: SortKey = SortKey.DPS) -> Path:
    """Save the analysis to JSON."""
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(build_export(analysis, key), indent=2))
    return out_path
