"""
gmrank — Analysis Pipeline

decode -> legacy enrichment -> matchup aggregation, strictly in that order.
Enrichment finishes before any simulation starts; the simulator and
aggregator only ever see the enriched GameMaster.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from gmrank.combat.matchup import MatchupAggregator, MatchupResults
from gmrank.combat.simulator import SimConfig
from gmrank.data.legacy import LookupFailure, apply_legacy_attacks
from gmrank.data.lists import read_game_master
from gmrank.data.models import GameMaster
from gmrank.protocol.schema import decode_game_master

log = logging.getLogger(__name__)


@dataclass
class AnalysisConfig:
    """Everything the CLI collects for one run."""
    # Battle model
    sim: SimConfig = field(default_factory=SimConfig)
    # Creature names left out entirely
    excluded: set[str] = field(default_factory=set)
    # (creature, attack) pairs appended as legacy attacks
    legacy_pairs: list[tuple[str, str]] = field(default_factory=list)
    # Creature whose simulation steps are traced at INFO
    highlight: str | None = None
    # Where text reports go
    output_dir: Path = Path("reports")


@dataclass
class AnalysisResult:
    game_master: GameMaster
    results: MatchupResults
    failures: list[LookupFailure]
    config: AnalysisConfig


def run_analysis(data: bytes, config: AnalysisConfig | None = None) -> AnalysisResult:
    """Decode a game master buffer and rank every moveset in it.

    Decode errors (ProtoDecodeError) and IncompleteTypeChart propagate.
    """
    config = config or AnalysisConfig()
    gm = decode_game_master(
        data,
        reference_rating=config.sim.reference_rating,
        excluded=config.excluded,
    )
    gm, failures = apply_legacy_attacks(gm, config.legacy_pairs)
    results = MatchupAggregator(gm, config.sim, highlight=config.highlight).run()
    return AnalysisResult(game_master=gm, results=results, failures=failures, config=config)


def analyze_file(path: str | Path, config: AnalysisConfig | None = None) -> AnalysisResult:
    return run_analysis(read_game_master(path), config)
