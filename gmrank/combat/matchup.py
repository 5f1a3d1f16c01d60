"""
gmrank — Matchup Aggregator

Runs the combat simulator over every creature x (fast, charged) pair and
folds the rates into ranked entries:

  overall   — one entry per pair, both damage categories combined
  by_type   — entries credited to the type that actually deals the damage
  counters  — per ordered defending type pair (d1, d2), rates weighted by
              the type chart

Each pair is simulated twice: once with the fixed attacker multiplier and
once with the creature's own reference multiplier.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from gmrank.combat.simulator import SimConfig, SimulationResult, simulate
from gmrank.data.models import (
    ATTACKER_MULTIPLIER,
    Attack,
    Creature,
    GameMaster,
    RankedEntry,
)

log = logging.getLogger(__name__)

# Endurance weight for movesets that can't dodge.
NO_DODGE_FACTOR = 0.25


class IncompleteTypeChart(ValueError):
    """A creature or attack uses a type id the chart has no row/column for."""

    def __init__(self, missing: set[int]):
        self.missing = missing
        super().__init__(f"type chart is missing type ids {sorted(missing)}")


class SortKey(str, Enum):
    """Score fields entries can be ranked by."""
    DPS = "scaled_rate"
    ENDURANCE = "endurance_score"
    REFERENCE = "reference_score"


def rank(entries: Iterable[RankedEntry], key: SortKey = SortKey.DPS) -> list[RankedEntry]:
    """Descending by one score. Stable: ties keep their input order."""
    return sorted(entries, key=lambda e: getattr(e, key.value), reverse=True)


@dataclass
class MatchupResults:
    """Every ranked entry of one aggregation run, grouped for the reports."""
    overall: list[RankedEntry] = field(default_factory=list)
    by_creature: dict[int, list[RankedEntry]] = field(default_factory=dict)
    by_type: dict[int, list[RankedEntry]] = field(default_factory=dict)
    counters: dict[tuple[int, int], list[RankedEntry]] = field(default_factory=dict)
    excluded_pairs: int = 0  # dodge impossible
    skipped_pairs: int = 0   # unknown attack id or unusable duration

    @property
    def pair_count(self) -> int:
        return len(self.overall)


class MatchupAggregator:
    """Cross product of creatures, attack pairs and defending type pairs."""

    def __init__(
        self,
        gm: GameMaster,
        config: SimConfig | None = None,
        highlight: str | None = None,
    ):
        self.gm = gm
        self.config = config or SimConfig()
        self.highlight = highlight.upper() if highlight else None
        self.type_ids = gm.type_chart.type_ids

    def run(self) -> MatchupResults:
        missing = self.gm.type_chart.missing(self.gm.used_type_ids())
        if missing:
            raise IncompleteTypeChart(missing)

        results = MatchupResults()
        for creature_id in sorted(self.gm.creatures):
            self._score_creature(self.gm.creatures[creature_id], results)

        log.info(
            "scored %d movesets across %d creatures (%d excluded, %d skipped)",
            results.pair_count, len(results.by_creature),
            results.excluded_pairs, results.skipped_pairs,
        )
        return results

    # ---- Per creature ----

    def _score_creature(self, creature: Creature, results: MatchupResults) -> None:
        trace = creature.name == self.highlight
        if trace:
            log.info(
                "%s: atk=%d def=%d sta=%d max_rating=%.1f reference_multiplier=%.4f",
                creature.name, creature.base_attack, creature.base_defense,
                creature.base_stamina, creature.max_rating, creature.reference_multiplier,
            )

        for fi, fast_id in enumerate(creature.fast_attack_ids):
            for ci, charged_id in enumerate(creature.charged_attack_ids):
                fast = self.gm.attacks.get(fast_id)
                charged = self.gm.attacks.get(charged_id)
                if fast is None or charged is None:
                    log.warning(
                        "%s: unknown attack id in pair (%d, %d), skipped",
                        creature.name, fast_id, charged_id,
                    )
                    results.skipped_pairs += 1
                    continue
                if fast.duration <= 0 or charged.duration <= 0:
                    log.warning(
                        "%s: %s + %s has a non-positive duration, skipped",
                        creature.name, fast.name, charged.name,
                    )
                    results.skipped_pairs += 1
                    continue

                attacker = simulate(creature, fast, charged, ATTACKER_MULTIPLIER, self.config, trace)
                reference = simulate(
                    creature, fast, charged, creature.reference_multiplier, self.config, trace,
                )
                if attacker is None or reference is None:
                    log.debug("%s: %s can't dodge, excluded", creature.name, fast.name)
                    results.excluded_pairs += 1
                    continue

                is_legacy = fi >= creature.current_fast_count or ci >= creature.current_charged_count
                self._fold(creature, fast, charged, is_legacy, attacker, reference, results)

    def _fold(
        self,
        creature: Creature,
        fast: Attack,
        charged: Attack,
        is_legacy: bool,
        attacker: SimulationResult,
        reference: SimulationResult,
        results: MatchupResults,
    ) -> None:
        def entry(r: float, q: float) -> RankedEntry:
            return _make_entry(creature, fast, charged, is_legacy, attacker, r, q)

        overall = entry(attacker.damage_rate, reference.damage_rate)
        results.overall.append(overall)
        results.by_creature.setdefault(creature.id, []).append(overall)

        if fast.type_id == charged.type_id:
            results.by_type.setdefault(fast.type_id, []).append(overall)
        else:
            results.by_type.setdefault(fast.type_id, []).append(
                entry(attacker.primary_damage_rate, reference.primary_damage_rate)
            )
            results.by_type.setdefault(charged.type_id, []).append(
                entry(attacker.secondary_damage_rate, reference.secondary_damage_rate)
            )

        for d1 in self.type_ids:
            for d2 in self.type_ids:
                mf = self.effectiveness(fast.type_id, d1, d2)
                mc = self.effectiveness(charged.type_id, d1, d2)
                r = attacker.primary_damage_rate * mf + attacker.secondary_damage_rate * mc
                q = reference.primary_damage_rate * mf + reference.secondary_damage_rate * mc
                results.counters.setdefault((d1, d2), []).append(entry(r, q))

    def effectiveness(self, attacking: int, d1: int, d2: int) -> float:
        """Multiplier against a defender typed (d1, d2).

        Differing types multiply both entries; a repeated type counts once.
        """
        chart = self.gm.type_chart
        if d1 == d2:
            return chart.multiplier(attacking, d1)
        return chart.multiplier(attacking, d1) * chart.multiplier(attacking, d2)


def _make_entry(
    creature: Creature,
    fast: Attack,
    charged: Attack,
    is_legacy: bool,
    attacker: SimulationResult,
    rate: float,
    reference_rate: float,
) -> RankedEntry:
    dodge_factor = 1.0 if attacker.can_dodge else NO_DODGE_FACTOR
    return RankedEntry(
        creature_id=creature.id,
        fast_attack_id=fast.id,
        charged_attack_id=charged.id,
        is_legacy=is_legacy,
        can_dodge=attacker.can_dodge,
        raw_rate=rate,
        scaled_rate=rate * creature.attack_stat,
        endurance_score=rate * creature.overall_power * dodge_factor,
        reference_score=reference_rate * creature.overall_power * creature.reference_multiplier ** 3,
        fast_hits_per_interval=attacker.expected_hits_per_interval,
        charged_used_count=attacker.charged_attacks_used,
    )
