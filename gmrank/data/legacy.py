"""
gmrank — Legacy Attack Injection

Adds attacks a creature can only have through past events. Runs once,
after decoding and before any simulation: it returns a new GameMaster and
leaves the decoded one untouched.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Iterable

from gmrank.data.models import GameMaster

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class LookupFailure:
    """A legacy pair that named an unknown creature or attack."""
    creature_name: str
    attack_name: str
    reason: str

    def __str__(self) -> str:
        return f"{self.creature_name} + {self.attack_name}: {self.reason}"


def apply_legacy_attacks(
    gm: GameMaster,
    pairs: Iterable[tuple[str, str]],
) -> tuple[GameMaster, list[LookupFailure]]:
    """Append each legacy attack to its creature's fast or charged pool.

    Attacks with energy_delta <= 0 go to the charged pool. Unknown names are
    reported and skipped; they never abort the run.
    """
    creatures = dict(gm.creatures)
    failures: list[LookupFailure] = []
    injected = 0

    for creature_name, attack_name in pairs:
        current = gm.creature_by_name(creature_name)
        if current is None:
            failures.append(LookupFailure(creature_name, attack_name, "unknown creature"))
            log.warning("legacy: unknown creature %s", creature_name)
            continue
        attack = gm.attack_by_name(attack_name)
        if attack is None:
            failures.append(LookupFailure(creature_name, attack_name, "unknown attack"))
            log.warning("legacy: unknown attack %s (for %s)", attack_name, creature_name)
            continue

        creature = creatures[current.id]
        if attack.is_charged:
            if attack.id in creature.charged_attack_ids:
                log.debug("legacy: %s already knows %s", creature.name, attack.name)
                continue
            creature = dataclasses.replace(
                creature, charged_attack_ids=creature.charged_attack_ids + (attack.id,),
            )
        else:
            if attack.id in creature.fast_attack_ids:
                log.debug("legacy: %s already knows %s", creature.name, attack.name)
                continue
            creature = dataclasses.replace(
                creature, fast_attack_ids=creature.fast_attack_ids + (attack.id,),
            )
        creatures[creature.id] = creature
        injected += 1
        log.debug("legacy: %s += %s", creature.name, attack.name)

    if injected or failures:
        log.info("legacy attacks: %d injected, %d lookup failures", injected, len(failures))

    enriched = GameMaster(creatures=creatures, attacks=gm.attacks, type_chart=gm.type_chart)
    return enriched, failures
