"""
gmrank — Combat Simulator

Replays one attacker's rotation against a defender that attacks every
`round_length` seconds:

    energy >= charged cost?  ──yes──> CHARGED_ATTACK (fires once, no dodge)
            │no
            v
    FAST_ATTACK: as many fast hits as fit before the next incoming attack
                 (capped at expected_hits), then dodge for the rest of the
                 round (at least MIN_DODGE_WINDOW seconds)

Energy comes from the attacks themselves plus damage taken over the assumed
lifetime, and is capped at MAX_ENERGY.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum, auto

from gmrank.data.models import Attack, Creature

log = logging.getLogger(__name__)

STAB_MULTIPLIER = 1.25
MAX_ENERGY = 100.0
MIN_DODGE_WINDOW = 0.5
# Reaction time lost before the first hit of a round can land.
REACTION_MARGIN = 0.49
# Energy gained per HP of damage taken.
ENERGY_PER_HP = 0.5


# ---- Phases ----

class Phase(Enum):
    FAST_ATTACK = auto()     # Spamming the fast attack, dodging between rounds
    CHARGED_ATTACK = auto()  # Spending banked energy on the charged attack


# ---- Configuration ----

@dataclass
class SimConfig:
    """Battle model parameters."""
    # Defender attack interval (seconds)
    round_length: float = 2.5
    # Expected survival time; spreads damage-taken energy over the battle (seconds)
    life_time: float = 100.0
    # Total simulated time per rotation (seconds)
    battle_time: float = 100.0
    # Rating cap for the reference ranking pass
    reference_rating: float = 1500.0
    # False = never dodge: one fast attack per step, no dodge windows
    dodge: bool = True

    def __post_init__(self) -> None:
        for name in ("round_length", "life_time", "battle_time"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")


# ---- Results ----

@dataclass(frozen=True)
class SimulationResult:
    """Totals of one finished rotation."""
    primary_damage: float    # fast attack damage
    secondary_damage: float  # charged attack damage
    elapsed_time: float
    expected_hits_per_interval: int
    charged_attacks_used: int
    can_dodge: bool

    @property
    def primary_damage_rate(self) -> float:
        return self.primary_damage / self.elapsed_time

    @property
    def secondary_damage_rate(self) -> float:
        return self.secondary_damage / self.elapsed_time

    @property
    def damage_rate(self) -> float:
        return self.primary_damage_rate + self.secondary_damage_rate


def expected_hits_per_interval(fast: Attack, round_length: float) -> int:
    """Fast hits that fit in one round after the reaction margin."""
    return math.floor((round_length - REACTION_MARGIN) / fast.duration)


# ---- Simulator ----

class CombatSimulator:
    """Steps one creature's fast/charged rotation until battle_time."""

    def __init__(
        self,
        creature: Creature,
        fast: Attack,
        charged: Attack,
        multiplier: float,
        config: SimConfig | None = None,
        trace: bool = False,
    ):
        if fast.duration <= 0 or charged.duration <= 0:
            raise ValueError(
                f"attack durations must be positive ({fast.name}={fast.duration}, "
                f"{charged.name}={charged.duration})"
            )
        self.creature = creature
        self.fast = fast
        self.charged = charged
        self.multiplier = multiplier
        self.config = config or SimConfig()
        self.trace = trace

        self.phase = Phase.FAST_ATTACK
        self.energy = 0.0
        self.elapsed = 0.0
        self.primary_damage = 0.0
        self.secondary_damage = 0.0
        self.charged_used = 0
        self.steps = 0
        if self.config.dodge:
            self.expected_hits = expected_hits_per_interval(fast, self.config.round_length)
        else:
            self.expected_hits = 1

    @property
    def can_dodge(self) -> bool:
        return self.config.dodge and self.expected_hits > 0

    @property
    def finished(self) -> bool:
        return self.elapsed >= self.config.battle_time

    def _stab(self, attack: Attack) -> float:
        return STAB_MULTIPLIER if self.creature.has_type(attack.type_id) else 1.0

    def _passive_energy(self, attack: Attack) -> float:
        """Energy from damage taken while this attack plays out."""
        hp = self.creature.stamina_stat * self.multiplier
        return (attack.duration / self.config.life_time) * ENERGY_PER_HP * hp

    # ---- Decision step ----

    def step(self) -> Phase:
        """Fire one charged attack or one fast burst. Returns the phase used."""
        remaining = 0.0
        if self.energy >= -self.charged.energy_delta:
            self.phase = Phase.CHARGED_ATTACK
            attack = self.charged
            reps = 1
        else:
            self.phase = Phase.FAST_ATTACK
            attack = self.fast
            if self.config.dodge:
                remaining = self.config.round_length - (self.elapsed % self.config.round_length)
                reps = min(math.floor(remaining / attack.duration), self.expected_hits)
            else:
                reps = 1

        damage = attack.power * self._stab(attack) * reps
        if self.phase is Phase.CHARGED_ATTACK:
            self.secondary_damage += damage
            self.charged_used += 1
        else:
            self.primary_damage += damage

        self.energy += (attack.energy_delta + self._passive_energy(attack)) * reps
        self.energy = min(self.energy, MAX_ENERGY)
        self.elapsed += attack.duration * reps

        dodge = 0.0
        if self.phase is Phase.FAST_ATTACK and self.config.dodge:
            dodge = max(remaining - attack.duration * reps, MIN_DODGE_WINDOW)
            self.elapsed += dodge

        self.steps += 1
        if self.trace:
            log.info(
                "%s t=%.2f %s x%d dmg=%.2f energy=%.2f dodge=%.2f",
                self.creature.name, self.elapsed, attack.name, reps,
                damage, self.energy, dodge,
            )
        return self.phase

    def run(self) -> SimulationResult | None:
        """Run to battle_time. None if this fast attack can't be dodged around."""
        if self.config.dodge and self.expected_hits <= 0:
            if self.trace:
                log.info(
                    "%s: %s too slow to dodge (round %.2fs)",
                    self.creature.name, self.fast.name, self.config.round_length,
                )
            return None

        while not self.finished:
            self.step()
        return self.result()

    def result(self) -> SimulationResult:
        return SimulationResult(
            primary_damage=self.primary_damage,
            secondary_damage=self.secondary_damage,
            elapsed_time=self.elapsed,
            expected_hits_per_interval=self.expected_hits,
            charged_attacks_used=self.charged_used,
            can_dodge=self.can_dodge,
        )


def simulate(
    creature: Creature,
    fast: Attack,
    charged: Attack,
    multiplier: float,
    config: SimConfig | None = None,
    trace: bool = False,
) -> SimulationResult | None:
    """Run one rotation; None when dodging is impossible for this fast attack."""
    return CombatSimulator(creature, fast, charged, multiplier, config, trace).run()
