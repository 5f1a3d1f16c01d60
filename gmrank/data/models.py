"""
gmrank — Decoded Game Records

Creatures, attacks and the type chart as built by the schema walker, plus
the ranked entries produced by the matchup aggregator.

Records are frozen: the legacy-attack pass builds new Creature values with
dataclasses.replace instead of editing stored ones.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

# Attacker level scaling (max-level CP multiplier). Used for max rating and
# for the attacker simulation pass.
ATTACKER_MULTIPLIER = 0.79030001

# Individual-value bonus added to every base stat.
STAT_BONUS = 15

FAST_SUFFIX = "_FAST"


# ---- Creatures ----

@dataclass(frozen=True)
class Creature:
    """One creature species with its stats and attack pool."""
    id: int
    name: str
    types: tuple[int, int]  # single-typed: (t, t)
    base_attack: int
    base_defense: int
    base_stamina: int
    fast_attack_ids: tuple[int, ...] = ()
    charged_attack_ids: tuple[int, ...] = ()
    current_fast_count: int = 0
    current_charged_count: int = 0
    # Derived (see Creature.build)
    max_rating: float = 0.0
    durability: float = 0.0
    overall_power: float = 0.0
    reference_multiplier: float = 0.0

    @classmethod
    def build(
        cls,
        id: int,
        name: str,
        types: tuple[int, int],
        base_attack: int,
        base_defense: int,
        base_stamina: int,
        fast_attack_ids: tuple[int, ...] = (),
        charged_attack_ids: tuple[int, ...] = (),
        reference_rating: float = 1500.0,
    ) -> Creature:
        """Create a creature with all derived stats computed once."""
        atk = base_attack + STAT_BONUS
        dfn = base_defense + STAT_BONUS
        sta = base_stamina + STAT_BONUS

        max_rating = atk * math.sqrt(dfn) * math.sqrt(sta) * ATTACKER_MULTIPLIER ** 2 / 10.0
        durability = dfn * sta
        if max_rating < reference_rating:
            reference_multiplier = 0.0
        else:
            reference_multiplier = math.sqrt(
                (reference_rating * 10.0) / (atk * math.sqrt(dfn * sta))
            )

        return cls(
            id=id,
            name=name,
            types=types,
            base_attack=base_attack,
            base_defense=base_defense,
            base_stamina=base_stamina,
            fast_attack_ids=tuple(fast_attack_ids),
            charged_attack_ids=tuple(charged_attack_ids),
            current_fast_count=len(fast_attack_ids),
            current_charged_count=len(charged_attack_ids),
            max_rating=max_rating,
            durability=durability,
            overall_power=atk * durability,
            reference_multiplier=reference_multiplier,
        )

    @property
    def attack_stat(self) -> int:
        return self.base_attack + STAT_BONUS

    @property
    def stamina_stat(self) -> int:
        return self.base_stamina + STAT_BONUS

    @property
    def is_single_typed(self) -> bool:
        return self.types[0] == self.types[1]

    def has_type(self, type_id: int) -> bool:
        return type_id in self.types


# ---- Attacks ----

@dataclass(frozen=True)
class Attack:
    """A fast (energy > 0) or charged (energy <= 0) attack."""
    id: int
    name: str
    power: float
    duration: float  # seconds
    energy_delta: int
    type_id: int

    @property
    def is_charged(self) -> bool:
        return self.energy_delta <= 0

    @property
    def display_name(self) -> str:
        if self.name.endswith(FAST_SUFFIX):
            return self.name[:-len(FAST_SUFFIX)]
        return self.name

    @property
    def energy_per_second(self) -> float | None:
        if self.duration <= 0:
            return None
        return self.energy_delta / self.duration

    @property
    def damage_per_second(self) -> float | None:
        if self.duration <= 0:
            return None
        return self.power / self.duration

    @property
    def damage_per_energy(self) -> float | None:
        """Only meaningful for fast attacks."""
        if self.energy_delta <= 0:
            return None
        return self.power / self.energy_delta


# ---- Type chart ----

class TypeChart:
    """attacking type -> defending type -> effectiveness multiplier."""

    def __init__(self):
        self.effectiveness: dict[int, dict[int, float]] = {}
        self.names: dict[int, str] = {}

    def add(self, type_id: int, name: str, table: list[float]) -> None:
        """Register one attacking type. Table position (1-based) is the defender id."""
        self.effectiveness[type_id] = {i: value for i, value in enumerate(table, 1)}
        self.names[type_id] = name

    def multiplier(self, attacking: int, defending: int) -> float:
        return self.effectiveness[attacking][defending]

    @property
    def type_ids(self) -> list[int]:
        return sorted(self.effectiveness)

    def name(self, type_id: int) -> str:
        return self.names.get(type_id, str(type_id))

    def missing(self, type_ids: set[int]) -> set[int]:
        """Ids lacking a row as attacker or a column in some attacker's row.

        Checks the given ids and every id the chart itself declares.
        """
        absent = set()
        for tid in set(type_ids) | set(self.effectiveness):
            if tid not in self.effectiveness:
                absent.add(tid)
            elif any(tid not in row for row in self.effectiveness.values()):
                absent.add(tid)
        return absent

    def __len__(self) -> int:
        return len(self.effectiveness)


# ---- Decoded file ----

@dataclass
class GameMaster:
    """Everything decoded from one game master file."""
    creatures: dict[int, Creature] = field(default_factory=dict)
    attacks: dict[int, Attack] = field(default_factory=dict)
    type_chart: TypeChart = field(default_factory=TypeChart)

    def creature_by_name(self, name: str) -> Creature | None:
        wanted = name.upper()
        for creature in self.creatures.values():
            if creature.name == wanted:
                return creature
        return None

    def attack_by_name(self, name: str) -> Attack | None:
        """Exact name first, then the fast-attack spelling NAME_FAST."""
        wanted = name.upper()
        fallback = None
        for attack in self.attacks.values():
            if attack.name == wanted:
                return attack
            if attack.name == wanted + FAST_SUFFIX:
                fallback = attack
        return fallback

    def creature_name(self, creature_id: int) -> str:
        creature = self.creatures.get(creature_id)
        return creature.name if creature else f"#{creature_id}"

    def attack_name(self, attack_id: int) -> str:
        """Display name (fast attacks lose their _FAST suffix)."""
        attack = self.attacks.get(attack_id)
        return attack.display_name if attack else f"#{attack_id}"

    def used_type_ids(self) -> set[int]:
        used = set()
        for creature in self.creatures.values():
            used.update(creature.types)
        for attack in self.attacks.values():
            used.add(attack.type_id)
        return used


# ---- Rankings ----

@dataclass(frozen=True)
class RankedEntry:
    """One scored moveset. Re-scoring always builds a new entry."""
    creature_id: int
    fast_attack_id: int
    charged_attack_id: int
    is_legacy: bool
    can_dodge: bool
    raw_rate: float
    scaled_rate: float
    endurance_score: float
    reference_score: float
    fast_hits_per_interval: int
    charged_used_count: int
