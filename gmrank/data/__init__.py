from .models import Creature, Attack, TypeChart, GameMaster, RankedEntry
from .legacy import LookupFailure, apply_legacy_attacks

__all__ = [
    "Creature", "Attack", "TypeChart", "GameMaster", "RankedEntry",
    "LookupFailure", "apply_legacy_attacks",
]
