"""
gmrank — Combat Module

Moveset simulation and ranking over a decoded GameMaster.

Components:
    simulator.py — fast/charged rotation with energy, timing and dodging
    matchup.py   — cross product of creatures, attack pairs and type pairs
    pipeline.py  — decode -> legacy enrichment -> aggregation
    main.py      — command line entry point
"""

from gmrank.combat.simulator import CombatSimulator, SimConfig, SimulationResult, Phase, simulate
from gmrank.combat.matchup import MatchupAggregator, MatchupResults, SortKey, IncompleteTypeChart, rank
