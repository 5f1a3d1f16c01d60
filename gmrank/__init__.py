"""
gmrank — game master decoder and moveset ranker

Packages:
    protocol/  — wire format decoding, record schema, inspector
    data/      — decoded records, side lists, legacy attacks
    combat/    — simulator, matchup aggregation, pipeline, CLI
    reports/   — text reports, JSON export, console summary
    dashboard/ — textual ranking browser
"""

__version__ = "0.1.0"
