"""
gmrank — Console Summary

Top-N overall movesets as a rich table, printed after the reports are
written.
"""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.text import Text

from gmrank.combat.matchup import SortKey, rank
from gmrank.combat.pipeline import AnalysisResult

SORT_LABELS: dict[SortKey, str] = {
    SortKey.DPS: "DPS",
    SortKey.ENDURANCE: "True power",
    SortKey.REFERENCE: "Prestige",
}


def summary_table(analysis: AnalysisResult, top: int = 10, key: SortKey = SortKey.DPS) -> Table:
    gm = analysis.game_master
    table = Table(title=f"Top {top} movesets by {SORT_LABELS[key]}")
    table.add_column("#", justify="right", style="bright_black")
    table.add_column("Creature", style="bold")
    table.add_column("Fast")
    table.add_column("Charged")
    table.add_column(SORT_LABELS[key], justify="right", style="cyan")
    table.add_column("Raw", justify="right")
    table.add_column("Flags")

    for i, entry in enumerate(rank(analysis.results.overall, key)[:top], 1):
        flags = Text()
        if entry.is_legacy:
            flags.append("legacy ", style="yellow")
        if not entry.can_dodge:
            flags.append("no dodge", style="red")
        table.add_row(
            str(i),
            gm.creature_name(entry.creature_id),
            gm.attack_name(entry.fast_attack_id),
            gm.attack_name(entry.charged_attack_id),
            f"{getattr(entry, key.value):.2f}",
            f"{entry.raw_rate:.3f}",
            flags,
        )
    return table


def print_summary(
    analysis: AnalysisResult,
    top: int = 10,
    key: SortKey = SortKey.DPS,
    console: Console | None = None,
) -> None:
    console = console or Console()
    results = analysis.results
    console.print(summary_table(analysis, top, key))
    console.print(
        f"[bright_black]{results.pair_count} movesets, "
        f"{results.excluded_pairs} excluded (can't dodge), "
        f"{results.skipped_pairs} skipped, "
        f"{len(analysis.failures)} legacy lookup failures[/]"
    )
