"""
gmrank Dashboard — Panel Widgets

Four panels for the TUI dashboard:
1. RankingPanel  — overall moveset ranking
2. GroupPanel    — rankings for one group (damage type or defending type pair)
3. CreaturePanel — creature table + moveset detail
4. SummaryPanel  — run overview
"""

from __future__ import annotations

from rich.text import Text
from textual.containers import Vertical
from textual.message import Message
from textual.widgets import DataTable, Static

from gmrank.combat.matchup import SortKey, rank
from gmrank.combat.pipeline import AnalysisResult
from gmrank.data.models import GameMaster, RankedEntry
from gmrank.reports.console import SORT_LABELS

# Cap on rows per table
MAX_ROWS = 300


def _flags(entry: RankedEntry) -> Text:
    text = Text()
    if entry.is_legacy:
        text.append("legacy ", style="yellow")
    if not entry.can_dodge:
        text.append("no dodge", style="red")
    return text


def _fill_ranking(table: DataTable, gm: GameMaster, entries: list[RankedEntry], key: SortKey) -> None:
    table.clear()
    for i, entry in enumerate(rank(entries, key)[:MAX_ROWS], 1):
        table.add_row(
            Text(str(i), style="bright_black"),
            Text(gm.creature_name(entry.creature_id), style="bold"),
            gm.attack_name(entry.fast_attack_id),
            gm.attack_name(entry.charged_attack_id),
            Text(f"{getattr(entry, key.value):.2f}", style="cyan"),
            f"{entry.raw_rate:.3f}",
            str(entry.fast_hits_per_interval),
            str(entry.charged_used_count),
            _flags(entry),
        )


_RANKING_COLUMNS = ("#", "Creature", "Fast", "Charged", "Score", "Raw", "Hits", "Charged x", "Flags")


# ---- 1. Ranking Panel ----

class RankingPanel(Vertical):
    """Every moveset, ranked by the active sort key."""

    def compose(self):
        yield Static("", id="ranking-title")
        table = DataTable(id="ranking-table")
        table.cursor_type = "row"
        yield table

    def on_mount(self) -> None:
        self.query_one("#ranking-table", DataTable).add_columns(*_RANKING_COLUMNS)

    def show(self, gm: GameMaster, entries: list[RankedEntry], key: SortKey) -> None:
        title: Static = self.query_one("#ranking-title", Static)
        title.update(f" {len(entries)} movesets | sorted by {SORT_LABELS[key]}")
        _fill_ranking(self.query_one("#ranking-table", DataTable), gm, entries, key)


# ---- 2. Group Panel ----

class GroupPanel(Vertical):
    """Ranking for one group at a time; the app cycles through the groups."""

    def compose(self):
        yield Static("", classes="group-title")
        table = DataTable(classes="group-table")
        table.cursor_type = "row"
        yield table

    def on_mount(self) -> None:
        self.query_one(DataTable).add_columns(*_RANKING_COLUMNS)

    def show(
        self,
        gm: GameMaster,
        label: str,
        position: str,
        entries: list[RankedEntry],
        key: SortKey,
    ) -> None:
        self.query_one(Static).update(
            Text(f" {label}  ({position})  | sorted by {SORT_LABELS[key]}  | [ / ] to switch")
        )
        _fill_ranking(self.query_one(DataTable), gm, entries, key)


# ---- 3. Creature Panel ----

class CreatureSelected(Message):
    """Posted when a creature row is highlighted."""

    def __init__(self, creature_id: int) -> None:
        self.creature_id = creature_id
        super().__init__()


class CreaturePanel(Vertical):
    """Creature stats with the highlighted creature's movesets below."""

    def compose(self):
        table = DataTable(id="creature-table")
        table.cursor_type = "row"
        yield table
        yield Static("Select a creature to see its movesets", id="creature-detail")

    def on_mount(self) -> None:
        table: DataTable = self.query_one("#creature-table", DataTable)
        table.add_columns("ID", "Name", "Types", "ATK", "DEF", "STA", "Max rating", "Movesets")

    def refresh_creatures(self, analysis: AnalysisResult) -> None:
        gm = analysis.game_master
        table: DataTable = self.query_one("#creature-table", DataTable)
        table.clear()
        creatures = sorted(gm.creatures.values(), key=lambda c: c.max_rating, reverse=True)
        for c in creatures:
            t1, t2 = (gm.type_chart.name(t) for t in c.types)
            types = t1 if c.is_single_typed else f"{t1}/{t2}"
            table.add_row(
                Text(str(c.id), style="bright_black"),
                Text(c.name, style="bold"),
                types,
                str(c.base_attack),
                str(c.base_defense),
                str(c.base_stamina),
                f"{c.max_rating:.0f}",
                str(len(analysis.results.by_creature.get(c.id, []))),
                key=str(c.id),
            )

    def show_detail(self, creature_id: int, analysis: AnalysisResult, key: SortKey) -> None:
        detail: Static = self.query_one("#creature-detail", Static)
        gm = analysis.game_master
        c = gm.creatures.get(creature_id)
        if c is None:
            detail.update("Creature not found")
            return

        lines = [
            f"#{c.id} {c.name}  durability={c.durability:g}  overall power={c.overall_power:g}  "
            f"reference multiplier={c.reference_multiplier:.4f}",
        ]
        entries = rank(analysis.results.by_creature.get(c.id, []), key)
        if not entries:
            lines.append("  no usable movesets")
        for entry in entries:
            flags = " [legacy]" if entry.is_legacy else ""
            lines.append(
                f"  {gm.attack_name(entry.fast_attack_id)} + "
                f"{gm.attack_name(entry.charged_attack_id)} : "
                f"{getattr(entry, key.value):.2f}{flags}"
            )
        detail.update(Text("\n".join(lines)))

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        if event.row_key and event.row_key.value:
            self.post_message(CreatureSelected(int(event.row_key.value)))


# ---- 4. Summary Panel ----

class SummaryPanel(Vertical):
    """Run overview."""

    def compose(self):
        yield Static("", id="summary-stats")

    def refresh_summary(self, analysis: AnalysisResult) -> None:
        gm = analysis.game_master
        results = analysis.results
        sim = analysis.config.sim
        lines = [
            "gmrank Dashboard",
            f"{'=' * 40}",
            "",
            f"Creatures:         {len(gm.creatures)}",
            f"Attacks:           {len(gm.attacks)}",
            f"Types:             {len(gm.type_chart)}",
            "",
            f"Movesets ranked:   {results.pair_count}",
            f"  Excluded:        {results.excluded_pairs} (can't dodge)",
            f"  Skipped:         {results.skipped_pairs}",
            f"Legacy failures:   {len(analysis.failures)}",
            "",
            "Battle model:",
            f"  round length     {sim.round_length:g}s",
            f"  life time        {sim.life_time:g}s",
            f"  battle time      {sim.battle_time:g}s",
            f"  reference rating {sim.reference_rating:g}",
            f"  dodging          {'on' if sim.dodge else 'off'}",
        ]
        for failure in analysis.failures[:10]:
            lines.append(f"  ! {failure}")
        self.query_one("#summary-stats", Static).update(Text("\n".join(lines)))
