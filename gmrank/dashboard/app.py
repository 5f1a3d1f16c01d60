"""
gmrank Dashboard — Textual TUI App

Browses the rankings of a finished analysis run. The analysis is done
before the app starts; the app only reads it.

Keys:
  o / y / c / p / s — Overall, By Type, Counters, Creatures, Summary tabs
  k                 — cycle sort key (DPS, true power, prestige)
  [ / ]             — previous / next damage type or defending type pair
  x                 — export the current ranking to JSON
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Footer, Static, TabbedContent, TabPane

from gmrank.combat.matchup import SortKey
from gmrank.combat.pipeline import AnalysisResult
from gmrank.dashboard.widgets import (
    CreaturePanel,
    CreatureSelected,
    GroupPanel,
    RankingPanel,
    SummaryPanel,
)
from gmrank.reports.console import SORT_LABELS
from gmrank.reports.export import export_analysis

SORT_CYCLE = [SortKey.DPS, SortKey.ENDURANCE, SortKey.REFERENCE]


class RankDashboard(App):
    """gmrank ranking browser."""

    CSS_PATH = "styles.tcss"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("o", "switch_tab('overall')", "Overall", show=True),
        Binding("y", "switch_tab('by-type')", "By Type", show=True),
        Binding("c", "switch_tab('counters')", "Counters", show=True),
        Binding("p", "switch_tab('creatures')", "Creatures", show=True),
        Binding("s", "switch_tab('summary')", "Summary", show=True),
        Binding("k", "cycle_sort", "Sort"),
        Binding("left_square_bracket", "group_prev", "Prev"),
        Binding("right_square_bracket", "group_next", "Next"),
        Binding("x", "export", "Export"),
    ]

    def __init__(self, analysis: AnalysisResult, export_dir: str | Path = "data"):
        super().__init__()
        self.analysis = analysis
        self.export_dir = Path(export_dir)
        self._sort_index = 0
        self._type_ids = sorted(analysis.results.by_type)
        self._pairs = sorted(analysis.results.counters)
        self._type_index = 0
        self._pair_index = 0
        self._selected_creature: int | None = None

    @property
    def sort_key(self) -> SortKey:
        return SORT_CYCLE[self._sort_index]

    def compose(self) -> ComposeResult:
        with Horizontal(id="header-bar"):
            yield Static("gmrank", id="status-label")
            yield Static("", id="sort-label")
        with TabbedContent(id="tabs"):
            with TabPane("Overall", id="overall"):
                yield RankingPanel()
            with TabPane("By Type", id="by-type"):
                yield GroupPanel(id="by-type-panel")
            with TabPane("Counters", id="counters"):
                yield GroupPanel(id="counters-panel")
            with TabPane("Creatures", id="creatures"):
                yield CreaturePanel()
            with TabPane("Summary", id="summary"):
                yield SummaryPanel()
        yield Footer()

    def on_mount(self) -> None:
        # Panels add their columns in their own on_mount
        self.call_after_refresh(self._initial_fill)

    def _initial_fill(self) -> None:
        self.query_one(CreaturePanel).refresh_creatures(self.analysis)
        self.query_one(SummaryPanel).refresh_summary(self.analysis)
        self._refresh_rankings()

    def _update_header(self) -> None:
        gm = self.analysis.game_master
        status: Static = self.query_one("#status-label", Static)
        sort_label: Static = self.query_one("#sort-label", Static)
        status.update(
            f"gmrank | {len(gm.creatures)} creatures | "
            f"{self.analysis.results.pair_count} movesets"
        )
        sort_label.update(f"sort: {SORT_LABELS[self.sort_key]}")

    def _refresh_rankings(self) -> None:
        """Redraw every ranking table with the current sort key and groups."""
        self._update_header()
        gm = self.analysis.game_master
        results = self.analysis.results
        key = self.sort_key

        self.query_one(RankingPanel).show(gm, results.overall, key)

        by_type: GroupPanel = self.query_one("#by-type-panel", GroupPanel)
        if self._type_ids:
            type_id = self._type_ids[self._type_index]
            by_type.show(
                gm,
                f"Best attackers of {gm.type_chart.name(type_id)} type",
                f"{self._type_index + 1}/{len(self._type_ids)}",
                results.by_type[type_id],
                key,
            )

        counters: GroupPanel = self.query_one("#counters-panel", GroupPanel)
        if self._pairs:
            d1, d2 = self._pairs[self._pair_index]
            counters.show(
                gm,
                f"Best counters of {gm.type_chart.name(d1)}-{gm.type_chart.name(d2)}",
                f"{self._pair_index + 1}/{len(self._pairs)}",
                results.counters[(d1, d2)],
                key,
            )

        if self._selected_creature is not None:
            self.query_one(CreaturePanel).show_detail(self._selected_creature, self.analysis, key)

    # ---- Actions ----

    def action_switch_tab(self, tab_id: str) -> None:
        tabs: TabbedContent = self.query_one("#tabs", TabbedContent)
        tabs.active = tab_id

    def action_cycle_sort(self) -> None:
        self._sort_index = (self._sort_index + 1) % len(SORT_CYCLE)
        self._refresh_rankings()
        self.notify(f"Sort: {SORT_LABELS[self.sort_key]}")

    def _step_group(self, delta: int) -> None:
        tabs: TabbedContent = self.query_one("#tabs", TabbedContent)
        if tabs.active == "by-type" and self._type_ids:
            self._type_index = (self._type_index + delta) % len(self._type_ids)
        elif tabs.active == "counters" and self._pairs:
            self._pair_index = (self._pair_index + delta) % len(self._pairs)
        else:
            return
        self._refresh_rankings()

    def action_group_prev(self) -> None:
        self._step_group(-1)

    def action_group_next(self) -> None:
        self._step_group(1)

    def action_export(self) -> None:
        """Export the analysis, ranked by the current sort key."""
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        out_path = export_analysis(
            self.analysis, self.export_dir / f"rankings_{ts}.json", self.sort_key,
        )
        self.notify(f"Exported to {out_path}")

    def on_creature_selected(self, event: CreatureSelected) -> None:
        self._selected_creature = event.creature_id
        self.query_one(CreaturePanel).show_detail(event.creature_id, self.analysis, self.sort_key)
