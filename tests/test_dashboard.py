"""Headless tests for the ranking dashboard."""

import asyncio

import pytest
from textual.widgets import DataTable, TabbedContent

from gmrank.combat.matchup import SortKey
from gmrank.combat.pipeline import AnalysisConfig, run_analysis
from gmrank.combat.simulator import SimConfig
from gmrank.dashboard import widgets
from gmrank.dashboard.app import RankDashboard
from gmrank.reports.console import SORT_LABELS


@pytest.fixture
def analysis(testmon_bytes):
    return run_analysis(testmon_bytes, AnalysisConfig(sim=SimConfig(battle_time=20.0)))


def _run(app, scenario):
    async def go():
        async with app.run_test() as pilot:
            await pilot.pause()
            await scenario(app, pilot)
    asyncio.run(go())


def test_tables_filled_on_mount(analysis):
    async def scenario(app, pilot):
        assert app.query_one("#ranking-table", DataTable).row_count == 1
        assert app.query_one("#creature-table", DataTable).row_count == 1

    _run(RankDashboard(analysis), scenario)


def test_cycle_sort_and_tabs(analysis):
    async def scenario(app, pilot):
        await pilot.press("k")
        assert app.sort_key is SortKey.ENDURANCE
        await pilot.press("c")
        assert app.query_one("#tabs", TabbedContent).active == "counters"

    _run(RankDashboard(analysis), scenario)


def test_export(analysis, tmp_path):
    async def scenario(app, pilot):
        await pilot.press("x")
        await pilot.pause()

    _run(RankDashboard(analysis, export_dir=tmp_path), scenario)
    assert len(list(tmp_path.glob("rankings_*.json"))) == 1


def test_panels_share_console_labels():
    assert widgets.SORT_LABELS is SORT_LABELS
