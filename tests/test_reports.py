"""Tests for text reports, JSON export and the console summary."""

import dataclasses
import json

import pytest
from rich.console import Console

from gmrank.combat.matchup import SortKey
from gmrank.combat.pipeline import AnalysisConfig, run_analysis
from gmrank.combat.simulator import SimConfig
from gmrank.reports.console import SORT_LABELS, print_summary, summary_table
from gmrank.reports.export import build_export, export_analysis
from gmrank.reports.writers import (
    REPORTS,
    attack_table,
    by_type_report,
    counters_report,
    creature_list,
    format_entry,
    rating_list,
    write_reports,
)


@pytest.fixture
def analysis(testmon_bytes):
    return run_analysis(testmon_bytes, AnalysisConfig(sim=SimConfig(battle_time=20.0)))


# ---- line formats ----

def test_format_entry(analysis):
    gm = analysis.game_master
    entry = analysis.results.overall[0]
    assert format_entry(gm, entry, SortKey.DPS) == "TESTMON: TACKLE + HYPER_BEAM : 1581.25 (13.75)"
    assert format_entry(gm, entry, SortKey.DPS, with_name=False) == "TACKLE + HYPER_BEAM : 1581.25 (13.75)"


def test_format_entry_flags(analysis):
    gm = analysis.game_master
    entry = dataclasses.replace(analysis.results.overall[0], is_legacy=True, can_dodge=False)
    line = format_entry(gm, entry, SortKey.REFERENCE)
    assert line == "TESTMON: TACKLE + HYPER_BEAM : 0 (13.75) [legacy] [no dodge]"


def test_rating_list(analysis):
    lines = rating_list(analysis.game_master)
    assert len(lines) == 1
    assert lines[0].startswith("TESTMON: ")


def test_attack_table(analysis):
    lines = attack_table(analysis.game_master)
    assert lines[0].startswith("Id")
    assert len(lines) == 3
    # sorted by name
    assert "HYPER_BEAM" in lines[1]
    assert "TACKLE_FAST" in lines[2]
    # charged attacks have no damage per energy
    assert lines[1].rstrip().endswith("-")


def test_creature_list(analysis):
    lines = creature_list(analysis.game_master, analysis.results)
    assert lines[0].startswith("#1 TESTMON (Type: NORMAL, NORMAL) (Max rating: ")
    assert lines[0].endswith("ATK: 100, DEF: 100, STA: 100)")
    assert lines[1] == "TACKLE + HYPER_BEAM : 1581.25 (13.75)"
    assert lines[2] == ""


def test_by_type_report(analysis):
    lines = by_type_report(analysis.game_master, analysis.results, SortKey.DPS)
    assert lines[0] == "Best attackers of NORMAL type:"
    assert lines[2] == "TESTMON: TACKLE + HYPER_BEAM : 1581.25 (13.75)"


def test_counters_report(analysis):
    lines = counters_report(analysis.game_master, analysis.results, SortKey.DPS)
    assert lines[0] == "Best counters of NORMAL-NORMAL"
    assert lines[1].startswith("TESTMON: ")


# ---- files ----

def test_write_reports(analysis, tmp_path):
    out = tmp_path / "reports"
    written = write_reports(analysis.game_master, analysis.results, out)
    assert len(written) == 13
    assert {p.name for p in written} == set(REPORTS)
    assert all(p.exists() for p in written)
    dps = (out / "dpslist.txt").read_text()
    assert dps == "TESTMON: TACKLE + HYPER_BEAM : 1581.25 (13.75)\n"


def test_export_shape(analysis):
    data = build_export(analysis)
    assert data["sort_key"] == "scaled_rate"
    assert data["creature_count"] == 1
    assert data["attack_count"] == 2
    assert data["type_count"] == 1
    assert data["pair_count"] == 1
    assert data["excluded_pairs"] == 0
    assert data["lookup_failures"] == []
    assert data["config"]["battle_time"] == 20.0
    assert list(data["by_type"]) == ["NORMAL"]
    row = data["overall"][0]
    assert row["creature"] == "TESTMON"
    assert row["fast_attack"] == "TACKLE"
    assert row["scaled_rate"] == pytest.approx(1581.25)


def test_export_analysis_writes_json(analysis, tmp_path):
    path = export_analysis(analysis, tmp_path / "out" / "run.json", SortKey.ENDURANCE)
    data = json.loads(path.read_text())
    assert data["sort_key"] == "endurance_score"
    assert data["overall"][0]["charged_attack"] == "HYPER_BEAM"


# ---- console ----

def test_summary_table(analysis):
    table = summary_table(analysis, top=5)
    assert table.row_count == 1
    assert len(table.columns) == 7


def test_print_summary(analysis):
    console = Console(record=True, width=120)
    print_summary(analysis, console=console)
    text = console.export_text()
    assert "TESTMON" in text
    assert "1 movesets" in text


def test_sort_labels_cover_every_key(analysis):
    assert set(SORT_LABELS) == set(SortKey)
    table = summary_table(analysis, top=3, key=SortKey.ENDURANCE)
    assert table.title == "Top 3 movesets by True power"
