"""Tests for side-list loading and legacy attack injection."""

import pytest

from gmrank.data.legacy import LookupFailure, apply_legacy_attacks
from gmrank.data.lists import (
    LEGENDARY_NAMES,
    load_legacy_pairs,
    load_name_list,
    read_game_master,
)
from gmrank.data.models import Attack


# ---- list files ----

def test_load_name_list(tmp_path):
    path = tmp_path / "exclude.txt"
    path.write_text("# legendaries\nmewtwo\n\n  Lugia  # birds too\nMEW\n")
    assert load_name_list(path) == {"MEWTWO", "LUGIA", "MEW"}


def test_load_legacy_pairs(tmp_path):
    path = tmp_path / "legacy.txt"
    path.write_text(
        "# creature attack\n"
        "DRAGONITE DRAGON_PULSE\n"
        "raichu, thunder\n"
        "GYARADOS\tDRAGON_TAIL_FAST\n"
        "broken line with words\n"
        "LONELY\n"
    )
    assert load_legacy_pairs(path) == [
        ("DRAGONITE", "DRAGON_PULSE"),
        ("RAICHU", "THUNDER"),
        ("GYARADOS", "DRAGON_TAIL_FAST"),
    ]


def test_load_legacy_pairs_warns_on_malformed(tmp_path, caplog):
    path = tmp_path / "legacy.txt"
    path.write_text("ONLYONE\n")
    assert load_legacy_pairs(path) == []
    assert "legacy.txt:1" in caplog.text


def test_read_game_master(tmp_path):
    path = tmp_path / "GAME_MASTER.protobuf"
    path.write_bytes(b"\x12\x00")
    assert read_game_master(path) == b"\x12\x00"


def test_read_game_master_missing(tmp_path):
    with pytest.raises(OSError):
        read_game_master(tmp_path / "nope")


def test_legendary_names():
    assert "MEWTWO" in LEGENDARY_NAMES
    assert "HO_OH" in LEGENDARY_NAMES
    assert "PIKACHU" not in LEGENDARY_NAMES


# ---- legacy injection ----

def test_apply_legacy_charged(testmon_gm):
    testmon_gm.attacks[14] = Attack(14, "BODY_SLAM", 40.0, 1.5, -33, 1)
    enriched, failures = apply_legacy_attacks(testmon_gm, [("TESTMON", "BODY_SLAM")])
    assert failures == []
    c = enriched.creatures[1]
    assert c.charged_attack_ids == (13, 14)
    assert c.current_charged_count == 1
    assert c.fast_attack_ids == (201,)


def test_apply_legacy_fast_by_short_name(testmon_gm):
    testmon_gm.attacks[202] = Attack(202, "SCRATCH_FAST", 6.0, 0.5, 4, 1)
    enriched, _ = apply_legacy_attacks(testmon_gm, [("testmon", "scratch")])
    c = enriched.creatures[1]
    assert c.fast_attack_ids == (201, 202)
    assert c.current_fast_count == 1


def test_apply_legacy_leaves_original_untouched(testmon_gm):
    testmon_gm.attacks[14] = Attack(14, "BODY_SLAM", 40.0, 1.5, -33, 1)
    enriched, _ = apply_legacy_attacks(testmon_gm, [("TESTMON", "BODY_SLAM")])
    assert testmon_gm.creatures[1].charged_attack_ids == (13,)
    assert enriched is not testmon_gm
    assert enriched.attacks is testmon_gm.attacks


def test_apply_legacy_known_attack_not_duplicated(testmon_gm):
    enriched, failures = apply_legacy_attacks(testmon_gm, [("TESTMON", "HYPER_BEAM")])
    assert failures == []
    assert enriched.creatures[1].charged_attack_ids == (13,)


def test_apply_legacy_lookup_failures(testmon_gm, caplog):
    pairs = [("NOBODY", "HYPER_BEAM"), ("TESTMON", "SPLASH")]
    enriched, failures = apply_legacy_attacks(testmon_gm, pairs)
    assert failures == [
        LookupFailure("NOBODY", "HYPER_BEAM", "unknown creature"),
        LookupFailure("TESTMON", "SPLASH", "unknown attack"),
    ]
    assert str(failures[1]) == "TESTMON + SPLASH: unknown attack"
    assert enriched.creatures[1] == testmon_gm.creatures[1]
    assert "NOBODY" in caplog.text
