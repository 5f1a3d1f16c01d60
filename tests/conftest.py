"""Shared fixtures for gmrank tests."""

import pytest

from gm_builder import GameMasterBuilder, build_testmon
from gmrank.combat.simulator import SimConfig
from gmrank.data.models import Attack, Creature, GameMaster, TypeChart
from gmrank.protocol.schema import decode_game_master


@pytest.fixture
def builder() -> GameMasterBuilder:
    return GameMasterBuilder()


@pytest.fixture
def testmon_bytes() -> bytes:
    """Type NORMAL, creature TESTMON (100/100/100) with TACKLE_FAST + HYPER_BEAM."""
    return build_testmon().build()


@pytest.fixture
def testmon_gm(testmon_bytes) -> GameMaster:
    return decode_game_master(testmon_bytes)


@pytest.fixture
def creature() -> Creature:
    return Creature.build(1, "TESTMON", (1, 1), 100, 100, 100, (201,), (13,))


@pytest.fixture
def fast_attack() -> Attack:
    return Attack(201, "TACKLE_FAST", 10.0, 1.0, 10, 1)


@pytest.fixture
def charged_attack() -> Attack:
    return Attack(13, "HYPER_BEAM", 50.0, 2.0, -50, 1)


@pytest.fixture
def short_battle() -> SimConfig:
    """20 seconds, so rotations stay small enough to check by hand."""
    return SimConfig(battle_time=20.0)


@pytest.fixture
def two_type_chart() -> TypeChart:
    """NORMAL (1) and FIRE (2) with asymmetric rows."""
    chart = TypeChart()
    chart.add(1, "NORMAL", [1.0, 0.5])
    chart.add(2, "FIRE", [2.0, 0.8])
    return chart
