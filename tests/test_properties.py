"""
Property-based tests for the decoder and the simulator.

Uses Hypothesis to check invariants over generated inputs:
1. Varint round-trip - every u64 survives encode/decode
2. Length-delimited framing - payload bytes and cursor advance are exact
3. Truncation - an over-long declared length always raises TruncatedMessage
4. Termination - the simulator stops within a bounded number of steps
5. Energy clamp - energy never exceeds 100
6. Same-type bonus - exactly 1.25x the off-type damage
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from gm_builder import LENGTH_DELIMITED, key, ld_field, varint
from gmrank.combat.simulator import (
    MAX_ENERGY,
    MIN_DODGE_WINDOW,
    CombatSimulator,
    SimConfig,
    simulate,
)
from gmrank.data.models import Attack, Creature
from gmrank.protocol.wire import ByteRegion, TruncatedMessage, next_field

u64 = st.integers(min_value=0, max_value=(1 << 64) - 1)
field_numbers = st.integers(min_value=1, max_value=(1 << 29) - 1)
durations = st.floats(min_value=0.05, max_value=5.0, allow_nan=False)


class TestWireProperties:

    @given(value=u64)
    def test_varint_round_trip(self, value):
        cursor = ByteRegion.of(varint(value)).cursor()
        assert cursor.read_varint() == value
        assert cursor.exhausted

    @given(number=field_numbers, payload=st.binary(max_size=400), tail=st.binary(max_size=16))
    def test_length_delimited_round_trip(self, number, payload, tail):
        data = ld_field(number, payload) + tail
        cursor = ByteRegion.of(data).cursor()
        f = next_field(cursor)
        assert f.field_number == number
        assert f.as_region().tobytes() == payload
        expected = len(key(number, LENGTH_DELIMITED)) + len(varint(len(payload))) + len(payload)
        assert cursor.position == expected
        assert cursor.remaining == len(tail)

    @given(number=field_numbers, payload=st.binary(max_size=200), extra=st.integers(1, 1000))
    def test_truncation_detected(self, number, payload, extra):
        data = key(number, LENGTH_DELIMITED) + varint(len(payload) + extra) + payload
        with pytest.raises(TruncatedMessage):
            next_field(ByteRegion.of(data).cursor())


class TestSimulatorProperties:

    @given(
        fast_duration=durations,
        charged_duration=durations,
        fast_energy=st.integers(1, 30),
        charged_energy=st.integers(-100, 0),
        battle_time=st.floats(min_value=0.5, max_value=150.0),
        multiplier=st.floats(min_value=0.0, max_value=1.0),
        dodge=st.booleans(),
    )
    @settings(max_examples=150)
    def test_terminates_and_clamps_energy(
        self, fast_duration, charged_duration, fast_energy, charged_energy,
        battle_time, multiplier, dodge,
    ):
        creature = Creature.build(1, "TESTMON", (1, 1), 100, 100, 100)
        fast = Attack(1, "QUICK_FAST", 5.0, fast_duration, fast_energy, 1)
        charged = Attack(2, "BEAM", 60.0, charged_duration, charged_energy, 1)
        config = SimConfig(battle_time=battle_time, dodge=dodge)
        sim = CombatSimulator(creature, fast, charged, multiplier, config)

        bound = battle_time / min(fast_duration, charged_duration, MIN_DODGE_WINDOW) + 1
        while not sim.finished:
            sim.step()
            assert sim.energy <= MAX_ENERGY
            assert sim.steps <= bound
        assert sim.elapsed >= battle_time

    @given(
        power=st.floats(min_value=1.0, max_value=300.0),
        charged_power=st.floats(min_value=1.0, max_value=300.0),
        fast_duration=st.floats(min_value=0.3, max_value=2.0),
    )
    @settings(max_examples=50)
    def test_same_type_bonus(self, power, charged_power, fast_duration):
        on_type = Creature.build(1, "ONMON", (1, 1), 100, 100, 100)
        off_type = Creature.build(2, "OFFMON", (2, 2), 100, 100, 100)
        fast = Attack(1, "QUICK_FAST", power, fast_duration, 8, 1)
        charged = Attack(2, "BEAM", charged_power, 2.0, -50, 1)
        config = SimConfig(battle_time=30.0)

        on = simulate(on_type, fast, charged, 0.5, config)
        off = simulate(off_type, fast, charged, 0.5, config)
        assert on.primary_damage == pytest.approx(off.primary_damage * 1.25)
        assert on.secondary_damage == pytest.approx(off.secondary_damage * 1.25)
        assert on.elapsed_time == off.elapsed_time
