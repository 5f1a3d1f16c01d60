"""
gmrank — Game Master Schema

Registry of the record layouts we understand, and the walker that turns a
raw game master buffer into typed records.

Top level:   repeated #2 item templates (length-delimited)
Template:    #1 name (text), #2 / #4 / #8 details (sub-message)
The template name picks the layout:
    V0001_POKEMON_BULBASAUR  -> creature   (id from the V-number)
    V0013_MOVE_WRAP          -> attack     (id from the V-number)
    POKEMON_TYPE_FIRE        -> type       (id from the details)
Everything else in the file (items, settings, ...) is skipped.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator

from gmrank.data.models import Attack, Creature, GameMaster
from gmrank.protocol.wire import (
    ByteRegion,
    DecodedField,
    WireKind,
    iter_fields,
    read_packed_floats,
    read_packed_varints,
)

log = logging.getLogger(__name__)

TEMPLATE_FIELD = 2
TEMPLATE_NAME_FIELD = 1
TEMPLATE_DETAIL_FIELDS = frozenset({2, 4, 8})

# Repeated scalars sent as one length-delimited run
PACKED_TYPES = frozenset({"packed_varint", "packed_float32"})


@dataclass
class FieldSpec:
    """A field within a record's details message."""
    number: int
    name: str
    type: str  # "varint", "int64", "float32", "millis", "packed_varint", "packed_float32", "message"
    description: str = ""
    fields: list[FieldSpec] = field(default_factory=list)  # layout of a nested "message"


@dataclass
class RecordDef:
    """A record kind: how to recognise it and how its details are laid out."""
    kind: str
    pattern: re.Pattern
    fields: list[FieldSpec]
    description: str = ""


# ---- Layouts ----

BASE_STATS_FIELDS = [
    FieldSpec(1, "stamina", "varint", "Base stamina"),
    FieldSpec(2, "attack", "varint", "Base attack"),
    FieldSpec(3, "defense", "varint", "Base defense"),
]

CREATURE_FIELDS = [
    FieldSpec(4, "primary_type", "varint", "Primary type id"),
    FieldSpec(5, "secondary_type", "varint", "Secondary type id (absent = single-typed)"),
    FieldSpec(8, "base_stats", "message", "Base stats", fields=BASE_STATS_FIELDS),
    FieldSpec(9, "fast_attack_ids", "packed_varint", "Quick move ids"),
    FieldSpec(10, "charged_attack_ids", "packed_varint", "Charged move ids"),
]

ATTACK_FIELDS = [
    FieldSpec(3, "type_id", "varint", "Attack type id"),
    FieldSpec(4, "power", "float32", "Base power"),
    FieldSpec(12, "duration", "millis", "Duration (ms on the wire, seconds decoded)"),
    FieldSpec(15, "energy_delta", "int64", "Energy gained (fast) or spent (charged, negative)"),
]

TYPE_FIELDS = [
    FieldSpec(1, "effectiveness", "packed_float32", "Multiplier per defending type, 1-based"),
    FieldSpec(2, "type_id", "varint", "Type id"),
]

RECORD_DEFS: list[RecordDef] = [
    RecordDef("creature", re.compile(r"V(\d+)_POKEMON_(.+)"), CREATURE_FIELDS,
              "Creature species settings"),
    RecordDef("attack", re.compile(r"V(\d+)_MOVE_(.+)"), ATTACK_FIELDS,
              "Move settings"),
    RecordDef("type", re.compile(r"POKEMON_TYPE_(.+)"), TYPE_FIELDS,
              "Type effectiveness row"),
]


# ---- Generic field decoding ----

def convert_field(f: DecodedField, spec: FieldSpec) -> Any:
    """Decode a single field according to its spec."""
    match spec.type:
        case "varint":
            return f.as_varint()
        case "int64":
            return f.as_signed()
        case "float32":
            return f.as_float()
        case "millis":
            return f.as_varint() / 1000.0
        case "packed_varint":
            return read_packed_varints(f.as_region())
        case "packed_float32":
            return read_packed_floats(f.as_region())
        case "message":
            return decode_fields(f.as_region(), spec.fields)
        case _:
            raise ValueError(f"unknown field spec type {spec.type!r}")


def decode_fields(region: ByteRegion, specs: list[FieldSpec]) -> dict[str, Any]:
    """Decode every field of a message; unknown field numbers are ignored.

    Packed fields may be split over several frames and are concatenated;
    any other repeated field number keeps its last value.
    """
    by_number = {s.number: s for s in specs}
    values: dict[str, Any] = {}
    for f in iter_fields(region):
        spec = by_number.get(f.field_number)
        if spec is None:
            continue
        value = convert_field(f, spec)
        if spec.type in PACKED_TYPES:
            values.setdefault(spec.name, []).extend(value)
        else:
            values[spec.name] = value
    return values


# ---- Templates ----

@dataclass
class Template:
    """A top-level item template with a name and a details message."""
    name: str
    details: ByteRegion
    detail_field: int


def read_template(region: ByteRegion) -> Template | None:
    """Pick out name and details; None when either is missing."""
    name: DecodedField | None = None
    details: DecodedField | None = None
    for f in iter_fields(region):
        if f.field_number == TEMPLATE_NAME_FIELD:
            name = f
        elif f.field_number in TEMPLATE_DETAIL_FIELDS:
            details = f

    if name is None or name.wire_kind != WireKind.LENGTH_DELIMITED:
        return None
    if details is None or details.wire_kind != WireKind.LENGTH_DELIMITED:
        return None
    return Template(name.as_text(), details.as_region(), details.field_number)


def iter_templates(root: ByteRegion) -> Iterator[Template | None]:
    """Yield each top-level template (None for incomplete ones)."""
    for f in iter_fields(root):
        if f.field_number != TEMPLATE_FIELD or f.wire_kind != WireKind.LENGTH_DELIMITED:
            continue
        yield read_template(f.as_region())


def classify(name: str) -> tuple[RecordDef, re.Match] | None:
    for rdef in RECORD_DEFS:
        m = rdef.pattern.fullmatch(name)
        if m:
            return rdef, m
    return None


# ---- Record builders ----

def _build_creature(m: re.Match, values: dict, reference_rating: float) -> Creature | None:
    name = m.group(2)
    if "primary_type" not in values:
        log.warning("creature %s has no type, skipped", name)
        return None
    primary = values["primary_type"]
    secondary = values.get("secondary_type", primary)
    stats = values.get("base_stats", {})
    return Creature.build(
        id=int(m.group(1)),
        name=name,
        types=(primary, secondary),
        base_attack=stats.get("attack", 0),
        base_defense=stats.get("defense", 0),
        base_stamina=stats.get("stamina", 0),
        fast_attack_ids=tuple(values.get("fast_attack_ids", ())),
        charged_attack_ids=tuple(values.get("charged_attack_ids", ())),
        reference_rating=reference_rating,
    )


def _build_attack(m: re.Match, values: dict) -> Attack | None:
    name = m.group(2)
    if "type_id" not in values:
        log.warning("attack %s has no type, skipped", name)
        return None
    return Attack(
        id=int(m.group(1)),
        name=name,
        power=values.get("power", 0.0),
        duration=values.get("duration", 0.0),
        energy_delta=values.get("energy_delta", 0),
        type_id=values["type_id"],
    )


# ---- Walker ----

def decode_game_master(
    data: bytes | bytearray | memoryview,
    reference_rating: float = 1500.0,
    excluded: Iterable[str] = (),
) -> GameMaster:
    """Decode a whole game master buffer.

    Any framing error aborts the decode (ProtoDecodeError subclasses).
    Creatures named in `excluded` are left out.
    """
    excluded_names = {n.upper() for n in excluded}
    gm = GameMaster()
    skipped = 0

    for template in iter_templates(ByteRegion.of(data)):
        if template is None:
            skipped += 1
            continue
        found = classify(template.name)
        if found is None:
            log.debug("skip %s", template.name)
            skipped += 1
            continue

        rdef, m = found
        values = decode_fields(template.details, rdef.fields)

        match rdef.kind:
            case "creature":
                if m.group(2) in excluded_names:
                    log.debug("excluded creature %s", m.group(2))
                    continue
                creature = _build_creature(m, values, reference_rating)
                if creature is None:
                    continue
                if creature.id in gm.creatures:
                    log.debug("creature #%d redefined by %s", creature.id, template.name)
                gm.creatures[creature.id] = creature
                log.debug(
                    "creature #%d %s atk=%d def=%d sta=%d fast=%s charged=%s",
                    creature.id, creature.name, creature.base_attack, creature.base_defense,
                    creature.base_stamina, list(creature.fast_attack_ids),
                    list(creature.charged_attack_ids),
                )
            case "attack":
                attack = _build_attack(m, values)
                if attack is None:
                    continue
                gm.attacks[attack.id] = attack
                log.debug(
                    "attack #%d %s power=%g duration=%g energy=%d type=%d",
                    attack.id, attack.name, attack.power, attack.duration,
                    attack.energy_delta, attack.type_id,
                )
            case "type":
                if "type_id" not in values:
                    log.warning("type record %s has no type id, skipped", template.name)
                    continue
                gm.type_chart.add(values["type_id"], m.group(1), values.get("effectiveness", []))
                log.debug("type #%d %s", values["type_id"], m.group(1))

    log.info(
        "decoded %d creatures, %d attacks, %d types (%d templates skipped)",
        len(gm.creatures), len(gm.attacks), len(gm.type_chart), skipped,
    )
    return gm
