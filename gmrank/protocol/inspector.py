"""
Record Inspector — find out what a game master file contains.

Techniques:
1. Kind counts: how many templates match each known record layout
2. Prefix frequency: which families of template names dominate the file
3. Field dump: walk one record's details, guessing nested messages
"""

from __future__ import annotations

import re
import string
from collections import Counter

from gmrank.protocol.schema import (
    TEMPLATE_FIELD,
    FieldSpec,
    Template,
    classify,
    read_template,
)
from gmrank.protocol.wire import (
    ByteRegion,
    DecodedField,
    ProtoDecodeError,
    WireKind,
    iter_fields,
)

_VERSION_PREFIX = re.compile(r"^V\d+_")
_PRINTABLE = set(string.printable.encode()) - set(b"\x0b\x0c")


def name_prefix(name: str) -> str:
    """Family of a template name: V0001_POKEMON_BULBASAUR -> V*_POKEMON."""
    versioned = _VERSION_PREFIX.match(name) is not None
    rest = _VERSION_PREFIX.sub("", name)
    head = rest.split("_", 1)[0]
    return f"V*_{head}" if versioned else head


def _looks_like_text(data: bytes) -> bool:
    return bool(data) and all(b in _PRINTABLE for b in data)


class RecordInspector:
    """Summarise the templates of one game master buffer."""

    def __init__(self, data: bytes | bytearray | memoryview):
        self.root = ByteRegion.of(data)
        self.templates: list[Template] = []
        self.incomplete = 0     # field #2 entries without name or details
        self.other_fields = 0   # top-level fields that aren't templates

        for f in iter_fields(self.root):
            if f.field_number != TEMPLATE_FIELD or f.wire_kind != WireKind.LENGTH_DELIMITED:
                self.other_fields += 1
                continue
            template = read_template(f.as_region())
            if template is None:
                self.incomplete += 1
            else:
                self.templates.append(template)

    def kind_counts(self) -> Counter:
        """Templates per record kind ("other" for unmatched names)."""
        counter = Counter()
        for t in self.templates:
            found = classify(t.name)
            counter[found[0].kind if found else "other"] += 1
        return counter

    def prefix_frequency(self) -> Counter:
        return Counter(name_prefix(t.name) for t in self.templates)

    def find(self, name: str) -> Template | None:
        wanted = name.upper()
        for t in self.templates:
            if t.name == wanted:
                return t
        # Creatures and attacks are usually asked for without the V-number
        for t in self.templates:
            if _VERSION_PREFIX.sub("", t.name) == wanted:
                return t
        return None

    def dump(self, name: str, max_depth: int = 4) -> str:
        """Field-by-field listing of one template's details message."""
        template = self.find(name)
        if template is None:
            return f"No template named {name}"
        header = (f"{template.name} (details in field #{template.detail_field}, "
                  f"{len(template.details)} bytes)")
        found = classify(template.name)
        specs: list[FieldSpec] = []
        if found:
            rdef = found[0]
            header += f": {rdef.kind}, {rdef.description}"
            specs = rdef.fields
        lines = [header]
        self._dump_region(template.details, lines, 1, max_depth, specs)
        return "\n".join(lines)

    def _dump_region(
        self,
        region: ByteRegion,
        lines: list[str],
        depth: int,
        max_depth: int,
        specs: list[FieldSpec],
    ) -> None:
        indent = "  " * depth
        by_number = {s.number: s for s in specs}
        for f in iter_fields(region):
            spec = by_number.get(f.field_number)
            line = indent + self._describe(f)
            if spec is not None:
                line += f"  ({spec.description})"
            lines.append(line)
            if f.wire_kind != WireKind.LENGTH_DELIMITED or depth >= max_depth:
                continue
            sub = f.as_region()
            if _looks_like_text(sub.tobytes()):
                continue
            # Packed sequences and raw bytes don't parse as messages; show them flat.
            try:
                list(iter_fields(sub))
            except ProtoDecodeError:
                continue
            self._dump_region(sub, lines, depth + 1, max_depth, spec.fields if spec else [])

    @staticmethod
    def _describe(f: DecodedField) -> str:
        if f.wire_kind == WireKind.LENGTH_DELIMITED:
            raw = f.as_region().tobytes()
            if _looks_like_text(raw):
                return f"#{f.field_number} text {raw.decode('ascii')!r}"
            preview = raw[:16].hex(" ")
            more = " ..." if len(raw) > 16 else ""
            return f"{f.describe()}: {preview}{more}"
        return f.describe()

    def report(self, top: int = 15) -> str:
        """Generate a human-readable summary report."""
        if not self.templates and not self.incomplete:
            return "No templates found."

        lines = []
        lines.append("=== Game Master Report ===")
        lines.append(f"Size: {len(self.root)} bytes")
        lines.append(f"Templates: {len(self.templates)} "
                     f"(+{self.incomplete} incomplete, {self.other_fields} other top-level fields)")
        lines.append("")

        lines.append("Record Kinds:")
        for kind, count in self.kind_counts().most_common():
            lines.append(f"  {kind:<10} {count:>6}")
        lines.append("")

        lines.append(f"Name Prefixes (top {top}):")
        for prefix, count in self.prefix_frequency().most_common(top):
            bar = "#" * min(count, 40)
            lines.append(f"  {prefix:<28} {count:>5}x {bar}")

        return "\n".join(lines)
