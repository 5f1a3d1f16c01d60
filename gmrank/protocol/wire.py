"""
gmrank — Wire Decoder

Reads protobuf-style framing from a game master buffer:
  [key:varint][payload]   key = (field_number << 3) | wire_kind

Payload shape depends on the wire kind:
  VARINT           — base-128 little-endian integer (max 10 bytes)
  FIXED64          — 8 raw bytes
  LENGTH_DELIMITED — [length:varint][length bytes] (sub-message, text, packed)
  FIXED32          — 4 raw bytes
Group kinds (3, 4) and the unassigned kinds (6, 7) are not supported.

Regions are memoryview slices of the one backing buffer — nothing is copied
until a caller asks for bytes.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator

MAX_VARINT_BYTES = 10
_U64_MASK = (1 << 64) - 1


class WireKind(IntEnum):
    VARINT = 0
    FIXED64 = 1
    LENGTH_DELIMITED = 2
    START_GROUP = 3
    END_GROUP = 4
    FIXED32 = 5


# ---- Errors ----

class ProtoDecodeError(Exception):
    """Base class for fatal decode failures."""


class BufferExhausted(ProtoDecodeError):
    """A read ran past the end of its region."""


class TruncatedMessage(ProtoDecodeError):
    """A length-delimited field declares more bytes than its parent holds."""


class UnsupportedWireType(ProtoDecodeError):
    """Group or unknown wire kind in the stream."""

    def __init__(self, wire_kind: int, field_number: int):
        self.wire_kind = wire_kind
        self.field_number = field_number
        super().__init__(f"unsupported wire type {wire_kind} on field {field_number}")


class WireKindMismatch(ProtoDecodeError):
    """A field was read as a different wire kind than it carries."""

    def __init__(self, field: DecodedField, expected: WireKind):
        self.field_number = field.field_number
        self.actual = field.wire_kind
        self.expected = expected
        super().__init__(
            f"field {field.field_number}: expected {expected.name}, got {field.wire_kind.name}"
        )


class InvalidRegionCast(WireKindMismatch):
    """A length-delimited payload was expected but the field is a scalar."""


# ---- Regions ----

@dataclass(frozen=True)
class ByteRegion:
    """A non-owning view of [offset, offset+length) inside a backing buffer."""
    buffer: memoryview
    offset: int
    length: int

    def __post_init__(self) -> None:
        if self.offset < 0 or self.length < 0 or self.offset + self.length > len(self.buffer):
            raise ValueError(
                f"region [{self.offset}, {self.offset + self.length}) "
                f"outside buffer of {len(self.buffer)} bytes"
            )

    @classmethod
    def of(cls, data: bytes | bytearray | memoryview) -> ByteRegion:
        view = data if isinstance(data, memoryview) else memoryview(data)
        return cls(view, 0, len(view))

    @property
    def end(self) -> int:
        return self.offset + self.length

    @property
    def view(self) -> memoryview:
        return self.buffer[self.offset:self.end]

    def tobytes(self) -> bytes:
        return self.view.tobytes()

    def cursor(self) -> ByteCursor:
        return ByteCursor(self)

    def __len__(self) -> int:
        return self.length


class ByteCursor:
    """Sequential reader over one region. Never moves past the region end."""

    def __init__(self, region: ByteRegion):
        self.region = region
        self._pos = region.offset

    @property
    def position(self) -> int:
        """Offset relative to the start of the region."""
        return self._pos - self.region.offset

    @property
    def remaining(self) -> int:
        return self.region.end - self._pos

    @property
    def exhausted(self) -> bool:
        return self._pos >= self.region.end

    def read_byte(self) -> int:
        if self._pos >= self.region.end:
            raise BufferExhausted(
                f"read past end of {self.region.length}-byte region at offset {self.position}"
            )
        byte = self.region.buffer[self._pos]
        self._pos += 1
        return byte

    def read_varint(self) -> int:
        """Unsigned base-128 varint; bytes past the 10th are never consumed."""
        result = 0
        for i in range(MAX_VARINT_BYTES):
            byte = self.read_byte()
            result |= (byte & 0x7F) << (7 * i)
            if not byte & 0x80:
                break
        return result & _U64_MASK

    def read_fixed_bytes(self, n: int) -> bytes:
        if n > self.remaining:
            raise BufferExhausted(
                f"need {n} bytes at offset {self.position}, only {self.remaining} left"
            )
        data = self.region.buffer[self._pos:self._pos + n].tobytes()
        self._pos += n
        return data

    def take_region(self, n: int) -> ByteRegion:
        """Carve the next n bytes as a sub-region and skip past them."""
        if n > self.remaining:
            raise TruncatedMessage(
                f"length-delimited field declares {n} bytes at offset {self.position}, "
                f"only {self.remaining} left"
            )
        region = ByteRegion(self.region.buffer, self._pos, n)
        self._pos += n
        return region


# ---- Decoded fields ----

@dataclass(frozen=True)
class DecodedField:
    """One framed value. Payload shape is fixed by wire_kind."""
    field_number: int
    wire_kind: WireKind
    payload: int | bytes | ByteRegion

    def _expect(self, kind: WireKind) -> None:
        if self.wire_kind != kind:
            if kind == WireKind.LENGTH_DELIMITED:
                raise InvalidRegionCast(self, kind)
            raise WireKindMismatch(self, kind)

    def as_varint(self) -> int:
        self._expect(WireKind.VARINT)
        return self.payload

    def as_signed(self) -> int:
        """Varint reinterpreted as a two's-complement int64."""
        value = self.as_varint()
        return value - (1 << 64) if value & (1 << 63) else value

    def as_float(self) -> float:
        self._expect(WireKind.FIXED32)
        return struct.unpack("<f", self.payload)[0]

    def as_region(self) -> ByteRegion:
        self._expect(WireKind.LENGTH_DELIMITED)
        return self.payload

    def as_text(self) -> str:
        return self.as_region().tobytes().decode("utf-8", errors="replace")

    def describe(self) -> str:
        """One-line human readable summary (for dumps)."""
        match self.wire_kind:
            case WireKind.VARINT:
                value = f"varint {self.payload}"
            case WireKind.FIXED32 | WireKind.FIXED64:
                value = f"fixed {self.payload.hex(' ')}"
            case WireKind.LENGTH_DELIMITED:
                value = f"{self.payload.length} bytes long submessage"
        return f"#{self.field_number} {value}"


def next_field(cursor: ByteCursor) -> DecodedField:
    """Decode one (key, payload) frame at the cursor."""
    key = cursor.read_varint()
    kind = key & 0x7
    number = key >> 3

    match kind:
        case WireKind.VARINT:
            payload = cursor.read_varint()
        case WireKind.FIXED32:
            payload = cursor.read_fixed_bytes(4)
        case WireKind.FIXED64:
            payload = cursor.read_fixed_bytes(8)
        case WireKind.LENGTH_DELIMITED:
            length = cursor.read_varint()
            payload = cursor.take_region(length)
        case _:
            raise UnsupportedWireType(kind, number)

    return DecodedField(number, WireKind(kind), payload)


def iter_fields(region: ByteRegion) -> Iterator[DecodedField]:
    """Yield every field of a region until exactly zero bytes remain."""
    cursor = region.cursor()
    while not cursor.exhausted:
        yield next_field(cursor)


def read_packed_varints(region: ByteRegion) -> list[int]:
    """Unframed repeated varints filling the whole region."""
    cursor = region.cursor()
    values = []
    while not cursor.exhausted:
        values.append(cursor.read_varint())
    return values


def read_packed_floats(region: ByteRegion) -> list[float]:
    """Unframed repeated little-endian float32 values filling the whole region."""
    cursor = region.cursor()
    values = []
    while not cursor.exhausted:
        values.append(struct.unpack("<f", cursor.read_fixed_bytes(4))[0])
    return values
