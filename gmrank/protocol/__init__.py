from .wire import (
    ProtoDecodeError, BufferExhausted, TruncatedMessage, UnsupportedWireType,
    WireKindMismatch, InvalidRegionCast,
)

__all__ = [
    "ProtoDecodeError", "BufferExhausted", "TruncatedMessage", "UnsupportedWireType",
    "WireKindMismatch", "InvalidRegionCast",
]
