"""
Arithmetic Machine — Operand Wire Codec

Multi-byte operands are stored in a declared wire byte order, never the
host's native order:

  f64   8 bytes  IEEE-754 double (DCONST)
  u32   4 bytes  unsigned absolute jump address (Jxx)

WIRE_ORDER is big-endian for both kinds, which is what existing bytecode
uses (DCONST 40 29 14 7A E1 47 AE 14 = 12.54, JGT 00 00 00 06 = 6).
Both directions go through struct with an explicit '>' / '<' prefix, so
results are the same on any host.
"""

import struct

WIRE_ORDER = 'big'

F64_SIZE = 8
U32_SIZE = 4
U32_MAX = 0xFFFFFFFF

_PREFIX = {'big': '>', 'little': '<'}


def _prefix(byteorder: str) -> str:
    try:
        return _PREFIX[byteorder]
    except KeyError:
        raise ValueError(
            f"byteorder must be 'big' or 'little', got {byteorder!r}") from None


def check_byteorder(byteorder: str) -> str:
    """Return byteorder if it is a supported wire order, else raise ValueError."""
    _prefix(byteorder)
    return byteorder


def _check_len(data: bytes, size: int, kind: str):
    if len(data) != size:
        raise ValueError(f"{kind} operand needs {size} bytes, got {len(data)}")


def encode_f64(value: float, byteorder: str = WIRE_ORDER) -> bytes:
    """Encode a double as 8 bytes in the given wire order."""
    return struct.pack(_prefix(byteorder) + 'd', value)


def decode_f64(data: bytes, byteorder: str = WIRE_ORDER) -> float:
    """Decode 8 bytes in the given wire order into a double.

    The bit pattern is preserved exactly (NaN payloads, -0.0, inf).
    """
    _check_len(data, F64_SIZE, 'f64')
    return struct.unpack(_prefix(byteorder) + 'd', bytes(data))[0]


def encode_u32(value: int, byteorder: str = WIRE_ORDER) -> bytes:
    """Encode an absolute jump address as 4 bytes."""
    if not (0 <= value <= U32_MAX):
        raise ValueError(f"u32 value must be 0-0xFFFFFFFF, got {value}")
    return struct.pack(_prefix(byteorder) + 'I', value)


def decode_u32(data: bytes, byteorder: str = WIRE_ORDER) -> int:
    """Decode 4 bytes in the given wire order into an unsigned address."""
    _check_len(data, U32_SIZE, 'u32')
    return struct.unpack(_prefix(byteorder) + 'I', bytes(data))[0]


def f64_bits(value: float) -> int:
    """Raw 64-bit pattern of a double, for exact comparisons."""
    return struct.unpack('>Q', struct.pack('>d', value))[0]
