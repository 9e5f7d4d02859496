"""Rank sequences as 4-byte little-endian integers."""

import struct

from ._config import MAX_RANK
from .errors import DecodeError, TokenizationError
from .types import Rank


def pack_ranks(ranks: list[Rank]) -> bytes:
    """Concatenate ranks as little-endian u32 values."""
    for pos, rank in enumerate(ranks):
        if not 0 <= rank <= MAX_RANK:
            raise TokenizationError(f"rank {rank} does not fit in u32", position=pos)
    return struct.pack(f"<{len(ranks)}I", *ranks)


def unpack_ranks(data: bytes) -> list[Rank]:
    """
    Split a little-endian u32 buffer back into ranks.

    :raises DecodeError: If the buffer length is not a multiple of four.
    """
    if len(data) % 4:
        raise DecodeError(f"rank buffer length {len(data)} is not a multiple of 4")
    return list(struct.unpack(f"<{len(data) // 4}I", data))
