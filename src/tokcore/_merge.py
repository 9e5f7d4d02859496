"""
Core Byte Pair Encoding (BPE) merge over a single piece.

A piece that has no vocabulary entry of its own is decomposed into known
sub-tokens by repeatedly merging the adjacent pair with the lowest rank, which
replays the merge priority the vocabulary was trained with.
"""

from .errors import InvariantViolation
from .types import Rank, Vocabulary


def byte_pair_merge(piece: bytes, ranks: Vocabulary) -> list[tuple[int, int]]:
    """
    Merge a piece into the byte ranges of its final sub-tokens.

    ``starts[i]`` is the byte offset where part ``i`` begins and
    ``pair_ranks[i]`` is the rank of part ``i`` joined with part ``i + 1``,
    or ``None`` when that byte range is not in the vocabulary. The final entry
    of ``starts`` is the end of the piece and never carries a rank.

    Each merge does a full scan for the minimum rank, so the cost is
    O(merges x parts). Pieces produced by regex segmentation are short, so a
    heap is not worth it.

    :param piece: Byte sequence to decompose.
    :param ranks: Vocabulary mapping byte sequences to ranks.
    :returns: ``(start, end)`` byte ranges in left-to-right order.
    """
    starts = list(range(len(piece) + 1))
    pair_ranks: list[Rank | None] = [None] * len(starts)

    def get_rank(i: int) -> Rank | None:
        # rank of the byte range spanning part i and part i + 1
        if i + 2 < len(starts):
            return ranks.get(piece[starts[i] : starts[i + 2]])
        return None

    for i in range(len(starts) - 2):
        pair_ranks[i] = get_rank(i)

    while len(starts) > 2:
        min_rank: Rank | None = None
        min_idx = 0
        # keep the first strictly smaller rank so ties go to the leftmost pair
        for i in range(len(starts) - 1):
            rank = pair_ranks[i]
            if rank is not None and (min_rank is None or rank < min_rank):
                min_rank = rank
                min_idx = i

        if min_rank is None:
            break

        # drop the boundary between part i and part i + 1
        del starts[min_idx + 1]
        del pair_ranks[min_idx + 1]

        # only the merged part and its left neighbour see a new pair
        pair_ranks[min_idx] = get_rank(min_idx)
        if min_idx > 0:
            pair_ranks[min_idx - 1] = get_rank(min_idx - 1)

    return [(starts[i], starts[i + 1]) for i in range(len(starts) - 1)]


def byte_pair_encode(piece: bytes, ranks: Vocabulary) -> list[Rank]:
    """
    Encode a piece into ranks using the greedy byte-pair merge.

    :raises InvariantViolation: If a byte the merge cannot cover is missing
        from the vocabulary.
    """
    if len(piece) == 1:
        try:
            return [ranks[piece]]
        except KeyError:
            raise InvariantViolation(
                "single byte missing from vocabulary", piece=piece
            ) from None

    tokens: list[Rank] = []
    for start, end in byte_pair_merge(piece, ranks):
        try:
            tokens.append(ranks[piece[start:end]])
        except KeyError:
            raise InvariantViolation(
                "byte run missing from vocabulary", piece=piece[start:end]
            ) from None
    return tokens


def byte_pair_split(piece: bytes, ranks: Vocabulary) -> list[bytes]:
    """Return the byte pieces the merge produces, without resolving ranks."""
    if len(piece) == 1:
        return [piece]
    return [piece[start:end] for start, end in byte_pair_merge(piece, ranks)]
