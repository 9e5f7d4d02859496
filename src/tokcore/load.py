"""
Vocabulary loading and persistence in the ``<base64-token> <rank>`` format.
"""

import base64
import binascii
import logging
from pathlib import Path
from typing import Final

import regex as re

from ._config import MAX_RANK
from .errors import LoadError
from .types import Vocabulary

log = logging.getLogger(__name__)

# same grammar as an unsigned integer parse: optional "+", digits only
_RANK_PAT: Final[re.Pattern[bytes]] = re.compile(rb"\+?[0-9]+")


def load_bpe(blob: bytes) -> Vocabulary:
    """
    Parse a vocabulary blob into a byte sequence -> rank mapping.

    Records are newline separated and blank lines are skipped. Later records
    with the same token bytes overwrite earlier ones.

    :param blob: Raw vocabulary file contents.
    :returns: Mapping of token bytes to rank.
    :raises LoadError: If a record is malformed; the message names the line.
    """
    ranks: Vocabulary = {}
    n_overwritten = 0

    for lineno, line in enumerate(blob.split(b"\n"), start=1):
        if not line:
            continue

        # split on the first space only, the token field is base64 so never has one
        tok_field, sep, rank_field = line.partition(b" ")
        if not sep:
            raise LoadError("invalid BPE record", line=lineno, reason="missing separator")

        try:
            tok_bytes = base64.b64decode(tok_field, validate=True)
        except binascii.Error as e:
            raise LoadError("invalid BPE record", line=lineno, reason=str(e)) from e
        if not tok_bytes:
            raise LoadError("invalid BPE record", line=lineno, reason="empty token")

        if _RANK_PAT.fullmatch(rank_field) is None:
            raise LoadError(
                "invalid BPE record", line=lineno, reason=f"invalid rank {rank_field!r}"
            )
        rank = int(rank_field)
        if rank > MAX_RANK:
            raise LoadError(
                "invalid BPE record", line=lineno, reason=f"rank out of range: {rank}"
            )

        if tok_bytes in ranks:
            n_overwritten += 1
        ranks[tok_bytes] = rank

    if n_overwritten:
        log.warning(f"{n_overwritten} duplicate BPE records overwritten while loading")
    log.debug(f"loaded {len(ranks)} BPE ranks")
    return ranks


def load_bpe_file(path: str | Path) -> Vocabulary:
    """Read a ``.tiktoken`` style file from disk and parse it with ``load_bpe``."""
    path = Path(path)
    if not path.exists():
        raise LoadError("vocabulary file does not exist", reason=str(path))
    log.info(f"loading vocabulary from {path}")
    return load_bpe(path.read_bytes())


def dump_bpe(ranks: Vocabulary) -> bytes:
    """Serialize a vocabulary to the blob format, ordered by rank."""
    lines = [
        base64.b64encode(tok_bytes) + b" " + str(rank).encode("ascii")
        for tok_bytes, rank in sorted(ranks.items(), key=lambda x: x[1])
    ]
    return b"\n".join(lines) + b"\n"
