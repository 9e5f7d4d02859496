"""
Stable-prefix / completion split for text that may still grow.

When a caller wants to continue text token by token, the ranks of the last
regex piece are not final: appending bytes can merge them differently. This
module separates the ranks that are safe to keep from the trailing bytes and
lists every rank sequence those bytes could turn into.
"""

import bisect
import logging
from typing import TYPE_CHECKING, Final

import regex as re

from ._merge import byte_pair_encode
from ._sanitise import render_bytes
from .types import Completion, Rank

if TYPE_CHECKING:
    from .core import CoreBPE

log = logging.getLogger(__name__)

_SPACE_BYTES: Final[frozenset[int]] = frozenset(b" \n\t")
_WHITESPACE: Final[re.Pattern[str]] = re.compile(r"\p{White_Space}")


def _token_is_all_space(core: "CoreBPE", token: Rank) -> bool:
    # special tokens are never whitespace
    token_bytes = core._decoder.get(token)
    return token_bytes is not None and all(b in _SPACE_BYTES for b in token_bytes)


def _increase_last_piece_token_len(
    core: "CoreBPE", tokens: list[Rank], last_piece_token_len: int
) -> int:
    """
    Widen the unstable span over trailing whitespace-only tokens.

    Regex splits are assumed stable, but whitespace splits are not: with
    ``\\s*[\\r\\n]+`` and ``\\s+(?!\\S)`` in the pattern, "\\n" followed by " "
    can later become one piece "\\n \\n". A split that disappears lets tokens
    merge across it, so the whitespace tokens before the last piece are
    treated as unstable too.
    """
    if last_piece_token_len > 0 and _token_is_all_space(
        core, tokens[len(tokens) - last_piece_token_len]
    ):
        while last_piece_token_len < len(tokens) and _token_is_all_space(
            core, tokens[len(tokens) - last_piece_token_len - 1]
        ):
            last_piece_token_len += 1
    return last_piece_token_len


def _decode_last_char(data: bytes) -> tuple[str | None, int]:
    """Return the last UTF-8 character of ``data`` and its byte length."""
    for size in range(1, min(4, len(data)) + 1):
        try:
            char = data[-size:].decode("utf-8")
        except UnicodeDecodeError:
            continue
        if len(char) == 1:
            return char, size
        break
    # invalid trailing byte
    return None, 1


def _truncate_to_length(core: "CoreBPE", encoded: list[Rank], n_bytes: int) -> Completion:
    """Keep the leading ranks until they cover at least ``n_bytes`` bytes."""
    seq: list[Rank] = []
    seq_len = 0
    for token in encoded:
        seq.append(token)
        seq_len += len(core._decoder[token])
        if seq_len >= n_bytes:
            break
    return tuple(seq)


def encode_with_unstable(core: "CoreBPE", text: str) -> tuple[list[Rank], set[Completion]]:
    """
    Encode text and split off the ranks whose bytes may still re-tokenize.

    :param core: Codec to encode with.
    :param text: Text that may be continued later.
    :returns: ``(stable_tokens, completions)``. Decoding ``stable_tokens`` and
        then any completion yields text that starts with the input text.
    """
    tokens, last_piece_token_len = core._encode_native(text)
    # text ended on a special token: nothing can merge with it
    if last_piece_token_len == 0:
        return tokens, set()

    last_piece_token_len = _increase_last_piece_token_len(core, tokens, last_piece_token_len)

    split = len(tokens) - last_piece_token_len
    unstable_bytes = core.decode_bytes(tokens[split:])
    del tokens[split:]

    completions: set[Completion] = set()
    if not unstable_bytes:
        return tokens, completions

    log.debug(
        f"{len(tokens)} stable tokens, unstable bytes {render_bytes(unstable_bytes)!r}"
    )

    sorted_token_bytes = core._sorted_token_bytes

    # every single token that starts with the unstable bytes (including an exact match)
    point = bisect.bisect_left(sorted_token_bytes, unstable_bytes)
    while point < len(sorted_token_bytes) and sorted_token_bytes[point].startswith(
        unstable_bytes
    ):
        completions.add((core._encoder[sorted_token_bytes[point]],))
        point += 1

    # a token could also straddle the end at any inner position: extend the
    # unstable bytes with every token that continues the suffix and re-encode
    for i in range(1, len(unstable_bytes)):
        prefix = unstable_bytes[:i]
        suffix = unstable_bytes[i:]
        point = bisect.bisect_left(sorted_token_bytes, suffix)
        while point < len(sorted_token_bytes) and sorted_token_bytes[point].startswith(
            suffix
        ):
            possibility = prefix + sorted_token_bytes[point]
            try:
                # re-split with the pattern: the extension may introduce a
                # regex split that blocks merges, e.g. "  !" -> " " + " !"
                encoded = core.encode_ordinary(possibility.decode("utf-8"))
            except UnicodeDecodeError:
                # not text yet; correct unless a split would fall before the
                # truncated character
                encoded = byte_pair_encode(possibility, core._encoder)
            completions.add(_truncate_to_length(core, encoded, len(unstable_bytes)))
            point += 1

    # a trailing whitespace character can split off once more text arrives,
    # e.g. with \s+(?!\S) "\n\n" + "0" becomes "\n" + "\n" + "0"; this only
    # holds while the pattern keeps that rule
    if len(unstable_bytes) > 1:
        last_char, last_len = _decode_last_char(unstable_bytes)
        if (
            len(unstable_bytes) - last_len > 0
            and last_char is not None
            and _WHITESPACE.match(last_char)
        ):
            reencoded = byte_pair_encode(unstable_bytes[:-last_len], core._encoder)
            reencoded.extend(byte_pair_encode(unstable_bytes[-last_len:], core._encoder))
            completions.add(tuple(reencoded))

    return tokens, completions
