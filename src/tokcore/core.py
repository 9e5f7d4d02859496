"""
The BPE codec: vocabulary, special tokens and segmentation in one immutable object.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from math import ceil
from typing import Final

import regex as re

from ._config import default_num_workers
from ._decorators import measure_time
from ._merge import byte_pair_encode
from ._unstable import encode_with_unstable as _encode_with_unstable
from .errors import DecodeError, InvariantViolation
from .pattern import TokenPattern, compile_pattern, compile_special_pattern
from .types import Completion, Decoder, Rank, SpecialTokens, TokenBytes, Vocabulary

log = logging.getLogger(__name__)

N_BYTE_VALUES: Final[int] = 256


class CoreBPE:
    """
    Byte pair encoding codec over a fixed vocabulary.

    Text is split into pieces by the segmentation pattern and each piece is
    either a vocabulary entry or merged from smaller ones. Special tokens are
    matched literally and never segmented. Instances are read-only after
    construction, so one codec can be shared between threads.

    .. code-block:: python

        core = CoreBPE(load_bpe(blob), {"<|endoftext|>": 100257}, TokenPattern.CL100K)
        core.encode("hello <|endoftext|>")
    """

    @measure_time
    def __init__(
        self,
        encoder: Vocabulary,
        special_tokens_encoder: SpecialTokens,
        pattern: str,
    ) -> None:
        """
        Build the codec tables.

        :param encoder: Mapping of token bytes to rank.
        :param special_tokens_encoder: Mapping of special-token literal to rank.
        :param pattern: Segmentation regex.
        :raises PatternError: If either pattern fails to compile.
        :raises InvariantViolation: If two entries share a rank or a single
            byte value is missing from ``encoder``.
        """
        self._pattern = pattern.value if isinstance(pattern, TokenPattern) else pattern
        self._regex: re.Pattern[str] = compile_pattern(self._pattern)
        self._special_regex: re.Pattern[str] | None = compile_special_pattern(
            list(special_tokens_encoder)
        )

        self._encoder: Vocabulary = dict(encoder)
        self._decoder: Decoder = {rank: tok for tok, rank in self._encoder.items()}
        if len(self._decoder) != len(self._encoder):
            raise InvariantViolation(
                "vocabulary has duplicate ranks "
                f"({len(self._encoder)} entries, {len(self._decoder)} distinct ranks)"
            )

        # every byte must be encodable or the merge fallback can fail mid-encode
        missing = [b for b in range(N_BYTE_VALUES) if bytes([b]) not in self._encoder]
        if missing:
            raise InvariantViolation("vocabulary does not cover all bytes", missing=missing)

        self._special_tokens_encoder: SpecialTokens = dict(special_tokens_encoder)
        self._special_tokens_decoder: Decoder = {
            rank: seq.encode("utf-8") for seq, rank in self._special_tokens_encoder.items()
        }

        self._sorted_token_bytes: list[TokenBytes] = sorted(self._encoder)

        log.debug(
            f"built codec with {len(self._encoder)} ranks "
            f"and {len(self._special_tokens_encoder)} special tokens"
        )

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__} n_vocab={self.n_vocab} "
            f"special={len(self._special_tokens_encoder)}>"
        )

    # read-only views
    # =====================================================================

    @property
    def n_vocab(self) -> int:
        """Number of ranks: ordinary entries plus special tokens."""
        return len(self._decoder) + len(self._special_tokens_decoder)

    @property
    def pattern(self) -> str:
        return self._pattern

    @property
    def special_tokens(self) -> SpecialTokens:
        return dict(self._special_tokens_encoder)

    def token_byte_values(self) -> list[TokenBytes]:
        """Return the ordinary token bytes in ascending byte order."""
        return list(self._sorted_token_bytes)

    # encoding
    # =====================================================================

    def encode(self, text: str, recognize_special: bool = True) -> list[Rank]:
        """
        Encode text into ranks.

        :param text: Text to encode.
        :param recognize_special: Emit special-token ranks for special-token
            literals; when ``False`` they are encoded as ordinary text.
        """
        return self._encode_native(text, recognize_special)[0]

    def encode_ordinary(self, text: str) -> list[Rank]:
        """Encode text, treating special-token literals as ordinary text."""
        return self._encode_native(text, recognize_special=False)[0]

    def _encode_native(self, text: str, recognize_special: bool = True) -> tuple[list[Rank], int]:
        """
        Encode text and report how many ranks the last ordinary piece produced.

        The count is zero when the text ends on a special token. It marks the
        ranks that could change if more text were appended, since merges never
        cross a regex split.
        """
        special_regex = self._special_regex if recognize_special else None
        ret: list[Rank] = []

        start = 0
        last_piece_token_len = 0
        while True:
            next_special = special_regex.search(text, start) if special_regex else None
            end = next_special.start() if next_special else len(text)

            # slice instead of pos/endpos so lookaround cannot see past the segment
            for mat in self._regex.finditer(text[start:end]):
                piece = mat.group().encode("utf-8")
                if (token := self._encoder.get(piece)) is not None:
                    last_piece_token_len = 1
                    ret.append(token)
                    continue
                tokens = byte_pair_encode(piece, self._encoder)
                last_piece_token_len = len(tokens)
                ret.extend(tokens)

            if next_special is None:
                break
            ret.append(self._special_tokens_encoder[next_special.group()])
            start = next_special.end()
            last_piece_token_len = 0

        return ret, last_piece_token_len

    def encode_with_unstable(self, text: str) -> tuple[list[Rank], set[Completion]]:
        """
        Split an encoding into stable ranks and possible completions.

        :returns: The ranks that cannot change when text is appended, and every
            rank sequence that could stand for the remaining trailing bytes.
        """
        return _encode_with_unstable(self, text)

    def encode_batch(
        self,
        texts: list[str],
        recognize_special: bool = True,
        num_workers: int | None = None,
    ) -> list[list[Rank]]:
        """
        Encode many texts, fanning out over a thread pool.

        Encoding is pure Python and holds the GIL, so the workers run one at a
        time and this is not faster than encoding in a loop. The pool exercises
        sharing one codec between threads, which callers with their own thread
        pools rely on.

        :param texts: Text inputs to encode.
        :param recognize_special: Passed through to ``encode``.
        :param num_workers: Worker count; defaults to ``TOKCORE_NUM_WORKERS``
            or the CPU count.
        :returns: Encoded rank sequences in input order.
        """
        workers = default_num_workers() if num_workers is None else max(1, num_workers)
        if workers == 1 or len(texts) <= 1:
            return [self.encode(text, recognize_special) for text in texts]

        # group texts to reduce task-scheduling overhead for many short documents
        group_size = max(1, ceil(len(texts) / (workers * 2)))
        groups = [texts[idx : idx + group_size] for idx in range(0, len(texts), group_size)]

        def encode_group(group: list[str]) -> list[list[Rank]]:
            return [self.encode(text, recognize_special) for text in group]

        with ThreadPoolExecutor(max_workers=workers) as pool:
            encoded_groups = list(pool.map(encode_group, groups))
        return [encoded for group in encoded_groups for encoded in group]

    # decoding
    # =====================================================================

    def decode_bytes(self, tokens: list[Rank]) -> bytes:
        """
        Decode ranks into the concatenation of their bytes.

        Ordinary ranks are resolved first, then special tokens.

        :raises DecodeError: If a rank is in neither table.
        """
        return b"".join(self.decode_single_token_bytes(tok) for tok in tokens)

    def decode_single_token_bytes(self, token: Rank) -> bytes:
        if (token_bytes := self._decoder.get(token)) is not None:
            return token_bytes
        if (token_bytes := self._special_tokens_decoder.get(token)) is not None:
            return token_bytes
        raise DecodeError("token not found in vocabulary", token=token)

    def decode(self, tokens: list[Rank], errors: str = "replace") -> str:
        """
        Decode ranks into text.

        :param errors: How to handle invalid UTF-8, "strict" or "replace".
        """
        return self.decode_bytes(tokens).decode("utf-8", errors=errors)

    def decode_batch(self, batch: list[list[Rank]], errors: str = "replace") -> list[str]:
        return [self.decode(tokens, errors=errors) for tokens in batch]
