"""BPE tokenizer backed by the native codec."""

import logging
from typing import override

from ..core import CoreBPE
from ..load import load_bpe
from ..types import Completion, Rank
from .base import Tokenizer

log = logging.getLogger(__name__)


class BPETokenizer(Tokenizer):
    """Tokenizer that splits text with a regex and merges pieces with BPE."""

    TOKENIZER_TYPE = "tiktoken"

    def __init__(self, core: CoreBPE) -> None:
        super().__init__()
        self.core = core

    @classmethod
    def from_blob(
        cls, bpe: bytes, special_bpe: list[tuple[str, Rank]], regex: str
    ) -> "BPETokenizer":
        """
        Build a tokenizer from a vocabulary blob.

        :param bpe: Vocabulary in ``<base64-token> <rank>`` lines.
        :param special_bpe: Special-token literals and their ranks.
        :param regex: Segmentation pattern.
        :raises LoadError: If the blob or pattern is malformed.
        :raises InvariantViolation: If the vocabulary is inconsistent.
        """
        return cls(CoreBPE(load_bpe(bpe), dict(special_bpe), regex))

    @override
    def encode(self, text: str, special_tokens: bool | None = None) -> list[Rank]:
        """Encode text; special-token literals are recognized unless disabled."""
        return self.core.encode(text, recognize_special=special_tokens is not False)

    @override
    def decode(self, tokens: list[Rank], special_tokens: bool | None = None) -> bytes:
        """Decode ranks to bytes; special tokens are always written out."""
        return self.core.decode_bytes(tokens)

    @override
    def encode_with_unstable(self, text: str) -> tuple[list[Rank], set[Completion]]:
        return self.core.encode_with_unstable(text)
