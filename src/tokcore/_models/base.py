"""
Base tokenizer interface shared by the BPE codec and delegate variants.
"""

from abc import ABC, abstractmethod

from ..errors import TokenizationError
from ..types import Completion, Rank


class Tokenizer(ABC):
    """
    Abstract base class for tokenizers held by a registry.

    Text goes in, ranks come out, and ranks decode back to bytes. The
    ``special_tokens`` flag is ``None`` when the caller did not say, letting
    each variant apply its own default.
    """

    TOKENIZER_TYPE: str = "base"

    @abstractmethod
    def encode(self, text: str, special_tokens: bool | None = None) -> list[Rank]:
        """Encode text into a sequence of ranks."""
        ...

    @abstractmethod
    def decode(self, tokens: list[Rank], special_tokens: bool | None = None) -> bytes:
        """Decode a sequence of ranks back into bytes."""
        ...

    def encode_with_unstable(self, text: str) -> tuple[list[Rank], set[Completion]]:
        """Encode text into stable ranks and possible completions of the tail."""
        raise TokenizationError(
            f"{self.__class__.__name__} does not support unstable-suffix encoding"
        )
