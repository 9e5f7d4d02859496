"""Delegate tokenizer that forwards to a pre-built HuggingFace ``tokenizers`` model."""

import logging
from typing import override

from tokenizers import Tokenizer as HFTokenizer

from ..errors import LoadError, TokenizationError
from ..types import Rank
from .base import Tokenizer

log = logging.getLogger(__name__)


class HuggingFaceTokenizer(Tokenizer):
    """
    Thin wrapper around a serialized ``tokenizers`` JSON model.

    Encoding adds the model's special tokens unless ``special_tokens=False``.
    Decoding skips special tokens unless ``special_tokens=True``.
    """

    TOKENIZER_TYPE = "huggingface"

    def __init__(self, impl: HFTokenizer) -> None:
        super().__init__()
        self._impl = impl

    @classmethod
    def from_blob(cls, model: bytes) -> "HuggingFaceTokenizer":
        """
        Build the delegate from a tokenizer JSON blob.

        :raises LoadError: If the blob is not UTF-8 or not a valid model.
        """
        try:
            json_str = model.decode("utf-8")
        except UnicodeDecodeError as e:
            raise LoadError("tokenizer model is not valid UTF-8", reason=str(e)) from e
        try:
            impl = HFTokenizer.from_str(json_str)
        # the bindings raise a plain Exception for malformed models
        except Exception as e:
            raise LoadError("failed to load tokenizer model", reason=str(e)) from e
        log.debug(f"loaded tokenizers model with {impl.get_vocab_size()} entries")
        return cls(impl)

    @property
    def vocab_size(self) -> int:
        return self._impl.get_vocab_size()

    @override
    def encode(self, text: str, special_tokens: bool | None = None) -> list[Rank]:
        add_special = True if special_tokens is None else special_tokens
        try:
            return list(self._impl.encode(text, add_special_tokens=add_special).ids)
        except Exception as e:
            raise TokenizationError("delegate tokenizer failed to encode") from e

    @override
    def decode(self, tokens: list[Rank], special_tokens: bool | None = None) -> bytes:
        skip_special = not (special_tokens or False)
        try:
            text = self._impl.decode(tokens, skip_special_tokens=skip_special)
        except Exception as e:
            raise TokenizationError("delegate tokenizer failed to decode") from e
        return text.encode("utf-8")
