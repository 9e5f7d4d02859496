"""Name-keyed registry of live tokenizers and the byte-level request boundary."""

import logging
import threading

from ._models.base import Tokenizer
from ._models.bpe import BPETokenizer
from ._models.huggingface import HuggingFaceTokenizer
from .errors import TokenizationError, TokenizerNotFoundError
from .requests import (
    DecodeRequest,
    EncodeRequest,
    EncodeUnstableRequest,
    HuggingFaceModel,
    LoadModel,
    LoadRequest,
    Request,
    TiktokenModel,
    UnloadRequest,
    UnstableResult,
)
from .wire import pack_ranks, unpack_ranks

log = logging.getLogger(__name__)


def build_tokenizer(model: LoadModel) -> Tokenizer:
    """Construct the tokenizer variant described by ``model``."""
    match model:
        case TiktokenModel(bpe=bpe, special_bpe=special_bpe, regex=regex):
            return BPETokenizer.from_blob(bpe, special_bpe, regex)
        case HuggingFaceModel(model=blob):
            return HuggingFaceTokenizer.from_blob(blob)
    raise TypeError(f"unsupported tokenizer model: {type(model).__name__}")


def _decode_text(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise TokenizationError("input text is not valid UTF-8", position=e.start) from e


class TokenizerRegistry:
    """
    Registry mapping names to tokenizers.

    Tokenizers are immutable, so only the map itself is locked; construction
    and encoding run outside the lock. Loading under an existing name
    replaces the previous tokenizer.

    .. code-block:: python

        registry = TokenizerRegistry()
        registry.load("cl100k", TiktokenModel(bpe=blob, special_bpe=[], regex=pat))
        unpack_ranks(registry.encode("cl100k", b"Hello World!"))
    """

    def __init__(self) -> None:
        self._tokenizers: dict[str, Tokenizer] = {}
        self._lock = threading.Lock()

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._tokenizers

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokenizers)

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._tokenizers)

    def load(self, name: str, model: LoadModel) -> Tokenizer:
        """
        Build and register a tokenizer.

        Nothing is registered when construction fails.

        :raises LoadError: If the model data is malformed.
        :raises InvariantViolation: If the vocabulary is inconsistent.
        """
        tokenizer = build_tokenizer(model)
        with self._lock:
            replaced = name in self._tokenizers
            self._tokenizers[name] = tokenizer
        log.info(
            f"{'replaced' if replaced else 'loaded'} {tokenizer.TOKENIZER_TYPE} "
            f"tokenizer {name!r}"
        )
        return tokenizer

    def unload(self, name: str) -> None:
        """Remove a tokenizer; unknown names are ignored."""
        with self._lock:
            removed = self._tokenizers.pop(name, None)
        if removed is not None:
            log.info(f"unloaded tokenizer {name!r}")

    def get(self, name: str) -> Tokenizer:
        """
        Look up a tokenizer by name.

        :raises TokenizerNotFoundError: If no tokenizer has that name.
        """
        with self._lock:
            tokenizer = self._tokenizers.get(name)
        if tokenizer is None:
            raise TokenizerNotFoundError("tokenizer not found", name=name)
        return tokenizer

    def encode(self, name: str, text: bytes, special_tokens: bool | None = None) -> bytes:
        """Encode UTF-8 text and return the ranks as packed little-endian u32."""
        tokenizer = self.get(name)
        return pack_ranks(tokenizer.encode(_decode_text(text), special_tokens))

    def decode(self, name: str, data: bytes, special_tokens: bool | None = None) -> bytes:
        """Decode packed little-endian u32 ranks into bytes."""
        tokenizer = self.get(name)
        return tokenizer.decode(unpack_ranks(data), special_tokens)

    def encode_with_unstable(self, name: str, text: bytes) -> UnstableResult:
        """Encode UTF-8 text into packed stable ranks and packed completions."""
        tokenizer = self.get(name)
        tokens, completions = tokenizer.encode_with_unstable(_decode_text(text))
        return UnstableResult(
            tokens=pack_ranks(tokens),
            completions={pack_ranks(list(seq)) for seq in completions},
        )

    def dispatch(self, request: Request) -> bytes | UnstableResult | None:
        """Route a typed request to the matching operation."""
        match request:
            case LoadRequest(name=name, data=data):
                self.load(name, data)
                return None
            case UnloadRequest(name=name):
                self.unload(name)
                return None
            case EncodeRequest(name=name, input=text, special_tokens=special):
                return self.encode(name, text, special)
            case DecodeRequest(name=name, input=data, special_tokens=special):
                return self.decode(name, data, special)
            case EncodeUnstableRequest(name=name, input=text):
                return self.encode_with_unstable(name, text)
        raise TypeError(f"unsupported request: {type(request).__name__}")
