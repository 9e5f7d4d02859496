"""tokcore: byte pair encoding codec with stable-prefix completion."""

from ._models import BPETokenizer, HuggingFaceTokenizer, Tokenizer
from ._merge import byte_pair_encode, byte_pair_split
from .core import CoreBPE
from .errors import (
    DecodeError,
    InvariantViolation,
    LoadError,
    PatternError,
    TokCoreError,
    TokenizationError,
    TokenizerNotFoundError,
)
from .factory import from_file, from_tiktoken, get_pattern, list_patterns
from .load import dump_bpe, load_bpe, load_bpe_file
from .pattern import TokenPattern
from .registry import TokenizerRegistry
from .requests import (
    DecodeRequest,
    EncodeRequest,
    EncodeUnstableRequest,
    HuggingFaceModel,
    LoadRequest,
    TiktokenModel,
    UnloadRequest,
    UnstableResult,
)
from .wire import pack_ranks, unpack_ranks

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("tokcore")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "CoreBPE",
    "Tokenizer",
    "BPETokenizer",
    "HuggingFaceTokenizer",
    "TokenizerRegistry",
    "TokenPattern",
    "TiktokenModel",
    "HuggingFaceModel",
    "LoadRequest",
    "UnloadRequest",
    "EncodeRequest",
    "DecodeRequest",
    "EncodeUnstableRequest",
    "UnstableResult",
    "TokCoreError",
    "LoadError",
    "PatternError",
    "TokenizerNotFoundError",
    "DecodeError",
    "InvariantViolation",
    "TokenizationError",
    "load_bpe",
    "load_bpe_file",
    "dump_bpe",
    "byte_pair_encode",
    "byte_pair_split",
    "pack_ranks",
    "unpack_ranks",
    "from_file",
    "from_tiktoken",
    "get_pattern",
    "list_patterns",
]
