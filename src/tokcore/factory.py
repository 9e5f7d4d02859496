"""Factory functions for creating codecs."""

import logging
from pathlib import Path
from typing import Literal

import tiktoken

from .core import CoreBPE
from .errors import LoadError
from .load import load_bpe_file
from .pattern import TokenPattern, resolve_pattern
from .types import SpecialTokens

log = logging.getLogger(__name__)

Pattern = Literal[
    "r50k",
    "cl100k",
    "o200k",
    "llama3",
    "qwen2",
    "gpt2",
    "gpt4",
    "gpt4o",
]


def list_patterns() -> list[str]:
    """Return names of all available built-in segmentation patterns."""
    return [pat.name for pat in TokenPattern]


def get_pattern(name: Pattern) -> str:
    return TokenPattern.get(name)


def from_file(
    path: str | Path,
    special_tokens: SpecialTokens | None = None,
    pattern: str = TokenPattern.CL100K,
) -> CoreBPE:
    """
    Build a codec from a ``.tiktoken`` vocabulary file.

    :param path: Path to the vocabulary file.
    :param special_tokens: Special-token literals and their ranks.
    :param pattern: Segmentation pattern; a built-in name or a raw regex.
    :raises LoadError: If the file is missing or malformed.

    .. code-block:: python

        core = from_file("cl100k_base.tiktoken", {"<|endoftext|>": 100257}, "cl100k")
    """
    return CoreBPE(load_bpe_file(path), special_tokens or {}, resolve_pattern(pattern))


def from_tiktoken(encoding_name: str) -> CoreBPE:
    """
    Build a codec from a reference ``tiktoken`` encoding.

    The vocabulary is fetched (and cached) by ``tiktoken``; ranks, special
    tokens and pattern are copied so the codec is independent of it.

    :param encoding_name: e.g. ``"cl100k_base"``.
    :raises LoadError: If ``tiktoken`` does not know the encoding.
    """
    try:
        enc = tiktoken.get_encoding(encoding_name)
    except ValueError as e:
        raise LoadError(f"unknown tiktoken encoding {encoding_name!r}") from e

    log.info(f"building codec from tiktoken encoding {encoding_name!r}")
    return CoreBPE(enc._mergeable_ranks, enc._special_tokens, enc._pat_str)
