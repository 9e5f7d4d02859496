"""Tokenizer variants that a registry can hold."""

from .base import Tokenizer
from .bpe import BPETokenizer
from .huggingface import HuggingFaceTokenizer


__all__ = ["Tokenizer", "BPETokenizer", "HuggingFaceTokenizer"]
