"""Shared fixtures: a small hand-built vocabulary and the cl100k reference."""

import pytest

from tokcore import CoreBPE, TokenPattern, dump_bpe


# Toy vocabulary
# ---------------------------------------------------------------------------

TOY_MERGES: dict[bytes, int] = {
    b"he": 256,
    b"ll": 257,
    b"hell": 258,
    b"hello": 259,
    b" w": 260,
    b"or": 261,
    b" wor": 262,
    b"ld": 263,
    b" world": 264,
    b"  ": 265,
    b"aa": 266,
}

TOY_SPECIAL: dict[str, int] = {"<|endoftext|>": 1000, "<|fim|>": 1001}


def make_toy_vocab() -> dict[bytes, int]:
    vocab = {bytes([b]): b for b in range(256)}
    vocab.update(TOY_MERGES)
    return vocab


@pytest.fixture
def toy_vocab():
    """Return all 256 single bytes plus a few merges."""
    return make_toy_vocab()


@pytest.fixture
def toy_core(toy_vocab):
    """Return a codec over the toy vocabulary with the cl100k split pattern."""
    return CoreBPE(toy_vocab, TOY_SPECIAL, TokenPattern.CL100K)


@pytest.fixture
def toy_blob(toy_vocab):
    return dump_bpe(toy_vocab)


# cl100k reference vocabulary
# ---------------------------------------------------------------------------

CL100K_SPECIAL: dict[str, int] = {
    "<|endoftext|>": 100257,
    "<|fim_prefix|>": 100258,
    "<|fim_middle|>": 100259,
    "<|fim_suffix|>": 100260,
    "<|endofprompt|>": 100276,
    "<|im_start|>": 100264,
    "<|im_end|>": 100265,
}


@pytest.fixture(scope="session")
def cl100k_encoding():
    """Return the tiktoken cl100k_base encoding, skipping when it cannot be fetched."""
    tiktoken = pytest.importorskip("tiktoken")
    try:
        return tiktoken.get_encoding("cl100k_base")
    except Exception as e:
        pytest.skip(f"cl100k_base vocabulary unavailable: {e}")


@pytest.fixture(scope="session")
def cl100k(cl100k_encoding):
    """Return a codec over the cl100k ranks with the reference special tokens."""
    return CoreBPE(cl100k_encoding._mergeable_ranks, CL100K_SPECIAL, TokenPattern.CL100K)
