"""Unit tests for CoreBPE construction, encode and decode."""

import logging
import os

import pytest

from tokcore import (
    CoreBPE,
    DecodeError,
    InvariantViolation,
    LoadError,
    PatternError,
    TokenPattern,
)
from tokcore._config import default_num_workers

from conftest import TOY_SPECIAL


# Construction
# ---------------------------------------------------------------------------


def test_invalid_pattern_is_load_error(toy_vocab):
    """A pattern that fails to compile raises PatternError, a LoadError."""
    with pytest.raises(PatternError) as exc:
        CoreBPE(toy_vocab, {}, r"(unclosed")
    assert isinstance(exc.value, LoadError)


def test_duplicate_ranks_fail_construction(toy_vocab):
    """Two entries sharing a rank are rejected."""
    toy_vocab[b"zz"] = 256
    with pytest.raises(InvariantViolation):
        CoreBPE(toy_vocab, {}, TokenPattern.CL100K)


def test_missing_single_byte_fails_construction(toy_vocab):
    """A vocabulary missing a byte value is rejected and names the byte."""
    del toy_vocab[b"\x00"]
    with pytest.raises(InvariantViolation) as exc:
        CoreBPE(toy_vocab, {}, TokenPattern.CL100K)
    assert exc.value.missing == [0]


def test_empty_special_literal_rejected(toy_vocab):
    """An empty special-token literal would match everywhere."""
    with pytest.raises(PatternError):
        CoreBPE(toy_vocab, {"": 1000}, TokenPattern.CL100K)


def test_accessors(toy_core, toy_vocab):
    """Read-only views report the tables the codec was built with."""
    assert toy_core.n_vocab == len(toy_vocab) + len(TOY_SPECIAL)
    assert toy_core.special_tokens == TOY_SPECIAL
    assert toy_core.pattern == TokenPattern.CL100K.value
    index = toy_core.token_byte_values()
    assert index == sorted(toy_vocab)
    assert b"<|endoftext|>" not in index


# Encode
# ---------------------------------------------------------------------------


def test_encode_whole_pieces(toy_core):
    """Pieces that are vocabulary entries encode to a single rank each."""
    assert toy_core.encode("hello world") == [259, 264]


def test_encode_merges_unknown_piece(toy_core):
    """A piece missing from the vocabulary goes through the merge."""
    # "hellx" is one regex piece, merged into "hell" + "x"
    assert toy_core.encode("hellx") == [258, ord("x")]


def test_encode_special_tokens(toy_core):
    """Special-token literals encode to their own ranks."""
    assert toy_core.encode("hello<|endoftext|> world") == [259, 1000, 264]
    assert toy_core.encode("<|fim|><|endoftext|>") == [1001, 1000]


def test_encode_special_disabled(toy_core):
    """With special tokens off the literal is encoded as ordinary text."""
    tokens = toy_core.encode("hello<|endoftext|>", recognize_special=False)
    assert 1000 not in tokens
    assert tokens[0] == 259
    assert toy_core.decode(tokens) == "hello<|endoftext|>"
    assert tokens == toy_core.encode_ordinary("hello<|endoftext|>")


def test_empty_text(toy_core):
    """Empty text encodes to no ranks and back."""
    assert toy_core.encode("") == []
    assert toy_core.decode([]) == ""


def test_codec_without_special_tokens(toy_vocab):
    """A codec with no special tokens never emits a special rank."""
    core = CoreBPE(toy_vocab, {}, TokenPattern.CL100K)
    assert core.encode("hello world") == [259, 264]
    assert 1000 not in core.encode("<|endoftext|>")


def test_encode_is_deterministic(toy_core):
    """Encoding the same text twice gives the same ranks."""
    text = "hello world, hello  world\n\n"
    assert toy_core.encode(text) == toy_core.encode(text)


@pytest.mark.parametrize(
    "text",
    [
        "Hello, world!",
        "   \n\t  ",
        "x",
        "café naïve 日本語 🎉",
        "it's 12345 o'clock\r\n",
        "aaaaaaaaa",
    ],
)
def test_roundtrip(toy_core, text):
    """Decoding an encoding gives the original text back."""
    assert toy_core.decode(toy_core.encode(text)) == text


def test_segments_do_not_see_across_special_tokens(toy_core):
    """Lookahead in the pattern stops at a special token."""
    # "  " before a special token is the end of its segment, so \s+(?!\S) takes it whole
    assert toy_core.encode("hello  <|endoftext|>") == [259, 265, 1000]


# Decode
# ---------------------------------------------------------------------------


def test_decode_ordinary_then_special(toy_core):
    """Ordinary and special ranks decode to their bytes in order."""
    assert toy_core.decode_bytes([259, 1000]) == b"hello<|endoftext|>"


def test_decode_unknown_token_raises(toy_core):
    """A rank in neither table raises DecodeError carrying the rank."""
    with pytest.raises(DecodeError) as exc:
        toy_core.decode_bytes([259, 9999])
    assert exc.value.token == 9999


def test_decode_partial_utf8_is_lossy(toy_core):
    """Text decoding replaces invalid UTF-8 unless asked to be strict."""
    assert toy_core.decode_bytes([0xE6]) == b"\xe6"
    assert toy_core.decode([0xE6]) == "�"
    with pytest.raises(UnicodeDecodeError):
        toy_core.decode([0xE6], errors="strict")


# Batch
# ---------------------------------------------------------------------------


def test_encode_batch_matches_single(toy_core):
    """Threaded batch encoding keeps input order and matches encode."""
    texts = ["hello world", "aaaa", "", "hello<|endoftext|>", "café"] * 5
    expected = [toy_core.encode(text) for text in texts]
    assert toy_core.encode_batch(texts, num_workers=4) == expected
    assert toy_core.decode_batch(expected) == texts


def test_encode_batch_worker_env(toy_core, monkeypatch):
    """The worker count can come from the environment."""
    monkeypatch.setenv("TOKCORE_NUM_WORKERS", "1")
    assert toy_core.encode_batch(["hello", " world"]) == [[259], [264]]


@pytest.mark.parametrize("raw, expected", [("3", 3), ("0", 1), (" 2 ", 2)])
def test_worker_env_parsed(monkeypatch, raw, expected):
    """Numeric overrides are honoured with a floor of one worker."""
    monkeypatch.setenv("TOKCORE_NUM_WORKERS", raw)
    assert default_num_workers() == expected


def test_invalid_worker_env_warns(monkeypatch, caplog):
    """A non-numeric override logs a warning and falls back to the CPU count."""
    monkeypatch.setenv("TOKCORE_NUM_WORKERS", "abc")
    with caplog.at_level(logging.WARNING, logger="tokcore._config"):
        assert default_num_workers() == (os.cpu_count() or 1)
    assert "TOKCORE_NUM_WORKERS='abc'" in caplog.text


def test_unset_worker_env_is_silent(monkeypatch, caplog):
    """Without an override the CPU count is used and nothing is logged."""
    monkeypatch.delenv("TOKCORE_NUM_WORKERS", raising=False)
    with caplog.at_level(logging.WARNING, logger="tokcore._config"):
        assert default_num_workers() == (os.cpu_count() or 1)
    assert caplog.records == []


# cl100k reference
# ---------------------------------------------------------------------------


def test_cl100k_hello_world(cl100k):
    """Plain text encodes to the published cl100k ranks."""
    assert cl100k.encode("Hello World!") == [9906, 4435, 0]
    assert cl100k.decode([9906, 4435, 0]) == "Hello World!"


def test_cl100k_special_token(cl100k):
    """<|endoftext|> maps to its cl100k rank."""
    assert cl100k.encode("hello <|endoftext|>") == [15339, 220, 100257]
    assert cl100k.decode([15339, 220, 100257]) == "hello <|endoftext|>"


@pytest.mark.parametrize(
    "text",
    [
        "The quick brown fox jumps over the lazy dog.",
        "def f(x):\n    return x ** 2\n\n\n",
        "  leading and trailing   ",
        "ünïcödé 日本語のテキスト 🎉🎉",
        "I'LL BE THERE, won't you?",
    ],
)
def test_cl100k_matches_tiktoken(cl100k, cl100k_encoding, text):
    """Ordinary encoding agrees with tiktoken on the same ranks."""
    # same ranks and the encoding's own pattern string
    core = CoreBPE(
        cl100k_encoding._mergeable_ranks,
        cl100k_encoding._special_tokens,
        cl100k_encoding._pat_str,
    )
    assert core.encode_ordinary(text) == cl100k_encoding.encode_ordinary(text)
    assert cl100k.decode(cl100k.encode(text)) == text
