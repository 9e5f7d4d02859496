"""Unit tests for vocabulary loading and persistence."""

import logging

import pytest

from tokcore import LoadError, dump_bpe, load_bpe, load_bpe_file


def test_load_records_and_skip_blank_lines():
    """Records parse into a vocabulary and blank lines are skipped."""
    assert load_bpe(b"YQ== 0\n\nYg== 1\n") == {b"a": 0, b"b": 1}


def test_load_empty_blob():
    """An empty blob is an empty vocabulary."""
    assert load_bpe(b"") == {}


def test_duplicate_token_overwrites_earlier_record(caplog):
    """Later records win and the overwrite is logged."""
    with caplog.at_level(logging.WARNING, logger="tokcore.load"):
        ranks = load_bpe(b"YQ== 0\nYQ== 5\n")
    assert ranks == {b"a": 5}
    assert "duplicate" in caplog.text


def test_duplicate_rank_is_not_rejected_by_loader():
    """The loader leaves duplicate ranks to codec construction."""
    assert load_bpe(b"YQ== 7\nYg== 7\n") == {b"a": 7, b"b": 7}


def test_missing_separator_names_line():
    """A record without a space reports its line number."""
    with pytest.raises(LoadError) as exc:
        load_bpe(b"YQ== 0\nYg==1\n")
    assert exc.value.line == 2


def test_invalid_base64_names_line():
    """Malformed base64 reports its line number."""
    with pytest.raises(LoadError) as exc:
        load_bpe(b"YQ== 0\n\n!!!! 1\n")
    assert exc.value.line == 3
    assert "line: 3" in str(exc.value)


def test_unpadded_base64_rejected():
    """Base64 without padding is rejected."""
    with pytest.raises(LoadError):
        load_bpe(b"YQ 0\n")


@pytest.mark.parametrize("rank", [b"x", b"-1", b"1.5", b"", b"4294967296", b"0\r"])
def test_invalid_rank_rejected(rank):
    """Ranks outside the u32 grammar are rejected."""
    with pytest.raises(LoadError):
        load_bpe(b"YQ== " + rank + b"\n")


def test_max_u32_rank_accepted():
    """The largest u32 rank is accepted."""
    assert load_bpe(b"YQ== 4294967295") == {b"a": 4294967295}


def test_dump_is_ordered_by_rank_and_loadable(toy_vocab):
    """Dumped records are ordered by rank and load back unchanged."""
    blob = dump_bpe(toy_vocab)
    lines = blob.splitlines()
    assert lines[0] == b"AA== 0"
    assert lines[-1] == b"YWE= 266"
    assert load_bpe(blob) == toy_vocab


def test_load_file(tmp_path, toy_blob, toy_vocab):
    """A vocabulary loads from a file path."""
    path = tmp_path / "toy.tiktoken"
    path.write_bytes(toy_blob)
    assert load_bpe_file(path) == toy_vocab


def test_load_missing_file_raises(tmp_path):
    """A missing file raises LoadError."""
    with pytest.raises(LoadError):
        load_bpe_file(tmp_path / "missing.tiktoken")
