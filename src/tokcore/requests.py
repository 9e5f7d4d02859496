"""
Typed requests understood by ``TokenizerRegistry.dispatch``.

Payloads arriving from a host are plain dicts whose byte fields may be given
as ``str`` or ``bytes``, and whose load payload is untagged: the variant is
recognized by its keys. ``LoadRequest.from_dict`` resolves that into one of
the tagged model types below.
"""

from dataclasses import dataclass, field
from typing import Any

from .errors import LoadError
from .types import Rank


def _as_bytes(value: Any, field_name: str) -> bytes:
    """Accept a byte-or-string field."""
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise LoadError(f"field {field_name!r} must be bytes or str, got {type(value).__name__}")


def _as_str(value: Any, field_name: str) -> str:
    if isinstance(value, str):
        return value
    try:
        return _as_bytes(value, field_name).decode("utf-8")
    except UnicodeDecodeError as e:
        raise LoadError(f"field {field_name!r} is not valid UTF-8", reason=str(e)) from e


@dataclass(frozen=True)
class TiktokenModel:
    """A BPE vocabulary blob, its special tokens and segmentation pattern."""

    bpe: bytes
    special_bpe: list[tuple[str, Rank]]
    regex: str


@dataclass(frozen=True)
class HuggingFaceModel:
    """A serialized ``tokenizers`` JSON model."""

    model: bytes


type LoadModel = TiktokenModel | HuggingFaceModel


def _model_from_dict(data: dict[str, Any]) -> LoadModel:
    if {"bpe", "special_bpe", "regex"} <= data.keys():
        try:
            special_bpe = [
                (_as_str(seq, "special_bpe"), int(rank))
                for seq, rank in data["special_bpe"]
            ]
        except (TypeError, ValueError) as e:
            raise LoadError("invalid special token list", reason=str(e)) from e
        return TiktokenModel(
            bpe=_as_bytes(data["bpe"], "bpe"),
            special_bpe=special_bpe,
            regex=_as_str(data["regex"], "regex"),
        )
    if "model" in data:
        return HuggingFaceModel(model=_as_bytes(data["model"], "model"))

    raise LoadError(
        "unrecognized tokenizer payload",
        reason=f"keys: {sorted(data)}",
    )


@dataclass(frozen=True)
class LoadRequest:
    name: str
    data: LoadModel

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "LoadRequest":
        """
        Resolve an untagged load payload.

        ``{"name": ..., "data": {"bpe": ..., "special_bpe": ..., "regex": ...}}``
        becomes a ``TiktokenModel`` and ``{"name": ..., "data": {"model": ...}}``
        a ``HuggingFaceModel``.

        :raises LoadError: If the payload matches neither shape.
        """
        if not isinstance(payload, dict) or "name" not in payload:
            raise LoadError("load request is missing a name")
        data = payload.get("data")
        if not isinstance(data, dict):
            raise LoadError(
                "load request is missing tokenizer data",
                reason=f"got {type(data).__name__}",
            )
        return cls(name=_as_str(payload["name"], "name"), data=_model_from_dict(data))


@dataclass(frozen=True)
class UnloadRequest:
    name: str


@dataclass(frozen=True)
class EncodeRequest:
    name: str
    input: bytes
    special_tokens: bool | None = None


@dataclass(frozen=True)
class DecodeRequest:
    name: str
    input: bytes
    special_tokens: bool | None = None


@dataclass(frozen=True)
class EncodeUnstableRequest:
    name: str
    input: bytes


type Request = (
    LoadRequest | UnloadRequest | EncodeRequest | DecodeRequest | EncodeUnstableRequest
)


@dataclass(frozen=True)
class UnstableResult:
    """Packed stable ranks and the packed completions of the unstable tail."""

    tokens: bytes
    completions: set[bytes] = field(default_factory=set)
