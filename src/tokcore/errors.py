"""Custom exception hierarchy for tokcore errors."""

import regex as re

from ._sanitise import render_bytes
from .types import Rank


class TokCoreError(Exception):
    """Base exception for all tokcore errors."""


class LoadError(TokCoreError):
    """Raised when a vocabulary or tokenizer model cannot be loaded."""

    def __init__(
        self,
        message: str,
        *,
        line: int | None = None,
        reason: str | None = None,
    ) -> None:
        """Initialize with optional line number and reason appended to the message."""
        extra = " "
        if line is not None:
            extra += f"(line: {line}) "
        if reason:
            extra += f"(reason: {reason}) "
        super().__init__(message + extra)
        self.line = line
        self.reason = reason


class PatternError(LoadError):
    """Raised when compiling segmentation or special-token patterns."""

    def __init__(
        self,
        message: str,
        *,
        pattern: str | None = None,
        regex_err: re.error | None = None,
    ) -> None:
        """
        Initialize PatternError with pattern details.

        Args:
            message: Error message.
            pattern: The regex pattern that failed.
            regex_err: The underlying regex error from the regex library.
        """
        if pattern:
            message += f" (pattern: {pattern!r})"
        super().__init__(message, reason=str(regex_err) if regex_err else None)
        self.pattern = pattern
        self.regex_err = regex_err


class TokenizerNotFoundError(TokCoreError, LookupError):
    """Raised when a tokenizer name is not registered."""

    def __init__(self, message: str, *, name: str | None = None) -> None:
        if name is not None:
            message += f" (name: {name!r})"
        super().__init__(message)
        self.name = name


class DecodeError(TokCoreError):
    """Raised when a rank is unknown to both the ordinary and special decoders."""

    def __init__(self, message: str, *, token: Rank | None = None) -> None:
        if token is not None:
            message += f" (invalid token: {token})"
        super().__init__(message)
        self.token = token


class InvariantViolation(TokCoreError):
    """Raised when a vocabulary breaks a structural invariant of the codec."""

    def __init__(
        self,
        message: str,
        *,
        piece: bytes | None = None,
        missing: list[int] | None = None,
    ) -> None:
        extra = " "
        # merge fallback: byte run that could not be resolved
        if piece is not None:
            extra += f"(piece: {render_bytes(piece)!r}) "
        # construction: single byte values absent from the vocabulary
        if missing:
            shown = ", ".join(f"0x{b:02x}" for b in missing[:8])
            if len(missing) > 8:
                shown += f", ... {len(missing) - 8} more"
            extra += f"(missing bytes: {shown}) "
        super().__init__(message + extra)
        self.piece = piece
        self.missing = missing


class TokenizationError(TokCoreError):
    """Raised when text or ranks cannot be converted at the boundary."""

    def __init__(self, message: str, *, position: int | None = None) -> None:
        if position is not None:
            message += f" (position: {position})"
        super().__init__(message)
        self.position = position
