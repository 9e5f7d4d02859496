from enum import Enum

import regex as re

from .errors import PatternError


class TokenPattern(str, Enum):
    """
    Pre-defined segmentation patterns for well-known BPE vocabularies.

    Sources:
    - R50K, CL100K and O200K: https://github.com/openai/tiktoken/blob/main/tiktoken_ext/openai_public.py
    - Others: https://github.com/ggerganov/llama.cpp
    """

    # OpenAI vocabularies
    R50K = (
        r"'(?:[sdmt]|ll|ve|re)|"
        r" ?\p{L}+|"
        r" ?\p{N}+|"
        r" ?[^\s\p{L}\p{N}]+|"
        r"\s+(?!\S)|"
        r"\s+"
    )

    CL100K = (
        r"(?i:'s|'t|'re|'ve|'m|'ll|'d)|"
        r"[^\r\n\p{L}\p{N}]?\p{L}+|"
        r"\p{N}{1,3}|"
        r" ?[^\s\p{L}\p{N}]+[\r\n]*|"
        r"\s*[\r\n]+|"
        r"\s+(?!\S)|"
        r"\s+"
    )

    O200K = (
        r"[^\r\n\p{L}\p{N}]?[\p{Lu}\p{Lt}\p{Lm}\p{Lo}\p{M}]*[\p{Ll}\p{Lm}\p{Lo}\p{M}]+(?i:'s|'t|'re|'ve|'m|'ll|'d)?|"
        r"[^\r\n\p{L}\p{N}]?[\p{Lu}\p{Lt}\p{Lm}\p{Lo}\p{M}]+[\p{Ll}\p{Lm}\p{Lo}\p{M}]*(?i:'s|'t|'re|'ve|'m|'ll|'d)?|"
        r"\p{N}{1,3}|"
        r" ?[^\s\p{L}\p{N}]+[\r\n/]*|"
        r"\s*[\r\n]+|"
        r"\s+(?!\S)|"
        r"\s+"
    )

    # Meta models
    LLAMA3 = (
        r"(?:'[sS]|'[tT]|'[rR][eE]|'[vV][eE]|'[mM]|'[lL][lL]|'[dD])|"
        r"[^\r\n\p{L}\p{N}]?\p{L}+|"
        r"\p{N}{1,3}|"
        r" ?[^\s\p{L}\p{N}]+[\r\n]*|"
        r"\s*[\r\n]+|"
        r"\s+(?!\S)|"
        r"\s+"
    )

    # Alibaba models
    QWEN2 = (
        r"(?:'[sS]|'[tT]|'[rR][eE]|'[vV][eE]|'[mM]|'[lL][lL]|'[dD])|"
        r"[^\r\n\p{L}\p{N}]?\p{L}+|"
        r"\p{N}|"  # single digits (different from LLAMA3)
        r" ?[^\s\p{L}\p{N}]+[\r\n]*|"
        r"\s*[\r\n]+|"
        r"\s+(?!\S)|"
        r"\s+"
    )

    @classmethod
    def get(cls, name: str) -> str:
        """Get patterns by name (case-insensitive, ``gpt2``/``gpt4`` aliases accepted)."""
        key = _ALIASES.get(name.lower(), name)
        try:
            return cls[key.upper().replace("-", "_")].value
        except KeyError:
            raise PatternError(
                f"Unknown pattern: {name!r}. "
                f"Valid patterns: {', '.join(pat.name for pat in cls)}"
            ) from None


_ALIASES: dict[str, str] = {
    "gpt2": "r50k",
    "gpt4": "cl100k",
    "gpt4o": "o200k",
}


def resolve_pattern(pattern: str) -> str:
    """Return the built-in pattern for a known name, else ``pattern`` unchanged."""
    if isinstance(pattern, TokenPattern):
        return pattern.value
    key = _ALIASES.get(pattern.lower(), pattern).upper().replace("-", "_")
    if key in TokenPattern.__members__:
        return TokenPattern[key].value
    return pattern


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """
    Compile and validate a segmentation pattern.

    :param pattern: Regex pattern string to compile.
    :return: Compiled regex pattern.
    :raises PatternError: If pattern is invalid.
    """
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternError("invalid regex pattern", pattern=pattern, regex_err=e) from e


def compile_special_pattern(literals: list[str]) -> re.Pattern[str] | None:
    """
    Build one alternation matching any of the special-token literals.

    Longer literals are tried first so a token that is a prefix of another
    never shadows it. Returns ``None`` when there are no literals, so the
    caller never matches anything.
    """
    if not literals:
        return None
    # an empty literal matches everywhere and would never advance the encoder
    if "" in literals:
        raise PatternError("special token literal must not be empty")
    # escape regex metachars like "|" inside "<|endoftext|>"
    parts = [re.escape(seq) for seq in sorted(literals, key=len, reverse=True)]
    return compile_pattern("|".join(parts))
