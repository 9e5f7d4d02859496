"""
Core types for the BPE codec.
"""

type Rank = int
type TokenBytes = bytes
type Vocabulary = dict[TokenBytes, Rank]
type Decoder = dict[Rank, TokenBytes]
type SpecialTokens = dict[str, Rank]
type Completion = tuple[Rank, ...]
