"""aetherfuzz: a structure-aware mutation fuzzer for WGSL fragment programs."""

from aetherfuzz.lexer import Token, TokenKind, serialize, tokenize
from aetherfuzz.mutators import ShaderMutator, fuzz
from aetherfuzz.types import FuzzConfig

__version__ = "0.1.0"

__all__ = ["FuzzConfig", "ShaderMutator", "Token", "TokenKind", "fuzz", "serialize", "tokenize"]
