"""
Shared pieces of the mutation system: the base class every token pass derives
from and small helpers for rewriting literal and identifier tokens.
"""

from __future__ import annotations

import math
import random
from dataclasses import replace
from typing import Sequence

from aetherfuzz.lexer import Token, TokenKind

ZERO_LITERAL = "0.0"


class TokenMutator:
    """
    Base class for a single mutation pass over a token sequence.

    Subclasses implement `mutate()`, which must not raise on programs that
    lack the structure the pass is looking for: it returns the input tuple
    unchanged instead. Randomness comes only from `self.rng`.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def mutate(self, tokens: tuple[Token, ...], intensity: float) -> tuple[Token, ...]:
        raise NotImplementedError

    def chance(self, probability: float) -> bool:
        return self.rng.random() < probability


def is_float_literal(token: Token) -> bool:
    return token.kind is TokenKind.NUMBER and "." in token.text


def parse_float(text: str) -> float | None:
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def format_float(value: float, digits: int) -> str | None:
    """
    Format a mutated literal, or return None if it is not a finite number.

    Values that round to zero at 3 decimals are written as `0.0`, which also
    avoids emitting `-0.000`.
    """
    if not math.isfinite(value):
        return None
    if abs(value) < 0.001:
        return ZERO_LITERAL
    text = f"{value:.{digits}f}"
    if float(text) == 0.0:
        return ZERO_LITERAL
    return text


def with_text(token: Token, text: str) -> Token:
    return replace(token, text=text)


def splice(
    tokens: Sequence[Token], start: int, end: int, insertion: Sequence[Token]
) -> tuple[Token, ...]:
    """Return a new tuple with `tokens[start:end]` replaced by `insertion`."""
    return tuple(tokens[:start]) + tuple(insertion) + tuple(tokens[end:])
