"""
Token-level mutation passes.

These passes look at one token at a time and rewrite it in place with a
probability equal to the intensity: float literals are jittered, arithmetic
operators and unary built-ins are swapped for others from the same family,
and swizzle masks are shuffled. None of them change the number of tokens.
"""

from __future__ import annotations

import re

from aetherfuzz.lexer import Token, TokenKind
from aetherfuzz.mutators.utils import (
    TokenMutator,
    format_float,
    is_float_literal,
    parse_float,
    with_text,
)


class NumberPerturbator(TokenMutator):
    """Jitter float literals additively (+-0.5) or scale them by 0.5x-1.5x."""

    DIGITS = 3

    def _perturb(self, value: float) -> float:
        if self.rng.random() < 0.5:
            return value + (self.rng.random() - 0.5)
        return value * (0.5 + self.rng.random())

    def mutate(self, tokens: tuple[Token, ...], intensity: float) -> tuple[Token, ...]:
        result = []
        for token in tokens:
            if is_float_literal(token) and self.chance(intensity):
                value = parse_float(token.text)
                if value is not None:
                    text = format_float(self._perturb(value), self.DIGITS)
                    if text is not None:
                        token = with_text(token, text)
            result.append(token)
        return tuple(result)


class OperatorSwapper(TokenMutator):
    """Replace `+ - * /` with a random operator from the same set."""

    OPERATORS = ["+", "-", "*", "/"]

    def mutate(self, tokens: tuple[Token, ...], intensity: float) -> tuple[Token, ...]:
        return tuple(
            with_text(token, self.rng.choice(self.OPERATORS))
            if token.kind is TokenKind.PUNCTUATION
            and token.text in self.OPERATORS
            and self.chance(intensity)
            else token
            for token in tokens
        )


class BuiltinSwapper(TokenMutator):
    """Swap calls to unary-safe built-ins and helpers for one another."""

    # Functions that take one argument and return a value of the same type,
    # plus the scalar helpers from the injected library.
    SAFE_BUILTINS = [
        "sin",
        "cos",
        "tan",
        "abs",
        "floor",
        "ceil",
        "fract",
        "sqrt",
        "f_sin",
        "f_cos",
        "f_n",
        "f_hash",
        "length",
    ]

    def mutate(self, tokens: tuple[Token, ...], intensity: float) -> tuple[Token, ...]:
        return tuple(
            with_text(token, self.rng.choice(self.SAFE_BUILTINS))
            if token.kind is TokenKind.IDENTIFIER
            and token.text in self.SAFE_BUILTINS
            and self.chance(intensity)
            else token
            for token in tokens
        )


class SwizzleShuffler(TokenMutator):
    """Shuffle the components of swizzle masks such as `.xy` or `.rgb`."""

    SWIZZLE_RE = re.compile(r"[xyzrgba]{2,4}")

    def _shuffle(self, text: str) -> str:
        chars = list(text)
        # Fisher-Yates
        for i in range(len(chars) - 1, 0, -1):
            j = self.rng.randint(0, i)
            chars[i], chars[j] = chars[j], chars[i]
        return "".join(chars)

    def mutate(self, tokens: tuple[Token, ...], intensity: float) -> tuple[Token, ...]:
        result = list(tokens)
        for i in range(1, len(result)):
            token = result[i]
            if (
                result[i - 1].is_punct(".")
                and token.kind is TokenKind.IDENTIFIER
                and self.SWIZZLE_RE.fullmatch(token.text)
                and self.chance(intensity)
            ):
                result[i] = with_text(token, self._shuffle(token.text))
        return tuple(result)
