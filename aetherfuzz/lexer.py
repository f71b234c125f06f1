"""
Lexical analysis for WGSL fragment programs.

The fuzzer never builds a syntax tree. Instead, it works on a flat sequence of
classified tokens that keep the exact source text, so that joining the text of
every token reproduces the input byte for byte. Mutation passes rewrite this
sequence and `serialize()` turns it back into source.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

# Offset carried by tokens that were inserted by a mutation pass.
SYNTHETIC_OFFSET = -1


class TokenKind(Enum):
    """Lexical class of a token."""

    IDENTIFIER = "ident"
    NUMBER = "number"
    PUNCTUATION = "punct"
    WHITESPACE = "whitespace"
    COMMENT = "comment"
    STRING = "string"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Token:
    """A classified slice of source text."""

    kind: TokenKind
    text: str
    offset: int = SYNTHETIC_OFFSET

    def is_punct(self, text: str) -> bool:
        return self.kind is TokenKind.PUNCTUATION and self.text == text

    def is_ident(self, text: str) -> bool:
        return self.kind is TokenKind.IDENTIFIER and self.text == text


# Tried in order at every position; the first pattern that matches wins.
# Multi-character punctuation comes before single characters so that `->`
# is never split into a `-` operator and a `>`.
TOKEN_PATTERNS: list[tuple[TokenKind, re.Pattern[str]]] = [
    (TokenKind.COMMENT, re.compile(r"//[^\n]*")),
    (TokenKind.COMMENT, re.compile(r"/\*.*?(?:\*/|\Z)", re.DOTALL)),
    (TokenKind.STRING, re.compile(r'"(?:[^"\\\n]|\\.)*"')),
    (TokenKind.WHITESPACE, re.compile(r"\s+")),
    (
        TokenKind.NUMBER,
        re.compile(
            r"0x[0-9a-fA-F]+"
            r"|\d+\.\d+(?:[eE][+-]?\d+)?"
            r"|\d+\.(?![eE\d])"
            r"|\.\d+(?:[eE][+-]?\d+)?"
            r"|\d+u?",
            re.ASCII,
        ),
    ),
    (TokenKind.IDENTIFIER, re.compile(r"[a-zA-Z_]\w*", re.ASCII)),
    (TokenKind.PUNCTUATION, re.compile(r"->|==|!=|<=|>=|&&|\|\|")),
    (TokenKind.PUNCTUATION, re.compile(r"[{}()\[\],;:.+*/=\-><]")),
]


def tokenize(source: str) -> tuple[Token, ...]:
    """
    Split source text into a tuple of tokens.

    Characters that match no pattern become one-character UNKNOWN tokens, so
    lexing never fails and always covers the whole input.
    """
    tokens: list[Token] = []
    pos = 0
    length = len(source)
    while pos < length:
        for kind, pattern in TOKEN_PATTERNS:
            match = pattern.match(source, pos)
            if match and match.end() > pos:
                tokens.append(Token(kind, match.group(), pos))
                pos = match.end()
                break
        else:
            tokens.append(Token(TokenKind.UNKNOWN, source[pos], pos))
            pos += 1
    return tuple(tokens)


def serialize(tokens: Iterable[Token]) -> str:
    """Join token text back into source."""
    return "".join(token.text for token in tokens)


def synthetic(source: str) -> tuple[Token, ...]:
    """Tokenize generated code, marking every token as inserted."""
    return tuple(Token(token.kind, token.text) for token in tokenize(source))
