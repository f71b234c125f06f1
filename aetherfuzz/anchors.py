"""
Read-only landmark queries over a token sequence.

These helpers find the entry function, its fragment-coordinate parameter, the
start of its body and the terminal return statement by scanning tokens, not by
parsing. Every query returns None when the structure it looks for is missing;
callers treat that as "leave the program alone".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from aetherfuzz.lexer import Token, TokenKind

ENTRY_POINT_NAME = "main"
FALLBACK_COORD_NAME = "uv"


@dataclass(frozen=True)
class ReturnStatement:
    """Indices of a `return` keyword and the `;` that ends its statement."""

    keyword: int
    terminator: int

    def expression_start(self, tokens: Sequence[Token]) -> int:
        """Index of the first expression token, after one optional whitespace token."""
        start = self.keyword + 1
        if start < self.terminator and tokens[start].kind is TokenKind.WHITESPACE:
            return start + 1
        return start


def skip_whitespace(tokens: Sequence[Token], index: int) -> int:
    """Return the first index at or after `index` that is not whitespace."""
    while index < len(tokens) and tokens[index].kind is TokenKind.WHITESPACE:
        index += 1
    return index


def previous_significant(tokens: Sequence[Token], index: int) -> int:
    """Return the last index before `index` that is not whitespace, or -1."""
    index -= 1
    while index >= 0 and tokens[index].kind is TokenKind.WHITESPACE:
        index -= 1
    return index


def find_matching_paren(tokens: Sequence[Token], open_index: int) -> int | None:
    """Return the index of the `)` that balances the `(` at `open_index`."""
    depth = 0
    for i in range(open_index, len(tokens)):
        if tokens[i].is_punct("("):
            depth += 1
        elif tokens[i].is_punct(")"):
            depth -= 1
            if depth == 0:
                return i
    return None


def find_entry_function(tokens: Sequence[Token], name: str = ENTRY_POINT_NAME) -> int | None:
    """Return the index of the `fn` keyword that introduces the entry function."""
    for i, token in enumerate(tokens):
        if token.is_ident("fn"):
            j = skip_whitespace(tokens, i + 1)
            if j < len(tokens) and tokens[j].is_ident(name):
                return i
    return None


def find_parameter_list(tokens: Sequence[Token], fn_index: int) -> tuple[int, int] | None:
    """Return the `(` and `)` indices of the parameter list after `fn_index`."""
    for i in range(fn_index, len(tokens)):
        if tokens[i].is_punct("("):
            close = find_matching_paren(tokens, i)
            if close is None:
                return None
            return i, close
        if tokens[i].is_punct("{"):
            return None
    return None


def _is_location_zero(tokens: Sequence[Token], index: int) -> int | None:
    """If `location(0)` starts at `index`, return the index after its `)`."""
    j = skip_whitespace(tokens, index + 1)
    if j >= len(tokens) or not tokens[j].is_punct("("):
        return None
    j = skip_whitespace(tokens, j + 1)
    if j >= len(tokens) or tokens[j].kind is not TokenKind.NUMBER or tokens[j].text != "0":
        return None
    j = skip_whitespace(tokens, j + 1)
    if j >= len(tokens) or not tokens[j].is_punct(")"):
        return None
    return j + 1


def find_coord_name(tokens: Sequence[Token], fn_index: int) -> str | None:
    """
    Return the name of the entry function's fragment-coordinate parameter.

    A parameter annotated with `@location(0)` wins; otherwise a parameter
    literally named `uv` is used.
    """
    params = find_parameter_list(tokens, fn_index)
    if params is None:
        return None
    open_index, close_index = params

    for i in range(open_index + 1, close_index):
        if not tokens[i].is_ident("location"):
            continue
        after = _is_location_zero(tokens, i)
        if after is None:
            continue
        j = skip_whitespace(tokens, after)
        if j < close_index and tokens[j].kind is TokenKind.IDENTIFIER:
            return tokens[j].text

    for i in range(open_index + 1, close_index):
        if tokens[i].is_ident(FALLBACK_COORD_NAME):
            return FALLBACK_COORD_NAME
    return None


def find_body_start(tokens: Sequence[Token], fn_index: int) -> int | None:
    """Return the index of the `{` that opens the entry function's body."""
    params = find_parameter_list(tokens, fn_index)
    if params is None:
        return None
    for i in range(params[1] + 1, len(tokens)):
        if tokens[i].is_punct("{"):
            return i
    return None


def find_last_return(tokens: Sequence[Token]) -> ReturnStatement | None:
    """
    Locate the last `return` in the sequence and the `;` that closes it.

    The entry function is expected to be the final definition, so its
    terminal return is the last one in the text.
    """
    for i in range(len(tokens) - 1, -1, -1):
        if tokens[i].is_ident("return"):
            for j in range(i + 1, len(tokens)):
                if tokens[j].is_punct(";"):
                    return ReturnStatement(keyword=i, terminator=j)
            return None
    return None
