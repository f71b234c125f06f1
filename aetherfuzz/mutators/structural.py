"""
Structure-aware mutation passes.

Unlike the token-level passes, these locate landmarks in the program (the
entry function, its coordinate parameter, the final return statement, color
constructors) and splice generated code around them. Each pass returns its
input unchanged when the landmark it needs cannot be found.
"""

from __future__ import annotations

import sys

from aetherfuzz.anchors import (
    find_body_start,
    find_coord_name,
    find_entry_function,
    find_last_return,
    find_matching_paren,
    previous_significant,
    skip_whitespace,
)
from aetherfuzz.lexer import Token, TokenKind, serialize, synthetic
from aetherfuzz.mutators.synthesis import generate_procedural_gene, rand_float
from aetherfuzz.mutators.utils import (
    TokenMutator,
    format_float,
    is_float_literal,
    parse_float,
    splice,
    with_text,
)

BODY_INDENT = Token(TokenKind.WHITESPACE, "\n    ")
SPACE = Token(TokenKind.WHITESPACE, " ")


class GeometryWarper(TokenMutator):
    """
    Warp the coordinate space of the entry function.

    A new local is declared as the first statement of the body, holding a
    transformed copy of the coordinate parameter, and later uses of the
    parameter are redirected to it.
    """

    MAX_SUFFIX = 100000

    def _unique_name(self, tokens: tuple[Token, ...], coord: str) -> str:
        taken = {t.text for t in tokens if t.kind is TokenKind.IDENTIFIER}
        while True:
            name = f"{coord}_geo_{self.rng.randrange(self.MAX_SUFFIX)}"
            if name not in taken:
                return name

    def _warp_expression(self, coord: str) -> str:
        templates = [
            lambda: f"f_rot({coord}, time * {rand_float(self.rng, -0.5, 0.5):.2f})",
            lambda: (
                f"{coord} * {rand_float(self.rng, 0.5, 2.0):.2f}"
                " + vec2<f32>(sin(time), cos(time)) * 0.1"
            ),
            lambda: f"abs({coord} * 2.0 - 1.0)",
            lambda: f"fract({coord} * {rand_float(self.rng, 2.0, 5.0):.2f})",
            lambda: (
                f"{coord} + vec2<f32>(f_n({coord}.x*10.0), f_n({coord}.y*10.0))*0.05"
            ),
        ]
        return self.rng.choice(templates)()

    def mutate(self, tokens: tuple[Token, ...], intensity: float) -> tuple[Token, ...]:
        fn_index = find_entry_function(tokens)
        if fn_index is None:
            return tokens
        coord = find_coord_name(tokens, fn_index)
        if not coord:
            return tokens
        body_start = find_body_start(tokens, fn_index)
        if body_start is None:
            return tokens

        local = self._unique_name(tokens, coord)
        statement = f"var {local} = {self._warp_expression(coord)};"
        print(f"    -> Warping coordinates: {statement}", file=sys.stderr)
        insertion = (BODY_INDENT,) + synthetic(statement)

        insert_at = body_start + 1
        head = tokens[:insert_at] + insertion
        tail = list(tokens[insert_at:])
        for i, token in enumerate(tail):
            if not token.is_ident(coord):
                continue
            # Field names (`output.uv`) and declarations (`uv : vec2<f32>`)
            # keep their name.
            prev = previous_significant(tail, i)
            if prev >= 0 and tail[prev].is_punct("."):
                continue
            nxt = skip_whitespace(tail, i + 1)
            if nxt < len(tail) and tail[nxt].is_punct(":"):
                continue
            tail[i] = with_text(token, local)
        return head + tuple(tail)


class ColorShifter(TokenMutator):
    """Nudge float literals inside `vec3`/`vec4` constructor calls."""

    CONSTRUCTORS = ("vec3", "vec4")
    DIGITS = 2

    def _call_open(self, tokens: tuple[Token, ...], index: int) -> int | None:
        """Return the index of the constructor's `(`, skipping a `<f32>` clause."""
        ptr = skip_whitespace(tokens, index + 1)
        if ptr < len(tokens) and tokens[ptr].is_punct("<"):
            while ptr < len(tokens) and not tokens[ptr].is_punct(">"):
                ptr += 1
            ptr = skip_whitespace(tokens, ptr + 1)
        if ptr < len(tokens) and tokens[ptr].is_punct("("):
            return ptr
        return None

    def mutate(self, tokens: tuple[Token, ...], intensity: float) -> tuple[Token, ...]:
        result = list(tokens)
        for i, token in enumerate(tokens):
            if token.kind is not TokenKind.IDENTIFIER or token.text not in self.CONSTRUCTORS:
                continue
            open_index = self._call_open(tokens, i)
            if open_index is None:
                continue
            close_index = find_matching_paren(tokens, open_index)
            end = close_index if close_index is not None else len(tokens)
            for j in range(open_index + 1, end):
                literal = result[j]
                if not is_float_literal(literal) or not self.chance(intensity):
                    continue
                value = parse_float(literal.text)
                if value is None:
                    continue
                offset = (self.rng.random() - 0.5) * intensity * 2.0
                text = format_float(value + offset, self.DIGITS)
                if text is not None:
                    result[j] = with_text(literal, text)
        return tuple(result)


class ChaosInjector(TokenMutator):
    """Wrap the final return expression in a post-processing effect."""

    TEMPLATES = [
        "( {expr} + vec4<f32>(0.1, 0.1, 0.1, 0.0) )",
        "abs( {expr} - 0.5 ) * 2.0",
        "vec4<f32>( ({expr}).brg, 1.0 )",
        "mix( {expr}, vec4<f32>(sin(time), cos(time), 0.5, 1.0), 0.1 )",
        "({expr} * vec4<f32>(1.2, 0.9, 0.8, 1.0))",
    ]

    def mutate(self, tokens: tuple[Token, ...], intensity: float) -> tuple[Token, ...]:
        ret = find_last_return(tokens)
        if ret is None:
            return tokens
        start = ret.expression_start(tokens)
        expr = serialize(tokens[start : ret.terminator])
        if not expr.strip():
            return tokens

        wrapped = self.rng.choice(self.TEMPLATES).format(expr=expr)
        print("    -> Injecting chaos into return expression.", file=sys.stderr)
        insertion = synthetic(wrapped)
        if start == ret.keyword + 1:
            insertion = (SPACE,) + insertion
        return splice(tokens, start, ret.terminator, insertion)


class StructureReplacer(TokenMutator):
    """Replace the final return expression with a freshly synthesized color."""

    def mutate(self, tokens: tuple[Token, ...], intensity: float) -> tuple[Token, ...]:
        fn_index = find_entry_function(tokens)
        if fn_index is None:
            return tokens
        coord = find_coord_name(tokens, fn_index)
        if not coord:
            return tokens
        ret = find_last_return(tokens)
        if ret is None:
            return tokens

        gene = generate_procedural_gene(coord, rng=self.rng)
        print("    -> Replacing return expression with a procedural gene.", file=sys.stderr)
        start = ret.expression_start(tokens)
        insertion = synthetic(f"vec4<f32>({gene}, 1.0)")
        if start == ret.keyword + 1:
            insertion = (SPACE,) + insertion
        return splice(tokens, start, ret.terminator, insertion)
