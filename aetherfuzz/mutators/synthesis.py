"""
Random expression synthesis for WGSL fragment programs.

This module is the only source of new visual logic in the fuzzer. It grows
random scalar expressions over the fragment coordinate and packs them into
color expressions. Every function takes an explicit `random.Random` handle so
that a seeded pipeline always produces the same program.

The generated code calls the helper library (`f_hash`, `f_n`, `f_sin`, ...)
that is prepended to every program before compilation.
"""

from __future__ import annotations

import random

TERMINAL_PROBABILITY = 0.15
GENE_DEPTH = 4
PALETTE_DEPTH = 3

UNARY_FUNCTIONS = ["sin", "cos", "fract", "abs", "sqrt", "exp", "f_sin", "f_cos"]
# Multiplication is listed twice to bias towards it.
BINARY_OPERATORS = ["+", "-", "*", "*"]

PALETTE_BASIS = (
    "vec3<f32>(0.5,0.5,0.5), vec3<f32>(0.5,0.5,0.5), "
    "vec3<f32>(1.0,1.0,1.0), vec3<f32>(0.0, 0.33, 0.67)"
)


def rand_float(rng: random.Random, low: float, high: float) -> float:
    return low + rng.random() * (high - low)


def _terminal(coord: str, rng: random.Random) -> str:
    terminals = [
        f"{coord}.x",
        f"{coord}.y",
        f"length({coord} - 0.5)",
        "time",
        f"{rand_float(rng, 0.1, 5.0):.2f}",
        f"f_hash({coord})",
        f"f_n({coord}.x * 10.0)",
    ]
    return rng.choice(terminals)


def generate_scalar_expr(depth: int, coord: str, *, rng: random.Random | None = None) -> str:
    """
    Generate a random f32 expression over the coordinate variable `coord`.

    Every recursive call receives `depth - 1`, and a depth of zero always
    yields a terminal, so the call tree has at most 2 ** (depth + 1) - 1 nodes.
    """
    rng = rng or random.Random()
    if depth <= 0 or rng.random() < TERMINAL_PROBABILITY:
        return _terminal(coord, rng)

    branch = rng.random()
    if branch < 0.35:
        func = rng.choice(UNARY_FUNCTIONS)
        inner = generate_scalar_expr(depth - 1, coord, rng=rng)
        # Keep domain-limited functions inside their domain.
        if func == "sqrt":
            inner = f"abs({inner})"
        elif func == "exp":
            inner = f"clamp({inner}, -10.0, 10.0)"
        return f"{func}({inner})"

    if branch < 0.7:
        op = rng.choice(BINARY_OPERATORS)
        left = generate_scalar_expr(depth - 1, coord, rng=rng)
        right = generate_scalar_expr(depth - 1, coord, rng=rng)
        return f"({left} {op} {right})"

    kind = rng.random()
    if kind < 0.33:
        left = generate_scalar_expr(depth - 1, coord, rng=rng)
        right = generate_scalar_expr(depth - 1, coord, rng=rng)
        return f"mix({left}, {right}, {rand_float(rng, 0.0, 1.0):.2f})"
    if kind < 0.66:
        return f"smoothstep(0.0, 1.0, {generate_scalar_expr(depth - 1, coord, rng=rng)})"
    # Smooth minimum, an organic blend of two fields.
    left = generate_scalar_expr(depth - 1, coord, rng=rng)
    right = generate_scalar_expr(depth - 1, coord, rng=rng)
    return f"f_smin({left}, {right}, 0.5)"


def generate_procedural_gene(coord: str, *, rng: random.Random | None = None) -> str:
    """Generate a `vec3<f32>` color expression over `coord`."""
    rng = rng or random.Random()
    if rng.random() < 0.5:
        t = generate_scalar_expr(PALETTE_DEPTH, coord, rng=rng)
        return f"f_pal({t}, {PALETTE_BASIS})"

    r = generate_scalar_expr(GENE_DEPTH, coord, rng=rng)
    g = generate_scalar_expr(GENE_DEPTH, coord, rng=rng)
    b = generate_scalar_expr(GENE_DEPTH, coord, rng=rng)
    return f"vec3<f32>({r}, {g}, {b})"
