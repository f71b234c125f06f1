"""
This module contains the central orchestration logic for the mutation system.

It defines the `ShaderMutator` class, which lexes a program once, threads the
token sequence through the passes enabled by a `FuzzConfig` in a fixed order,
and serializes the result. `fuzz()` is the one-call entry point.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field

from aetherfuzz.lexer import Token, serialize, tokenize
from aetherfuzz.mutators.atomic import (
    BuiltinSwapper,
    NumberPerturbator,
    OperatorSwapper,
    SwizzleShuffler,
)
from aetherfuzz.mutators.structural import (
    ChaosInjector,
    ColorShifter,
    GeometryWarper,
    StructureReplacer,
)
from aetherfuzz.mutators.utils import TokenMutator
from aetherfuzz.types import FuzzConfig

# Module-level RNG for mutation operations
RANDOM = random.Random()

# Swizzle shuffling is not tied to a flag; it runs whenever intensity is above this.
SWIZZLE_THRESHOLD = 0.15


@dataclass
class FuzzResult:
    """The mutated program and the names of the passes that ran."""

    source: str
    passes: list[str] = field(default_factory=list)


class ShaderMutator:
    """
    An engine for structurally mutating WGSL fragment programs.

    Structural passes run first, each only if its flag is set and an
    independent draw falls under the intensity. Token-level passes follow and
    run whenever their flag is set. Swizzle shuffling comes last and is
    implicit above `SWIZZLE_THRESHOLD`.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or RANDOM
        # Ordered (config flag, pass) pairs.
        self.structural: list[tuple[str, TokenMutator]] = [
            ("mutate_structure", StructureReplacer(self.rng)),
            ("mutate_geometry", GeometryWarper(self.rng)),
            ("mutate_color", ColorShifter(self.rng)),
            ("mutate_chaos", ChaosInjector(self.rng)),
        ]
        self.atomic: list[tuple[str, TokenMutator]] = [
            ("mutate_numbers", NumberPerturbator(self.rng)),
            ("mutate_operators", OperatorSwapper(self.rng)),
            ("mutate_builtins", BuiltinSwapper(self.rng)),
        ]
        self.swizzle = SwizzleShuffler(self.rng)

    def mutate_tokens(
        self, tokens: tuple[Token, ...], config: FuzzConfig
    ) -> tuple[tuple[Token, ...], list[str]]:
        """
        Apply the enabled passes to a token sequence.

        Return:
            The final token tuple and the class names of the passes applied.
        """
        intensity = config.intensity
        applied: list[str] = []

        for flag, mutator in self.structural:
            if getattr(config, flag) and self.rng.random() < intensity:
                tokens = mutator.mutate(tokens, intensity)
                applied.append(type(mutator).__name__)

        for flag, mutator in self.atomic:
            if getattr(config, flag):
                tokens = mutator.mutate(tokens, intensity)
                applied.append(type(mutator).__name__)

        if intensity > SWIZZLE_THRESHOLD:
            tokens = self.swizzle.mutate(tokens, intensity)
            applied.append(type(self.swizzle).__name__)

        return tokens, applied

    def mutate(self, source: str, config: FuzzConfig, seed: int | None = None) -> FuzzResult:
        """
        Lex `source`, run the pass pipeline and serialize the result.

        Args:
            source: The WGSL program text.
            config: Which passes are enabled and the shared intensity.
            seed: An optional integer to reseed the RNG for a reproducible run.
        """
        if seed is not None:
            self.rng.seed(seed)
        tokens, applied = self.mutate_tokens(tokenize(source), config)
        return FuzzResult(serialize(tokens), applied)


def fuzz(
    source: str,
    config: FuzzConfig,
    rng: random.Random | None = None,
    seed: int | None = None,
) -> str:
    """Return a mutated copy of `source` according to `config`."""
    return ShaderMutator(rng).mutate(source, config, seed=seed).source
