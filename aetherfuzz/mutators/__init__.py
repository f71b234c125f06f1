"""
The `aetherfuzz.mutators` package contains the mutation engine and the
library of passes used by the fuzzer.

It exposes the main `ShaderMutator` engine and the `fuzz()` entry point, plus
the individual passes for callers that want to run one in isolation.
"""

from aetherfuzz.mutators.atomic import (
    BuiltinSwapper,
    NumberPerturbator,
    OperatorSwapper,
    SwizzleShuffler,
)
from aetherfuzz.mutators.engine import FuzzResult, ShaderMutator, fuzz
from aetherfuzz.mutators.structural import (
    ChaosInjector,
    ColorShifter,
    GeometryWarper,
    StructureReplacer,
)

__all__ = [
    "ShaderMutator",
    "FuzzResult",
    "fuzz",
    "NumberPerturbator",
    "OperatorSwapper",
    "BuiltinSwapper",
    "SwizzleShuffler",
    "GeometryWarper",
    "ColorShifter",
    "ChaosInjector",
    "StructureReplacer",
]
