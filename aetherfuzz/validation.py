"""
Shader validation through an external WGSL compiler.

The fuzzer makes no correctness judgment of its own. A campaign can hand each
mutant to a command-line validator (by default `naga`), which reports
diagnostics; any error means the mutant is rejected.
"""

from __future__ import annotations

import re
import shutil
import subprocess
import tempfile
from pathlib import Path

from aetherfuzz.presets import WGSL_PREAMBLE
from aetherfuzz.types import Diagnostic

DEFAULT_VALIDATOR = "naga"

DIAGNOSTIC_HEADER_REGEX = re.compile(r"^\s*(error|warning)(?:\[[^\]]*\])?:\s*(.*)$")
LOCATION_REGEX = re.compile(r":(\d+):(\d+)")


class ValidatorError(Exception):
    """The validator could not be run at all."""


def parse_diagnostics(output: str, line_offset: int = 0) -> list[Diagnostic]:
    """
    Parse compiler output into diagnostics.

    Each `error: ...` or `warning: ...` line starts a diagnostic; the first
    `:<line>:<col>` found before the next header gives its line. Lines are
    shifted by `line_offset` and clamped to 0 when they fall in the preamble.
    """
    # [severity, message, line] for each header seen so far.
    found: list[list] = []
    for raw in output.splitlines():
        header = DIAGNOSTIC_HEADER_REGEX.match(raw)
        if header:
            found.append([header.group(1), header.group(2).strip(), 0])
            continue
        if found and found[-1][2] == 0:
            location = LOCATION_REGEX.search(raw)
            if location:
                found[-1][2] = int(location.group(1))

    return [
        Diagnostic(line=max(0, line - line_offset) if line else 0, message=message, severity=severity)
        for severity, message, line in found
    ]


def partition_diagnostics(
    diagnostics: list[Diagnostic],
) -> tuple[list[Diagnostic], list[Diagnostic]]:
    """Split diagnostics into (errors, warnings)."""
    errors = [d for d in diagnostics if d.severity == "error"]
    warnings = [d for d in diagnostics if d.severity == "warning"]
    return errors, warnings


class ShaderValidator:
    """Run an external compiler over preamble + program and collect diagnostics."""

    def __init__(
        self,
        command: str = DEFAULT_VALIDATOR,
        timeout: int = 10,
        preamble: str = WGSL_PREAMBLE,
    ) -> None:
        self.command = command.split()
        self.timeout = timeout
        self.preamble = preamble
        self.line_offset = preamble.count("\n")

    def is_available(self) -> bool:
        return bool(self.command) and shutil.which(self.command[0]) is not None

    def validate(self, code: str) -> list[Diagnostic]:
        """
        Compile `code` and return its diagnostics.

        Raises:
            ValidatorError: if the command is missing or times out.
        """
        with tempfile.TemporaryDirectory(prefix="aetherfuzz_") as tmp:
            source_path = Path(tmp) / "shader.wgsl"
            source_path.write_text(self.preamble + code, encoding="utf-8")
            try:
                result = subprocess.run(
                    self.command + [str(source_path)],
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                )
            except FileNotFoundError as e:
                raise ValidatorError(f"Validator not found: {self.command[0]}") from e
            except subprocess.TimeoutExpired as e:
                raise ValidatorError(f"Validator timed out after {self.timeout}s") from e

        output = (result.stdout or "") + (result.stderr or "")
        diagnostics = parse_diagnostics(output, self.line_offset)
        errors, _ = partition_diagnostics(diagnostics)
        if result.returncode != 0 and not errors:
            first_line = next((line for line in output.splitlines() if line.strip()), "")
            diagnostics.append(
                Diagnostic(
                    line=0,
                    message=first_line or f"Validator exited with status {result.returncode}",
                )
            )
        return diagnostics
