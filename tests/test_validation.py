#!/usr/bin/env python3
"""
Tests for the validator collaborator.

This module contains unit tests for aetherfuzz/validation.py
"""

import subprocess
import unittest
from unittest.mock import MagicMock, patch

from aetherfuzz.types import Diagnostic
from aetherfuzz.validation import (
    ShaderValidator,
    ValidatorError,
    parse_diagnostics,
    partition_diagnostics,
)

NAGA_OUTPUT = """\
error: expected ';', found '}'
  ┌─ shader.wgsl:24:5
  │
24 │     }
  │     ^ expected ';'

warning: unused variable
  ┌─ shader.wgsl:21:9

Could not parse WGSL
"""


class TestParseDiagnostics(unittest.TestCase):
    """Tests for parse_diagnostics()."""

    def test_parses_headers_and_locations(self):
        diagnostics = parse_diagnostics(NAGA_OUTPUT)
        self.assertEqual(
            diagnostics,
            [
                Diagnostic(24, "expected ';', found '}'", "error"),
                Diagnostic(21, "unused variable", "warning"),
            ],
        )

    def test_line_offset(self):
        diagnostics = parse_diagnostics(NAGA_OUTPUT, line_offset=20)
        self.assertEqual([d.line for d in diagnostics], [4, 1])

    def test_preamble_lines_clamp_to_zero(self):
        diagnostics = parse_diagnostics("error: bad\n  ┌─ x.wgsl:3:1\n", line_offset=20)
        self.assertEqual(diagnostics[0].line, 0)

    def test_header_with_code(self):
        diagnostics = parse_diagnostics("error[E0001]: oops\n")
        self.assertEqual(diagnostics, [Diagnostic(0, "oops", "error")])

    def test_no_diagnostics(self):
        self.assertEqual(parse_diagnostics("Validation successful\n"), [])

    def test_partition(self):
        errors, warnings = partition_diagnostics(parse_diagnostics(NAGA_OUTPUT))
        self.assertEqual(len(errors), 1)
        self.assertEqual(len(warnings), 1)
        self.assertEqual(errors[0].severity, "error")


class TestShaderValidator(unittest.TestCase):
    """Tests for ShaderValidator.validate()."""

    def setUp(self):
        self.validator = ShaderValidator("naga --flag", timeout=3)

    @patch("aetherfuzz.validation.subprocess.run")
    def test_runs_command_with_shader_path(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")
        self.assertEqual(self.validator.validate("fn main() {}"), [])
        cmd = mock_run.call_args[0][0]
        self.assertEqual(cmd[:2], ["naga", "--flag"])
        self.assertTrue(cmd[2].endswith("shader.wgsl"))
        self.assertEqual(mock_run.call_args[1]["timeout"], 3)

    @patch("aetherfuzz.validation.subprocess.run")
    def test_line_numbers_exclude_preamble(self, mock_run):
        line = self.validator.line_offset + 2
        mock_run.return_value = MagicMock(
            returncode=1, stdout="", stderr=f"error: bad\n  ┌─ shader.wgsl:{line}:1\n"
        )
        diagnostics = self.validator.validate("x\ny\n")
        self.assertEqual(diagnostics, [Diagnostic(2, "bad", "error")])

    @patch("aetherfuzz.validation.subprocess.run")
    def test_unparsed_failure_becomes_error(self, mock_run):
        mock_run.return_value = MagicMock(returncode=2, stdout="", stderr="\npanic: boom\n")
        diagnostics = self.validator.validate("x")
        self.assertEqual(diagnostics, [Diagnostic(0, "panic: boom", "error")])

    @patch("aetherfuzz.validation.subprocess.run", side_effect=FileNotFoundError)
    def test_missing_binary(self, mock_run):
        with self.assertRaises(ValidatorError):
            self.validator.validate("x")

    @patch(
        "aetherfuzz.validation.subprocess.run",
        side_effect=subprocess.TimeoutExpired(cmd="naga", timeout=3),
    )
    def test_timeout(self, mock_run):
        with self.assertRaises(ValidatorError):
            self.validator.validate("x")

    @patch("aetherfuzz.validation.shutil.which")
    def test_is_available(self, mock_which):
        mock_which.return_value = "/usr/bin/naga"
        self.assertTrue(self.validator.is_available())
        mock_which.return_value = None
        self.assertFalse(self.validator.is_available())
        mock_which.assert_called_with("naga")


if __name__ == "__main__":
    unittest.main()
