#!/usr/bin/env python3
"""
Tests for the metadata module (aetherfuzz/metadata.py).

This module tests instance naming, identity persistence and the hardware
section gathered through psutil.
"""

import argparse
import json
import tempfile
import unittest
from io import StringIO
from pathlib import Path
from unittest.mock import MagicMock, patch

from aetherfuzz.metadata import (
    ADJECTIVES,
    METADATA_FILENAME,
    NOUNS,
    generate_instance_name,
    generate_run_metadata,
    load_existing_metadata,
)
from aetherfuzz.types import FuzzConfig


def fake_psutil():
    mock = MagicMock()
    mock.cpu_count.side_effect = lambda logical=True: 8 if logical else 4
    mock.virtual_memory.return_value.total = 16 * 1024**3
    return mock


class TestInstanceName(unittest.TestCase):
    """Tests for generate_instance_name()."""

    def test_adjective_noun_format(self):
        adjective, noun = generate_instance_name().split("-")
        self.assertIn(adjective, ADJECTIVES)
        self.assertIn(noun, NOUNS)


class TestGenerateRunMetadata(unittest.TestCase):
    """Tests for generate_run_metadata()."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.output_dir = Path(self.temp_dir.name) / "out"
        self.args = argparse.Namespace(epochs=3, seed=7)
        self.config = FuzzConfig(mutate_chaos=True, intensity=0.5)

    def tearDown(self):
        self.temp_dir.cleanup()

    @patch("aetherfuzz.metadata.psutil", new_callable=fake_psutil)
    def test_writes_metadata_file(self, mock_psutil):
        with patch("sys.stderr", StringIO()):
            metadata = generate_run_metadata(self.output_dir, self.args, self.config)

        on_disk = json.loads((self.output_dir / METADATA_FILENAME).read_text())
        self.assertEqual(on_disk["run_id"], metadata["run_id"])
        self.assertEqual(on_disk["hardware"]["cpu_count_logical"], 8)
        self.assertEqual(on_disk["hardware"]["cpu_count_physical"], 4)
        self.assertEqual(on_disk["hardware"]["total_ram_gb"], 16.0)
        self.assertEqual(on_disk["configuration"]["fuzz_config"]["intensity"], 0.5)
        self.assertTrue(on_disk["configuration"]["fuzz_config"]["mutate_chaos"])
        self.assertEqual(on_disk["configuration"]["args"], {"epochs": 3, "seed": 7})

    @patch("aetherfuzz.metadata.psutil", new_callable=fake_psutil)
    def test_identity_is_preserved(self, mock_psutil):
        with patch("sys.stderr", StringIO()):
            first = generate_run_metadata(self.output_dir, self.args, self.config)
        with patch("sys.stderr", StringIO()) as fake_stderr:
            second = generate_run_metadata(self.output_dir, self.args, self.config)
        self.assertEqual(first["run_id"], second["run_id"])
        self.assertEqual(first["instance_name"], second["instance_name"])
        self.assertIn("Reusing existing instance identity", fake_stderr.getvalue())

    def test_load_existing_metadata_handles_bad_json(self):
        self.output_dir.mkdir(parents=True)
        path = self.output_dir / METADATA_FILENAME
        self.assertIsNone(load_existing_metadata(path))
        path.write_text("{broken")
        with patch("sys.stderr", StringIO()):
            self.assertIsNone(load_existing_metadata(path))


if __name__ == "__main__":
    unittest.main()
