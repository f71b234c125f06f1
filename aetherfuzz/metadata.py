"""
Generate and save run metadata for aetherfuzz campaigns.

The metadata file records which host a campaign ran on, with which settings,
so that an output directory full of mutants can be traced back to its run.
"""

import argparse
import json
import platform
import random
import shutil
import sys
import uuid
from pathlib import Path
from typing import Any

import psutil

from aetherfuzz.types import FuzzConfig

METADATA_FILENAME = "run_metadata.json"

ADJECTIVES = [
    "amber",
    "azure",
    "burning",
    "cobalt",
    "crimson",
    "drifting",
    "electric",
    "fractal",
    "glowing",
    "hazy",
    "iridescent",
    "liquid",
    "lucid",
    "neon",
    "opal",
    "pulsing",
    "radiant",
    "shimmering",
    "spectral",
    "twisted",
    "velvet",
    "violet",
    "warped",
]

NOUNS = [
    "aurora",
    "caustic",
    "comet",
    "corona",
    "eclipse",
    "filament",
    "gradient",
    "halo",
    "horizon",
    "lattice",
    "mirage",
    "moire",
    "nebula",
    "plasma",
    "prism",
    "quasar",
    "ripple",
    "spiral",
    "tessellation",
    "vortex",
]


def generate_instance_name() -> str:
    """Return a random `adjective-noun` name for a campaign."""
    return f"{random.choice(ADJECTIVES)}-{random.choice(NOUNS)}"


def load_existing_metadata(metadata_path: Path) -> dict | None:
    """Load a previous metadata file, or return None if absent or unreadable."""
    if not metadata_path.exists():
        return None
    try:
        with open(metadata_path, encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        print(f"[!] Warning: Could not load existing metadata: {e}", file=sys.stderr)
        return None


def get_hardware_info(output_dir: Path) -> dict[str, Any]:
    return {
        "cpu_count_logical": psutil.cpu_count(logical=True),
        "cpu_count_physical": psutil.cpu_count(logical=False),
        "total_ram_gb": round(psutil.virtual_memory().total / (1024**3), 2),
        "disk_free_gb": round(shutil.disk_usage(output_dir).free / (1024**3), 2),
    }


def generate_run_metadata(
    output_dir: Path, args: argparse.Namespace, config: FuzzConfig
) -> dict[str, Any]:
    """
    Generate run metadata and save it to `output_dir/run_metadata.json`.

    If the file already exists, its run_id and instance_name are kept so a
    resumed campaign keeps its identity. Hardware and configuration are
    always refreshed.

    Args:
        output_dir: Directory where the metadata file will be saved.
        args: Parsed command-line arguments.
        config: The fuzz configuration the campaign runs with.

    Returns:
        Dictionary containing all collected metadata.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    metadata_path = output_dir / METADATA_FILENAME

    existing = load_existing_metadata(metadata_path)
    if existing:
        run_id = existing.get("run_id") or str(uuid.uuid4())
        instance_name = existing.get("instance_name") or generate_instance_name()
        print(
            f"[+] Reusing existing instance identity: {instance_name} ({run_id[:8]}...)",
            file=sys.stderr,
        )
    else:
        run_id = str(uuid.uuid4())
        instance_name = generate_instance_name()
        print(
            f"[+] Created new instance identity: {instance_name} ({run_id[:8]}...)",
            file=sys.stderr,
        )

    metadata = {
        "run_id": run_id,
        "instance_name": instance_name,
        "environment": {
            "hostname": platform.node(),
            "os": platform.platform(),
            "python_version": sys.version.replace("\n", " "),
        },
        "hardware": get_hardware_info(output_dir),
        "configuration": {
            "fuzz_config": config.to_dict(),
            "args": vars(args),
        },
    }

    with open(metadata_path, "w", encoding="utf-8") as f:
        json.dump(metadata, f, indent=2, default=str)

    return metadata
