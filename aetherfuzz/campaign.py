"""
This module contains the fuzz campaign loop and the `aetherfuzz` command line.

A campaign starts from a preset or a file and repeatedly mutates the current
program. Each mutant is optionally compiled by an external validator; mutants
with errors are rejected and the previous program is kept, the rest are
accepted, saved and become the input of the next epoch.
"""

import argparse
import json
import random
import sys
from datetime import datetime
from pathlib import Path
from textwrap import dedent
from typing import Any

from aetherfuzz.metadata import generate_run_metadata
from aetherfuzz.mutators import ShaderMutator
from aetherfuzz.presets import PRESET_NAMES, get_preset
from aetherfuzz.types import CAMEL_CASE_KEYS, FuzzConfig
from aetherfuzz.utils import TeeLogger, load_run_stats, save_run_stats
from aetherfuzz.validation import ShaderValidator, ValidatorError, partition_diagnostics

DEFAULT_OUTPUT_DIR = Path("aetherfuzz_out")
CURRENT_PROGRAM_FILENAME = "current.wgsl"

# Command-line switch name for each pass flag.
PASS_SWITCHES = {
    "numbers": "mutate_numbers",
    "operators": "mutate_operators",
    "builtins": "mutate_builtins",
    "geometry": "mutate_geometry",
    "color": "mutate_color",
    "chaos": "mutate_chaos",
    "structure": "mutate_structure",
}


class FuzzCampaign:
    """Run mutation epochs over one evolving program."""

    def __init__(
        self,
        source: str,
        config: FuzzConfig,
        output_dir: Path,
        validator: ShaderValidator | None = None,
        seed: int | None = None,
    ):
        self.current = source
        self.config = config
        self.output_dir = output_dir
        self.validator = validator
        self.mutator = ShaderMutator(random.Random(seed))
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.run_stats = load_run_stats(output_dir)

    def _record_passes(self, passes: list[str]) -> None:
        counts = self.run_stats.setdefault("pass_counts", {})
        for name in passes:
            counts[name] = counts.get(name, 0) + 1

    def _validate(self, code: str) -> bool:
        """Return False if the validator reports an error in `code`."""
        if self.validator is None:
            return True
        try:
            diagnostics = self.validator.validate(code)
        except ValidatorError as e:
            print(f"[!] {e}. Continuing without validation.", file=sys.stderr)
            self.validator = None
            return True

        errors, warnings = partition_diagnostics(diagnostics)
        for warning in warnings:
            print(f"  [~] {warning}")
        if errors:
            print(f"  [-] Mutant rejected: {errors[0]}")
            for error in errors[1:]:
                print(f"      {error}")
            return False
        return True

    def _save_accepted(self, code: str) -> Path:
        epoch_path = self.output_dir / f"epoch_{self.run_stats['accepted']:04d}.wgsl"
        epoch_path.write_text(code, encoding="utf-8")
        (self.output_dir / CURRENT_PROGRAM_FILENAME).write_text(code, encoding="utf-8")
        return epoch_path

    def run_epoch(self) -> str:
        """
        Mutate the current program once.

        Returns one of "accepted", "rejected", "unchanged" or "exception".
        """
        self.run_stats["total_epochs"] += 1
        try:
            result = self.mutator.mutate(self.current, self.config)
        except Exception as e:
            # A failed attempt leaves the current program untouched.
            print(f"[!] Fuzzing algorithm exception: {type(e).__name__}: {e}", file=sys.stderr)
            self.run_stats["exceptions"] += 1
            return "exception"

        print(f"  [~] Passes: {', '.join(result.passes) or 'none'}")
        self._record_passes(result.passes)

        if result.source == self.current:
            self.run_stats["unchanged"] += 1
            return "unchanged"

        if not self._validate(result.source):
            self.run_stats["rejected"] += 1
            return "rejected"

        self.run_stats["accepted"] += 1
        self.current = result.source
        epoch_path = self._save_accepted(result.source)
        print(f"  [+] Mutant accepted: {epoch_path.name}")
        return "accepted"

    def run(self, epochs: int) -> dict[str, Any]:
        """Run `epochs` epochs, saving run stats after each one."""
        for epoch in range(1, epochs + 1):
            print(f"[+] Epoch {epoch}/{epochs}: running mutation pass...")
            self.run_epoch()
            save_run_stats(self.output_dir, self.run_stats)
        return self.run_stats


def load_source(args: argparse.Namespace) -> str:
    if args.input:
        return Path(args.input).read_text(encoding="utf-8")
    return get_preset(args.preset).code


def build_config(args: argparse.Namespace) -> FuzzConfig:
    """
    Combine the optional JSON config file with command-line overrides.

    Raises:
        ValueError: for unknown keys or an intensity outside (0, 1].
    """
    data: dict[str, Any] = {}
    if args.config:
        with open(args.config, encoding="utf-8") as f:
            data = json.load(f)
        data = {CAMEL_CASE_KEYS.get(key, key): value for key, value in data.items()}
    if args.all_passes:
        data.update({flag: True for flag in PASS_SWITCHES.values()})
    for switch, flag in PASS_SWITCHES.items():
        value = getattr(args, switch)
        if value is not None:
            data[flag] = value
    if args.intensity is not None:
        data["intensity"] = args.intensity
    return FuzzConfig.from_dict(data)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="aetherfuzz: a structure-aware mutation fuzzer for WGSL fragment shaders."
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--preset",
        choices=PRESET_NAMES,
        default=PRESET_NAMES[0],
        help="Built-in program to start from. (Default: %(default)s)",
    )
    source.add_argument("--input", type=Path, help="Path to a WGSL fragment program to start from.")
    parser.add_argument(
        "--config",
        type=Path,
        help="JSON file with fuzz options (snake_case or camelCase keys).",
    )
    parser.add_argument(
        "--intensity",
        type=float,
        default=None,
        help="Mutation probability and magnitude, in (0, 1]. (Default: 0.2)",
    )
    for switch in PASS_SWITCHES:
        parser.add_argument(
            f"--{switch}",
            action=argparse.BooleanOptionalAction,
            default=None,
            help=f"Enable or disable the {switch} pass.",
        )
    parser.add_argument(
        "--all-passes", action="store_true", help="Enable every pass before applying overrides."
    )
    parser.add_argument("--epochs", type=int, default=10, help="Number of mutation epochs to run.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible campaign.")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help="Directory for accepted mutants, logs and stats. (Default: %(default)s)",
    )
    parser.add_argument(
        "--validator",
        type=str,
        default=None,
        help="Validator command (e.g. 'naga'); the shader path is appended. No validation if unset.",
    )
    parser.add_argument(
        "--validator-timeout",
        type=int,
        default=10,
        help="Timeout in seconds for one validator run.",
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Suppress per-pass detail lines in the output."
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse command-line arguments and run a fuzz campaign."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.epochs < 1:
        parser.error("--epochs must be at least 1")
    try:
        config = build_config(args)
        source = load_source(args)
    except (ValueError, OSError) as e:
        parser.error(str(e))

    validator = None
    if args.validator:
        validator = ShaderValidator(args.validator, timeout=args.validator_timeout)
        if not validator.is_available():
            print(
                f"[!] Validator '{args.validator}' not found. Mutants will not be validated.",
                file=sys.stderr,
            )
            validator = None

    output_dir: Path = args.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)
    run_start_time = datetime.now()
    safe_timestamp = run_start_time.isoformat().replace(":", "-")
    log_path = output_dir / f"aetherfuzz_run_{safe_timestamp}.log"

    original_stdout = sys.stdout
    original_stderr = sys.stderr
    print(f"[+] Starting aetherfuzz campaign. Full log will be at: {log_path}")

    tee_logger = TeeLogger(log_path, original_stdout, verbose=not args.quiet)
    sys.stdout = tee_logger
    sys.stderr = tee_logger

    termination_reason = "Completed"
    campaign: FuzzCampaign | None = None
    try:
        metadata = generate_run_metadata(output_dir, args, config)
        header = f"""
================================================================================
AETHERFUZZ CAMPAIGN
================================================================================
- Instance:          {metadata["instance_name"]}
- Source:            {args.input or f"preset {args.preset}"}
- Epochs:            {args.epochs}
- Seed:              {args.seed}
- Validator:         {args.validator if validator else "none"}
- Start Time:        {run_start_time.isoformat()}
- Config:            {json.dumps(config.to_dict())}
================================================================================
"""
        print(dedent(header))

        campaign = FuzzCampaign(source, config, output_dir, validator=validator, seed=args.seed)
        campaign.run(args.epochs)
    except KeyboardInterrupt:
        print("\n[!] Fuzzing stopped by user.")
        termination_reason = "KeyboardInterrupt"
    except Exception as e:
        termination_reason = f"Error: {e}"
        print(f"\n[!!!] An unexpected error occurred in the campaign: {e}", file=original_stderr)
        import traceback

        traceback.print_exc(file=original_stderr)
    finally:
        duration = datetime.now() - run_start_time
        stats = campaign.run_stats if campaign else {}
        summary = f"""
================================================================================
CAMPAIGN SUMMARY
================================================================================
- Termination:       {termination_reason}
- Total Duration:    {duration}
- Epochs:            {stats.get("total_epochs", 0)}
- Accepted:          {stats.get("accepted", 0)}
- Rejected:          {stats.get("rejected", 0)}
- Unchanged:         {stats.get("unchanged", 0)}
- Exceptions:        {stats.get("exceptions", 0)}
- Pass Counts:       {json.dumps(stats.get("pass_counts", {}), sort_keys=True)}
================================================================================
"""
        print(dedent(summary))

        tee_logger.close()
        sys.stdout = original_stdout
        sys.stderr = original_stderr
        print(f"[+] Campaign finished. Full log saved to: {log_path}")


if __name__ == "__main__":
    main()
