"""
This module contains generic helpers for aetherfuzz campaigns.

It includes the tee logger that mirrors console output into the session log,
and persistence for the per-campaign run statistics.
"""

import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TextIO

RUN_STATS_FILENAME = "fuzz_run_stats.json"


def _default_run_stats() -> dict[str, Any]:
    """Return the canonical default run statistics structure."""
    return {
        "start_time": datetime.now(timezone.utc).isoformat(),
        "last_update_time": None,
        "total_epochs": 0,
        "accepted": 0,
        "rejected": 0,
        "exceptions": 0,
        "unchanged": 0,
        "pass_counts": {},
    }


def load_run_stats(output_dir: Path) -> dict[str, Any]:
    """
    Load the run statistics from `output_dir`.
    Returns a default structure if the file doesn't exist or is unreadable.
    """
    stats_path = output_dir / RUN_STATS_FILENAME
    if not stats_path.is_file():
        return _default_run_stats()
    try:
        with open(stats_path, "r", encoding="utf-8") as f:
            stats: dict[str, Any] = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        print(
            f"[!] Warning: Could not load run stats file. Starting fresh. Error: {e}",
            file=sys.stderr,
        )
        return _default_run_stats()
    for key, value in _default_run_stats().items():
        if key != "start_time":
            stats.setdefault(key, value)
    return stats


def save_run_stats(output_dir: Path, stats: dict[str, Any]) -> None:
    """Save the run statistics into `output_dir`."""
    stats["last_update_time"] = datetime.now(timezone.utc).isoformat()
    try:
        with open(output_dir / RUN_STATS_FILENAME, "w", encoding="utf-8") as f:
            json.dump(stats, f, indent=2, sort_keys=True)
    except (IOError, OSError) as e:
        print(f"[!] Warning: Could not save run stats: {e}", file=sys.stderr)


class TeeLogger:
    """
    A file-like object that writes to both a log file and another stream
    (like the original stdout), and flushes immediately.

    Consecutive identical lines are collapsed into one line with a (xN)
    suffix. With verbose=False, per-pass detail lines are dropped from both
    outputs.
    """

    _QUIET_SUPPRESS_PREFIXES: tuple[str, ...] = (
        "    -> Warping",
        "    -> Injecting",
        "    -> Replacing",
        "  [~] Passes:",
    )

    def __init__(self, file_path: str | Path, original_stream: TextIO, verbose: bool = True):
        self.original_stream = original_stream
        self.log_file = open(file_path, "w", encoding="utf-8")
        self.verbose = verbose
        self._last_line: str | None = None
        self._repeat_count = 0
        # print() sends the trailing newline as a separate write.
        self._swallow_newline = False

    def _is_suppressed(self, message: str) -> bool:
        if self.verbose:
            return False
        return message.startswith(self._QUIET_SUPPRESS_PREFIXES)

    def _emit(self, text: str) -> None:
        self.original_stream.write(text)
        self.log_file.write(text)

    def _flush_repeat(self) -> None:
        if self._last_line is None:
            return
        line = self._last_line
        if self._repeat_count > 1:
            line = f"{line} (x{self._repeat_count})"
        self._emit(line + "\n")
        self._last_line = None
        self._repeat_count = 0

    def write(self, message: str) -> None:
        """Write a message to both outputs, collapsing repeated lines."""
        if not message:
            return
        if message == "\n":
            if self._swallow_newline:
                self._swallow_newline = False
                return
            self._flush_repeat()
            self._emit(message)
            self._do_flush()
            return

        self._swallow_newline = False
        if self._is_suppressed(message):
            self._swallow_newline = not message.endswith("\n")
            return

        body = message.rstrip("\n")
        if "\n" in body or not body.strip() or message.endswith("\n\n"):
            # Multi-line blocks (headers, summaries) are not collapsed.
            self._flush_repeat()
            self._emit(message)
            self._do_flush()
            return
        self._buffer_line(body)
        self._swallow_newline = not message.endswith("\n")

    def _buffer_line(self, line: str) -> None:
        if line == self._last_line:
            self._repeat_count += 1
            return
        self._flush_repeat()
        self._last_line = line
        self._repeat_count = 1

    def _do_flush(self) -> None:
        self.original_stream.flush()
        self.log_file.flush()

    def flush(self) -> None:
        self._flush_repeat()
        self._do_flush()

    def close(self) -> None:
        """Flush any buffered repeat and close the log file."""
        self.flush()
        self.log_file.close()

    @property
    def encoding(self) -> str:
        return getattr(self.original_stream, "encoding", "utf-8")

    def isatty(self) -> bool:
        return hasattr(self.original_stream, "isatty") and self.original_stream.isatty()
