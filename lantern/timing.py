"""Per-phase timing of the decompilation pipeline."""

from __future__ import annotations

import sys
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TextIO, TypeVar

T = TypeVar("T")

PHASE_PARSE = "parse"
PHASE_LIFT = "lift"
PHASE_VARS = "vars"
PHASE_PATTERNS = "patterns"
PHASE_STRUCTURE = "structure"
PHASE_EXPRS = "exprs"
PHASE_EMIT = "emit"

_PHASE_ORDER = (
    PHASE_PARSE,
    PHASE_LIFT,
    PHASE_VARS,
    PHASE_PATTERNS,
    PHASE_STRUCTURE,
    PHASE_EXPRS,
    PHASE_EMIT,
)


def _format_duration(seconds: float) -> str:
    """Format a duration in seconds with two decimals in a fitting unit."""
    if seconds >= 1.0:
        return f"{seconds:.2f}s"
    if seconds >= 1e-3:
        return f"{seconds * 1e3:.2f}ms"
    if seconds >= 1e-6:
        return f"{seconds * 1e6:.2f}µs"
    return f"{seconds * 1e9:.2f}ns"


@dataclass
class FuncTimings:
    """Phase durations, in seconds, for one function."""

    func_name: str
    phases: list[tuple[str, float]] = field(default_factory=list)

    def record(self, phase: str, duration: float) -> None:
        """Append the duration of one phase."""
        self.phases.append((phase, duration))

    def total(self) -> float:
        """The sum of all recorded phases."""
        return sum(d for _, d in self.phases)


@dataclass
class FileTimings:
    """Timings for all functions of one file."""

    file_name: str
    parse_time: float = 0.0
    functions: list[FuncTimings] = field(default_factory=list)

    def total_lift(self) -> float:
        """Time spent lifting, over all functions."""
        return sum(d for f in self.functions for p, d in f.phases if p == PHASE_LIFT)

    def total_all_phases(self) -> float:
        """Parse time plus every phase of every function."""
        return self.parse_time + sum(f.total() for f in self.functions)


@dataclass
class PipelineReport:
    """Timings aggregated over all files."""

    files: list[FileTimings] = field(default_factory=list)

    def add(self, file_timings: FileTimings) -> None:
        """Add the timings of one file."""
        self.files.append(file_timings)

    def total_functions(self) -> int:
        """The number of timed functions."""
        return sum(len(f.functions) for f in self.files)

    def phase_totals(self) -> dict[str, float]:
        """Total time per phase; the parse phase is always present."""
        totals = {PHASE_PARSE: sum(f.parse_time for f in self.files)}
        for file_timings in self.files:
            for func in file_timings.functions:
                for phase, duration in func.phases:
                    totals[phase] = totals.get(phase, 0.0) + duration
        return totals

    def grand_total(self) -> float:
        """Total time over all files and phases."""
        return sum(f.total_all_phases() for f in self.files)

    def print_summary(self, stream: TextIO | None = None) -> None:
        """Write a summary table, to stderr by default."""
        out = sys.stderr if stream is None else stream
        totals = self.phase_totals()
        grand = self.grand_total()
        func_count = self.total_functions()

        print("\n--- Performance Summary ---", file=out)
        print(
            f"{len(self.files)} files, {func_count} functions in "
            f"{_format_duration(grand)}",
            file=out,
        )
        print(file=out)
        for phase in _PHASE_ORDER:
            if phase in totals:
                duration = totals[phase]
                pct = duration / grand * 100.0 if grand > 0 else 0.0
                print(
                    f"  {phase:<12} {_format_duration(duration):>10}  ({pct:.1f}%)",
                    file=out,
                )
        if func_count > 0:
            print(
                f"\n  avg/function: {_format_duration(grand / func_count)}", file=out
            )

    def print_slowest(self, n: int, stream: TextIO | None = None) -> None:
        """Write the *n* slowest functions with their phase breakdown."""
        out = sys.stderr if stream is None else stream
        ranked = sorted(
            ((f.file_name, func) for f in self.files for func in f.functions),
            key=lambda item: item[1].total(),
            reverse=True,
        )
        print(f"\n--- Slowest {n} Functions ---", file=out)
        for file_name, func in ranked[:n]:
            short_file = file_name.rsplit("/", 1)[-1]
            parts = ", ".join(f"{p}={_format_duration(d)}" for p, d in func.phases)
            print(
                f"  {_format_duration(func.total())}  {short_file}::{func.func_name}"
                f"  [{parts}]",
                file=out,
            )


def timed(fn: Callable[[], T]) -> tuple[T, float]:
    """Call *fn* and return its result with the elapsed seconds."""
    start = time.perf_counter()
    result = fn()
    return result, time.perf_counter() - start