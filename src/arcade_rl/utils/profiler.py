from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)


@dataclass
class _Section:
    total: float = 0.0
    calls: int = 0

    def add(self, dt: float):
        self.total += dt
        self.calls += 1

    @property
    def avg(self) -> float:
        return self.total / self.calls if self.calls else 0.0


@dataclass
class Profiler:
    """Cumulative wall-clock timings per named section of the episode loop."""
    sections: Dict[str, _Section] = field(default_factory=dict)

    def record(self, name: str, dt: float):
        if name not in self.sections:
            self.sections[name] = _Section()
        self.sections[name].add(dt)

    def report(self) -> Dict[str, Any]:
        grand_total = sum(s.total for s in self.sections.values()) or 1.0
        return {
            name: {
                "total": round(sec.total, 6),
                "calls": sec.calls,
                "avg": round(sec.avg, 6),
                "pct": round(100.0 * sec.total / grand_total, 2),
            } for name, sec in sorted(self.sections.items())
        }

    def log_report(self) -> None:
        for name, sec in self.report().items():
            logger.info("%-14s calls=%-7d total=%.4fs avg=%.6fs (%.1f%%)",
                        name, sec["calls"], sec["total"], sec["avg"], sec["pct"])


class SectionTimer:
    """Context manager to time a code block and record to profiler."""
    def __init__(self, profiler: Optional[Profiler], name: str):
        self.profiler = profiler
        self.name = name
        self.t0 = 0.0

    def __enter__(self):
        if self.profiler:
            self.t0 = time.perf_counter()

    def __exit__(self, exc_type, exc, tb):
        if self.profiler:
            self.profiler.record(self.name, time.perf_counter() - self.t0)


__all__ = ["Profiler", "SectionTimer"]
