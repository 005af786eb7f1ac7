"""Per-category reference and miss counters.

Each reference category (instruction fetch, data read, data write) keeps a
reference count and a miss count. All six counters start at zero and only
ever go up for the lifetime of a cache.
"""

from dataclasses import dataclass, field
from typing import Dict

from tracesim.core.trace import ReferenceKind


@dataclass
class KindCounter:
    references: int = 0
    misses: int = 0

    @property
    def hits(self) -> int:
        return self.references - self.misses


def _empty_counts() -> Dict[ReferenceKind, KindCounter]:
    return {kind: KindCounter() for kind in ReferenceKind}


@dataclass
class PerfCounters:
    counts: Dict[ReferenceKind, KindCounter] = field(default_factory=_empty_counts)

    def record_miss(self, kind: ReferenceKind) -> None:
        self.counts[kind].misses += 1

    def record_reference(self, kind: ReferenceKind) -> None:
        self.counts[kind].references += 1

    def __getitem__(self, kind: ReferenceKind) -> KindCounter:
        return self.counts[kind]

    @property
    def references(self) -> int:
        return sum(c.references for c in self.counts.values())

    @property
    def misses(self) -> int:
        return sum(c.misses for c in self.counts.values())

    @property
    def hits(self) -> int:
        return self.references - self.misses

    @property
    def hit_ratio(self) -> float:
        refs = self.references
        return (self.hits / refs) if refs else 0.0

    @property
    def miss_ratio(self) -> float:
        refs = self.references
        return (self.misses / refs) if refs else 0.0

    def snapshot(self) -> "PerfCounters":
        """Independent copy, safe to keep while the cache keeps counting."""
        return PerfCounters({k: KindCounter(c.references, c.misses) for k, c in self.counts.items()})

    def as_dict(self) -> Dict[str, float]:
        d: Dict[str, float] = {}
        for kind, c in self.counts.items():
            name = kind.name.lower()
            d[f"{name}_references"] = c.references
            d[f"{name}_misses"] = c.misses
        d["references"] = self.references
        d["hits"] = self.hits
        d["misses"] = self.misses
        d["hit_ratio"] = self.hit_ratio
        d["miss_ratio"] = self.miss_ratio
        return d
