"""CacheSimulator coordinates cache accesses and statistics.
Feeds memory references into the core Cache and records the hit-rate history.
"""
from typing import Callable, Iterable, List, Optional

from .cache import Cache
from .constants import DEFAULT_SAMPLE_EVERY
from .trace import MemoryReference
from ..data.counters import PerfCounters


class CacheSimulator:
    def __init__(self, cache: Cache, sample_every: Optional[int] = DEFAULT_SAMPLE_EVERY):
        # sample_every=None records no hit-rate history
        if sample_every is not None and sample_every < 1:
            raise ValueError("sample_every must be >= 1")
        self.cache = cache
        self.sample_every = sample_every
        self.sequence: List[MemoryReference] = []
        self.index = 0
        self.hit_rate_history: List[float] = []

    @property
    def counters(self) -> PerfCounters:
        return self.cache.counters

    def load_sequence(self, references: Iterable[MemoryReference]):
        self.sequence = list(references)
        self.index = 0
        # step() walks the sequence by advancing self.index

    def has_next(self) -> bool:
        return self.index < len(self.sequence)

    def step(self) -> Optional[dict]:
        if not self.has_next():
            return None
        ref = self.sequence[self.index]
        self.index += 1
        return self._simulate(ref)

    def run_all(self, callback: Optional[Callable[[dict], None]] = None):
        while self.has_next():
            info = self.step()
            if callback:
                callback(info)

    def run(self, references: Iterable[MemoryReference],
            callback: Optional[Callable[[dict], None]] = None) -> PerfCounters:
        """Simulate a (possibly lazy) stream of references, e.g. a TraceReader."""
        for ref in references:
            info = self._simulate(ref)
            if callback:
                callback(info)
        return self.counters

    def _simulate(self, ref: MemoryReference) -> dict:
        res = self.cache.access(ref.address, ref.kind)
        counters = self.counters
        if self.sample_every and counters.references % self.sample_every == 0:
            self.hit_rate_history.append(counters.hit_ratio)

        return {
            'address': ref.address,
            'kind': ref.kind,
            'hit': res.hit,
            'set_index': res.set_index,
            'way': res.way,
            'tag': res.tag,
            'evicted': res.evicted,
            'stats': {
                'references': counters.references,
                'hits': counters.hits,
                'misses': counters.misses,
                'hit_rate': counters.hit_ratio,
            },
        }
