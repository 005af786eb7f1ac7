"""Core cache implementation

This file provides the set-associative cache model driven by the simulator.
Behavior:
- Cache is composed of number_of_sets sets; each set has `associativity` ways.
- An address is split into tag / index / offset bit fields (see geometry.py);
  the index selects the set, the tag identifies the block inside it.
- Replacement is least-recently-used, tracked by per-block recency values.
- The cache is write-back, write-allocate: a write miss fills a block and
  marks it dirty. Only the dirty flag is tracked, no data or memory traffic.
- access() returns an AccessResult(hit, set_index, way, tag, evicted).
"""

import logging
from dataclasses import dataclass, replace
from typing import List, NamedTuple, Optional

from tracesim.core.constants import ADDRESS_WIDTH
from tracesim.core.geometry import (
    AddressWidths,
    CacheGeometry,
    DecodedAddress,
    compute_widths,
    decode,
    encode,
    validate_geometry,
)
from tracesim.core.replacement_policies import LRUReplacement
from tracesim.core.trace import MemoryReference, ReferenceKind
from tracesim.data.counters import PerfCounters

LOGGER = logging.getLogger(__name__)


@dataclass
class CacheBlock:
    """container for a cache block (way).

    Fields:
    - valid: whether the block currently holds a cached address
    - dirty: whether the block was written since it was filled
    - tag: the tag stored in the block
    - recency: 0 for the most recently used block of its set, larger is staler
    """

    valid: bool = False
    dirty: bool = False
    tag: int = 0
    recency: int = 0


class AccessResult(NamedTuple):
    hit: bool
    set_index: int
    way: int
    tag: int
    # copy of the valid block overwritten by a miss, if any
    evicted: Optional[CacheBlock] = None


class Cache:
    """Set-associative cache model.

    Build one with create_cache(); the constructor expects an already
    validated geometry.
    """

    def __init__(self, geometry: CacheGeometry, address_width: int = ADDRESS_WIDTH):
        self.geometry = geometry
        self.widths: AddressWidths = compute_widths(geometry, address_width)
        self.replacement = LRUReplacement()
        self.counters = PerfCounters()

        # sets matrix: number_of_sets x associativity. Initial recency runs
        # from associativity-1 down to 0 so a cold set fills way 0 first.
        assoc = geometry.associativity
        self.sets: List[List[CacheBlock]] = [
            [CacheBlock(recency=assoc - 1 - way) for way in range(assoc)]
            for _ in range(geometry.number_of_sets)
        ]

    @property
    def associativity(self) -> int:
        return self.geometry.associativity

    @property
    def number_of_sets(self) -> int:
        return self.geometry.number_of_sets

    @property
    def block_size(self) -> int:
        return self.geometry.block_size

    def block(self, index: int, way: int) -> CacheBlock:
        """Bounds-checked access to one block."""
        if not 0 <= index < self.number_of_sets:
            raise IndexError(f"set index {index} out of range [0, {self.number_of_sets - 1}]")
        if not 0 <= way < self.associativity:
            raise IndexError(f"way {way} out of range [0, {self.associativity - 1}]")
        return self.sets[index][way]

    def decode(self, address: int) -> DecodedAddress:
        return decode(address, self.widths)

    def access(self, address: int, kind: ReferenceKind) -> AccessResult:
        """Simulate one memory reference and update the counters."""
        tag, index, _ = self.decode(address)
        cache_set = self.sets[index]
        is_write = kind is ReferenceKind.DATA_WRITE

        way = self.replacement.lookup(cache_set, tag)
        evicted = None
        if way is None:
            hit = False
            victim = cache_set[self.replacement.victim(cache_set)]
            if victim.valid:
                evicted = replace(victim)
            way = self.replacement.install(cache_set, tag, is_write)
            self.counters.record_miss(kind)
            LOGGER.debug("Miss: %x", address)
            if evicted is not None:
                LOGGER.debug("  evicted block %#x from set %d way %d%s",
                             encode(DecodedAddress(evicted.tag, index, 0), self.widths),
                             index, way, " (dirty)" if evicted.dirty else "")
        else:
            hit = True
            if is_write:
                cache_set[way].dirty = True

        self.replacement.touch_way(cache_set, way)
        self.counters.record_reference(kind)
        return AccessResult(hit, index, way, tag, evicted)

    def __repr__(self):
        g = self.geometry
        return (f"Cache(size={g.size}, associativity={g.associativity}, "
                f"block_size={g.block_size}, sets={g.number_of_sets})")


def create_cache(size: int, associativity: int, block_size: int,
                 address_width: int = ADDRESS_WIDTH) -> Cache:
    """Validate the parameters and build an empty cache.

    Raises a GeometryError subclass if they do not describe a valid cache;
    no cache is built in that case.
    """
    geometry = validate_geometry(size, associativity, block_size)
    cache = Cache(geometry, address_width)
    w = cache.widths
    LOGGER.info("created %r: tag %d bits, index %d bits, offset %d bits",
                cache, w.tag_width, w.index_width, w.offset_width)
    return cache


def process_reference(cache: Cache, reference: MemoryReference) -> None:
    cache.access(reference.address, reference.kind)


def read_counters(cache: Cache) -> PerfCounters:
    return cache.counters.snapshot()


__all__ = ["AccessResult", "Cache", "CacheBlock", "create_cache", "process_reference", "read_counters"]
