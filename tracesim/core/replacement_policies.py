"""Least-recently-used replacement for one cache set.

Recency lives in the blocks themselves: each CacheBlock carries a
`recency` value where 0 means most recently used and larger values mean
staler. Values inside a set are pairwise distinct, so they form a total
order and the least recently used block is the one with the largest value.

API (methods, all taking the set as a list of blocks):
- lookup(cache_set, tag): way of the valid block holding `tag`, or None
- victim(cache_set): way to evict/fill next
- install(cache_set, tag, is_write): fill the victim way with `tag`
- touch(cache_set, tag) / touch_way(cache_set, way): mark as most recently used
- order(cache_set): ways from most to least recently used
"""

from typing import List, Optional


class LRUReplacement:
    """Stateless LRU engine; one instance can serve every set of a cache."""

    def lookup(self, cache_set: List, tag: int) -> Optional[int]:
        # at most one valid block matches: install() only runs on a miss
        for way, block in enumerate(cache_set):
            if block.valid and block.tag == tag:
                return way
        return None

    def victim(self, cache_set: List) -> int:
        # max recency, ties go to the lowest way
        best = 0
        for way in range(1, len(cache_set)):
            if cache_set[way].recency > cache_set[best].recency:
                best = way
        return best

    def install(self, cache_set: List, tag: int, is_write: bool) -> int:
        """Overwrite the LRU block with `tag`. Returns the way that was filled."""
        way = self.victim(cache_set)
        block = cache_set[way]
        block.valid = True
        block.dirty = is_write
        block.tag = tag
        return way

    def touch(self, cache_set: List, tag: int) -> int:
        way = self.lookup(cache_set, tag)
        if way is None:
            raise KeyError(f"tag {tag:#x} is not cached in this set")
        self.touch_way(cache_set, way)
        return way

    def touch_way(self, cache_set: List, way: int) -> None:
        touched = cache_set[way]
        if touched.recency == 0:
            # already the most recently used block
            return
        for block in cache_set:
            block.recency += 1
        touched.recency = 0

    def order(self, cache_set: List) -> List[int]:
        return sorted(range(len(cache_set)), key=lambda w: (cache_set[w].recency, w))


__all__ = ["LRUReplacement"]
