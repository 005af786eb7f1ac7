"""Cache geometry, address widths and address decoding.

Behavior:
- a geometry is valid when block_size and number_of_sets are powers of two
  and number_of_sets >= 1, where
  number_of_sets = size // (associativity * block_size)
- offset_width = log2(block_size), index_width = log2(number_of_sets),
  tag_width = address_width - offset_width - index_width
- an address splits into
  offset = address & (2**offset_width - 1)
  index = (address >> offset_width) & (2**index_width - 1)
  tag = address >> (offset_width + index_width), truncated to tag_width bits
"""

from dataclasses import dataclass
from typing import NamedTuple

from tracesim.core.constants import ADDRESS_WIDTH
from tracesim.core.errors import (
    AddressWidthExceeded,
    GeometryError,
    InvalidBlockSize,
    InvalidSetCount,
    NotPowerOfTwo,
    ZeroSets,
)


def is_power_of_two(n: int) -> bool:
    """Return True if n has exactly one set bit (so 0 is not a power of two)."""
    return n > 0 and (n & (n - 1)) == 0


def log_two(n: int) -> int:
    """Exact base-2 logarithm of a power of two."""
    if not is_power_of_two(n):
        raise NotPowerOfTwo(n)
    return n.bit_length() - 1


@dataclass(frozen=True)
class CacheGeometry:
    size: int
    associativity: int
    block_size: int

    @property
    def number_of_sets(self) -> int:
        return self.size // (self.associativity * self.block_size)


@dataclass(frozen=True)
class AddressWidths:
    address_width: int
    offset_width: int
    index_width: int
    tag_width: int

    @property
    def offset_mask(self) -> int:
        return (1 << self.offset_width) - 1

    @property
    def index_mask(self) -> int:
        return (1 << self.index_width) - 1

    @property
    def tag_mask(self) -> int:
        return (1 << self.tag_width) - 1


class DecodedAddress(NamedTuple):
    tag: int
    index: int
    offset: int


def validate_geometry(size: int, associativity: int, block_size: int) -> CacheGeometry:
    """Check a (size, associativity, block_size) triple and build the geometry.

    No upper bound is placed on size or associativity; unconventional
    caches (for example more ways than sets) are accepted as long as the
    power-of-two rules hold.

    Raises InvalidBlockSize, ZeroSets or InvalidSetCount (all GeometryError).
    """
    if associativity < 1:
        raise GeometryError("associativity must be >= 1")
    if not is_power_of_two(block_size):
        raise InvalidBlockSize(block_size)

    # integer division truncates toward zero, like the hardware bit fields
    number_of_sets = size // (associativity * block_size)
    if number_of_sets == 0:
        raise ZeroSets(size, associativity, block_size)
    if not is_power_of_two(number_of_sets):
        raise InvalidSetCount(number_of_sets)

    return CacheGeometry(size=size, associativity=associativity, block_size=block_size)


def compute_widths(geometry: CacheGeometry, address_width: int = ADDRESS_WIDTH) -> AddressWidths:
    """Derive the offset/index/tag bit widths for a validated geometry."""
    offset_width = log_two(geometry.block_size)
    index_width = log_two(geometry.number_of_sets)
    if offset_width + index_width > address_width:
        raise AddressWidthExceeded(offset_width, index_width, address_width)

    tag_width = address_width - offset_width - index_width
    widths = AddressWidths(
        address_width=address_width,
        offset_width=offset_width,
        index_width=index_width,
        tag_width=tag_width,
    )
    assert widths.offset_width + widths.index_width + widths.tag_width == address_width
    return widths


def decode(address: int, widths: AddressWidths) -> DecodedAddress:
    """Split an address into (tag, index, offset). Has no side effects."""
    offset = address & widths.offset_mask
    index = (address >> widths.offset_width) & widths.index_mask
    tag = (address >> (widths.offset_width + widths.index_width)) & widths.tag_mask
    return DecodedAddress(tag, index, offset)


def encode(decoded: DecodedAddress, widths: AddressWidths) -> int:
    """Rebuild the (address_width-truncated) address from its fields."""
    shift = widths.offset_width + widths.index_width
    return (decoded.tag << shift) | (decoded.index << widths.offset_width) | decoded.offset


__all__ = [
    "AddressWidths",
    "CacheGeometry",
    "DecodedAddress",
    "compute_widths",
    "decode",
    "encode",
    "is_power_of_two",
    "log_two",
    "validate_geometry",
]
