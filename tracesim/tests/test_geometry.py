"""Geometry validation, address widths and address decoding."""

import random

import pytest

from tracesim.core.errors import (
    AddressWidthExceeded,
    GeometryError,
    InvalidBlockSize,
    InvalidSetCount,
    NotPowerOfTwo,
    ZeroSets,
)
from tracesim.core.geometry import (
    DecodedAddress,
    compute_widths,
    decode,
    encode,
    is_power_of_two,
    log_two,
    validate_geometry,
)


def test_is_power_of_two():
    assert [n for n in range(0, 70) if is_power_of_two(n)] == [1, 2, 4, 8, 16, 32, 64]
    assert is_power_of_two(1 << 40)
    assert not is_power_of_two(-4)


def test_log_two():
    for k in range(0, 40):
        assert log_two(1 << k) == k
    for n in (0, 3, 6, 12, 1000):
        with pytest.raises(NotPowerOfTwo):
            log_two(n)


def test_validate_accepts_iff_power_of_two_rules_hold():
    # Input: every (size, associativity, block_size) in a small grid.
    # Expected: validation succeeds exactly when block_size is a power of
    # two and size // (associativity * block_size) is a non-zero power of two.
    for size in range(1, 130):
        for assoc in range(1, 9):
            for block in range(1, 20):
                sets = size // (assoc * block)
                ok = is_power_of_two(block) and sets >= 1 and is_power_of_two(sets)
                if ok:
                    g = validate_geometry(size, assoc, block)
                    assert g.number_of_sets == sets
                else:
                    with pytest.raises(GeometryError):
                        validate_geometry(size, assoc, block)


def test_validate_error_kinds():
    with pytest.raises(InvalidBlockSize) as ei:
        validate_geometry(1024, 1, 24)
    assert ei.value.block_size == 24
    assert "24" in str(ei.value)

    # block size 0 is "not a power of two", not a zero-set cache
    with pytest.raises(InvalidBlockSize):
        validate_geometry(1024, 1, 0)

    with pytest.raises(ZeroSets):
        validate_geometry(16, 2, 16)
    with pytest.raises(ZeroSets):
        validate_geometry(0, 1, 4)

    with pytest.raises(InvalidSetCount) as ei:
        validate_geometry(96, 1, 16)
    assert ei.value.number_of_sets == 6

    with pytest.raises(GeometryError):
        validate_geometry(64, 0, 16)


def test_unconventional_geometries_are_accepted():
    # more ways than sets, and a fully associative cache
    g = validate_geometry(256, 8, 16)
    assert g.number_of_sets == 2
    g = validate_geometry(256, 16, 16)
    assert g.number_of_sets == 1
    # truncating division: 100 // (1 * 32) == 3 -> not a power of two
    with pytest.raises(InvalidSetCount):
        validate_geometry(100, 1, 32)
    # 70 // 32 == 2 -> accepted
    assert validate_geometry(70, 1, 32).number_of_sets == 2


def test_widths_sum_to_address_width():
    for size, assoc, block in [(1024, 1, 32), (4, 1, 1), (32768, 8, 64), (256, 16, 16), (1 << 20, 4, 128)]:
        for aw in (32, 48, 64):
            w = compute_widths(validate_geometry(size, assoc, block), aw)
            assert w.offset_width == log_two(block)
            assert w.index_width == log_two(size // (assoc * block))
            assert w.offset_width + w.index_width + w.tag_width == aw


def test_widths_for_reference_geometry():
    w = compute_widths(validate_geometry(1024, 1, 32))
    assert (w.address_width, w.offset_width, w.index_width, w.tag_width) == (32, 5, 5, 22)


def test_geometry_larger_than_address_space():
    g = validate_geometry(1 << 33, 1, 1)
    with pytest.raises(AddressWidthExceeded):
        compute_widths(g, 32)
    # fits in a 64-bit machine
    assert compute_widths(g, 64).tag_width == 31


@pytest.mark.parametrize("size,assoc,block,addr,offset,index,tag", [
    (64, 2, 8, 16, 0, 2, 0),
    (32, 2, 8, 36, 4, 0, 2),
    (128, 4, 16, 0x1F4, 4, 1, 15),
    (256, 2, 32, 0xFFFFFFFF, 31, 3, 33554431),
    (64, 2, 16, 16, 0, 1, 0),
])
def test_decode_known_addresses(size, assoc, block, addr, offset, index, tag):
    w = compute_widths(validate_geometry(size, assoc, block))
    d = decode(addr, w)
    assert d == DecodedAddress(tag, index, offset), f"decode({addr:#x}) gave {d}"


def test_decode_round_trip():
    rng = random.Random(1234)
    for size, assoc, block in [(1024, 1, 32), (4, 1, 1), (32768, 8, 64), (256, 16, 16)]:
        w = compute_widths(validate_geometry(size, assoc, block))
        mask = (1 << w.address_width) - 1
        addrs = [0, 1, mask, mask + 1, 0xDEADBEEF, 1 << 40] + [rng.getrandbits(36) for _ in range(200)]
        for a in addrs:
            assert encode(decode(a, w), w) == a & mask, f"round trip failed for {a:#x}"


def test_decode_direct_mapped_four_sets():
    # block_size 1, 4 sets: addresses 0..3 land in sets 0..3 with tag 0
    w = compute_widths(validate_geometry(4, 1, 1))
    assert [decode(a, w).index for a in range(4)] == [0, 1, 2, 3]
    assert {decode(a, w).tag for a in range(4)} == {0}
    assert decode(4, w) == DecodedAddress(1, 0, 0)
