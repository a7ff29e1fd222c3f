"""
Tests for the Bitmap Codec — role-set ⇄ index-list conversions.

Validates:
- Round-trip of distinct indices through a 32-bit bitmap
- Out-of-range indices are dropped, never raised
- Single-bit operations and popcount
- Permission-map ⇄ wire-record helpers and formatting
"""

from __future__ import annotations

import random

from poa_deployer.governance.bitmap import (
    add,
    bitmaps_to_permissions,
    format_bitmap_binary,
    format_bitmap_hex,
    full_mask,
    has,
    permissions_to_bitmaps,
    popcount,
    remove,
    to_bitmap,
    to_indices,
    toggle,
)
from poa_deployer.schema.state import PERMISSION_KEYS, PermissionKey


class TestRoundTrip:
    """Index lists survive encoding as sorted lists."""

    def test_round_trip_sorts_indices(self):
        assert to_indices(to_bitmap([5, 0, 31, 2])) == [0, 2, 5, 31]

    def test_round_trip_random_subsets(self):
        rng = random.Random(1234)
        for _ in range(200):
            indices = rng.sample(range(32), rng.randint(0, 32))
            bitmap = to_bitmap(indices)
            assert to_indices(bitmap) == sorted(indices)
            assert popcount(bitmap) == len(indices)

    def test_empty(self):
        assert to_bitmap([]) == 0
        assert to_indices(0) == []
        assert popcount(0) == 0

    def test_known_values(self):
        assert to_bitmap([0]) == 1
        assert to_bitmap([0, 2]) == 0b101
        assert to_bitmap(range(32)) == 0xFFFFFFFF


class TestOutOfRange:
    """Indices outside [0, 32) are silently ignored."""

    def test_to_bitmap_drops_out_of_range(self):
        assert to_bitmap([-1, 0, 32, 100]) == 1

    def test_single_bit_ops_ignore_out_of_range(self):
        assert add(0, 40) == 0
        assert remove(1, -3) == 1
        assert toggle(1, 32) == 1
        assert has(0xFFFFFFFF, 32) is False

    def test_popcount_ignores_bits_above_width(self):
        assert popcount(1 << 40 | 1) == 1


class TestSingleBitOps:
    def test_add_remove_has(self):
        bitmap = add(0, 3)
        assert has(bitmap, 3)
        assert not has(bitmap, 2)
        assert remove(bitmap, 3) == 0

    def test_toggle_twice_is_identity(self):
        for index in range(32):
            assert toggle(toggle(0b1011, index), index) == 0b1011

    def test_full_mask_clamps(self):
        assert full_mask(3) == 0b111
        assert full_mask(0) == 0
        assert full_mask(64) == 0xFFFFFFFF


class TestPermissionRecords:
    """Nine permission sets ⇄ the deployment call's bitmap record."""

    def test_keys_use_bitmap_suffix(self):
        bitmaps = permissions_to_bitmaps({PermissionKey.QUICK_JOIN: [0, 2]})
        assert list(bitmaps) == [f"{key.value}Bitmap" for key in PERMISSION_KEYS]
        assert bitmaps["quickJoinBitmap"] == 0b101
        assert bitmaps["ddCreatorBitmap"] == 0

    def test_bitmaps_to_permissions(self):
        permissions = bitmaps_to_permissions({"ddVotingBitmap": 0b110})
        assert permissions[PermissionKey.DD_VOTING] == [1, 2]
        assert permissions[PermissionKey.QUICK_JOIN] == []

    def test_encoding_is_deterministic(self):
        permissions = {key: [3, 1, 1, 0] for key in PERMISSION_KEYS}
        assert permissions_to_bitmaps(permissions) == permissions_to_bitmaps(dict(permissions))


class TestFormatting:
    def test_binary_has_role_zero_on_the_right(self):
        assert format_bitmap_binary(0b101, 3) == "0b101"
        assert format_bitmap_binary(0b1, 4) == "0b0001"

    def test_hex_is_eight_digits(self):
        assert format_bitmap_hex(0b101) == "0x00000005"
