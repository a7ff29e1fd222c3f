"""
Bitmap Codec — Role-set ⇄ role-index-list conversions.

Each permission set travels to the deployment call as a 32-bit integer in
which bit i is set when role i belongs to the set. In memory the same set is
an ascending list of role indices. Every function here is total: indices
outside [0, 32) are dropped silently and every returned list is sorted.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from poa_deployer.schema.state import MAX_ROLES, PERMISSION_KEYS, PermissionKey

BITMAP_WIDTH = MAX_ROLES
BITMAP_SUFFIX = "Bitmap"


def _in_range(index: int) -> bool:
    return 0 <= index < BITMAP_WIDTH


def to_bitmap(indices: Iterable[int]) -> int:
    bitmap = 0
    for index in indices:
        if _in_range(index):
            bitmap |= 1 << index
    return bitmap


def to_indices(bitmap: int) -> list[int]:
    return [i for i in range(BITMAP_WIDTH) if bitmap >> i & 1]


def has(bitmap: int, index: int) -> bool:
    return _in_range(index) and bool(bitmap >> index & 1)


def add(bitmap: int, index: int) -> int:
    if not _in_range(index):
        return bitmap
    return bitmap | 1 << index


def remove(bitmap: int, index: int) -> int:
    if not _in_range(index):
        return bitmap
    return bitmap & ~(1 << index)


def toggle(bitmap: int, index: int) -> int:
    if not _in_range(index):
        return bitmap
    return bitmap ^ 1 << index


def popcount(bitmap: int) -> int:
    return bin(bitmap & full_mask(BITMAP_WIDTH)).count("1")


def full_mask(role_count: int) -> int:
    """Bitmap with the lowest ``role_count`` bits set, clamped to the width."""
    role_count = max(0, min(role_count, BITMAP_WIDTH))
    return (1 << role_count) - 1


# ════════════════════════════════════════════════════════════════
# Permission-map helpers
# ════════════════════════════════════════════════════════════════


def permissions_to_bitmaps(
    permissions: Mapping[PermissionKey, Iterable[int]],
) -> dict[str, int]:
    """
    Convert the nine permission sets to their wire record.

    Keys follow the deployment call's field names, e.g. ``quickJoinBitmap``.
    Missing sets encode as 0.
    """
    return {
        f"{key.value}{BITMAP_SUFFIX}": to_bitmap(permissions.get(key, ()))
        for key in PERMISSION_KEYS
    }


def bitmaps_to_permissions(bitmaps: Mapping[str, int]) -> dict[PermissionKey, list[int]]:
    return {
        key: to_indices(bitmaps.get(f"{key.value}{BITMAP_SUFFIX}", 0))
        for key in PERMISSION_KEYS
    }


def format_bitmap_binary(bitmap: int, role_count: int) -> str:
    """Binary digits with role 0 on the right, e.g. ``0b101`` for roles 0 and 2."""
    width = max(1, min(role_count, BITMAP_WIDTH))
    return "0b" + format(bitmap & full_mask(width), f"0{width}b")


def format_bitmap_hex(bitmap: int) -> str:
    return "0x" + format(bitmap & full_mask(BITMAP_WIDTH), "08x")
