"""
Input Rules — Field-level checks applied at the boundary.

Each ``require_*`` function returns the normalized value or raises
``CoreError`` with a stable kind. They guard values that arrive from
outside the core: usernames, proposal durations, vote weights, addresses,
IPFS CIDs and names typed into the wizard.
"""

from __future__ import annotations

import re
from typing import Sequence

from poa_deployer.schema.errors import CoreError, ErrorKind
from poa_deployer.schema.state import MAX_HAT_SUPPLY

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 32
DURATION_MIN_MINUTES = 1
DURATION_MAX_MINUTES = 43200  # 30 days
ORG_NAME_MAX_LENGTH = 100
ROLE_NAME_MAX_LENGTH = 32
CIDV0_LENGTH = 46

_USERNAME = re.compile(r"^[A-Za-z0-9_]+$")
_ORG_NAME = re.compile(r"^[A-Za-z0-9\s\-_]+$")
_ADDRESS = re.compile(r"^0x[a-fA-F0-9]{40}$")
_BASE58 = re.compile(r"^[1-9A-HJ-NP-Za-km-z]+$")


def require_non_blank(value: str | None, field_name: str) -> str:
    if value is None or not value.strip():
        raise CoreError(ErrorKind.BLANK_FIELD, f"{field_name} is required")
    return value.strip()


def require_in_range(value: int, minimum: int, maximum: int, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise CoreError(ErrorKind.OUT_OF_RANGE, f"{field_name} must be an integer")
    if not minimum <= value <= maximum:
        raise CoreError(
            ErrorKind.OUT_OF_RANGE,
            f"{field_name} must be between {minimum} and {maximum} (got {value})",
        )
    return value


def require_valid_username(username: str | None) -> str:
    name = require_non_blank(username, "Username")
    if len(name) < USERNAME_MIN_LENGTH:
        raise CoreError(
            ErrorKind.USERNAME_TOO_SHORT,
            f"Username must be at least {USERNAME_MIN_LENGTH} characters",
        )
    if len(name) > USERNAME_MAX_LENGTH:
        raise CoreError(
            ErrorKind.USERNAME_TOO_LONG,
            f"Username must be at most {USERNAME_MAX_LENGTH} characters",
        )
    if not _USERNAME.match(name):
        raise CoreError(
            ErrorKind.USERNAME_INVALID_CHARS,
            "Username can only contain letters, numbers, and underscores",
        )
    return name


def require_valid_duration(minutes: int) -> int:
    """Proposal duration in minutes, 1 to 43200 (30 days)."""
    try:
        return require_in_range(minutes, DURATION_MIN_MINUTES, DURATION_MAX_MINUTES, "Duration")
    except CoreError as exc:
        raise CoreError(ErrorKind.DURATION_OUT_OF_RANGE, exc.message) from exc


def require_valid_vote_weights(weights: Sequence[int]) -> list[int]:
    """
    Check a multi-option vote's weights.

    Raises:
        CoreError: If any weight is outside 0..100 or the total is not 100.
    """
    if not weights:
        raise CoreError(ErrorKind.BLANK_FIELD, "At least one vote weight is required")
    for position, weight in enumerate(weights):
        require_in_range(weight, 0, 100, f"Vote weight {position}")
    total = sum(weights)
    if total != 100:
        raise CoreError(
            ErrorKind.VOTE_WEIGHTS_NOT_100,
            f"Vote weights do not sum to 100 (got {total})",
            details={"total": total},
        )
    return list(weights)


def require_address(address: str | None, field_name: str = "Address") -> str:
    value = require_non_blank(address, field_name)
    if not _ADDRESS.match(value):
        raise CoreError(
            ErrorKind.MALFORMED_ADDRESS,
            f"{field_name} must be a 0x-prefixed 20-byte hex address",
        )
    return value


def require_ipfs_cid(cid: str | None) -> str:
    """A CIDv0: 'Qm' followed by base58, 46 characters in total."""
    value = require_non_blank(cid, "IPFS CID")
    if len(value) != CIDV0_LENGTH or not value.startswith("Qm") or not _BASE58.match(value):
        raise CoreError(ErrorKind.MALFORMED_CID, f"Invalid IPFS CIDv0: {value}")
    return value


def require_org_name(name: str | None) -> str:
    value = require_non_blank(name, "Organization name")
    if len(value) > ORG_NAME_MAX_LENGTH:
        raise CoreError(
            ErrorKind.NAME_TOO_LONG,
            f"Organization name must be at most {ORG_NAME_MAX_LENGTH} characters",
        )
    if not _ORG_NAME.match(value):
        raise CoreError(
            ErrorKind.NAME_INVALID_CHARS,
            "Organization name can only contain letters, numbers, spaces, hyphens, and underscores",
        )
    return value


def require_role_name(name: str | None) -> str:
    value = require_non_blank(name, "Role name")
    if len(value) > ROLE_NAME_MAX_LENGTH:
        raise CoreError(
            ErrorKind.NAME_TOO_LONG,
            f"Role name must be at most {ROLE_NAME_MAX_LENGTH} characters",
        )
    return value


def require_hat_supply(max_supply: int) -> int:
    return require_in_range(max_supply, 1, MAX_HAT_SUPPLY, "Max supply")
