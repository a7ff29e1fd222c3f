"""
Deployment Encoding — Bit-exact conversions for the deployment call.

- Organization id: Keccak-256 of the slugged, lowercased name
- IPFS CIDv0 ⇄ 32-byte SHA-256 digest (multihash prefix 0x1220 stripped)
- Token amounts → wei, with the 96-bit cap where the target field is uint96
- Strings → raw UTF-8 bytes

Keccak-256 is the pre-standard SHA-3 variant used on Ethereum; it differs
from ``hashlib.sha3_256``, so it comes from pycryptodome.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, localcontext

import base58
from Crypto.Hash import keccak

from poa_deployer.schema.errors import CoreError, ErrorKind
from poa_deployer.validation.inputs import require_ipfs_cid

ZERO_ADDRESS = "0x" + "0" * 40
ZERO_BYTES32 = bytes(32)
MAX_UINT256 = 2**256 - 1
MAX_UINT96 = 2**96 - 1
ROOT_ADMIN_SENTINEL = MAX_UINT256
PARTICIPATION_TOKEN_DECIMALS = 18
SHA256_MULTIHASH_PREFIX = b"\x12\x20"

_WHITESPACE_RUN = re.compile(r"\s+")


def keccak256(data: bytes) -> bytes:
    digest = keccak.new(digest_bits=256)
    digest.update(data)
    return digest.digest()


def org_slug(name: str) -> str:
    """'My Dao  Name' → 'my-dao-name'."""
    return _WHITESPACE_RUN.sub("-", name.lower())


def org_id(name: str) -> bytes:
    return keccak256(org_slug(name).encode("utf-8"))


def encode_text(value: str) -> bytes:
    return value.encode("utf-8")


def cid_to_bytes32(cid: str | None) -> bytes:
    """
    Strip a CIDv0 down to its 32-byte SHA-256 digest.

    Returns:
        The digest, or 32 zero bytes when no CID is given.

    Raises:
        CoreError: If the CID is not a base58 SHA-256 multihash.
    """
    if not cid:
        return ZERO_BYTES32
    cid = require_ipfs_cid(cid)
    try:
        raw = base58.b58decode(cid)
    except ValueError as exc:
        raise CoreError(ErrorKind.MALFORMED_CID, f"Invalid IPFS CIDv0: {cid}") from exc
    if len(raw) != 34 or raw[:2] != SHA256_MULTIHASH_PREFIX:
        raise CoreError(ErrorKind.MALFORMED_CID, f"IPFS CID is not a SHA-256 multihash: {cid}")
    return raw[2:]


def bytes32_to_cid(digest: bytes) -> str:
    if digest == ZERO_BYTES32:
        return ""
    if len(digest) != 32:
        raise CoreError(ErrorKind.MALFORMED_CID, f"Expected 32 bytes, got {len(digest)}")
    return base58.b58encode(SHA256_MULTIHASH_PREFIX + digest).decode("ascii")


def to_wei(
    amount: Decimal | int | str,
    decimals: int = PARTICIPATION_TOKEN_DECIMALS,
    max_value: int | None = MAX_UINT96,
) -> int:
    """
    Convert a human token amount to its smallest unit.

    Args:
        amount: Amount in whole tokens, e.g. ``"1.5"``.
        decimals: Token decimals; 18 for the participation token.
        max_value: Field width cap; ``None`` disables the check.

    Raises:
        CoreError: On negative, non-numeric or over-precise amounts
            (OUT_OF_RANGE) and on values wider than the field
            (AMOUNT_OVERFLOW).
    """
    try:
        value = Decimal(str(amount))
    except InvalidOperation as exc:
        raise CoreError(ErrorKind.OUT_OF_RANGE, f"Invalid token amount: {amount!r}") from exc
    if not value.is_finite() or value < 0:
        raise CoreError(ErrorKind.OUT_OF_RANGE, f"Invalid token amount: {amount!r}")

    with localcontext() as ctx:
        ctx.prec = 100  # wide enough for uint256 without rounding
        scaled = value.scaleb(decimals)
        integral = scaled == scaled.to_integral_value()
    if not integral:
        raise CoreError(
            ErrorKind.OUT_OF_RANGE,
            f"Token amount {amount} has more than {decimals} decimal places",
        )
    wei = int(scaled)
    if max_value is not None and wei > max_value:
        raise CoreError(
            ErrorKind.AMOUNT_OVERFLOW,
            "Amount exceeds maximum allowed (uint96 overflow)"
            if max_value == MAX_UINT96
            else f"Amount exceeds maximum allowed ({max_value})",
            details={"wei": str(wei), "max": str(max_value)},
        )
    return wei
