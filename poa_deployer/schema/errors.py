"""
Core Errors — Error kinds, the raised error type, and validation reports.

Every fallible operation in the configuration core reports failures with a
stable machine-readable kind and a human message. Input checks and the
deployment mapper raise ``CoreError``; the validator and the reducer never
raise and instead accumulate ``ValidationIssue`` records.

Kinds are grouped as:
- Input validation: blank fields, ranges, addresses, CIDs, usernames
- State invariants: hierarchy shape, names, vouching, voting slices
- Capacity: wei amounts wider than the target field
- Dependency: collaborators the caller must supply
- Reducer refusals: edits that would break an invariant
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, computed_field


class ErrorKind(str, enum.Enum):
    """Stable error codes surfaced to callers."""

    # Input validation
    BLANK_FIELD = "blank_field"
    OUT_OF_RANGE = "out_of_range"
    MALFORMED_ADDRESS = "malformed_address"
    MALFORMED_CID = "malformed_cid"
    USERNAME_TOO_SHORT = "username_too_short"
    USERNAME_TOO_LONG = "username_too_long"
    USERNAME_INVALID_CHARS = "username_invalid_chars"
    NAME_TOO_LONG = "name_too_long"
    NAME_INVALID_CHARS = "name_invalid_chars"

    # State invariants
    ORG_NAME_MISSING = "org_name_missing"
    ORG_DESCRIPTION_MISSING = "org_description_missing"
    NO_ROLES = "no_roles"
    TOO_MANY_ROLES = "too_many_roles"
    ROLE_NAME_BLANK = "role_name_blank"
    DUPLICATE_ROLE_NAME = "duplicate_role_name"
    NO_ROOT_ROLE = "no_root_role"
    HIERARCHY_CYCLE = "hierarchy_cycle"
    VOUCHING_QUORUM = "vouching_quorum"
    VOUCHER_OUT_OF_RANGE = "voucher_out_of_range"
    ADMIN_OUT_OF_RANGE = "admin_out_of_range"
    SELF_ADMIN = "self_admin"
    NO_VOTING_CLASSES = "no_voting_classes"
    TOO_MANY_VOTING_CLASSES = "too_many_voting_classes"
    SLICES_NOT_100 = "slices_not_100"
    VOTE_WEIGHTS_NOT_100 = "vote_weights_not_100"
    DURATION_OUT_OF_RANGE = "duration_out_of_range"

    # Capacity
    AMOUNT_OVERFLOW = "amount_overflow"

    # Dependency missing
    REGISTRY_MISSING = "registry_missing"
    USERNAME_UNRESOLVED = "username_unresolved"

    # Reducer refusals
    LAST_ROLE = "last_role"
    LAST_VOTING_CLASS = "last_voting_class"
    ROLE_CAP = "role_cap"
    VOTING_CLASS_CAP = "voting_class_cap"
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    INVALID_PATCH = "invalid_patch"
    UNKNOWN_TEMPLATE = "unknown_template"
    UNKNOWN_VARIATION = "unknown_variation"


class CoreError(ValueError):
    """Raised by input checks and the deployment mapper."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "code": self.kind.value,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class ValidationIssue(BaseModel):
    """A single structural violation found in a state tree."""

    model_config = {"frozen": True}

    kind: ErrorKind
    message: str
    path: str = Field(
        default="",
        description="Dotted location in the state tree, e.g. 'roles.2.name'",
    )


class ValidationReport(BaseModel):
    """Accumulated result of validating a whole state."""

    model_config = {"frozen": True}

    errors: list[ValidationIssue] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def ok(self) -> bool:
        return not self.errors

    def kinds(self) -> list[ErrorKind]:
        return [issue.kind for issue in self.errors]

    def by_path(self) -> dict[str, str]:
        """Collapse issues to a path → message map, first issue per path wins."""
        collapsed: dict[str, str] = {}
        for issue in self.errors:
            collapsed.setdefault(issue.path or issue.kind.value, issue.message)
        return collapsed
