"""
Power Bundles — Semantic view over the nine permission sets.

The deployment call takes nine independent permission bitmaps. The wizard
offers three coarser choices per role instead:

- ADMIN: approve tokens, create tasks, manage education, create polls
- MEMBER: join quickly, hold tokens, access education, vote in polls
- CREATOR: create hybrid proposals

A role *has* a bundle when it sits in every constituent permission set.
Bundles are never stored; presence is derived on demand and every write goes
through to the underlying sets, so there is one source of truth.

References:
    Permission sets: sorted, deduplicated role-index lists
    Bundle toggle: all-or-nothing across the bundle's permissions
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Mapping, Sequence

from poa_deployer.schema.state import PERMISSION_KEYS, PermissionKey

logger = logging.getLogger(__name__)

Permissions = Mapping[PermissionKey, Sequence[int]]


class PowerBundle(str, enum.Enum):
    ADMIN = "admin"
    MEMBER = "member"
    CREATOR = "creator"


@dataclass(frozen=True)
class PowerBundleDefinition:
    """A named, fixed union of permission keys."""

    bundle: PowerBundle
    name: str
    description: str
    permissions: tuple[PermissionKey, ...]


POWER_BUNDLES: dict[PowerBundle, PowerBundleDefinition] = {
    PowerBundle.ADMIN: PowerBundleDefinition(
        bundle=PowerBundle.ADMIN,
        name="Admin Powers",
        description="Approve tokens, create tasks, manage education, create polls",
        permissions=(
            PermissionKey.TOKEN_APPROVER,
            PermissionKey.TASK_CREATOR,
            PermissionKey.EDUCATION_CREATOR,
            PermissionKey.DD_CREATOR,
        ),
    ),
    PowerBundle.MEMBER: PowerBundleDefinition(
        bundle=PowerBundle.MEMBER,
        name="Member Powers",
        description="Join quickly, hold tokens, access education, vote in polls",
        permissions=(
            PermissionKey.QUICK_JOIN,
            PermissionKey.TOKEN_MEMBER,
            PermissionKey.EDUCATION_MEMBER,
            PermissionKey.DD_VOTING,
        ),
    ),
    PowerBundle.CREATOR: PowerBundleDefinition(
        bundle=PowerBundle.CREATOR,
        name="Creator Powers",
        description="Create and propose new ideas",
        permissions=(PermissionKey.HYBRID_PROPOSAL_CREATOR,),
    ),
}


@dataclass
class RoleBundleSummary:
    role_index: int
    bundles: list[PowerBundle]


def _normalized(permissions: Permissions) -> dict[PermissionKey, list[int]]:
    return {key: sorted(set(permissions.get(key, ()))) for key in PERMISSION_KEYS}


class PowerBundleMapper:
    """
    Reversible mapping between bundles per role and the nine permission sets.

    All methods are pure: they take permission sets and return new ones.
    """

    def __init__(
        self, catalog: dict[PowerBundle, PowerBundleDefinition] | None = None
    ) -> None:
        self.catalog = catalog or dict(POWER_BUNDLES)

    def get_bundle(self, bundle: PowerBundle) -> PowerBundleDefinition | None:
        return self.catalog.get(bundle)

    def role_has_bundle(
        self, permissions: Permissions, role_index: int, bundle: PowerBundle
    ) -> bool:
        definition = self.catalog.get(bundle)
        if definition is None:
            return False
        return all(role_index in permissions.get(key, ()) for key in definition.permissions)

    def set_bundle_for_role(
        self,
        permissions: Permissions,
        role_index: int,
        bundle: PowerBundle,
        enabled: bool,
    ) -> dict[PermissionKey, list[int]]:
        """Idempotently add or remove a role across every constituent permission."""
        updated = _normalized(permissions)
        definition = self.catalog.get(bundle)
        if definition is None:
            return updated
        for key in definition.permissions:
            members = set(updated[key])
            if enabled:
                members.add(role_index)
            else:
                members.discard(role_index)
            updated[key] = sorted(members)
        return updated

    def toggle_bundle_for_role(
        self, permissions: Permissions, role_index: int, bundle: PowerBundle
    ) -> dict[PermissionKey, list[int]]:
        """
        Remove the bundle if the role fully has it, otherwise grant all of it.

        A role holding only part of a bundle counts as not having it, so the
        toggle completes the bundle.
        """
        enabled = not self.role_has_bundle(permissions, role_index, bundle)
        return self.set_bundle_for_role(permissions, role_index, bundle, enabled)

    def permissions_to_bundles(
        self, permissions: Permissions, role_count: int
    ) -> dict[PowerBundle, list[int]]:
        """Role indices holding each bundle in full."""
        return {
            bundle: [
                index
                for index in range(role_count)
                if self.role_has_bundle(permissions, index, bundle)
            ]
            for bundle in self.catalog
        }

    def bundles_to_permissions(
        self,
        bundles: Mapping[PowerBundle, Sequence[int]],
        existing: Permissions | None = None,
    ) -> dict[PermissionKey, list[int]]:
        """Union bundle grants into existing permission sets (additive only)."""
        updated = _normalized(existing or {})
        for bundle, role_indices in bundles.items():
            definition = self.catalog.get(bundle)
            if definition is None:
                logger.warning("Ignoring unknown power bundle: %s", bundle)
                continue
            for key in definition.permissions:
                updated[key] = sorted(set(updated[key]) | set(role_indices))
        return updated

    def role_bundle_summary(
        self, permissions: Permissions, role_count: int
    ) -> list[RoleBundleSummary]:
        return [
            RoleBundleSummary(
                role_index=index,
                bundles=[
                    bundle
                    for bundle in self.catalog
                    if self.role_has_bundle(permissions, index, bundle)
                ],
            )
            for index in range(role_count)
        ]

    def describe_powers(self, bundles: Sequence[PowerBundle]) -> str:
        """Human summary of a role's bundles, e.g. 'Admin Powers, Member Powers'."""
        names = [self.catalog[b].name for b in bundles if b in self.catalog]
        return ", ".join(names) if names else "No special powers"


# Global mapper instance over the fixed catalog
bundle_mapper = PowerBundleMapper()
