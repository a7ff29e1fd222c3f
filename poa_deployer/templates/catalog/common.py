"""Shared builders for the template catalog."""

from __future__ import annotations

from poa_deployer.governance.philosophy import slider_to_voting
from poa_deployer.schema.state import (
    Distribution,
    HatConfig,
    HierarchyLink,
    PermissionKey,
    Role,
    VotingConfig,
    VotingMode,
    Vouching,
)
from poa_deployer.templates.models import VariationSettings

# Member role at index 0, leader role at index 1 unless a template says otherwise
MEMBER_AND_LEADER_PERMISSIONS: dict[PermissionKey, list[int]] = {
    PermissionKey.QUICK_JOIN: [0],
    PermissionKey.TOKEN_MEMBER: [0, 1],
    PermissionKey.TOKEN_APPROVER: [1],
    PermissionKey.TASK_CREATOR: [0, 1],
    PermissionKey.EDUCATION_CREATOR: [1],
    PermissionKey.EDUCATION_MEMBER: [0, 1],
    PermissionKey.HYBRID_PROPOSAL_CREATOR: [0, 1],
    PermissionKey.DD_VOTING: [0, 1],
    PermissionKey.DD_CREATOR: [0, 1],
}


def member_and_leader_roles(
    member_name: str,
    leader_name: str,
    *,
    member_supply: int,
    leader_supply: int,
    member_description: str = "",
    leader_description: str = "",
    vouch_quorum: int = 0,
    voucher_index: int = 0,
) -> list[Role]:
    """A member role administered by a single top-level leader role."""
    member = Role(
        name=member_name,
        description=member_description,
        vouching=Vouching(
            enabled=vouch_quorum > 0,
            quorum=vouch_quorum,
            voucher_role_index=voucher_index,
        ),
        hierarchy=HierarchyLink(admin_role_index=1),
        distribution=Distribution(mint_to_deployer=True),
        hat_config=HatConfig(max_supply=member_supply),
    )
    leader = Role(
        name=leader_name,
        description=leader_description,
        hierarchy=HierarchyLink(admin_role_index=None),
        distribution=Distribution(mint_to_deployer=True),
        hat_config=HatConfig(max_supply=leader_supply),
    )
    return [member, leader]


def permissions_with(**overrides: list[int]) -> dict[PermissionKey, list[int]]:
    """Baseline member/leader permissions with some sets replaced by key name."""
    permissions = {key: list(indices) for key, indices in MEMBER_AND_LEADER_PERMISSIONS.items()}
    for name, indices in overrides.items():
        permissions[PermissionKey(name)] = list(indices)
    return permissions


def direct_voting(quorum: int = 50) -> VotingConfig:
    return slider_to_voting(100).model_copy(
        update={"hybrid_quorum": quorum, "dd_quorum": quorum}
    )


def hybrid_voting(democracy: int, quorum: int) -> VotingConfig:
    voting = slider_to_voting(democracy)
    return voting.model_copy(
        update={"mode": VotingMode.HYBRID, "hybrid_quorum": quorum, "dd_quorum": quorum}
    )


def split(democracy: int, quorum: int | None = None, **extra: object) -> VariationSettings:
    """Settings patch for a democracy/participation split."""
    return VariationSettings(
        democracy_weight=democracy,
        participation_weight=100 - democracy,
        quorum=quorum,
        **extra,
    )
