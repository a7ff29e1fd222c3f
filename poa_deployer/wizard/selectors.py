"""
Wizard Selectors — Read-only derivations over a DeployerState.
"""

from __future__ import annotations

import enum

from poa_deployer.governance.hierarchy import RoleHierarchy
from poa_deployer.governance.permissions import RoleBundleSummary, bundle_mapper
from poa_deployer.governance.philosophy import would_change_voting
from poa_deployer.schema.state import (
    MAX_VOTING_CLASSES,
    DeployerState,
    PermissionKey,
    Role,
    VotingStrategy,
)
from poa_deployer.templates.models import Template, Variation
from poa_deployer.templates.registry import get_template


class JoinMethod(str, enum.Enum):
    VOUCHING = "vouching"
    OPEN = "open"
    INVITATION = "invitation"


def active_template(state: DeployerState) -> Template | None:
    return get_template(state.organization.template_id)


def matched_variation(state: DeployerState) -> Variation | None:
    template = active_template(state)
    if template is None:
        return None
    return template.get_variation(state.journey.matched_variation_id)


def role_join_method(state: DeployerState, index: int) -> JoinMethod:
    """Vouching if enabled, else open if the role can quick-join, else invitation."""
    role = state.roles[index]
    if role.vouching.enabled:
        return JoinMethod.VOUCHING
    if index in state.permissions[PermissionKey.QUICK_JOIN]:
        return JoinMethod.OPEN
    return JoinMethod.INVITATION


def role_names_with_permission(state: DeployerState, key: PermissionKey) -> list[str]:
    return [
        state.roles[i].name
        for i in state.permissions[PermissionKey(key)]
        if 0 <= i < len(state.roles)
    ]


def voter_names(state: DeployerState) -> list[str]:
    return role_names_with_permission(state, PermissionKey.DD_VOTING)


def power_bundle_summary(state: DeployerState) -> list[RoleBundleSummary]:
    return bundle_mapper.role_bundle_summary(state.permissions, len(state.roles))


def class_participation_counts(state: DeployerState) -> list[int]:
    """
    Number of roles that take part in each voting class.

    Direct classes count their listed hats, or every voting-enabled role
    when the list is empty. Token-balance classes count the roles allowed
    to hold the participation token.
    """
    counts: list[int] = []
    role_count = len(state.roles)
    for voting_class in state.voting.classes:
        if voting_class.strategy is VotingStrategy.DIRECT:
            hats = {i for i in voting_class.hat_ids if 0 <= i < role_count}
            counts.append(len(hats) if hats else sum(1 for role in state.roles if role.can_vote))
        else:
            counts.append(len(state.permissions[PermissionKey.TOKEN_MEMBER]))
    return counts


def slider_would_change_voting(state: DeployerState, slider: int) -> bool:
    return would_change_voting(state.voting, slider)


def total_slice_percentage(state: DeployerState) -> int:
    return state.voting.total_slice


def is_voting_classes_valid(state: DeployerState) -> bool:
    return total_slice_percentage(state) == 100 and 1 <= len(state.voting.classes) <= MAX_VOTING_CLASSES


def parent_role(state: DeployerState, index: int) -> Role | None:
    admin = state.roles[index].admin_index
    if admin is None or not 0 <= admin < len(state.roles):
        return None
    return state.roles[admin]


def children_roles(state: DeployerState, index: int) -> list[Role]:
    return [state.roles[i] for i in RoleHierarchy(state.roles).tree().children(index)]


def permissions_for_role(state: DeployerState, index: int) -> list[PermissionKey]:
    return [key for key, indices in state.permissions.items() if index in indices]
