"""
Wizard Actions — Tagged action records consumed by the reducer.

An action is a type tag plus a keyword payload. The helper functions below
build well-formed actions so callers never spell payload keys by hand.
"""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, Field

from poa_deployer.governance.permissions import PowerBundle
from poa_deployer.schema.errors import ValidationIssue
from poa_deployer.schema.state import (
    FeatureFlag,
    PermissionKey,
    Role,
    VotingClass,
    VotingMode,
)


class ActionType(str, enum.Enum):
    # Navigation
    SET_STEP = "SET_STEP"
    NEXT_STEP = "NEXT_STEP"
    PREV_STEP = "PREV_STEP"

    # Organization
    UPDATE_ORGANIZATION = "UPDATE_ORGANIZATION"
    SET_LOGO = "SET_LOGO"
    SET_INFO_HASH = "SET_INFO_HASH"
    ADD_LINK = "ADD_LINK"
    REMOVE_LINK = "REMOVE_LINK"
    UPDATE_LINK = "UPDATE_LINK"

    # Roles
    ADD_ROLE = "ADD_ROLE"
    UPDATE_ROLE = "UPDATE_ROLE"
    REMOVE_ROLE = "REMOVE_ROLE"
    REORDER_ROLES = "REORDER_ROLES"
    UPDATE_ROLE_HIERARCHY = "UPDATE_ROLE_HIERARCHY"
    UPDATE_ROLE_VOUCHING = "UPDATE_ROLE_VOUCHING"
    UPDATE_ROLE_DISTRIBUTION = "UPDATE_ROLE_DISTRIBUTION"
    UPDATE_ROLE_HAT_CONFIG = "UPDATE_ROLE_HAT_CONFIG"

    # Permissions
    TOGGLE_PERMISSION = "TOGGLE_PERMISSION"
    SET_PERMISSION = "SET_PERMISSION"
    SET_PERMISSION_ROLES = "SET_PERMISSION_ROLES"
    GRANT_ALL_FOR_ROLE = "GRANT_ALL_FOR_ROLE"
    REVOKE_ALL_FOR_ROLE = "REVOKE_ALL_FOR_ROLE"
    SET_POWER_BUNDLE = "SET_POWER_BUNDLE"
    TOGGLE_POWER_BUNDLE = "TOGGLE_POWER_BUNDLE"

    # Voting
    SET_VOTING_MODE = "SET_VOTING_MODE"
    SET_VOTING_QUORUM = "SET_VOTING_QUORUM"
    UPDATE_VOTING = "UPDATE_VOTING"
    ADD_VOTING_CLASS = "ADD_VOTING_CLASS"
    UPDATE_VOTING_CLASS = "UPDATE_VOTING_CLASS"
    REMOVE_VOTING_CLASS = "REMOVE_VOTING_CLASS"

    # Template journey
    SELECT_TEMPLATE = "SELECT_TEMPLATE"
    SET_DISCOVERY_ANSWER = "SET_DISCOVERY_ANSWER"
    SET_SELF_ASSESSMENT_ANSWER = "SET_SELF_ASSESSMENT_ANSWER"
    NEXT_DISCOVERY_QUESTION = "NEXT_DISCOVERY_QUESTION"
    PREV_DISCOVERY_QUESTION = "PREV_DISCOVERY_QUESTION"
    SET_CURRENT_QUESTION_INDEX = "SET_CURRENT_QUESTION_INDEX"
    SET_MATCHED_VARIATION = "SET_MATCHED_VARIATION"
    REMATCH_VARIATION = "REMATCH_VARIATION"
    APPLY_VARIATION = "APPLY_VARIATION"
    RESET_TEMPLATE_JOURNEY = "RESET_TEMPLATE_JOURNEY"

    # Features and philosophy
    TOGGLE_FEATURE = "TOGGLE_FEATURE"
    APPLY_PHILOSOPHY = "APPLY_PHILOSOPHY"

    # Validation, deployment, reset
    SET_ERRORS = "SET_ERRORS"
    CLEAR_ERRORS = "CLEAR_ERRORS"
    SET_DEPLOYMENT_STATUS = "SET_DEPLOYMENT_STATUS"
    RESET_STATE = "RESET_STATE"


class Action(BaseModel):
    model_config = {"frozen": True}

    type: ActionType | str
    payload: dict[str, Any] = Field(default_factory=dict)


def _action(action_type: ActionType, **payload: Any) -> Action:
    return Action(type=action_type, payload=payload)


# ════════════════════════════════════════════════════════════════
# Navigation and organization
# ════════════════════════════════════════════════════════════════


def set_step(step: int) -> Action:
    return _action(ActionType.SET_STEP, step=step)


def next_step() -> Action:
    return _action(ActionType.NEXT_STEP)


def prev_step() -> Action:
    return _action(ActionType.PREV_STEP)


def update_organization(**patch: Any) -> Action:
    return _action(ActionType.UPDATE_ORGANIZATION, patch=patch)


def set_logo(logo_url: str) -> Action:
    return _action(ActionType.SET_LOGO, logo_url=logo_url)


def set_info_hash(cid: str) -> Action:
    return _action(ActionType.SET_INFO_HASH, cid=cid)


def add_link(label: str, url: str) -> Action:
    return _action(ActionType.ADD_LINK, label=label, url=url)


def remove_link(index: int) -> Action:
    return _action(ActionType.REMOVE_LINK, index=index)


def update_link(index: int, **patch: Any) -> Action:
    return _action(ActionType.UPDATE_LINK, index=index, patch=patch)


# ════════════════════════════════════════════════════════════════
# Roles
# ════════════════════════════════════════════════════════════════


def add_role(name: str | None = None) -> Action:
    return _action(ActionType.ADD_ROLE, name=name)


def update_role(index: int, **patch: Any) -> Action:
    return _action(ActionType.UPDATE_ROLE, index=index, patch=patch)


def remove_role(index: int) -> Action:
    return _action(ActionType.REMOVE_ROLE, index=index)


def reorder_roles(roles: list[Role]) -> Action:
    return _action(ActionType.REORDER_ROLES, roles=roles)


def update_role_hierarchy(index: int, admin_index: int | None) -> Action:
    return _action(ActionType.UPDATE_ROLE_HIERARCHY, index=index, admin_index=admin_index)


def update_role_vouching(index: int, **patch: Any) -> Action:
    return _action(ActionType.UPDATE_ROLE_VOUCHING, index=index, patch=patch)


def update_role_distribution(index: int, **patch: Any) -> Action:
    return _action(ActionType.UPDATE_ROLE_DISTRIBUTION, index=index, patch=patch)


def update_role_hat_config(index: int, **patch: Any) -> Action:
    return _action(ActionType.UPDATE_ROLE_HAT_CONFIG, index=index, patch=patch)


# ════════════════════════════════════════════════════════════════
# Permissions
# ════════════════════════════════════════════════════════════════


def toggle_permission(key: PermissionKey, index: int) -> Action:
    return _action(ActionType.TOGGLE_PERMISSION, key=key, index=index)


def set_permission(key: PermissionKey, index: int, enabled: bool) -> Action:
    return _action(ActionType.SET_PERMISSION, key=key, index=index, enabled=enabled)


def set_permission_roles(key: PermissionKey, indices: list[int]) -> Action:
    return _action(ActionType.SET_PERMISSION_ROLES, key=key, indices=indices)


def grant_all_for_role(index: int) -> Action:
    return _action(ActionType.GRANT_ALL_FOR_ROLE, index=index)


def revoke_all_for_role(index: int) -> Action:
    return _action(ActionType.REVOKE_ALL_FOR_ROLE, index=index)


def set_power_bundle(index: int, bundle: PowerBundle, enabled: bool) -> Action:
    return _action(ActionType.SET_POWER_BUNDLE, index=index, bundle=bundle, enabled=enabled)


def toggle_power_bundle(index: int, bundle: PowerBundle) -> Action:
    return _action(ActionType.TOGGLE_POWER_BUNDLE, index=index, bundle=bundle)


# ════════════════════════════════════════════════════════════════
# Voting
# ════════════════════════════════════════════════════════════════


def set_voting_mode(mode: VotingMode) -> Action:
    return _action(ActionType.SET_VOTING_MODE, mode=mode)


def set_voting_quorum(hybrid_quorum: int | None = None, dd_quorum: int | None = None) -> Action:
    return _action(ActionType.SET_VOTING_QUORUM, hybrid_quorum=hybrid_quorum, dd_quorum=dd_quorum)


def update_voting(**patch: Any) -> Action:
    return _action(ActionType.UPDATE_VOTING, patch=patch)


def add_voting_class(class_data: VotingClass | dict[str, Any] | None = None) -> Action:
    return _action(ActionType.ADD_VOTING_CLASS, class_data=class_data)


def update_voting_class(index: int, **patch: Any) -> Action:
    return _action(ActionType.UPDATE_VOTING_CLASS, index=index, patch=patch)


def remove_voting_class(index: int) -> Action:
    return _action(ActionType.REMOVE_VOTING_CLASS, index=index)


# ════════════════════════════════════════════════════════════════
# Template journey, features, philosophy
# ════════════════════════════════════════════════════════════════


def select_template(template_id: str) -> Action:
    return _action(ActionType.SELECT_TEMPLATE, template_id=template_id)


def set_discovery_answer(question_id: str, value: str) -> Action:
    return _action(ActionType.SET_DISCOVERY_ANSWER, question_id=question_id, value=value)


def set_self_assessment_answer(question_id: str, value: str) -> Action:
    return _action(ActionType.SET_SELF_ASSESSMENT_ANSWER, question_id=question_id, value=value)


def next_discovery_question() -> Action:
    return _action(ActionType.NEXT_DISCOVERY_QUESTION)


def prev_discovery_question() -> Action:
    return _action(ActionType.PREV_DISCOVERY_QUESTION)


def set_current_question_index(index: int) -> Action:
    return _action(ActionType.SET_CURRENT_QUESTION_INDEX, index=index)


def set_matched_variation(variation_id: str | None) -> Action:
    return _action(ActionType.SET_MATCHED_VARIATION, variation_id=variation_id)


def rematch_variation() -> Action:
    return _action(ActionType.REMATCH_VARIATION)


def apply_variation(variation_id: str | None = None) -> Action:
    return _action(ActionType.APPLY_VARIATION, variation_id=variation_id)


def reset_template_journey() -> Action:
    return _action(ActionType.RESET_TEMPLATE_JOURNEY)


def toggle_feature(name: FeatureFlag, value: bool | None = None) -> Action:
    return _action(ActionType.TOGGLE_FEATURE, name=name, value=value)


def apply_philosophy(slider: int, override_hints: bool = False) -> Action:
    return _action(ActionType.APPLY_PHILOSOPHY, slider=slider, override_hints=override_hints)


# ════════════════════════════════════════════════════════════════
# Validation, deployment, reset
# ════════════════════════════════════════════════════════════════


def set_errors(errors: dict[str, ValidationIssue]) -> Action:
    return _action(ActionType.SET_ERRORS, errors=errors)


def clear_errors() -> Action:
    return _action(ActionType.CLEAR_ERRORS)


def set_deployment_status(**patch: Any) -> Action:
    return _action(ActionType.SET_DEPLOYMENT_STATUS, patch=patch)


def reset_state() -> Action:
    return _action(ActionType.RESET_STATE)
