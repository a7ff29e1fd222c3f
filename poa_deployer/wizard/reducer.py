"""
Wizard Reducer — The single state-transition function of the deployer.

``reduce(state, action)`` is total: it always returns a state and never
raises. Edits that would break an invariant (removing the last role or
voting class, adding past a capacity limit, a patch that fails model
validation) leave the data untouched and record the refusal in
``state.errors`` under the path it concerns. Unknown action types log a
warning and change nothing.

Role removal is the delicate case. Every index-valued reference is
compacted: admin links, voucher links, the nine permission sets and the
voting-class hat lists.

References:
    Role graph invariants: admin links in range, voucher links in range
    Capacities: 32 roles, 1..8 voting classes
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Sequence, TypeVar

from pydantic import BaseModel, ValidationError

from poa_deployer.governance.permissions import PowerBundle, bundle_mapper
from poa_deployer.governance.philosophy import permission_hints_for, slider_to_voting
from poa_deployer.schema.errors import CoreError, ErrorKind, ValidationIssue
from poa_deployer.schema.state import (
    LAST_STEP,
    MAX_ROLES,
    MAX_VOTING_CLASSES,
    PERMISSION_KEYS,
    DeployerState,
    DeploymentInfo,
    FeatureFlag,
    HierarchyLink,
    Link,
    PermissionKey,
    Role,
    TemplateJourney,
    VotingClass,
    VotingMode,
    VotingStrategy,
    create_default_role,
    create_default_voting_class,
    create_initial_state,
)
from poa_deployer.templates.models import Template
from poa_deployer.templates.registry import get_template
from poa_deployer.templates.variations import apply_variation as overlay_variation
from poa_deployer.templates.variations import match_variation
from poa_deployer.validation.inputs import require_ipfs_cid
from poa_deployer.wizard.actions import Action, ActionType

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)
Handler = Callable[..., DeployerState]


class Refusal(Exception):
    """Internal signal: the action was refused and the state stays as it was."""

    def __init__(self, kind: ErrorKind, message: str, path: str) -> None:
        super().__init__(message)
        self.issue = ValidationIssue(kind=kind, message=message, path=path)


# ════════════════════════════════════════════════════════════════
# Helpers
# ════════════════════════════════════════════════════════════════


def _merge(model: M, patch: Mapping[str, Any]) -> M:
    """Shallow merge validated through the model."""
    return type(model).model_validate({**model.model_dump(), **patch})


def _check_role_index(state: DeployerState, index: int, path: str = "roles") -> None:
    if not 0 <= index < len(state.roles):
        raise Refusal(
            ErrorKind.INDEX_OUT_OF_RANGE,
            f"Role index {index} is out of range ({len(state.roles)} roles)",
            path,
        )


def _check_class_index(state: DeployerState, index: int) -> None:
    if not 0 <= index < len(state.voting.classes):
        raise Refusal(
            ErrorKind.INDEX_OUT_OF_RANGE,
            f"Voting class index {index} is out of range",
            "voting.classes",
        )


def _replace_role(state: DeployerState, index: int, role: Role) -> DeployerState:
    roles = list(state.roles)
    roles[index] = role
    return state.model_copy(update={"roles": roles})


def _with_permissions(
    state: DeployerState, permissions: Mapping[PermissionKey, Sequence[int]]
) -> DeployerState:
    normalized = {key: sorted(set(permissions.get(key, ()))) for key in PERMISSION_KEYS}
    return state.model_copy(update={"permissions": normalized})


def _shift_after_removal(indices: Sequence[int], removed: int) -> list[int]:
    return sorted({i - 1 if i > removed else i for i in indices if i != removed})


def _active_template(state: DeployerState) -> Template | None:
    return get_template(state.organization.template_id)


# ════════════════════════════════════════════════════════════════
# Navigation and organization
# ════════════════════════════════════════════════════════════════


def _set_step(state: DeployerState, step: int) -> DeployerState:
    return state.model_copy(update={"current_step": max(0, min(LAST_STEP, step))})


def _next_step(state: DeployerState) -> DeployerState:
    return _set_step(state, state.current_step + 1)


def _prev_step(state: DeployerState) -> DeployerState:
    return _set_step(state, state.current_step - 1)


def _update_organization(state: DeployerState, patch: Mapping[str, Any]) -> DeployerState:
    return state.model_copy(update={"organization": _merge(state.organization, patch)})


def _set_logo(state: DeployerState, logo_url: str) -> DeployerState:
    return _update_organization(state, {"logo_url": logo_url})


def _set_info_hash(state: DeployerState, cid: str) -> DeployerState:
    if cid:
        try:
            cid = require_ipfs_cid(cid)
        except CoreError as exc:
            raise Refusal(exc.kind, exc.message, "organization.info_ipfs_hash") from exc
    return _update_organization(state, {"info_ipfs_hash": cid})


def _add_link(state: DeployerState, label: str, url: str) -> DeployerState:
    links = [*state.organization.links, Link(label=label, url=url)]
    return _update_organization(state, {"links": links})


def _remove_link(state: DeployerState, index: int) -> DeployerState:
    links = list(state.organization.links)
    if not 0 <= index < len(links):
        raise Refusal(ErrorKind.INDEX_OUT_OF_RANGE, f"Link index {index} is out of range", "organization.links")
    del links[index]
    return _update_organization(state, {"links": links})


def _update_link(state: DeployerState, index: int, patch: Mapping[str, Any]) -> DeployerState:
    links = list(state.organization.links)
    if not 0 <= index < len(links):
        raise Refusal(ErrorKind.INDEX_OUT_OF_RANGE, f"Link index {index} is out of range", "organization.links")
    links[index] = _merge(links[index], patch)
    return _update_organization(state, {"links": links})


# ════════════════════════════════════════════════════════════════
# Roles
# ════════════════════════════════════════════════════════════════


def _add_role(state: DeployerState, name: str | None = None) -> DeployerState:
    count = len(state.roles)
    if count >= MAX_ROLES:
        raise Refusal(ErrorKind.ROLE_CAP, f"Cannot add more than {MAX_ROLES} roles", "roles")
    role = create_default_role(count, name or f"Role {count + 1}")
    return state.model_copy(update={"roles": [*state.roles, role]})


def _update_role(state: DeployerState, index: int, patch: Mapping[str, Any]) -> DeployerState:
    _check_role_index(state, index)
    return _replace_role(state, index, _merge(state.roles[index], patch))


def _remove_role(state: DeployerState, index: int) -> DeployerState:
    _check_role_index(state, index)
    if len(state.roles) <= 1:
        raise Refusal(ErrorKind.LAST_ROLE, "Cannot remove the last role", "roles")

    roles: list[Role] = []
    for position, role in enumerate(state.roles):
        if position == index:
            continue
        admin = role.admin_index
        if admin == index:
            admin = None
        elif admin is not None and admin > index:
            admin -= 1
        voucher = role.vouching.voucher_role_index
        if voucher == index:
            voucher = 0
        elif voucher > index:
            voucher -= 1
        roles.append(
            role.model_copy(
                update={
                    "hierarchy": HierarchyLink(admin_role_index=admin),
                    "vouching": role.vouching.model_copy(update={"voucher_role_index": voucher}),
                }
            )
        )

    permissions = {
        key: _shift_after_removal(indices, index) for key, indices in state.permissions.items()
    }
    classes = [
        vc.model_copy(update={"hat_ids": _shift_after_removal(vc.hat_ids, index)})
        for vc in state.voting.classes
    ]
    logger.debug("Removed role %d (%s)", index, state.roles[index].name)
    return state.model_copy(
        update={
            "roles": roles,
            "permissions": permissions,
            "voting": state.voting.model_copy(update={"classes": classes}),
        }
    )


def _reorder_roles(state: DeployerState, roles: Sequence[Role | Mapping[str, Any]]) -> DeployerState:
    validated = [Role.model_validate(role) for role in roles]
    return state.model_copy(update={"roles": validated})


def _update_role_hierarchy(
    state: DeployerState, index: int, admin_index: int | None
) -> DeployerState:
    _check_role_index(state, index)
    role = state.roles[index]
    return _replace_role(
        state,
        index,
        role.model_copy(update={"hierarchy": HierarchyLink(admin_role_index=admin_index)}),
    )


def _patch_role_field(field: str) -> Handler:
    def handler(state: DeployerState, index: int, patch: Mapping[str, Any]) -> DeployerState:
        _check_role_index(state, index)
        role = state.roles[index]
        return _replace_role(
            state, index, role.model_copy(update={field: _merge(getattr(role, field), patch)})
        )

    handler.__name__ = f"_update_role_{field}"
    return handler


# ════════════════════════════════════════════════════════════════
# Permissions
# ════════════════════════════════════════════════════════════════


def _set_permission(
    state: DeployerState, key: PermissionKey | str, index: int, enabled: bool
) -> DeployerState:
    key = PermissionKey(key)
    _check_role_index(state, index, f"permissions.{key.value}")
    members = set(state.permissions[key])
    if enabled:
        members.add(index)
    else:
        members.discard(index)
    return _with_permissions(state, {**state.permissions, key: members})


def _toggle_permission(state: DeployerState, key: PermissionKey | str, index: int) -> DeployerState:
    key = PermissionKey(key)
    return _set_permission(state, key, index, index not in state.permissions[key])


def _set_permission_roles(
    state: DeployerState, key: PermissionKey | str, indices: Sequence[int]
) -> DeployerState:
    key = PermissionKey(key)
    members = {i for i in indices if 0 <= i < len(state.roles)}
    return _with_permissions(state, {**state.permissions, key: members})


def _grant_all_for_role(state: DeployerState, index: int) -> DeployerState:
    _check_role_index(state, index, "permissions")
    return _with_permissions(
        state, {key: [*indices, index] for key, indices in state.permissions.items()}
    )


def _revoke_all_for_role(state: DeployerState, index: int) -> DeployerState:
    _check_role_index(state, index, "permissions")
    return _with_permissions(
        state,
        {key: [i for i in indices if i != index] for key, indices in state.permissions.items()},
    )


def _set_power_bundle(
    state: DeployerState, index: int, bundle: PowerBundle | str, enabled: bool
) -> DeployerState:
    _check_role_index(state, index, "permissions")
    return _with_permissions(
        state,
        bundle_mapper.set_bundle_for_role(state.permissions, index, PowerBundle(bundle), enabled),
    )


def _toggle_power_bundle(state: DeployerState, index: int, bundle: PowerBundle | str) -> DeployerState:
    _check_role_index(state, index, "permissions")
    return _with_permissions(
        state, bundle_mapper.toggle_bundle_for_role(state.permissions, index, PowerBundle(bundle))
    )


# ════════════════════════════════════════════════════════════════
# Voting
# ════════════════════════════════════════════════════════════════


def _set_voting_mode(state: DeployerState, mode: VotingMode | str) -> DeployerState:
    mode = VotingMode(mode)
    voting = state.voting
    if mode is VotingMode.DIRECT:
        classes = [create_default_voting_class(100)]
    else:
        classes = [
            create_default_voting_class(voting.democracy_weight, VotingStrategy.DIRECT),
            create_default_voting_class(voting.participation_weight, VotingStrategy.ERC_BALANCE),
        ]
    return state.model_copy(
        update={"voting": voting.model_copy(update={"mode": mode, "classes": classes})}
    )


def _set_voting_quorum(
    state: DeployerState, hybrid_quorum: int | None = None, dd_quorum: int | None = None
) -> DeployerState:
    patch = {
        name: value
        for name, value in (("hybrid_quorum", hybrid_quorum), ("dd_quorum", dd_quorum))
        if value is not None
    }
    return state.model_copy(update={"voting": _merge(state.voting, patch)})


def _update_voting(state: DeployerState, patch: Mapping[str, Any]) -> DeployerState:
    return state.model_copy(update={"voting": _merge(state.voting, patch)})


def _add_voting_class(
    state: DeployerState, class_data: VotingClass | Mapping[str, Any] | None = None
) -> DeployerState:
    classes = state.voting.classes
    if len(classes) >= MAX_VOTING_CLASSES:
        raise Refusal(
            ErrorKind.VOTING_CLASS_CAP,
            f"Cannot add more than {MAX_VOTING_CLASSES} voting classes",
            "voting.classes",
        )
    if class_data is None:
        new_class = create_default_voting_class(0)
    else:
        data = class_data.model_dump() if isinstance(class_data, VotingClass) else dict(class_data)
        data.pop("id", None)
        new_class = VotingClass.model_validate(data)
    return state.model_copy(
        update={"voting": state.voting.model_copy(update={"classes": [*classes, new_class]})}
    )


def _update_voting_class(
    state: DeployerState, index: int, patch: Mapping[str, Any]
) -> DeployerState:
    _check_class_index(state, index)
    classes = list(state.voting.classes)
    classes[index] = _merge(classes[index], patch)
    return state.model_copy(update={"voting": state.voting.model_copy(update={"classes": classes})})


def _remove_voting_class(state: DeployerState, index: int) -> DeployerState:
    _check_class_index(state, index)
    if len(state.voting.classes) <= 1:
        raise Refusal(ErrorKind.LAST_VOTING_CLASS, "Cannot remove the last voting class", "voting.classes")
    classes = [vc for i, vc in enumerate(state.voting.classes) if i != index]
    return state.model_copy(update={"voting": state.voting.model_copy(update={"classes": classes})})


# ════════════════════════════════════════════════════════════════
# Template journey
# ════════════════════════════════════════════════════════════════


def _select_template(state: DeployerState, template_id: str) -> DeployerState:
    template = get_template(template_id)
    if template is None:
        raise Refusal(ErrorKind.UNKNOWN_TEMPLATE, f"Unknown template: {template_id}", "organization.template_id")
    defaults = template.defaults
    return state.model_copy(
        update={
            "organization": state.organization.model_copy(update={"template_id": template.id}),
            "roles": defaults.roles,
            "permissions": defaults.permissions,
            "voting": defaults.voting,
            "features": defaults.features,
            "journey": TemplateJourney(),
        }
    )


def _rematch(state: DeployerState) -> DeployerState:
    template = _active_template(state)
    if template is None:
        return state
    variation = match_variation(template, state.journey.discovery_answers)
    journey = state.journey.model_copy(
        update={
            "matched_variation_id": variation.id if variation else None,
            "variation_confirmed": False,
        }
    )
    return state.model_copy(update={"journey": journey})


def _set_discovery_answer(state: DeployerState, question_id: str, value: str) -> DeployerState:
    answers = {**state.journey.discovery_answers, question_id: value}
    journey = state.journey.model_copy(update={"discovery_answers": answers})
    return _rematch(state.model_copy(update={"journey": journey}))


def _set_self_assessment_answer(state: DeployerState, question_id: str, value: str) -> DeployerState:
    answers = {**state.journey.self_assessment_answers, question_id: value}
    journey = state.journey.model_copy(update={"self_assessment_answers": answers})
    return state.model_copy(update={"journey": journey})


def _set_current_question_index(state: DeployerState, index: int) -> DeployerState:
    template = _active_template(state)
    last = max(0, len(template.discovery_questions) - 1) if template else 0
    journey = state.journey.model_copy(
        update={"current_question_index": max(0, min(last, index))}
    )
    return state.model_copy(update={"journey": journey})


def _next_discovery_question(state: DeployerState) -> DeployerState:
    return _set_current_question_index(state, state.journey.current_question_index + 1)


def _prev_discovery_question(state: DeployerState) -> DeployerState:
    return _set_current_question_index(state, state.journey.current_question_index - 1)


def _set_matched_variation(state: DeployerState, variation_id: str | None) -> DeployerState:
    journey = state.journey.model_copy(
        update={"matched_variation_id": variation_id, "variation_confirmed": False}
    )
    return state.model_copy(update={"journey": journey})


def _apply_variation(state: DeployerState, variation_id: str | None = None) -> DeployerState:
    template = _active_template(state)
    if template is None:
        raise Refusal(ErrorKind.UNKNOWN_TEMPLATE, "No template selected", "organization.template_id")
    variation_id = variation_id or state.journey.matched_variation_id
    variation = template.get_variation(variation_id) if variation_id else template.default_variation
    if variation is None:
        raise Refusal(
            ErrorKind.UNKNOWN_VARIATION,
            f"Template {template.id} has no variation {variation_id}",
            "journey.matched_variation_id",
        )
    updated = overlay_variation(state, template, variation)
    journey = updated.journey.model_copy(update={"variation_confirmed": True})
    return updated.model_copy(update={"journey": journey})


def _reset_template_journey(state: DeployerState) -> DeployerState:
    return state.model_copy(update={"journey": TemplateJourney()})


# ════════════════════════════════════════════════════════════════
# Features, philosophy, validation, deployment
# ════════════════════════════════════════════════════════════════


def _toggle_feature(
    state: DeployerState, name: FeatureFlag | str, value: bool | None = None
) -> DeployerState:
    field = FeatureFlag(name).value
    current = getattr(state.features, field)
    features = state.features.model_copy(update={field: (not current) if value is None else value})
    return state.model_copy(update={"features": features})


def _apply_philosophy(state: DeployerState, slider: int, override_hints: bool = False) -> DeployerState:
    voting = slider_to_voting(slider)
    journey = state.journey.model_copy(update={"philosophy_slider": voting.democracy_weight})
    updated = state.model_copy(update={"voting": voting, "journey": journey})
    if override_hints:
        hints = permission_hints_for(slider, state.roles)
        updated = _with_permissions(updated, {**state.permissions, **hints})
    return updated


def _set_errors(state: DeployerState, errors: Mapping[str, ValidationIssue | Mapping[str, Any]]) -> DeployerState:
    validated = {path: ValidationIssue.model_validate(issue) for path, issue in errors.items()}
    return state.model_copy(update={"errors": validated})


def _clear_errors(state: DeployerState) -> DeployerState:
    return state.model_copy(update={"errors": {}})


def _set_deployment_status(state: DeployerState, patch: Mapping[str, Any]) -> DeployerState:
    deployment: DeploymentInfo = _merge(state.deployment, patch)
    return state.model_copy(update={"deployment": deployment})


def _reset_state(state: DeployerState) -> DeployerState:
    return create_initial_state()


# ════════════════════════════════════════════════════════════════
# Dispatch
# ════════════════════════════════════════════════════════════════

HANDLERS: dict[ActionType, Handler] = {
    ActionType.SET_STEP: _set_step,
    ActionType.NEXT_STEP: _next_step,
    ActionType.PREV_STEP: _prev_step,
    ActionType.UPDATE_ORGANIZATION: _update_organization,
    ActionType.SET_LOGO: _set_logo,
    ActionType.SET_INFO_HASH: _set_info_hash,
    ActionType.ADD_LINK: _add_link,
    ActionType.REMOVE_LINK: _remove_link,
    ActionType.UPDATE_LINK: _update_link,
    ActionType.ADD_ROLE: _add_role,
    ActionType.UPDATE_ROLE: _update_role,
    ActionType.REMOVE_ROLE: _remove_role,
    ActionType.REORDER_ROLES: _reorder_roles,
    ActionType.UPDATE_ROLE_HIERARCHY: _update_role_hierarchy,
    ActionType.UPDATE_ROLE_VOUCHING: _patch_role_field("vouching"),
    ActionType.UPDATE_ROLE_DISTRIBUTION: _patch_role_field("distribution"),
    ActionType.UPDATE_ROLE_HAT_CONFIG: _patch_role_field("hat_config"),
    ActionType.TOGGLE_PERMISSION: _toggle_permission,
    ActionType.SET_PERMISSION: _set_permission,
    ActionType.SET_PERMISSION_ROLES: _set_permission_roles,
    ActionType.GRANT_ALL_FOR_ROLE: _grant_all_for_role,
    ActionType.REVOKE_ALL_FOR_ROLE: _revoke_all_for_role,
    ActionType.SET_POWER_BUNDLE: _set_power_bundle,
    ActionType.TOGGLE_POWER_BUNDLE: _toggle_power_bundle,
    ActionType.SET_VOTING_MODE: _set_voting_mode,
    ActionType.SET_VOTING_QUORUM: _set_voting_quorum,
    ActionType.UPDATE_VOTING: _update_voting,
    ActionType.ADD_VOTING_CLASS: _add_voting_class,
    ActionType.UPDATE_VOTING_CLASS: _update_voting_class,
    ActionType.REMOVE_VOTING_CLASS: _remove_voting_class,
    ActionType.SELECT_TEMPLATE: _select_template,
    ActionType.SET_DISCOVERY_ANSWER: _set_discovery_answer,
    ActionType.SET_SELF_ASSESSMENT_ANSWER: _set_self_assessment_answer,
    ActionType.NEXT_DISCOVERY_QUESTION: _next_discovery_question,
    ActionType.PREV_DISCOVERY_QUESTION: _prev_discovery_question,
    ActionType.SET_CURRENT_QUESTION_INDEX: _set_current_question_index,
    ActionType.SET_MATCHED_VARIATION: _set_matched_variation,
    ActionType.REMATCH_VARIATION: _rematch,
    ActionType.APPLY_VARIATION: _apply_variation,
    ActionType.RESET_TEMPLATE_JOURNEY: _reset_template_journey,
    ActionType.TOGGLE_FEATURE: _toggle_feature,
    ActionType.APPLY_PHILOSOPHY: _apply_philosophy,
    ActionType.SET_ERRORS: _set_errors,
    ActionType.CLEAR_ERRORS: _clear_errors,
    ActionType.SET_DEPLOYMENT_STATUS: _set_deployment_status,
    ActionType.RESET_STATE: _reset_state,
}


def _record(state: DeployerState, issue: ValidationIssue) -> DeployerState:
    return state.model_copy(update={"errors": {**state.errors, issue.path: issue}})


def reduce(
    state: DeployerState,
    action: Action,
    log: logging.Logger | Any | None = None,
) -> DeployerState:
    """
    Apply one action to a state.

    Args:
        state: The current state; never modified.
        action: The action to apply.
        log: Optional caller-supplied logger for diagnostics; anything with
            a ``warning`` method works. Defaults to this module's logger.

    Returns:
        The next state. Refused actions return the same data with the
        refusal recorded in ``errors``.
    """
    sink = log or logger
    try:
        action_type = ActionType(action.type)
    except ValueError:
        sink.warning("Unknown action type: %s", action.type)
        return state

    handler = HANDLERS[action_type]
    try:
        return handler(state, **action.payload)
    except Refusal as refusal:
        logger.info("Refused %s: %s", action_type.value, refusal.issue.message)
        return _record(state, refusal.issue)
    except ValidationError as exc:
        message = f"Invalid {action_type.value} payload: {exc.error_count()} validation error(s)"
        sink.warning("%s\n%s", message, exc)
        return _record(
            state,
            ValidationIssue(kind=ErrorKind.INVALID_PATCH, message=message, path=action_type.value),
        )
    except (TypeError, ValueError) as exc:
        # Wrong payload keys or an unknown enum value
        message = f"Invalid {action_type.value} payload: {exc}"
        sink.warning(message)
        return _record(
            state,
            ValidationIssue(kind=ErrorKind.INVALID_PATCH, message=message, path=action_type.value),
        )
