"""
State Validator — One pass over the whole state, every violation reported.

The validator never raises. It accumulates ``ValidationIssue`` records in a
fixed order (organization, roles, hierarchy, voting) so equal states always
produce equal reports, and the deployment mapper refuses any state whose
report is not ``ok``.
"""

from __future__ import annotations

from poa_deployer.governance.hierarchy import RoleHierarchy
from poa_deployer.schema.errors import ErrorKind, ValidationIssue, ValidationReport
from poa_deployer.schema.state import (
    MAX_ROLES,
    MAX_VOTING_CLASSES,
    DeployerState,
    WizardStep,
)


def _organization_issues(state: DeployerState) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    org = state.organization
    if not org.name.strip():
        issues.append(
            ValidationIssue(
                kind=ErrorKind.ORG_NAME_MISSING,
                message="Organization name is required",
                path="organization.name",
            )
        )
    if not org.description.strip():
        issues.append(
            ValidationIssue(
                kind=ErrorKind.ORG_DESCRIPTION_MISSING,
                message="Organization description is required",
                path="organization.description",
            )
        )
    return issues


def _role_issues(state: DeployerState) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    roles = state.roles
    if not roles:
        issues.append(
            ValidationIssue(kind=ErrorKind.NO_ROLES, message="At least one role is required", path="roles")
        )
        return issues
    if len(roles) > MAX_ROLES:
        issues.append(
            ValidationIssue(
                kind=ErrorKind.TOO_MANY_ROLES,
                message=f"At most {MAX_ROLES} roles are supported (got {len(roles)})",
                path="roles",
            )
        )

    seen: dict[str, int] = {}
    for index, role in enumerate(roles):
        name = role.name.strip()
        if not name:
            issues.append(
                ValidationIssue(
                    kind=ErrorKind.ROLE_NAME_BLANK,
                    message=f"Role {index + 1} needs a name",
                    path=f"roles.{index}.name",
                )
            )
            continue
        key = name.casefold()
        if key in seen:
            issues.append(
                ValidationIssue(
                    kind=ErrorKind.DUPLICATE_ROLE_NAME,
                    message=f'Role name "{name}" is already used by role {seen[key] + 1}',
                    path=f"roles.{index}.name",
                )
            )
        else:
            seen[key] = index

    issues.extend(RoleHierarchy(roles).validate())
    return issues


def _voting_issues(state: DeployerState) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    classes = state.voting.classes
    if not classes:
        issues.append(
            ValidationIssue(
                kind=ErrorKind.NO_VOTING_CLASSES,
                message="At least one voting class is required",
                path="voting.classes",
            )
        )
        return issues
    if len(classes) > MAX_VOTING_CLASSES:
        issues.append(
            ValidationIssue(
                kind=ErrorKind.TOO_MANY_VOTING_CLASSES,
                message=f"At most {MAX_VOTING_CLASSES} voting classes are supported (got {len(classes)})",
                path="voting.classes",
            )
        )
    total = state.voting.total_slice
    if total != 100:
        issues.append(
            ValidationIssue(
                kind=ErrorKind.SLICES_NOT_100,
                message=f"Voting class percentages must sum to 100% (currently {total}%)",
                path="voting.classes",
            )
        )
    return issues


def validate(state: DeployerState) -> ValidationReport:
    """Validate the whole state tree."""
    return ValidationReport(
        errors=[
            *_organization_issues(state),
            *_role_issues(state),
            *_voting_issues(state),
        ]
    )


def validate_step(state: DeployerState, step: WizardStep | int) -> ValidationReport:
    """Only the issues that block leaving ``step``."""
    step = WizardStep(step)
    if step is WizardStep.TEMPLATE:
        errors = []
        if state.organization.template_id is None:
            errors.append(
                ValidationIssue(
                    kind=ErrorKind.BLANK_FIELD,
                    message="Choose a template to start from",
                    path="organization.template_id",
                )
            )
        return ValidationReport(errors=errors)
    if step is WizardStep.IDENTITY:
        return ValidationReport(errors=_organization_issues(state))
    if step is WizardStep.TEAM:
        return ValidationReport(errors=_role_issues(state))
    if step is WizardStep.GOVERNANCE:
        return ValidationReport(errors=_voting_issues(state))
    return validate(state)


def is_ready_to_deploy(state: DeployerState) -> bool:
    return validate(state).ok
