"""
Tests for the State Schema and Core Errors — verifies the pydantic models.

Validates:
- Enum values used on the wire
- Initial state shape
- Permission normalization
- Field bounds
- Error and report projections
"""

from __future__ import annotations

import itertools

import pytest
from pydantic import ValidationError

from poa_deployer.schema.errors import (
    CoreError,
    ErrorKind,
    ValidationIssue,
    ValidationReport,
)
from poa_deployer.schema.state import (
    PERMISSION_KEYS,
    DeployerState,
    HatConfig,
    PermissionKey,
    VotingConfig,
    VotingStrategy,
    WizardStep,
    create_default_role,
    create_initial_state,
    new_id,
    set_id_factory,
)


class TestEnums:
    def test_permission_keys_in_wire_order(self):
        assert [k.value for k in PERMISSION_KEYS] == [
            "quickJoin",
            "tokenMember",
            "tokenApprover",
            "taskCreator",
            "educationCreator",
            "educationMember",
            "hybridProposalCreator",
            "ddVoting",
            "ddCreator",
        ]

    def test_voting_strategy_numbers(self):
        assert int(VotingStrategy.DIRECT) == 0
        assert int(VotingStrategy.ERC_BALANCE) == 1

    def test_wizard_steps(self):
        assert [s.name for s in WizardStep] == ["TEMPLATE", "IDENTITY", "TEAM", "GOVERNANCE", "REVIEW"]


class TestInitialState:
    def setup_method(self):
        self.state = create_initial_state()

    def test_member_reports_to_executive(self):
        member, executive = self.state.roles
        assert member.name == "Member"
        assert member.admin_index == 1
        assert executive.admin_index is None

    def test_every_permission_key_present(self):
        assert set(self.state.permissions) == set(PERMISSION_KEYS)
        assert self.state.permissions[PermissionKey.QUICK_JOIN] == [0]
        assert self.state.permissions[PermissionKey.TOKEN_APPROVER] == [1]

    def test_single_direct_class(self):
        assert self.state.voting.total_slice == 100
        assert len(self.state.voting.classes) == 1

    def test_first_role_minted_to_deployer(self):
        assert create_default_role(0).distribution.mint_to_deployer
        assert not create_default_role(3).distribution.mint_to_deployer


class TestNormalization:
    def test_permissions_sorted_and_deduplicated(self):
        state = DeployerState(permissions={PermissionKey.DD_VOTING: [2, 0, 2]})
        assert state.permissions[PermissionKey.DD_VOTING] == [0, 2]
        assert state.permissions[PermissionKey.QUICK_JOIN] == []

    def test_state_is_frozen(self):
        state = create_initial_state()
        with pytest.raises(ValidationError):
            state.current_step = 3


class TestBounds:
    def test_hat_supply_bounds(self):
        with pytest.raises(ValidationError):
            HatConfig(max_supply=0)
        with pytest.raises(ValidationError):
            HatConfig(max_supply=2**32)
        assert HatConfig().max_supply == 1000

    def test_quorum_bounds(self):
        with pytest.raises(ValidationError):
            VotingConfig(hybrid_quorum=0)
        with pytest.raises(ValidationError):
            VotingConfig(dd_quorum=101)


class TestIds:
    def teardown_method(self):
        set_id_factory(None)

    def test_ids_are_unique(self):
        assert len({new_id() for _ in range(100)}) == 100

    def test_custom_factory(self):
        counter = itertools.count()
        set_id_factory(lambda: f"id-{next(counter)}")
        assert new_id() == "id-0"
        assert create_default_role(0).id == "id-1"


class TestErrors:
    def test_core_error_projection(self):
        error = CoreError(ErrorKind.REGISTRY_MISSING, "no registry", {"hint": "pass one"})
        data = error.to_dict()
        assert data["code"] == "registry_missing"
        assert data["message"] == "no registry"
        assert data["details"] == {"hint": "pass one"}
        assert "timestamp" in data
        assert isinstance(error, ValueError)

    def test_report_ok_and_paths(self):
        assert ValidationReport().ok
        report = ValidationReport(
            errors=[
                ValidationIssue(kind=ErrorKind.ORG_NAME_MISSING, message="first", path="organization.name"),
                ValidationIssue(kind=ErrorKind.ORG_NAME_MISSING, message="second", path="organization.name"),
                ValidationIssue(kind=ErrorKind.NO_ROLES, message="roles"),
            ]
        )
        assert not report.ok
        assert report.kinds() == [ErrorKind.ORG_NAME_MISSING, ErrorKind.ORG_NAME_MISSING, ErrorKind.NO_ROLES]
        assert report.by_path() == {"organization.name": "first", "no_roles": "roles"}
