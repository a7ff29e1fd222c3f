"""
Tests for the State Validator and Input Rules.

Validates:
- Every structural violation is accumulated in one pass, in a fixed order
- Per-step checks report only what blocks that step
- Username, duration, vote-weight, address, CID and name rules
"""

from __future__ import annotations

import pytest

from poa_deployer.schema.errors import CoreError, ErrorKind
from poa_deployer.schema.state import (
    DeployerState,
    HierarchyLink,
    Organization,
    Role,
    VotingClass,
    VotingConfig,
    Vouching,
    WizardStep,
    create_initial_state,
)
from poa_deployer.validation.inputs import (
    require_address,
    require_hat_supply,
    require_in_range,
    require_ipfs_cid,
    require_non_blank,
    require_org_name,
    require_role_name,
    require_valid_duration,
    require_valid_username,
    require_valid_vote_weights,
)
from poa_deployer.validation.validator import is_ready_to_deploy, validate, validate_step

VALID_CID = "QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG"


def named_state(**updates) -> DeployerState:
    state = create_initial_state()
    state = state.model_copy(
        update={"organization": Organization(name="Test DAO", description="For testing")}
    )
    return state.model_copy(update=updates)


class TestValidator:
    def test_initial_state_needs_identity(self):
        report = validate(create_initial_state())
        assert report.kinds() == [ErrorKind.ORG_NAME_MISSING, ErrorKind.ORG_DESCRIPTION_MISSING]

    def test_named_state_is_valid(self):
        state = named_state()
        assert validate(state).ok
        assert is_ready_to_deploy(state)

    def test_no_roles(self):
        assert validate(named_state(roles=[])).kinds() == [ErrorKind.NO_ROLES]

    def test_too_many_roles(self):
        roles = [Role(name=f"R{i}") for i in range(33)]
        assert ErrorKind.TOO_MANY_ROLES in validate(named_state(roles=roles)).kinds()

    def test_blank_and_duplicate_names(self):
        roles = [Role(name="Lead"), Role(name="  "), Role(name="lead")]
        kinds = validate(named_state(roles=roles)).kinds()
        assert kinds == [ErrorKind.ROLE_NAME_BLANK, ErrorKind.DUPLICATE_ROLE_NAME]

    def test_cycle_and_no_root(self):
        roles = [
            Role(name="A", hierarchy=HierarchyLink(admin_role_index=1)),
            Role(name="B", hierarchy=HierarchyLink(admin_role_index=0)),
        ]
        report = validate(named_state(roles=roles))
        assert report.kinds() == [ErrorKind.HIERARCHY_CYCLE, ErrorKind.NO_ROOT_ROLE]
        assert "A, B" in report.errors[0].message

    def test_vouching_quorum(self):
        roles = [Role(name="A", vouching=Vouching(enabled=True, quorum=0))]
        assert validate(named_state(roles=roles)).kinds() == [ErrorKind.VOUCHING_QUORUM]

    def test_slices_must_sum_to_100(self):
        voting = VotingConfig(classes=[VotingClass(slice_pct=60), VotingClass(slice_pct=30)])
        report = validate(named_state(voting=voting))
        assert report.kinds() == [ErrorKind.SLICES_NOT_100]
        assert report.errors[0].message == "Voting class percentages must sum to 100% (currently 90%)"

    def test_no_voting_classes(self):
        voting = VotingConfig(classes=[])
        assert validate(named_state(voting=voting)).kinds() == [ErrorKind.NO_VOTING_CLASSES]

    def test_too_many_voting_classes(self):
        classes = [VotingClass(slice_pct=10) for _ in range(9)] + [VotingClass(slice_pct=10)]
        kinds = validate(named_state(voting=VotingConfig(classes=classes))).kinds()
        assert kinds == [ErrorKind.TOO_MANY_VOTING_CLASSES]

    def test_accepted_state_is_acyclic_with_a_root(self):
        from poa_deployer.governance.hierarchy import RoleHierarchy

        state = named_state()
        assert validate(state).ok
        assert not RoleHierarchy(state.roles).detect_cycles().has_cycle
        assert any(role.admin_index is None for role in state.roles)

    def test_validation_is_deterministic(self):
        roles = [Role(name="x"), Role(name="X"), Role(name="")]
        state = named_state(roles=roles)
        assert validate(state) == validate(state)


class TestValidateStep:
    def test_template_step_needs_a_template(self):
        assert validate_step(create_initial_state(), WizardStep.TEMPLATE).kinds() == [ErrorKind.BLANK_FIELD]

    def test_identity_step(self):
        kinds = validate_step(create_initial_state(), WizardStep.IDENTITY).kinds()
        assert kinds == [ErrorKind.ORG_NAME_MISSING, ErrorKind.ORG_DESCRIPTION_MISSING]

    def test_team_step_ignores_identity(self):
        assert validate_step(create_initial_state(), WizardStep.TEAM).ok

    def test_review_runs_everything(self):
        assert not validate_step(create_initial_state(), WizardStep.REVIEW).ok


class TestVoteWeights:
    def test_weights_summing_to_100(self):
        assert require_valid_vote_weights([40, 30, 30]) == [40, 30, 30]

    def test_weights_over_100(self):
        with pytest.raises(CoreError) as exc_info:
            require_valid_vote_weights([50, 50, 10])
        assert exc_info.value.kind is ErrorKind.VOTE_WEIGHTS_NOT_100
        assert "weights do not sum to 100 (got 110)" in exc_info.value.message

    def test_weight_out_of_range(self):
        with pytest.raises(CoreError) as exc_info:
            require_valid_vote_weights([150, -50])
        assert exc_info.value.kind is ErrorKind.OUT_OF_RANGE


class TestUsername:
    def test_valid(self):
        assert require_valid_username("  alice_01 ") == "alice_01"

    @pytest.mark.parametrize(
        "username, kind",
        [
            ("ab", ErrorKind.USERNAME_TOO_SHORT),
            ("a" * 33, ErrorKind.USERNAME_TOO_LONG),
            ("bad-name", ErrorKind.USERNAME_INVALID_CHARS),
            ("", ErrorKind.BLANK_FIELD),
        ],
    )
    def test_invalid(self, username, kind):
        with pytest.raises(CoreError) as exc_info:
            require_valid_username(username)
        assert exc_info.value.kind is kind


class TestOtherRules:
    def test_duration_bounds(self):
        assert require_valid_duration(1) == 1
        assert require_valid_duration(43200) == 43200
        for minutes in (0, 43201):
            with pytest.raises(CoreError) as exc_info:
                require_valid_duration(minutes)
            assert exc_info.value.kind is ErrorKind.DURATION_OUT_OF_RANGE

    def test_in_range_rejects_bools(self):
        with pytest.raises(CoreError):
            require_in_range(True, 0, 10, "Flag")

    def test_non_blank(self):
        assert require_non_blank("  x ", "Field") == "x"
        with pytest.raises(CoreError):
            require_non_blank(None, "Field")

    def test_address(self):
        address = "0x" + "ab" * 20
        assert require_address(address) == address
        with pytest.raises(CoreError) as exc_info:
            require_address("0x1234")
        assert exc_info.value.kind is ErrorKind.MALFORMED_ADDRESS

    def test_cid(self):
        assert require_ipfs_cid(VALID_CID) == VALID_CID
        for bad in ("Qm123", "Zm" + VALID_CID[2:], VALID_CID[:-1] + "0"):
            with pytest.raises(CoreError) as exc_info:
                require_ipfs_cid(bad)
            assert exc_info.value.kind is ErrorKind.MALFORMED_CID

    def test_org_name(self):
        assert require_org_name("My Dao_2-go") == "My Dao_2-go"
        with pytest.raises(CoreError) as exc_info:
            require_org_name("Bad!Name")
        assert exc_info.value.kind is ErrorKind.NAME_INVALID_CHARS
        with pytest.raises(CoreError) as exc_info:
            require_org_name("x" * 101)
        assert exc_info.value.kind is ErrorKind.NAME_TOO_LONG

    def test_role_name_and_supply(self):
        with pytest.raises(CoreError):
            require_role_name("r" * 33)
        assert require_hat_supply(5) == 5
        with pytest.raises(CoreError):
            require_hat_supply(0)
