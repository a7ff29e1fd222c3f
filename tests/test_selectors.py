"""
Tests for the Wizard Selectors.
"""

from __future__ import annotations

from poa_deployer.schema.state import (
    PermissionKey,
    VotingClass,
    VotingConfig,
    VotingStrategy,
    Vouching,
    create_initial_state,
)
from poa_deployer.wizard.selectors import (
    JoinMethod,
    active_template,
    children_roles,
    class_participation_counts,
    is_voting_classes_valid,
    matched_variation,
    parent_role,
    permissions_for_role,
    power_bundle_summary,
    role_join_method,
    role_names_with_permission,
    slider_would_change_voting,
    total_slice_percentage,
    voter_names,
)


class TestJoinMethod:
    def setup_method(self):
        self.state = create_initial_state()

    def test_quick_join_is_open(self):
        assert role_join_method(self.state, 0) is JoinMethod.OPEN

    def test_otherwise_invitation(self):
        assert role_join_method(self.state, 1) is JoinMethod.INVITATION

    def test_vouching_wins(self):
        roles = list(self.state.roles)
        roles[0] = roles[0].model_copy(
            update={"vouching": Vouching(enabled=True, quorum=2, voucher_role_index=1)}
        )
        state = self.state.model_copy(update={"roles": roles})
        assert role_join_method(state, 0) is JoinMethod.VOUCHING


class TestRoleQueries:
    def setup_method(self):
        self.state = create_initial_state()

    def test_names_with_permission(self):
        assert role_names_with_permission(self.state, PermissionKey.TOKEN_APPROVER) == ["Executive"]
        assert voter_names(self.state) == ["Member", "Executive"]

    def test_parent_and_children(self):
        assert parent_role(self.state, 0).name == "Executive"
        assert parent_role(self.state, 1) is None
        assert [r.name for r in children_roles(self.state, 1)] == ["Member"]

    def test_permissions_for_role(self):
        keys = set(permissions_for_role(self.state, 1))
        assert PermissionKey.TOKEN_APPROVER in keys
        assert PermissionKey.QUICK_JOIN not in keys

    def test_bundle_summary_covers_every_role(self):
        summary = power_bundle_summary(self.state)
        assert [s.role_index for s in summary] == [0, 1]


class TestVotingQueries:
    def setup_method(self):
        self.state = create_initial_state()

    def test_initial_classes_are_valid(self):
        assert total_slice_percentage(self.state) == 100
        assert is_voting_classes_valid(self.state)

    def test_participation_counts(self):
        voting = VotingConfig(
            classes=[
                VotingClass(strategy=VotingStrategy.DIRECT, slice_pct=50),
                VotingClass(strategy=VotingStrategy.DIRECT, slice_pct=20, hat_ids=[1, 1, 9]),
                VotingClass(strategy=VotingStrategy.ERC_BALANCE, slice_pct=30),
            ]
        )
        state = self.state.model_copy(update={"voting": voting})
        assert class_participation_counts(state) == [2, 1, 2]

    def test_uneven_slices_are_invalid(self):
        voting = VotingConfig(classes=[VotingClass(slice_pct=70)])
        assert not is_voting_classes_valid(self.state.model_copy(update={"voting": voting}))

    def test_slider_change(self):
        assert slider_would_change_voting(self.state, 30)


class TestTemplateQueries:
    def test_no_template(self):
        state = create_initial_state()
        assert active_template(state) is None
        assert matched_variation(state) is None

    def test_matched_variation(self):
        state = create_initial_state()
        state = state.model_copy(
            update={
                "organization": state.organization.model_copy(update={"template_id": "worker-coop"}),
                "journey": state.journey.model_copy(update={"matched_variation_id": "small-high-trust"}),
            }
        )
        assert active_template(state).id == "worker-coop"
        assert matched_variation(state).id == "small-high-trust"
