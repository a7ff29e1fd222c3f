"""
Tests for the Role Hierarchy Engine.

Validates:
- Tree grouping, descendants, ancestors and depth
- Cycle detection, including self-loops
- Cycle prevention queries used while editing
- Deterministic flattening and parent-first reordering
- Hierarchy validation issues
"""

from __future__ import annotations

import pytest

from poa_deployer.governance.hierarchy import (
    ROOT_BUCKET,
    RoleHierarchy,
    reorder_state_by_dependency,
)
from poa_deployer.schema.errors import CoreError, ErrorKind
from poa_deployer.schema.state import (
    DeployerState,
    HierarchyLink,
    PermissionKey,
    Role,
    VotingClass,
    VotingConfig,
    Vouching,
)


def make_roles(*links: tuple[str, int | None]) -> list[Role]:
    return [
        Role(name=name, hierarchy=HierarchyLink(admin_role_index=admin))
        for name, admin in links
    ]


class TestTreeQueries:
    """A → B → C chain: A is the root, B reports to A, C reports to B."""

    def setup_method(self):
        self.hierarchy = RoleHierarchy(make_roles(("A", None), ("B", 0), ("C", 1)))

    def test_tree_groups_children(self):
        tree = self.hierarchy.tree()
        assert tree.roots == [0]
        assert tree.children_by_parent[ROOT_BUCKET] == [0]
        assert tree.children(0) == [1]
        assert tree.children(1) == [2]
        assert tree.children(2) == []

    def test_descendants(self):
        assert self.hierarchy.descendants(0) == [1, 2]
        assert self.hierarchy.descendants(2) == []

    def test_ancestors_nearest_first(self):
        assert self.hierarchy.ancestors(2) == [1, 0]
        assert self.hierarchy.depth(2) == 2
        assert self.hierarchy.depth(0) == 0

    def test_is_root(self):
        assert self.hierarchy.is_root(0)
        assert not self.hierarchy.is_root(1)


class TestCyclePrevention:
    """Editing queries refuse parents that would close a loop."""

    def setup_method(self):
        self.hierarchy = RoleHierarchy(make_roles(("A", None), ("B", 0), ("C", 1)))

    def test_pointing_root_at_grandchild_creates_cycle(self):
        assert self.hierarchy.would_create_cycle(0, 2) is True

    def test_root_has_no_valid_parents(self):
        assert self.hierarchy.valid_parents(0) == []

    def test_self_parent_creates_cycle(self):
        assert self.hierarchy.would_create_cycle(1, 1) is True

    def test_clearing_parent_never_creates_cycle(self):
        assert self.hierarchy.would_create_cycle(2, None) is False

    def test_leaf_may_report_to_any_other_role(self):
        assert self.hierarchy.valid_parents(2) == [0, 1]
        assert self.hierarchy.would_create_cycle(2, 0) is False


class TestDetectCycles:
    def test_acyclic(self):
        report = RoleHierarchy(make_roles(("A", None), ("B", 0))).detect_cycles()
        assert report.has_cycle is False
        assert report.cycle_roles == []

    def test_two_role_cycle(self):
        report = RoleHierarchy(make_roles(("A", 1), ("B", 0), ("C", None))).detect_cycles()
        assert report.has_cycle is True
        assert report.cycle_roles == [0, 1]

    def test_tail_into_cycle_is_not_reported(self):
        # D hangs off the A ⇄ B loop but is not on it
        report = RoleHierarchy(make_roles(("A", 1), ("B", 0), ("D", 0))).detect_cycles()
        assert report.cycle_roles == [0, 1]

    def test_self_loop(self):
        report = RoleHierarchy(make_roles(("A", 0), ("B", None))).detect_cycles()
        assert report.cycle_roles == [0]

    def test_out_of_range_link_is_not_a_cycle(self):
        report = RoleHierarchy(make_roles(("A", 9))).detect_cycles()
        assert report.has_cycle is False


class TestFlatten:
    def test_roots_and_siblings_in_name_order(self):
        roles = make_roles(("zeta", None), ("Beta", 0), ("alpha", 0), ("Admin", None))
        flat = RoleHierarchy(roles).flatten()
        assert [(n.index, n.depth) for n in flat] == [(3, 0), (0, 0), (2, 1), (1, 1)]

    def test_flatten_is_deterministic(self):
        roles = make_roles(("A", None), ("C", 0), ("B", 0), ("D", 2))
        assert RoleHierarchy(roles).flatten() == RoleHierarchy(roles).flatten()

    def test_flatten_skips_roles_on_cycles(self):
        roles = make_roles(("A", None), ("B", 2), ("C", 1))
        assert [n.index for n in RoleHierarchy(roles).flatten()] == [0]


class TestReorder:
    def test_parents_precede_children(self):
        roles = make_roles(("Member", 1), ("Lead", None))
        result = RoleHierarchy(roles).reorder_by_dependency()
        assert [r.name for r in result.roles] == ["Lead", "Member"]
        assert result.index_map == {1: 0, 0: 1}
        assert result.roles[0].admin_index is None
        assert result.roles[1].admin_index == 0

    def test_voucher_links_follow_the_map(self):
        roles = make_roles(("Member", 1), ("Lead", None))
        roles[0] = roles[0].model_copy(
            update={"vouching": Vouching(enabled=True, quorum=1, voucher_role_index=1)}
        )
        result = RoleHierarchy(roles).reorder_by_dependency()
        assert result.roles[1].vouching.voucher_role_index == 0

    def test_cycle_cannot_be_ordered(self):
        roles = make_roles(("A", None), ("B", 2), ("C", 1))
        with pytest.raises(CoreError) as exc_info:
            RoleHierarchy(roles).reorder_by_dependency()
        assert exc_info.value.kind is ErrorKind.HIERARCHY_CYCLE

    def test_state_reorder_remaps_permissions_and_hats(self):
        state = DeployerState(
            roles=make_roles(("Member", 1), ("Lead", None)),
            permissions={PermissionKey.QUICK_JOIN: [0], PermissionKey.TOKEN_APPROVER: [1]},
            voting=VotingConfig(classes=[VotingClass(slice_pct=100, hat_ids=[0])]),
        )
        ordered = reorder_state_by_dependency(state)
        assert [r.name for r in ordered.roles] == ["Lead", "Member"]
        assert ordered.permissions[PermissionKey.QUICK_JOIN] == [1]
        assert ordered.permissions[PermissionKey.TOKEN_APPROVER] == [0]
        assert ordered.voting.classes[0].hat_ids == [1]

    def test_state_already_in_order_is_returned_as_is(self):
        state = DeployerState(roles=make_roles(("Lead", None), ("Member", 0)))
        assert reorder_state_by_dependency(state) is state


class TestValidate:
    def _kinds(self, roles):
        return [issue.kind for issue in RoleHierarchy(roles).validate()]

    def test_valid_hierarchy_has_no_issues(self):
        assert self._kinds(make_roles(("A", None), ("B", 0))) == []

    def test_no_root(self):
        kinds = self._kinds(make_roles(("A", 1), ("B", 0)))
        assert kinds == [ErrorKind.HIERARCHY_CYCLE, ErrorKind.NO_ROOT_ROLE]

    def test_cycle_message_names_roles(self):
        issues = RoleHierarchy(make_roles(("A", 1), ("B", 0), ("C", None))).validate()
        assert issues[0].message == "Circular dependency detected involving roles: A, B"

    def test_self_admin(self):
        kinds = self._kinds(make_roles(("A", 0), ("B", None)))
        assert ErrorKind.SELF_ADMIN in kinds
        assert ErrorKind.HIERARCHY_CYCLE in kinds

    def test_admin_out_of_range(self):
        kinds = self._kinds(make_roles(("A", None), ("B", 5)))
        assert kinds == [ErrorKind.ADMIN_OUT_OF_RANGE]

    def test_voucher_out_of_range(self):
        roles = make_roles(("A", None))
        roles[0] = roles[0].model_copy(update={"vouching": Vouching(voucher_role_index=3)})
        assert self._kinds(roles) == [ErrorKind.VOUCHER_OUT_OF_RANGE]

    def test_vouching_needs_positive_quorum(self):
        roles = make_roles(("A", None))
        roles[0] = roles[0].model_copy(update={"vouching": Vouching(enabled=True, quorum=0)})
        assert self._kinds(roles) == [ErrorKind.VOUCHING_QUORUM]
