"""
Tests for the Power-Bundle Mapper.

Validates:
- Bundle membership requires every constituent permission
- Set/toggle for one role leaves other roles untouched
- Double toggle restores the original permission sets
- Bundle ⇄ permission conversions and summaries
"""

from __future__ import annotations

import itertools

from poa_deployer.governance.permissions import (
    POWER_BUNDLES,
    PowerBundle,
    PowerBundleMapper,
    bundle_mapper,
)
from poa_deployer.schema.state import PERMISSION_KEYS, PermissionKey, empty_permissions


def normalized(permissions):
    return {key: sorted(set(permissions.get(key, []))) for key in PERMISSION_KEYS}


class TestBundleCatalog:
    def test_three_bundles(self):
        assert set(POWER_BUNDLES) == {PowerBundle.ADMIN, PowerBundle.MEMBER, PowerBundle.CREATOR}

    def test_bundles_cover_every_permission_once(self):
        covered = list(
            itertools.chain.from_iterable(d.permissions for d in POWER_BUNDLES.values())
        )
        assert sorted(covered, key=PERMISSION_KEYS.index) == list(PERMISSION_KEYS)

    def test_global_mapper_exists(self):
        assert bundle_mapper is not None
        assert bundle_mapper.get_bundle(PowerBundle.CREATOR).name == "Creator Powers"


class TestSetAndToggle:
    """Bundle edits for one role."""

    def setup_method(self):
        self.mapper = PowerBundleMapper()
        self.permissions = {
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

    def test_role_has_bundle_requires_all_keys(self):
        assert self.mapper.role_has_bundle(self.permissions, 1, PowerBundle.ADMIN)
        # Role 0 creates tasks and polls but cannot approve tokens
        assert not self.mapper.role_has_bundle(self.permissions, 0, PowerBundle.ADMIN)
        assert self.mapper.role_has_bundle(self.permissions, 0, PowerBundle.MEMBER)

    def test_set_bundle_is_idempotent(self):
        once = self.mapper.set_bundle_for_role(self.permissions, 0, PowerBundle.ADMIN, True)
        twice = self.mapper.set_bundle_for_role(once, 0, PowerBundle.ADMIN, True)
        assert once == twice
        assert once[PermissionKey.TOKEN_APPROVER] == [0, 1]

    def test_revoke_touches_only_the_role(self):
        updated = self.mapper.set_bundle_for_role(self.permissions, 1, PowerBundle.MEMBER, False)
        assert updated[PermissionKey.TOKEN_MEMBER] == [0]
        assert updated[PermissionKey.DD_VOTING] == [0]
        # Keys outside the bundle are unchanged
        assert updated[PermissionKey.TASK_CREATOR] == [0, 1]

    def test_double_toggle_restores_original(self):
        for role_index in range(3):
            for bundle in PowerBundle:
                start = self.mapper.set_bundle_for_role(
                    self.permissions, role_index, bundle,
                    self.mapper.role_has_bundle(self.permissions, role_index, bundle),
                )
                once = self.mapper.toggle_bundle_for_role(start, role_index, bundle)
                twice = self.mapper.toggle_bundle_for_role(once, role_index, bundle)
                assert twice == normalized(start)

    def test_double_toggle_on_full_or_empty_membership(self):
        once = self.mapper.toggle_bundle_for_role(self.permissions, 1, PowerBundle.ADMIN)
        twice = self.mapper.toggle_bundle_for_role(once, 1, PowerBundle.ADMIN)
        assert twice == normalized(self.permissions)

    def test_partial_membership_toggles_to_full(self):
        updated = self.mapper.toggle_bundle_for_role(self.permissions, 0, PowerBundle.ADMIN)
        assert self.mapper.role_has_bundle(updated, 0, PowerBundle.ADMIN)

    def test_input_is_not_mutated(self):
        before = {key: list(v) for key, v in self.permissions.items()}
        self.mapper.toggle_bundle_for_role(self.permissions, 0, PowerBundle.MEMBER)
        assert self.permissions == before


class TestConversions:
    def setup_method(self):
        self.mapper = PowerBundleMapper()

    def test_permissions_to_bundles(self):
        permissions = self.mapper.set_bundle_for_role(empty_permissions(), 2, PowerBundle.CREATOR, True)
        bundles = self.mapper.permissions_to_bundles(permissions, 3)
        assert bundles[PowerBundle.CREATOR] == [2]
        assert bundles[PowerBundle.ADMIN] == []

    def test_bundles_to_permissions_is_additive(self):
        existing = {PermissionKey.QUICK_JOIN: [3]}
        permissions = self.mapper.bundles_to_permissions({PowerBundle.MEMBER: [0, 1]}, existing)
        assert permissions[PermissionKey.QUICK_JOIN] == [0, 1, 3]
        assert permissions[PermissionKey.DD_VOTING] == [0, 1]
        assert permissions[PermissionKey.TOKEN_APPROVER] == []

    def test_role_bundle_summary(self):
        permissions = self.mapper.bundles_to_permissions(
            {PowerBundle.ADMIN: [1], PowerBundle.MEMBER: [0, 1]}
        )
        summary = self.mapper.role_bundle_summary(permissions, 2)
        assert summary[0].bundles == [PowerBundle.MEMBER]
        assert summary[1].bundles == [PowerBundle.ADMIN, PowerBundle.MEMBER]

    def test_describe_powers(self):
        assert self.mapper.describe_powers([]) == "No special powers"
        assert (
            self.mapper.describe_powers([PowerBundle.ADMIN, PowerBundle.MEMBER])
            == "Admin Powers, Member Powers"
        )
