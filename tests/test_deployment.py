"""
Tests for the Deployment Mapper and its encodings.

Validates:
- Organization id is Keccak-256 of the slugged name
- CIDv0 ⇄ bytes32 conversion and the zero hash
- Wei conversion with field-width overflow
- Parent-first role order, root sentinel and permission bitmaps
- Refusal of invalid states and of a missing registry
- Content store and username resolver collaborators
"""

from __future__ import annotations

from decimal import Decimal

import base58
import pytest

from poa_deployer.deployment.encoding import (
    MAX_UINT96,
    ROOT_ADMIN_SENTINEL,
    ZERO_ADDRESS,
    ZERO_BYTES32,
    bytes32_to_cid,
    cid_to_bytes32,
    keccak256,
    org_id,
    org_slug,
    to_wei,
)
from poa_deployer.deployment.mapper import (
    create_deployment_config,
    map_state_to_blueprint,
    map_voting_class,
)
from poa_deployer.schema.errors import CoreError, ErrorKind
from poa_deployer.schema.state import (
    DeployerState,
    Distribution,
    Organization,
    VotingClass,
    VotingStrategy,
    create_initial_state,
)

DEPLOYER = "0x" + "11" * 20
REGISTRY = "0x" + "22" * 20
WEARER = "0x" + "33" * 20
DIGEST = bytes(range(32))
CID = base58.b58encode(b"\x12\x20" + DIGEST).decode("ascii")


def ready_state() -> DeployerState:
    state = create_initial_state()
    return state.model_copy(
        update={"organization": Organization(name="My Dao  Name", description="A test org")}
    )


def with_role_distribution(state: DeployerState, index: int, distribution: Distribution) -> DeployerState:
    roles = list(state.roles)
    roles[index] = roles[index].model_copy(update={"distribution": distribution})
    return state.model_copy(update={"roles": roles})


class TestOrgId:
    def test_empty_keccak(self):
        assert keccak256(b"").hex() == (
            "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
        )

    def test_slug_collapses_whitespace(self):
        assert org_slug("My Dao  Name") == "my-dao-name"

    def test_org_id_hashes_slug(self):
        assert org_id("My Dao  Name") == keccak256(b"my-dao-name")
        assert len(org_id("x")) == 32


class TestCid:
    def test_cid_to_digest(self):
        assert len(CID) == 46
        assert cid_to_bytes32(CID) == DIGEST
        assert bytes32_to_cid(DIGEST) == CID

    def test_missing_cid_is_zero_hash(self):
        assert cid_to_bytes32("") == ZERO_BYTES32
        assert cid_to_bytes32(None) == ZERO_BYTES32
        assert bytes32_to_cid(ZERO_BYTES32) == ""

    def test_malformed_cid(self):
        with pytest.raises(CoreError) as exc_info:
            cid_to_bytes32("QmNotAValidCid")
        assert exc_info.value.kind is ErrorKind.MALFORMED_CID


class TestToWei:
    def test_whole_and_fractional(self):
        assert to_wei(1) == 10**18
        assert to_wei("1.5") == 15 * 10**17
        assert to_wei(Decimal("0.000000000000000001")) == 1

    def test_uint96_overflow(self):
        with pytest.raises(CoreError) as exc_info:
            to_wei(MAX_UINT96 // 10**18 + 1)
        assert exc_info.value.kind is ErrorKind.AMOUNT_OVERFLOW
        assert "uint96 overflow" in exc_info.value.message

    def test_uncapped(self):
        assert to_wei(10**12, max_value=None) == 10**30

    def test_too_many_decimals(self):
        with pytest.raises(CoreError) as exc_info:
            to_wei("0.0000000000000000001")
        assert exc_info.value.kind is ErrorKind.OUT_OF_RANGE

    def test_negative_and_garbage(self):
        for bad in ("-1", "abc", "NaN"):
            with pytest.raises(CoreError):
                to_wei(bad)


class TestBlueprint:
    def setup_method(self):
        self.params = map_state_to_blueprint(ready_state(), DEPLOYER, REGISTRY)

    def test_header_fields(self):
        assert self.params.org_id == keccak256(b"my-dao-name")
        assert self.params.org_name == "My Dao  Name"
        assert self.params.registry_addr == REGISTRY
        assert self.params.deployer_address == DEPLOYER
        assert self.params.dd_initial_targets == []

    def test_roles_are_parent_first(self):
        names = [role.name for role in self.params.roles]
        assert names == [b"Executive", b"Member"]
        assert self.params.roles[0].hierarchy.admin_role_index == ROOT_ADMIN_SENTINEL
        assert self.params.roles[1].hierarchy.admin_role_index == 0

    def test_bitmaps_follow_reordered_indices(self):
        assignments = self.params.role_assignments
        # Member moved from 0 to 1, Executive from 1 to 0
        assert assignments.quick_join_bitmap == 0b10
        assert assignments.token_approver_bitmap == 0b01
        assert assignments.token_member_bitmap == 0b11

    def test_wire_names(self):
        data = self.params.model_dump(by_alias=True)
        assert {"orgId", "registryAddr", "hybridClasses", "roleAssignments"} <= set(data)
        assert "quickJoinBitmap" in data["roleAssignments"]
        assert "adminRoleIndex" in data["roles"][0]["hierarchy"]

    def test_voting_class(self):
        (voting_class,) = self.params.hybrid_classes
        assert voting_class.slice_pct == 100
        assert voting_class.asset == ZERO_ADDRESS
        assert voting_class.min_balance == 0


class TestVotingClassMapping:
    def test_min_balance_in_wei(self):
        params = map_voting_class(
            VotingClass(strategy=VotingStrategy.ERC_BALANCE, slice_pct=40, min_balance=Decimal("2.5"))
        )
        assert params.strategy == 1
        assert params.min_balance == 25 * 10**17

    def test_custom_decimals(self):
        params = map_voting_class(VotingClass(slice_pct=100, min_balance=Decimal(3)), decimals=6)
        assert params.min_balance == 3_000_000


class TestRefusals:
    def test_invalid_state_is_refused(self):
        with pytest.raises(CoreError) as exc_info:
            map_state_to_blueprint(create_initial_state(), DEPLOYER, REGISTRY)
        error = exc_info.value
        assert error.kind is ErrorKind.ORG_NAME_MISSING
        assert len(error.details["errors"]) == 2

    @pytest.mark.parametrize("registry", [None, "", "   "])
    def test_missing_registry(self, registry):
        with pytest.raises(CoreError) as exc_info:
            map_state_to_blueprint(ready_state(), DEPLOYER, registry)
        assert exc_info.value.kind is ErrorKind.REGISTRY_MISSING

    def test_malformed_deployer(self):
        with pytest.raises(CoreError) as exc_info:
            map_state_to_blueprint(ready_state(), "not-an-address", REGISTRY)
        assert exc_info.value.kind is ErrorKind.MALFORMED_ADDRESS


class TestWearers:
    def test_usernames_are_resolved(self):
        state = with_role_distribution(
            ready_state(),
            0,
            Distribution(additional_wearers=[WEARER], additional_wearer_usernames=["alice"]),
        )
        params = map_state_to_blueprint(state, DEPLOYER, REGISTRY, username_resolver={"alice": WEARER}.get)
        # Member is second after reordering; duplicates collapse
        assert params.roles[1].distribution.additional_wearers == [WEARER]

    def test_unresolved_username(self):
        state = with_role_distribution(
            ready_state(), 0, Distribution(additional_wearer_usernames=["ghost"])
        )
        with pytest.raises(CoreError) as exc_info:
            map_state_to_blueprint(state, DEPLOYER, REGISTRY, username_resolver=lambda name: None)
        assert exc_info.value.kind is ErrorKind.USERNAME_UNRESOLVED
        assert exc_info.value.details["username"] == "ghost"

    def test_username_without_resolver(self):
        state = with_role_distribution(
            ready_state(), 0, Distribution(additional_wearer_usernames=["alice"])
        )
        with pytest.raises(CoreError) as exc_info:
            map_state_to_blueprint(state, DEPLOYER, REGISTRY)
        assert exc_info.value.kind is ErrorKind.USERNAME_UNRESOLVED


class TestDeploymentConfig:
    def test_no_hash_without_store(self):
        config = create_deployment_config(ready_state(), DEPLOYER, REGISTRY)
        assert config.metadata_hash == ZERO_BYTES32
        assert config.metadata.description == "A test org"
        assert config.summary.role_names == ["Member", "Executive"]
        assert config.summary.role_count == 2
        assert not config.summary.has_vouching

    def test_existing_hash_is_used(self):
        state = ready_state()
        state = state.model_copy(
            update={"organization": state.organization.model_copy(update={"info_ipfs_hash": CID})}
        )
        stored = []
        config = create_deployment_config(state, DEPLOYER, REGISTRY, content_store=stored.append)
        assert config.metadata_hash == DIGEST
        assert stored == []

    def test_store_receives_metadata_json(self):
        stored: list[bytes] = []

        def store(payload: bytes) -> str:
            stored.append(payload)
            return CID

        config = create_deployment_config(ready_state(), DEPLOYER, REGISTRY, content_store=store)
        assert config.metadata_hash == DIGEST
        assert config.metadata.info_ipfs_hash == CID
        assert b'"description": "A test org"' in stored[0]
        assert b'"logoURL"' in stored[0]

    def test_metadata_aliases(self):
        config = create_deployment_config(ready_state(), DEPLOYER, REGISTRY)
        data = config.model_dump(by_alias=True)
        assert {"logoURL", "infoIPFSHash"} <= set(data["metadata"])
        assert set(data["features"]) == {"educationHubEnabled", "electionHubEnabled"}
