"""
Deployment Blueprint — The record handed to the external ABI encoder.

Field names serialize in the deployment call's camelCase (``orgId``,
``hybridClasses``, ``roleAssignments`` …) via pydantic aliases; dump with
``model_dump(by_alias=True)``. Byte fields serialize to hex in JSON mode.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]
Uint256 = Annotated[int, Field(ge=0, le=2**256 - 1)]


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        ser_json_bytes="hex",
    )


class VouchingParams(_WireModel):
    enabled: bool
    quorum: int
    voucher_role_index: int
    combine_with_hierarchy: bool


class DefaultsParams(_WireModel):
    eligible: bool
    standing: bool


class HierarchyParams(_WireModel):
    admin_role_index: Uint256


class DistributionParams(_WireModel):
    mint_to_deployer: bool
    mint_to_executor: bool
    additional_wearers: list[Address] = Field(default_factory=list)


class HatConfigParams(_WireModel):
    max_supply: int = Field(ge=1, le=2**64 - 1)
    mutable_hat: bool


class RoleParams(_WireModel):
    name: bytes
    image: str
    can_vote: bool
    vouching: VouchingParams
    defaults: DefaultsParams
    hierarchy: HierarchyParams
    distribution: DistributionParams
    hat_config: HatConfigParams


class VotingClassParams(_WireModel):
    strategy: int = Field(ge=0, le=255)
    slice_pct: int = Field(ge=0, le=100)
    quadratic: bool
    min_balance: Uint256
    asset: Address
    hat_ids: list[Uint256] = Field(default_factory=list)


class RoleAssignments(_WireModel):
    """The nine permission sets as 32-bit bitmaps over the role list."""

    quick_join_bitmap: int = Field(ge=0, lt=2**32)
    token_member_bitmap: int = Field(ge=0, lt=2**32)
    token_approver_bitmap: int = Field(ge=0, lt=2**32)
    task_creator_bitmap: int = Field(ge=0, lt=2**32)
    education_creator_bitmap: int = Field(ge=0, lt=2**32)
    education_member_bitmap: int = Field(ge=0, lt=2**32)
    hybrid_proposal_creator_bitmap: int = Field(ge=0, lt=2**32)
    dd_voting_bitmap: int = Field(ge=0, lt=2**32)
    dd_creator_bitmap: int = Field(ge=0, lt=2**32)


class DeploymentParams(_WireModel):
    org_id: bytes = Field(min_length=32, max_length=32)
    org_name: str
    registry_addr: Address
    deployer_address: Address
    deployer_username: str = ""
    auto_upgrade: bool
    hybrid_quorum_pct: int = Field(ge=1, le=100)
    dd_quorum_pct: int = Field(ge=1, le=100)
    hybrid_classes: list[VotingClassParams] = Field(min_length=1, max_length=8)
    dd_initial_targets: list[Address] = Field(default_factory=list)
    roles: list[RoleParams]
    role_assignments: RoleAssignments


class LinkParams(_WireModel):
    label: str
    url: str


class DeploymentMetadata(_WireModel):
    description: str
    links: list[LinkParams] = Field(default_factory=list)
    logo_url: str = Field(default="", alias="logoURL")
    info_ipfs_hash: str = Field(default="", alias="infoIPFSHash")


class DeploymentFeatures(_WireModel):
    education_hub_enabled: bool
    election_hub_enabled: bool


class DeploymentSummary(_WireModel):
    org_name: str
    role_count: int
    role_names: list[str]
    voting_mode: str
    voting_class_count: int
    has_vouching: bool


class DeploymentConfig(_WireModel):
    params: DeploymentParams
    metadata: DeploymentMetadata
    metadata_hash: bytes = Field(min_length=32, max_length=32)
    features: DeploymentFeatures
    summary: DeploymentSummary
