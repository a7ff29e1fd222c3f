"""
Deployer State Schema — Pydantic models for the organization configuration tree.

These models are the canonical data structures of the deployment wizard:
roles and their hierarchy, the nine permission sets, the voting
configuration, organization metadata, feature flags, deployment status and
the template journey. Every model is frozen; the reducer produces new
instances instead of mutating old ones.

References:
    Role graph: admin links form a forest, voucher links point at roles
    Permission sets: role-index lists, 32-bit bitmaps on the wire
    Voting classes: slices sum to exactly 100, between 1 and 8 classes
"""

from __future__ import annotations

import enum
from decimal import Decimal
from typing import Any, Callable
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from poa_deployer.schema.errors import ValidationIssue


# ════════════════════════════════════════════════════════════════
# Capacity Constants
# ════════════════════════════════════════════════════════════════

MAX_ROLES = 32  # Width of the permission bitmaps
MAX_VOTING_CLASSES = 8
DEFAULT_HAT_SUPPLY = 1000
MAX_HAT_SUPPLY = 2**32 - 1


# ════════════════════════════════════════════════════════════════
# Opaque Identity
# ════════════════════════════════════════════════════════════════

_id_factory: Callable[[], str] = lambda: uuid4().hex


def new_id() -> str:
    """Return a process-unique opaque identifier for a role or voting class."""
    return _id_factory()


def set_id_factory(factory: Callable[[], str] | None) -> None:
    """
    Replace the identity generator (pass None to restore the uuid4 default).

    Callers that need reproducible ids, such as snapshot tests, can inject a
    counter here. Generated ids must stay unique within the process.
    """
    global _id_factory
    _id_factory = factory or (lambda: uuid4().hex)


# ════════════════════════════════════════════════════════════════
# Enumerations
# ════════════════════════════════════════════════════════════════


class PermissionKey(str, enum.Enum):
    """The nine independent permission sets, in wire order."""

    QUICK_JOIN = "quickJoin"
    TOKEN_MEMBER = "tokenMember"
    TOKEN_APPROVER = "tokenApprover"
    TASK_CREATOR = "taskCreator"
    EDUCATION_CREATOR = "educationCreator"
    EDUCATION_MEMBER = "educationMember"
    HYBRID_PROPOSAL_CREATOR = "hybridProposalCreator"
    DD_VOTING = "ddVoting"
    DD_CREATOR = "ddCreator"


PERMISSION_KEYS: tuple[PermissionKey, ...] = tuple(PermissionKey)


class VotingStrategy(enum.IntEnum):
    """Voting class strategy, numbered as the deployment call expects."""

    DIRECT = 0  # One holder, one vote, gated by hats
    ERC_BALANCE = 1  # Weighted by participation-token balance


class VotingMode(str, enum.Enum):
    DIRECT = "direct"
    HYBRID = "hybrid"


class DeploymentStatus(str, enum.Enum):
    IDLE = "idle"
    PREPARING = "preparing"
    DEPLOYING = "deploying"
    SUCCESS = "success"
    ERROR = "error"


class WizardStep(enum.IntEnum):
    """Wizard pages in navigation order."""

    TEMPLATE = 0
    IDENTITY = 1
    TEAM = 2
    GOVERNANCE = 3
    REVIEW = 4


LAST_STEP = max(WizardStep)


class FeatureFlag(str, enum.Enum):
    EDUCATION_HUB = "education_hub"
    ELECTION_HUB = "election_hub"


# ════════════════════════════════════════════════════════════════
# Role Models
# ════════════════════════════════════════════════════════════════


class Vouching(BaseModel):
    """Eligibility by endorsement from holders of a voucher role."""

    model_config = {"frozen": True}

    enabled: bool = False
    quorum: int = Field(default=0, ge=0, description="Vouches required to join")
    voucher_role_index: int = Field(default=0, ge=0)
    combine_with_hierarchy: bool = False


class EligibilityDefaults(BaseModel):
    model_config = {"frozen": True}

    eligible: bool = True
    standing: bool = True


class HierarchyLink(BaseModel):
    model_config = {"frozen": True}

    admin_role_index: int | None = Field(
        default=None,
        description="Index of the administering role; None marks a root",
    )


class Distribution(BaseModel):
    """Who receives the role's hat at deployment time."""

    model_config = {"frozen": True}

    mint_to_deployer: bool = False
    mint_to_executor: bool = False
    additional_wearers: list[str] = Field(default_factory=list)
    additional_wearer_usernames: list[str] = Field(default_factory=list)


class HatConfig(BaseModel):
    model_config = {"frozen": True}

    max_supply: int = Field(default=DEFAULT_HAT_SUPPLY, ge=1, le=MAX_HAT_SUPPLY)
    mutable_hat: bool = True


class Role(BaseModel):
    """A named node in the organization DAG."""

    model_config = {"frozen": True}

    id: str = Field(default_factory=new_id)
    name: str = "New Role"
    description: str = ""
    image: str = ""
    can_vote: bool = True
    vouching: Vouching = Field(default_factory=Vouching)
    defaults: EligibilityDefaults = Field(default_factory=EligibilityDefaults)
    hierarchy: HierarchyLink = Field(default_factory=HierarchyLink)
    distribution: Distribution = Field(default_factory=Distribution)
    hat_config: HatConfig = Field(default_factory=HatConfig)

    @property
    def admin_index(self) -> int | None:
        return self.hierarchy.admin_role_index


def create_default_role(index: int, name: str = "New Role") -> Role:
    """Build a role with default fields; the first role is minted to the deployer."""
    return Role(
        name=name,
        distribution=Distribution(mint_to_deployer=index == 0),
    )


# ════════════════════════════════════════════════════════════════
# Voting Models
# ════════════════════════════════════════════════════════════════


class VotingClass(BaseModel):
    """One weighted strategy contributing a slice of total voting power."""

    model_config = {"frozen": True}

    id: str = Field(default_factory=new_id)
    strategy: VotingStrategy = VotingStrategy.DIRECT
    slice_pct: int = Field(default=0, ge=0, le=100)
    quadratic: bool = False
    min_balance: Decimal = Field(default=Decimal(0), ge=0)
    asset: str | None = None
    hat_ids: list[int] = Field(default_factory=list)


def create_default_voting_class(
    slice_pct: int = 100,
    strategy: VotingStrategy = VotingStrategy.DIRECT,
) -> VotingClass:
    return VotingClass(strategy=strategy, slice_pct=slice_pct)


class VotingConfig(BaseModel):
    model_config = {"frozen": True}

    mode: VotingMode = VotingMode.DIRECT
    hybrid_quorum: int = Field(default=50, ge=1, le=100)
    dd_quorum: int = Field(default=50, ge=1, le=100)
    quadratic_enabled: bool = False
    democracy_weight: int = Field(default=50, ge=0, le=100)
    participation_weight: int = Field(default=50, ge=0, le=100)
    classes: list[VotingClass] = Field(
        default_factory=lambda: [create_default_voting_class(100)]
    )

    @property
    def total_slice(self) -> int:
        return sum(vc.slice_pct for vc in self.classes)


# ════════════════════════════════════════════════════════════════
# Organization, Features, Deployment
# ════════════════════════════════════════════════════════════════


class Link(BaseModel):
    model_config = {"frozen": True}

    label: str = ""
    url: str = ""


class Organization(BaseModel):
    model_config = {"frozen": True}

    name: str = ""
    description: str = ""
    logo_url: str = ""
    links: list[Link] = Field(default_factory=list)
    info_ipfs_hash: str = ""
    auto_upgrade: bool = True
    username: str = Field(default="", description="Deployer username, may stay empty")
    template_id: str | None = None


class Features(BaseModel):
    model_config = {"frozen": True}

    education_hub: bool = False
    election_hub: bool = False


class DeploymentInfo(BaseModel):
    model_config = {"frozen": True}

    status: DeploymentStatus = DeploymentStatus.IDLE
    error: str | None = None
    result: dict[str, Any] | None = None


class TemplateJourney(BaseModel):
    """Progress through a template's discovery and self-assessment questions."""

    model_config = {"frozen": True}

    discovery_answers: dict[str, str] = Field(default_factory=dict)
    self_assessment_answers: dict[str, str] = Field(default_factory=dict)
    current_question_index: int = Field(default=0, ge=0)
    matched_variation_id: str | None = None
    variation_confirmed: bool = False
    philosophy_slider: int | None = Field(default=None, ge=0, le=100)


# ════════════════════════════════════════════════════════════════
# Root State
# ════════════════════════════════════════════════════════════════


def empty_permissions() -> dict[PermissionKey, list[int]]:
    return {key: [] for key in PERMISSION_KEYS}


class DeployerState(BaseModel):
    """The single canonical value the reducer threads through every action."""

    model_config = {"frozen": True}

    current_step: int = Field(default=WizardStep.TEMPLATE, ge=0, le=LAST_STEP)
    organization: Organization = Field(default_factory=Organization)
    roles: list[Role] = Field(default_factory=list)
    permissions: dict[PermissionKey, list[int]] = Field(default_factory=empty_permissions)
    voting: VotingConfig = Field(default_factory=VotingConfig)
    features: Features = Field(default_factory=Features)
    deployment: DeploymentInfo = Field(default_factory=DeploymentInfo)
    errors: dict[str, ValidationIssue] = Field(default_factory=dict)
    journey: TemplateJourney = Field(default_factory=TemplateJourney)

    @field_validator("permissions")
    @classmethod
    def _normalize_permissions(
        cls, value: dict[PermissionKey, list[int]]
    ) -> dict[PermissionKey, list[int]]:
        # Every key present; each list sorted and deduplicated.
        return {key: sorted(set(value.get(key, []))) for key in PERMISSION_KEYS}


def create_initial_state() -> DeployerState:
    """Fresh wizard state: a Member role administered by an Executive root."""
    member = create_default_role(0, "Member").model_copy(
        update={"hierarchy": HierarchyLink(admin_role_index=1)}
    )
    executive = create_default_role(1, "Executive").model_copy(
        update={"distribution": Distribution(mint_to_deployer=True)}
    )
    return DeployerState(
        roles=[member, executive],
        permissions={
            PermissionKey.QUICK_JOIN: [0],
            PermissionKey.TOKEN_MEMBER: [0, 1],
            PermissionKey.TOKEN_APPROVER: [1],
            PermissionKey.TASK_CREATOR: [0, 1],
            PermissionKey.EDUCATION_CREATOR: [1],
            PermissionKey.EDUCATION_MEMBER: [0, 1],
            PermissionKey.HYBRID_PROPOSAL_CREATOR: [0, 1],
            PermissionKey.DD_VOTING: [0, 1],
            PermissionKey.DD_CREATOR: [0, 1],
        },
    )
