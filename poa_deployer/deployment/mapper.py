"""
Deployment Mapper — Project a validated wizard state onto the deployment call.

The mapper is the last gate before the on-chain call. It:
1. Refuses any state the validator does not accept
2. Requires a caller-supplied registry address
3. Reorders roles so every parent precedes its children
4. Encodes names, ids, CIDs, amounts and permission sets bit-exactly

It performs no network calls. The only collaborators are the optional
content store (``put(bytes) -> cid``) and the optional username resolver,
both passed in by the caller.

References:
- Deployment call parameter layout (orgId, hybridClasses, roleAssignments)
- IPFS CIDv0 multihash format
"""

from __future__ import annotations

import json
import logging
from typing import Callable, Optional

from poa_deployer.deployment.blueprint import (
    DefaultsParams,
    DeploymentConfig,
    DeploymentFeatures,
    DeploymentMetadata,
    DeploymentParams,
    DeploymentSummary,
    DistributionParams,
    HatConfigParams,
    HierarchyParams,
    LinkParams,
    RoleAssignments,
    RoleParams,
    VotingClassParams,
    VouchingParams,
)
from poa_deployer.deployment.encoding import (
    MAX_UINT256,
    PARTICIPATION_TOKEN_DECIMALS,
    ROOT_ADMIN_SENTINEL,
    ZERO_ADDRESS,
    cid_to_bytes32,
    encode_text,
    org_id,
    to_wei,
)
from poa_deployer.governance.bitmap import permissions_to_bitmaps
from poa_deployer.governance.hierarchy import reorder_state_by_dependency
from poa_deployer.schema.errors import CoreError, ErrorKind
from poa_deployer.schema.state import DeployerState, Role, VotingClass
from poa_deployer.validation.inputs import require_address
from poa_deployer.validation.validator import validate

logger = logging.getLogger(__name__)

ContentStore = Callable[[bytes], str]
UsernameResolver = Callable[[str], Optional[str]]


# ════════════════════════════════════════════════════════════════
# Record mappers
# ════════════════════════════════════════════════════════════════


def _resolve_wearers(role: Role, resolver: UsernameResolver | None) -> list[str]:
    wearers = [require_address(addr, "Additional wearer") for addr in role.distribution.additional_wearers]
    for username in role.distribution.additional_wearer_usernames:
        address = resolver(username) if resolver is not None else None
        if not address:
            raise CoreError(
                ErrorKind.USERNAME_UNRESOLVED,
                f'Could not resolve username "{username}" for role "{role.name}"',
                details={"username": username, "role": role.name},
            )
        wearers.append(require_address(address, "Additional wearer"))
    return list(dict.fromkeys(wearers))


def map_role(role: Role, username_resolver: UsernameResolver | None = None) -> RoleParams:
    admin = role.admin_index
    return RoleParams(
        name=encode_text(role.name),
        image=role.image,
        can_vote=role.can_vote,
        vouching=VouchingParams(
            enabled=role.vouching.enabled,
            quorum=role.vouching.quorum,
            voucher_role_index=role.vouching.voucher_role_index,
            combine_with_hierarchy=role.vouching.combine_with_hierarchy,
        ),
        defaults=DefaultsParams(
            eligible=role.defaults.eligible,
            standing=role.defaults.standing,
        ),
        hierarchy=HierarchyParams(
            admin_role_index=ROOT_ADMIN_SENTINEL if admin is None else admin,
        ),
        distribution=DistributionParams(
            mint_to_deployer=role.distribution.mint_to_deployer,
            mint_to_executor=role.distribution.mint_to_executor,
            additional_wearers=_resolve_wearers(role, username_resolver),
        ),
        hat_config=HatConfigParams(
            max_supply=role.hat_config.max_supply,
            mutable_hat=role.hat_config.mutable_hat,
        ),
    )


def map_voting_class(
    voting_class: VotingClass,
    decimals: int = PARTICIPATION_TOKEN_DECIMALS,
) -> VotingClassParams:
    """Null assets become the zero address; a zero balance stays 0."""
    min_balance = (
        to_wei(voting_class.min_balance, decimals, max_value=MAX_UINT256)
        if voting_class.min_balance > 0
        else 0
    )
    asset = require_address(voting_class.asset, "Voting class asset") if voting_class.asset else ZERO_ADDRESS
    return VotingClassParams(
        strategy=int(voting_class.strategy),
        slice_pct=voting_class.slice_pct,
        quadratic=voting_class.quadratic,
        min_balance=min_balance,
        asset=asset,
        hat_ids=list(voting_class.hat_ids),
    )


def build_metadata(state: DeployerState) -> DeploymentMetadata:
    org = state.organization
    return DeploymentMetadata(
        description=org.description,
        links=[LinkParams(label=link.label, url=link.url) for link in org.links],
        logo_url=org.logo_url,
        info_ipfs_hash=org.info_ipfs_hash,
    )


def build_summary(state: DeployerState) -> DeploymentSummary:
    return DeploymentSummary(
        org_name=state.organization.name,
        role_count=len(state.roles),
        role_names=[role.name for role in state.roles],
        voting_mode=state.voting.mode.value,
        voting_class_count=len(state.voting.classes),
        has_vouching=any(role.vouching.enabled for role in state.roles),
    )


# ════════════════════════════════════════════════════════════════
# Entry points
# ════════════════════════════════════════════════════════════════


def _require_valid(state: DeployerState) -> None:
    report = validate(state)
    if report.ok:
        return
    first = report.errors[0]
    raise CoreError(
        first.kind,
        f"Configuration is not ready to deploy ({len(report.errors)} issue(s)): {first.message}",
        details={"errors": [issue.model_dump(mode="json") for issue in report.errors]},
    )


def map_state_to_blueprint(
    state: DeployerState,
    deployer_address: str,
    registry_address: str | None,
    username_resolver: UsernameResolver | None = None,
    decimals: int = PARTICIPATION_TOKEN_DECIMALS,
) -> DeploymentParams:
    """
    Build the deployment-call parameters from a wizard state.

    Args:
        state: The wizard state; it must pass the validator.
        deployer_address: Address that submits the deployment.
        registry_address: Registry contract address; required.
        username_resolver: Maps additional-wearer usernames to addresses.
        decimals: Participation-token decimals for minimum balances.

    Returns:
        The parameter record, with roles in parent-first order.

    Raises:
        CoreError: On an invalid state, a missing registry (REGISTRY_MISSING),
            malformed addresses, unresolved usernames or amount overflow.
    """
    _require_valid(state)
    if not registry_address or not registry_address.strip():
        raise CoreError(
            ErrorKind.REGISTRY_MISSING,
            "A registry address is required to build the deployment call",
        )
    registry = require_address(registry_address.strip(), "Registry address")
    deployer = require_address(deployer_address, "Deployer address")

    ordered = reorder_state_by_dependency(state)
    org = ordered.organization
    params = DeploymentParams(
        org_id=org_id(org.name),
        org_name=org.name,
        registry_addr=registry,
        deployer_address=deployer,
        deployer_username=org.username,
        auto_upgrade=org.auto_upgrade,
        hybrid_quorum_pct=ordered.voting.hybrid_quorum,
        dd_quorum_pct=ordered.voting.dd_quorum,
        hybrid_classes=[map_voting_class(vc, decimals) for vc in ordered.voting.classes],
        dd_initial_targets=[],
        roles=[map_role(role, username_resolver) for role in ordered.roles],
        role_assignments=RoleAssignments(**permissions_to_bitmaps(ordered.permissions)),
    )
    logger.info(
        "Mapped organization %r: %d roles, %d voting classes",
        org.name,
        len(params.roles),
        len(params.hybrid_classes),
    )
    return params


def create_deployment_config(
    state: DeployerState,
    deployer_address: str,
    registry_address: str | None,
    content_store: ContentStore | None = None,
    username_resolver: UsernameResolver | None = None,
    decimals: int = PARTICIPATION_TOKEN_DECIMALS,
) -> DeploymentConfig:
    """
    Build the full hand-off record: parameters, metadata, features and summary.

    When the organization carries no info hash and a content store is given,
    the metadata record is stored as JSON and its CID becomes the metadata
    hash. Without either, the metadata hash is 32 zero bytes.
    """
    params = map_state_to_blueprint(
        state,
        deployer_address,
        registry_address,
        username_resolver=username_resolver,
        decimals=decimals,
    )
    metadata = build_metadata(state)
    cid = state.organization.info_ipfs_hash
    if not cid and content_store is not None:
        payload = json.dumps(metadata.model_dump(by_alias=True), sort_keys=True).encode("utf-8")
        cid = content_store(payload)
        logger.info("Stored organization metadata at %s", cid)
        metadata = metadata.model_copy(update={"info_ipfs_hash": cid})

    return DeploymentConfig(
        params=params,
        metadata=metadata,
        metadata_hash=cid_to_bytes32(cid),
        features=DeploymentFeatures(
            education_hub_enabled=state.features.education_hub,
            election_hub_enabled=state.features.election_hub,
        ),
        summary=build_summary(state),
    )
