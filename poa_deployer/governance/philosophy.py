"""
Philosophy Mapper — One slider to a full voting configuration.

The wizard asks a single question: how democratic should this organization
be? The answer is an integer 0..100 that *is* the democracy weight:

- 100: pure direct democracy, one Direct class at 100%
- 0: contribution-weighted, one token-balance class at 100%
- 1..99: hybrid, a Direct class at s% and a token-balance class at 100 − s%

Quorum defaults follow the band the slider falls in. The emitted class
slices always sum to exactly 100, and ``voting_to_slider`` inverts every
configuration this module produces.

References:
    Bands: delegated 0–30, hybrid 31–70, democratic 71–100
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Sequence

from poa_deployer.schema.state import (
    PermissionKey,
    Role,
    VotingClass,
    VotingConfig,
    VotingMode,
    VotingStrategy,
)

SLIDER_MIN = 0
SLIDER_MAX = 100


class PhilosophyBand(str, enum.Enum):
    DELEGATED = "delegated"
    HYBRID = "hybrid"
    DEMOCRATIC = "democratic"


BAND_RANGES: dict[PhilosophyBand, tuple[int, int]] = {
    PhilosophyBand.DELEGATED: (0, 30),
    PhilosophyBand.HYBRID: (31, 70),
    PhilosophyBand.DEMOCRATIC: (71, 100),
}


@dataclass(frozen=True)
class PhilosophyInfo:
    band: PhilosophyBand
    name: str
    short_description: str


PHILOSOPHY_INFO: dict[PhilosophyBand, PhilosophyInfo] = {
    PhilosophyBand.DELEGATED: PhilosophyInfo(
        band=PhilosophyBand.DELEGATED,
        name="Contribution-Weighted",
        short_description="Active contributors have more say",
    ),
    PhilosophyBand.HYBRID: PhilosophyInfo(
        band=PhilosophyBand.HYBRID,
        name="Balanced Approach",
        short_description="Mix of participation and equal voice",
    ),
    PhilosophyBand.DEMOCRATIC: PhilosophyInfo(
        band=PhilosophyBand.DEMOCRATIC,
        name="Equal Voice",
        short_description="Every voice counts equally",
    ),
}


def clamp_slider(value: int) -> int:
    return max(SLIDER_MIN, min(SLIDER_MAX, int(value)))


def band_for(slider: int) -> PhilosophyBand:
    slider = clamp_slider(slider)
    for band, (_, upper) in BAND_RANGES.items():
        if slider <= upper:
            return band
    return PhilosophyBand.DEMOCRATIC


def philosophy_info(slider: int) -> PhilosophyInfo:
    return PHILOSOPHY_INFO[band_for(slider)]


def default_quorum(slider: int) -> int:
    if slider <= 30:
        return 30
    if slider >= 71:
        return 60
    return 50


def slider_to_voting(slider: int) -> VotingConfig:
    """
    Build the voting configuration for a slider position.

    Args:
        slider: Democracy weight; values outside 0..100 are clamped.

    Returns:
        A VotingConfig whose class slices sum to 100, with fresh class ids.
    """
    democracy = clamp_slider(slider)
    participation = SLIDER_MAX - democracy

    if democracy == SLIDER_MAX:
        return VotingConfig(
            mode=VotingMode.DIRECT,
            hybrid_quorum=60,
            dd_quorum=60,
            democracy_weight=100,
            participation_weight=0,
            classes=[VotingClass(strategy=VotingStrategy.DIRECT, slice_pct=100)],
        )

    if democracy == SLIDER_MIN:
        return VotingConfig(
            mode=VotingMode.HYBRID,
            hybrid_quorum=30,
            dd_quorum=30,
            democracy_weight=0,
            participation_weight=100,
            classes=[VotingClass(strategy=VotingStrategy.ERC_BALANCE, slice_pct=100)],
        )

    quorum = default_quorum(democracy)
    return VotingConfig(
        mode=VotingMode.HYBRID,
        hybrid_quorum=quorum,
        dd_quorum=quorum,
        democracy_weight=democracy,
        participation_weight=participation,
        classes=[
            VotingClass(strategy=VotingStrategy.DIRECT, slice_pct=democracy),
            VotingClass(strategy=VotingStrategy.ERC_BALANCE, slice_pct=participation),
        ],
    )


def voting_to_slider(voting: VotingConfig | None) -> int:
    """Slider position for a configuration; 50 when there is none."""
    if voting is None:
        return 50
    return clamp_slider(round(voting.democracy_weight))


def would_change_voting(voting: VotingConfig, slider: int) -> bool:
    """True if applying ``slider`` would produce a different configuration."""
    proposed = slider_to_voting(slider)
    current_shape = [(vc.strategy, vc.slice_pct) for vc in voting.classes]
    proposed_shape = [(vc.strategy, vc.slice_pct) for vc in proposed.classes]
    return (
        current_shape != proposed_shape
        or voting.mode != proposed.mode
        or voting.democracy_weight != proposed.democracy_weight
        or voting.participation_weight != proposed.participation_weight
        or voting.hybrid_quorum != proposed.hybrid_quorum
        or voting.dd_quorum != proposed.dd_quorum
    )


def permission_hints_for(
    slider: int, roles: Sequence[Role]
) -> dict[PermissionKey, list[int]]:
    """
    Recommended poll-creation and poll-voting membership for a slider value.

    In the delegated band only the first root role creates polls; otherwise
    every role may. Every role may vote in all bands.
    """
    everyone = list(range(len(roles)))
    if band_for(slider) is PhilosophyBand.DELEGATED:
        leader = next(
            (i for i, role in enumerate(roles) if role.admin_index is None),
            len(roles) - 1,
        )
        creators = [leader] if roles else []
    else:
        creators = everyone
    return {
        PermissionKey.DD_CREATOR: creators,
        PermissionKey.DD_VOTING: everyone,
    }


def describe_voting_setup(voting: VotingConfig | None) -> str:
    if voting is None:
        return "No voting configured"
    if voting.mode is VotingMode.DIRECT:
        return "Every member's vote counts equally."
    if voting.democracy_weight >= 70:
        return "Voting power is primarily based on equal membership, with some weight given to participation."
    if voting.participation_weight >= 70:
        return "Voting power reflects contribution levels. Active members have more say in decisions."
    return "Voting combines equal membership with contribution weight."
