"""
Community DAO — Neighbors and interest groups governing together.
"""

from __future__ import annotations

from poa_deployer.governance.philosophy import PhilosophyBand
from poa_deployer.schema.state import Features
from poa_deployer.templates.catalog.common import (
    hybrid_voting,
    member_and_leader_roles,
    permissions_with,
    split,
)
from poa_deployer.templates.models import (
    ContextualHelp,
    DiscoveryQuestion,
    EducationConcept,
    GrowthStage,
    Pitfall,
    QuestionOption,
    Severity,
    Template,
    TemplateDefaults,
    Variation,
)

COMMUNITY_DAO_TEMPLATE = Template(
    id="community-dao",
    name="Community DAO",
    tagline="Neighbors governing together",
    description=(
        "For neighborhoods, local communities, and interest groups. Balanced "
        "governance with elected representatives and direct community input."
    ),
    best_for=["Neighborhood associations", "Interest communities", "Professional networks"],
    defaults=TemplateDefaults(
        roles=member_and_leader_roles(
            "Neighbor",
            "Delegate",
            member_supply=5000,
            leader_supply=15,
            member_description="Community member with a voice in decisions",
            leader_description="Elected steward of community initiatives",
            vouch_quorum=1,
            voucher_index=1,
        ),
        permissions=permissions_with(ddCreator=[1]),
        voting=hybrid_voting(50, quorum=50),
        features=Features(election_hub=True),
        philosophy=PhilosophyBand.HYBRID,
    ),
    discovery_questions=[
        DiscoveryQuestion(
            id="community_type",
            question="What brings your community together?",
            options=[
                QuestionOption(value="geographic", label="A shared place",
                               impact="Residents share a stake in local decisions"),
                QuestionOption(value="interest", label="A shared interest",
                               impact="Engagement varies widely between members"),
                QuestionOption(value="professional", label="A shared profession",
                               impact="Expertise and contribution carry weight"),
            ],
        ),
        DiscoveryQuestion(
            id="existing_structure",
            question="Does the community already have a governance structure?",
            options=[
                QuestionOption(value="none", label="No, we are starting fresh",
                               impact="Defaults work well"),
                QuestionOption(value="informal", label="Informal leaders and habits",
                               impact="Formalize what already works"),
                QuestionOption(value="formal", label="A formal board or bylaws",
                               impact="Higher quorum eases the transition"),
            ],
        ),
        DiscoveryQuestion(
            id="expected_participation",
            question="How many members will take part in decisions?",
            options=[
                QuestionOption(value="high", label="Most members, regularly",
                               impact="Supports more direct democracy"),
                QuestionOption(value="moderate", label="A committed core plus occasional voters",
                               impact="Balanced settings"),
                QuestionOption(value="low", label="A small active group",
                               impact="Low quorum and participation weight"),
            ],
        ),
    ],
    variations=[
        Variation(
            id="default",
            name="Balanced Community",
            settings=split(50, quorum=30),
            reasoning="Equal membership rights plus earned influence from engagement.",
        ),
        Variation(
            id="active-community",
            name="Active Community",
            match_conditions={"expected_participation": "high"},
            settings=split(70, quorum=40),
            reasoning="High participation supports more equal voice and higher quorum.",
        ),
        Variation(
            id="broad-community",
            name="Broad Community",
            match_conditions={"expected_participation": "low"},
            settings=split(30, quorum=20),
            reasoning="Low engagement needs an achievable quorum and rewards for showing up.",
        ),
        Variation(
            id="neighborhood",
            name="Neighborhood DAO",
            match_conditions={"community_type": "geographic"},
            settings=split(60, quorum=25),
            reasoning="Residents share an equal stake in the place they live.",
        ),
        Variation(
            id="professional-community",
            name="Professional Community",
            match_conditions={"community_type": "professional"},
            settings=split(40, quorum=25),
            reasoning="Contribution and expertise earn more influence.",
        ),
        Variation(
            id="transitioning",
            name="Transitioning Community",
            match_conditions={"existing_structure": "formal"},
            settings=split(50, quorum=35),
            reasoning="A familiar balance with a quorum close to existing bylaws.",
        ),
    ],
    growth_path=[
        GrowthStage(name="Launching", timeframe="0-6 months",
                    description="Establishing democratic culture", settings=split(50)),
        GrowthStage(name="Growing", timeframe="6-18 months",
                    description="Scaling participation", settings=split(50)),
        GrowthStage(name="Thriving", timeframe="18+ months",
                    description="Sustainable community governance", settings=split(50)),
    ],
    pitfalls=[
        Pitfall(id="voter-apathy", name="Voter Apathy", severity=Severity.HIGH,
                description="Most members never vote."),
        Pitfall(id="nimby-capture", name="NIMBY Capture", severity=Severity.HIGH,
                description="A vocal minority blocks anything near them."),
        Pitfall(id="delegate-disconnect", name="Delegate Disconnect", severity=Severity.MEDIUM,
                description="Delegates stop reflecting the community."),
        Pitfall(id="governance-theater", name="Governance Theater", severity=Severity.MEDIUM,
                description="Votes happen but decisions are made elsewhere."),
    ],
    education=[
        EducationConcept(title="Community Governance",
                         summary="How communities make collective decisions"),
        EducationConcept(title="Delegation", summary="Letting someone vote on your behalf"),
        EducationConcept(title="Quorum", summary="Minimum participation for valid decisions"),
    ],
    contextual_help=[
        ContextualHelp(
            key="low-quorum-warning",
            title="Very Low Quorum",
            content="Below 15% quorum a small fraction of members can decide for everyone.",
            trigger={"quorum": {"lte": 15}},
        ),
        ContextualHelp(
            key="high-participation-weight",
            title="High Participation Weight",
            content="Active members carry much more influence than occasional ones.",
            trigger={"participation_weight": {"gte": 80}},
        ),
    ],
)
