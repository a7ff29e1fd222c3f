"""
Creative Collective — Artists collaborating as equals.
"""

from __future__ import annotations

from poa_deployer.governance.philosophy import PhilosophyBand
from poa_deployer.schema.state import Features
from poa_deployer.templates.catalog.common import (
    direct_voting,
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

CREATIVE_COLLECTIVE_TEMPLATE = Template(
    id="creative-collective",
    name="Creative Collective",
    tagline="Artists collaborating as equals",
    description=(
        "For artists, designers, and creators working together. Flat hierarchy "
        "with democratic decision-making and shared ownership of creative work."
    ),
    best_for=["Art collectives", "Design studios", "Music and media cooperatives"],
    defaults=TemplateDefaults(
        roles=member_and_leader_roles(
            "Artist",
            "Curator",
            member_supply=100,
            leader_supply=10,
            member_description="Creative member with an equal vote",
            leader_description="Coordinates shows, projects and shared resources",
            vouch_quorum=2,
            voucher_index=0,
        ),
        permissions=permissions_with(
            quickJoin=[],
            tokenApprover=[0, 1],
            educationCreator=[0, 1],
        ),
        voting=direct_voting(60),
        features=Features(),
        philosophy=PhilosophyBand.DEMOCRATIC,
    ),
    discovery_questions=[
        DiscoveryQuestion(
            id="creative_process",
            question="How does your group create work?",
            options=[
                QuestionOption(value="consensus", label="Together, by consensus",
                               impact="Favors high quorum and equal voice"),
                QuestionOption(value="individual", label="Individually, sharing resources",
                               impact="Light collective governance, lots of autonomy"),
                QuestionOption(value="mixed", label="A mix of both",
                               impact="Project-level autonomy with collective oversight"),
            ],
        ),
        DiscoveryQuestion(
            id="conflict_style",
            question="How do you resolve creative disagreements?",
            options=[
                QuestionOption(value="discussion", label="Talk it through until we agree",
                               impact="Consensus-oriented settings"),
                QuestionOption(value="vote", label="Put it to a vote",
                               impact="Standard democratic voting"),
                QuestionOption(value="defer", label="Defer to the project lead",
                               impact="Project-based delegation"),
            ],
        ),
        DiscoveryQuestion(
            id="collective_size",
            question="How many members are in the collective?",
            options=[
                QuestionOption(value="small", label="2-8 members", impact="Everyone in every decision"),
                QuestionOption(value="medium", label="9-25 members", impact="Some structure helps"),
                QuestionOption(value="large", label="25+ members", impact="Lower quorum keeps things moving"),
            ],
        ),
    ],
    variations=[
        Variation(
            id="default",
            name="Balanced Collective",
            settings=split(90, quorum=50),
            reasoning="Nearly equal votes with small recognition for collective work.",
        ),
        Variation(
            id="consensus-focused",
            name="Consensus Collective",
            match_conditions={"creative_process": "consensus", "conflict_style": "discussion"},
            settings=split(100, quorum=80),
            reasoning="Pure democracy and high quorum for groups that decide together.",
        ),
        Variation(
            id="autonomous-artists",
            name="Autonomous Artists",
            match_conditions={"creative_process": "individual"},
            settings=split(95, quorum=40),
            reasoning="Light governance over shared resources, creative work stays individual.",
        ),
        Variation(
            id="project-based",
            name="Project-Based Collective",
            match_conditions={"conflict_style": "defer", "creative_process": "mixed"},
            settings=split(85, quorum=35),
            reasoning="Project leads decide day to day; the collective sets direction.",
        ),
        Variation(
            id="large-collective",
            name="Large Collective",
            match_conditions={"collective_size": "large"},
            settings=split(85, quorum=35),
            reasoning="Lower quorum keeps a large collective from stalling.",
        ),
    ],
    growth_path=[
        GrowthStage(name="Forming", timeframe="0-6 months",
                    description="Finding your collective identity", settings=split(90)),
        GrowthStage(name="Establishing", timeframe="6-18 months",
                    description="Building sustainable practices", settings=split(90)),
        GrowthStage(name="Flourishing", timeframe="18+ months",
                    description="The collective as creative infrastructure", settings=split(90)),
    ],
    pitfalls=[
        Pitfall(id="consensus-paralysis", name="Consensus Paralysis", severity=Severity.HIGH,
                description="Waiting for full agreement stalls every decision."),
        Pitfall(id="ego-clash", name="Creative Ego Clash", severity=Severity.HIGH,
                description="Disputes over artistic direction turn personal."),
        Pitfall(id="invisible-hierarchy", name="Invisible Hierarchy", severity=Severity.MEDIUM,
                description="Informal leaders emerge without accountability."),
        Pitfall(id="money-silence", name="Money Silence", severity=Severity.MEDIUM,
                description="Nobody wants to talk about revenue sharing."),
    ],
    education=[
        EducationConcept(title="Creative Autonomy",
                         summary="Individual control over your own creative work"),
        EducationConcept(title="Collective Infrastructure",
                         summary="Shared resources and support systems"),
    ],
    contextual_help=[
        ContextualHelp(
            key="pure-democracy",
            title="Pure Democracy",
            content="Every voice counts equally; keep quorum achievable.",
            trigger={"democracy_weight": {"gte": 100}},
        ),
        ContextualHelp(
            key="high-quorum-warning",
            title="High Quorum",
            content="80%+ quorum means almost everyone must take part for decisions to count.",
            trigger={"quorum": {"gte": 80}},
        ),
    ],
)
