"""
Worker Cooperative — Democratic workplaces owned and governed by their workers.

Defaults lean democratic: workers vouch for workers, a small steward group
coordinates, and every worker votes directly. Variations add participation
weight as the cooperative grows.
"""

from __future__ import annotations

from poa_deployer.governance.philosophy import PhilosophyBand
from poa_deployer.schema.state import Features
from poa_deployer.templates.catalog.common import (
    MEMBER_AND_LEADER_PERMISSIONS,
    direct_voting,
    member_and_leader_roles,
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

WORKER_COOP_TEMPLATE = Template(
    id="worker-coop",
    name="Worker Cooperative",
    tagline="Shared ownership, democratic workplace",
    description=(
        "For worker-owned businesses where every member has an equal voice. "
        "Decisions are made democratically, and all workers share in the "
        "success of the organization."
    ),
    best_for=[
        "Worker-owned businesses",
        "Democratic workplaces",
        "Cooperatives and collectives",
        "Shared ownership ventures",
    ],
    defaults=TemplateDefaults(
        roles=member_and_leader_roles(
            "Worker",
            "Steward",
            member_supply=1000,
            leader_supply=5,
            member_description="Worker-owner with an equal vote",
            leader_description="Coordinates day-to-day operations",
            vouch_quorum=2,
            voucher_index=0,
        ),
        permissions=MEMBER_AND_LEADER_PERMISSIONS,
        voting=direct_voting(50),
        features=Features(election_hub=True),
        philosophy=PhilosophyBand.DEMOCRATIC,
    ),
    discovery_questions=[
        DiscoveryQuestion(
            id="group_size",
            question="How many people will be in your cooperative?",
            options=[
                QuestionOption(value="small", label="2-10 people",
                               impact="Can handle more direct democracy"),
                QuestionOption(value="medium", label="11-50 people",
                               impact="Benefits from clear processes while staying highly democratic"),
                QuestionOption(value="large", label="50+ people",
                               impact="Needs delegation and working groups to function smoothly"),
            ],
        ),
        DiscoveryQuestion(
            id="trust_level",
            question="How well do the founding members know each other?",
            options=[
                QuestionOption(value="high", label="Close friends or long-time colleagues",
                               impact="Can lean more democratic from day one"),
                QuestionOption(value="medium", label="Know each other somewhat",
                               impact="Moderate structure helps build deeper trust"),
                QuestionOption(value="low", label="Just met or new acquaintances",
                               impact="More structure builds trust through consistent process"),
            ],
        ),
        DiscoveryQuestion(
            id="decision_speed",
            question="How quickly do you need to make decisions?",
            options=[
                QuestionOption(value="fast", label="Fast, competitive industry",
                               impact="Delegate routine decisions, reserve voting for big ones"),
                QuestionOption(value="moderate", label="Moderate, some decisions are time-sensitive",
                               impact="Balanced approach with clear escalation paths"),
                QuestionOption(value="slow", label="Deliberative, can take time for consensus",
                               impact="More discussion and broader participation per decision"),
            ],
        ),
    ],
    variations=[
        Variation(
            id="default",
            name="Standard Cooperative",
            settings=split(80, quorum=50),
            reasoning="80/20 gives everyone a strong voice while rewarding active engagement.",
        ),
        Variation(
            id="small-high-trust",
            name="Founding Team",
            match_conditions={"group_size": "small", "trust_level": "high"},
            settings=split(95, quorum=60),
            reasoning="High trust and small numbers support near-pure democracy with broad buy-in.",
        ),
        Variation(
            id="growing-mixed-trust",
            name="Growing Cooperative",
            match_conditions={"group_size": "medium", "trust_level": ["medium", "low"]},
            settings=split(70, quorum=40),
            reasoning="More participation weight adds structure while trust develops.",
        ),
        Variation(
            id="large-enterprise",
            name="Enterprise Cooperative",
            match_conditions={"group_size": "large"},
            settings=split(60, quorum=30),
            reasoning="At scale, engaged members need room to move things forward.",
        ),
        Variation(
            id="fast-paced",
            name="Agile Cooperative",
            match_conditions={"decision_speed": "fast", "group_size": ["small", "medium"]},
            settings=split(70, quorum=35),
            reasoning="Fast environments need efficient routine decisions.",
        ),
    ],
    growth_path=[
        GrowthStage(
            name="Founding",
            timeframe="0-6 months",
            description="Building democratic muscle together",
            settings=split(70),
            milestones=[
                "Complete 10 decisions together through your voting system",
                "Every member has participated in at least one vote",
            ],
        ),
        GrowthStage(
            name="Growing",
            timeframe="6-18 months",
            description="Increasing democracy as trust deepens",
            settings=split(80),
            milestones=["Profit-sharing decided democratically"],
        ),
        GrowthStage(
            name="Mature",
            timeframe="18+ months",
            description="Democracy as second nature",
            settings=split(90),
            milestones=["Organization has survived leadership transitions"],
        ),
    ],
    pitfalls=[
        Pitfall(
            id="democracy-trap",
            name="The 100% Democracy Trap",
            severity=Severity.HIGH,
            description="Jumping to pure democracy before trust and skills are built.",
            prevention=["Start at 70-80% democracy and increase it as the culture matures"],
        ),
        Pitfall(
            id="founder-syndrome",
            name="Founder Syndrome",
            severity=Severity.HIGH,
            description="Founders struggle to let go of control as the cooperative grows.",
            prevention=["Rotate steward roles and hold regular elections"],
        ),
        Pitfall(
            id="meeting-overload",
            name="Meeting Overload",
            severity=Severity.MEDIUM,
            description="Every decision becomes a discussion.",
            prevention=["Delegate routine decisions to working groups"],
        ),
        Pitfall(
            id="free-rider",
            name="Free Rider Problem",
            severity=Severity.MEDIUM,
            description="Some members enjoy the benefits without contributing.",
            prevention=["Keep some participation weight to reward engagement"],
        ),
    ],
    education=[
        EducationConcept(title="Hybrid Voting",
                         summary="Combines equal voice with recognition for active participation"),
        EducationConcept(title="Participation Tokens",
                         summary="Digital record of your contributions and engagement"),
        EducationConcept(title="Quorum", summary="Minimum participation for valid decisions"),
    ],
    contextual_help=[
        ContextualHelp(
            key="high-democracy-warning",
            title="Ready for Pure Democracy?",
            content="Pure democracy works when trust is high and participation is strong.",
            trigger={"democracy_weight": {"gte": 95}},
        ),
        ContextualHelp(
            key="low-democracy-warning",
            title="Is This Still a Cooperative?",
            content="Below 50% democracy weight the model drifts away from democratic member control.",
            trigger={"democracy_weight": {"lte": 50}},
        ),
    ],
)
