"""
Open Source Project — Contributors earn governance power through their work.
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

OPEN_SOURCE_TEMPLATE = Template(
    id="open-source",
    name="Open Source Project",
    tagline="Contributors earn voice through code",
    description=(
        "For open source projects where contributors earn governance power "
        "through their work. Active contributors have more say in project direction."
    ),
    best_for=[
        "Open source software projects",
        "Developer communities",
        "Protocol and standards bodies",
    ],
    defaults=TemplateDefaults(
        roles=member_and_leader_roles(
            "Contributor",
            "Maintainer",
            member_supply=10000,
            leader_supply=20,
            member_description="Anyone contributing code, docs or reviews",
            leader_description="Commit access and release authority",
            vouch_quorum=1,
            voucher_index=1,
        ),
        permissions=permissions_with(taskCreator=[1], ddCreator=[1]),
        voting=hybrid_voting(30, quorum=40),
        features=Features(election_hub=True),
        philosophy=PhilosophyBand.HYBRID,
    ),
    discovery_questions=[
        DiscoveryQuestion(
            id="project_maturity",
            question="How mature is your project?",
            options=[
                QuestionOption(value="new", label="Just getting started",
                               impact="More equal voice attracts early contributors"),
                QuestionOption(value="growing", label="Growing with regular contributors",
                               impact="Balance newcomers with proven contributors"),
                QuestionOption(value="established", label="Established with a track record",
                               impact="Contribution history can carry more weight"),
            ],
        ),
        DiscoveryQuestion(
            id="contributor_count",
            question="How many active contributors do you have?",
            options=[
                QuestionOption(value="small", label="Fewer than 10",
                               impact="Everyone can weigh in directly"),
                QuestionOption(value="medium", label="10-100",
                               impact="Needs clear contribution tracking"),
                QuestionOption(value="large", label="More than 100",
                               impact="Delegation to maintainers becomes essential"),
            ],
        ),
        DiscoveryQuestion(
            id="contribution_types",
            question="What kinds of contributions matter most?",
            options=[
                QuestionOption(value="code_only", label="Mostly code",
                               impact="Code contributions drive governance weight"),
                QuestionOption(value="mixed", label="Code, docs, design and community work",
                               impact="Broader recognition keeps non-code contributors engaged"),
            ],
        ),
    ],
    variations=[
        Variation(
            id="default",
            name="Standard Open Source",
            settings=split(30, quorum=25),
            reasoning="Contribution-weighted voting with an equal-voice floor.",
        ),
        Variation(
            id="early-stage",
            name="Early Stage Project",
            match_conditions={"project_maturity": "new"},
            settings=split(50, quorum=40),
            reasoning="Equal voice matters most while attracting the first contributors.",
        ),
        Variation(
            id="growing-project",
            name="Growing Project",
            match_conditions={"project_maturity": "growing", "contributor_count": "medium"},
            settings=split(35, quorum=30),
            reasoning="Shift toward contribution weight as the contributor base grows.",
        ),
        Variation(
            id="large-established",
            name="Large Established Project",
            match_conditions={"project_maturity": "established", "contributor_count": "large"},
            settings=split(20, quorum=20),
            reasoning="Proven contributors steer; low quorum keeps decisions moving.",
        ),
        Variation(
            id="community-focused",
            name="Community-Focused Project",
            match_conditions={"contribution_types": "mixed"},
            settings=split(40, quorum=30),
            reasoning="More equal voice recognizes non-code contributors.",
        ),
    ],
    growth_path=[
        GrowthStage(name="Bootstrap", timeframe="0-6 months",
                    description="Attract your first contributors", settings=split(50)),
        GrowthStage(name="Building", timeframe="6-18 months",
                    description="Develop contributor culture", settings=split(35)),
        GrowthStage(name="Scaling", timeframe="18+ months",
                    description="Sustainable open source governance", settings=split(25)),
    ],
    pitfalls=[
        Pitfall(id="maintainer-burnout", name="Maintainer Burnout", severity=Severity.HIGH,
                description="A handful of maintainers carry every review and release."),
        Pitfall(id="closed-core", name="Closed Core", severity=Severity.HIGH,
                description="The maintainer group stops admitting new members."),
        Pitfall(id="contribution-counting", name="Contribution Counting", severity=Severity.MEDIUM,
                description="Metrics reward volume over value."),
        Pitfall(id="bus-factor", name="Bus Factor of One", severity=Severity.HIGH,
                description="Critical knowledge lives with a single person."),
    ],
    education=[
        EducationConcept(title="Hybrid Voting for Open Source",
                         summary="Balancing equal contributor voice with earned influence"),
        EducationConcept(title="Contributor Ladder",
                         summary="Clear path from first contribution to maintainer"),
    ],
    contextual_help=[
        ContextualHelp(
            key="high-meritocracy-warning",
            title="Is the Door Still Open?",
            content="Very high participation weight can discourage newcomers.",
            trigger={"participation_weight": {"gte": 85}},
        ),
        ContextualHelp(
            key="new-project-democracy",
            title="Good Choice for Early Stage",
            content="Higher democracy weight helps attract contributors to new projects.",
            trigger={"democracy_weight": {"gte": 60}, "project_maturity": "new"},
        ),
    ],
)
