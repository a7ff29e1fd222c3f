"""
Student Organization — Democratic clubs run by students, for students.

Executives handle day-to-day operations while members vote on important
decisions. The education hub and elections are on by default because
membership turns over every year.
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

STUDENT_ORG_TEMPLATE = Template(
    id="student-org",
    name="Student Organization",
    tagline="Democratic clubs run by students, for students",
    description=(
        "For student clubs, academic societies, and campus groups. Executives "
        "handle day-to-day operations while members vote on important decisions."
    ),
    best_for=["Student clubs", "Academic societies", "Campus advocacy groups"],
    defaults=TemplateDefaults(
        roles=member_and_leader_roles(
            "Member",
            "Executive",
            member_supply=1000,
            leader_supply=10,
            member_description="Student member with a vote",
            leader_description="Elected executive board member",
            vouch_quorum=1,
            voucher_index=1,
        ),
        permissions=permissions_with(taskCreator=[1], ddCreator=[1]),
        voting=hybrid_voting(50, quorum=50),
        features=Features(education_hub=True, election_hub=True),
        philosophy=PhilosophyBand.HYBRID,
    ),
    discovery_questions=[
        DiscoveryQuestion(
            id="org_purpose",
            question="What is your organization's main purpose?",
            options=[
                QuestionOption(value="social", label="Social club",
                               impact="Equal voice keeps everyone included"),
                QuestionOption(value="academic", label="Academic society",
                               impact="Balanced settings work well"),
                QuestionOption(value="service", label="Service organization",
                               impact="Reward members who show up for service"),
                QuestionOption(value="advocacy", label="Advocacy or student government",
                               impact="Elections and accountability matter most"),
            ],
        ),
        DiscoveryQuestion(
            id="member_turnover",
            question="How often does your membership change?",
            options=[
                QuestionOption(value="high", label="Most members leave within a year",
                               impact="Onboarding and education become essential"),
                QuestionOption(value="moderate", label="Members stay two or three years",
                               impact="Standard settings"),
                QuestionOption(value="low", label="Members stay for their whole degree",
                               impact="Culture can build over time"),
            ],
        ),
        DiscoveryQuestion(
            id="org_size",
            question="How many members do you have?",
            options=[
                QuestionOption(value="small", label="Under 20", impact="Everyone can vote on everything"),
                QuestionOption(value="medium", label="20-100", impact="Executives handle routine work"),
                QuestionOption(value="large", label="Over 100", impact="Lower quorum keeps votes valid"),
            ],
        ),
    ],
    variations=[
        Variation(
            id="default",
            name="Standard Student Org",
            settings=split(50, quorum=35),
            reasoning="Equal membership plus earned influence, real-world governance practice.",
        ),
        Variation(
            id="social-club",
            name="Social Club",
            match_conditions={"org_purpose": "social"},
            settings=split(70, quorum=25),
            reasoning="Social clubs thrive when everyone feels equally included.",
        ),
        Variation(
            id="student-government",
            name="Student Government",
            match_conditions={"org_purpose": "advocacy"},
            settings=split(
                60, quorum=40, features=Features(education_hub=True, election_hub=True)
            ),
            reasoning="Accountability through elections and an informed membership.",
        ),
        Variation(
            id="service-org",
            name="Service Organization",
            match_conditions={"org_purpose": "service"},
            settings=split(50, quorum=30),
            reasoning="Service hours earn influence alongside equal membership.",
        ),
        Variation(
            id="high-turnover",
            name="High Turnover Org",
            match_conditions={"member_turnover": "high"},
            settings=split(60, quorum=30, features=Features(education_hub=True, election_hub=True)),
            reasoning="New members every year need onboarding and an achievable quorum.",
        ),
        Variation(
            id="large-org",
            name="Large Organization",
            match_conditions={"org_size": "large"},
            settings=split(50, quorum=25),
            reasoning="Lower quorum keeps decisions valid in a large membership.",
        ),
    ],
    growth_path=[
        GrowthStage(name="Founding", timeframe="0-1 semester",
                    description="Establishing your organization", settings=split(50)),
        GrowthStage(name="Establishing", timeframe="1-3 semesters",
                    description="Building sustainable practices", settings=split(50)),
        GrowthStage(name="Thriving", timeframe="3+ semesters",
                    description="Sustainable student organization", settings=split(50)),
    ],
    pitfalls=[
        Pitfall(id="founder-departure", name="Founder Departure", severity=Severity.HIGH,
                description="The organization collapses when founding members graduate."),
        Pitfall(id="apathy-spiral", name="Apathy Spiral", severity=Severity.HIGH,
                description="Low engagement begets lower engagement."),
        Pitfall(id="resume-stuffing", name="Resume Stuffing", severity=Severity.MEDIUM,
                description="Members join for credentials, not engagement."),
        Pitfall(id="drama-escalation", name="Drama Escalation", severity=Severity.MEDIUM,
                description="Interpersonal conflict spills into governance."),
    ],
    education=[
        EducationConcept(title="Elections", summary="How leaders are chosen democratically"),
        EducationConcept(title="Executive Board",
                         summary="Elected leaders who coordinate the organization"),
        EducationConcept(title="Vouching", summary="Existing members sponsoring new members"),
    ],
    contextual_help=[
        ContextualHelp(
            key="education-hub",
            title="Education Hub Enabled",
            content="Create onboarding content about your mission, processes and expectations.",
            trigger={"education_hub": True},
        ),
        ContextualHelp(
            key="elections-enabled",
            title="Elections Enabled",
            content="Consider term limits and a regular election schedule.",
            trigger={"election_hub": True},
        ),
    ],
)
