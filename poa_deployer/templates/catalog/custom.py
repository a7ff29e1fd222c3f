"""
Custom — Design governance from scratch.

Minimal defaults and no variations beyond ``default``. A self-assessment
surfaces risk warnings to people who may be better served by a template.
"""

from __future__ import annotations

from poa_deployer.governance.philosophy import PhilosophyBand
from poa_deployer.schema.state import Features
from poa_deployer.templates.catalog.common import (
    MEMBER_AND_LEADER_PERMISSIONS,
    direct_voting,
    member_and_leader_roles,
)
from poa_deployer.templates.models import (
    AssessmentOption,
    ContextualHelp,
    DiscoveryQuestion,
    EducationConcept,
    Pitfall,
    QuestionOption,
    RiskLevel,
    SelfAssessmentQuestion,
    Severity,
    Template,
    TemplateDefaults,
    Variation,
)

CUSTOM_TEMPLATE = Template(
    id="custom",
    name="Custom",
    tagline="Design from scratch",
    description=(
        "Build your organization exactly how you want it. Start with minimal "
        "defaults and configure everything yourself."
    ),
    best_for=["Experienced governance designers", "Organizations that fit no template"],
    defaults=TemplateDefaults(
        roles=member_and_leader_roles("Member", "Admin", member_supply=1000, leader_supply=10),
        permissions=MEMBER_AND_LEADER_PERMISSIONS,
        voting=direct_voting(50),
        features=Features(),
        philosophy=PhilosophyBand.DEMOCRATIC,
    ),
    self_assessment=[
        SelfAssessmentQuestion(
            id="why_custom",
            question="Why are you choosing custom governance?",
            options=[
                AssessmentOption(
                    value="unique",
                    label="Our organization is genuinely unique",
                    feedback="Custom may be appropriate. Consider what makes you unique.",
                    risk_level=RiskLevel.LOW,
                ),
                AssessmentOption(
                    value="control",
                    label="I want full control over every setting",
                    feedback="Templates can be customized too.",
                    risk_level=RiskLevel.MEDIUM,
                ),
                AssessmentOption(
                    value="learning",
                    label="I want to learn how governance works by building it",
                    feedback="Learning experiments can be forked later if they don't work.",
                    risk_level=RiskLevel.MEDIUM,
                ),
                AssessmentOption(
                    value="unsure",
                    label="Not sure, none of the templates seemed right",
                    feedback="Consider looking at templates again; they are flexible.",
                    risk_level=RiskLevel.HIGH,
                ),
            ],
        ),
        SelfAssessmentQuestion(
            id="experience_level",
            question="How much experience do you have with governance design?",
            options=[
                AssessmentOption(
                    value="expert",
                    label="Expert",
                    feedback="You likely know the tradeoffs. Trust your experience.",
                    risk_level=RiskLevel.LOW,
                ),
                AssessmentOption(
                    value="moderate",
                    label="Moderate",
                    feedback="Start with simpler governance and evolve.",
                    risk_level=RiskLevel.MEDIUM,
                ),
                AssessmentOption(
                    value="beginner",
                    label="Beginner",
                    feedback="Strongly consider starting with a template and customizing.",
                    risk_level=RiskLevel.HIGH,
                ),
            ],
        ),
        SelfAssessmentQuestion(
            id="studied_similar",
            question="Have you studied similar organizations?",
            options=[
                AssessmentOption(
                    value="yes_deeply",
                    label="Yes, several",
                    feedback="Excellent. Apply what you've learned.",
                    risk_level=RiskLevel.LOW,
                ),
                AssessmentOption(
                    value="somewhat",
                    label="Somewhat",
                    feedback="Consider spending more time researching before finalizing.",
                    risk_level=RiskLevel.MEDIUM,
                ),
                AssessmentOption(
                    value="no",
                    label="No, I'm building something new",
                    feedback="Study at least 3 similar organizations before proceeding.",
                    risk_level=RiskLevel.HIGH,
                ),
            ],
        ),
    ],
    discovery_questions=[
        DiscoveryQuestion(
            id="governance_style",
            question="What's your preferred decision-making style?",
            options=[
                QuestionOption(value="democratic", label="Every member has equal say"),
                QuestionOption(value="meritocratic", label="Influence earned through contribution"),
                QuestionOption(value="balanced", label="Mix of equal voice and earned influence"),
                QuestionOption(value="hierarchical", label="Leaders decide with input from members"),
            ],
        ),
        DiscoveryQuestion(
            id="decision_frequency",
            question="How often will your organization make collective decisions?",
            options=[
                QuestionOption(value="frequent", label="Multiple decisions per week"),
                QuestionOption(value="moderate", label="A few decisions per month"),
                QuestionOption(value="rare", label="Only major decisions come to vote"),
            ],
        ),
        DiscoveryQuestion(
            id="member_commitment",
            question="What level of commitment do you expect from members?",
            options=[
                QuestionOption(value="high", label="Members are deeply committed"),
                QuestionOption(value="medium", label="Engaged but with other priorities"),
                QuestionOption(value="low", label="Casual membership, variable engagement"),
            ],
        ),
    ],
    variations=[
        Variation(
            id="default",
            name="Custom Configuration",
            reasoning="Start from the minimal defaults and adjust every setting yourself.",
        ),
    ],
    pitfalls=[
        Pitfall(id="complexity-trap", name="Complexity Trap", severity=Severity.HIGH,
                description="Designing more rules than members can follow."),
        Pitfall(id="untested-assumptions", name="Untested Assumptions", severity=Severity.HIGH,
                description="Governance built on guesses about how members behave."),
        Pitfall(id="reinventing-the-wheel", name="Reinventing the Wheel", severity=Severity.MEDIUM,
                description="Re-solving problems existing models already handle."),
        Pitfall(id="specification-creep", name="Specification Creep", severity=Severity.MEDIUM,
                description="Endless refinement that never ships."),
    ],
    education=[
        EducationConcept(title="Minimum Viable Governance",
                         summary="Start with the simplest governance that could work"),
        EducationConcept(title="Governance Iteration",
                         summary="Evolving governance based on experience"),
    ],
    contextual_help=[
        ContextualHelp(
            key="high-risk-warning",
            title="Consider Starting with a Template",
            content="Custom governance may be harder than expected; a template is a proven foundation.",
            trigger={"self_assessment_risk": "high"},
        ),
    ],
)
