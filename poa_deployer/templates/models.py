"""
Template Models — Declarative records describing an organization template.

A template seeds the wizard with default roles, permissions, voting and
feature flags, then refines them through discovery questions and
variations. Growth stages, pitfalls, education and contextual help are
informational: the core carries them to the UI but never acts on them,
except for the lookups in ``poa_deployer.templates.variations``.
"""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, Field

from poa_deployer.governance.philosophy import PhilosophyBand
from poa_deployer.schema.state import (
    Features,
    PermissionKey,
    Role,
    VotingConfig,
    VotingMode,
    empty_permissions,
)

DEFAULT_VARIATION_ID = "default"


class RiskLevel(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Severity(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# ════════════════════════════════════════════════════════════════
# Questions
# ════════════════════════════════════════════════════════════════


class QuestionOption(BaseModel):
    value: str
    label: str
    impact: str = ""


class DiscoveryQuestion(BaseModel):
    id: str
    question: str
    options: list[QuestionOption] = Field(default_factory=list)

    def option(self, value: str) -> QuestionOption | None:
        return next((o for o in self.options if o.value == value), None)


class AssessmentOption(BaseModel):
    value: str
    label: str
    feedback: str = ""
    risk_level: RiskLevel = RiskLevel.LOW


class SelfAssessmentQuestion(BaseModel):
    id: str
    question: str
    options: list[AssessmentOption] = Field(default_factory=list)

    def option(self, value: str) -> AssessmentOption | None:
        return next((o for o in self.options if o.value == value), None)


# ════════════════════════════════════════════════════════════════
# Variations
# ════════════════════════════════════════════════════════════════


class VariationSettings(BaseModel):
    """Patch overlaid on a template's default voting and features."""

    democracy_weight: int | None = Field(default=None, ge=0, le=100)
    participation_weight: int | None = Field(default=None, ge=0, le=100)
    quorum: int | None = Field(default=None, ge=1, le=100)
    mode: VotingMode | None = None
    features: Features | None = None


class Variation(BaseModel):
    id: str
    name: str
    description: str = ""
    match_conditions: dict[str, str | list[str]] = Field(
        default_factory=dict,
        description="Question id → accepted value or values",
    )
    settings: VariationSettings = Field(default_factory=VariationSettings)
    reasoning: str = ""

    def accepted_values(self, question_id: str) -> set[str]:
        condition = self.match_conditions.get(question_id)
        if condition is None:
            return set()
        if isinstance(condition, str):
            return {condition}
        return set(condition)


# ════════════════════════════════════════════════════════════════
# Informational payloads
# ════════════════════════════════════════════════════════════════


class GrowthStage(BaseModel):
    name: str
    timeframe: str = Field(description="e.g. '0-6 months' or '18+ months'")
    description: str = ""
    settings: VariationSettings | None = None
    milestones: list[str] = Field(default_factory=list)


class Pitfall(BaseModel):
    id: str
    name: str
    severity: Severity = Severity.MEDIUM
    description: str = ""
    prevention: list[str] = Field(default_factory=list)

    @property
    def is_high_priority(self) -> bool:
        return self.severity is Severity.HIGH


class EducationConcept(BaseModel):
    title: str
    summary: str


class ContextualHelp(BaseModel):
    """Help shown when every trigger condition holds for the current answers."""

    key: str
    title: str
    content: str
    trigger: dict[str, Any] = Field(default_factory=dict)


# ════════════════════════════════════════════════════════════════
# Template
# ════════════════════════════════════════════════════════════════


class TemplateDefaults(BaseModel):
    roles: list[Role] = Field(default_factory=list)
    permissions: dict[PermissionKey, list[int]] = Field(default_factory=empty_permissions)
    voting: VotingConfig = Field(default_factory=VotingConfig)
    features: Features = Field(default_factory=Features)
    philosophy: PhilosophyBand = PhilosophyBand.HYBRID


class Template(BaseModel):
    id: str
    name: str
    tagline: str = ""
    description: str = ""
    best_for: list[str] = Field(default_factory=list)
    defaults: TemplateDefaults = Field(default_factory=TemplateDefaults)
    discovery_questions: list[DiscoveryQuestion] = Field(default_factory=list)
    self_assessment: list[SelfAssessmentQuestion] = Field(default_factory=list)
    variations: list[Variation] = Field(default_factory=list)
    growth_path: list[GrowthStage] = Field(default_factory=list)
    pitfalls: list[Pitfall] = Field(default_factory=list)
    education: list[EducationConcept] = Field(default_factory=list)
    contextual_help: list[ContextualHelp] = Field(default_factory=list)

    def get_variation(self, variation_id: str | None) -> Variation | None:
        if variation_id is None:
            return None
        return next((v for v in self.variations if v.id == variation_id), None)

    @property
    def default_variation(self) -> Variation | None:
        return self.get_variation(DEFAULT_VARIATION_ID)
