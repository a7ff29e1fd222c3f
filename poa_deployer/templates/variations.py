"""
Variation Matcher — Pick a template variation from discovery answers.

Each variation lists match conditions: question id → an accepted value or a
set of accepted values. Scoring per condition:

- answered and accepted: +1
- not answered: 0
- answered with anything else: the variation is not a candidate

The highest-scoring candidate wins and ties go to declaration order. When
nothing scores above zero the ``default`` variation (no conditions) wins.

This module also holds the other template-journey lookups: variation
application, growth stage, pitfalls, self-assessment feedback and
contextual help.
"""

from __future__ import annotations

import logging
import operator
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from poa_deployer.governance.philosophy import slider_to_voting
from poa_deployer.schema.state import DeployerState
from poa_deployer.templates.models import (
    DEFAULT_VARIATION_ID,
    AssessmentOption,
    ContextualHelp,
    GrowthStage,
    Pitfall,
    RiskLevel,
    Template,
    Variation,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VariationMatch:
    variation: Variation
    score: int


# ════════════════════════════════════════════════════════════════
# Scoring
# ════════════════════════════════════════════════════════════════


def score_variation(variation: Variation, answers: Mapping[str, str]) -> int | None:
    """
    Score a variation against an answer map.

    Returns:
        Number of satisfied conditions, or None if an answered question
        violates one of the variation's conditions.
    """
    score = 0
    for question_id in variation.match_conditions:
        answer = answers.get(question_id)
        if answer is None:
            continue
        if answer not in variation.accepted_values(question_id):
            return None
        score += 1
    return score


def find_all_matching_variations(
    template: Template, answers: Mapping[str, str]
) -> list[VariationMatch]:
    """Every candidate with a positive score, best first, ties in declaration order."""
    matches: list[VariationMatch] = []
    for variation in template.variations:
        if variation.id == DEFAULT_VARIATION_ID:
            continue
        score = score_variation(variation, answers)
        if score:
            matches.append(VariationMatch(variation=variation, score=score))
    # sorted() is stable, so declaration order survives among equal scores
    return sorted(matches, key=lambda m: m.score, reverse=True)


def match_variation(template: Template, answers: Mapping[str, str]) -> Variation | None:
    """Best variation for the answers; the default when nothing matches."""
    best: Variation | None = None
    best_score = 0
    for variation in template.variations:
        score = score_variation(variation, answers)
        if score is not None and score > best_score:
            best, best_score = variation, score
    if best is None:
        best = template.default_variation
    logger.debug(
        "Matched variation %s for template %s (score %d)",
        best.id if best else None,
        template.id,
        best_score,
    )
    return best


# ════════════════════════════════════════════════════════════════
# Application
# ════════════════════════════════════════════════════════════════


def apply_variation(
    state: DeployerState, template: Template, variation: Variation
) -> DeployerState:
    """
    Overlay a variation's settings onto the template's default voting.

    The voting-class list is regenerated from the resulting democracy weight
    through the philosophy mapper. Roles and permissions are left alone.
    """
    defaults = template.defaults.voting
    patch = variation.settings

    if patch.democracy_weight is not None:
        democracy = patch.democracy_weight
    elif patch.participation_weight is not None:
        democracy = 100 - patch.participation_weight
    else:
        democracy = defaults.democracy_weight

    generated = slider_to_voting(democracy)
    voting = generated.model_copy(
        update={
            "mode": patch.mode or generated.mode,
            "hybrid_quorum": patch.quorum or defaults.hybrid_quorum,
            "dd_quorum": patch.quorum or defaults.dd_quorum,
            "quadratic_enabled": defaults.quadratic_enabled,
        }
    )
    features = patch.features or template.defaults.features
    journey = state.journey.model_copy(update={"matched_variation_id": variation.id})
    return state.model_copy(update={"voting": voting, "features": features, "journey": journey})


# ════════════════════════════════════════════════════════════════
# Growth stages and pitfalls
# ════════════════════════════════════════════════════════════════

_TIMEFRAME = re.compile(r"^\s*(\d+)\s*(?:-\s*(\d+)|(\+))")


def parse_timeframe(timeframe: str) -> tuple[int, int | None] | None:
    """'6-18 months' → (6, 18); '18+ months' → (18, None)."""
    match = _TIMEFRAME.match(timeframe)
    if match is None:
        return None
    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) else None
    return start, end


def current_growth_stage(template: Template, elapsed: int) -> GrowthStage | None:
    """
    The growth stage covering ``elapsed`` units since founding.

    Units are whatever the template's timeframes use (months for most,
    semesters for student organizations). Ranges are half-open.
    """
    for stage in template.growth_path:
        bounds = parse_timeframe(stage.timeframe)
        if bounds is None:
            continue
        start, end = bounds
        if elapsed >= start and (end is None or elapsed < end):
            return stage
    return template.growth_path[-1] if template.growth_path else None


def relevant_pitfalls(template: Template, limit: int | None = None) -> list[Pitfall]:
    """High-severity pitfalls first, otherwise in declaration order."""
    ordered = sorted(template.pitfalls, key=lambda p: not p.is_high_priority)
    return ordered[:limit] if limit is not None else ordered


# ════════════════════════════════════════════════════════════════
# Self-assessment
# ════════════════════════════════════════════════════════════════

_RISK_ORDER = {RiskLevel.LOW: 0, RiskLevel.MEDIUM: 1, RiskLevel.HIGH: 2}


@dataclass
class AssessmentFeedback:
    answers: dict[str, AssessmentOption] = field(default_factory=dict)
    overall_risk: RiskLevel | None = None

    @property
    def should_warn(self) -> bool:
        return self.overall_risk is RiskLevel.HIGH


def self_assessment_feedback(
    template: Template, answers: Mapping[str, str]
) -> AssessmentFeedback:
    """Feedback for each answered self-assessment question; never blocks."""
    feedback = AssessmentFeedback()
    for question in template.self_assessment:
        value = answers.get(question.id)
        option = question.option(value) if value is not None else None
        if option is None:
            continue
        feedback.answers[question.id] = option
        if feedback.overall_risk is None or _RISK_ORDER[option.risk_level] > _RISK_ORDER[feedback.overall_risk]:
            feedback.overall_risk = option.risk_level
    return feedback


# ════════════════════════════════════════════════════════════════
# Contextual help
# ════════════════════════════════════════════════════════════════

_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "gte": operator.ge,
    "lte": operator.le,
    "gt": operator.gt,
    "lt": operator.lt,
    "eq": operator.eq,
    "ne": operator.ne,
}


def condition_holds(actual: Any, expected: Any) -> bool:
    """Evaluate one trigger condition: a literal, a list of literals, or operators."""
    if actual is None:
        return False
    if isinstance(expected, dict):
        for name, operand in expected.items():
            compare = _OPERATORS.get(name)
            if compare is None:
                logger.warning("Unknown trigger operator: %s", name)
                return False
            try:
                if not compare(actual, operand):
                    return False
            except TypeError:
                return False
        return True
    if isinstance(expected, (list, tuple, set)):
        return actual in expected
    return actual == expected


def build_help_context(state: DeployerState, template: Template | None = None) -> dict[str, Any]:
    """Flatten the values help triggers can reference."""
    context: dict[str, Any] = dict(state.journey.discovery_answers)
    context.update(
        democracy_weight=state.voting.democracy_weight,
        participation_weight=state.voting.participation_weight,
        quorum=state.voting.hybrid_quorum,
        education_hub=state.features.education_hub,
        election_hub=state.features.election_hub,
    )
    if template is not None:
        feedback = self_assessment_feedback(template, state.journey.self_assessment_answers)
        if feedback.overall_risk is not None:
            context["self_assessment_risk"] = feedback.overall_risk.value
    return context


def contextual_help(template: Template, context: Mapping[str, Any]) -> list[ContextualHelp]:
    """Help entries whose every trigger condition holds."""
    return [
        entry
        for entry in template.contextual_help
        if all(condition_holds(context.get(key), expected) for key, expected in entry.trigger.items())
    ]
