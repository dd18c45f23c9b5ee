from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from review_app.services.scoring_types import (
    FULL_SCALE, MISSING_TWO_TIER, ResolvedWeights, ScoringRules, SimpleWeighted,
    Template, TemplateConfigError, TwoTierWeighted, WeightValidation,
)


def _d(x) -> Decimal:
    return Decimal(str(x))


def percent_total(weights: Iterable[float], *, scale: float = 1) -> int:
    """
    Sum a group of weights as whole percentage points.

    ``scale`` is 100 for fractions (0.4 + 0.6) and 1 for values that are
    already percentages. The sum is rounded half-up to an integer so that
    0.1 + 0.2 + 0.7 compares equal to 100.
    """
    total = sum((_d(w or 0) * _d(scale) for w in weights), Decimal("0"))
    return int(total.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _rules_errors(rules: ScoringRules) -> list:
    match rules:
        case SimpleWeighted():
            total = percent_total(
                [rules.self_weight, rules.leader_weight, rules.boss_weight], scale=FULL_SCALE)
            if total != FULL_SCALE:
                return [f"Scoring rule weights sum to {total}%, expected 100%"]
            return []
        case TwoTierWeighted():
            if not rules.is_configured:
                return [MISSING_TWO_TIER]
            errors = []
            first = percent_total([rules.employee_leader_weight, rules.boss_weight])
            if first != FULL_SCALE:
                errors.append(f"First-tier weights sum to {first}%, expected 100%")
            second = percent_total([rules.self_weight_within_tier, rules.leader_weight_within_tier])
            if second != FULL_SCALE:
                errors.append(f"Second-tier weights sum to {second}%, expected 100%")
            return errors
    raise TypeError(f"Unsupported scoring rules: {type(rules).__name__}")


def validate_template_weights(template: Template) -> WeightValidation:
    """
    Check every weight partition of a template.

    All violations are collected so the caller can show them together:
    - category weights must sum to 100
    - item weights of each non-empty category must sum to 100
    - rater weights of the scoring rules must sum to 100 (both tiers for two-tier mode);
      the boss weight counts in simple mode whether or not the boss is enabled
    """
    errors = []

    category_total = percent_total(c.weight for c in template.categories)
    if category_total != FULL_SCALE:
        errors.append(f"Category weights sum to {category_total}%, expected 100%")

    for category in template.categories:
        if not category.items:
            continue
        item_total = percent_total(i.weight for i in category.items)
        if item_total != FULL_SCALE:
            errors.append(f'"{category.name}" item weights sum to {item_total}%, expected 100%')

    errors.extend(_rules_errors(template.scoring_rules))
    return WeightValidation(valid=not errors, errors=errors)


def resolve_weights(rules: ScoringRules) -> ResolvedWeights:
    """
    Flatten either scoring mode into three rater fractions.

    Two-tier:  self   = employee_leader% x self_within%
               leader = employee_leader% x leader_within%
               boss   = boss%
    e.g. 80/20 with 60/40 inside the tier gives 0.48 / 0.32 / 0.20.
    """
    match rules:
        case SimpleWeighted():
            boss = rules.boss_weight or 0.0
            has_boss = rules.boss_enabled and boss > 0
            return ResolvedWeights(
                self_weight=rules.self_weight or 0.0,
                leader_weight=rules.leader_weight or 0.0,
                boss_weight=boss if has_boss else 0.0,
                has_boss=has_boss,
            )
        case TwoTierWeighted():
            if not rules.is_configured:
                raise TemplateConfigError(MISSING_TWO_TIER)
            tier = rules.employee_leader_weight
            boss = rules.boss_weight / FULL_SCALE
            return ResolvedWeights(
                self_weight=tier * rules.self_weight_within_tier / (FULL_SCALE * FULL_SCALE),
                leader_weight=tier * rules.leader_weight_within_tier / (FULL_SCALE * FULL_SCALE),
                boss_weight=boss,
                has_boss=boss > 0,
            )
    raise TypeError(f"Unsupported scoring rules: {type(rules).__name__}")
