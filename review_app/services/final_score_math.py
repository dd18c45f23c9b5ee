from typing import Optional

from review_app.services.category_math import category_scores, template_score
from review_app.services.scoring_types import (
    BOSS, EVALUATOR_TYPES, LEADER, SELF, CategoryBreakdown, EvaluationSet,
    FinalScoreBreakdown, ResolvedWeights, Template,
)
from review_app.services.weight_math import resolve_weights


def final_score(
    self_score: Optional[float],
    leader_score: Optional[float],
    boss_score: Optional[float],
    weights: ResolvedWeights,
) -> float:
    """
    Combine one score per rater into a single number.

    Only raters with a score take part, and the result is divided by the
    weight actually used: self 80 / leader 90 with boss pending is the
    self/leader weighted average, not an average with a zero for boss.

    Returns 0 when nobody has scored. That 0 is indistinguishable from a
    real zero; callers that care must track which raters submitted.
    """
    total_score = 0.0
    total_weight = 0.0

    if self_score is not None:
        total_score += self_score * weights.self_weight
        total_weight += weights.self_weight

    if leader_score is not None:
        total_score += leader_score * weights.leader_weight
        total_weight += weights.leader_weight

    if boss_score is not None and weights.boss_weight > 0:
        total_score += boss_score * weights.boss_weight
        total_weight += weights.boss_weight

    if total_weight <= 0:
        return 0.0
    return total_score / total_weight


def required_raters(weights: ResolvedWeights) -> list:
    """Rater types whose submission carries weight in the final score."""
    return [t for t in EVALUATOR_TYPES if weights.for_rater(t) > 0]


def score_evaluation_set(template: Template, evaluation_set: EvaluationSet) -> FinalScoreBreakdown:
    """
    Score every rater of one employee and combine them.

    When a required rater has not submitted, the set is incomplete: the
    final score is None unless the template allows partial aggregation, in
    which case the renormalized score of the present raters is returned.
    """
    weights = resolve_weights(template.scoring_rules)

    rater_scores = {}
    per_rater_categories = {}
    for rater in EVALUATOR_TYPES:
        scores = evaluation_set.for_rater(rater)
        if scores is None:
            rater_scores[rater] = None
            per_rater_categories[rater] = {}
            continue
        rater_scores[rater] = template_score(scores, template)
        per_rater_categories[rater] = category_scores(scores, template)

    categories = []
    for category in template.categories:
        by_rater = {r: per_rater_categories[r].get(category.id) for r in EVALUATOR_TYPES}
        categories.append(CategoryBreakdown(
            category_id=category.id,
            category_name=category.name,
            category_weight=category.weight,
            rater_scores=by_rater,
            combined_score=final_score(by_rater[SELF], by_rater[LEADER], by_rater[BOSS], weights),
        ))

    missing = [r for r in required_raters(weights) if rater_scores[r] is None]
    is_complete = not missing

    combined = None
    if is_complete or template.allow_partial_aggregation:
        combined = final_score(rater_scores[SELF], rater_scores[LEADER], rater_scores[BOSS], weights)

    return FinalScoreBreakdown(
        weights=weights,
        rater_scores=rater_scores,
        categories=categories,
        missing_raters=missing,
        is_complete=is_complete,
        final_score=combined,
    )


def score_level(score: Optional[float]) -> str:
    if score is None:
        return ""
    if score >= 90:
        return "Excellent"
    if score >= 80:
        return "Good"
    if score >= 70:
        return "Qualified"
    return "Needs improvement"
