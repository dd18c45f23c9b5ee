import logging
from decimal import Decimal, ROUND_HALF_UP

from review_app.models import (
    Assessment, AssessmentParticipant, Evaluation, EvaluationStatus,
)
from review_app.services.category_math import template_score
from review_app.services.final_score_math import score_evaluation_set, score_level
from review_app.services.scoring_types import (
    BOSS, LEADER, SELF, EvaluationSet, FinalScoreBreakdown,
    detailed_scores_from_payload,
)

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def _round2(x) -> float:
    """Round to 2 decimal places."""
    return float(Decimal(str(x)).quantize(CENT, rounding=ROUND_HALF_UP))


def _dec2(x):
    if x is None:
        return None
    return Decimal(str(x)).quantize(CENT, rounding=ROUND_HALF_UP)


def evaluation_set_for(assessment: Assessment, evaluatee, *, submitted_only: bool = True) -> EvaluationSet:
    """
    Collect the rater submissions of one employee in one cycle.

    A rater that has not submitted reads as None. With
    ``submitted_only=False`` drafts are included too (admin preview).
    """
    qs = Evaluation.objects.filter(assessment=assessment, evaluatee=evaluatee)
    if submitted_only:
        qs = qs.filter(status=EvaluationStatus.SUBMITTED)

    by_type = {e.type: detailed_scores_from_payload(e.detailed_scores) for e in qs}
    return EvaluationSet(
        self_scores=by_type.get(SELF),
        leader_scores=by_type.get(LEADER),
        boss_scores=by_type.get(BOSS),
    )


def calculate_evaluation_score(evaluation: Evaluation, *, persist: bool = False) -> float:
    """Template score of a single rater's evaluation (0..100, 2dp)."""
    template = evaluation.assessment.scoring_template()
    scores = detailed_scores_from_payload(evaluation.detailed_scores)
    score = _round2(template_score(scores, template))

    if persist:
        Evaluation.objects.filter(pk=evaluation.pk).update(score=score)
        evaluation.score = score
    return score


def calculate_participant_score(
    assessment: Assessment,
    evaluatee,
    *,
    persist: bool = False,
    submitted_only: bool = True,
) -> FinalScoreBreakdown:
    """
    Final score of one employee in one cycle.

    Always scored against the assessment's template snapshot. With
    ``persist=True`` the per-rater and final scores are written to the
    AssessmentParticipant row (created if missing).
    """
    template = assessment.scoring_template()
    breakdown = score_evaluation_set(
        template, evaluation_set_for(assessment, evaluatee, submitted_only=submitted_only)
    )

    if persist:
        rater = breakdown.rater_scores
        AssessmentParticipant.objects.update_or_create(
            assessment=assessment,
            user=evaluatee,
            defaults=dict(
                self_score=_dec2(rater[SELF]),
                leader_score=_dec2(rater[LEADER]),
                boss_score=_dec2(rater[BOSS]),
                final_score=_dec2(breakdown.final_score),
                is_complete=breakdown.is_complete,
            ),
        )
        logger.info(
            "Recomputed score for %s in assessment %s: final=%s complete=%s",
            evaluatee.pk, assessment.pk, breakdown.final_score, breakdown.is_complete,
        )
    return breakdown


def breakdown_to_dict(breakdown: FinalScoreBreakdown) -> dict:
    def _r(x):
        return None if x is None else _round2(x)

    weights = breakdown.weights
    return {
        "final_score": _r(breakdown.final_score),
        "score_level": score_level(breakdown.final_score),
        "is_complete": breakdown.is_complete,
        "missing_raters": breakdown.missing_raters,
        "rater_scores": {k: _r(v) for k, v in breakdown.rater_scores.items()},
        "weights": {
            "self": weights.self_weight,
            "leader": weights.leader_weight,
            "boss": weights.boss_weight,
            "has_boss": weights.has_boss,
        },
        "categories": [
            {
                "category_id": c.category_id,
                "category_name": c.category_name,
                "category_weight": c.category_weight,
                "rater_scores": {k: _r(v) for k, v in c.rater_scores.items()},
                "combined_score": _r(c.combined_score),
            }
            for c in breakdown.categories
        ],
    }
