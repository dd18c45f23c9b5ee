"""
Draft autosave and submission of rater evaluations.

Drafts are saved often (the review form autosaves a few seconds after the
last change). A save runs under a row lock so two saves of the same draft
never overlap, and a save whose content hash matches the stored one is
skipped. Submitting is one-shot: once submitted the row never changes again.
"""
import hashlib
import json
import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from review_app.exceptions import AssessmentClosed, EvaluationLocked
from review_app.models import Evaluation, EvaluationStatus
from review_app.services.category_math import refresh_category_scores, template_score
from review_app.services.review_math import _round2
from review_app.services.score_validation import validate_detailed_scores
from review_app.services.scoring_types import (
    TemplateConfigError, detailed_scores_from_payload, detailed_scores_to_payload,
)

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("review", "strengths", "improvements")


def content_hash(body: dict) -> str:
    canonical = json.dumps(body, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _normalized_body(evaluation: Evaluation, payload: dict, *, strict: bool) -> dict:
    """
    Merge ``payload`` over the stored draft and recompute derived scores.

    Raises ValidationError on malformed or out-of-range scores. ``strict``
    additionally rejects unknown ids and categories the rater does not score.
    """
    template = evaluation.assessment.scoring_template()

    raw_scores = payload.get("detailed_scores", evaluation.detailed_scores)
    try:
        scores = detailed_scores_from_payload(raw_scores)
    except (TemplateConfigError, AttributeError, TypeError) as e:
        raise ValidationError({"detailed_scores": [f"Malformed detailed scores: {e}"]})

    errors = validate_detailed_scores(
        scores, template,
        evaluator_type=evaluation.type if strict else None,
        allow_unknown=not strict,
    )
    if errors:
        raise ValidationError({"detailed_scores": errors})

    scores = refresh_category_scores(scores, template)
    body = {"detailed_scores": detailed_scores_to_payload(scores)}
    for field in TEXT_FIELDS:
        body[field] = payload.get(field, getattr(evaluation, field)) or ""
    body["score"] = _round2(template_score(scores, template))
    return body


def _check_open(evaluation: Evaluation):
    if evaluation.is_submitted:
        raise EvaluationLocked()
    if not evaluation.assessment.is_open_for_scoring:
        raise AssessmentClosed()


def create_draft(assessment, evaluator, evaluatee, evaluator_type: str, payload: dict = None) -> Evaluation:
    if not assessment.is_open_for_scoring:
        raise AssessmentClosed()
    with transaction.atomic():
        evaluation = Evaluation.objects.create(
            assessment=assessment,
            evaluator=evaluator,
            evaluatee=evaluatee,
            type=evaluator_type,
        )
        evaluation, _ = save_draft(evaluation, payload or {})
    logger.info("Draft %s created (%s) for %s", evaluation.pk, evaluator_type, evaluatee.pk)
    return evaluation


def save_draft(evaluation: Evaluation, payload: dict):
    """
    Persist a draft. Returns ``(evaluation, changed)``; ``changed`` is False
    when the content is identical to what is already stored.
    """
    with transaction.atomic():
        evaluation = (Evaluation.objects
                      .select_for_update()
                      .select_related("assessment__template")
                      .get(pk=evaluation.pk))
        _check_open(evaluation)

        body = _normalized_body(evaluation, payload, strict=False)
        new_hash = content_hash(body)
        if new_hash == evaluation.content_hash:
            return evaluation, False

        evaluation.detailed_scores = body["detailed_scores"]
        for field in TEXT_FIELDS:
            setattr(evaluation, field, body[field])
        evaluation.score = body["score"]
        evaluation.content_hash = new_hash
        evaluation.save(update_fields=[
            "detailed_scores", *TEXT_FIELDS, "score", "content_hash", "updated_at",
        ])
    return evaluation, True


def submit_evaluation(evaluation: Evaluation, payload: dict = None) -> Evaluation:
    """
    Validate and freeze an evaluation, then recompute the evaluatee's score.

    Nothing is written if validation fails, so the draft can be fixed and
    submitted again.
    """
    payload = payload or {}
    with transaction.atomic():
        evaluation = (Evaluation.objects
                      .select_for_update()
                      .select_related("assessment__template", "evaluatee")
                      .get(pk=evaluation.pk))
        _check_open(evaluation)

        body = _normalized_body(evaluation, payload, strict=True)
        if not body["detailed_scores"]:
            raise ValidationError({"detailed_scores": ["At least one category must be scored."]})

        evaluation.detailed_scores = body["detailed_scores"]
        for field in TEXT_FIELDS:
            setattr(evaluation, field, body[field])
        evaluation.score = body["score"]
        evaluation.content_hash = content_hash(body)
        evaluation.status = EvaluationStatus.SUBMITTED
        evaluation.submitted_at = timezone.now()
        evaluation.save()  # post_save signal recomputes the participant score

    logger.info("Evaluation %s (%s) submitted", evaluation.pk, evaluation.type)
    return evaluation
