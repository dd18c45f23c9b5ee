import copy
import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from review_app.models import Assessment, AssessmentStatus
from review_app.services.scoring_types import TemplateConfigError, template_from_config
from review_app.services.weight_math import validate_template_weights

logger = logging.getLogger(__name__)


def template_config_errors(config) -> list:
    """Every problem that keeps a config from being scored; [] when usable."""
    try:
        template = template_from_config(config, complete=False)
    except TemplateConfigError as e:
        return [str(e)]
    return validate_template_weights(template).errors


def publish_assessment(assessment: Assessment) -> Assessment:
    """
    Open an assessment for scoring.

    The template config is validated and copied into ``template_snapshot``;
    from here on the assessment is scored against that copy only, however
    the live template is edited later.
    """
    if assessment.status != AssessmentStatus.DRAFT:
        raise ValidationError(f"Only draft assessments can be published (status: {assessment.status}).")

    errors = template_config_errors(assessment.template.config)
    if errors:
        raise ValidationError({"template": errors})

    if not assessment.participant_set.exists():
        raise ValidationError({"participants": ["An assessment needs at least one participant."]})

    with transaction.atomic():
        assessment.template_snapshot = copy.deepcopy(assessment.template.config)
        assessment.status = AssessmentStatus.ACTIVE
        assessment.published_at = timezone.now()
        assessment.save(update_fields=["template_snapshot", "status", "published_at", "updated_at"])

    logger.info("Assessment %s published with template %s", assessment.pk, assessment.template_id)
    return assessment


def end_assessment(assessment: Assessment) -> Assessment:
    if assessment.status != AssessmentStatus.ACTIVE:
        raise ValidationError(f"Only active assessments can be ended (status: {assessment.status}).")
    assessment.status = AssessmentStatus.ENDED
    assessment.save(update_fields=["status", "updated_at"])
    logger.info("Assessment %s ended", assessment.pk)
    return assessment


def assessment_status(assessment: Assessment) -> dict:
    is_ended = assessment.status in (AssessmentStatus.COMPLETED, AssessmentStatus.ENDED)
    result = {
        "can_evaluate": assessment.is_open_for_scoring,
        "status": assessment.status,
        "is_ended": is_ended,
    }
    if is_ended:
        result["message"] = "This assessment has ended; results are read-only."
    elif not assessment.is_open_for_scoring:
        result["message"] = "This assessment has not been published yet."
    return result
