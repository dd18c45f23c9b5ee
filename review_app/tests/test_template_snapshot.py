import pytest
from decimal import Decimal
from django.core.exceptions import ValidationError

from review_app.models import AssessmentStatus
from review_app.services.assessment_service import (
    assessment_status, end_assessment, publish_assessment,
)
from review_app.services.draft_service import create_draft, submit_evaluation
from review_app.services.review_math import calculate_evaluation_score, calculate_participant_score
from review_app.tests.helpers import scores


@pytest.mark.django_db
class TestTemplateSnapshot:
    def test_publish_copies_template_config(self, team, create_assessment):
        assessment = create_assessment(participants=[team["employee"]])

        assert assessment.status == AssessmentStatus.ACTIVE
        assert assessment.published_at is not None
        assert assessment.template_snapshot == assessment.template.config

    def test_scores_unchanged_when_template_edited_later(self, team, create_assessment):
        employee = team["employee"]
        assessment = create_assessment(participants=[employee])
        evaluation = create_draft(assessment, employee, employee, "self",
                                  {"detailed_scores": scores(delivery=(80, 90), teamwork=70)})
        initial = calculate_evaluation_score(evaluation, persist=True)

        # edit the live template AFTER the cycle was published
        template = assessment.template
        template.config["categories"][0]["weight"] = 50
        template.config["categories"][1]["weight"] = 50
        template.save()

        assessment.refresh_from_db()
        evaluation.refresh_from_db()
        assert calculate_evaluation_score(evaluation) == initial == 79.0

    def test_participant_score_uses_snapshot(self, team, create_assessment):
        employee, leader = team["employee"], team["leader"]
        assessment = create_assessment(participants=[employee])
        submit_evaluation(create_draft(assessment, employee, employee, "self",
                                       {"detailed_scores": scores(delivery=(80, 90), teamwork=70)}))
        submit_evaluation(create_draft(assessment, leader, employee, "leader",
                                       {"detailed_scores": scores(delivery=(90, 90), teamwork=80)}))

        template = assessment.template
        template.config["scoring_rules"]["self_evaluation"]["weight_in_final"] = 0.9
        template.config["scoring_rules"]["leader_evaluation"]["weight_in_final"] = 0.1
        template.save()

        assessment.refresh_from_db()
        breakdown = calculate_participant_score(assessment, employee, persist=True)
        assert breakdown.final_score == pytest.approx(83.2)
        assert assessment.participant_set.get().final_score == Decimal("83.20")


@pytest.mark.django_db
class TestAssessmentLifecycle:
    def test_publish_rejects_invalid_weights(self, team, create_template, create_assessment, template_config):
        config = template_config()
        config["categories"][0]["weight"] = 55
        assessment = create_assessment(
            participants=[team["employee"]], publish=False,
            template=create_template(config=config),
        )

        with pytest.raises(ValidationError) as exc:
            publish_assessment(assessment)
        assert exc.value.message_dict["template"] == ["Category weights sum to 95%, expected 100%"]
        assessment.refresh_from_db()
        assert assessment.status == AssessmentStatus.DRAFT
        assert assessment.template_snapshot is None

    def test_publish_requires_participants(self, create_assessment):
        assessment = create_assessment(publish=False)
        with pytest.raises(ValidationError):
            publish_assessment(assessment)

    def test_publish_twice_is_rejected(self, team, create_assessment):
        assessment = create_assessment(participants=[team["employee"]])
        with pytest.raises(ValidationError):
            publish_assessment(assessment)

    def test_status_reports_whether_scoring_is_open(self, team, create_assessment):
        assessment = create_assessment(participants=[team["employee"]])
        assert assessment_status(assessment)["can_evaluate"] is True

        end_assessment(assessment)
        status = assessment_status(assessment)
        assert status["can_evaluate"] is False
        assert status["is_ended"] is True
        assert "message" in status
