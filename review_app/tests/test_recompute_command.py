import pytest
from decimal import Decimal
from django.core.management import call_command
from django.core.management.base import CommandError

from review_app.models import AssessmentParticipant, Evaluation, EvaluationStatus
from review_app.tests.helpers import scores


@pytest.mark.django_db
class TestRecomputeFinalScores:
    def test_recomputes_stale_scores(self, team, create_assessment):
        employee, leader = team["employee"], team["leader"]
        assessment = create_assessment(participants=[employee])
        # written directly, bypassing the submit flow and its signal
        Evaluation.objects.bulk_create([
            Evaluation(assessment=assessment, evaluator=employee, evaluatee=employee, type="self",
                       status=EvaluationStatus.SUBMITTED,
                       detailed_scores=scores(delivery=(80, 90), teamwork=70)),
            Evaluation(assessment=assessment, evaluator=leader, evaluatee=employee, type="leader",
                       status=EvaluationStatus.SUBMITTED,
                       detailed_scores=scores(delivery=(90, 90), teamwork=80)),
        ])
        participant = AssessmentParticipant.objects.get(assessment=assessment, user=employee)
        assert participant.final_score is None

        call_command("recompute_final_scores", assessment=str(assessment.pk))

        participant.refresh_from_db()
        assert participant.final_score == Decimal("83.20")
        assert participant.is_complete is True

    def test_unknown_assessment(self, db):
        with pytest.raises(CommandError):
            call_command("recompute_final_scores", assessment="00000000-0000-0000-0000-000000000000")
