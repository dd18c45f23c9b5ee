import pytest
from django.urls import reverse

from review_app.models import Evaluation, EvaluationStatus
from review_app.services.draft_service import create_draft, submit_evaluation
from review_app.tests.helpers import scores


@pytest.fixture
def cycle(team, create_assessment):
    return create_assessment(participants=[team["employee"]])


@pytest.mark.django_db
class TestDraftEndpoints:
    def test_employee_starts_self_draft(self, api_client, team, cycle):
        employee = team["employee"]
        api_client.force_authenticate(user=employee)

        res = api_client.post(reverse("evaluation-start-draft"), {
            "assessment_id": str(cycle.pk),
            "type": "self",
            "detailed_scores": scores(delivery=(80, 90), teamwork=70),
        }, format="json")

        assert res.status_code == 201
        assert res.data["type"] == "Self"
        assert res.data["status"] == "Draft"
        assert res.data["evaluatee_id"] == str(employee.user_id)
        assert float(res.data["score"]) == 79.0
        assert res.data["autosave_delay"] == 3

    def test_only_direct_leader_can_start_leader_review(self, api_client, team, create_user, cycle):
        peer = create_user(role="LEADER")
        api_client.force_authenticate(user=peer)

        res = api_client.post(reverse("evaluation-start-draft"), {
            "assessment_id": str(cycle.pk),
            "type": "leader",
            "evaluatee_id": str(team["employee"].pk),
        }, format="json")

        assert res.status_code == 403
        assert not Evaluation.objects.exists()

    def test_evaluatee_must_be_participant(self, api_client, create_user, cycle):
        outsider = create_user(role="EMP")
        api_client.force_authenticate(user=outsider)

        res = api_client.post(reverse("evaluation-start-draft"), {
            "assessment_id": str(cycle.pk), "type": "self",
        }, format="json")

        assert res.status_code == 400
        assert "evaluatee_id" in res.data

    def test_second_draft_of_same_type_is_rejected(self, api_client, team, cycle):
        employee = team["employee"]
        create_draft(cycle, employee, employee, "self")
        api_client.force_authenticate(user=employee)

        res = api_client.post(reverse("evaluation-start-draft"), {
            "assessment_id": str(cycle.pk), "type": "self",
        }, format="json")

        assert res.status_code == 400
        assert "type" in res.data

    def test_autosave_reports_whether_anything_changed(self, api_client, team, cycle):
        employee = team["employee"]
        evaluation = create_draft(cycle, employee, employee, "self")
        api_client.force_authenticate(user=employee)
        url = reverse("evaluation-autosave-draft", args=[evaluation.pk])
        body = {"detailed_scores": scores(delivery=(80, 90)), "review": "first pass"}

        first = api_client.put(url, body, format="json")
        second = api_client.put(url, body, format="json")

        assert first.status_code == 200
        assert first.data["changed"] is True
        assert second.data["changed"] is False
        assert float(second.data["evaluation"]["score"]) == 85.0

    def test_autosave_rejects_out_of_range_score(self, api_client, team, cycle):
        employee = team["employee"]
        evaluation = create_draft(cycle, employee, employee, "self")
        api_client.force_authenticate(user=employee)

        res = api_client.put(reverse("evaluation-autosave-draft", args=[evaluation.pk]),
                             {"detailed_scores": scores(delivery=(80, 101))}, format="json")

        assert res.status_code == 400
        assert res.data["detailed_scores"] == ['Score for "Speed" must be between 0 and 100, got 101']

    def test_other_users_cannot_touch_a_draft(self, api_client, team, create_user, cycle):
        employee = team["employee"]
        evaluation = create_draft(cycle, employee, employee, "self")
        api_client.force_authenticate(user=create_user(role="EMP"))

        res = api_client.put(reverse("evaluation-autosave-draft", args=[evaluation.pk]),
                             {"review": "hijack"}, format="json")

        assert res.status_code in (403, 404)

    def test_submit_then_locked(self, api_client, team, cycle):
        employee = team["employee"]
        evaluation = create_draft(cycle, employee, employee, "self",
                                  {"detailed_scores": scores(delivery=(80, 90), teamwork=70)})
        api_client.force_authenticate(user=employee)

        res = api_client.post(reverse("evaluation-submit", args=[evaluation.pk]), {}, format="json")
        assert res.status_code == 200
        assert res.data["status"] == "Submitted"

        again = api_client.put(reverse("evaluation-autosave-draft", args=[evaluation.pk]),
                               {"review": "edit"}, format="json")
        assert again.status_code == 409
        assert Evaluation.objects.get(pk=evaluation.pk).status == EvaluationStatus.SUBMITTED


@pytest.mark.django_db
class TestReadEndpoints:
    def test_evaluator_template_filters_categories_by_rater(self, api_client, team, cycle):
        api_client.force_authenticate(user=team["boss"])

        res = api_client.get(reverse("evaluation-evaluator-template", args=[cycle.pk]),
                             {"type": "boss", "evaluatee_id": str(team["employee"].pk)})

        assert res.status_code == 200
        assert [c["id"] for c in res.data["categories"]] == ["delivery"]
        assert res.data["evaluation"] is None
        assert res.data["missing_items"] == ["Work Performance / Quality", "Work Performance / Speed"]
        assert res.data["can_evaluate"] is True

    def test_list_hides_other_peoples_drafts(self, api_client, team, create_user, cycle):
        employee, leader = team["employee"], team["leader"]
        create_draft(cycle, employee, employee, "self")
        api_client.force_authenticate(user=leader)

        res = api_client.get(reverse("evaluation-list"))

        assert res.status_code == 200
        assert res.data == []

    def test_leader_sees_submitted_self_evaluation(self, api_client, team, cycle):
        employee, leader = team["employee"], team["leader"]
        evaluation = submit_evaluation(create_draft(
            cycle, employee, employee, "self",
            {"detailed_scores": scores(delivery=(80, 90), teamwork=70)}))
        api_client.force_authenticate(user=leader)

        res = api_client.get(reverse("evaluation-detail", args=[evaluation.pk]))

        assert res.status_code == 200
        assert res.data["evaluatee"] == employee.name

    def test_comparison_between_self_and_leader(self, api_client, team, cycle):
        employee, leader = team["employee"], team["leader"]
        submit_evaluation(create_draft(cycle, employee, employee, "self",
                                       {"detailed_scores": scores(delivery=(80, 90), teamwork=70)}))
        submit_evaluation(create_draft(cycle, leader, employee, "leader",
                                       {"detailed_scores": scores(delivery=(90, 90), teamwork=80)}))
        api_client.force_authenticate(user=leader)

        res = api_client.get(reverse("evaluation-comparison", args=[cycle.pk, employee.pk]))

        assert res.status_code == 200
        assert res.data["score"]["final_score"] == 83.2
        assert len(res.data["comparisons"]) == 1
        comparison = res.data["comparisons"][0]
        assert (comparison["base"], comparison["other"]) == ("self", "leader")
        diffs = {c["category_id"]: c["difference"] for c in comparison["categories"]}
        assert diffs == {"delivery": pytest.approx(5.0), "teamwork": pytest.approx(10.0)}
        assert comparison["large_category_differences"] == ["teamwork"]
        assert comparison["large_item_differences"] == []

    def test_peer_cannot_view_comparison(self, api_client, team, create_user, cycle):
        api_client.force_authenticate(user=create_user(role="EMP"))
        res = api_client.get(reverse("evaluation-comparison", args=[cycle.pk, team["employee"].pk]))
        assert res.status_code == 403
