import pytest
from django.urls import reverse

from review_app.models import Template
from review_app.tests.helpers import scores


@pytest.mark.django_db
class TestTemplateViewSet:
    def test_admin_creates_valid_template(self, api_client, create_user, template_config):
        admin = create_user(role="ADMIN")
        api_client.force_authenticate(user=admin)

        res = api_client.post(reverse("template-list"), {
            "name": "Engineering 2025",
            "type": "Assessment",
            "config": template_config(),
        }, format="json")

        assert res.status_code == 201
        assert res.data["summary"] == "2 categories, 3 items"
        assert res.data["total_weight"] == 100
        assert res.data["created_by"] == admin.name

    def test_invalid_weights_are_all_reported(self, api_client, create_user, template_config):
        config = template_config()
        config["categories"][0]["weight"] = 55
        config["categories"][0]["items"][0]["weight"] = 60
        api_client.force_authenticate(user=create_user(role="ADMIN"))

        res = api_client.post(reverse("template-list"), {"name": "Broken", "config": config}, format="json")

        assert res.status_code == 400
        assert res.data["config"] == [
            "Category weights sum to 95%, expected 100%",
            '"Work Performance" item weights sum to 110%, expected 100%',
        ]

    def test_employee_cannot_create(self, api_client, create_user, template_config):
        api_client.force_authenticate(user=create_user(role="EMP"))
        res = api_client.post(reverse("template-list"), {"name": "Mine", "config": template_config()}, format="json")
        assert res.status_code == 403

    def test_anyone_can_validate_a_config(self, api_client, create_user, template_config):
        config = template_config()
        config["scoring_rules"]["self_evaluation"]["weight_in_final"] = 0.5
        api_client.force_authenticate(user=create_user(role="LEADER"))

        res = api_client.post(reverse("template-validate-config"), {"config": config}, format="json")

        assert res.status_code == 200
        assert res.data == {"valid": False, "errors": ["Scoring rule weights sum to 110%, expected 100%"]}

    def test_validate_reports_missing_two_tier_block_with_weight_errors(self, api_client, create_user, template_config):
        config = template_config(scoring_rules={"scoring_mode": "two_tier_weighted"})
        config["categories"][1]["weight"] = 30
        api_client.force_authenticate(user=create_user(role="ADMIN"))

        res = api_client.post(reverse("template-validate-config"), {"config": config}, format="json")

        assert res.status_code == 200
        assert res.data == {"valid": False, "errors": [
            "Category weights sum to 90%, expected 100%",
            "Two-tier scoring mode requires two_tier_config",
        ]}

    def test_set_default_clears_previous_default(self, api_client, create_user, create_template):
        old = create_template(is_default=True)
        new = create_template(name="New")
        api_client.force_authenticate(user=create_user(role="ADMIN"))

        res = api_client.post(reverse("template-set-default", args=[new.pk]))

        assert res.status_code == 200
        old.refresh_from_db()
        new.refresh_from_db()
        assert old.is_default is False
        assert new.is_default is True

    def test_score_preview(self, api_client, create_user, create_template):
        template = create_template()
        api_client.force_authenticate(user=create_user(role="EMP"))

        res = api_client.post(reverse("template-score-preview", args=[template.pk]), {
            "self_scores": scores(delivery=(80, 90), teamwork=70),
            "leader_scores": scores(delivery=(90, 90), teamwork=80),
        }, format="json")

        assert res.status_code == 200
        assert res.data["final_score"] == 83.2
        assert res.data["score_level"] == "Good"
        assert res.data["rater_scores"] == {"self": 79.0, "leader": 86.0, "boss": None}
        assert res.data["category_scores"]["self"] == {"delivery": 85.0, "teamwork": 70.0}

    def test_score_preview_with_one_rater_is_partial(self, api_client, create_user, create_template):
        template = create_template()
        api_client.force_authenticate(user=create_user(role="EMP"))

        res = api_client.post(reverse("template-score-preview", args=[template.pk]), {
            "self_scores": scores(delivery=(80, 90), teamwork=70),
        }, format="json")

        assert res.status_code == 200
        assert res.data["final_score"] is None
        assert res.data["is_complete"] is False
        assert res.data["missing_raters"] == ["leader"]
        assert res.data["partial_final_score"] == 79.0

    def test_score_preview_rejects_out_of_range_scores(self, api_client, create_user, create_template):
        template = create_template()
        api_client.force_authenticate(user=create_user(role="EMP"))

        res = api_client.post(reverse("template-score-preview", args=[template.pk]), {
            "self_scores": scores(delivery=(500, 500)),
            "leader_scores": scores(delivery=(90, -1)),
        }, format="json")

        assert res.status_code == 400
        assert res.data["self_scores"] == [
            'Score for "Quality" must be between 0 and 100, got 500',
            'Score for "Speed" must be between 0 and 100, got 500',
        ]
        assert res.data["leader_scores"] == ['Score for "Speed" must be between 0 and 100, got -1']
        assert "boss_scores" not in res.data

    def test_template_in_use_cannot_be_deleted(self, api_client, create_user, create_assessment, team):
        assessment = create_assessment(participants=[team["employee"]])
        api_client.force_authenticate(user=create_user(role="ADMIN"))

        res = api_client.delete(reverse("template-detail", args=[assessment.template.pk]))

        assert res.status_code == 400
        assert Template.objects.filter(pk=assessment.template.pk).exists()
