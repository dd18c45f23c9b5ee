import copy
import pytest
from uuid import uuid4
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from review_app.models import Assessment, AssessmentParticipant, Template
from review_app.services.assessment_service import publish_assessment

# Two categories 60/40; "delivery" has two items 50/50, "teamwork" one item.
BASE_CONFIG = {
    "categories": [
        {
            "id": "delivery",
            "name": "Work Performance",
            "weight": 60,
            "evaluator_types": ["self", "leader", "boss"],
            "items": [
                {"id": "quality", "name": "Quality", "weight": 50, "max_score": 100},
                {"id": "speed",   "name": "Speed",   "weight": 50, "max_score": 100},
            ],
        },
        {
            "id": "teamwork",
            "name": "Teamwork",
            "weight": 40,
            "evaluator_types": ["self", "leader"],
            "items": [
                {"id": "collab", "name": "Collaboration", "weight": 100, "max_score": 100},
            ],
        },
    ],
    "scoring_rules": {
        "scoring_mode": "simple_weighted",
        "self_evaluation":   {"weight_in_final": 0.4},
        "leader_evaluation": {"weight_in_final": 0.6},
    },
}


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def create_user(db):
    User = get_user_model()
    def _create_user(**kw):
        data = {
            "username": f"u_{uuid4().hex[:8]}",
            "email": f"{uuid4().hex[:8]}@test.local",
            "password": "pass12345",
            "name": "Test User",
            "role": "EMP",
        }
        data.update(kw)
        return User.objects.create_user(**data)
    return _create_user


@pytest.fixture
def template_config():
    def _template_config(**overrides):
        config = copy.deepcopy(BASE_CONFIG)
        config.update(overrides)
        return config
    return _template_config


@pytest.fixture
def create_template(db, template_config):
    def _create_template(**kw):
        defaults = dict(name="Annual review", config=template_config())
        defaults.update(kw)
        return Template.objects.create(**defaults)
    return _create_template


@pytest.fixture
def create_assessment(db, create_template):
    """Published (active) assessment unless ``publish=False``."""
    def _create_assessment(participants=(), publish=True, **kw):
        template = kw.pop("template", None) or create_template()
        defaults = dict(title="2025 review", period="2025-H1", template=template)
        defaults.update(kw)
        assessment = Assessment.objects.create(**defaults)
        for user in participants:
            AssessmentParticipant.objects.create(assessment=assessment, user=user)
        if publish:
            publish_assessment(assessment)
        return assessment
    return _create_assessment


@pytest.fixture
def team(create_user):
    """A leader, one direct report, and a boss."""
    leader = create_user(role="LEADER", name="Lena Leader")
    employee = create_user(role="EMP", name="Eli Employee", leader=leader)
    boss = create_user(role="BOSS", name="Bo Boss")
    return {"leader": leader, "employee": employee, "boss": boss}

