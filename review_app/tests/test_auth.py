import pytest
from django.urls import reverse


@pytest.mark.django_db
class TestEmailLogin:
    def test_login_with_email(self, api_client, create_user):
        user = create_user(email="Eli@Example.com", role="LEADER", name="Eli")

        res = api_client.post(reverse("jwt-login"), {
            "email": "eli@example.com", "password": "pass12345",
        }, format="json")

        assert res.status_code == 200
        assert res.data["access"]
        assert res.data["refresh"]
        assert res.data["role"] == "Leader"
        assert res.data["user_id"] == str(user.user_id)

    def test_login_with_username(self, api_client, create_user):
        create_user(username="eli")
        res = api_client.post(reverse("jwt-login"), {"username": "eli", "password": "pass12345"}, format="json")
        assert res.status_code == 200

    def test_wrong_password(self, api_client, create_user):
        user = create_user()
        res = api_client.post(reverse("jwt-login"), {"email": user.email, "password": "nope"}, format="json")
        assert res.status_code == 400

    def test_api_requires_token(self, api_client):
        res = api_client.get(reverse("template-list"))
        assert res.status_code == 401
