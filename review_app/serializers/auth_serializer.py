from rest_framework import serializers
from django.contrib.auth import authenticate
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.tokens import RefreshToken

from accounts.models import Role


class EmailLoginSerializer(TokenObtainPairSerializer):
    """Login with email + password or username + password."""
    username = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    password = serializers.CharField(write_only=True)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # simplejwt adds a required username field; email-only logins need it optional
        if self.username_field in self.fields:
            self.fields[self.username_field].required = False
            self.fields[self.username_field].allow_blank = True

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["role"] = dict(Role.choices).get(user.role)
        token["name"] = user.name or user.email or user.username
        return token

    def validate(self, attrs):
        username = attrs.get("username") or None
        email = attrs.get("email") or None
        if not (username or email):
            raise serializers.ValidationError("Provide username or email.")

        user = authenticate(
            request=self.context.get("request"),
            username=username,
            email=email,
            password=attrs.get("password"),
        )
        if not user:
            raise serializers.ValidationError("Invalid credentials.")

        refresh = self.get_token(user)
        self.user = user
        return {
            "refresh": str(refresh),
            "access": str(refresh.access_token),
            "user_id": str(user.user_id),
            "role": dict(Role.choices).get(user.role),
            "name": user.name or user.email or user.username,
        }
