from django.contrib.auth.backends import ModelBackend
from django.contrib.auth import get_user_model

User = get_user_model()


class EmailOrUsernameBackend(ModelBackend):
    """
    Authenticate with either ``email`` or ``username`` plus password.
    Email lookup is case-insensitive.
    """
    def authenticate(self, request, username=None, password=None, **kwargs):
        email = kwargs.get("email")
        if not password or not (username or email):
            return None

        try:
            if email:
                user = User.objects.get(email__iexact=email)
            else:
                user = User.objects.get(username=username)
        except User.DoesNotExist:
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None
