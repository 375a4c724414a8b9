from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend


class EmailOrUsernameBackend(ModelBackend):
    """Log in with the account email; the username still works for staff."""

    def authenticate(self, request, username=None, password=None, **kwargs):
        usermodel = get_user_model()
        login = username or kwargs.get("email")
        if not login or password is None:
            return None
        try:
            user = usermodel.objects.get(email__iexact=login)
        except usermodel.DoesNotExist:
            try:
                user = usermodel.objects.get(username__iexact=login)
            except usermodel.DoesNotExist:
                return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user

        return None
