from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend
from django.db.models import Q

UserModel = get_user_model()

class EmailOrUsernameBackend(ModelBackend): # Class members sign in with either their email or their username
    def authenticate(self, request, username=None, password=None, **kwargs):
        if not username or password is None:
            return None
        # emails are not unique on AbstractUser; an exact username match wins over a shared email
        candidates = UserModel.objects.filter(Q(username=username) | Q(email__iexact=username))
        user = next((u for u in candidates if u.username == username), None)
        if user is None:
            matches = list(candidates[:2])
            if len(matches) != 1:
                return None
            user = matches[0]
        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None
