"""
Django authentication backend for email logins.

Email is unique only among live accounts, so lookups go through the
default manager which never returns soft-deleted users.  Unverified
accounts are refused as well; this keeps the admin site in line with
the API login rules.
"""
from django.contrib.auth.backends import ModelBackend


class LiveAccountBackend(ModelBackend):
    def user_can_authenticate(self, user) -> bool:
        if getattr(user, 'is_deleted', False):
            return False
        if not getattr(user, 'is_email_verified', False):
            return False
        return super().user_can_authenticate(user)
