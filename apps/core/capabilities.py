"""
Admin capability passed into privileged service operations.

The HTTP layer decides who is an admin; the services only require that a
capability value is handed to them and record who acted.
"""
from dataclasses import dataclass

from .exceptions import ForbiddenException


@dataclass(frozen=True)
class AuthenticatedAdmin:
    """Opaque proof that the caller passed the admin gate."""
    identifier: str
    email: str = ""

    @classmethod
    def from_user(cls, user) -> "AuthenticatedAdmin":
        if not getattr(user, "is_staff", False):
            raise ForbiddenException("Admin access required.")
        return cls(identifier=str(user.pk), email=getattr(user, "email", "") or "")

    def __str__(self):
        return self.email or self.identifier


def require_admin(admin) -> AuthenticatedAdmin:
    if not isinstance(admin, AuthenticatedAdmin):
        raise ForbiddenException("Admin access required.")
    return admin
