"""Users domain exports."""

from .models import STAFF_ROLES, AuthUser, Profile, UserRole

__all__ = ["AuthUser", "Profile", "UserRole", "STAFF_ROLES"]
