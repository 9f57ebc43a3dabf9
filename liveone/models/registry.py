"""Every ORM model in one place, so `Base.metadata` is complete once this is imported."""

from liveone.models.base import Base
from liveone.modules.moderation.models import BannedUser
from liveone.modules.notifications.models import Notification
from liveone.modules.users.models import AuthUser, Profile, UserRole

__all__ = ["Base", "AuthUser", "Profile", "UserRole", "BannedUser", "Notification"]
