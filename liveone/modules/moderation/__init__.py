"""Moderation domain exports."""

from .models import BannedUser

__all__ = ["BannedUser"]
