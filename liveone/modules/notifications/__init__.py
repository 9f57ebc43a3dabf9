"""Notifications domain exports."""

from .models import Notification

__all__ = ["Notification"]
