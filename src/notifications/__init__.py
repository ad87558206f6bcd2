"""Notifications Package - Pushover alerts for failed runs and posts."""
from .pushover import PushoverNotifier

__all__ = ["PushoverNotifier"]
