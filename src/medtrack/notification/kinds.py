"""Notification kinds and delivery channels."""

from enum import Enum


class NotificationKind(Enum):
    REQUEST_CREATED = "request_created"
    REQUEST_STATUS_CHANGED = "request_status_changed"
    REQUEST_CANCELLED = "request_cancelled"


class NotificationChannel(Enum):
    EMAIL = "email"
    SMS = "sms"
