"""Callback notification pipeline."""

from .channel import CallbackChannel
from .requests_controller import RequestsController, calculate_backoff
from .service import CallbackService
from .types import ChangeNotification, NotificationPayload

__all__ = [
    "CallbackChannel",
    "CallbackService",
    "ChangeNotification",
    "NotificationPayload",
    "RequestsController",
    "calculate_backoff",
]
