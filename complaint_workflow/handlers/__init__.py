"""Node handlers dispatched by the workflow orchestrator."""

from .handler_base import NodeHandler
from .marker_handlers import EndHandler, StartHandler
from .notification_handlers import (
    EmailNotificationHandler,
    NotificationHandler,
    SmsNotificationHandler,
    WhatsAppNotificationHandler,
    determine_email_type,
)
from .recipients import Channel, Recipient, RecipientResolver, RecipientType
from .task_handlers import HumanTaskHandler, TaskStubHandler, UnknownCustomHandler

__all__ = [
    "NodeHandler",
    "StartHandler",
    "EndHandler",
    "HumanTaskHandler",
    "TaskStubHandler",
    "UnknownCustomHandler",
    "NotificationHandler",
    "EmailNotificationHandler",
    "SmsNotificationHandler",
    "WhatsAppNotificationHandler",
    "determine_email_type",
    "Channel",
    "Recipient",
    "RecipientResolver",
    "RecipientType",
]
