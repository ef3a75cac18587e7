"""Chat notification helpers."""

from .hipchat import ChatMessage, HipChatClient, NotificationError
from .notifier import Notifier
from .templates import PLACEHOLDERS, TemplateRenderError, render_template

__all__ = [
    "ChatMessage",
    "HipChatClient",
    "NotificationError",
    "Notifier",
    "PLACEHOLDERS",
    "TemplateRenderError",
    "render_template",
]
