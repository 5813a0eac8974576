"""Data models for the SMS LLM relay."""
from .conversation import Conversation, ConversationMessage, Turn, SYSTEM, USER, ASSISTANT
from .api import WebhookPayload, WebhookRequest, WebhookReply, ErrorResponse

__all__ = [
    "Conversation",
    "ConversationMessage",
    "Turn",
    "SYSTEM",
    "USER",
    "ASSISTANT",
    "WebhookPayload",
    "WebhookRequest",
    "WebhookReply",
    "ErrorResponse",
]
