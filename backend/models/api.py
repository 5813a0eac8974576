"""API request and response models for the webhook endpoint."""
from typing import Optional
from pydantic import BaseModel


class WebhookPayload(BaseModel):
    """The ``payload`` object of an ``sms:received`` gateway event."""
    message: Optional[str] = None
    phoneNumber: Optional[str] = None


class WebhookRequest(BaseModel):
    """Body posted by the SMS gateway; unknown fields are ignored."""
    event: Optional[str] = None
    payload: Optional[WebhookPayload] = None


class WebhookReply(BaseModel):
    success: bool
    reply: str


class ErrorResponse(BaseModel):
    error: str
