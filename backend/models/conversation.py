"""Conversation data models."""
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional

SYSTEM = "system"
USER = "user"
ASSISTANT = "assistant"
ROLES = (SYSTEM, USER, ASSISTANT)


@dataclass(frozen=True)
class Turn:
    """One persisted inbound message and the assistant reply sent for it."""
    identity: str
    user_message: str
    assistant_response: str
    timestamp: datetime
    id: Optional[int] = None


@dataclass(frozen=True)
class ConversationMessage:
    """A single role/content entry of a chat-completion request."""
    role: str
    content: str

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Unknown message role: {self.role!r}")

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


# Index 0 is the system prompt, then (user, assistant) pairs, then the new user message
Conversation = List[ConversationMessage]
