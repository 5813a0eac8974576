"""Build chat-completion conversations from stored history."""
import logging
from typing import Sequence

from models.conversation import Conversation, ConversationMessage, Turn, SYSTEM, USER, ASSISTANT

logger = logging.getLogger(__name__)


class ConversationAssembler:
    """Assemble system prompt, prior turns and the new message into one conversation."""
    
    def __init__(self, system_prompt: str):
        if not system_prompt:
            raise ValueError("system_prompt cannot be empty")
        self.system_prompt = system_prompt
    
    def assemble(self, identity: str, message: str, turns: Sequence[Turn]) -> Conversation:
        """
        Build the conversation for one inbound message.
        
        Args:
            identity: Phone number the message came from
            message: New inbound message text
            turns: Stored turns for the identity, oldest first
            
        Returns:
            [system] + [user, assistant] per turn + [user: message]
            
        Raises:
            ValueError: If identity or message is empty
        """
        if not identity:
            raise ValueError("identity cannot be empty")
        if not message:
            raise ValueError("message cannot be empty")
        
        conversation = [ConversationMessage(role=SYSTEM, content=self.system_prompt)]
        for turn in turns:
            conversation.append(ConversationMessage(role=USER, content=turn.user_message))
            conversation.append(ConversationMessage(role=ASSISTANT, content=turn.assistant_response))
        conversation.append(ConversationMessage(role=USER, content=message))
        
        logger.debug(f"Assembled conversation for {identity}: {len(turns)} prior turns")
        return conversation
