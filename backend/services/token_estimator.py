"""Token cost estimation for chat-completion conversations."""
import logging
import sys
from typing import Optional, Sequence

import tiktoken

from models.conversation import ConversationMessage

logger = logging.getLogger(__name__)

# Returned when the encoder cannot process the input; always exceeds any budget
INFINITE_COST = sys.maxsize


class TokenEstimator:
    """
    Estimate how many tokens a conversation costs the LLM provider.
    
    Llama 3 models use a tokenizer close to tiktoken's ``o200k_base``, so
    counts are an approximation of what the provider bills, not an exact
    match. Each message pays a small fixed overhead for its role framing
    and the request pays a few tokens to prime the assistant reply.
    """
    
    TOKENS_PER_MESSAGE = 3
    REPLY_PRIMING_TOKENS = 3
    
    def __init__(self, encoding_name: str = "o200k_base", encoder: Optional[object] = None):
        """
        Initialize the estimator.
        
        Args:
            encoding_name: tiktoken encoding to load when no encoder is given
            encoder: Object exposing ``encode(text) -> list``; mainly for tests
        """
        self.encoding_name = encoding_name
        self.encoder = encoder or tiktoken.get_encoding(encoding_name)
        logger.info(f"Initialized TokenEstimator ({encoding_name})")
    
    def estimate(self, conversation: Sequence[ConversationMessage]) -> int:
        """
        Estimate the token cost of a conversation.
        
        Args:
            conversation: Ordered conversation messages
            
        Returns:
            Non-negative token estimate, or INFINITE_COST if any message
            could not be encoded
        """
        total = self.REPLY_PRIMING_TOKENS
        try:
            for message in conversation:
                total += self.TOKENS_PER_MESSAGE
                total += len(self._encode(message.role))
                total += len(self._encode(message.content))
        except (ValueError, TypeError, UnicodeError) as e:
            logger.warning(f"Token estimation failed, treating as infinite cost: {e}")
            return INFINITE_COST
        
        return total
    
    def _encode(self, text: str) -> list:
        # Special-token text sent by a user is counted as ordinary text
        return self.encoder.encode(text, disallowed_special=())
