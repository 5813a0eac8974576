"""Fit a conversation under a token budget by evicting the oldest turns."""
import logging

from models.conversation import Conversation
from services.token_estimator import TokenEstimator

logger = logging.getLogger(__name__)


class WindowTrimmer:
    """
    Drop the oldest (user, assistant) pairs until the conversation fits.
    
    The system prompt at index 0 and the trailing new user message are
    never removed. Eviction is strictly oldest-first. When only those two
    messages remain and they still exceed the budget, the conversation
    cannot be sent at all and an empty list is returned.
    """
    
    def __init__(self, estimator: TokenEstimator, token_budget: int = 4000):
        if token_budget <= 0:
            raise ValueError("token_budget must be positive")
        
        self.estimator = estimator
        self.token_budget = token_budget
    
    def trim(self, conversation: Conversation) -> Conversation:
        """
        Trim a conversation to the token budget.
        
        Args:
            conversation: Assembled conversation (system, pairs..., user)
            
        Returns:
            A new trimmed conversation list, or an empty list if even the
            system prompt plus the new message exceed the budget
        """
        trimmed = list(conversation)
        evicted = 0
        
        estimate = self.estimator.estimate(trimmed)
        while estimate > self.token_budget:
            if len(trimmed) <= 2:
                logger.warning(
                    f"Conversation cannot fit budget: estimate={estimate}, "
                    f"budget={self.token_budget}"
                )
                return []
            
            del trimmed[1:3]
            evicted += 1
            estimate = self.estimator.estimate(trimmed)
        
        if evicted:
            logger.info(
                f"Trimmed {evicted} oldest turn(s): {len(trimmed)} messages, "
                f"estimate={estimate}, budget={self.token_budget}"
            )
        
        return trimmed
