"""
Relay Controller for inbound SMS events.

Each inbound message moves through a fixed sequence of steps:

    received -> validated -> (reset handled | history loaded) -> assembled
    -> trimmed -> (rejected as oversized | LLM called) -> persisted -> replied

A Turn is stored only after the LLM has answered, and the reply SMS is
sent only after the Turn is stored. Failures are logged and reported as a
generic server error; nothing is retried here.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from services.conversation_assembler import ConversationAssembler
from services.country_filter import is_allowed_country
from services.history_store import HistoryStore, HistoryStoreError
from services.llm_client import LLMClient, LLMClientError
from services.sms_gateway import SMSGateway, SMSGatewayError
from services.window_trimmer import WindowTrimmer

logger = logging.getLogger(__name__)


@dataclass
class RelayResult:
    """
    Outcome of handling one inbound message.
    
    Attributes:
        outcome: One of the RelayController outcome constants
        status_code: HTTP status for the webhook caller
        body: JSON body for the webhook caller
    """
    outcome: str
    status_code: int
    body: Dict[str, Any] = field(default_factory=dict)


class RelayController:
    """Orchestrates validation, history windowing, the LLM call and the SMS reply."""
    
    # Outcomes
    REPLIED = "replied"
    RESET = "reset"
    REJECTED_INPUT = "rejected_input"
    REJECTED_COUNTRY = "rejected_country"
    REJECTED_OVERSIZED = "rejected_oversized"
    ERRORED = "errored"
    
    # Compared against the stripped, case-folded message
    RESET_KEYWORDS = frozenset({"clear", "reset", "new"})
    
    RESET_CONFIRMATION = "Conversation history cleared."
    TOO_LARGE_NOTICE = "Your message is too long to process. Please send a shorter message."
    
    def __init__(
        self,
        history_store: HistoryStore,
        assembler: ConversationAssembler,
        trimmer: WindowTrimmer,
        llm_client: LLMClient,
        sms_gateway: SMSGateway,
        allowed_country_codes: Iterable[str] = (),
        max_history_turns: Optional[int] = None
    ):
        self.history_store = history_store
        self.assembler = assembler
        self.trimmer = trimmer
        self.llm_client = llm_client
        self.sms_gateway = sms_gateway
        self.allowed_country_codes = tuple(allowed_country_codes)
        self.max_history_turns = max_history_turns
        
        if not self.allowed_country_codes:
            logger.warning("Country code allow-list is empty; accepting all phone numbers")
    
    def handle(self, phone_number: Optional[str], message: Optional[str]) -> RelayResult:
        """
        Handle one inbound SMS.
        
        Args:
            phone_number: Sender phone number (identity)
            message: Inbound message text
            
        Returns:
            RelayResult describing the outcome and the webhook response
        """
        if not phone_number or not phone_number.strip() or not message or not message.strip():
            logger.warning("Rejected inbound SMS with missing message or phone number")
            return RelayResult(self.REJECTED_INPUT, 400, {"error": "Invalid payload"})
        
        if not is_allowed_country(phone_number, self.allowed_country_codes):
            logger.warning(f"Blocked SMS from unauthorized country code: {phone_number}")
            return RelayResult(self.REJECTED_COUNTRY, 403, {"error": "Unauthorized country code"})
        
        if self.is_reset_command(message):
            return self._handle_reset(phone_number)
        
        return self._handle_message(phone_number, message)
    
    @classmethod
    def is_reset_command(cls, message: str) -> bool:
        return message.strip().casefold() in cls.RESET_KEYWORDS
    
    def _handle_reset(self, phone_number: str) -> RelayResult:
        try:
            deleted = self.history_store.clear(phone_number)
            logger.info(f"Cleared conversation history for {phone_number} ({deleted} turns)")
            self.sms_gateway.send_message(self.RESET_CONFIRMATION, phone_number)
        except (HistoryStoreError, SMSGatewayError) as e:
            logger.error(f"Failed to reset history for {phone_number}: {e}", exc_info=True)
            return self._errored()
        
        return RelayResult(self.RESET, 200, {"success": True, "reply": self.RESET_CONFIRMATION})
    
    def _handle_message(self, phone_number: str, message: str) -> RelayResult:
        try:
            turns = self.history_store.get_turns(phone_number, limit=self.max_history_turns)
            conversation = self.assembler.assemble(phone_number, message, turns)
            trimmed = self.trimmer.trim(conversation)
            
            if not trimmed:
                logger.warning(f"Message from {phone_number} exceeds the token budget")
                self.sms_gateway.send_message(self.TOO_LARGE_NOTICE, phone_number)
                return RelayResult(self.REJECTED_OVERSIZED, 400, {"error": "Message too large"})
            
            llm_response = self.llm_client.generate(trimmed)
            reply = llm_response.text
            logger.info(f"LLM response for {phone_number}: {reply[:100]}")
            
            self.history_store.add_turn(phone_number, message, reply)
            self.sms_gateway.send_message(reply, phone_number)
            
        except LLMClientError as e:
            logger.error(f"LLM client error for {phone_number}: {e.error.code}: {e.error.message}")
            return self._errored()
        except (HistoryStoreError, SMSGatewayError) as e:
            logger.error(f"Error relaying message for {phone_number}: {e}", exc_info=True)
            return self._errored()
        except Exception as e:
            logger.error(f"Unexpected error relaying message for {phone_number}: {e}", exc_info=True)
            return self._errored()
        
        logger.info(f"Sent SMS reply to {phone_number}")
        return RelayResult(self.REPLIED, 200, {"success": True, "reply": reply})
    
    def _errored(self) -> RelayResult:
        return RelayResult(self.ERRORED, 500, {"error": "Failed to process response"})
