"""Services for the SMS LLM relay."""
from .token_estimator import TokenEstimator, INFINITE_COST
from .history_store import HistoryStore, HistoryStoreError
from .conversation_assembler import ConversationAssembler
from .window_trimmer import WindowTrimmer
from .country_filter import is_allowed_country
from .llm_client import LLMClient, LLMResponse, LLMError, LLMClientError
from .sms_gateway import SMSGateway, SMSGatewayError
from .webhook_registration import register_webhook_on_startup
from .relay_controller import RelayController, RelayResult

__all__ = ['TokenEstimator', 'INFINITE_COST', 'HistoryStore', 'HistoryStoreError', 'ConversationAssembler', 'WindowTrimmer', 'is_allowed_country', 'LLMClient', 'LLMResponse', 'LLMError', 'LLMClientError', 'SMSGateway', 'SMSGatewayError', 'register_webhook_on_startup', 'RelayController', 'RelayResult']
