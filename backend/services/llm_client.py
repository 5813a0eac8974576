"""LLM Client for Groq chat completions."""
import time
from dataclasses import dataclass
from typing import Optional, Dict, Any, Sequence
from groq import Groq
from groq import RateLimitError, AuthenticationError, APIError, APITimeoutError
import logging

from models.conversation import ConversationMessage
from config import GROQ_API_KEY, LLM_MODEL, LLM_MAX_TOKENS, LLM_TEMPERATURE, LLM_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Response from LLM generation."""
    text: str
    tokens_input: int
    tokens_output: int
    latency_ms: int
    model_used: str


@dataclass
class LLMError:
    """Structured error response from LLM operations."""
    code: str
    message: str
    details: Dict[str, Any]


class LLMClientError(Exception):
    """Custom exception for LLM client errors with structured error information."""
    
    def __init__(self, error: LLMError):
        self.error = error
        super().__init__(error.message)


class LLMClient:
    """Client for the Groq chat-completion API."""
    
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = LLM_MODEL,
        max_tokens: int = LLM_MAX_TOKENS,
        temperature: float = LLM_TEMPERATURE,
        timeout: float = LLM_TIMEOUT_SECONDS
    ):
        """
        Initialize LLM client with Groq API key.
        
        Args:
            api_key: Groq API key (defaults to GROQ_API_KEY from environment)
            model: Chat model name
            max_tokens: Maximum tokens to generate per reply
            temperature: Sampling temperature
            timeout: Per-request timeout in seconds
        """
        self.api_key = api_key or GROQ_API_KEY
        if not self.api_key:
            raise ValueError("GROQ_API_KEY must be provided or set in environment")
        
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.client = Groq(api_key=self.api_key, timeout=timeout)
        logger.info(f"LLMClient initialized successfully (model={model})")
    
    def generate(self, messages: Sequence[ConversationMessage]) -> LLMResponse:
        """
        Generate a reply for a conversation.
        
        Args:
            messages: Ordered conversation, system prompt first
            
        Returns:
            LLMResponse with text, token counts, and latency
            
        Raises:
            LLMClientError: Structured error with code, message, and details
        """
        start_time = time.time()
        
        try:
            logger.debug(f"Generating response with model: {self.model}, messages={len(messages)}")
            
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[message.to_dict() for message in messages],
                max_tokens=self.max_tokens,
                temperature=self.temperature
            )
        except RateLimitError as e:
            raise self._error(
                "RATE_LIMIT_ERROR",
                "Rate limit exceeded. Please try again in a few moments.",
                start_time, e, retry_after=60
            )
        except AuthenticationError as e:
            raise self._error(
                "AUTHENTICATION_ERROR",
                "Authentication failed. Please check your API key.",
                start_time, e
            )
        except APITimeoutError as e:
            raise self._error("TIMEOUT_ERROR", "Request timed out. Please try again.", start_time, e)
        except APIError as e:
            raise self._error("API_ERROR", f"Groq API error: {str(e)}", start_time, e)
        except Exception as e:
            raise self._error(
                "UNKNOWN_ERROR",
                f"Unexpected error during generation: {str(e)}",
                start_time, e, error_type=type(e).__name__
            )
        
        latency_ms = int((time.time() - start_time) * 1000)
        
        try:
            text = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise self._error("MALFORMED_RESPONSE", "LLM response had no choices", start_time, e)
        if not text or not text.strip():
            raise self._error(
                "MALFORMED_RESPONSE",
                "LLM response content was empty",
                start_time, ValueError("empty content")
            )
        
        usage = getattr(response, "usage", None)
        tokens_input = getattr(usage, "prompt_tokens", 0) or 0
        tokens_output = getattr(usage, "completion_tokens", 0) or 0
        
        logger.info(
            f"Generated response: model={self.model}, "
            f"input_tokens={tokens_input}, output_tokens={tokens_output}, "
            f"latency={latency_ms}ms"
        )
        
        return LLMResponse(
            text=text.strip(),
            tokens_input=tokens_input,
            tokens_output=tokens_output,
            latency_ms=latency_ms,
            model_used=self.model
        )
    
    def _error(self, code: str, message: str, start_time: float, cause: Exception, **details) -> LLMClientError:
        """Build and log a structured LLMClientError."""
        latency_ms = int((time.time() - start_time) * 1000)
        error = LLMError(
            code=code,
            message=message,
            details={
                "model": self.model,
                "latency_ms": latency_ms,
                "original_error": str(cause),
                **details
            }
        )
        logger.error(
            f"{code}: model={self.model}, latency={latency_ms}ms, error={cause}",
            exc_info=cause,
            extra={"error_code": error.code, "error_details": error.details}
        )
        return LLMClientError(error)
