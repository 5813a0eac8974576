"""Main entry point for the SMS LLM relay API."""
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from config import (
    PORT, LOG_LEVEL, WEBHOOK_URL, SYSTEM_PROMPT, TOKEN_BUDGET,
    MAX_HISTORY_TURNS, ALLOWED_COUNTRY_CODES
)
from logger import setup_logging
from models.api import WebhookRequest, WebhookPayload
from services.token_estimator import TokenEstimator
from services.history_store import HistoryStore
from services.conversation_assembler import ConversationAssembler
from services.window_trimmer import WindowTrimmer
from services.llm_client import LLMClient
from services.sms_gateway import SMSGateway
from services.webhook_registration import register_webhook_on_startup
from services.relay_controller import RelayController

# Initialize logging
setup_logging(LOG_LEVEL)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="SMS LLM Relay",
    description="Relays inbound SMS messages to an LLM and texts back the reply",
    version="1.0.0"
)

# Initialize services (will be done on startup)
relay_controller: RelayController = None


@app.on_event("startup")
async def startup_event():
    """Initialize services and register the gateway webhook on startup."""
    global relay_controller
    
    logger.info("Initializing SMS LLM relay services...")
    
    try:
        estimator = TokenEstimator()
        trimmer = WindowTrimmer(estimator, token_budget=TOKEN_BUDGET)
        assembler = ConversationAssembler(SYSTEM_PROMPT)
        logger.info(f"Initialized conversation windowing (budget={TOKEN_BUDGET} tokens)")
        
        history_store = HistoryStore()
        llm_client = LLMClient()
        sms_gateway = SMSGateway()
        
        relay_controller = RelayController(
            history_store=history_store,
            assembler=assembler,
            trimmer=trimmer,
            llm_client=llm_client,
            sms_gateway=sms_gateway,
            allowed_country_codes=ALLOWED_COUNTRY_CODES,
            max_history_turns=MAX_HISTORY_TURNS
        )
        logger.info("All services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise
    
    register_webhook_on_startup(sms_gateway, WEBHOOK_URL)


@app.exception_handler(RequestValidationError)
async def invalid_payload_handler(request: Request, exc: RequestValidationError):
    """Answer malformed webhook bodies with the same error as missing fields."""
    logger.warning(f"Rejected malformed request body on {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid payload"})


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "SMS LLM Relay API"}


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "sms-llm-relay",
        "version": "1.0.0",
        "ready": relay_controller is not None
    }


@app.get("/test", response_class=PlainTextResponse)
async def test_page():
    """Plain-text page to verify HTTP reachability."""
    return "HTTP is working correctly!"


@app.post("/webhook")
def webhook_endpoint(request: WebhookRequest) -> JSONResponse:
    """
    Receive an ``sms:received`` event from the SMS gateway.
    
    Runs in FastAPI's thread pool, so slow LLM or gateway calls for one
    sender do not hold up events from other senders.
    
    Returns:
        200 {success, reply}, 400/403/500 {error}
    """
    payload = request.payload or WebhookPayload()
    logger.info(f"Received SMS from {payload.phoneNumber}")
    
    result = relay_controller.handle(payload.phoneNumber, payload.message)
    logger.info(f"Webhook handled: outcome={result.outcome}, status={result.status_code}")
    return JSONResponse(status_code=result.status_code, content=result.body)


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting SMS LLM relay API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
