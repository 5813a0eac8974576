"""Configuration management for the SMS LLM relay."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# API Keys
GROQ_API_KEY = os.getenv("GROQ_API_KEY")
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")

# SMS Gateway
SMS_GATEWAY_URL = os.getenv("SMS_GATEWAY_URL", "http://127.0.0.1:8080")
SMS_USERNAME = os.getenv("SMS_USERNAME")
SMS_PASSWORD = os.getenv("SMS_PASSWORD")
SMS_TIMEOUT_SECONDS = float(os.getenv("SMS_TIMEOUT_SECONDS", "15"))

# Server Configuration
PORT = int(os.getenv("PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
WEBHOOK_URL = os.getenv("WEBHOOK_URL", f"http://127.0.0.1:{PORT}/webhook")

# Model Configuration
LLM_MODEL = os.getenv("LLM_MODEL", "llama-3.1-8b-instant")
LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "300"))
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.7"))
LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "30"))
SYSTEM_PROMPT = os.getenv(
    "SYSTEM_PROMPT",
    "Keep responses short and concise for SMS readability."
)

# Conversation Window Configuration
TOKEN_BUDGET = int(os.getenv("TOKEN_BUDGET", "4000"))  # tokens
MAX_HISTORY_TURNS = int(os.getenv("MAX_HISTORY_TURNS", "50"))
HISTORY_TABLE = os.getenv("HISTORY_TABLE", "message_history")

# Country calling codes allowed to use the relay; empty disables the check
ALLOWED_COUNTRY_CODES = tuple(
    code.strip()
    for code in os.getenv(
        "ALLOWED_COUNTRY_CODES",
        "+61,+55,+1,+86,+33,+49,+852,+91,+62,+353,+972,+81,+60,+52,+64,+47,+65,+82,+66,+44"
    ).split(",")
    if code.strip()
)
