"""Client for the Android SMS Gateway REST API."""
import logging
from typing import Any, Dict, List, Optional
import httpx

from config import SMS_GATEWAY_URL, SMS_USERNAME, SMS_PASSWORD, SMS_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

SMS_RECEIVED_EVENT = "sms:received"


class SMSGatewayError(Exception):
    """Raised when the SMS gateway rejects a request or cannot be reached."""


class SMSGateway:
    """Send messages and manage webhooks on the SMS gateway."""
    
    def __init__(
        self,
        base_url: str = SMS_GATEWAY_URL,
        username: Optional[str] = SMS_USERNAME,
        password: Optional[str] = SMS_PASSWORD,
        timeout: float = SMS_TIMEOUT_SECONDS
    ):
        """
        Initialize the gateway client.
        
        Args:
            base_url: Gateway root URL, e.g. http://127.0.0.1:8080
            username: Basic auth username
            password: Basic auth password
            timeout: Request timeout in seconds
            
        Raises:
            ValueError: If credentials are missing
        """
        if not username or not password:
            raise ValueError("SMS_USERNAME and SMS_PASSWORD environment variables are required")
        
        self.base_url = base_url.rstrip("/")
        self.auth = (username, password)
        self.timeout = timeout
        
        logger.info(f"Initialized SMSGateway at {self.base_url}")
    
    def send_message(self, message: str, phone_number: str) -> Dict[str, Any]:
        """
        Send an SMS to a single recipient.
        
        Args:
            message: Text to send
            phone_number: Destination phone number
            
        Returns:
            Gateway response body (message state)
            
        Raises:
            SMSGatewayError: If the request fails
        """
        result = self._request("POST", "/message", json={
            "message": message,
            "phoneNumbers": [phone_number]
        })
        logger.info(f"Sent SMS to {phone_number}")
        return result
    
    def list_webhooks(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/webhooks") or []
    
    def delete_webhook(self, webhook_id: str) -> None:
        self._request("DELETE", f"/webhooks/{webhook_id}")
        logger.info(f"Deregistered webhook: {webhook_id}")
    
    def register_webhook(self, url: str, event: str = SMS_RECEIVED_EVENT) -> Dict[str, Any]:
        result = self._request("POST", "/webhooks", json={"url": url, "event": event})
        logger.info(f"Registered webhook for {event} -> {url}")
        return result
    
    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        """Issue one authenticated request and decode the JSON body, if any."""
        url = f"{self.base_url}{path}"
        
        try:
            with httpx.Client(timeout=self.timeout, auth=self.auth) as client:
                response = client.request(method, url, json=json)
        except httpx.TimeoutException as e:
            logger.error(f"SMS gateway timeout after {self.timeout}s: {method} {path}")
            raise SMSGatewayError(f"Request timeout after {self.timeout}s: {method} {path}") from e
        except httpx.RequestError as e:
            logger.error(f"SMS gateway network error: {method} {path}: {e}")
            raise SMSGatewayError(f"Network error: {e}") from e
        
        if response.status_code == 401:
            logger.error("Authentication failed for SMS gateway")
            raise SMSGatewayError("Invalid SMS gateway credentials")
        
        if response.status_code >= 400:
            error_msg = f"SMS gateway {method} {path} failed with status {response.status_code}: {response.text}"
            logger.error(error_msg)
            raise SMSGatewayError(error_msg)
        
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise SMSGatewayError(f"SMS gateway returned invalid JSON for {method} {path}") from e
