"""Register this service with the SMS gateway at startup."""
import logging

from services.sms_gateway import SMSGateway, SMSGatewayError, SMS_RECEIVED_EVENT

logger = logging.getLogger(__name__)


def register_webhook_on_startup(gateway: SMSGateway, webhook_url: str) -> bool:
    """
    Replace any previously registered webhooks with one pointing at us.
    
    Every existing webhook is deleted first, so running this again leaves
    exactly one registration. Gateway failures are logged and reported via
    the return value; they never stop the service from starting.
    
    Returns:
        True if the new webhook was registered
    """
    try:
        webhooks = gateway.list_webhooks()
        for webhook in webhooks:
            gateway.delete_webhook(webhook["id"])
    except (SMSGatewayError, KeyError, TypeError) as e:
        logger.error(f"Failed to deregister webhooks: {e}")
    
    try:
        gateway.register_webhook(webhook_url, SMS_RECEIVED_EVENT)
    except SMSGatewayError as e:
        logger.error(f"Failed to register webhook: {e}")
        return False
    
    logger.info("Webhook registered successfully")
    return True
