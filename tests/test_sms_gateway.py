"""Unit tests for SMSGateway and startup webhook registration."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
import httpx
from unittest.mock import Mock, MagicMock, patch, call
from services.sms_gateway import SMSGateway, SMSGatewayError
from services.webhook_registration import register_webhook_on_startup


def gateway_response(status_code=200, body=None, content=b"{}"):
    response = Mock()
    response.status_code = status_code
    response.content = content
    response.text = str(body)
    response.json.return_value = body
    return response


def mock_http(mock_client_class, *responses):
    mock_client = MagicMock()
    mock_client.__enter__.return_value.request.side_effect = list(responses)
    mock_client_class.return_value = mock_client
    return mock_client.__enter__.return_value


class TestSMSGateway:
    """Test suite for SMSGateway."""
    
    @pytest.fixture
    def gateway(self):
        return SMSGateway(
            base_url="http://127.0.0.1:8080/",
            username="sms",
            password="secret",
            timeout=5.0
        )
    
    def test_initialization_without_credentials(self):
        with pytest.raises(ValueError, match="SMS_USERNAME and SMS_PASSWORD"):
            SMSGateway(base_url="http://127.0.0.1:8080", username=None, password="secret")
    
    @patch('httpx.Client')
    def test_send_message(self, mock_client_class, gateway):
        http = mock_http(mock_client_class, gateway_response(202, {"id": "msg1", "state": "Pending"}))
        
        result = gateway.send_message("Hi there!", "+15551234")
        
        assert result == {"id": "msg1", "state": "Pending"}
        http.request.assert_called_once_with(
            "POST",
            "http://127.0.0.1:8080/message",
            json={"message": "Hi there!", "phoneNumbers": ["+15551234"]}
        )
        mock_client_class.assert_called_once_with(timeout=5.0, auth=("sms", "secret"))
    
    @patch('httpx.Client')
    def test_authentication_failure(self, mock_client_class, gateway):
        mock_http(mock_client_class, gateway_response(401, {"message": "Unauthorized"}))
        
        with pytest.raises(SMSGatewayError, match="Invalid SMS gateway credentials"):
            gateway.send_message("Hi", "+15551234")
    
    @patch('httpx.Client')
    def test_server_error(self, mock_client_class, gateway):
        mock_http(mock_client_class, gateway_response(500, {"message": "boom"}))
        
        with pytest.raises(SMSGatewayError, match="status 500"):
            gateway.send_message("Hi", "+15551234")
    
    @patch('httpx.Client')
    def test_timeout(self, mock_client_class, gateway):
        mock_http(mock_client_class, httpx.ConnectTimeout("timed out"))
        
        with pytest.raises(SMSGatewayError, match="timeout"):
            gateway.send_message("Hi", "+15551234")
    
    @patch('httpx.Client')
    def test_network_error(self, mock_client_class, gateway):
        mock_http(mock_client_class, httpx.ConnectError("connection refused"))
        
        with pytest.raises(SMSGatewayError, match="Network error"):
            gateway.send_message("Hi", "+15551234")
    
    @patch('httpx.Client')
    def test_list_webhooks(self, mock_client_class, gateway):
        hooks = [{"id": "a", "url": "http://old/webhook", "event": "sms:received"}]
        http = mock_http(mock_client_class, gateway_response(200, hooks))
        
        assert gateway.list_webhooks() == hooks
        http.request.assert_called_once_with("GET", "http://127.0.0.1:8080/webhooks", json=None)
    
    @patch('httpx.Client')
    def test_delete_webhook_empty_body(self, mock_client_class, gateway):
        http = mock_http(mock_client_class, gateway_response(204, None, content=b""))
        
        gateway.delete_webhook("a")
        
        http.request.assert_called_once_with("DELETE", "http://127.0.0.1:8080/webhooks/a", json=None)
    
    @patch('httpx.Client')
    def test_register_webhook(self, mock_client_class, gateway):
        http = mock_http(mock_client_class, gateway_response(201, {"id": "new"}))
        
        gateway.register_webhook("http://127.0.0.1:3000/webhook")
        
        http.request.assert_called_once_with(
            "POST",
            "http://127.0.0.1:8080/webhooks",
            json={"url": "http://127.0.0.1:3000/webhook", "event": "sms:received"}
        )
    
    @patch('httpx.Client')
    def test_invalid_json(self, mock_client_class, gateway):
        response = gateway_response(200)
        response.json.side_effect = ValueError("not json")
        mock_http(mock_client_class, response)
        
        with pytest.raises(SMSGatewayError, match="invalid JSON"):
            gateway.list_webhooks()


class TestWebhookRegistration:
    """Test suite for the startup deregister-then-register routine."""
    
    WEBHOOK_URL = "http://127.0.0.1:3000/webhook"
    
    def test_deregisters_then_registers(self):
        gateway = Mock(spec=SMSGateway)
        gateway.list_webhooks.return_value = [{"id": "a"}, {"id": "b"}]
        
        assert register_webhook_on_startup(gateway, self.WEBHOOK_URL) is True
        
        assert gateway.mock_calls == [
            call.list_webhooks(),
            call.delete_webhook("a"),
            call.delete_webhook("b"),
            call.register_webhook(self.WEBHOOK_URL, "sms:received"),
        ]
    
    def test_no_existing_webhooks(self):
        gateway = Mock(spec=SMSGateway)
        gateway.list_webhooks.return_value = []
        
        assert register_webhook_on_startup(gateway, self.WEBHOOK_URL) is True
        gateway.delete_webhook.assert_not_called()
        gateway.register_webhook.assert_called_once()
    
    def test_deregister_failure_still_registers(self):
        gateway = Mock(spec=SMSGateway)
        gateway.list_webhooks.side_effect = SMSGatewayError("unreachable")
        
        assert register_webhook_on_startup(gateway, self.WEBHOOK_URL) is True
        gateway.register_webhook.assert_called_once_with(self.WEBHOOK_URL, "sms:received")
    
    def test_register_failure_is_reported_not_raised(self):
        gateway = Mock(spec=SMSGateway)
        gateway.list_webhooks.return_value = []
        gateway.register_webhook.side_effect = SMSGatewayError("rejected")
        
        assert register_webhook_on_startup(gateway, self.WEBHOOK_URL) is False
