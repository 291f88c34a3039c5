import pytest
import requests

from enquiry_desk.core.errors import ConfigurationError, UpstreamError, ValidationError
from enquiry_desk.integrations.whatsapp import (
    WhatsAppClient,
    format_phone,
    parse_webhook,
    verify_subscription,
)


class FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload
        self.text = str(payload)

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        return self._payload


@pytest.fixture
def calls(monkeypatch):
    recorded = []

    def install(response):
        def fake_post(url, **kwargs):
            recorded.append((url, kwargs))
            if isinstance(response, Exception):
                raise response
            return response
        monkeypatch.setattr(requests, "post", fake_post)
        return recorded

    return install


def test_format_phone():
    assert format_phone("+91 98765-43210") == "919876543210"


def test_send_message(settings, calls):
    recorded = calls(FakeResponse(200, {"messages": [{"id": "wamid.ABC"}]}))
    result = WhatsAppClient(settings).send_message("+91 98765 43210", "Your order is packed")

    assert result["messageId"] == "wamid.ABC"
    url, kwargs = recorded[0]
    assert url == "https://graph.example.test/v18.0/1234567890/messages"
    assert kwargs["headers"]["Authorization"] == "Bearer test-token"
    assert kwargs["timeout"] == settings.WHATSAPP_TIMEOUT_SECONDS
    assert kwargs["json"]["to"] == "919876543210"
    assert kwargs["json"]["text"] == {"preview_url": False, "body": "Your order is packed"}


def test_send_requires_configuration(settings, calls):
    recorded = calls(FakeResponse(200, {}))
    settings.WHATSAPP_API_TOKEN = ""
    with pytest.raises(ConfigurationError):
        WhatsAppClient(settings).send_message("919876543210", "hi")
    assert recorded == []


def test_send_requires_phone_and_message(settings):
    with pytest.raises(ValidationError):
        WhatsAppClient(settings).send_message("", "hi")


def test_upstream_error_keeps_status_and_details(settings, calls):
    calls(FakeResponse(401, {"error": {"message": "Invalid OAuth access token"}}))
    with pytest.raises(UpstreamError) as exc:
        WhatsAppClient(settings).send_message("919876543210", "hi")
    assert exc.value.status_code == 401
    assert exc.value.details["error"]["message"] == "Invalid OAuth access token"


def test_network_failure(settings, calls):
    calls(requests.ConnectionError("connection refused"))
    with pytest.raises(UpstreamError) as exc:
        WhatsAppClient(settings).send_message("919876543210", "hi")
    assert exc.value.status_code == 502


def test_verify_subscription():
    assert verify_subscription("subscribe", "secret", "secret")
    assert not verify_subscription("subscribe", "nope", "secret")
    assert not verify_subscription("unsubscribe", "secret", "secret")


CALLBACK = {
    "object": "whatsapp_business_account",
    "entry": [{
        "changes": [{
            "value": {
                "contacts": [{"profile": {"name": "Raj Kumar"}}],
                "messages": [
                    {"from": "919876543210", "id": "m1", "timestamp": "1697365800",
                     "type": "text", "text": {"body": "Need 500 atom bombs"}},
                    {"from": "919876543210", "id": "m2", "timestamp": "1697365801",
                     "type": "button", "button": {"text": "Get quote"}},
                    {"from": "919876543210", "id": "m3", "timestamp": "1697365802",
                     "type": "interactive", "interactive": {"type": "list_reply"}},
                ],
                "statuses": [{"id": "wamid.ABC", "status": "delivered", "timestamp": "1697365900"}],
            }
        }]
    }],
}


def test_parse_webhook():
    messages, statuses = parse_webhook(CALLBACK)

    assert [m.content for m in messages] == [
        "Need 500 atom bombs", "Button: Get quote", "Interactive: list_reply",
    ]
    assert messages[0].contact_name == "Raj Kumar"
    assert messages[0].sender == "919876543210"
    assert statuses[0].message_id == "wamid.ABC"
    assert statuses[0].status == "delivered"


def test_parse_webhook_ignores_other_objects():
    assert parse_webhook({"object": "page", "entry": CALLBACK["entry"]}) == ([], [])


def test_send_message_endpoint(client, calls):
    calls(FakeResponse(200, {"messages": [{"id": "wamid.XYZ"}]}))
    response = client.post("/api/whatsapp/send-message", json={"phoneNumber": "+919876543210", "message": "Hello"})
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["messageId"] == "wamid.XYZ"


def test_send_message_endpoint_upstream_failure(client, calls):
    calls(FakeResponse(400, {"error": {"code": 131030}}))
    response = client.post("/api/whatsapp/send-message", json={"phoneNumber": "1", "message": "Hello"})
    assert response.status_code == 400
    assert response.json() == {"error": "Failed to send message", "details": {"error": {"code": 131030}}}


def test_send_message_endpoint_unconfigured(client, settings):
    settings.WHATSAPP_PHONE_NUMBER_ID = ""
    response = client.post("/api/whatsapp/send-message", json={"phoneNumber": "1", "message": "Hello"})
    assert response.status_code == 500
    assert response.json() == {"error": "WhatsApp integration not configured"}


def test_webhook_endpoint(client):
    response = client.post("/api/whatsapp/webhook", json=CALLBACK)
    assert response.status_code == 200
    assert response.json()["status"] == "received"
    assert response.json()["messages"] == 3
