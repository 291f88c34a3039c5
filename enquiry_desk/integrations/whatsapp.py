"""
WhatsApp Business API
=====================
Outbound text messages through the Graph API, plus the webhook
handshake and callback parsing. Callbacks are only logged.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import requests

from ..core.config import Settings
from ..core.errors import ConfigurationError, UpstreamError, ValidationError

logger = logging.getLogger(__name__)


# ── Outbound ──────────────────────────────────────────────────────────────────

def format_phone(phone_number: str) -> str:
    """The API wants bare digits: no '+', spaces or dashes"""
    return re.sub(r"[^\d]", "", phone_number)


class WhatsAppClient:

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.http = session or requests

    def build_payload(self, phone_number: str, message: str, message_type: str = "text") -> dict:
        return {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": format_phone(phone_number),
            "type": message_type,
            message_type: {
                "preview_url": False,
                "body": message,
            },
        }

    def send_message(self, phone_number: str, message: str, message_type: str = "text") -> dict:
        if not phone_number or not message:
            raise ValidationError("Phone number and message are required")
        if not self.settings.whatsapp_configured:
            raise ConfigurationError("WhatsApp integration not configured")

        url = f"{self.settings.WHATSAPP_API_BASE_URL}/{self.settings.WHATSAPP_PHONE_NUMBER_ID}/messages"
        try:
            response = self.http.post(
                url,
                json=self.build_payload(phone_number, message, message_type or "text"),
                headers={"Authorization": f"Bearer {self.settings.WHATSAPP_API_TOKEN}"},
                timeout=self.settings.WHATSAPP_TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            logger.error("WhatsApp API unreachable: %s", e)
            raise UpstreamError("Failed to send message", 502, {"message": str(e)}) from e

        if not response.ok:
            try:
                details = response.json()
            except ValueError:
                details = {"body": response.text}
            logger.error("WhatsApp API error (%s): %s", response.status_code, details)
            raise UpstreamError("Failed to send message", response.status_code, details)

        data = response.json()
        try:
            message_id = data["messages"][0]["id"]
        except (KeyError, IndexError, TypeError):
            raise UpstreamError("Failed to send message", 502, {"unexpected_response": data}) from None

        logger.info("WhatsApp message %s sent to %s", message_id, format_phone(phone_number))
        return {
            "messageId": message_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


# ── Webhook ───────────────────────────────────────────────────────────────────

def verify_subscription(mode: Optional[str], token: Optional[str], expected_token: str) -> bool:
    return mode == "subscribe" and bool(expected_token) and token == expected_token


@dataclass
class InboundMessage:
    message_id: str
    sender: str
    contact_name: str
    timestamp: Optional[str]
    type: str
    content: str


@dataclass
class StatusUpdate:
    message_id: str
    status: str  # sent / delivered / read / failed
    timestamp: Optional[str]
    recipient: Optional[str] = None


def message_content(message: dict) -> str:
    kind = message.get("type")
    if kind == "text":
        return (message.get("text") or {}).get("body", "")
    if kind == "button":
        return f"Button: {(message.get('button') or {}).get('text', '')}"
    if kind == "interactive":
        return f"Interactive: {(message.get('interactive') or {}).get('type', '')}"
    return ""


def parse_webhook(payload: dict) -> tuple[list, list]:
    """Returns (inbound messages, status updates) from a provider callback"""
    messages, statuses = [], []
    if payload.get("object") != "whatsapp_business_account":
        return messages, statuses

    for entry in payload.get("entry") or []:
        for change in entry.get("changes") or []:
            value = change.get("value") or {}
            contacts = value.get("contacts") or []
            contact_name = ((contacts[0] if contacts else {}).get("profile") or {}).get("name")

            for message in value.get("messages") or []:
                sender = message.get("from", "")
                messages.append(InboundMessage(
                    message_id=message.get("id", ""),
                    sender=sender,
                    contact_name=contact_name or sender,
                    timestamp=message.get("timestamp"),
                    type=message.get("type", ""),
                    content=message_content(message),
                ))

            for status in value.get("statuses") or []:
                statuses.append(StatusUpdate(
                    message_id=status.get("id", ""),
                    status=status.get("status", ""),
                    timestamp=status.get("timestamp"),
                    recipient=status.get("recipient_id"),
                ))

    return messages, statuses


def log_webhook(messages: list, statuses: list):
    for m in messages:
        logger.info("[WhatsApp] Incoming message from %s (%s): %s", m.contact_name, m.sender, m.content)
    for s in statuses:
        logger.info("[WhatsApp] Message %s - Status: %s", s.message_id, s.status)
