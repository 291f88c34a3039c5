import logging

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse, PlainTextResponse

from ..core.config import Settings
from ..dependencies import get_settings, get_whatsapp
from ..integrations.whatsapp import WhatsAppClient, log_webhook, parse_webhook, verify_subscription
from ..schemas import SendMessageRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/whatsapp", tags=["whatsapp"])


@router.post("/send-message")
def send_message(body: SendMessageRequest, client: WhatsAppClient = Depends(get_whatsapp)):
    # Plain def: requests blocks, so FastAPI runs this in its threadpool
    result = client.send_message(body.phone_number, body.message, body.message_type)
    return {"success": True, **result}


@router.get("/webhook")
async def verify_webhook(
    mode: str = Query(None, alias="hub.mode"),
    token: str = Query(None, alias="hub.verify_token"),
    challenge: str = Query("", alias="hub.challenge"),
    settings: Settings = Depends(get_settings),
):
    if verify_subscription(mode, token, settings.WHATSAPP_WEBHOOK_TOKEN):
        logger.info("Webhook verified")
        return PlainTextResponse(challenge, status_code=200)
    return JSONResponse(status_code=403, content={"error": "Webhook verification failed"})


@router.post("/webhook")
async def receive_webhook(payload: dict = Body(...)):
    try:
        messages, statuses = parse_webhook(payload)
    except Exception:
        logger.exception("Error processing webhook")
        return JSONResponse(status_code=500, content={"error": "Failed to process webhook"})

    log_webhook(messages, statuses)
    return {"status": "received", "messages": len(messages), "statuses": len(statuses)}
