"""
app/api/webhook.py

Purpose: Twilio WhatsApp webhook endpoint

- Receives incoming messages as form data
- Normalizes them into UnifiedMessage
- Passes control to the flow dispatcher
- Answers with a TwiML envelope carrying the reply
"""

from fastapi import APIRouter, Form
from fastapi.responses import Response
from typing import Optional

from app.core.logging import get_logger
from app.flow.dispatcher import dispatch_message
from app.schemas.webhook import parse_twilio_message
from utils.constants import GENERIC_ERROR_MESSAGE
from utils.whatsapp_utils import build_main_menu, create_twiml_response

logger = get_logger(__name__)
router = APIRouter()

TWIML_MEDIA_TYPE = "application/xml"


@router.post("/webhook")
async def webhook_handler(
    From: str = Form(...),
    Body: Optional[str] = Form(None),
    ProfileName: Optional[str] = Form(None),
    MessageSid: Optional[str] = Form(None),
):
    """
    Webhook endpoint for Twilio WhatsApp messages.

    Always answers 200 with TwiML so Twilio does not retry the
    delivery; failures are reported to the user inside the reply.
    """
    try:
        message = parse_twilio_message(
            from_number=From,
            body=Body,
            profile_name=ProfileName,
            message_sid=MessageSid
        )

        logger.info(
            f"📱 Message from {message.name or 'unknown'} ({message.phone}): {message.text[:50]}"
        )

        reply = await dispatch_message(message)

    except Exception as e:
        logger.error(f"Webhook error: {e}", exc_info=True)
        reply = build_main_menu(GENERIC_ERROR_MESSAGE)

    return Response(content=create_twiml_response(reply), media_type=TWIML_MEDIA_TYPE)


@router.get("/webhook")
async def webhook_verification():
    """
    Lets operators check the endpoint is reachable.
    """
    return {"status": "ok", "message": "Webhook endpoint is active"}
