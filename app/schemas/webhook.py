"""
app/schemas/webhook.py

Purpose: WhatsApp webhook payload schemas and parsers

- Validates incoming Twilio messages
- Normalizes them into UnifiedMessage
- Ensures predictable request handling
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime, timezone

from utils.validation_utils import strip_transport_prefix


class UnifiedMessage(BaseModel):
    """
    Normalized message format for internal processing
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "phone": "+5491123456789",
                "name": "Lucía",
                "text": "1",
                "message_id": "SM1234567890",
            }
        }
    )

    phone: str = Field(..., description="User's phone number in E.164 format")
    name: Optional[str] = Field(None, description="User's display name, when the transport reports one")
    text: str = Field(..., description="Message text content")
    message_id: str = Field(..., description="Unique message identifier")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


def parse_twilio_message(
    from_number: str,
    body: Optional[str],
    profile_name: Optional[str] = None,
    message_sid: Optional[str] = None
) -> UnifiedMessage:
    """
    Parses Twilio WhatsApp webhook payload

    Twilio format (form data):
    - From: whatsapp:+5491123456789
    - Body: message text
    - ProfileName: User's name
    - MessageSid: SM...
    """
    phone = strip_transport_prefix(from_number)

    return UnifiedMessage(
        phone=phone,
        name=profile_name or None,
        text=body or "",
        message_id=message_sid or f"twilio_{datetime.now(timezone.utc).timestamp()}",
    )
