"""
Sends a Twilio-shaped message to a locally running webhook

Run: python scripts/send_test_message.py "1"
"""
import asyncio
import sys

import httpx

WEBHOOK_URL = "http://localhost:8000/webhook"
TEST_SENDER = "whatsapp:+5491123456789"  # Replace with your number


async def send_message(body: str):
    """Simulate what Twilio sends to our webhook"""

    # This is what Twilio sends (form data, not JSON!)
    data = {
        "From": TEST_SENDER,
        "Body": body,
        "ProfileName": "Test User",
        "MessageSid": "SM1234567890"
    }

    print(f"🧪 Testing webhook: {WEBHOOK_URL}")
    print(f"📤 Sending data: {data}\n")

    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                WEBHOOK_URL,
                data=data,
                timeout=20.0
            )

            print(f"✅ Status: {response.status_code}")
            print(f"📥 Response:\n{response.text}")

    except httpx.HTTPError as e:
        print(f"❌ Error: {e}")


if __name__ == "__main__":
    asyncio.run(send_message(sys.argv[1] if len(sys.argv) > 1 else "menu"))
