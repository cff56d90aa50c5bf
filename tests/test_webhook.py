import pytest
from fastapi.testclient import TestClient

from app.flow.dispatcher import ConversationService, set_conversation_service
from app.main import app
from app.schemas.webhook import parse_twilio_message
from app.services.session_service import SessionStore

client = TestClient(app)

SENDER = "whatsapp:+5491100000001"


@pytest.fixture(autouse=True)
def conversation(ledger):
    service = ConversationService(ledger=ledger, store=SessionStore())
    set_conversation_service(service)
    yield service
    set_conversation_service(None)


def send(body, **extra):
    data = {"From": SENDER, "Body": body, "ProfileName": "Lucía", "MessageSid": "SM123"}
    data.update(extra)
    return client.post("/webhook", data=data)


def test_parse_twilio_message():
    message = parse_twilio_message("whatsapp:+5491100000001", None)

    assert message.phone == "+5491100000001"
    assert message.name is None
    assert message.text == ""
    assert message.message_id.startswith("twilio_")


def test_webhook_replies_with_twiml():
    response = send("hola")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/xml")
    assert response.text.startswith('<?xml version="1.0" encoding="UTF-8"?><Response><Message>')
    assert "GESTOR FINANCIERO PERSONAL" in response.text


def test_webhook_drives_conversation(ledger):
    send("3")
    send("2.500")
    response = send("Pan & Leche")

    assert "Pan &amp; Leche" in response.text
    [expense] = ledger.expenses
    assert expense.amount == 2500
    assert expense.description == "Pan & Leche"


def test_webhook_registers_profile_name(ledger):
    send("hola")

    assert ledger.users["+5491100000001"].name == "Lucía"


def test_webhook_without_profile_name_stores_empty_name(ledger):
    client.post("/webhook", data={"From": SENDER, "Body": "hola"})

    assert ledger.users["+5491100000001"].name == ""


def test_webhook_storage_failure_still_answers(ledger):
    send("1")
    ledger.fail = True

    response = send("150000")

    assert response.status_code == 200
    assert "planilla" in response.text


def test_webhook_requires_sender():
    response = client.post("/webhook", data={"Body": "hola"})

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_webhook_verification():
    response = client.get("/webhook")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_health_reports_sessions(conversation):
    send("hola")

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["checks"] == {"active_sessions": 1, "sheets": "healthy"}


def test_ready_fails_when_ledger_is_down(conversation, monkeypatch):
    async def unhealthy():
        return False

    monkeypatch.setattr(conversation.ledger, "health_check", unhealthy)

    response = client.get("/ready")

    assert response.status_code == 503
    assert response.json()["status"] == "not_ready"


def test_live():
    assert client.get("/live").json() == {"status": "alive"}


def test_health_degraded_when_sheets_down(conversation, monkeypatch):
    async def unhealthy():
        return False

    monkeypatch.setattr(conversation.ledger, "health_check", unhealthy)

    response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"
