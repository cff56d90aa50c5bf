import asyncio
import json
import logging

from app.core.logging import DevelopmentFormatter, LogContext, StructuredFormatter, get_logger


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


def capture(name):
    logger = get_logger(name)
    handler = ListHandler()
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    return logger, handler


def test_context_is_attached_and_removed():
    logger, handler = capture("test.context")

    with LogContext(phone="+5491100000001", step="menu"):
        logger.info("inside")
    logger.info("outside")

    inside, outside = handler.records
    assert inside.phone == "+5491100000001"
    assert inside.step == "menu"
    assert not hasattr(outside, "phone")


async def test_context_is_isolated_between_tasks():
    logger, handler = capture("test.tasks")

    async def work(phone):
        with LogContext(phone=phone):
            await asyncio.sleep(0)
            logger.info("working")

    await asyncio.gather(work("+1111111111"), work("+2222222222"))

    assert sorted(r.phone for r in handler.records) == ["+1111111111", "+2222222222"]


def test_structured_formatter_includes_context():
    logger, handler = capture("test.json")

    with LogContext(phone="+5491100000001"):
        logger.info("Session reset", extra={"reason": "menu keyword"})

    data = json.loads(StructuredFormatter().format(handler.records[0]))
    assert data["message"] == "Session reset"
    assert data["phone"] == "+5491100000001"
    assert data["reason"] == "menu keyword"
    assert data["logger"] == "gastosbot.test.json"


def test_development_formatter_shows_phone_and_step():
    logger, handler = capture("test.dev")

    with LogContext(phone="+5491100000001", step="waiting_salary"):
        logger.info("hello")

    line = DevelopmentFormatter().format(handler.records[0])
    assert "phone=+5491100000001" in line
    assert "step=waiting_salary" in line
