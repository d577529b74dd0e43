from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from src.hr_operations.hr_operations.notifications.gateway import (
    EmailNotificationGateway,
    NotificationDispatcher,
    SMTPConfig,
)
from tests.fakes import RecordingGateway, make_employee


def test_dispatcher_skips_missing_recipients():
    gateway = RecordingGateway()
    dispatcher = NotificationDispatcher(gateway)

    dispatcher.send(None, "Subject", "Body")
    dispatcher.notify_employee(None, "Subject", "Body")
    dispatcher.notify_employees([make_employee(1), make_employee(2)], "Hi", "There")

    assert [r for r, _, _ in gateway.sent] == ["e1@example.com", "e2@example.com"]


def test_dispatcher_swallows_gateway_errors(caplog):
    dispatcher = NotificationDispatcher(RecordingGateway(fail=True))

    with caplog.at_level(logging.WARNING):
        dispatcher.send("a@example.com", "Subject", "Body")

    assert "Notification to a@example.com failed" in caplog.text


def test_dispatcher_uses_executor_when_given():
    gateway = RecordingGateway()
    with ThreadPoolExecutor(max_workers=1) as pool:
        NotificationDispatcher(gateway, executor=pool).send("a@example.com", "Subject", "Body")

    assert gateway.sent == [("a@example.com", "Subject", "Body")]


def test_unconfigured_smtp_only_logs(caplog):
    config = SMTPConfig.from_dict({"host": "", "user": "hr@example.com"})
    assert not config.configured
    assert config.from_email == "hr@example.com"

    with caplog.at_level(logging.INFO):
        EmailNotificationGateway(config).notify("a@example.com", "Subject", "Body")

    assert "EMAIL DEBUG MODE" in caplog.text
