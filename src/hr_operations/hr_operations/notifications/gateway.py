from __future__ import annotations

import logging
import smtplib
import ssl
from concurrent.futures import Executor
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Iterable, Optional, Protocol

from ..employees.model import Employee

log = logging.getLogger(__name__)


class NotificationGateway(Protocol):
    def notify(self, recipient: str, subject: str, message: str) -> None:
        raise NotImplementedError


@dataclass(frozen=True)
class SMTPConfig:
    host: Optional[str] = None
    port: int = 587
    user: Optional[str] = None
    password: Optional[str] = None
    from_email: Optional[str] = None
    from_name: str = ""

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> "SMTPConfig":
        d = d or {}
        return cls(
            host=d.get("host") or None,
            port=int(d.get("port") or 587),
            user=d.get("user") or None,
            password=d.get("password") or None,
            from_email=d.get("from_email") or d.get("user") or None,
            from_name=d.get("from_name") or "",
        )

    @property
    def configured(self) -> bool:
        return bool(self.host and self.user and self.password)


def _format_from(from_email: str, from_name: str = "") -> str:
    if from_name:
        return f"{from_name} <{from_email}>"
    return from_email


class EmailNotificationGateway(NotificationGateway):
    """SMTP sender. Without SMTP settings it only logs what it would send."""

    def __init__(self, config: SMTPConfig, *, timeout: int = 30):
        self._config = config
        self._timeout = timeout

    def notify(self, recipient: str, subject: str, message: str) -> None:
        cfg = self._config
        if not cfg.configured:
            log.info("EMAIL DEBUG MODE: SMTP not configured. Would send to %s (subject=%s)", recipient, subject)
            log.debug("Body: %s", message)
            return

        msg = EmailMessage()
        msg["From"] = _format_from(cfg.from_email or cfg.user, cfg.from_name)
        msg["To"] = recipient
        msg["Subject"] = subject
        msg.set_content(message)

        context = ssl.create_default_context()
        if cfg.port == 465:
            with smtplib.SMTP_SSL(cfg.host, cfg.port, context=context, timeout=self._timeout) as smtp:
                smtp.login(cfg.user, cfg.password)
                smtp.send_message(msg)
        else:
            with smtplib.SMTP(cfg.host, cfg.port, timeout=self._timeout) as smtp:
                smtp.ehlo()
                smtp.starttls(context=context)
                smtp.ehlo()
                smtp.login(cfg.user, cfg.password)
                smtp.send_message(msg)

        log.info("Email sent to %s (subject: %s)", recipient, subject)


class NotificationDispatcher:
    """Fire-and-forget delivery: failures are logged, never raised to the caller."""

    def __init__(self, gateway: NotificationGateway, *, executor: Optional[Executor] = None):
        self._gateway = gateway
        self._executor = executor

    def _deliver(self, recipient: str, subject: str, message: str) -> None:
        try:
            self._gateway.notify(recipient, subject, message)
        except Exception:
            log.warning("Notification to %s failed (subject=%s)", recipient, subject, exc_info=True)

    def send(self, recipient: Optional[str], subject: str, message: str) -> None:
        if not recipient:
            log.debug("Notification skipped, no recipient (subject=%s)", subject)
            return
        if self._executor is None:
            self._deliver(recipient, subject, message)
        else:
            self._executor.submit(self._deliver, recipient, subject, message)

    def notify_employee(self, employee: Optional[Employee], subject: str, message: str) -> None:
        if employee is None:
            return
        self.send(employee.email, subject, message)

    def notify_employees(self, employees: Iterable[Employee], subject: str, message: str) -> None:
        for employee in employees:
            self.notify_employee(employee, subject, message)
