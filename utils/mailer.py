"""Outgoing mail over SMTP."""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr
from typing import Mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MailSettings:
    """SMTP credentials, captured once when the application starts."""

    host: str
    port: int
    username: str | None
    password: str | None
    from_name: str
    use_tls: bool = True

    @classmethod
    def from_config(cls, config: Mapping) -> "MailSettings":
        return cls(
            host=config.get("EMAIL_HOST") or "smtp.gmail.com",
            port=int(config.get("EMAIL_PORT") or 587),
            username=config.get("EMAIL_USER") or None,
            password=config.get("EMAIL_PASS") or None,
            from_name=config.get("EMAIL_FROM_NAME") or "MyBlog",
            use_tls=bool(config.get("EMAIL_USE_TLS", True)),
        )

    @property
    def configured(self) -> bool:
        return bool(self.username and self.password)


def build_message(settings: MailSettings, to: str, subject: str, html: str) -> EmailMessage:
    message = EmailMessage()
    message["From"] = formataddr((settings.from_name, settings.username or ""))
    message["To"] = to
    message["Subject"] = subject
    message.set_content("This message requires an HTML capable mail client.")
    message.add_alternative(html, subtype="html")
    return message


def send_email(settings: MailSettings, to: str, subject: str, html: str) -> None:
    """Send an HTML email. Transport errors propagate to the caller."""

    message = build_message(settings, to, subject, html)
    with smtplib.SMTP(settings.host, settings.port) as server:
        if settings.use_tls:
            server.starttls()
        if settings.username and settings.password:
            server.login(settings.username, settings.password)
        server.send_message(message)

    logger.info("Email %r sent to %s", subject, to)
