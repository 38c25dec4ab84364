from __future__ import annotations

import logging
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional, Protocol, Sequence, Type

from jinja2 import Environment, TemplateError

from .config import SmtpConfig
from .email_formatter import build_email_context, build_environment, render_email_body
from .models import DeliveryResult, Event

logger = logging.getLogger(__name__)


class MailError(Exception):
    """Raised when mail sending fails."""


class MailTransport(Protocol):
    def verify(self) -> None: ...

    def send(self, message: EmailMessage) -> None: ...


class SmtpMailer:
    """One SMTP connection per message, login with the configured account."""

    def __init__(
        self,
        config: SmtpConfig,
        timeout: float = 30.0,
        smtp_class: Optional[Type[smtplib.SMTP]] = None,
        smtp_ssl_class: Optional[Type[smtplib.SMTP_SSL]] = None,
    ):
        self._config = config
        self._timeout = timeout
        self._smtp_class = smtp_class or smtplib.SMTP
        self._smtp_ssl_class = smtp_ssl_class or smtplib.SMTP_SSL

    def verify(self) -> None:
        try:
            with self._connect() as server:
                server.noop()
        except (smtplib.SMTPException, OSError) as exc:
            raise MailError(f"SMTP verification failed for {self._config.host}:{self._config.port}: {exc}") from exc
        logger.info("SMTP connection verified (%s:%s)", self._config.host, self._config.port)

    def send(self, message: EmailMessage) -> None:
        try:
            with self._connect() as server:
                refused = server.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise MailError(f"Failed to send email: {exc}") from exc
        if refused:
            logger.warning("Some recipients were refused: %s", sorted(refused))
        logger.info("Mail sent via %s", self._config.host)

    def _connect(self) -> smtplib.SMTP:
        context = ssl.create_default_context()
        if self._config.secure:
            server = self._smtp_ssl_class(
                self._config.host, self._config.port, timeout=self._timeout, context=context
            )
        else:
            server = self._smtp_class(self._config.host, self._config.port, timeout=self._timeout)
            try:
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls(context=context)
                    server.ehlo()
            except (smtplib.SMTPException, OSError):
                server.close()
                raise
        try:
            server.login(self._config.user, self._config.password)
        except (smtplib.SMTPException, OSError):
            server.close()
            raise
        return server


class DigestMailer:
    def __init__(
        self,
        transport: MailTransport,
        *,
        sender_name: str,
        sender_email: str,
        mailing_list: str,
        list_name: str,
        env: Optional[Environment] = None,
    ):
        self._transport = transport
        self._sender_name = sender_name
        self._sender_email = sender_email
        self._mailing_list = mailing_list
        self._list_name = list_name
        self._env = env or build_environment()

    def build_message(self, subject: str, template_name: str, events: Sequence[Event]) -> EmailMessage:
        context = build_email_context(events)
        text_body, html_body = render_email_body(self._env, template_name, context)

        message = EmailMessage()
        message["From"] = formataddr((self._sender_name, self._sender_email))
        message["To"] = self._mailing_list
        message["Reply-To"] = self._mailing_list
        message["Subject"] = subject
        message["List-ID"] = f'"{self._list_name}" <{self._mailing_list}>'
        message.set_content(text_body)
        message.add_alternative(html_body, subtype="html")
        return message

    def send_digest(self, subject: str, template_name: str, events: Sequence[Event]) -> DeliveryResult:
        try:
            message = self.build_message(subject, template_name, events)
        except TemplateError as exc:
            logger.exception("Failed to render template %r: %s", template_name, exc)
            return DeliveryResult(status="failed", error=str(exc))
        except Exception as exc:  # noqa: BLE001
            logger.exception("Failed to build digest message (template=%s): %s", template_name, exc)
            return DeliveryResult(status="failed", error=str(exc))
        try:
            self._transport.send(message)
        except MailError as exc:
            logger.error("Mail sending failed (template=%s): %s", template_name, exc)
            return DeliveryResult(status="failed", error=str(exc))
        logger.info("Digest %r sent to %s with %s event(s)", subject, self._mailing_list, len(events))
        return DeliveryResult(status="sent")
