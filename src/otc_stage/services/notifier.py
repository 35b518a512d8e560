"""Email notifiers delivering one-time codes.

Notifiers make a single delivery attempt and raise `NotifierError` on any
failure. Retrying is the caller's job (see `services.delivery`).
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Protocol

import httpx

from otc_stage.core.settings import Settings, settings

# Configure logger for this module
logger = logging.getLogger(__name__)

OTP_SUBJECT = "Your OTP Code"
HTTP_MULTIPLE_CHOICES = 300


class NotifierError(RuntimeError):
    """Raised when a single delivery attempt fails."""


class Notifier(Protocol):
    """Sends a one-time code to a destination address."""

    async def send_code(self, destination: str, code: str) -> None: ...

    async def close(self) -> None: ...


@dataclass(frozen=True)
class EmailConfig:
    """Immutable configuration for email delivery."""

    mode: str
    host: str
    port: int
    use_ssl: bool
    sender: str
    sender_name: str
    password: str | None
    api_url: str
    api_key: str | None
    timeout_seconds: float
    expiry_minutes: int


def load_email_config(config: Settings | None = None) -> EmailConfig:
    """Build configuration object from global settings."""
    config = config or settings
    return EmailConfig(
        mode=config.email_mode,
        host=config.email_host,
        port=config.email_port,
        use_ssl=config.email_use_ssl,
        sender=config.email_from,
        sender_name=config.email_from_name,
        password=config.email_password,
        api_url=config.email_api_url,
        api_key=config.email_api_key,
        timeout_seconds=float(config.email_timeout_seconds),
        expiry_minutes=config.otp_expiry_minutes,
    )


def render_otp_email(code: str, expiry_minutes: int) -> tuple[str, str]:
    """Return the (plain text, HTML) bodies for a code email."""
    text = f"Your OTP is: {code}. It is valid for {expiry_minutes} minutes."
    html = f"<p>Your OTP is: <b>{code}</b>. It is valid for {expiry_minutes} minutes.</p>"
    return text, html


class SmtpNotifier:
    """Sends codes through an SMTP relay.

    `smtplib` is blocking, so each send runs in a worker thread.
    """

    def __init__(self, config: EmailConfig | None = None) -> None:
        self.config = config or load_email_config()

    def _build_message(self, destination: str, code: str) -> EmailMessage:
        text, html = render_otp_email(code, self.config.expiry_minutes)
        msg = EmailMessage()
        msg["From"] = f'"{self.config.sender_name}" <{self.config.sender}>'
        msg["To"] = destination
        msg["Subject"] = OTP_SUBJECT
        msg.set_content(text)
        msg.add_alternative(html, subtype="html")
        return msg

    def _send_blocking(self, msg: EmailMessage) -> None:
        timeout = self.config.timeout_seconds
        if self.config.use_ssl:
            context = ssl.create_default_context()
            with smtplib.SMTP_SSL(
                self.config.host, self.config.port, context=context, timeout=timeout
            ) as server:
                if self.config.password:
                    server.login(self.config.sender, self.config.password)
                server.send_message(msg)
            return

        with smtplib.SMTP(self.config.host, self.config.port, timeout=timeout) as server:
            server.starttls(context=ssl.create_default_context())
            if self.config.password:
                server.login(self.config.sender, self.config.password)
            server.send_message(msg)

    async def send_code(self, destination: str, code: str) -> None:
        msg = self._build_message(destination, code)
        try:
            await asyncio.to_thread(self._send_blocking, msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send OTP email to %s: %s", destination, exc)
            raise NotifierError("Failed to send OTP email") from exc
        logger.info("OTP email sent to %s", destination)

    async def close(self) -> None:
        return None


class HttpApiNotifier:
    """Sends codes through a transactional email HTTP API (Brevo-compatible)."""

    def __init__(
        self,
        config: EmailConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or load_email_config()
        self._client = client
        self._client_lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                )
        return self._client

    def _build_payload(self, destination: str, code: str) -> dict[str, object]:
        text, html = render_otp_email(code, self.config.expiry_minutes)
        return {
            "sender": {"email": self.config.sender, "name": self.config.sender_name},
            "to": [{"email": destination}],
            "subject": OTP_SUBJECT,
            "htmlContent": html,
            "textContent": text,
        }

    async def send_code(self, destination: str, code: str) -> None:
        if not self.config.api_key:
            raise NotifierError("EMAIL_API_KEY is not set")

        client = await self._ensure_client()
        try:
            response = await client.post(
                self.config.api_url,
                headers={
                    "accept": "application/json",
                    "api-key": self.config.api_key,
                },
                json=self._build_payload(destination, code),
            )
        except httpx.HTTPError as exc:
            logger.error("Failed to send OTP email to %s: %s", destination, exc)
            raise NotifierError("Failed to send OTP email") from exc

        if response.status_code >= HTTP_MULTIPLE_CHOICES:
            logger.error(
                "Email API rejected OTP email to %s (%d)", destination, response.status_code
            )
            raise NotifierError(f"Email API responded with {response.status_code}")
        logger.info("OTP email sent to %s", destination)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


class ConsoleNotifier:
    """Logs codes instead of sending them. Development only."""

    def __init__(self, config: EmailConfig | None = None) -> None:
        self.config = config or load_email_config()

    async def send_code(self, destination: str, code: str) -> None:
        text, _ = render_otp_email(code, self.config.expiry_minutes)
        logger.warning("[DEV EMAIL] to=%s subject=%r body=%r", destination, OTP_SUBJECT, text)

    async def close(self) -> None:
        return None


def create_notifier(config: EmailConfig | None = None) -> Notifier:
    """Build the notifier selected by `EMAIL_MODE`."""
    config = config or load_email_config()
    if config.mode == "api":
        return HttpApiNotifier(config)
    if config.mode == "console":
        return ConsoleNotifier(config)
    return SmtpNotifier(config)


class _NotifierSingleton:
    """Singleton wrapper for the configured notifier."""

    _instance: Notifier | None = None

    @classmethod
    def get_instance(cls) -> Notifier:
        """Get or create the singleton notifier instance."""
        if cls._instance is None:
            cls._instance = create_notifier()
        return cls._instance

    @classmethod
    async def reset(cls) -> None:
        """Close and forget the current instance."""
        if cls._instance is not None:
            await cls._instance.close()
            cls._instance = None


def get_notifier() -> Notifier:
    """Return a singleton notifier instance."""
    return _NotifierSingleton.get_instance()


async def close_notifier() -> None:
    """Release notifier resources such as pooled HTTP connections."""
    await _NotifierSingleton.reset()
