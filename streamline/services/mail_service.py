import asyncio
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr
from typing import Protocol

import aiohttp

from streamline.core.config import Settings
from streamline.core.errors import ConfigurationError, DispatchError
from streamline.core.logger import get_logger
from streamline.models.email_message import OutboundEmail

logger = get_logger(__name__)


class Mailer(Protocol):
    async def send(self, message: OutboundEmail) -> str:
        """Deliver one message and return a receipt, or raise DispatchError."""
        ...

    async def verify(self) -> None:
        """Check the transport is reachable, or raise ConfigurationError."""
        ...


def build_mime(message: OutboundEmail) -> EmailMessage:
    mime = EmailMessage()
    mime["From"] = formataddr((message.from_name, message.from_address))
    mime["To"] = message.to
    if message.reply_to:
        mime["Reply-To"] = message.reply_to
    mime["Subject"] = message.subject
    mime.set_content(message.html, subtype="html")
    return mime


class SmtpMailer:
    """Sends through an SMTP account, Gmail by default.

    smtplib is blocking, so every session runs in a worker thread.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        security: str = "ssl",
        timeout: float = 20.0,
    ):
        if security not in ("ssl", "starttls"):
            raise ConfigurationError(f"Unknown SMTP_SECURITY '{security}'")
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.security = security
        self.timeout = timeout

    def _connect(self) -> smtplib.SMTP:
        context = ssl.create_default_context()
        if self.security == "ssl":
            client = smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout, context=context)
        else:
            client = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
            client.ehlo()
            client.starttls(context=context)
            client.ehlo()
        try:
            if self.username and self.password:
                client.login(self.username, self.password)
        except Exception:
            client.close()
            raise
        return client

    def _deliver(self, mime: EmailMessage) -> str:
        with self._connect() as client:
            refused = client.send_message(mime)
        if refused:
            return f"accepted by {self.host}, refused: {', '.join(refused)}"
        return f"accepted by {self.host}"

    def _noop(self) -> None:
        with self._connect() as client:
            client.noop()

    async def send(self, message: OutboundEmail) -> str:
        mime = build_mime(message)
        try:
            return await asyncio.to_thread(self._deliver, mime)
        except Exception as e:
            raise DispatchError(f"SMTP send via {self.host}:{self.port} failed: {e!r}") from e

    async def verify(self) -> None:
        try:
            await asyncio.to_thread(self._noop)
        except Exception as e:
            raise ConfigurationError(f"SMTP check against {self.host}:{self.port} failed: {e!r}") from e


class HttpRelayMailer:
    """Posts messages to an HTTP mail relay API as JSON."""

    def __init__(self, url: str, token: str = "", timeout: float = 20.0):
        if not url:
            raise ConfigurationError("MAIL_RELAY_URL not configured in settings.")
        self.url = url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.headers = {"Content-Type": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    async def send(self, message: OutboundEmail) -> str:
        payload = {
            "from": formataddr((message.from_name, message.from_address)),
            "to": message.to,
            "subject": message.subject,
            "html": message.html,
        }
        if message.reply_to:
            payload["reply_to"] = message.reply_to

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(self.url, json=payload, headers=self.headers) as response:
                    body = await response.text()
                    if response.status >= 400:
                        raise DispatchError(f"Mail relay returned {response.status}: {body}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DispatchError(f"Mail relay request to {self.url} failed: {e!r}") from e

        return f"relay {response.status}: {body[:200]}"

    async def verify(self) -> None:
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.get(self.url, headers=self.headers) as response:
                    status = response.status
        except Exception as e:
            raise ConfigurationError(f"Mail relay {self.url} unreachable: {e!r}") from e
        if status >= 500:
            raise ConfigurationError(f"Mail relay {self.url} answered {status}")


def build_mailer(settings: Settings) -> Mailer:
    backend = settings.MAIL_BACKEND.lower()
    logger.info(f"Using '{backend}' mail backend")
    if backend == "smtp":
        return SmtpMailer(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER,
            password=settings.SMTP_PASS,
            security=settings.SMTP_SECURITY.lower(),
            timeout=settings.MAIL_SEND_TIMEOUT,
        )
    if backend == "http":
        return HttpRelayMailer(
            url=settings.MAIL_RELAY_URL,
            token=settings.MAIL_RELAY_TOKEN,
            timeout=settings.MAIL_SEND_TIMEOUT,
        )
    raise ConfigurationError(f"Unknown MAIL_BACKEND '{settings.MAIL_BACKEND}'")
