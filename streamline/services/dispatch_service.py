import asyncio
import html
import re
from typing import Any, Mapping, Optional

from streamline.core.errors import DispatchError, SubmissionError
from streamline.core.logger import get_logger
from streamline.models.contact_message import ContactMessage
from streamline.models.email_message import OutboundEmail
from streamline.models.quote_request import QuoteRequest
from streamline.models.response import SubmissionResult
from streamline.services.mail_service import Mailer
from streamline.services.sanitizer import sanitize_contact, sanitize_quote

logger = get_logger(__name__)

QUOTE_SENT = "Quote request sent ✅"
CONTACT_SENT = "Message sent ✅"

_HEADER_WHITESPACE = re.compile(r"\s+")
_LINE_BREAKS = re.compile(r"\r\n|\r|\n")


def _header_text(value: str) -> str:
    # CR/LF inside a header value would start a new header
    return _HEADER_WHITESPACE.sub(" ", value).strip()


def _labeled_line(label: str, value: str) -> str:
    return f"<p><b>{label}:</b> {html.escape(value)}</p>"


def render_quote(quote: QuoteRequest) -> tuple[str, str]:
    subject = f"New Quote Request - {_header_text(quote.service_type)}"
    body = "\n".join(
        [
            "<h2>New Quote Request</h2>",
            _labeled_line("Name", quote.name),
            _labeled_line("Phone", quote.phone),
            _labeled_line("Pickup", quote.pickup),
            _labeled_line("Destination", quote.destination),
            _labeled_line("Service", quote.service_type),
        ]
    )
    return subject, body


def render_contact(contact: ContactMessage) -> tuple[str, str]:
    subject = f"New Contact Message - {_header_text(contact.name)}"
    message_html = _LINE_BREAKS.sub("<br>", html.escape(contact.message))
    body = "\n".join(
        [
            "<h2>New Contact Message</h2>",
            _labeled_line("Name", contact.name),
            _labeled_line("Email", contact.email),
            f"<p><b>Message:</b><br>{message_html}</p>",
        ]
    )
    return subject, body


class NotificationDispatcher:
    """Validates a form submission and turns it into exactly one email.

    Every public method returns a SubmissionResult; failures never escape.
    """

    def __init__(
        self,
        mailer: Mailer,
        sender_address: str,
        recipient: str,
        sender_name: str = "Streamline Shipping Website",
        send_timeout: float = 20.0,
    ):
        self.mailer = mailer
        self.sender_address = sender_address
        self.sender_name = sender_name
        self.recipient = recipient
        self.send_timeout = send_timeout

    def _compose(self, subject: str, body: str, reply_to: Optional[str] = None) -> OutboundEmail:
        return OutboundEmail(
            from_name=self.sender_name,
            from_address=self.sender_address,
            to=self.recipient,
            reply_to=reply_to,
            subject=subject,
            html=body,
        )

    async def _dispatch(self, message: OutboundEmail) -> str:
        try:
            return await asyncio.wait_for(self.mailer.send(message), timeout=self.send_timeout)
        except asyncio.TimeoutError as e:
            raise DispatchError(f"Mail send timed out after {self.send_timeout}s") from e
        except DispatchError:
            raise
        except Exception as e:
            raise DispatchError(f"Unexpected mailer error: {e!r}") from e

    async def submit_quote(self, raw: Mapping[str, Any]) -> SubmissionResult:
        logger.info("QUOTE HIT ✅")
        try:
            quote = sanitize_quote(raw)
            subject, body = render_quote(quote)
            receipt = await self._dispatch(self._compose(subject, body))
        except SubmissionError as e:
            return self._failure("quote", e)

        logger.info(f"MAIL SENT (quote, service={quote.service_type!r}): {receipt}")
        return SubmissionResult(ok=True, message=QUOTE_SENT)

    async def submit_contact(self, raw: Mapping[str, Any]) -> SubmissionResult:
        logger.info("CONTACT HIT ✅")
        try:
            contact = sanitize_contact(raw)
            subject, body = render_contact(contact)
            message = self._compose(subject, body, reply_to=contact.email)
            receipt = await self._dispatch(message)
        except SubmissionError as e:
            return self._failure("contact", e)

        logger.info(f"MAIL SENT (contact, {len(contact.message)} chars): {receipt}")
        return SubmissionResult(ok=True, message=CONTACT_SENT)

    def _failure(self, kind: str, error: SubmissionError) -> SubmissionResult:
        if isinstance(error, DispatchError):
            logger.error(f"MAIL ERROR ({kind}): {error.detail}", exc_info=error.__cause__ is not None)
        else:
            logger.warning(f"Rejected {kind} submission: {error.message}")
        return SubmissionResult(ok=False, message=error.message, status_code=error.status_code)
