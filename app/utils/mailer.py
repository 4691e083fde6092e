"""
SMTP transport for release notifications.

Builds a plain-text message with optional attachments and delivers it
over implicit TLS (port 465) or STARTTLS when the relay offers it.
"""

import mimetypes
import smtplib
import ssl
from email.message import EmailMessage
from typing import Sequence

from loguru import logger

from app.models.schemas import Attachment
from app.utils.config import NotifySettings
from app.utils.errors import SendError

IMPLICIT_TLS_PORT = 465


def build_message(
    sender: str,
    recipients: Sequence[str],
    subject: str,
    body: str,
    attachments: Sequence[Attachment] = (),
) -> EmailMessage:
    """Assemble a MIME message; attachments are typed by file extension."""
    message = EmailMessage()
    message["From"] = sender
    message["To"] = ", ".join(recipients)
    message["Subject"] = subject
    message.set_content(body)

    for attachment in attachments:
        mime_type, _ = mimetypes.guess_type(attachment.filename)
        maintype, _, subtype = (mime_type or "application/octet-stream").partition("/")
        message.add_attachment(
            attachment.content,
            maintype=maintype,
            subtype=subtype,
            filename=attachment.filename,
        )

    return message


class SmtpTransport:
    """Delivers notifications through an authenticated SMTP relay."""

    def __init__(self, settings: NotifySettings):
        self.settings = settings

    def _tls_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context()
        if not self.settings.verify_tls:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    def _connect(self) -> smtplib.SMTP:
        host, port, timeout = self.settings.host, self.settings.port, self.settings.timeout
        context = self._tls_context()

        if port == IMPLICIT_TLS_PORT:
            return smtplib.SMTP_SSL(host, port, timeout=timeout, context=context)

        server = smtplib.SMTP(host, port, timeout=timeout)
        server.ehlo()
        if server.has_extn("starttls"):
            server.starttls(context=context)
            server.ehlo()
        return server

    def send(
        self,
        sender: str,
        recipients: Sequence[str],
        subject: str,
        body: str,
        attachments: Sequence[Attachment] = (),
    ) -> None:
        """
        Send one message.

        Raises:
            SendError: on any SMTP or socket failure
        """
        message = build_message(sender, recipients, subject, body, attachments)
        relay = f"{self.settings.host}:{self.settings.port}"

        try:
            with self._connect() as server:
                if self.settings.password:
                    server.login(sender, self.settings.password)
                server.send_message(message, from_addr=sender, to_addrs=list(recipients))
        except (smtplib.SMTPException, OSError) as e:
            raise SendError("Failed to send email", entity=relay, cause=e) from e

        logger.debug(f"Message '{subject}' relayed via {relay} to {len(recipients)} recipient(s)")
