"""SMTP dispatcher that mails generated documents as attachments."""

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr, make_msgid

from docgen.interfaces.dispatcher import BaseDispatcher, DispatchError, DispatchReceipt
from docgen.interfaces.renderer import GeneratedDocument

logger = logging.getLogger(__name__)


class SmtpDispatcher(BaseDispatcher):
    """Sends documents through an SMTP relay.

    smtplib is blocking, so each send runs in the default executor to keep
    the event loop free during a batch.
    """

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        mail_from: str = "noreply@docgen.local",
        timeout: float = 30.0,
    ) -> None:
        """Initialize the SMTP dispatcher.

        Args:
            host: SMTP server host.
            port: SMTP server port.
            username: Login user. Login is skipped when None.
            password: Login password.
            use_tls: Issue STARTTLS before login.
            mail_from: Sender address for the envelope and From header.
            timeout: Socket timeout in seconds.
        """
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._mail_from = mail_from
        self._timeout = timeout

    def build_message(
        self,
        to_address: str,
        recipient_name: str,
        document: GeneratedDocument,
        template_name: str,
        sender_name: str,
    ) -> EmailMessage:
        """Compose the notification email with the document attached."""
        message = EmailMessage()
        message["Subject"] = f"Your {template_name} is ready"
        message["From"] = formataddr((sender_name, self._mail_from))
        message["To"] = formataddr((recipient_name, to_address))
        message["Message-ID"] = make_msgid(domain=self._mail_from.rpartition("@")[2] or None)
        message.set_content(
            f"Dear {recipient_name},\n\n"
            f"Please find attached your {template_name}.\n\n"
            f"Best regards,\n{sender_name}\n"
        )

        maintype, _, subtype = document.mime_type.partition("/")
        message.add_attachment(
            document.file_path.read_bytes(),
            maintype=maintype,
            subtype=subtype,
            filename=document.file_name,
        )
        return message

    def _send_sync(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
            if self._use_tls:
                smtp.starttls()
            if self._username:
                smtp.login(self._username, self._password or "")
            smtp.send_message(message)

    async def send(
        self,
        to_address: str,
        recipient_name: str,
        document: GeneratedDocument,
        template_name: str,
        sender_name: str,
    ) -> DispatchReceipt:
        """Send a generated document by email.

        Raises:
            DispatchError: On SMTP or file errors.
        """
        try:
            message = self.build_message(
                to_address, recipient_name, document, template_name, sender_name
            )
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self._send_sync, message)

        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send {document.file_name} to {to_address}: {e}")
            raise DispatchError(f"Email delivery failed: {e}") from e

        message_id = message["Message-ID"]
        logger.info(f"Sent {document.file_name} to {to_address} ({message_id})")
        return DispatchReceipt(message_id=message_id, to_address=to_address)
