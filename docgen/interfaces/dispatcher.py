"""Abstract base class for notification dispatchers.

A dispatcher delivers a generated document to a recipient address.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from docgen.interfaces.renderer import GeneratedDocument


class DispatchError(Exception):
    """Raised when a document could not be delivered."""


@dataclass(frozen=True)
class DispatchReceipt:
    """Proof of a successful send.

    Attributes:
        message_id: Identifier assigned to the outgoing message.
        to_address: Recipient address the message was sent to.
    """

    message_id: str
    to_address: str


class BaseDispatcher(ABC):
    """Abstract base class for delivery strategies."""

    @abstractmethod
    async def send(
        self,
        to_address: str,
        recipient_name: str,
        document: GeneratedDocument,
        template_name: str,
        sender_name: str,
    ) -> DispatchReceipt:
        """Send a generated document to a recipient.

        Args:
            to_address: Recipient email address.
            recipient_name: Name used in the greeting.
            document: The generated document to attach.
            template_name: Template the document was generated from.
            sender_name: Display name of the sending user.

        Returns:
            A DispatchReceipt carrying the message id.

        Raises:
            DispatchError: If the message could not be sent.
        """
        ...
