"""Development dispatcher that records sends in the log instead of mailing."""

import logging
import uuid

from docgen.interfaces.dispatcher import BaseDispatcher, DispatchReceipt
from docgen.interfaces.renderer import GeneratedDocument

logger = logging.getLogger(__name__)


class LogDispatcher(BaseDispatcher):
    """Logs each send and returns a synthetic message id."""

    async def send(
        self,
        to_address: str,
        recipient_name: str,
        document: GeneratedDocument,
        template_name: str,
        sender_name: str,
    ) -> DispatchReceipt:
        receipt = DispatchReceipt(
            message_id=f"<{uuid.uuid4().hex}@docgen.local>",
            to_address=to_address,
        )
        logger.info(
            f"[log dispatcher] {sender_name} -> {recipient_name} <{to_address}>: "
            f"{template_name} ({document.file_name}) id={receipt.message_id}"
        )
        return receipt
