"""
Console email sender adapter - Implements EmailSender protocol.

This module provides a console-based implementation of the domain's
email sender port, logging outbound messages for local development.
"""

import logging

from src.domain.ports import EmailMessage

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """
    Implements EmailSender protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Used when no Resend API key is configured.
    """

    def send(self, message: EmailMessage) -> None:
        """
        Log the envelope of a message (simulates email delivery).

        The body is not logged; it carries applicant personal data.

        Args:
            message: Outbound message built by the notification dispatcher
        """
        logger.info(
            "[EMAIL] To: %s Reply-To: %s Subject: %s",
            ", ".join(message.to),
            message.reply_to or "-",
            message.subject,
        )
