"""
AccountHub Backend — Mailer Interface
=======================================

What:  Contract for account e-mails, plus the default implementation that
       writes the rendered message to the log.
Why:   Mail transport is deployment-specific (SMTP relay, provider API).
       The registration handler only needs "send the confirmation message".
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

from accounthub.config import settings

logger = logging.getLogger(__name__)


class Mailer(ABC):
    """Account e-mail delivery."""

    @abstractmethod
    async def send_confirmation_email_message(self, user: Any) -> None:
        """Send the 'confirm your e-mail address' message to `user.email`."""
        ...


def render_confirmation_message(user: Any) -> Dict[str, str]:
    url = settings.confirmation_url_template.format(token=user.confirmation_token)
    return {
        "from": settings.mailer_from_address,
        "to": user.email,
        "subject": f"Welcome {user.username}!",
        "body": (
            f"Hello {user.username},\n\n"
            f"To finish activating your account, please visit {url}\n\n"
            "This link can only be used once to validate your account."
        ),
    }


class LoggingMailer(Mailer):
    """Logs rendered messages instead of delivering them (development default)."""

    async def send_confirmation_email_message(self, user: Any) -> None:
        message = render_confirmation_message(user)
        logger.info(
            "Confirmation e-mail to %s: %s\n%s",
            message["to"],
            message["subject"],
            message["body"],
        )
