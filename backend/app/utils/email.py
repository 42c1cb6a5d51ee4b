import asyncio
import logging
from email.message import EmailMessage
from email.utils import formataddr

import aiosmtplib

from ..core.config import settings

logger = logging.getLogger(__name__)


async def _send_async(msg: EmailMessage) -> None:
    await aiosmtplib.send(
        msg,
        hostname=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USERNAME or None,
        password=settings.SMTP_PASSWORD or None,
        start_tls=bool(settings.SMTP_USERNAME),
    )


def send_email(recipient: str, subject: str, body: str) -> None:
    """Send a plain-text email via SMTP.

    With no SMTP_HOST configured the message is logged instead of sent.
    Delivery errors propagate so the background worker can retry them.
    """
    if not settings.SMTP_HOST:
        logger.info("Email not sent (no SMTP_HOST): to=%s subject=%s\n%s", recipient, subject, body)
        return
    msg = EmailMessage()
    msg["From"] = formataddr((settings.SMTP_FROM_NAME, settings.SMTP_FROM))
    msg["To"] = recipient
    msg["Subject"] = subject
    msg.set_content(body)
    asyncio.run(_send_async(msg))
    logger.info("Sent email to %s", recipient)
