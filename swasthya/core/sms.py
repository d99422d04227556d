"""Outbound SMS."""

from swasthya.core.logging import logger


async def send_sms(phone: str, text: str) -> bool:
    """
    Send a text message to a Nepali mobile number.

    No gateway is wired in yet, so messages are written to the log.
    """
    logger.info(f"📱 SMS to {phone}: {text}")
    return True
