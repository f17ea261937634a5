import logging

import requests

from legi_monitor.config import settings
from legi_monitor.errors import NotifyError

logger = logging.getLogger(__name__)

# Discord rejects message content longer than this
MAX_CONTENT_LENGTH = 2000
SEND_TIMEOUT = 15


def is_configured(settings=settings):
    return bool(settings.DISCORD_TOKEN and settings.CHANNEL_ID)


def mention(user_id):
    return f"<@{user_id}>" if user_id else ""


def send_message(content=None, embed=None, settings=settings, session=None):
    """
    Post one message to the configured Discord channel.

    Either *content* (plain text), *embed* (embed dict) or both.
    Without a token/channel the message is only logged.

    Raises:
        NotifyError: if Discord does not accept the message.
    """
    payload = {}
    if content:
        payload["content"] = content[:MAX_CONTENT_LENGTH]
    if embed:
        payload["embeds"] = [embed]
    if not payload:
        raise ValueError("Nothing to send: content and embed are both empty")

    if not is_configured(settings):
        logger.info(f"Discord not configured. Message preview: {payload}")
        return None

    url = f"{settings.DISCORD_API_URL}/channels/{settings.CHANNEL_ID}/messages"
    headers = {
        'Authorization': f"Bot {settings.DISCORD_TOKEN}",
        'Content-Type': 'application/json',
    }
    http = session or requests
    try:
        response = http.post(url, json=payload, headers=headers, timeout=SEND_TIMEOUT)
    except requests.RequestException as e:
        raise NotifyError(f"Discord request failed: {e}") from e

    if not 200 <= response.status_code < 300:
        raise NotifyError(
            f"Discord returned HTTP {response.status_code}: {response.text[:200]}"
        )
    logger.info(f"Message sent to channel {settings.CHANNEL_ID}")
    return response


def send_messages(messages, settings=settings, session=None, send=None):
    """
    Send (content, embed) pairs in order.

    A failed message is logged and the next one is still attempted.

    Returns:
        int: number of messages delivered
    """
    send = send or send_message
    delivered = 0
    for index, (content, embed) in enumerate(messages, 1):
        try:
            send(content=content, embed=embed, settings=settings, session=session)
            delivered += 1
        except NotifyError as e:
            logger.error(f"Message {index} could not be sent: {e}")
    return delivered
