"""Contact-form relay to the Telegram Bot API.

The bot token and chat id come from the environment (``TELEGRAM_TOKEN``,
``CHAT_ID``) at call time. Delivery is a single POST: no retry, no backoff.
"""

from __future__ import annotations

import html
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests


logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.telegram.org"
DEFAULT_TIMEOUT_SECONDS = 20.0


class RelayConfigError(RuntimeError):
    """Raised when the bot token or chat id is not configured."""


class RelayError(RuntimeError):
    """Raised when the provider cannot be reached or answers with garbage."""


@dataclass(frozen=True)
class RelaySettings:
    token: str
    chat_id: str
    api_base: str = DEFAULT_API_BASE
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def send_url(self) -> str:
        return f"{self.api_base}/bot{self.token}/sendMessage"


def load_relay_settings() -> RelaySettings:
    token = os.getenv("TELEGRAM_TOKEN", "").strip()
    chat_id = os.getenv("CHAT_ID", "").strip()
    missing = [name for name, value in (("TELEGRAM_TOKEN", token), ("CHAT_ID", chat_id)) if not value]
    if missing:
        raise RelayConfigError(f"{', '.join(missing)} not set")

    api_base = os.getenv("TELEGRAM_API_BASE", DEFAULT_API_BASE).strip().rstrip("/") or DEFAULT_API_BASE
    try:
        timeout = float(os.getenv("RELAY_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS))
    except ValueError:
        timeout = DEFAULT_TIMEOUT_SECONDS
    return RelaySettings(token=token, chat_id=chat_id, api_base=api_base, timeout=timeout)


def format_contact_message(name: str, email: str, message: str) -> str:
    # Sent with parse_mode=HTML, so user text must be escaped.
    return (
        "📩 New message from your website!\n\n"
        f"👤 Name: {html.escape(name or '')}\n"
        f"📧 Email: {html.escape(email or '')}\n"
        f"💬 Message: {html.escape(message or '')}"
    )


def send_contact_message(
    name: str,
    email: str,
    message: str,
    *,
    settings: Optional[RelaySettings] = None,
) -> Dict[str, Any]:
    settings = settings or load_relay_settings()
    payload = {
        "chat_id": settings.chat_id,
        "text": format_contact_message(name, email, message),
        "parse_mode": "HTML",
    }
    try:
        resp = requests.post(settings.send_url, json=payload, timeout=settings.timeout)
        data = resp.json()
    except requests.RequestException as exc:
        logger.error("Telegram relay request failed: %s", type(exc).__name__)
        raise RelayError("Telegram relay request failed") from exc
    except ValueError as exc:
        raise RelayError("Telegram relay returned a non-JSON response") from exc
    if not isinstance(data, dict):
        raise RelayError("Telegram relay returned an unexpected payload")

    if data.get("ok"):
        logger.info("Contact message relayed (chat_id=%s)", settings.chat_id)
    else:
        logger.warning("Telegram relay rejected message: %s", data.get("description"))
    return data
