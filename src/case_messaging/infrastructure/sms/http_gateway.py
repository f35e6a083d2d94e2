"""SMS delivery over a Twilio-compatible REST API.

The gateway runs in disabled mode when no base URL or credentials are
configured: every send is then reported as skipped and nothing leaves the
process.
"""
from __future__ import annotations

import logging
import re
from typing import Any

import httpx

from case_messaging.application.ports.sms import SmsResult

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES: dict[str, str] = {
    "message_received": (
        "You have a new message from {{sender_name}}. "
        "Sign in to your client area to read it."
    ),
}

_SEPARATORS = re.compile(r"[\s\-.()]")
_PLACEHOLDER = re.compile(r"\{\{(\w+)\}\}")


def format_phone_number(phone: str | None, default_country_code: str = "33") -> str | None:
    """Normalise a phone number to E.164.

    A leading ``0`` is treated as a national prefix and replaced by the
    default country code.
    """
    if not phone:
        return None
    cleaned = _SEPARATORS.sub("", phone)
    if not cleaned:
        return None
    if cleaned.startswith("+"):
        return cleaned
    if cleaned.startswith("00"):
        return "+" + cleaned[2:]
    if cleaned.startswith("0"):
        return f"+{default_country_code}{cleaned[1:]}"
    return "+" + cleaned


def fill_template(template: str, variables: dict[str, Any]) -> str:
    """Replace ``{{name}}`` placeholders; unknown or empty values become ''."""
    return _PLACEHOLDER.sub(lambda m: str(variables.get(m.group(1)) or ""), template)


class HttpSmsGateway:
    def __init__(
        self,
        *,
        base_url: str,
        account_sid: str,
        auth_token: str,
        sender: str,
        timeout_seconds: float = 10.0,
        default_country_code: str = "33",
        templates: dict[str, str] | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._account_sid = account_sid
        self._auth_token = auth_token
        self._sender = sender
        self._timeout = timeout_seconds
        self._default_country_code = default_country_code
        self._templates = templates or DEFAULT_TEMPLATES
        self._client: httpx.AsyncClient | None = None

    @property
    def enabled(self) -> bool:
        return bool(self._base_url and self._account_sid and self._auth_token and self._sender)

    async def start(self) -> None:
        if not self.enabled:
            logger.info("SMS gateway disabled: base URL, credentials or sender not configured")
            return
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            auth=(self._account_sid, self._auth_token),
            timeout=httpx.Timeout(self._timeout),
        )
        logger.info("SMS gateway started (%s)", self._base_url)

    async def stop(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("SMS gateway stopped")

    async def send(self, phone: str, body: str) -> SmsResult:
        """Send one SMS. Raises ``httpx.HTTPError`` on transport or non-2xx errors."""
        if self._client is None:
            return SmsResult(success=False, skipped=True, reason="disabled")

        to = format_phone_number(phone, self._default_country_code)
        if to is None:
            return SmsResult(success=False, skipped=True, reason="invalid_phone")
        text = body.strip()
        if not text:
            return SmsResult(success=False, skipped=True, reason="empty_body")

        response = await self._client.post(
            f"/2010-04-01/Accounts/{self._account_sid}/Messages.json",
            data={"To": to, "From": self._sender, "Body": text},
        )
        response.raise_for_status()
        provider_id = response.json().get("sid")
        logger.info("SMS %s sent to %s", provider_id, to)
        return SmsResult(success=True, provider_id=provider_id)

    async def send_notification_sms(
        self,
        phone: str,
        template_kind: str,
        variables: dict[str, Any],
    ) -> SmsResult:
        template = self._templates.get(template_kind)
        if template is None:
            logger.warning("No SMS template for %r", template_kind)
            return SmsResult(success=False, skipped=True, reason="unknown_template")
        return await self.send(phone, fill_template(template, variables))
