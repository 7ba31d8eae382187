"""Email transport backed by the Resend HTTP API."""
from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from meetassist.core.errors import EmailDeliveryError
from meetassist.core.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EmailConfig:
    api_key: str | None = None
    base_url: str = "https://api.resend.com"
    from_email: str = "notes@meetassist.local"
    from_name: str = "Meeting Assistant"
    timeout: float = 30.0

    @classmethod
    def from_settings(cls, settings: Settings) -> EmailConfig:
        return cls(
            api_key=settings.resend_api_key,
            base_url=settings.resend_base_url,
            from_email=settings.email_from,
            from_name=settings.email_from_name,
            timeout=settings.email_timeout,
        )

    @property
    def sender(self) -> str:
        return f"{self.from_name} <{self.from_email}>"


async def send_email(
    recipient: str,
    subject: str,
    content: str,
    *,
    config: EmailConfig,
    client: httpx.AsyncClient | None = None,
) -> None:
    """Send one plain-text email; raises :class:`EmailDeliveryError` on any failure."""
    if not config.api_key:
        raise EmailDeliveryError("Email transport is not configured")
    payload = {"from": config.sender, "to": [recipient], "subject": subject, "text": content}
    headers = {"Authorization": f"Bearer {config.api_key}"}
    url = f"{config.base_url.rstrip('/')}/emails"
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=config.timeout) as own_client:
                response = await own_client.post(url, json=payload, headers=headers)
        else:
            response = await client.post(url, json=payload, headers=headers, timeout=config.timeout)
    except httpx.HTTPError as exc:
        raise EmailDeliveryError(f"Failed to reach email provider: {exc}") from exc
    if response.status_code >= 300:
        raise EmailDeliveryError(f"Email provider rejected message: {response.status_code} {response.text[:200]}")
    logger.debug(f"Sent '{subject}' to {recipient}")
