# This project was developed with assistance from AI tools.
"""Outbound e-mail notifications.

Services only see ``Notifier.send(template, recipient, data)``. Sending
always happens after commit (see ``transaction.PostCommitActions``), so a
failing provider never undoes workflow state.
"""

import logging
from functools import lru_cache
from typing import Protocol

import httpx

from ..core.config import settings
from .tokens import build_actor_url

logger = logging.getLogger(__name__)

ACTOR_INVITATION = "actor_invitation"
TENANT_REPLACED = "tenant_replaced"
GUARANTOR_TYPE_CHANGED = "guarantor_type_changed"
POLICY_CANCELLED = "policy_cancelled"
POLICY_STATUS_CHANGED = "policy_status_changed"

SUBJECTS: dict[str, str] = {
    ACTOR_INVITATION: "Completa tu información para la póliza {policy_number}",
    TENANT_REPLACED: "Cambio de inquilino en la póliza {policy_number}",
    GUARANTOR_TYPE_CHANGED: "Cambio de garantía en la póliza {policy_number}",
    POLICY_CANCELLED: "Póliza {policy_number} cancelada",
    POLICY_STATUS_CHANGED: "La póliza {policy_number} cambió de estado",
}


def render_subject(template: str, data: dict) -> str:
    pattern = SUBJECTS.get(template, template)
    try:
        return pattern.format(**data)
    except KeyError:
        return pattern


def render_text(data: dict) -> str:
    """Plain key/value body; rich templates are rendered by the mail provider."""
    return "\n".join(f"{key}: {value}" for key, value in data.items() if value is not None)


class Notifier(Protocol):
    async def send(self, template: str, recipient: str, data: dict) -> None: ...


class LoggingNotifier:
    """Dev/test notifier: records the message in the log only."""

    async def send(self, template: str, recipient: str, data: dict) -> None:
        logger.info("Notification %s -> %s: %s", template, recipient, render_subject(template, data))


class ResendNotifier:
    """Sends through the Resend HTTP API."""

    def __init__(
        self,
        api_key: str,
        sender: str,
        api_url: str = "https://api.resend.com/emails",
        timeout: float = 10.0,
    ):
        self._api_key = api_key
        self._sender = sender
        self._api_url = api_url
        self._timeout = timeout

    async def send(self, template: str, recipient: str, data: dict) -> None:
        payload = {
            "from": self._sender,
            "to": [recipient],
            "subject": render_subject(template, data),
            "text": render_text(data),
            "tags": [{"name": "template", "value": template}],
        }
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(
                self._api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
            response.raise_for_status()
        logger.info("Sent %s to %s", template, recipient)


async def send_actor_invitation(notifier: Notifier, actor_type, actor, policy_number: str) -> None:
    """E-mail an actor their portal link (token must already be assigned)."""
    if not actor.access_token:
        raise ValueError(f"{actor_type} {actor.id} has no access token")
    await notifier.send(
        ACTOR_INVITATION,
        actor.email,
        {
            "policy_number": policy_number,
            "name": actor.display_name or actor.email,
            "url": build_actor_url(actor_type, actor.access_token),
            "expires_at": actor.token_expiry.isoformat() if actor.token_expiry else None,
        },
    )


async def notify_admins(notifier: Notifier, template: str, data: dict) -> int:
    """Send one message per configured admin address. Returns the count sent."""
    for recipient in settings.ADMIN_NOTIFICATION_EMAILS:
        await notifier.send(template, recipient, data)
    return len(settings.ADMIN_NOTIFICATION_EMAILS)


@lru_cache(maxsize=1)
def get_notifier() -> Notifier:
    """FastAPI dependency: Resend when configured, log-only otherwise."""
    if settings.RESEND_API_KEY:
        return ResendNotifier(
            api_key=settings.RESEND_API_KEY,
            sender=settings.EMAIL_FROM,
            api_url=settings.RESEND_API_URL,
        )
    logger.info("RESEND_API_KEY not set; notifications will only be logged")
    return LoggingNotifier()
