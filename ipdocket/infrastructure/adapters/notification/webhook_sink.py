"""Webhook notification sink.

POSTs each notification as JSON to the mail/notification service, which
owns template rendering and delivery:

    {
        "template": "urgent_tasks",
        "recipient": {"actor_id": "...", "name": "...", "email": "...", "language": "fr"},
        "payload": {...}
    }

Any 2xx response is a successful dispatch. There is no retry here: a
failed batch is retried by the next scheduled run.
"""

from __future__ import annotations

import hashlib
import hmac
import json
from typing import Any

import httpx
from structlog import get_logger

from ipdocket.application.ports.notification_sink import (
    DispatchResult,
    NotificationSinkProtocol,
)
from ipdocket.domain.models.actor import Actor

logger = get_logger(__name__)

SIGNATURE_HEADER = "X-Ipdocket-Signature"


class WebhookNotificationSink(NotificationSinkProtocol):
    """Delivers notifications to an HTTP endpoint."""

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 10.0,
        secret: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the sink.

        Args:
            url: Endpoint receiving notifications.
            timeout_seconds: Per-request timeout.
            secret: Optional HMAC-SHA256 secret for the signature header.
            client: Shared client; a new one per call is used if omitted.
        """
        if not url:
            raise ValueError("webhook url cannot be empty")
        self._url = url
        self._timeout = timeout_seconds
        self._secret = secret
        self._client = client

    async def send(
        self,
        recipient: Actor,
        template_kind: str,
        payload: dict[str, Any],
    ) -> DispatchResult:
        body = json.dumps(
            {
                "template": template_kind,
                "recipient": {
                    "actor_id": recipient.actor_id,
                    "name": recipient.name,
                    "email": recipient.email,
                    "language": recipient.language,
                },
                "payload": payload,
            },
            default=str,
        )
        headers = {"Content-Type": "application/json"}
        if self._secret:
            signature = hmac.new(
                self._secret.encode(), body.encode(), hashlib.sha256
            ).hexdigest()
            headers[SIGNATURE_HEADER] = f"sha256={signature}"

        log = logger.bind(recipient_id=recipient.actor_id, template=template_kind)
        try:
            if self._client is not None:
                response = await self._client.post(
                    self._url, content=body, headers=headers, timeout=self._timeout
                )
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(
                        self._url, content=body, headers=headers, timeout=self._timeout
                    )
        except httpx.HTTPError as e:
            log.warning("webhook_delivery_error", error=str(e) or type(e).__name__)
            return DispatchResult.failed(f"{type(e).__name__}: {e}")

        if response.status_code >= 300:
            log.warning("webhook_delivery_failed", status_code=response.status_code)
            return DispatchResult.failed(f"HTTP {response.status_code}")

        log.debug("webhook_delivered", status_code=response.status_code)
        return DispatchResult.ok(message_id=response.headers.get("X-Message-Id"))
