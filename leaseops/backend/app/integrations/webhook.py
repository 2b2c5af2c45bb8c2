from __future__ import annotations

import hmac
import hashlib
import json

import httpx

from .base import AuditEnvelope, AuditSink, SinkDeliveryResult

SIGNATURE_HEADER = "X-LeaseOps-Signature"
EVENT_HEADER = "X-LeaseOps-Event"


class WebhookSink(AuditSink):
    """POSTs each envelope as JSON. Any 2xx is delivered; everything else is retried by the outbox."""

    def __init__(
        self,
        url: str,
        secret: str | None = None,
        timeout_s: int = 20,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.secret = secret
        self.timeout_s = timeout_s
        self._transport = transport

    def signature(self, body: bytes) -> str | None:
        if not self.secret:
            return None
        return hmac.new(self.secret.encode("utf-8"), body, hashlib.sha256).hexdigest()

    def _headers(self, envelope: AuditEnvelope, body: bytes) -> dict[str, str]:
        headers = {"Content-Type": "application/json", EVENT_HEADER: envelope.event_type}
        sig = self.signature(body)
        if sig:
            headers[SIGNATURE_HEADER] = sig
        return headers

    async def deliver(self, envelope: AuditEnvelope) -> SinkDeliveryResult:
        body = json.dumps(envelope.as_json(), default=str).encode("utf-8")
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
                r = await client.post(self.url, content=body, headers=self._headers(envelope, body))
        except httpx.HTTPError as e:
            return SinkDeliveryResult(ok=False, error=f"{envelope.event_type}: {e}")

        if r.is_success:
            return SinkDeliveryResult(ok=True)
        return SinkDeliveryResult(ok=False, error=f"HTTP {r.status_code}: {r.text[:500]}")
