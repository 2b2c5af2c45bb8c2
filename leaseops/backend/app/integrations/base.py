from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol, Any


@dataclass(frozen=True)
class SinkDeliveryResult:
    ok: bool
    error: str | None = None


@dataclass(frozen=True)
class AuditEnvelope:
    """
    One outbox event as a sink sees it. `subject` is "listing" for import events and
    "property" for sync/commit events; property_id is set once a row exists.
    """

    event_id: int
    event_type: str
    organization_id: str | None
    property_id: int | None
    source_url: str | None
    created_at: datetime | None
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def subject(self) -> str:
        return self.event_type.split(".", 1)[0]

    @property
    def failed(self) -> bool:
        return self.event_type.endswith("_failed")

    @classmethod
    def from_payload(
        cls,
        event_id: int,
        event_type: str,
        payload: dict[str, Any],
        created_at: datetime | None = None,
    ) -> "AuditEnvelope":
        return cls(
            event_id=event_id,
            event_type=event_type,
            organization_id=payload.get("organization_id"),
            property_id=payload.get("property_id"),
            source_url=payload.get("source_url"),
            created_at=created_at,
            data=payload,
        )

    def as_json(self) -> dict[str, Any]:
        return {
            "id": self.event_id,
            "type": self.event_type,
            "subject": self.subject,
            "failed": self.failed,
            "organization_id": self.organization_id,
            "property_id": self.property_id,
            "source_url": self.source_url,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "data": self.data,
        }


class AuditSink(Protocol):
    async def deliver(self, envelope: AuditEnvelope) -> SinkDeliveryResult:
        ...
