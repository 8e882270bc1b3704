"""
Activity feed storage for "new purchase" broadcasts.
"""
from __future__ import annotations

import logging
from uuid import uuid4

from django.db import models

from store.domain.events import BookPurchased, serialize_event
from store.infra.models import TimeStampedModel

logger = logging.getLogger(__name__)


class ActivityEvent(TimeStampedModel):
    """One entry in the public activity feed."""
    id = models.UUIDField(primary_key=True, default=uuid4, editable=False)
    aggregate_id = models.UUIDField()
    event_type = models.CharField(max_length=100)
    event_data = models.JSONField()
    message = models.CharField(max_length=255)

    class Meta:
        indexes = [
            models.Index(fields=("event_type", "-created_at"), name="store_activity_type_idx"),
        ]
        ordering = ["-created_at"]


class ActivityFeedRepository:
    """Repository for activity feed entries."""

    def publish(self, event: BookPurchased) -> ActivityEvent:
        """Store a purchase so live feed consumers can pick it up."""
        entry = ActivityEvent.objects.create(
            aggregate_id=event.aggregate_id,
            event_type=event.event_type,
            event_data=serialize_event(event),
            message=event.message,
        )
        logger.info(
            "activity_published",
            extra={"operation": event.event_type, "book_id": str(event.aggregate_id)},
        )
        return entry

    def recent(self, limit: int = 20, event_type: str = "BookPurchased") -> list[ActivityEvent]:
        """Get newest feed entries first."""
        return list(
            ActivityEvent.objects
            .filter(event_type=event_type)
            .order_by("-created_at")[:limit]
        )
