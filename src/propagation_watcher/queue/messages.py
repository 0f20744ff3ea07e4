"""Envelope for persist jobs waiting on the writer queue."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class QueueMessage[T]:
    """A payload tagged with an id and the monotonic time it was enqueued."""

    id: uuid.UUID
    payload: T
    metadata: dict[str, Any] | None = None
    enqueued_at: float = field(default_factory=time.monotonic)

    @classmethod
    def create(cls, payload: T, metadata: dict[str, Any] | None = None) -> QueueMessage[T]:
        return cls(id=uuid.uuid4(), payload=payload, metadata=metadata)

    def age_seconds(self) -> float:
        """How long the message has been waiting; used as queue lag in logs."""
        return max(0.0, time.monotonic() - self.enqueued_at)
