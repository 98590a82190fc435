"""Publication record - one row per (occurrence, interested handler)."""

from datetime import datetime
from enum import Enum
from typing import NewType
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict

from courier.domain.publication.model.payload import SerializedOccurrence

RecordId = NewType("RecordId", UUID)


def new_record_id() -> RecordId:
    return RecordId(uuid4())


class PublicationStatus(Enum):
    """Delivery state of a publication record."""

    PENDING = "pending"
    COMPLETED = "completed"


class PublicationRecord(BaseModel):
    """Durable delivery state for one handler of one occurrence.

    Records are immutable; completion produces a new instance with
    ``completed_at`` set. All records of one fan-out share the same
    ``occurrence`` and ``published_at``.

    Attributes:
        id: Opaque identifier, the only handle used for mutation.
        handler_id: Stable identity of the intended handler.
        occurrence: Serialized occurrence content and type descriptor.
        published_at: When the fan-out batch was recorded.
        completed_at: When the handler was confirmed, None while pending.
    """

    model_config = ConfigDict(frozen=True)

    id: RecordId
    handler_id: str
    occurrence: SerializedOccurrence
    published_at: datetime
    completed_at: datetime | None = None

    @property
    def status(self) -> PublicationStatus:
        if self.completed_at is None:
            return PublicationStatus.PENDING
        return PublicationStatus.COMPLETED

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @property
    def occurrence_type(self) -> str:
        return self.occurrence.occurrence_type

    def mark_completed(self, at: datetime) -> "PublicationRecord":
        """Return the completed version of this record.

        The first completion wins: an already completed record is returned
        unchanged, keeping its original timestamp.
        """
        if self.completed_at is not None:
            return self
        return self.model_copy(update={"completed_at": at})
