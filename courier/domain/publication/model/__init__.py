"""Publication domain model."""

from courier.domain.publication.model.payload import SerializedOccurrence
from courier.domain.publication.model.record import (
    PublicationRecord,
    PublicationStatus,
    RecordId,
    new_record_id,
)
from courier.domain.publication.model.registry import HandlerDescriptor, HandlerRegistry
from courier.domain.publication.model.report import ResubmissionReport

__all__ = [
    "HandlerDescriptor",
    "HandlerRegistry",
    "PublicationRecord",
    "PublicationStatus",
    "RecordId",
    "ResubmissionReport",
    "SerializedOccurrence",
    "new_record_id",
]
