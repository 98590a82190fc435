"""Publication domain services."""

from courier.domain.publication.service.dispatcher import Dispatcher
from courier.domain.publication.service.ledger import Ledger
from courier.domain.publication.service.resubmission import RecordPredicate, ResubmissionEngine

__all__ = ["Dispatcher", "Ledger", "RecordPredicate", "ResubmissionEngine"]
