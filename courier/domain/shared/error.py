"""Error hierarchy for Courier.

Error layers:
- CourierError: Base class for all Courier errors
- DomainError: Rule violations and unusable input (caller's problem)
- InfrastructureError: System-level failures like an unreachable store

Single operations return or raise these errors to their immediate caller.
Sweeps (resubmission, pruning) catch per-record errors, log and count them,
and carry on with the rest of the batch.
"""


class CourierError(Exception):
    """Base class for all Courier errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors
# =============================================================================


class DomainError(CourierError):
    """Base class for domain errors."""


class NotFoundError(DomainError):
    """Resource not found."""


class ValidationError(DomainError):
    """Input validation failed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


class ConflictError(DomainError):
    """Resource already exists or is ambiguous."""


class UnknownRecordError(NotFoundError):
    """A publication id the store has no knowledge of."""

    def __init__(self, record_id: object) -> None:
        super().__init__(f"Unknown publication record: {record_id}", code="UNKNOWN_RECORD")
        self.record_id = record_id


class DuplicateRecordError(ConflictError):
    """A batch insert collided with records that are already stored."""

    def __init__(self, message: str, record_ids: list[str] | None = None) -> None:
        super().__init__(message, code="DUPLICATE_RECORD")
        self.record_ids = record_ids or []


class AmbiguousPublicationError(ConflictError):
    """More than one pending publication matches a fingerprint lookup."""

    def __init__(self, handler_id: str, fingerprint: str, matches: int) -> None:
        super().__init__(
            f"{matches} pending publications for handler '{handler_id}' share "
            f"fingerprint {fingerprint[:12]}; complete them by record id instead",
            code="AMBIGUOUS_PUBLICATION",
        )
        self.handler_id = handler_id
        self.fingerprint = fingerprint
        self.matches = matches


class PayloadUnresolvableError(DomainError):
    """A stored occurrence can no longer be turned back into an object."""

    def __init__(self, occurrence_type: str, reason: str) -> None:
        super().__init__(
            f"Cannot resolve occurrence type '{occurrence_type}': {reason}",
            code="PAYLOAD_UNRESOLVABLE",
        )
        self.occurrence_type = occurrence_type
        self.reason = reason


# =============================================================================
# Infrastructure Errors
# =============================================================================


class InfrastructureError(CourierError):
    """Base class for infrastructure/system errors."""


class StoreUnavailableError(InfrastructureError):
    """Publication store (database, file) is unavailable."""


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""
