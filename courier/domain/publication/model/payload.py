"""Serialized occurrence content stored on each publication record."""

import hashlib
import json
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from courier.domain.shared.error import PayloadUnresolvableError
from courier.domain.shared.occurrence import Occurrence


def _canonical_json(data: Any) -> str:
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class SerializedOccurrence(BaseModel):
    """Occurrence content plus the type descriptor needed to rebuild it."""

    model_config = ConfigDict(frozen=True)

    occurrence_type: str
    payload: str

    @classmethod
    def of(cls, occurrence: Occurrence) -> "SerializedOccurrence":
        return cls(
            occurrence_type=type(occurrence).type_name(),
            payload=_canonical_json(occurrence.model_dump(mode="json")),
        )

    @property
    def fingerprint(self) -> str:
        """Content hash, identical for structurally equal occurrences."""
        digest = hashlib.sha256()
        digest.update(self.occurrence_type.encode("utf-8"))
        digest.update(b"\n")
        digest.update(self.payload.encode("utf-8"))
        return digest.hexdigest()

    def resolve(self) -> Occurrence:
        """Rebuild the original occurrence.

        Raises:
            PayloadUnresolvableError: If the type cannot be found any more or
                the stored payload no longer validates against it.
        """
        try:
            occurrence_cls = Occurrence.resolve_type(self.occurrence_type)
        except Exception as e:
            raise PayloadUnresolvableError(self.occurrence_type, f"import failed: {e}") from e

        if occurrence_cls is None:
            raise PayloadUnresolvableError(self.occurrence_type, "type is not registered")

        try:
            return occurrence_cls.model_validate_json(self.payload)
        except PydanticValidationError as e:
            raise PayloadUnresolvableError(
                self.occurrence_type, f"payload does not validate: {e.error_count()} errors"
            ) from e
