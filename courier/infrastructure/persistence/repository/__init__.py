from courier.infrastructure.persistence.repository.memory import InMemoryPublicationStore
from courier.infrastructure.persistence.repository.publication import SQLAlchemyPublicationStore

__all__ = ["InMemoryPublicationStore", "SQLAlchemyPublicationStore"]
