from courier.domain.publication.port.store import PublicationStore

__all__ = ["PublicationStore"]
