from courier.domain.publication.util.di.provider import LedgerProvider

__all__ = ["LedgerProvider"]
