from courier.util.di.base import ConfigProvider, Provider
from courier.util.di.scope import Scope

__all__ = ["ConfigProvider", "Provider", "Scope"]
