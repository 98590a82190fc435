from dishka import Provider as DishkaProvider
from dishka import from_context

from courier.config import Config
from courier.util.di.scope import Scope


class Provider(DishkaProvider):
    """Base for all Courier DI providers; the default scope is APP."""

    scope = Scope.APP  # type: ignore[assignment]  # Custom scope class


class ConfigProvider(Provider):
    """Exposes the Config passed to the container as context."""

    config = from_context(provides=Config, scope=Scope.APP)
