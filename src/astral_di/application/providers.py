from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, List

if TYPE_CHECKING:
    from astral_di.application.container import Container


class ServiceProvider(ABC):
    """Groups the bindings of one framework subsystem.

    ``register()`` runs as soon as the provider is added to a container and
    must only register bindings. ``boot()`` runs once, after every provider
    has registered, and may resolve services.

    Attributes:
        container: The container the provider registers into.

    Example:
        >>> class CacheServiceProvider(ServiceProvider):
        ...     def register(self) -> None:
        ...         self.container.singleton(CacheStore, lambda c: FileStore("/tmp/cache"))
        ...
        ...     def provides(self) -> List[Any]:
        ...         return [CacheStore]
        >>>
        >>> container.register(CacheServiceProvider)
        >>> container.boot()
    """

    def __init__(self, container: "Container") -> None:
        self.container = container
        self.booted = False

    @abstractmethod
    def register(self) -> None:
        """Register bindings into the container."""

    def boot(self) -> None:
        """Hook run once after all providers are registered."""

    def provides(self) -> List[Any]:
        """Abstracts this provider registers."""
        return []
