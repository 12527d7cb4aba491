from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from astral_di.domain.models import ParameterDescriptor


class IContainer(ABC):
    """Abstract interface for dependency injection container operations."""

    @abstractmethod
    def bind(self, abstract: Any, concrete: Any = None, shared: bool = False) -> None:
        """Register a recipe for an abstract, replacing any existing binding.

        Args:
            abstract: The identifier to register.
            concrete: A value, a factory, a class, or None to autowire the abstract itself.
            shared: Whether the built object is cached as a singleton.
        """

    @abstractmethod
    def instance(self, abstract: Any, instance: Any) -> Any:
        """Register an already built object as a permanent singleton."""

    @abstractmethod
    def make(self, abstract: Any, parameters: Optional[Dict[str, Any]] = None) -> Any:
        """Resolve and return an object for the abstract.

        Args:
            abstract: The identifier to resolve.
            parameters: Named constructor arguments used verbatim.
        """

    @abstractmethod
    def get(self, abstract: Any) -> Any:
        """Strictly resolve an abstract, failing when nothing can provide it."""

    @abstractmethod
    def has(self, abstract: Any) -> bool:
        """Report whether a recipe, alias, or instance exists for the abstract."""

    @abstractmethod
    def call(self, target: Any, parameters: Optional[Dict[str, Any]] = None) -> Any:
        """Invoke a callable with its parameters injected from the container."""

    @abstractmethod
    def tagged(self, tag: str) -> List[Any]:
        """Resolve every abstract carrying the tag, in tagging order."""

    @abstractmethod
    def forget(self, abstract: Any) -> None:
        """Drop the binding, cached objects, and aliases of an abstract."""

    @abstractmethod
    def flush(self) -> None:
        """Clear all registrations and cached instances from the container."""


class IResolver(ABC):
    """Abstract interface for dependency resolution operations."""

    @abstractmethod
    def resolve(self, abstract: Any, parameters: Optional[Dict[str, Any]] = None) -> Any:
        """Resolve an abstract to an object.

        Args:
            abstract: The identifier to resolve.
            parameters: Named overrides for the outermost constructor or factory.

        Returns:
            The built or cached object.

        Raises:
            CircularDependencyException: If the abstract is already being built.
            UnresolvableDependencyException: If a parameter cannot be satisfied.
        """

    @abstractmethod
    def resolve_arguments(
        self,
        owner: Any,
        descriptors: List[ParameterDescriptor],
        parameters: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Build the keyword arguments for a constructor or callable.

        Args:
            owner: The class or callable declaring the parameters.
            descriptors: Parameters in declaration order.
            parameters: Named overrides.
        """


class ITypeIntrospector(ABC):
    """The only reflection capability the resolver depends on."""

    @abstractmethod
    def parameters(self, target: Callable[..., Any]) -> List[ParameterDescriptor]:
        """Return the ordered parameters of a class constructor or a callable.

        Args:
            target: A class (its constructor is inspected) or any callable.
        """

    @abstractmethod
    def is_autowirable(self, target: Any) -> bool:
        """Report whether the target is a concrete class that can be constructed."""
