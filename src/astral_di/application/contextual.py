import logging
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

from astral_di.domain import ContainerException, ContextualBinding, Recipe, describe, to_recipe

if TYPE_CHECKING:
    from astral_di.application.container import Container

logger = logging.getLogger(__name__)


class ContextualBindingTable:
    """Per-consumer dependency overrides keyed by ``(consumer, dependency)``.

    Matching is exact: a subclass of a consumer does not inherit the
    overrides registered for its parent.
    """

    def __init__(self) -> None:
        self._bindings: Dict[Tuple[Any, Any], ContextualBinding] = {}

    def add(self, consumer: Any, dependency: Any, concrete: Any) -> ContextualBinding:
        binding = ContextualBinding(consumer=consumer, dependency=dependency, recipe=to_recipe(concrete))
        self._bindings[(consumer, dependency)] = binding
        logger.debug(
            "When %s needs %s give %s recipe",
            describe(consumer),
            describe(dependency),
            binding.recipe.kind,
        )
        return binding

    def find(self, consumer: Any, dependency: Any) -> Optional[Recipe]:
        binding = self._bindings.get((consumer, dependency))
        return binding.recipe if binding is not None else None

    def copy(self) -> "ContextualBindingTable":
        table = ContextualBindingTable()
        table._bindings = self._bindings.copy()
        return table

    def clear(self) -> None:
        self._bindings.clear()

    def __len__(self) -> int:
        return len(self._bindings)


class ContextualBindingBuilder:
    """Fluent builder returned by ``Container.when()``.

    Example:
        >>> container.when(ReportController).needs(LoggerInterface).give(FileLogger)
    """

    def __init__(self, container: "Container", consumer: Any) -> None:
        self._container = container
        self._consumer = consumer
        self._needs: Optional[Any] = None
        self._has_needs = False

    def needs(self, dependency: Any) -> "ContextualBindingBuilder":
        """Name the dependency type to override inside the consumer."""
        self._needs = dependency
        self._has_needs = True
        return self

    def give(self, concrete: Any) -> None:
        """Provide the replacement value, factory, class, or recipe.

        Raises:
            ContainerException: If ``needs()`` was not called first.
        """
        if not self._has_needs:
            raise ContainerException(f"Call needs() before give() when binding for {describe(self._consumer)}")
        self._container.add_contextual_binding(self._consumer, self._needs, concrete)

    def give_tagged(self, tag: str) -> None:
        """Provide the list of objects tagged with ``tag``, resolved at injection time."""
        self.give(lambda container: container.tagged(tag))
