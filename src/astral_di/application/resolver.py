import inspect
import logging
from typing import Any, Dict, List, Optional

from astral_di.application.binding_registry import BindingRegistry
from astral_di.application.circular_detector import CycleGuard
from astral_di.application.contextual import ContextualBindingTable
from astral_di.application.lifecycle import LifecycleHooks
from astral_di.domain import (
    ClassRecipe,
    ContainerException,
    IContainer,
    IResolver,
    ITypeIntrospector,
    ParameterDescriptor,
    Recipe,
    RecipeKind,
    UnresolvableDependencyException,
    describe,
)

logger = logging.getLogger(__name__)


def _is_hashable(value: Any) -> bool:
    try:
        hash(value)
    except TypeError:
        return False
    return True


class DependencyResolver(IResolver):
    """Resolves abstracts by following bindings and autowiring constructors.

    The resolver owns no state of its own: it reads the registries built by
    the container and keeps the in-progress chain in the ``CycleGuard``.
    Shared bindings are built under a per-abstract lock so concurrent first
    resolutions construct the singleton exactly once.
    """

    def __init__(
        self,
        container: IContainer,
        registry: BindingRegistry,
        contextual: ContextualBindingTable,
        hooks: LifecycleHooks,
        guard: CycleGuard,
        introspector: ITypeIntrospector,
        autowire: bool = True,
    ) -> None:
        """Wire the resolver to the container's registries.

        Args:
            container: Passed to factories, callbacks, and extenders.
            registry: Bindings, instances, singletons, and aliases.
            contextual: Per-consumer overrides.
            hooks: Lifecycle callbacks and extenders.
            guard: Build stack used for cycle detection.
            introspector: Source of constructor parameter lists.
            autowire: Whether unbound concrete classes may be autowired.
        """
        self._container = container
        self._registry = registry
        self._contextual = contextual
        self._hooks = hooks
        self._guard = guard
        self._introspector = introspector
        self._autowire = autowire

    def resolve(self, abstract: Any, parameters: Optional[Dict[str, Any]] = None) -> Any:
        """Resolve an abstract to an object.

        Args:
            abstract: Class, string key, or alias to resolve.
            parameters: Named arguments used verbatim for the outermost build.

        Returns:
            The registered instance, the cached singleton, or a newly built object.

        Raises:
            AliasLoopException: If the alias chain is too long.
            CircularDependencyException: If the abstract is already being built.
            UnresolvableDependencyException: If a constructor parameter cannot be satisfied.
            ContainerException: If the abstract is not instantiable or its construction failed.

        Example:
            >>> class Wheel: ...
            >>> class Car:
            ...     def __init__(self, wheel: Wheel):
            ...         self.wheel = wheel
            >>> car = resolver.resolve(Car)
        """
        parameters = parameters or {}
        canonical = self._registry.canonical(abstract)

        found, instance = self._registry.lookup(canonical)
        if found:
            return instance

        binding = self._registry.binding(canonical)
        if binding is not None and binding.shared:
            with self._registry.hold(canonical):
                # Another caller may have finished building while we waited.
                found, instance = self._registry.lookup(canonical)
                if found:
                    return instance
                instance = self._produce(canonical, binding.recipe, parameters)
                self._registry.store_singleton(canonical, instance)
                logger.debug("Cached singleton %s", describe(canonical))
                return instance

        recipe = binding.recipe if binding is not None else self._default_recipe(canonical)
        return self._produce(canonical, recipe, parameters)

    def is_resolvable(self, abstract: Any) -> bool:
        """Report whether ``abstract`` is bound, aliased, registered, or autowirable."""
        if not _is_hashable(abstract):
            return False
        canonical = self._registry.canonical(abstract)
        if self._registry.bound(abstract) or self._registry.bound(canonical):
            return True
        return self._autowire and self._introspector.is_autowirable(canonical)

    def resolve_arguments(
        self,
        owner: Any,
        descriptors: List[ParameterDescriptor],
        parameters: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Build keyword arguments for ``owner`` in declaration order.

        Each parameter is taken from, in order: the named overrides, a
        contextual binding for the consumer on top of the build stack, a
        recursive resolution of its declared type, its default value.

        Raises:
            UnresolvableDependencyException: If none of the above applies.
        """
        consumer = self._guard.consumer()
        arguments: Dict[str, Any] = {}
        accepts_extra = False

        for descriptor in descriptors:
            if descriptor.var_keyword:
                accepts_extra = True
                continue

            name = descriptor.name
            if name in parameters:
                arguments[name] = parameters[name]
                continue

            annotation = descriptor.annotation
            if annotation is not None and _is_hashable(annotation):
                dependency = self._registry.canonical(annotation)

                recipe = self._contextual.find(consumer, dependency) if consumer is not None else None
                if recipe is not None:
                    arguments[name] = self._resolve_contextual(dependency, recipe)
                    continue

                if self.is_resolvable(dependency):
                    arguments[name] = self.resolve(dependency)
                    continue

            if descriptor.has_default:
                arguments[name] = descriptor.default
                continue

            raise UnresolvableDependencyException(name, owner, consumer)

        if accepts_extra:
            declared = {descriptor.name for descriptor in descriptors}
            for name, value in parameters.items():
                if name not in declared:
                    arguments[name] = value

        return arguments

    def _default_recipe(self, canonical: Any) -> ClassRecipe:
        if self._autowire and self._introspector.is_autowirable(canonical):
            return ClassRecipe(concrete=canonical)
        raise self._not_instantiable(canonical)

    def _not_instantiable(self, canonical: Any) -> ContainerException:
        stack = self._guard.current()
        if stack:
            building = ", ".join(describe(item) for item in stack)
            return ContainerException(f"Target {describe(canonical)} is not instantiable while building [{building}]")
        return ContainerException(f"Target {describe(canonical)} is not instantiable")

    def _produce(self, canonical: Any, recipe: Recipe, parameters: Dict[str, Any]) -> Any:
        with self._guard.building(canonical):
            instance = self._build(canonical, recipe, parameters)
        self._registry.mark_resolved(canonical)
        return self._hooks.finalize(canonical, instance, self._container)

    def _build(self, canonical: Any, recipe: Recipe, parameters: Dict[str, Any]) -> Any:
        if recipe.kind == RecipeKind.LITERAL:
            return recipe.value

        if recipe.kind == RecipeKind.FACTORY:
            logger.debug("Building %s from factory", describe(canonical))
            try:
                if recipe.accepts_parameters:
                    return recipe.factory(self._container, dict(parameters))
                return recipe.factory(self._container)
            except ContainerException:
                raise
            except Exception as e:
                raise ContainerException(f"Failed to create instance of {describe(canonical)}: {e}") from e

        concrete = recipe.concrete
        if concrete is not canonical and self.is_resolvable(concrete):
            # Bound to another class: resolve it so its own bindings apply.
            return self.resolve(concrete, parameters)
        return self._instantiate(concrete, parameters)

    def _instantiate(self, concrete: type, parameters: Dict[str, Any]) -> Any:
        if inspect.isabstract(concrete) or getattr(concrete, "_is_protocol", False):
            raise self._not_instantiable(concrete)

        logger.debug("Autowiring %s", describe(concrete))
        descriptors = self._introspector.parameters(concrete)
        arguments = self.resolve_arguments(concrete, descriptors, parameters)
        try:
            return concrete(**arguments)
        except ContainerException:
            raise
        except Exception as e:
            raise ContainerException(f"Failed to create instance of {describe(concrete)}: {e}") from e

    def _resolve_contextual(self, dependency: Any, recipe: Recipe) -> Any:
        if recipe.kind == RecipeKind.CLASS:
            return self.resolve(recipe.concrete)
        # Contextual results are consumer-specific and never cached.
        return self._produce(dependency, recipe, {})
