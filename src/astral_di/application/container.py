import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Type, Union

from astral_di.application.binding_registry import BindingRegistry
from astral_di.application.circular_detector import CycleGuard
from astral_di.application.contextual import ContextualBindingBuilder, ContextualBindingTable
from astral_di.application.introspection import TypeIntrospector
from astral_di.application.invoker import Invoker
from astral_di.application.lifecycle import LifecycleHooks
from astral_di.application.providers import ServiceProvider
from astral_di.application.resolver import DependencyResolver
from astral_di.application.tag_registry import TagRegistry
from astral_di.domain import (
    ContainerNotFoundException,
    ContainerSettings,
    ContextualBinding,
    HookPhase,
    IContainer,
    ITypeIntrospector,
    describe,
)

logger = logging.getLogger(__name__)


class Container(IContainer):
    """Main dependency injection container.

    Composes the binding registry, contextual bindings, tags, lifecycle hooks,
    cycle guard, resolver, and invoker behind one public API. Registration is
    expected to happen during a single-threaded bootstrap; ``make``, ``get``
    and ``call`` are then safe to use concurrently.

    Attributes:
        _settings: Container configuration.
        _introspector: Reflection seam used for autowiring and ``call``.
        _registry: Bindings, instances, singletons, and aliases.
        _contextual: Per-consumer dependency overrides.
        _tags: Named groups of abstracts.
        _hooks: Resolving callbacks and extenders.
        _guard: Build stack for circular dependency detection.
        _resolver: The resolution algorithm.
        _invoker: Calls arbitrary callables with injection.
        _providers: Registered service providers, in registration order.

    Example:
        >>> container = Container()
        >>> container.singleton(Logger, lambda c: FileLogger("/var/log/app.log"))
        >>> container.bind("greeting", "hello")
        >>> container.make("greeting")
        'hello'
        >>> container.make(Logger) is container.make(Logger)
        True
    """

    def __init__(
        self,
        settings: Optional[ContainerSettings] = None,
        introspector: Optional[ITypeIntrospector] = None,
    ) -> None:
        """Initialize the container with empty registries.

        Args:
            settings: Configuration; defaults to ``ContainerSettings()``.
            introspector: Reflection seam; defaults to ``TypeIntrospector()``.
        """
        self._settings = settings or ContainerSettings()
        self._introspector = introspector or TypeIntrospector()
        self._guard = CycleGuard()
        self._providers: List[ServiceProvider] = []
        self._booted = False
        self._wire(
            BindingRegistry(self._settings.max_alias_depth),
            ContextualBindingTable(),
            TagRegistry(),
            LifecycleHooks(),
        )

    def _wire(
        self,
        registry: BindingRegistry,
        contextual: ContextualBindingTable,
        tags: TagRegistry,
        hooks: LifecycleHooks,
    ) -> None:
        self._registry = registry
        self._contextual = contextual
        self._tags = tags
        self._hooks = hooks
        self._resolver = DependencyResolver(
            self,
            registry,
            contextual,
            hooks,
            self._guard,
            self._introspector,
            autowire=self._settings.autowire,
        )
        self._invoker = Invoker(self, self._resolver, self._introspector)

    @property
    def settings(self) -> ContainerSettings:
        return self._settings

    # Registration

    def bind(self, abstract: Any, concrete: Any = None, shared: bool = False) -> None:
        """Register a recipe for an abstract, replacing any existing binding.

        ``concrete`` may be a literal value, a factory ``(container)`` or
        ``(container, parameters)``, a class to autowire, or None to autowire
        the abstract itself. A singleton that is already cached keeps being
        returned until the abstract is forgotten.

        Example:
            >>> container.bind("greeting", "hello")
            >>> container.bind(Mailer, SmtpMailer)
            >>> container.bind(Clock, lambda c: SystemClock())
        """
        self._registry.bind(abstract, concrete, shared)

    def singleton(self, abstract: Any, concrete: Any = None) -> None:
        """Register a shared binding: built once, then cached."""
        self._registry.bind(abstract, concrete, shared=True)

    def instance(self, abstract: Any, instance: Any) -> Any:
        """Register an existing object; it is returned as-is for every resolution."""
        return self._registry.instance(abstract, instance)

    def alias(self, abstract: Any, alias: Any) -> None:
        """Make ``alias`` resolve to ``abstract``."""
        self._registry.alias(abstract, alias)

    def when(self, consumer: Any) -> ContextualBindingBuilder:
        """Start a contextual binding for the class whose constructor is being built.

        Example:
            >>> container.when(ReportController).needs(LoggerInterface).give(FileLogger)
        """
        return ContextualBindingBuilder(self, self._registry.canonical(consumer))

    def add_contextual_binding(self, consumer: Any, dependency: Any, concrete: Any) -> ContextualBinding:
        return self._contextual.add(
            self._registry.canonical(consumer),
            self._registry.canonical(dependency),
            concrete,
        )

    def tag(self, abstracts: Union[Any, Iterable[Any]], tags: Union[str, Iterable[str]]) -> None:
        """Add one or more abstracts to one or more named groups."""
        self._tags.tag(abstracts, tags)

    def extend(self, abstract: Any, extender: Callable[[Any, "Container"], Any]) -> None:
        """Append a decorator applied to every newly built object of ``abstract``."""
        self._hooks.extend(self._registry.canonical(abstract), extender)

    def resolving(self, abstract: Any, callback: Optional[Callable[[Any, "Container"], Any]] = None) -> None:
        """Register a callback fired right after construction.

        ``container.resolving(callback)`` and ``container.resolving(None, callback)``
        both register a callback for every resolution.
        """
        self._add_callback(HookPhase.RESOLVING, abstract, callback)

    def after_resolving(self, abstract: Any, callback: Optional[Callable[[Any, "Container"], Any]] = None) -> None:
        """Register a callback fired after extenders have run."""
        self._add_callback(HookPhase.AFTER_RESOLVING, abstract, callback)

    def _add_callback(self, phase: HookPhase, abstract: Any, callback: Optional[Callable[..., Any]]) -> None:
        if callback is None and callable(abstract) and not isinstance(abstract, type):
            abstract, callback = None, abstract
        if callback is None:
            raise TypeError(f"A callback is required to register a {phase} hook")
        if abstract is not None:
            abstract = self._registry.canonical(abstract)
        self._hooks.add_callback(phase, abstract, callback)

    # Resolution

    def make(self, abstract: Any, parameters: Optional[Dict[str, Any]] = None) -> Any:
        """Resolve an abstract, autowiring unbound concrete classes.

        Args:
            abstract: Class, string key, or alias.
            parameters: Named constructor (or factory) arguments used verbatim.

        Returns:
            The resolved object.

        Raises:
            CircularDependencyException: If a dependency cycle is detected.
            UnresolvableDependencyException: If a parameter cannot be satisfied.
            AliasLoopException: If the alias chain is too long.
            ContainerException: For any other resolution failure.

        Example:
            >>> car = container.make(Car)
            >>> report = container.make(Report, {"title": "Weekly"})
        """
        with self._guard.session():
            return self._resolver.resolve(abstract, parameters)

    def get(self, abstract: Any) -> Any:
        """Strictly resolve an abstract.

        Raises:
            ContainerNotFoundException: If the abstract has no binding, alias,
                or instance and is not an autowirable class.
        """
        if not self._resolver.is_resolvable(abstract):
            raise ContainerNotFoundException(abstract)
        return self.make(abstract)

    def call(self, target: Any, parameters: Optional[Dict[str, Any]] = None) -> Any:
        """Call a function or ``(object, "method")`` pair with injected arguments.

        Example:
            >>> container.call(send_horoscope, {"sign": "leo"})
            >>> container.call((NewsletterController, "subscribe"), {"email": "a@b.c"})
        """
        with self._guard.session():
            return self._invoker.call(target, parameters)

    def tagged(self, tag: str) -> List[Any]:
        """Resolve every abstract tagged with ``tag`` in first-tagged order."""
        return [self.make(abstract) for abstract in self._tags.members(tag)]

    # Introspection

    def bound(self, abstract: Any) -> bool:
        """Report whether a recipe, alias, instance, or cached singleton exists."""
        return self._registry.bound(abstract)

    def has(self, abstract: Any) -> bool:
        return self._registry.bound(abstract)

    def is_resolved(self, abstract: Any) -> bool:
        """Report whether the abstract has been built (or registered as an instance)."""
        return self._registry.is_resolved(abstract)

    def is_shared(self, abstract: Any) -> bool:
        return self._registry.is_shared(abstract)

    def is_alias(self, name: Any) -> bool:
        return self._registry.is_alias(name)

    def get_alias(self, abstract: Any) -> Any:
        """Return the canonical abstract behind an alias (or the abstract itself)."""
        return self._registry.canonical(abstract)

    # Lifecycle

    def forget(self, abstract: Any) -> None:
        """Drop the binding, cached objects, and aliases of an abstract."""
        self._registry.forget(abstract)

    def flush(self) -> None:
        """Clear bindings, aliases, instances, contextual bindings, tags, hooks, and providers."""
        self._registry.flush()
        self._contextual.clear()
        self._tags.clear()
        self._hooks.clear()
        self._guard.clear()
        self._providers.clear()
        self._booted = False
        logger.debug("Flushed container")

    def register(self, provider: Union[ServiceProvider, Type[ServiceProvider]]) -> ServiceProvider:
        """Register a service provider (class or instance).

        A provider class is registered at most once. If the container has
        already booted, the provider is booted immediately.

        Returns:
            The registered provider instance.
        """
        provider_class = provider if isinstance(provider, type) else type(provider)
        for existing in self._providers:
            if type(existing) is provider_class:
                return existing

        if isinstance(provider, type):
            provider = provider(self)

        provider.register()
        self._providers.append(provider)
        logger.debug("Registered provider %s", describe(provider_class))

        if self._booted:
            self._boot_provider(provider)
        return provider

    def boot(self) -> None:
        """Boot every registered provider once, in registration order."""
        if self._booted:
            return
        for provider in list(self._providers):
            self._boot_provider(provider)
        self._booted = True

    def _boot_provider(self, provider: ServiceProvider) -> None:
        if provider.booted:
            return
        provider.boot()
        provider.booted = True

    @property
    def providers(self) -> List[ServiceProvider]:
        return list(self._providers)

    def get_registry_copy(self) -> BindingRegistry:
        """Copy of the bindings, aliases, and registered instances (not cached singletons)."""
        return self._registry.copy()

    def inherit(self, parent: "Container") -> None:
        """Replace this container's registrations with a copy of ``parent``'s.

        Cached singletons are not copied, so the first resolution in this
        container builds its own objects.
        """
        self._wire(
            parent.get_registry_copy(),
            parent._contextual.copy(),
            parent._tags.copy(),
            parent._hooks.copy(),
        )
