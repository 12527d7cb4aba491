"""Application layer - Binding, instance, and alias storage."""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple

from astral_di.domain import (
    AliasLoopException,
    Binding,
    CircularDependencyException,
    ContainerException,
    describe,
    to_recipe,
)

logger = logging.getLogger(__name__)

# Seconds a thread blocks on a singleton lock before re-checking for a wait cycle.
_WAIT_INTERVAL = 0.05


class BindingRegistry:
    """Flat storage for everything the container knows about its abstracts.

    Bindings, instances registered with ``instance()``, lazily built singletons
    and aliases are kept in separate maps keyed by canonical abstract. The
    registry also hands out one re-entrant lock per shared abstract so that
    concurrent first resolutions build the singleton only once.

    Attributes:
        _bindings: Recipe per abstract.
        _instances: Objects registered directly with ``instance()``.
        _singletons: Objects built from shared bindings.
        _aliases: Alias name to the abstract it redirects to.
        _resolved: Abstracts that have been built at least once.
        _locks: Per-abstract locks guarding singleton construction.
        _holders: Abstract to ``(thread id, depth)`` of the thread holding its lock.
        _waiting: Thread id to the abstract whose lock it is waiting for.
    """

    def __init__(self, max_alias_depth: int = 32) -> None:
        """Initialize empty registries.

        Args:
            max_alias_depth: Number of alias hops allowed before giving up.
        """
        self._max_alias_depth = max_alias_depth
        self._bindings: Dict[Any, Binding] = {}
        self._instances: Dict[Any, Any] = {}
        self._singletons: Dict[Any, Any] = {}
        self._aliases: Dict[Any, Any] = {}
        self._resolved: Set[Any] = set()
        self._locks: Dict[Any, threading.RLock] = {}
        self._holders: Dict[Any, Tuple[int, int]] = {}
        self._waiting: Dict[int, Any] = {}
        self._locks_guard = threading.Lock()

    def bind(self, abstract: Any, concrete: Any = None, shared: bool = False) -> Binding:
        """Register a recipe for an abstract, replacing any previous one.

        An already cached singleton is left untouched; ``forget`` it first to
        have the new recipe take effect.

        Args:
            abstract: The identifier to register.
            concrete: Raw concrete or recipe; None binds the abstract to itself.
            shared: Whether the result is cached as a singleton.

        Returns:
            The stored binding.

        Raises:
            ContainerException: If ``concrete`` is None and the abstract is not a class.
        """
        if concrete is None:
            if not isinstance(abstract, type):
                raise ContainerException(f"Cannot bind {describe(abstract)} to itself: it is not a class")
            concrete = abstract

        binding = Binding(abstract=abstract, recipe=to_recipe(concrete), shared=shared)
        # The name becomes canonical again if it used to be an alias.
        self._aliases.pop(abstract, None)
        self._bindings[abstract] = binding

        logger.debug(
            "Bound %s to %s recipe (shared=%s)",
            describe(abstract),
            binding.recipe.kind,
            shared,
        )
        return binding

    def instance(self, abstract: Any, instance: Any) -> Any:
        """Register an existing object as a permanently cached singleton."""
        self._aliases.pop(abstract, None)
        self._instances[abstract] = instance
        logger.debug("Registered instance for %s", describe(abstract))
        return instance

    def alias(self, abstract: Any, alias: Any) -> None:
        """Make ``alias`` resolve to ``abstract``.

        Anything previously registered under the alias name is dropped.

        Raises:
            ContainerException: If the alias and the abstract are the same name.
        """
        if alias == abstract:
            raise ContainerException(f"Cannot alias {describe(abstract)} to itself")
        self._bindings.pop(alias, None)
        self._instances.pop(alias, None)
        self._singletons.pop(alias, None)
        self._resolved.discard(alias)
        self._aliases[alias] = abstract
        logger.debug("Aliased %s to %s", describe(alias), describe(abstract))

    def canonical(self, abstract: Any) -> Any:
        """Follow the alias chain to the canonical abstract.

        Raises:
            AliasLoopException: If more than ``max_alias_depth`` hops are needed.
        """
        current = abstract
        hops = 0
        while current in self._aliases:
            hops += 1
            if hops > self._max_alias_depth:
                raise AliasLoopException(abstract, self._max_alias_depth)
            current = self._aliases[current]
        return current

    def is_alias(self, name: Any) -> bool:
        return name in self._aliases

    def binding(self, abstract: Any) -> Optional[Binding]:
        return self._bindings.get(abstract)

    def lookup(self, abstract: Any) -> Tuple[bool, Any]:
        """Return ``(found, object)`` from the instance table or the singleton cache."""
        if abstract in self._instances:
            return True, self._instances[abstract]
        if abstract in self._singletons:
            return True, self._singletons[abstract]
        return False, None

    def store_singleton(self, abstract: Any, instance: Any) -> None:
        self._singletons[abstract] = instance

    def lock_for(self, abstract: Any) -> threading.RLock:
        """Get the lock guarding construction of a shared abstract."""
        with self._locks_guard:
            lock = self._locks.get(abstract)
            if lock is None:
                lock = threading.RLock()
                self._locks[abstract] = lock
            return lock

    @contextmanager
    def hold(self, abstract: Any) -> Iterator[None]:
        """Hold the construction lock of a shared abstract for the duration of the block.

        The lock is re-entrant. While blocked, the calling thread is recorded as
        waiting so that two threads each holding the lock the other one needs
        are reported instead of blocking forever.

        Raises:
            CircularDependencyException: If waiting would close a cycle of threads
                building shared abstracts, with the abstracts along that cycle.
        """
        me = threading.get_ident()
        lock = self.lock_for(abstract)
        try:
            while not lock.acquire(timeout=_WAIT_INTERVAL):
                with self._locks_guard:
                    self._waiting[me] = abstract
                    chain = self._wait_cycle(me, abstract)
                if chain is not None:
                    logger.warning(
                        "Threads building shared abstracts wait on each other: %s",
                        " -> ".join(describe(item) for item in chain),
                    )
                    raise CircularDependencyException(chain)
        finally:
            with self._locks_guard:
                self._waiting.pop(me, None)

        with self._locks_guard:
            _, depth = self._holders.get(abstract, (me, 0))
            self._holders[abstract] = (me, depth + 1)
        try:
            yield
        finally:
            with self._locks_guard:
                _, depth = self._holders[abstract]
                if depth == 1:
                    del self._holders[abstract]
                else:
                    self._holders[abstract] = (me, depth - 1)
            lock.release()

    def _wait_cycle(self, me: int, wanted: Any) -> Optional[List[Any]]:
        """Follow holder and waiter records from ``wanted`` back to ``me``.

        Must be called with ``_locks_guard`` held.
        """
        waits = [wanted]
        visited: Set[int] = set()
        current = wanted
        while True:
            holder = self._holders.get(current)
            if holder is None:
                return None
            owner = holder[0]
            if owner == me:
                # The last abstract in the walk is one this thread already holds.
                return [waits[-1]] + waits
            if owner in visited:
                return None
            visited.add(owner)
            current = self._waiting.get(owner)
            if current is None:
                return None
            waits.append(current)

    def mark_resolved(self, abstract: Any) -> None:
        self._resolved.add(abstract)

    def is_resolved(self, abstract: Any) -> bool:
        canonical = self.canonical(abstract)
        return canonical in self._resolved or canonical in self._instances

    def is_shared(self, abstract: Any) -> bool:
        canonical = self.canonical(abstract)
        if canonical in self._instances:
            return True
        binding = self._bindings.get(canonical)
        return binding is not None and binding.shared

    def bound(self, abstract: Any) -> bool:
        """Report whether a recipe, alias, instance, or cached singleton exists."""
        return (
            abstract in self._bindings
            or abstract in self._instances
            or abstract in self._singletons
            or abstract in self._aliases
        )

    def forget(self, abstract: Any) -> None:
        """Remove the binding, cached objects, and every alias leading to the abstract.

        Forgetting an alias name removes only that alias.
        """
        if abstract in self._aliases:
            del self._aliases[abstract]
            logger.debug("Forgot alias %s", describe(abstract))
            return

        self._bindings.pop(abstract, None)
        self._instances.pop(abstract, None)
        self._singletons.pop(abstract, None)
        self._resolved.discard(abstract)

        removed = {abstract}
        changed = True
        while changed:
            changed = False
            for alias, target in list(self._aliases.items()):
                if target in removed:
                    del self._aliases[alias]
                    removed.add(alias)
                    changed = True

        logger.debug("Forgot %s", describe(abstract))

    def flush(self) -> None:
        """Clear every binding, alias, instance, and cached singleton."""
        self._bindings.clear()
        self._instances.clear()
        self._singletons.clear()
        self._aliases.clear()
        self._resolved.clear()
        with self._locks_guard:
            self._locks.clear()

    def copy(self) -> "BindingRegistry":
        """Copy bindings, aliases, and registered instances (not the singleton cache).

        Returns:
            A new registry that can be modified without touching this one.
        """
        registry = BindingRegistry(self._max_alias_depth)
        registry._bindings = self._bindings.copy()
        registry._instances = self._instances.copy()
        registry._aliases = self._aliases.copy()
        return registry

    def __len__(self) -> int:
        return len(self._bindings)
