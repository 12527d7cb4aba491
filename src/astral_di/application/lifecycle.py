import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from astral_di.domain import HookPhase, describe

if TYPE_CHECKING:
    from astral_di.domain import IContainer

logger = logging.getLogger(__name__)

Callback = Callable[[Any, "IContainer"], Any]
Extender = Callable[[Any, "IContainer"], Any]


class LifecycleHooks:
    """Resolving / after-resolving callbacks and the per-abstract extender chain.

    Callbacks receive ``(instance, container)`` and may mutate the instance in
    place; their return value is ignored. Extenders receive the same arguments
    and return the object that replaces the working value.

    Attributes:
        _global: Callbacks fired for every resolution, per phase.
        _scoped: Callbacks fired for one abstract, per phase.
        _extenders: Ordered decorator chain per abstract.
    """

    def __init__(self) -> None:
        self._global: Dict[HookPhase, List[Callback]] = {phase: [] for phase in HookPhase}
        self._scoped: Dict[HookPhase, Dict[Any, List[Callback]]] = {phase: {} for phase in HookPhase}
        self._extenders: Dict[Any, List[Extender]] = {}

    def add_callback(self, phase: HookPhase, abstract: Optional[Any], callback: Callback) -> None:
        """Register a callback; ``abstract=None`` means every resolution."""
        if abstract is None:
            self._global[phase].append(callback)
        else:
            self._scoped[phase].setdefault(abstract, []).append(callback)

    def extend(self, abstract: Any, extender: Extender) -> None:
        self._extenders.setdefault(abstract, []).append(extender)
        logger.debug("Added extender #%d for %s", len(self._extenders[abstract]), describe(abstract))

    def fire(self, phase: HookPhase, abstract: Any, instance: Any, container: "IContainer") -> None:
        """Run global callbacks, then the ones registered for ``abstract``."""
        for callback in self._global[phase]:
            callback(instance, container)
        for callback in self._scoped[phase].get(abstract, []):
            callback(instance, container)

    def apply_extenders(self, abstract: Any, instance: Any, container: "IContainer") -> Any:
        for extender in self._extenders.get(abstract, []):
            instance = extender(instance, container)
        return instance

    def finalize(self, abstract: Any, instance: Any, container: "IContainer") -> Any:
        """Run the whole post-construction pipeline and return the final object.

        Order: resolving callbacks, extenders, after-resolving callbacks.
        """
        self.fire(HookPhase.RESOLVING, abstract, instance, container)
        instance = self.apply_extenders(abstract, instance, container)
        self.fire(HookPhase.AFTER_RESOLVING, abstract, instance, container)
        return instance

    def copy(self) -> "LifecycleHooks":
        hooks = LifecycleHooks()
        hooks._global = {phase: list(callbacks) for phase, callbacks in self._global.items()}
        hooks._scoped = {
            phase: {abstract: list(callbacks) for abstract, callbacks in scoped.items()}
            for phase, scoped in self._scoped.items()
        }
        hooks._extenders = {abstract: list(chain) for abstract, chain in self._extenders.items()}
        return hooks

    def clear(self) -> None:
        for phase in HookPhase:
            self._global[phase].clear()
            self._scoped[phase].clear()
        self._extenders.clear()
