"""Application layer - Circular dependency detection."""

import logging
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator, List, Optional, Tuple

from astral_di.domain import CircularDependencyException, describe

logger = logging.getLogger(__name__)


class CycleGuard:
    """Detects circular dependencies during resolution.

    Tracks the abstracts currently under construction in a build stack stored
    in a context variable, so every thread and asyncio task has its own. A
    fresh stack is opened by each top-level resolution (see ``session``) and
    discarded when it returns or raises; nested resolutions reuse it.

    Attributes:
        _stack: Context variable holding ``(owner thread id, build stack)``.
    """

    def __init__(self) -> None:
        """Initialize the guard with no active build stack."""
        self._stack: ContextVar[Optional[Tuple[int, List[Any]]]] = ContextVar(
            f"astral_di_build_stack_{id(self)}",
            default=None,
        )

    def _active(self) -> Optional[List[Any]]:
        stored = self._stack.get()
        if stored is None:
            return None
        owner, stack = stored
        # Threads that inherited a copy of the context must not share the list.
        if owner != threading.get_ident():
            return None
        return stack

    @contextmanager
    def session(self) -> Iterator[List[Any]]:
        """Open a build stack for a top-level resolution, or join the active one.

        Example:
            >>> guard = CycleGuard()
            >>> with guard.session():
            ...     guard.push(ServiceA)
        """
        stack = self._active()
        if stack is not None:
            yield stack
            return

        stack = []
        token = self._stack.set((threading.get_ident(), stack))
        try:
            yield stack
        finally:
            self._stack.reset(token)

    def _get_stack(self) -> List[Any]:
        stack = self._active()
        if stack is None:
            # Used outside a session: bind a stack to the current context.
            stack = []
            self._stack.set((threading.get_ident(), stack))
        return stack

    def push(self, abstract: Any) -> None:
        """Add an abstract to the build stack.

        Args:
            abstract: The canonical abstract about to be built.

        Raises:
            CircularDependencyException: If the abstract is already in the stack.

        Example:
            >>> guard.push(ServiceA)
            >>> guard.push(ServiceB)
            >>> guard.push(ServiceA)  # Raises CircularDependencyException
        """
        stack = self._get_stack()

        if abstract in stack:
            cycle_start_index = stack.index(abstract)
            cycle = stack[cycle_start_index:] + [abstract]
            logger.warning("Circular dependency detected: %s", " -> ".join(describe(item) for item in cycle))
            raise CircularDependencyException(cycle)

        stack.append(abstract)

    def pop(self) -> None:
        """Remove the most recent abstract from the build stack."""
        stack = self._get_stack()
        if stack:
            stack.pop()

    @contextmanager
    def building(self, abstract: Any) -> Iterator[None]:
        """Keep ``abstract`` on the build stack for the duration of the block."""
        self.push(abstract)
        try:
            yield
        finally:
            self.pop()

    def consumer(self) -> Optional[Any]:
        """The abstract currently being built, i.e. the consumer of the next dependency."""
        stack = self._active()
        if not stack:
            return None
        return stack[-1]

    def current(self) -> Tuple[Any, ...]:
        """Snapshot of the build stack, outermost first."""
        return tuple(self._active() or ())

    def clear(self) -> None:
        """Clear the build stack of the current context."""
        stack = self._active()
        if stack is not None:
            stack.clear()
