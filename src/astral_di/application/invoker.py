import inspect
import logging
from typing import Any, Callable, Dict, Optional

from astral_di.domain import ContainerException, IContainer, IResolver, ITypeIntrospector, describe

logger = logging.getLogger(__name__)


class Invoker:
    """Calls functions and methods with their parameters injected.

    Targets may be:
    - any callable (function, bound method, callable object);
    - an ``(object, "method")`` pair;
    - a ``(ClassOrAbstract, "method")`` pair, whose first item is resolved first.
    """

    def __init__(self, container: IContainer, resolver: IResolver, introspector: ITypeIntrospector) -> None:
        self._container = container
        self._resolver = resolver
        self._introspector = introspector

    def call(self, target: Any, parameters: Optional[Dict[str, Any]] = None) -> Any:
        """Invoke ``target`` with arguments from overrides, the container, or defaults.

        Args:
            target: A callable or an ``(owner, method_name)`` pair.
            parameters: Named arguments used verbatim.

        Returns:
            Whatever the target returns. Exceptions raised by the target propagate unchanged.

        Raises:
            ContainerException: If the target is not callable or the method does not exist.
            UnresolvableDependencyException: If a parameter cannot be satisfied.

        Example:
            >>> def handler(repo: UserRepository, user_id: int):
            ...     return repo.find(user_id)
            >>> invoker.call(handler, {"user_id": 42})
        """
        parameters = parameters or {}
        function = self._callable_for(target)

        descriptors = self._introspector.parameters(function)
        arguments = self._resolver.resolve_arguments(function, descriptors, parameters)

        logger.debug("Calling %s with %d argument(s)", getattr(function, "__qualname__", function), len(arguments))
        return function(**arguments)

    def _callable_for(self, target: Any) -> Callable[..., Any]:
        if isinstance(target, tuple):
            if len(target) != 2 or not isinstance(target[1], str):
                raise ContainerException("Method targets must be (object, method_name) pairs")
            owner, method_name = target
            if inspect.isclass(owner) or isinstance(owner, str):
                owner = self._container.make(owner)
            method = getattr(owner, method_name, None)
            if method is None or not callable(method):
                raise ContainerException(f"Method {method_name} does not exist on {describe(type(owner))}")
            return method

        if not callable(target):
            raise ContainerException(f"Cannot call {target!r}: it is not callable")
        return target
