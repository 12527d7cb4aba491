import inspect
import types
from typing import Any, Callable, Dict, List, Union, get_args, get_origin, get_type_hints

from astral_di.domain import ContainerException, ITypeIntrospector, ParameterDescriptor, describe

_UNION_TYPES = tuple(t for t in (Union, getattr(types, "UnionType", None)) if t is not None)


def _unwrap_optional(annotation: Any) -> Any:
    """Turn ``Optional[X]`` (or ``X | None``) into ``X``; leave anything else alone."""
    if get_origin(annotation) in _UNION_TYPES:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


class TypeIntrospector(ITypeIntrospector):
    """Reads parameter lists using Python's inspect module and type hints.

    Classes are described by their ``__init__`` (without ``self``); any other
    callable by its own signature. ``*args`` parameters are never reported.
    """

    def parameters(self, target: Callable[..., Any]) -> List[ParameterDescriptor]:
        """Return the ordered parameters of a class constructor or a callable.

        Args:
            target: A class or any callable.

        Returns:
            One descriptor per parameter, in declaration order.

        Raises:
            ContainerException: If the target's signature cannot be inspected.

        Example:
            >>> class Car:
            ...     def __init__(self, wheel: Wheel, colour: str = "red"):
            ...         ...
            >>> [p.name for p in TypeIntrospector().parameters(Car)]
            ['wheel', 'colour']
        """
        skip_first = False
        function = target
        if inspect.isclass(target):
            if target.__init__ is object.__init__:
                return []
            function = target.__init__
            skip_first = True

        try:
            signature = inspect.signature(function)
        except (TypeError, ValueError) as e:
            raise ContainerException(f"Cannot inspect parameters of {describe(target)}: {e}") from e

        hints = self._type_hints(function)

        descriptors: List[ParameterDescriptor] = []
        for index, (name, param) in enumerate(signature.parameters.items()):
            # Unbound __init__ still lists self
            if skip_first and index == 0:
                continue

            if param.kind == inspect.Parameter.VAR_POSITIONAL:
                continue

            if param.kind == inspect.Parameter.VAR_KEYWORD:
                descriptors.append(ParameterDescriptor(name=name, var_keyword=True))
                continue

            annotation = hints.get(name, param.annotation)
            if annotation is inspect.Parameter.empty:
                annotation = None

            has_default = param.default is not inspect.Parameter.empty
            descriptors.append(
                ParameterDescriptor(
                    name=name,
                    annotation=_unwrap_optional(annotation),
                    default=param.default if has_default else None,
                    has_default=has_default,
                )
            )
        return descriptors

    def is_autowirable(self, target: Any) -> bool:
        """Report whether the target is a concrete, non-builtin, non-protocol class."""
        if not inspect.isclass(target):
            return False
        if inspect.isabstract(target):
            return False
        if getattr(target, "__module__", "") == "builtins":
            return False
        if getattr(target, "_is_protocol", False):
            return False
        return True

    @staticmethod
    def _type_hints(function: Callable[..., Any]) -> Dict[str, Any]:
        source = function
        if not (inspect.isfunction(function) or inspect.ismethod(function)):
            source = getattr(type(function), "__call__", function)
        try:
            return get_type_hints(source)
        except (NameError, TypeError):
            # Unresolvable forward references fall back to the raw annotations.
            return {}
