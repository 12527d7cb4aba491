from typing import Any, List, Optional


def describe(abstract: Any) -> str:
    """Human readable name for an abstract (class name or string key)."""
    if isinstance(abstract, type):
        return abstract.__name__
    if isinstance(abstract, str):
        return abstract
    return repr(abstract)


class ContainerException(Exception):
    """Base exception for container resolution and configuration errors."""


class ContainerNotFoundException(ContainerException):
    """Raised by ``get()`` when nothing is registered or autowirable for an abstract.

    Attributes:
        abstract: The abstract that was requested.
    """

    def __init__(self, abstract: Any) -> None:
        self.abstract = abstract
        super().__init__(f"No entry was found in the container for: {describe(abstract)}")


class CircularDependencyException(ContainerException):
    """Raised when a circular dependency is detected.

    Attributes:
        chain: Abstracts from the first repeated occurrence to the point of detection.
    """

    def __init__(self, chain: List[Any]) -> None:
        self.chain = chain
        message = f"Circular dependency detected: {' -> '.join(describe(item) for item in chain)}"
        super().__init__(message)


class UnresolvableDependencyException(ContainerException):
    """Raised when a constructor or callable parameter cannot be satisfied.

    This occurs when:
    - The parameter has no type hint and no default value.
    - The declared type is an unbound interface or builtin and there is no default.
    - No named override was supplied.

    Attributes:
        parameter: Name of the parameter.
        owner: The class or callable declaring the parameter.
        abstract: The abstract being built when the failure happened, if any.
    """

    def __init__(self, parameter: str, owner: Any, abstract: Optional[Any] = None) -> None:
        self.parameter = parameter
        self.owner = owner
        self.abstract = abstract
        message = f"Unresolvable dependency resolving parameter '{parameter}' of {describe(owner)}"
        if abstract is not None and abstract is not owner:
            message += f" while building {describe(abstract)}"
        super().__init__(message)


class AliasLoopException(ContainerException):
    """Raised when following an alias chain exceeds the configured hop limit.

    Attributes:
        alias: The name the lookup started from.
        max_depth: The hop limit that was exceeded.
    """

    def __init__(self, alias: Any, max_depth: int) -> None:
        self.alias = alias
        self.max_depth = max_depth
        super().__init__(f"Alias chain for {describe(alias)} exceeds {max_depth} hops; check for an alias loop")
