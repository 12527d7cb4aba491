"""
astral-di: Inversion-of-Control container with autowiring, contextual bindings, and lifecycle hooks.

Public API exports for the astral-di package.
"""

# Application exports
from astral_di.application.container import Container
from astral_di.application.container_context import (
    clear_current_container,
    get_current_container,
    set_current_container,
)
from astral_di.application.providers import ServiceProvider

# Domain exports
from astral_di.domain.exceptions import (
    AliasLoopException,
    CircularDependencyException,
    ContainerException,
    ContainerNotFoundException,
    UnresolvableDependencyException,
)
from astral_di.domain.models import ClassRecipe, ContainerSettings, FactoryRecipe, LiteralRecipe

__version__ = "0.1.0"

__all__ = [
    # Container
    "Container",
    "ContainerSettings",
    "ServiceProvider",
    "get_current_container",
    "set_current_container",
    "clear_current_container",
    # Recipes
    "LiteralRecipe",
    "FactoryRecipe",
    "ClassRecipe",
    # Exceptions
    "ContainerException",
    "ContainerNotFoundException",
    "CircularDependencyException",
    "UnresolvableDependencyException",
    "AliasLoopException",
]
