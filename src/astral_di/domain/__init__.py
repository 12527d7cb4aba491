"""
Domain layer - Core models, contracts, and errors of the container.

This layer contains the value objects and exception taxonomy for dependency injection.
It has no dependencies on other layers.
"""

from .enums import HookPhase, RecipeKind
from .exceptions import (
    AliasLoopException,
    CircularDependencyException,
    ContainerException,
    ContainerNotFoundException,
    UnresolvableDependencyException,
    describe,
)
from .interfaces import IContainer, IResolver, ITypeIntrospector
from .models import (
    Binding,
    ClassRecipe,
    ContainerSettings,
    ContextualBinding,
    FactoryRecipe,
    LiteralRecipe,
    ParameterDescriptor,
    Recipe,
    to_recipe,
)

__all__ = [
    # Enums
    "RecipeKind",
    "HookPhase",
    # Exceptions
    "ContainerException",
    "ContainerNotFoundException",
    "CircularDependencyException",
    "UnresolvableDependencyException",
    "AliasLoopException",
    "describe",
    # Interfaces
    "IContainer",
    "IResolver",
    "ITypeIntrospector",
    # Models
    "Binding",
    "ContextualBinding",
    "ParameterDescriptor",
    "ContainerSettings",
    "LiteralRecipe",
    "FactoryRecipe",
    "ClassRecipe",
    "Recipe",
    "to_recipe",
]
