"""
Application layer - Registries, resolution algorithm, and the container façade.

This layer orchestrates the domain value objects.
It depends only on the Domain layer.
"""

from .binding_registry import BindingRegistry
from .circular_detector import CycleGuard
from .container import Container
from .container_context import clear_current_container, get_current_container, set_current_container
from .contextual import ContextualBindingBuilder, ContextualBindingTable
from .introspection import TypeIntrospector
from .invoker import Invoker
from .lifecycle import LifecycleHooks
from .providers import ServiceProvider
from .resolver import DependencyResolver
from .tag_registry import TagRegistry

__all__ = [
    "Container",
    "BindingRegistry",
    "DependencyResolver",
    "CycleGuard",
    "ContextualBindingTable",
    "ContextualBindingBuilder",
    "LifecycleHooks",
    "TagRegistry",
    "Invoker",
    "TypeIntrospector",
    "ServiceProvider",
    "get_current_container",
    "set_current_container",
    "clear_current_container",
]
