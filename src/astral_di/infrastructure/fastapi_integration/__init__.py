"""
FastAPI integration module.

Provides helpers and utilities for integrating astral-di with FastAPI.
"""

from .integration import (
    ContainerMiddleware,
    container_exception_handler,
    create_fastapi_dependency,
    create_request_dependency,
    inject_dependencies,
    register_exception_handlers,
)

__all__ = [
    "create_fastapi_dependency",
    "create_request_dependency",
    "inject_dependencies",
    "ContainerMiddleware",
    "container_exception_handler",
    "register_exception_handlers",
]
