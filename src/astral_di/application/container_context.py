"""Process-wide "current container" accessor.

Framework code should receive the container explicitly (factories get it as
their first argument). This module only serves legacy call sites that cannot
be handed a reference; it is a transitional seam, not the primary API.
"""

import threading
from typing import TYPE_CHECKING, Optional

from astral_di.domain import ContainerException

if TYPE_CHECKING:
    from astral_di.application.container import Container

_current: Optional["Container"] = None
_lock = threading.Lock()


def set_current_container(container: Optional["Container"]) -> Optional["Container"]:
    """Publish ``container`` as the process-wide default.

    Returns:
        The previously published container, if any.
    """
    global _current
    with _lock:
        previous = _current
        _current = container
    return previous


def get_current_container() -> "Container":
    """Return the published container.

    Raises:
        ContainerException: If no container has been published.
    """
    container = _current
    if container is None:
        raise ContainerException(
            "No current container has been set. Call set_current_container() during application bootstrap."
        )
    return container


def clear_current_container() -> None:
    set_current_container(None)
