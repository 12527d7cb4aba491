from collections.abc import Iterable as IterableABC
from typing import Any, Dict, Iterable, List, Union


def _as_list(value: Union[Any, Iterable[Any]]) -> List[Any]:
    # Strings and classes (an Enum class is iterable) are single names.
    if isinstance(value, (str, bytes, type)) or not isinstance(value, IterableABC):
        return [value]
    return list(value)


class TagRegistry:
    """Named groups of abstracts, each kept in first-tagged order without duplicates."""

    def __init__(self) -> None:
        # dict keys double as an insertion-ordered set
        self._tags: Dict[str, Dict[Any, None]] = {}

    def tag(self, abstracts: Union[Any, Iterable[Any]], tags: Union[str, Iterable[str]]) -> None:
        """Add each abstract to each named group.

        Args:
            abstracts: One abstract or any iterable of them.
            tags: One tag name or any iterable of them.
        """
        abstracts = _as_list(abstracts)
        for tag in _as_list(tags):
            members = self._tags.setdefault(tag, {})
            for abstract in abstracts:
                members.setdefault(abstract, None)

    def members(self, tag: str) -> List[Any]:
        """Abstracts tagged with ``tag``; empty for an unknown tag."""
        return list(self._tags.get(tag, {}))

    def tags(self) -> List[str]:
        return list(self._tags)

    def copy(self) -> "TagRegistry":
        registry = TagRegistry()
        registry._tags = {tag: dict(members) for tag, members in self._tags.items()}
        return registry

    def clear(self) -> None:
        self._tags.clear()
