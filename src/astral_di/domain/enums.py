from enum import Enum


class RecipeKind(str, Enum):
    """Defines how a binding produces its object.

    Attributes:
        LITERAL: The stored value is returned as-is.
        FACTORY: A callable receives the container and builds the object.
        CLASS: A class is autowired through its constructor.
    """

    LITERAL = "literal"
    FACTORY = "factory"
    CLASS = "class"

    def __str__(self) -> str:
        return self.value


class HookPhase(str, Enum):
    """Phases in which lifecycle callbacks fire after an object is built."""

    RESOLVING = "resolving"
    AFTER_RESOLVING = "after_resolving"

    def __str__(self) -> str:
        return self.value
