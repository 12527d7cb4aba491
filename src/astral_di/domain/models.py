import inspect
from typing import Annotated, Any, Callable, Literal, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field

from astral_di.domain.enums import RecipeKind


class LiteralRecipe(BaseModel):
    """Recipe whose result is the stored value itself.

    Attributes:
        value: The object returned on resolution.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: Literal[RecipeKind.LITERAL] = RecipeKind.LITERAL
    value: Any = Field(..., description="The value returned on resolution.")


class FactoryRecipe(BaseModel):
    """Recipe that builds the object by calling a factory.

    Attributes:
        factory: Callable receiving the container (and the override parameters
            when ``accepts_parameters`` is set).
        accepts_parameters: Whether the factory takes a second positional argument.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: Literal[RecipeKind.FACTORY] = RecipeKind.FACTORY
    factory: Callable[..., Any] = Field(..., description="Factory building the object.")
    accepts_parameters: bool = Field(
        default=False,
        description="Whether the factory is called as factory(container, parameters).",
    )


class ClassRecipe(BaseModel):
    """Recipe that autowires a class through its constructor.

    Attributes:
        concrete: The class to instantiate.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: Literal[RecipeKind.CLASS] = RecipeKind.CLASS
    concrete: Type = Field(..., description="The class to autowire.")


Recipe = Annotated[Union[LiteralRecipe, FactoryRecipe, ClassRecipe], Field(discriminator="kind")]

RECIPE_TYPES = (LiteralRecipe, FactoryRecipe, ClassRecipe)


def _accepts_parameters(factory: Callable[..., Any]) -> bool:
    try:
        signature = inspect.signature(factory)
    except (TypeError, ValueError):
        return False

    positional = 0
    for param in signature.parameters.values():
        if param.kind == inspect.Parameter.VAR_POSITIONAL:
            return True
        if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            positional += 1
    return positional >= 2


def to_recipe(concrete: Any) -> Union[LiteralRecipe, FactoryRecipe, ClassRecipe]:
    """Classify a raw concrete into a recipe.

    Args:
        concrete: A recipe, a class, a callable, or any other value.

    Returns:
        The matching recipe. Existing recipes are returned unchanged.

    Example:
        >>> to_recipe("hello").kind
        <RecipeKind.LITERAL: 'literal'>
        >>> to_recipe(lambda c: object()).kind
        <RecipeKind.FACTORY: 'factory'>
    """
    if isinstance(concrete, RECIPE_TYPES):
        return concrete
    if inspect.isclass(concrete):
        return ClassRecipe(concrete=concrete)
    if callable(concrete):
        return FactoryRecipe(factory=concrete, accepts_parameters=_accepts_parameters(concrete))
    return LiteralRecipe(value=concrete)


class Binding(BaseModel):
    """Value object describing how an abstract is built.

    Attributes:
        abstract: The identifier being registered (class or string key).
        recipe: How the object is produced.
        shared: Whether the built object is cached as a singleton.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    abstract: Any = Field(..., description="The abstract being registered.")
    recipe: Recipe = Field(..., description="The recipe producing the object.")
    shared: bool = Field(default=False, description="Whether the result is cached as a singleton.")


class ContextualBinding(BaseModel):
    """Override of a dependency's recipe scoped to a single consumer.

    Attributes:
        consumer: The abstract whose constructor receives the override.
        dependency: The declared parameter type being overridden.
        recipe: The replacement recipe.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    consumer: Any = Field(..., description="The consumer abstract.")
    dependency: Any = Field(..., description="The dependency abstract inside the consumer.")
    recipe: Recipe = Field(..., description="The replacement recipe.")


class ParameterDescriptor(BaseModel):
    """One parameter of a constructor or callable, as seen by the resolver.

    Attributes:
        name: Parameter name.
        annotation: Declared type, or None when untyped.
        default: Default value, meaningful only when ``has_default`` is set.
        has_default: Whether the parameter declares a default.
        var_keyword: Whether this is a ``**kwargs`` catch-all.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    annotation: Optional[Any] = None
    default: Any = None
    has_default: bool = False
    var_keyword: bool = False


class ContainerSettings(BaseModel):
    """Configuration knobs for a container.

    Attributes:
        max_alias_depth: Maximum number of alias hops before the chain is
            considered a loop.
        autowire: Whether unbound concrete classes are built by autowiring.
    """

    model_config = ConfigDict(frozen=True)

    max_alias_depth: int = Field(default=32, ge=1, description="Alias hop limit.")
    autowire: bool = Field(default=True, description="Autowire unbound concrete classes.")
