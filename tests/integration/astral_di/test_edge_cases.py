"""Integration tests for edge cases and unusual scenarios."""

from abc import ABC, abstractmethod
from typing import Optional, Protocol

import pytest

from astral_di import Container, ContainerSettings
from astral_di.domain import (
    AliasLoopException,
    CircularDependencyException,
    ContainerException,
    ContainerNotFoundException,
    UnresolvableDependencyException,
)


class SelfReferencing:
    def __init__(self, other: "SelfReferencing"):
        self.other = other


class Gateway(Protocol):
    def charge(self, amount: int) -> bool: ...


class TestMissingTypeHints:
    """Test scenarios with missing or incomplete type hints."""

    def test_untyped_parameter_from_override(self):
        """Test that untyped parameters can be satisfied with overrides."""
        container = Container()

        class Service:
            def __init__(self, dependency):
                self.dependency = dependency

        assert container.make(Service, {"dependency": "manual"}).dependency == "manual"

    def test_mixed_type_hints(self):
        """Test class with some parameters typed and others not."""
        container = Container()

        class TypedService:
            pass

        class MixedService:
            def __init__(self, typed: TypedService, untyped="fallback"):
                self.typed = typed
                self.untyped = untyped

        service = container.make(MixedService)

        assert isinstance(service.typed, TypedService)
        assert service.untyped == "fallback"

    def test_optional_dependency_is_resolved(self):
        """Test that Optional[X] is autowired as X."""
        container = Container()

        class Cache:
            pass

        class Service:
            def __init__(self, cache: Optional[Cache] = None):
                self.cache = cache

        assert isinstance(container.make(Service).cache, Cache)

    def test_optional_unbound_interface_uses_default(self):
        """Test that an unbound Optional interface falls back to None."""
        container = Container()

        class Cache(ABC):
            @abstractmethod
            def get(self, key): ...

        class Service:
            def __init__(self, cache: Optional[Cache] = None):
                self.cache = cache

        assert container.make(Service).cache is None


class TestUnusualTargets:
    """Test scenarios with unusual abstracts and recipes."""

    def test_protocol_requires_binding(self):
        """Test that protocols are never autowired."""
        container = Container()

        with pytest.raises(ContainerNotFoundException):
            container.get(Gateway)

        with pytest.raises(ContainerException, match="not instantiable"):
            container.make(Gateway)

    def test_protocol_bound_to_implementation(self):
        """Test that a bound protocol resolves to its implementation."""
        container = Container()

        class StripeGateway:
            def charge(self, amount: int) -> bool:
                return amount > 0

        container.bind(Gateway, StripeGateway)

        assert container.make(Gateway).charge(10) is True

    def test_none_literal(self):
        """Test that None is a legitimate literal value."""
        container = Container()
        container.instance("nothing", None)

        assert container.make("nothing") is None
        assert container.has("nothing")

    def test_tuple_abstract(self):
        """Test that any hashable value works as an abstract."""
        container = Container()
        container.bind(("reports", 2024), "archive")

        assert container.make(("reports", 2024)) == "archive"

    def test_unhashable_abstract_is_not_found(self):
        """Test that get() on an unhashable value fails with not-found."""
        with pytest.raises(ContainerNotFoundException):
            Container().get(["not", "hashable"])

    def test_factory_resolving_other_bindings(self):
        """Test that factories can resolve through the container they receive."""
        container = Container()
        container.bind("host", "localhost")
        container.bind("port", 5432)
        container.singleton("dsn", lambda c: f"postgres://{c.make('host')}:{c.make('port')}")

        assert container.make("dsn") == "postgres://localhost:5432"

    def test_self_referencing_class(self):
        """Test that a class depending on itself is a cycle."""
        with pytest.raises(CircularDependencyException) as exc_info:
            Container().make(SelfReferencing)

        assert exc_info.value.chain == [SelfReferencing, SelfReferencing]

    def test_cycle_through_factories(self):
        """Test that factories calling make() are checked for cycles too."""
        container = Container()
        container.bind("a", lambda c: c.make("b"))
        container.bind("b", lambda c: c.make("a"))

        with pytest.raises(CircularDependencyException) as exc_info:
            container.make("a")

        assert exc_info.value.chain == ["a", "b", "a"]

    def test_cycle_through_aliases_reports_canonical_names(self):
        """Test that the chain is expressed in canonical abstracts."""
        container = Container()
        container.bind("a", lambda c: c.make("alias-of-a"))
        container.alias("a", "alias-of-a")

        with pytest.raises(CircularDependencyException) as exc_info:
            container.make("a")

        assert exc_info.value.chain == ["a", "a"]


class TestErrorRecovery:
    """Test that failures leave the container usable."""

    def test_container_usable_after_cycle(self):
        """Test that the next top-level call starts with an empty build stack."""
        container = Container()
        container.bind("a", lambda c: c.make("a"))

        with pytest.raises(CircularDependencyException):
            container.make("a")

        container.bind("a", "recovered")
        assert container.make("a") == "recovered"

    def test_container_usable_after_constructor_failure(self):
        """Test that a failing constructor does not poison later resolutions."""
        container = Container()
        attempts = []

        class Flaky:
            def __init__(self):
                attempts.append(1)
                if len(attempts) == 1:
                    raise ConnectionError("database unavailable")

        container.singleton(Flaky)

        with pytest.raises(ContainerException) as exc_info:
            container.make(Flaky)

        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert isinstance(container.make(Flaky), Flaky)

    def test_unresolvable_reports_enclosing_abstract(self):
        """Test that nested failures name the class being built."""
        container = Container()

        class Connection:
            def __init__(self, dsn: str):
                self.dsn = dsn

        class Repository:
            def __init__(self, connection: Connection):
                self.connection = connection

        with pytest.raises(UnresolvableDependencyException) as exc_info:
            container.make(Repository)

        assert exc_info.value.parameter == "dsn"
        assert exc_info.value.owner is Connection

    def test_alias_loop(self):
        """Test that alias loops raise instead of hanging."""
        container = Container(ContainerSettings(max_alias_depth=4))
        container.alias("a", "b")
        container.alias("b", "a")

        with pytest.raises(AliasLoopException) as exc_info:
            container.make("a")

        assert exc_info.value.max_depth == 4


class TestAutowireSetting:
    """Test the autowire switch."""

    def test_autowire_disabled_requires_bindings(self):
        """Test that only explicitly bound classes resolve."""
        container = Container(ContainerSettings(autowire=False))

        class Wheel:
            pass

        class Car:
            def __init__(self, wheel: Wheel):
                self.wheel = wheel

        with pytest.raises(ContainerNotFoundException):
            container.get(Car)

        container.bind(Car)
        with pytest.raises(UnresolvableDependencyException):
            container.make(Car)

        container.bind(Wheel)
        assert isinstance(container.make(Car).wheel, Wheel)
