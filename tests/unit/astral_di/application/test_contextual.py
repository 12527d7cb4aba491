"""Unit tests for ContextualBindingTable and ContextualBindingBuilder."""

from unittest.mock import MagicMock

import pytest

from astral_di.application.contextual import ContextualBindingBuilder, ContextualBindingTable
from astral_di.domain import ContainerException, RecipeKind


class Controller:
    pass


class AdminController(Controller):
    pass


class Logger:
    pass


class FileLogger(Logger):
    pass


class TestContextualBindingTable:
    """Test cases for the contextual override table."""

    def test_add_and_find(self):
        """Test that an override is found for its exact pair."""
        table = ContextualBindingTable()
        table.add(Controller, Logger, FileLogger)

        recipe = table.find(Controller, Logger)

        assert recipe.kind == RecipeKind.CLASS
        assert recipe.concrete is FileLogger

    def test_find_missing_pair(self):
        """Test that an unknown pair returns None."""
        table = ContextualBindingTable()
        table.add(Controller, Logger, FileLogger)

        assert table.find(Controller, str) is None
        assert table.find(None, Logger) is None

    def test_subclass_consumer_does_not_inherit(self):
        """Test that matching on the consumer is exact."""
        table = ContextualBindingTable()
        table.add(Controller, Logger, FileLogger)

        assert table.find(AdminController, Logger) is None

    def test_later_registration_replaces(self):
        """Test that adding the same pair twice keeps the latest recipe."""
        table = ContextualBindingTable()
        table.add(Controller, "level", "info")
        table.add(Controller, "level", "debug")

        assert table.find(Controller, "level").value == "debug"
        assert len(table) == 1

    def test_factory_concrete(self):
        """Test that callables are stored as factory recipes."""
        table = ContextualBindingTable()
        table.add(Controller, Logger, lambda c: FileLogger())

        assert table.find(Controller, Logger).kind == RecipeKind.FACTORY

    def test_copy_is_independent(self):
        """Test that a copied table does not share later additions."""
        table = ContextualBindingTable()
        table.add(Controller, Logger, FileLogger)

        copy = table.copy()
        copy.add(AdminController, Logger, FileLogger)

        assert len(table) == 1
        assert len(copy) == 2

    def test_clear(self):
        """Test that clear removes every override."""
        table = ContextualBindingTable()
        table.add(Controller, Logger, FileLogger)

        table.clear()

        assert len(table) == 0


class TestContextualBindingBuilder:
    """Test cases for the fluent when/needs/give builder."""

    def test_give_registers_on_container(self):
        """Test that give() forwards the triple to the container."""
        container = MagicMock()

        ContextualBindingBuilder(container, Controller).needs(Logger).give(FileLogger)

        container.add_contextual_binding.assert_called_once_with(Controller, Logger, FileLogger)

    def test_needs_returns_builder(self):
        """Test that needs() is chainable."""
        builder = ContextualBindingBuilder(MagicMock(), Controller)

        assert builder.needs(Logger) is builder

    def test_give_without_needs_raises(self):
        """Test that give() before needs() is rejected."""
        builder = ContextualBindingBuilder(MagicMock(), Controller)

        with pytest.raises(ContainerException, match="needs\\(\\)"):
            builder.give(FileLogger)

    def test_needs_accepts_none_dependency(self):
        """Test that any hashable, including None, can be the dependency."""
        container = MagicMock()

        ContextualBindingBuilder(container, Controller).needs(None).give("value")

        container.add_contextual_binding.assert_called_once_with(Controller, None, "value")

    def test_give_tagged_resolves_tag_lazily(self):
        """Test that give_tagged() registers a factory that calls tagged()."""
        container = MagicMock()
        container.tagged.return_value = ["a", "b"]

        ContextualBindingBuilder(container, Controller).needs("reports").give_tagged("reports")

        consumer, dependency, factory = container.add_contextual_binding.call_args.args
        assert consumer is Controller
        assert dependency == "reports"
        container.tagged.assert_not_called()
        assert factory(container) == ["a", "b"]
        container.tagged.assert_called_once_with("reports")
