from typing import Any, Callable, Dict, Optional, Tuple

from astral_di.application import Container


class TestContainer(Container):
    """Container for tests with dependency override capabilities.

    Copies all registrations from a parent container but allows selective
    override of dependencies. The parent is never modified and its cached
    singletons are not shared.

    This is useful for:
    - Mocking external services (mail, payment gateways, etc.)
    - Replacing implementations with test doubles
    - Isolating tests from shared state

    Attributes:
        _parent_container: The container registrations are copied from.
        _overrides: Abstracts overridden in this container.

    Example:
        >>> container = Container()
        >>> container.singleton(Mailer, SmtpMailer)
        >>>
        >>> def test_subscription():
        ...     test_container = TestContainer(container)
        ...     mock_mailer = MockMailer()
        ...     test_container.mock_singleton(Mailer, mock_mailer)
        ...
        ...     service = test_container.make(SubscriptionService)
        ...     service.subscribe("leo@example.com")
        ...     assert mock_mailer.sent
    """

    __test__ = False  # Tell pytest not to collect this class as a test

    def __init__(self, parent_container: Optional[Container] = None) -> None:
        """Initialize the test container.

        Args:
            parent_container: Optional container to copy registrations from.
                            If None, starts empty.
        """
        settings = parent_container.settings if parent_container is not None else None
        super().__init__(settings=settings)
        self._parent_container = parent_container
        self._overrides: Dict[Any, Any] = {}

        if parent_container is not None:
            self.inherit(parent_container)

    def mock_singleton(self, abstract: Any, mock_instance: Any) -> None:
        """Replace an abstract with a mock instance.

        Example:
            >>> test_container.mock_singleton(Database, mock_db)
            >>> assert test_container.make(UserRepository).db is mock_db
        """
        self.forget(abstract)
        self.instance(abstract, mock_instance)
        self._overrides[abstract] = mock_instance

    def mock_transient(self, abstract: Any, factory: Callable[[], Any]) -> None:
        """Replace an abstract with a factory called on every resolution.

        Example:
            >>> test_container.mock_transient(RequestHandler, lambda: MockRequestHandler())
            >>> assert test_container.make(RequestHandler) is not test_container.make(RequestHandler)
        """
        self.forget(abstract)
        self.bind(abstract, lambda c: factory())
        self._overrides[abstract] = factory

    def override_registration(self, abstract: Any, concrete: Any, shared: bool = False) -> None:
        """Override a binding with any concrete and sharing mode.

        Example:
            >>> test_container.override_registration(CacheStore, lambda c: ArrayStore(), shared=True)
        """
        self.forget(abstract)
        self.bind(abstract, concrete, shared)
        self._overrides[abstract] = concrete

    def reset_overrides(self) -> None:
        """Remove all overrides and restore the parent's registrations.

        Useful for cleaning up between test cases.
        """
        self._overrides.clear()
        if self._parent_container is not None:
            self.inherit(self._parent_container)
        else:
            self.flush()

    @property
    def overrides(self) -> Dict[Any, Any]:
        return dict(self._overrides)

    def __enter__(self) -> "TestContainer":
        """Context manager entry - returns self."""
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        """Context manager exit - automatically clean up overrides."""
        self.reset_overrides()
        self.flush()
        return False


def create_mock_container(*singletons: Tuple[Any, Any], parent: Optional[Container] = None) -> TestContainer:
    """Create a test container with pre-configured mock singletons.

    Args:
        *singletons: Tuples of (abstract, mock_instance).
        parent: Optional container to copy registrations from.

    Returns:
        TestContainer with mocked dependencies.

    Example:
        >>> test_container = create_mock_container(
        ...     (Database, mock_db),
        ...     ("mailer", mock_mailer),
        ... )
    """
    container = TestContainer(parent)

    for abstract, mock_instance in singletons:
        container.mock_singleton(abstract, mock_instance)

    return container
