import functools
import inspect
import logging
from typing import Any, Awaitable, Callable, Type, get_type_hints

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from astral_di.domain import ContainerException, IContainer

logger = logging.getLogger(__name__)


def create_fastapi_dependency(container: IContainer, abstract: Any) -> Callable[[], Any]:
    """Create a FastAPI Depends() callable that resolves from the container.

    The resolved object follows the registration in the container (shared or
    not), so singletons are reused across requests.

    Args:
        container: The container to resolve from.
        abstract: The abstract to resolve when the dependency is called.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> container = Container()
        >>> container.singleton(HoroscopeRepository, lambda c: HoroscopeRepository(c.make(Database)))
        >>>
        >>> get_repo = create_fastapi_dependency(container, HoroscopeRepository)
        >>>
        >>> @app.get("/horoscopes/{sign}")
        >>> async def read(sign: str, repo: HoroscopeRepository = Depends(get_repo)):
        ...     return repo.today(sign)
    """

    def dependency() -> Any:
        """Resolve the dependency from the container."""
        return container.make(abstract)

    return dependency


def create_request_dependency(abstract: Any) -> Callable[[Request], Any]:
    """Create a FastAPI dependency that resolves from the container attached to the request.

    Requires the ContainerMiddleware to be installed.

    Args:
        abstract: The abstract to resolve.

    Returns:
        A callable that resolves from ``request.state.container``.

    Example:
        >>> app.add_middleware(ContainerMiddleware, container=container)
        >>>
        >>> get_mailer = create_request_dependency(Mailer)
        >>>
        >>> @app.post("/subscribe")
        >>> async def subscribe(mailer: Mailer = Depends(get_mailer)):
        ...     mailer.send_welcome()
    """

    def request_dependency(request: Request) -> Any:
        """Resolve from the request's container."""
        if not hasattr(request.state, "container"):
            raise RuntimeError(
                "Request does not have a DI container. Did you forget to add ContainerMiddleware?"
            )
        container: IContainer = request.state.container
        return container.make(abstract)

    return request_dependency


class ContainerMiddleware(BaseHTTPMiddleware):
    """Middleware that exposes the container on every request.

    The container is accessible via ``request.state.container``.

    Attributes:
        container: The application container.

    Example:
        >>> app = FastAPI()
        >>> app.add_middleware(ContainerMiddleware, container=container)
        >>>
        >>> @app.get("/")
        >>> async def root(request: Request):
        ...     settings = request.state.container.make("settings")
        ...     return {"site": settings["name"]}
    """

    def __init__(self, app: FastAPI, container: IContainer):
        """Initialize the middleware with the application container.

        Args:
            app: The FastAPI/Starlette application.
            container: The container to publish on requests.
        """
        super().__init__(app)
        self.container = container

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Attach the container to the request and execute the endpoint.

        Args:
            request: The incoming HTTP request.
            call_next: The next middleware or endpoint handler.

        Returns:
            The response from the endpoint.
        """
        request.state.container = self.container
        return await call_next(request)


def inject_dependencies(container: IContainer, *dependency_types: Type[Any]) -> Callable:
    """Decorator that injects container-resolved arguments into a FastAPI endpoint.

    Parameters annotated with one of ``dependency_types`` are removed from the
    signature FastAPI sees and resolved from the container on every call; the
    remaining parameters are handled by FastAPI as usual.

    Args:
        container: The container to resolve from.
        *dependency_types: Types to resolve and inject.

    Returns:
        A decorator function.

    Example:
        >>> @app.get("/horoscopes/{sign}")
        >>> @inject_dependencies(container, HoroscopeService)
        >>> async def read(sign: str, service: HoroscopeService):
        ...     return service.today(sign)
    """

    def decorator(func: Callable) -> Callable:
        """Wrap the function with dependency injection logic."""
        signature = inspect.signature(func)
        try:
            hints = get_type_hints(func)
        except (NameError, TypeError):
            hints = {}

        injected = {}
        for name, param in signature.parameters.items():
            annotation = hints.get(name, param.annotation)
            if annotation in dependency_types:
                injected[name] = annotation

        exposed = [param for name, param in signature.parameters.items() if name not in injected]

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            """Resolve dependencies and call the original function."""
            for name, abstract in injected.items():
                if name not in kwargs:
                    kwargs[name] = container.make(abstract)

            result = func(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            return result

        wrapper.__signature__ = signature.replace(parameters=exposed)  # type: ignore[attr-defined]
        return wrapper

    return decorator


async def container_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Convert a container failure into a generic internal error response."""
    logger.error("Container failure while handling %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handler turning ContainerException into a 500 response.

    Example:
        >>> app = FastAPI()
        >>> register_exception_handlers(app)
    """
    app.add_exception_handler(ContainerException, container_exception_handler)
