r"""Registry of the managed components of an application.

An ``ApplicationContext`` holds named singletons. Components can be
looked up by name or by type and are closed, in reverse registration
order, when the context is closed.

Example:
    ```pycon
    >>> from langwire.context import ApplicationContext
    >>> with ApplicationContext() as context:
    ...     context.register("greeting", "hello")
    ...     context.get(str)
    ...
    'hello'

    ```
"""

from __future__ import annotations

__all__ = ["ApplicationContext"]

import logging
from typing import TYPE_CHECKING, Any, TypeVar, overload

from langwire.exceptions import NoSuchComponentError, NoUniqueComponentError

if TYPE_CHECKING:
    from types import TracebackType
    from typing import Self

logger: logging.Logger = logging.getLogger(__name__)

T = TypeVar("T")


class ApplicationContext:
    r"""Container of named singleton components.

    Components registered in the context are owned by it: closing the
    context calls ``close()`` on every component that has one.
    """

    def __init__(self) -> None:
        self._components: dict[str, Any] = {}
        self._closed = False

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(components={list(self._components)})"

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def __contains__(self, key: object) -> bool:
        if isinstance(key, (str, type)):
            return self.contains(key)
        return False

    @property
    def closed(self) -> bool:
        r"""Indicate whether the context has been closed."""
        return self._closed

    def register(self, name: str, component: Any) -> None:
        r"""Register a component under ``name``.

        Args:
            name: The unique component name.
            component: The component instance.

        Raises:
            RuntimeError: If the context is closed.
            ValueError: If a component is already registered under
                ``name``.
        """
        if self._closed:
            msg = "Cannot register components in a closed context"
            raise RuntimeError(msg)
        if name in self._components:
            msg = f"A component is already registered under {name!r}"
            raise ValueError(msg)
        logger.debug(f"Registering component {name!r} ({type(component).__qualname__})")
        self._components[name] = component

    def names(self, component_type: type | None = None) -> list[str]:
        r"""Return the names of the registered components.

        Args:
            component_type: Optional type used to filter the components.

        Returns:
            The component names in registration order.
        """
        if component_type is None:
            return list(self._components)
        return [
            name
            for name, component in self._components.items()
            if isinstance(component, component_type)
        ]

    def contains(self, key: str | type) -> bool:
        r"""Indicate whether a component matches a name or a type."""
        if isinstance(key, str):
            return key in self._components
        return bool(self.names(key))

    @overload
    def get(self, key: type[T]) -> T: ...

    @overload
    def get(self, key: str) -> Any: ...

    def get(self, key: str | type[T]) -> T | Any:
        r"""Return the component matching a name or a type.

        Args:
            key: The component name or type.

        Returns:
            The component.

        Raises:
            NoSuchComponentError: If no component matches.
            NoUniqueComponentError: If several components match the type.

        Example:
            ```pycon
            >>> from langwire.context import ApplicationContext
            >>> context = ApplicationContext()
            >>> context.register("answer", 42)
            >>> context.get("answer")
            42
            >>> context.get(float)  # doctest: +SKIP
            Traceback (most recent call last):
            ...
            langwire.exceptions.NoSuchComponentError: No component registered for 'float'

            ```
        """
        if isinstance(key, str):
            if key not in self._components:
                raise NoSuchComponentError(key)
            return self._components[key]
        candidates = self.names(key)
        if not candidates:
            raise NoSuchComponentError(key)
        if len(candidates) > 1:
            raise NoUniqueComponentError(key, candidates)
        return self._components[candidates[0]]

    def get_optional(self, key: str | type[T], default: Any = None) -> T | Any:
        r"""Return the component matching a name or a type, or
        ``default`` when there is none.

        Raises:
            NoUniqueComponentError: If several components match the type.
        """
        if not self.contains(key):
            return default
        return self.get(key)

    def close(self) -> None:
        r"""Close the components in reverse registration order.

        Every component is closed even when closing another one fails.
        The first failure is raised once all the components have been
        visited. Closing an already closed context does nothing.

        Raises:
            Exception: The first exception raised by a component
                ``close()`` method.
        """
        if self._closed:
            return
        self._closed = True
        first_error: Exception | None = None
        for name, component in reversed(list(self._components.items())):
            close = getattr(component, "close", None)
            if not callable(close):
                continue
            logger.debug(f"Closing component {name!r}")
            try:
                close()
            except Exception as exc:
                logger.exception(f"Failed to close component {name!r}")
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error
