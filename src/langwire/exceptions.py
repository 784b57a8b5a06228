r"""Exception classes raised while wiring the language client.

All exceptions derive from ``LangwireError`` so callers can catch every
wiring failure with a single ``except`` clause, while the lookup and
binding errors also derive from the matching builtin (``LookupError``
and ``ValueError``).
"""

from __future__ import annotations

__all__ = [
    "CredentialsLoadError",
    "LangwireError",
    "NoSuchComponentError",
    "NoUniqueComponentError",
    "PropertyBindingError",
    "ResourceLoadError",
]

from typing import Any


class LangwireError(Exception):
    """Base class for all langwire errors."""


class PropertyBindingError(LangwireError, ValueError):
    """Raised when a property value fails validation.

    Args:
        key: The property key that failed to bind.
        value: The raw value found in the property source.
        reason: A short description of the failure.
        cause: Optional underlying exception.

    Example:
        ```pycon
        >>> from langwire.exceptions import PropertyBindingError
        >>> error = PropertyBindingError(key="a.b", value="x", reason="not an integer")
        >>> error.key
        'a.b'
        >>> str(error)
        "Failed to bind property 'a.b' with value 'x': not an integer"

        ```
    """

    def __init__(self, key: str, value: Any, reason: str, cause: Exception | None = None) -> None:
        super().__init__(f"Failed to bind property {key!r} with value {value!r}: {reason}")
        self.key = key
        self.value = value
        self.reason = reason
        self.cause = cause


class ResourceLoadError(LangwireError):
    """Raised when a resource location cannot be read.

    Args:
        location: The resource location that was requested.
        message: Human-readable description of the failure.
        cause: Optional underlying exception.
    """

    def __init__(self, location: str, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.location = location
        self.cause = cause


class CredentialsLoadError(LangwireError):
    """Raised when credentials cannot be resolved or loaded.

    Args:
        message: Human-readable description of the failure.
        source: Description of the credentials source, e.g. a location
            or ``"ambient"``.
        cause: Optional underlying exception.
    """

    def __init__(
        self, message: str, source: str | None = None, cause: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.source = source
        self.cause = cause


class NoSuchComponentError(LangwireError, LookupError):
    """Raised when a component lookup in an ``ApplicationContext`` finds
    nothing.

    Args:
        key: The name or type that was looked up.
        message: Optional custom message.
    """

    def __init__(self, key: str | type, message: str | None = None) -> None:
        label = key if isinstance(key, str) else key.__qualname__
        super().__init__(message or f"No component registered for {label!r}")
        self.key = key


class NoUniqueComponentError(NoSuchComponentError):
    """Raised when a lookup by type matches more than one component.

    Args:
        key: The type that was looked up.
        candidates: Names of the matching components.
    """

    def __init__(self, key: type, candidates: list[str]) -> None:
        super().__init__(
            key,
            f"Expected a single component of type {key.__qualname__!r} "
            f"but found {len(candidates)}: {', '.join(candidates)}",
        )
        self.candidates = candidates
