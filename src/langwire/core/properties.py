r"""Flat property sources with relaxed key binding.

A ``PropertySource`` stores configuration values under dotted keys such
as ``langwire.language-service.retry.initial-retry-delay``. Keys are
compared in a canonical form where every dotted segment is lowercased
and stripped of ``-`` and ``_``, so ``initialRetryDelay``,
``initial_retry_delay`` and ``initial-retry-delay`` all resolve to the
same entry.

``bind_properties`` collects the values under a prefix into the nested
shape of a pydantic model and lets pydantic convert them.

Example:
    ```pycon
    >>> from langwire.core.properties import PropertySource
    >>> source = PropertySource.from_pairs(
    ...     "langwire.language-service.enabled=false",
    ...     "langwire.language-service.retry.initial-retry-delay=PT0.5S",
    ... )
    >>> source.get("langwire.languageService.enabled")
    'false'
    >>> source.get("langwire.language_service.retry.initialRetryDelay")
    'PT0.5S'

    ```
"""

from __future__ import annotations

__all__ = ["PropertySource", "bind_properties", "canonical_key"]

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ValidationError

from langwire.exceptions import PropertyBindingError

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

logger: logging.Logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def canonical_key(key: str) -> str:
    r"""Return the canonical form of a property key.

    Args:
        key: The dotted property key.

    Returns:
        The key with every segment lowercased and stripped of ``-`` and
        ``_``.

    Example:
        ```pycon
        >>> from langwire.core.properties import canonical_key
        >>> canonical_key("langwire.language-service.retry.maxAttempts")
        'langwire.languageservice.retry.maxattempts'

        ```
    """
    return ".".join(
        segment.strip().lower().replace("-", "").replace("_", "") for segment in key.split(".")
    )


class PropertySource:
    r"""Immutable collection of configuration properties.

    Args:
        values: Mapping of dotted property keys to raw values. Values can
            be strings or already-typed Python objects.
        name: Optional human-readable name used in log messages.

    Example:
        ```pycon
        >>> from langwire.core.properties import PropertySource
        >>> source = PropertySource({"a.b-c": "1"})
        >>> source.get("a.bC")
        '1'
        >>> source.get("a.missing", "5")
        '5'

        ```
    """

    def __init__(self, values: Mapping[str, Any] | None = None, name: str = "properties") -> None:
        self.name = name
        self._values: dict[str, tuple[str, Any]] = {}
        for key, value in (values or {}).items():
            self._values[canonical_key(key)] = (key, value)

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(name={self.name!r}, size={len(self)})"

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and canonical_key(key) in self._values

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any], name: str = "mapping") -> PropertySource:
        r"""Create a property source from a mapping of dotted keys."""
        return cls(values, name=name)

    @classmethod
    def from_pairs(cls, *pairs: str, name: str = "pairs") -> PropertySource:
        r"""Create a property source from ``"key=value"`` strings.

        Args:
            *pairs: The ``"key=value"`` strings.
            name: Optional source name.

        Returns:
            The new property source.

        Raises:
            ValueError: If a pair has no ``=`` separator.
        """
        values = {}
        for pair in pairs:
            key, sep, value = pair.partition("=")
            if not sep:
                msg = f"property pair must be in the form 'key=value', got {pair!r}"
                raise ValueError(msg)
            values[key.strip()] = value.strip()
        return cls(values, name=name)

    @classmethod
    def from_file(cls, path: str | Path) -> PropertySource:
        r"""Create a property source from a ``.properties`` file.

        Lines starting with ``#`` or ``!`` are comments. Keys and values
        are separated by the first ``=`` or ``:``, and a trailing
        backslash continues the value on the next line.

        Args:
            path: Path to the properties file.

        Returns:
            The new property source.

        Raises:
            OSError: If the file cannot be read.
        """
        path = Path(path)
        values: dict[str, str] = {}
        pending = ""
        for raw_line in path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip() if not pending else raw_line.lstrip()
            if not pending and (not line or line[0] in "#!"):
                continue
            if line.endswith("\\") and not line.endswith("\\\\"):
                pending += line[:-1]
                continue
            line = pending + line
            pending = ""
            positions = [pos for pos in (line.find("="), line.find(":")) if pos >= 0]
            if not positions:
                values[line] = ""
                continue
            sep = min(positions)
            values[line[:sep].strip()] = line[sep + 1 :].strip()
        if pending:
            values[pending.strip()] = ""
        logger.debug(f"Loaded {len(values)} properties from {path}")
        return cls(values, name=str(path))

    @classmethod
    def merge(cls, *sources: PropertySource | None) -> PropertySource:
        r"""Combine property sources, later sources taking precedence.

        Example:
            ```pycon
            >>> from langwire.core.properties import PropertySource
            >>> base = PropertySource({"a": "1", "b": "2"})
            >>> override = PropertySource({"b": "3"})
            >>> merged = PropertySource.merge(base, override)
            >>> merged.get("a"), merged.get("b")
            ('1', '3')

            ```
        """
        merged = cls(name="+".join(source.name for source in sources if source is not None))
        for source in sources:
            if source is not None:
                merged._values.update(source._values)
        return merged

    def keys(self) -> list[str]:
        r"""Return the original keys of all properties."""
        return [key for key, _ in self._values.values()]

    def has_prefix(self, prefix: str) -> bool:
        r"""Indicate whether any property lives under ``prefix``."""
        canonical = canonical_key(prefix) + "."
        return any(key.startswith(canonical) for key in self._values)

    def get(self, key: str, default: Any = None) -> Any:
        r"""Return the raw value of a property, or ``default`` when
        absent."""
        entry = self._values.get(canonical_key(key))
        if entry is None:
            return default
        return entry[1]

    def collect(self, prefix: str, model: type[BaseModel]) -> dict[str, Any]:
        r"""Collect the properties under ``prefix`` into the nested shape
        of ``model``.

        Keys are matched against the model field names with the relaxed
        rules, and nested models are collected recursively. Blank string
        values count as missing.

        Args:
            prefix: The dotted prefix of the model properties.
            model: The pydantic model class describing the fields.

        Returns:
            The raw values keyed by field name, without conversion.

        Example:
            ```pycon
            >>> from langwire.core.config import RetryConfig
            >>> from langwire.core.properties import PropertySource
            >>> source = PropertySource({"app.retry.max-attempts": "3"})
            >>> source.collect("app.retry", RetryConfig)
            {'max_attempts': '3'}

            ```
        """
        values: dict[str, Any] = {}
        for name, info in model.model_fields.items():
            key = f"{prefix}.{name}"
            annotation = info.annotation
            if isinstance(annotation, type) and issubclass(annotation, BaseModel):
                nested = self.collect(key, annotation)
                if nested:
                    values[name] = nested
                continue
            value = self.get(key)
            if isinstance(value, str):
                value = value.strip()
                if not value:
                    continue
            if value is not None:
                values[name] = value
        return values


def _property_key(prefix: str, loc: tuple[int | str, ...]) -> str:
    parts = [str(part).replace("_", "-") for part in loc]
    return ".".join([prefix, *parts])


def bind_properties(
    model: type[ModelT], source: PropertySource, prefix: str, **kwargs: Any
) -> ModelT:
    r"""Create a pydantic model from the properties under ``prefix``.

    Args:
        model: The pydantic model class to create.
        source: The property source to read from.
        prefix: The dotted prefix of the model properties.
        **kwargs: Additional keyword arguments passed to the model,
            e.g. ``_env_prefix`` for settings classes.

    Returns:
        The bound model.

    Raises:
        PropertyBindingError: If a value fails validation. The key of
            the first failing property is reported.
    """
    values = source.collect(prefix, model)
    logger.debug(f"Binding {model.__qualname__} from {len(values)} properties under {prefix!r}")
    try:
        return model(**values, **kwargs)
    except ValidationError as exc:
        error = exc.errors()[0]
        raise PropertyBindingError(
            key=_property_key(prefix, error["loc"]),
            value=error.get("input"),
            reason=error["msg"],
            cause=exc,
        ) from exc
