r"""Resource loading utilities.

This module reads the bytes behind a resource location. The supported
location formats are:

- ``file:<path>`` or ``file://<path>``: a file on the local filesystem
- ``package:<package>/<path>``: a data file shipped inside an importable
  package
- ``http://...`` or ``https://...``: a document fetched with httpx
- anything else is treated as a local filesystem path
"""

from __future__ import annotations

__all__ = ["DEFAULT_TIMEOUT", "describe_location", "load_resource"]

import logging
from importlib import resources
from pathlib import Path

import httpx

from langwire.exceptions import ResourceLoadError

logger: logging.Logger = logging.getLogger(__name__)

# Default timeout in seconds when fetching a remote resource
DEFAULT_TIMEOUT = 10.0


def describe_location(location: str) -> str:
    r"""Return the scheme of a resource location.

    Example:
        ```pycon
        >>> from langwire.utils.resource import describe_location
        >>> describe_location("file:/tmp/key.json")
        'file'
        >>> describe_location("https://example.com/key.json")
        'url'
        >>> describe_location("package:mypkg/key.json")
        'package'
        >>> describe_location("key.json")
        'path'

        ```
    """
    lowered = location.lower()
    if lowered.startswith(("http://", "https://")):
        return "url"
    if lowered.startswith("file:"):
        return "file"
    if lowered.startswith("package:"):
        return "package"
    return "path"


def _load_file(path: str) -> bytes:
    return Path(path).expanduser().read_bytes()


def _load_package(location: str) -> bytes:
    package, sep, name = location.partition("/")
    if not sep or not package or not name:
        msg = f"package resource must be in the form 'package:<package>/<path>', got {location!r}"
        raise ValueError(msg)
    return resources.files(package).joinpath(name).read_bytes()


def _load_url(url: str, client: httpx.Client | None) -> bytes:
    if client is not None:
        response = client.get(url)
    else:
        with httpx.Client(timeout=DEFAULT_TIMEOUT, follow_redirects=True) as http_client:
            response = http_client.get(url)
    response.raise_for_status()
    return response.content


def load_resource(location: str, client: httpx.Client | None = None) -> bytes:
    r"""Read the content of a resource location.

    Args:
        location: The resource location.
        client: Optional httpx.Client used for ``http(s)://`` locations.
            If ``None``, a short-lived client is created.

    Returns:
        The resource content.

    Raises:
        ResourceLoadError: If the resource cannot be read. The original
            exception is chained as the cause.

    Example:
        ```pycon
        >>> from langwire.utils.resource import load_resource
        >>> content = load_resource("file:tests/resources/fake-credential-key.json")  # doctest: +SKIP

        ```
    """
    kind = describe_location(location)
    logger.debug(f"Loading {kind} resource {location!r}")
    try:
        if kind == "url":
            return _load_url(location, client)
        if kind == "file":
            path = location[len("file:") :]
            if path.startswith("//"):
                path = path[2:]
            return _load_file(path)
        if kind == "package":
            return _load_package(location[len("package:") :])
        return _load_file(location)
    except httpx.HTTPError as exc:
        raise ResourceLoadError(
            location=location,
            message=f"Failed to fetch resource {location!r}: {exc}",
            cause=exc,
        ) from exc
    except (OSError, ValueError, ModuleNotFoundError) as exc:
        raise ResourceLoadError(
            location=location,
            message=f"Failed to read resource {location!r}: {exc}",
            cause=exc,
        ) from exc
