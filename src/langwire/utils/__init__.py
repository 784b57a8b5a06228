r"""Utility functions shared by the langwire modules."""

from __future__ import annotations

__all__ = ["describe_location", "load_resource"]

from langwire.utils.resource import describe_location, load_resource
