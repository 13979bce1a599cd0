from __future__ import annotations

from enum import Enum


class ServiceLifetime(Enum):
    """Select instance reuse for a registered service.

    Each value is mapped onto a ``diwire`` lifetime and scope when a
    ``ServiceProvider`` is built from a ``ServiceCollection``.
    """

    SINGLETON = "singleton"
    """One instance for the lifetime of the provider."""

    SCOPED = "scoped"
    """One instance per ``ServiceScope``; not resolvable from the root provider."""

    TRANSIENT = "transient"
    """A new instance for every resolution."""
