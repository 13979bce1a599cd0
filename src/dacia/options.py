from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from diwire import BaseScope, LockMode, Scope


@dataclass(frozen=True, slots=True, kw_only=True)
class ServiceProviderOptions:
    """Configure how a ``ServiceProvider`` builds its underlying container.

    Args:
        lock_mode: Lock strategy forwarded to ``diwire.Container``. ``"auto"``
            lets diwire pick thread or async locks for cached providers.
        scoped_scope: Scope that ``ServiceLifetime.SCOPED`` registrations are
            bound to. ``ServiceProvider.create_scope`` enters this scope.

    Examples:
        .. code-block:: python

            options = ServiceProviderOptions(lock_mode=LockMode.THREAD)
            provider = services.build_service_provider(options)

    """

    lock_mode: LockMode | Literal["auto"] = "auto"
    scoped_scope: BaseScope = Scope.REQUEST
