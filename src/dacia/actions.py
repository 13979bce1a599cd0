from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from dacia.descriptors import ServiceDescriptor, format_service_type

if TYPE_CHECKING:
    from dacia.collection import ServiceCollection
    from dacia.provider import ServiceProvider

T = TypeVar("T")

logger = logging.getLogger(__name__)

ServiceActionCallable = Callable[["ServiceCollection"], object]
"""Registration procedure applied to a ``ServiceCollection``. Its return value is ignored."""


class ServiceAction(Generic[T]):
    """Represent a reusable registration procedure for one declared service type.

    ``run`` applies the procedure at most once per ``ServiceCollection``: the
    collection, not the action, remembers which actions were applied. The same
    action object can therefore be shared between sub-modules and between
    independent composition roots.

    Args:
        action: Procedure registering services into a collection.
        service_type: Service type the action makes available. Informational,
            used in logs and ``repr``.

    Examples:
        .. code-block:: python

            add_console_logger = ServiceAction(
                lambda services: services.add_singleton(Logger, ConsoleLogger),
                service_type=Logger,
            )

            services.run(add_console_logger).run(add_console_logger)  # registers once

    """

    def __init__(
        self,
        action: ServiceActionCallable,
        *,
        service_type: Any = None,
    ) -> None:
        self._action = action
        self._service_type = service_type

    @property
    def action(self) -> ServiceActionCallable:
        """Return the wrapped registration procedure."""
        return self._action

    @property
    def service_type(self) -> Any:
        """Return the declared service type."""
        return self._service_type

    def has_run(self, services: ServiceCollection) -> bool:
        """Return whether this action was already applied to ``services``."""
        return services.has_applied_action(self)

    def run(self, services: ServiceCollection) -> ServiceCollection:
        """Apply the action to ``services`` unless it was already applied there."""
        return run_service_action(services, self)

    def rerun(self, services: ServiceCollection) -> ServiceCollection:
        """Apply the action regardless of previous runs. See ``rerun_service_action``."""
        return rerun_service_action(services, self)

    def __repr__(self) -> str:
        action_name = getattr(self._action, "__qualname__", repr(self._action))
        if self._service_type is None:
            return f"ServiceAction({action_name})"
        return f"ServiceAction[{format_service_type(self._service_type)}]({action_name})"


def service_action(
    service_type: Any = None,
) -> Callable[[ServiceActionCallable], ServiceAction[Any]]:
    """Build a ``ServiceAction`` from the decorated registration function.

    Examples:
        .. code-block:: python

            @service_action(Logger)
            def add_console_logger(services: ServiceCollection) -> None:
                services.add_singleton(Logger, ConsoleLogger)

    """

    def decorator(action: ServiceActionCallable) -> ServiceAction[Any]:
        return ServiceAction(action, service_type=service_type)

    return decorator


def run_service_action(services: ServiceCollection, action: ServiceAction[Any]) -> ServiceCollection:
    """Apply ``action`` once per collection.

    A second run against the same collection is a silent no-op. Exceptions
    raised by the action propagate unchanged and the action is not recorded
    as applied.
    """
    if services.has_applied_action(action):
        logger.debug("Skipping %r: already applied to this collection", action)
        return services

    logger.debug("Running %r", action)
    action.action(services)
    services.mark_action_applied(action)
    return services


def rerun_service_action(services: ServiceCollection, action: ServiceAction[Any]) -> ServiceCollection:
    """Apply ``action`` unconditionally.

    The applied-action record of the collection is neither consulted nor
    updated. Rerunning an action that is not idempotent (one that only adds
    registrations) produces duplicate registrations.
    """
    logger.debug("Rerunning %r", action)
    action.action(services)
    return services


def run_service_actions(
    services: ServiceCollection,
    actions: Iterable[ServiceAction[Any]],
) -> ServiceCollection:
    """Run each action in order. Later actions may rely on earlier registrations."""
    for action in actions:
        run_service_action(services, action)
    return services


def add_singleton_forward(
    services: ServiceCollection,
    service_type: Any,
    derived_type: Any,
    derived_action: ServiceAction[Any],
) -> ServiceCollection:
    """Satisfy requests for ``service_type`` with the ``derived_type`` service.

    Registers a singleton factory for ``service_type`` that resolves
    ``derived_type``, then runs ``derived_action`` so ``derived_type`` is
    registered.
    """

    def forward(provider: ServiceProvider) -> Any:
        return provider.get_required_service(derived_type)

    services.add(ServiceDescriptor.describe_factory(service_type, forward))
    return run_service_action(services, derived_action)


def add_singleton_forward_action(
    service_type: Any,
    derived_type: Any,
    derived_action: ServiceAction[Any],
) -> ServiceAction[Any]:
    """Return ``add_singleton_forward`` as a ``ServiceAction`` for ``service_type``."""

    def action(services: ServiceCollection) -> None:
        add_singleton_forward(services, service_type, derived_type, derived_action)

    return ServiceAction(action, service_type=service_type)
