from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Any, TypeVar

from dacia import actions, indirects, intermediate, multiple, null_services
from dacia.descriptors import ServiceDescriptor, ServiceFactory, format_service_type
from dacia.lifetime import ServiceLifetime
from dacia.provider import ServiceProvider

if TYPE_CHECKING:
    from typing_extensions import Self

    from dacia.actions import ServiceAction
    from dacia.options import ServiceProviderOptions

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ServiceCollection:
    """Ordered, mutable set of service registrations for one composition phase.

    Mutating methods return the collection itself so calls can be chained.
    The collection also records which ``ServiceAction`` objects were applied
    to it, which makes ``run`` idempotent per collection.

    The collection is not thread-safe; configure it from one thread and build
    a ``ServiceProvider`` before concurrent resolution starts.

    Examples:
        .. code-block:: python

            services = (
                ServiceCollection()
                .add_singleton(Logger, ConsoleLogger)
                .add_transient(Repository, SqlRepository)
            )

            with services.build_service_provider() as provider:
                repository = provider.get_required_service(Repository)

    """

    def __init__(self, descriptors: Iterable[ServiceDescriptor] = ()) -> None:
        self._descriptors: list[ServiceDescriptor] = list(descriptors)
        self._applied_actions: set[ServiceAction[Any]] = set()

    # region Registration Set
    def __iter__(self) -> Iterator[ServiceDescriptor]:
        return iter(tuple(self._descriptors))

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, descriptor: object) -> bool:
        return any(existing is descriptor for existing in self._descriptors)

    def __repr__(self) -> str:
        return f"ServiceCollection({self._descriptors!r})"

    def add(self, descriptor: ServiceDescriptor) -> Self:
        """Append ``descriptor`` to the collection."""
        self._descriptors.append(descriptor)
        logger.debug("Added %r", descriptor)
        return self

    def remove(self, descriptor: ServiceDescriptor) -> Self:
        """Remove ``descriptor`` (matched by identity).

        Raises:
            ValueError: If ``descriptor`` is not in the collection.

        """
        for index, existing in enumerate(self._descriptors):
            if existing is descriptor:
                del self._descriptors[index]
                logger.debug("Removed %r", descriptor)
                return self

        msg = f"{descriptor!r} is not in the collection."
        raise ValueError(msg)

    def find_all(self, service_type: Any) -> list[ServiceDescriptor]:
        """Return the registrations of ``service_type`` in registration order."""
        return [
            descriptor
            for descriptor in self._descriptors
            if descriptor.service_type == service_type
        ]

    def has_registration(self, service_type: Any) -> bool:
        """Return whether ``service_type`` has at least one registration."""
        return any(descriptor.service_type == service_type for descriptor in self._descriptors)

    def remove_services(self, service_type: Any) -> Self:
        """Remove every registration of ``service_type``."""
        for descriptor in self.find_all(service_type):
            self.remove(descriptor)
        return self

    def build_service_provider(self, options: ServiceProviderOptions | None = None) -> ServiceProvider:
        """Build an immutable provider from the current registrations.

        Later changes to the collection do not affect the returned provider.
        """
        return ServiceProvider(self._descriptors, options)

    # endregion Registration Set

    # region Registration Shortcuts
    def add_singleton(
        self,
        service_type: Any,
        implementation_type: type[Any] | None = None,
        *,
        factory: ServiceFactory | None = None,
    ) -> Self:
        """Register a singleton, constructed from a type or built by ``factory``.

        ``implementation_type`` defaults to ``service_type`` when no factory is
        given.
        """
        return self._add_with_lifetime(
            service_type,
            implementation_type,
            factory,
            ServiceLifetime.SINGLETON,
        )

    def add_scoped(
        self,
        service_type: Any,
        implementation_type: type[Any] | None = None,
        *,
        factory: ServiceFactory | None = None,
    ) -> Self:
        """Register a service cached once per ``ServiceScope``."""
        return self._add_with_lifetime(service_type, implementation_type, factory, ServiceLifetime.SCOPED)

    def add_transient(
        self,
        service_type: Any,
        implementation_type: type[Any] | None = None,
        *,
        factory: ServiceFactory | None = None,
    ) -> Self:
        """Register a service built anew on every resolution."""
        return self._add_with_lifetime(
            service_type,
            implementation_type,
            factory,
            ServiceLifetime.TRANSIENT,
        )

    def add_instance(self, service_type: Any, instance: Any) -> Self:
        """Register a pre-built singleton ``instance`` for ``service_type``."""
        return self.add(ServiceDescriptor.describe_instance(service_type, instance))

    def try_add_singleton(self, service_type: Any, implementation_type: type[Any] | None = None) -> Self:
        """Register a singleton only if ``service_type`` has no registration yet."""
        if self.has_registration(service_type):
            logger.debug(
                "Not adding %s: a registration already exists",
                format_service_type(service_type),
            )
            return self
        return self.add_singleton(service_type, implementation_type)

    def add_singleton_as_type_if_instance_null(
        self,
        service_type: Any,
        instance: Any,
        implementation_type: type[Any] | None = None,
    ) -> Self:
        """Register ``instance``, or its type when it is a null service.

        See ``dacia.null_services.add_singleton_as_type_if_instance_null``.
        """
        null_services.add_singleton_as_type_if_instance_null(
            self,
            service_type,
            instance,
            implementation_type,
        )
        return self

    def _add_with_lifetime(
        self,
        service_type: Any,
        implementation_type: type[Any] | None,
        factory: ServiceFactory | None,
        lifetime: ServiceLifetime,
    ) -> Self:
        if factory is not None and implementation_type is None:
            return self.add(ServiceDescriptor.describe_factory(service_type, factory, lifetime))
        return self.add(
            ServiceDescriptor(
                service_type=service_type,
                lifetime=lifetime,
                implementation_type=service_type if implementation_type is None else implementation_type,
                factory=factory,
            ),
        )

    # endregion Registration Shortcuts

    # region Fluent Blocks
    def add_services(self, action: Callable[[ServiceCollection], object]) -> Self:
        """Run a block of registrations against this collection."""
        action(self)
        return self

    def add_multiple_services(self, action: Callable[[ServiceCollection], object]) -> Self:
        """Run a block adding the implementations of a multiple service.

        Behaves like ``add_services``; it only names the block's purpose.
        """
        action(self)
        return self

    def do_nothing(self) -> Self:
        """Return the collection unchanged."""
        return self

    # endregion Fluent Blocks

    # region Service Actions
    def has_applied_action(self, action: ServiceAction[Any]) -> bool:
        """Return whether ``action`` was run (not rerun) against this collection."""
        return action in self._applied_actions

    def mark_action_applied(self, action: ServiceAction[Any]) -> None:
        """Record ``action`` as applied so later ``run`` calls skip it."""
        self._applied_actions.add(action)

    def run(self, action: ServiceAction[Any]) -> Self:
        """Apply ``action`` unless it was already applied to this collection."""
        actions.run_service_action(self, action)
        return self

    def rerun(self, action: ServiceAction[Any]) -> Self:
        """Apply ``action`` even if it already ran.

        Unsafe for actions that are not idempotent: registrations they add are
        added again.
        """
        actions.rerun_service_action(self, action)
        return self

    def run_all(self, service_actions: Iterable[ServiceAction[Any]]) -> Self:
        """Run each action in order, skipping those already applied."""
        actions.run_service_actions(self, service_actions)
        return self

    def add_singleton_forward(
        self,
        service_type: Any,
        derived_type: Any,
        derived_action: ServiceAction[Any],
    ) -> Self:
        """Satisfy ``service_type`` with the ``derived_type`` service registered by ``derived_action``."""
        actions.add_singleton_forward(self, service_type, derived_type, derived_action)
        return self

    # endregion Service Actions

    # region Indirects and Multiple Services
    def add_service_indirects(self, service_type: Any) -> Self:
        """Rewrite the registrations of ``service_type`` into indirect form.

        See ``dacia.indirects.add_service_indirects``.
        """
        indirects.add_service_indirects(self, service_type)
        return self

    def add_singleton_multiple_service(self, service_type: Any, implementation_type: type[Any]) -> Self:
        """Add ``implementation_type`` as one of the multiple services of ``service_type``."""
        multiple.add_singleton_multiple_service(self, service_type, implementation_type)
        return self

    # endregion Indirects and Multiple Services

    # region Intermediate Providers
    def build_intermediate_service_provider(
        self,
        options: ServiceProviderOptions | None = None,
    ) -> ServiceProvider:
        """Build a provider from the registrations made so far. The caller must close it."""
        return intermediate.build_intermediate_service_provider(self, options)

    def open_intermediate_required_service(
        self,
        service_type: type[T],
        options: ServiceProviderOptions | None = None,
    ) -> tuple[ServiceProvider, T]:
        """Resolve ``service_type`` from a new provider the caller must close."""
        return intermediate.open_intermediate_required_service(self, service_type, options)

    def get_intermediate_required_service(
        self,
        service_type: type[T],
        options: ServiceProviderOptions | None = None,
    ) -> AbstractContextManager[T]:
        """Resolve ``service_type`` inside a ``with`` block that owns the temporary provider."""
        return intermediate.get_intermediate_required_service(self, service_type, options)

    # endregion Intermediate Providers
