from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from types import TracebackType
from typing import TYPE_CHECKING, Annotated, Any, TypeVar

from diwire import Component, Container, Lifetime

from dacia.descriptors import ServiceDescriptor, ServiceFactory, format_service_type
from dacia.exceptions import DaciaProviderClosedError, DaciaServiceNotRegisteredError
from dacia.lifetime import ServiceLifetime
from dacia.multiple import get_multiple_services
from dacia.null_services import is_null_service
from dacia.options import ServiceProviderOptions

if TYPE_CHECKING:
    from typing_extensions import Self

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ServiceResolver(ABC):
    """Query API shared by ``ServiceProvider`` and ``ServiceScope``.

    Every registered service type maps to an ordered tuple of container keys,
    one per registration. The last registration wins for single-service
    queries; ``get_services`` returns all of them in registration order.
    """

    def __init__(self, keys_by_service_type: Mapping[Any, tuple[Any, ...]]) -> None:
        self._keys_by_service_type = keys_by_service_type
        self._closed = False

    @abstractmethod
    def _resolve(self, key: Any) -> Any:
        """Resolve one container key."""

    def _ensure_open(self) -> None:
        if self._closed:
            msg = f"{type(self).__name__} is closed."
            raise DaciaProviderClosedError(msg)

    def get_service(self, service_type: type[T]) -> T | None:
        """Return the last registered service of ``service_type``, or ``None`` if unregistered."""
        self._ensure_open()
        keys = self._keys_by_service_type.get(service_type)
        if not keys:
            return None
        return self._resolve(keys[-1])

    def get_required_service(self, service_type: type[T]) -> T:
        """Return the last registered service of ``service_type``.

        Raises:
            DaciaServiceNotRegisteredError: If ``service_type`` has no registration.

        """
        self._ensure_open()
        keys = self._keys_by_service_type.get(service_type)
        if not keys:
            msg = f"No service registered for type {format_service_type(service_type)}."
            raise DaciaServiceNotRegisteredError(msg)
        return self._resolve(keys[-1])

    def get_services(self, service_type: type[T]) -> list[T]:
        """Return one service per registration of ``service_type``, in registration order."""
        self._ensure_open()
        keys = self._keys_by_service_type.get(service_type, ())
        return [self._resolve(key) for key in keys]

    def try_get_service(self, service_type: type[T]) -> tuple[bool, T | None]:
        """Return ``(found, service)``; ``found`` is false for missing and null services."""
        service = self.get_service(service_type)
        return not is_null_service(service), service

    def has_service(self, service_type: type[T]) -> bool:
        """Return whether ``service_type`` resolves to a service that is not a null service."""
        found, _ = self.try_get_service(service_type)
        return found

    def get_multiple_services(self, service_type: type[T]) -> list[T]:
        """Return the services added with ``add_singleton_multiple_service``."""
        return get_multiple_services(self, service_type)


class ServiceProvider(ServiceResolver):
    """Immutable resolver built from a snapshot of service descriptors.

    Construction and caching are delegated to a strict ``diwire.Container``
    (autoregistration disabled), so only registered services resolve. The
    provider registers itself as ``ServiceProvider``; factories and
    constructors may depend on it.

    Args:
        descriptors: Registrations to build from. Later registrations of a
            service type take precedence for single-service queries.
        options: Container configuration. Defaults to
            ``ServiceProviderOptions()``.

    Notes:
        Factory registrations receive this root provider, including when the
        service is resolved from a ``ServiceScope``.

    Examples:
        .. code-block:: python

            with services.build_service_provider() as provider:
                logger = provider.get_required_service(Logger)

    """

    def __init__(
        self,
        descriptors: Iterable[ServiceDescriptor],
        options: ServiceProviderOptions | None = None,
    ) -> None:
        self._options = options or ServiceProviderOptions()
        self._descriptors = tuple(descriptors)
        self._container = Container(
            lock_mode=self._options.lock_mode,
            autoregister_concrete_types=False,
            autoregister_dependencies=False,
        )
        self._container.add_instance(self, provides=ServiceProvider)
        super().__init__(self._register_descriptors())
        self._root_resolver = self._container.compile()

        logger.info(
            "Built service provider: registration_count=%d service_type_count=%d",
            len(self._descriptors),
            len(self._keys_by_service_type),
        )

    @property
    def descriptors(self) -> tuple[ServiceDescriptor, ...]:
        """Return the registrations this provider was built from."""
        return self._descriptors

    @property
    def options(self) -> ServiceProviderOptions:
        """Return the options this provider was built with."""
        return self._options

    def _register_descriptors(self) -> dict[Any, tuple[Any, ...]]:
        descriptors_by_service_type: dict[Any, list[ServiceDescriptor]] = {}
        for descriptor in self._descriptors:
            descriptors_by_service_type.setdefault(descriptor.service_type, []).append(descriptor)

        keys_by_service_type: dict[Any, tuple[Any, ...]] = {ServiceProvider: (ServiceProvider,)}
        for service_type, descriptors in descriptors_by_service_type.items():
            keys: list[Any] = []
            last_index = len(descriptors) - 1
            for index, descriptor in enumerate(descriptors):
                # Earlier registrations get distinct component keys; the last
                # one owns the plain service type key.
                component = None if index == last_index else Component(index)
                self._register_descriptor(descriptor, component)
                keys.append(
                    service_type if component is None else Annotated[service_type, component],
                )
            keys_by_service_type[service_type] = tuple(keys)
        return keys_by_service_type

    def _register_descriptor(self, descriptor: ServiceDescriptor, component: Component | None) -> None:
        if descriptor.instance is not None:
            self._container.add_instance(
                descriptor.instance,
                provides=descriptor.service_type,
                component=component,
            )
            return

        if descriptor.lifetime is ServiceLifetime.TRANSIENT:
            lifetime = Lifetime.TRANSIENT
        else:
            lifetime = Lifetime.SCOPED
        scope: Any = "from_container"
        if descriptor.lifetime is ServiceLifetime.SCOPED:
            scope = self._options.scoped_scope

        if descriptor.factory is not None:
            self._container.add_factory(
                _build_factory_provider(descriptor.factory),
                provides=descriptor.service_type,
                component=component,
                scope=scope,
                lifetime=lifetime,
            )
            return

        self._container.add_concrete(
            descriptor.implementation_type,
            provides=descriptor.service_type,
            component=component,
            scope=scope,
            lifetime=lifetime,
        )

    def _resolve(self, key: Any) -> Any:
        return self._root_resolver.resolve(key)

    def create_scope(self) -> ServiceScope:
        """Enter the configured scoped scope and return a resolver bound to it."""
        self._ensure_open()
        return ServiceScope(
            self._keys_by_service_type,
            self._root_resolver.enter_scope(self._options.scoped_scope),
        )

    def close(self) -> None:
        """Close the container and run cleanup for resources it created."""
        if self._closed:
            return
        self._closed = True
        self._container.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


class ServiceScope(ServiceResolver):
    """Resolver for one scope, created by ``ServiceProvider.create_scope``.

    Scoped services are cached per scope; singletons are shared with the root
    provider. Close the scope (or use it as a context manager) to release
    scoped resources.
    """

    def __init__(self, keys_by_service_type: Mapping[Any, tuple[Any, ...]], resolver: Any) -> None:
        super().__init__(keys_by_service_type)
        self._resolver = resolver

    def _resolve(self, key: Any) -> Any:
        return self._resolver.resolve(key)

    def close(self) -> None:
        """Close the scope and run cleanup for scoped resources."""
        if self._closed:
            return
        self._closed = True
        self._resolver.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


def _build_factory_provider(factory: ServiceFactory) -> Any:
    def provide(provider: ServiceProvider) -> Any:
        return factory(provider)

    provide.__qualname__ = getattr(factory, "__qualname__", provide.__qualname__)
    return provide
