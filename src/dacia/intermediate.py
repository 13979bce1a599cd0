"""Build temporary providers from a partially configured collection.

Composition code sometimes needs a service (for example, settings) while it is
still registering others. These helpers build a provider from the current
registrations to get it.

A temporary provider owns the singletons it creates. Once it is closed, any
value obtained from it, and the dependencies of that value, may hold released
resources. Keeping such a value past the provider is safe only when nothing in
its dependency graph needs cleanup. Prefer ``get_intermediate_required_service``,
which keeps the provider open exactly as long as the value is in use.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, TypeVar

from dacia.provider import ServiceProvider

if TYPE_CHECKING:
    from dacia.collection import ServiceCollection
    from dacia.options import ServiceProviderOptions

T = TypeVar("T")

logger = logging.getLogger(__name__)


def build_intermediate_service_provider(
    services: ServiceCollection,
    options: ServiceProviderOptions | None = None,
) -> ServiceProvider:
    """Build a provider from the registrations made so far.

    The collection stays usable; later registrations do not affect the
    returned provider. The caller owns the provider and must close it.
    """
    logger.debug("Building intermediate service provider: registration_count=%d", len(services))
    return ServiceProvider(services, options)


def open_intermediate_required_service(
    services: ServiceCollection,
    service_type: type[T],
    options: ServiceProviderOptions | None = None,
) -> tuple[ServiceProvider, T]:
    """Resolve ``service_type`` from a new intermediate provider.

    Returns:
        The provider and the service. The caller controls the provider's
        lifetime and must close it once the service is no longer used.

    Raises:
        DaciaServiceNotRegisteredError: If ``service_type`` is not registered.

    """
    provider = build_intermediate_service_provider(services, options)
    try:
        service = provider.get_required_service(service_type)
    except BaseException:
        provider.close()
        raise
    return provider, service


@contextmanager
def get_intermediate_required_service(
    services: ServiceCollection,
    service_type: type[T],
    options: ServiceProviderOptions | None = None,
) -> Iterator[T]:
    """Resolve ``service_type`` and keep its intermediate provider open while in use.

    Raises:
        DaciaServiceNotRegisteredError: If ``service_type`` is not registered.

    Examples:
        .. code-block:: python

            with services.get_intermediate_required_service(Settings) as settings:
                services.add_instance(Endpoint, Endpoint(settings.url))

    """
    provider, service = open_intermediate_required_service(services, service_type, options)
    with provider:
        yield service
