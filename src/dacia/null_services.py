from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from dacia.descriptors import ServiceDescriptor, format_service_type
from dacia.exceptions import DaciaInvalidDescriptorError

if TYPE_CHECKING:
    from dacia.collection import ServiceCollection

logger = logging.getLogger(__name__)


class NullService:
    """Base class for capability-specific null objects.

    Subclass it next to a capability to provide a do-nothing implementation,
    for example ``class NullCache(NullService, Cache)``. Passing an instance of
    such a class to ``add_singleton_as_type_if_instance_null`` asks the
    container to construct the implementation instead of registering the
    instance.
    """


def is_null_service(service: object) -> bool:
    """Return whether ``service`` is missing or a null-object sentinel."""
    return service is None or isinstance(service, NullService)


def add_singleton_as_type_if_instance_null(
    services: ServiceCollection,
    service_type: Any,
    instance: Any,
    implementation_type: type[Any] | None = None,
) -> ServiceCollection:
    """Register ``instance`` as a singleton, or its type when it is a null service.

    Args:
        services: Collection to register into.
        service_type: Capability type to register.
        instance: Pre-built instance, ``None``, or a ``NullService`` sentinel.
        implementation_type: Type constructed by the container for null
            services. Defaults to ``type(instance)``.

    Returns:
        The same collection for chaining.

    Raises:
        DaciaInvalidDescriptorError: If ``instance`` is ``None`` and no
            ``implementation_type`` is given.

    """
    if not is_null_service(instance):
        return services.add(ServiceDescriptor.describe_instance(service_type, instance))

    if implementation_type is None:
        if instance is None:
            msg = (
                f"Cannot register {format_service_type(service_type)} from a None instance "
                "without an explicit 'implementation_type'."
            )
            raise DaciaInvalidDescriptorError(msg)
        implementation_type = type(instance)

    logger.debug(
        "Null service passed for %s, registering type %s",
        format_service_type(service_type),
        format_service_type(implementation_type),
    )
    return services.add(ServiceDescriptor.describe_type(service_type, implementation_type))
