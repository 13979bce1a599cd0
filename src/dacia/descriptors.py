from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from dacia.exceptions import DaciaInvalidDescriptorError
from dacia.lifetime import ServiceLifetime

if TYPE_CHECKING:
    from typing_extensions import Self

    from dacia.provider import ServiceProvider

ServiceFactory = Callable[["ServiceProvider"], Any]
"""Factory called with the root ``ServiceProvider`` to build a service instance."""


@dataclass(frozen=True, slots=True, eq=False)
class ServiceDescriptor:
    """Describe how one service type is provided.

    A descriptor carries exactly one provider: an implementation type that the
    container constructs, a factory, or a pre-built instance. Descriptors
    compare by identity, so two identical registrations stay distinct entries
    of a ``ServiceCollection``.

    Args:
        service_type: Capability type requested by dependent code.
        lifetime: Instance reuse policy for the service.
        implementation_type: Concrete class constructed by the container.
        factory: Callable receiving the ``ServiceProvider`` and returning the
            service instance.
        instance: Pre-built instance. Instance descriptors are always
            singletons.

    Raises:
        DaciaInvalidDescriptorError: If not exactly one provider is given, if
            ``implementation_type`` is not a class, or if an instance is given
            with a non-singleton lifetime.

    """

    service_type: Any
    lifetime: ServiceLifetime
    implementation_type: type[Any] | None = None
    factory: ServiceFactory | None = None
    instance: Any = None

    def __post_init__(self) -> None:
        providers_count = sum(
            provider is not None
            for provider in (self.implementation_type, self.factory, self.instance)
        )
        if providers_count != 1:
            msg = (
                f"Descriptor for {format_service_type(self.service_type)} must set exactly one of "
                f"'implementation_type', 'factory' or 'instance' (got {providers_count})."
            )
            raise DaciaInvalidDescriptorError(msg)

        if self.implementation_type is not None and not inspect.isclass(self.implementation_type):
            msg = (
                f"Implementation for {format_service_type(self.service_type)} must be a class, "
                f"got {self.implementation_type!r}."
            )
            raise DaciaInvalidDescriptorError(msg)

        if self.factory is not None and not callable(self.factory):
            msg = f"Factory for {format_service_type(self.service_type)} must be callable."
            raise DaciaInvalidDescriptorError(msg)

        if self.instance is not None and self.lifetime is not ServiceLifetime.SINGLETON:
            msg = (
                f"Instance registration for {format_service_type(self.service_type)} must use "
                f"{ServiceLifetime.SINGLETON}, got {self.lifetime}."
            )
            raise DaciaInvalidDescriptorError(msg)

    @classmethod
    def describe_type(
        cls,
        service_type: Any,
        implementation_type: type[Any] | None = None,
        lifetime: ServiceLifetime = ServiceLifetime.SINGLETON,
    ) -> Self:
        """Describe a service constructed by the container.

        ``implementation_type`` defaults to ``service_type`` (self-registration).
        """
        if implementation_type is None:
            implementation_type = service_type
        return cls(
            service_type=service_type,
            lifetime=lifetime,
            implementation_type=implementation_type,
        )

    @classmethod
    def describe_factory(
        cls,
        service_type: Any,
        factory: ServiceFactory,
        lifetime: ServiceLifetime = ServiceLifetime.SINGLETON,
    ) -> Self:
        """Describe a service built by a factory."""
        return cls(service_type=service_type, lifetime=lifetime, factory=factory)

    @classmethod
    def describe_instance(cls, service_type: Any, instance: Any) -> Self:
        """Describe a singleton service backed by a pre-built instance."""
        return cls(
            service_type=service_type,
            lifetime=ServiceLifetime.SINGLETON,
            instance=instance,
        )

    def __repr__(self) -> str:
        if self.implementation_type is not None:
            provider = f"implementation_type={format_service_type(self.implementation_type)}"
        elif self.factory is not None:
            provider = f"factory={getattr(self.factory, '__qualname__', self.factory)!r}"
        else:
            provider = f"instance={self.instance!r}"
        return (
            f"ServiceDescriptor(service_type={format_service_type(self.service_type)}, "
            f"{provider}, lifetime={self.lifetime.value})"
        )


def format_service_type(value: Any) -> str:
    return getattr(value, "__qualname__", None) or repr(value)
