"""Register several implementations of one capability under a queryable collection.

Registering many implementations directly under one service type makes
"the" service of that type ambiguous. Each implementation is instead wrapped in
its own ``MultipleServiceHolder[Implementation]`` registered under the shared
``IMultipleServiceHolder[Service]`` capability, and ``get_multiple_services``
collects the held values in registration order.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from dacia.descriptors import ServiceDescriptor, format_service_type

if TYPE_CHECKING:
    from dacia.collection import ServiceCollection
    from dacia.provider import ServiceResolver

T = TypeVar("T")

_generated_types_lock = threading.Lock()
_holder_service_types: dict[Any, type[IMultipleServiceHolder]] = {}
_holder_types: dict[Any, type[MultipleServiceHolder]] = {}


class IMultipleServiceHolder(ABC):
    """Capability shared by the holders of one multiple service.

    ``IMultipleServiceHolder[Plugin]`` returns the cached capability class for
    ``Plugin``.
    """

    service_type: ClassVar[Any] = None

    def __class_getitem__(cls, service_type: Any) -> type[IMultipleServiceHolder]:
        return get_holder_service_type(service_type)

    @property
    @abstractmethod
    def value(self) -> Any:
        """Return the held implementation instance."""


class MultipleServiceHolder(IMultipleServiceHolder):
    """Hold one resolved implementation of a multiple service.

    ``MultipleServiceHolder[CsvExporter]`` returns the cached concrete holder
    class whose constructor depends on ``CsvExporter``.
    """

    implementation_type: ClassVar[Any] = None

    def __init__(self, value: Any) -> None:
        self._value = value

    def __class_getitem__(cls, implementation_type: Any) -> type[MultipleServiceHolder]:
        return get_holder_type(implementation_type)

    @property
    def value(self) -> Any:
        """Return the held implementation instance."""
        return self._value

    def __repr__(self) -> str:
        return f"{type(self).__qualname__}({self._value!r})"


def get_holder_service_type(service_type: Any) -> type[IMultipleServiceHolder]:
    """Return the cached ``IMultipleServiceHolder`` capability class for ``service_type``."""
    with _generated_types_lock:
        holder_service_type = _holder_service_types.get(service_type)
        if holder_service_type is None:
            name = f"IMultipleServiceHolder[{format_service_type(service_type)}]"
            holder_service_type = type(
                name,
                (IMultipleServiceHolder,),
                {
                    "__module__": __name__,
                    "__qualname__": name,
                    "service_type": service_type,
                },
            )
            _holder_service_types[service_type] = holder_service_type
    return holder_service_type


def get_holder_type(implementation_type: Any) -> type[MultipleServiceHolder]:
    """Return the cached concrete holder class for ``implementation_type``."""
    with _generated_types_lock:
        holder_type = _holder_types.get(implementation_type)
        if holder_type is None:
            holder_type = _build_holder_type(implementation_type)
            _holder_types[implementation_type] = holder_type
    return holder_type


def _build_holder_type(implementation_type: Any) -> type[MultipleServiceHolder]:
    def __init__(self: MultipleServiceHolder, value: Any) -> None:  # noqa: N807
        MultipleServiceHolder.__init__(self, value)

    # The container infers the dependency from this annotation.
    __init__.__annotations__ = {"value": implementation_type, "return": None}

    name = f"MultipleServiceHolder[{format_service_type(implementation_type)}]"
    __init__.__qualname__ = f"{name}.__init__"
    return type(
        name,
        (MultipleServiceHolder,),
        {
            "__module__": __name__,
            "__qualname__": name,
            "__init__": __init__,
            "implementation_type": implementation_type,
        },
    )


def add_singleton_multiple_service(
    services: ServiceCollection,
    service_type: Any,
    implementation_type: type[Any],
) -> ServiceCollection:
    """Add ``implementation_type`` as one of the multiple services of ``service_type``.

    The implementation is registered as a singleton under itself, and a holder
    of it as a singleton under ``IMultipleServiceHolder[service_type]``.
    ``service_type`` itself is not registered.
    """
    services.add(ServiceDescriptor.describe_type(implementation_type))
    services.add(
        ServiceDescriptor.describe_type(
            get_holder_service_type(service_type),
            get_holder_type(implementation_type),
        ),
    )
    return services


def get_multiple_services(resolver: ServiceResolver, service_type: type[T]) -> list[T]:
    """Return every multiple service of ``service_type`` in registration order."""
    holders = resolver.get_services(get_holder_service_type(service_type))
    return [holder.value for holder in holders]
