"""Rewrite direct service registrations into indirect (two-hop) registrations.

After ``add_service_indirects(services, Logger)`` a registration
``Logger -> ConsoleLogger`` becomes two registrations with the original
lifetime:

* ``ConsoleLogger -> ConsoleLogger``, so the implementation resolves on its own;
* ``Logger -> ServiceIndirect[Logger, ConsoleLogger]``, a wrapper built from the
  resolved ``ConsoleLogger`` that forwards every call to it.

Wrapper classes are generated once per ``(service type, implementation type)``
pair and cached, so the container sees ordinary concrete classes whose
constructor declares the implementation type as its only dependency.

A generated wrapper is an instance of the service type whenever that type is
a class:

* abstract base classes get the wrapper registered as a virtual subclass;
* other classes become a base of the wrapper, and each of their members is
  replaced by a property reading and writing the same name on ``inner``;
* protocols are left alone and matched structurally.

Special methods (``__call__``, ``__iter__``, ``__enter__`` and so on) defined by
the service or implementation type are forwarded as well.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, ABCMeta, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, ClassVar

from typing_extensions import is_protocol

from dacia.descriptors import ServiceDescriptor, format_service_type
from dacia.exceptions import DaciaIndirectionError

if TYPE_CHECKING:
    from dacia.collection import ServiceCollection

logger = logging.getLogger(__name__)

_generated_types_lock = threading.Lock()
_indirect_service_types: dict[Any, type[IServiceIndirect]] = {}
_indirect_types: dict[tuple[Any, Any], type[ServiceIndirect]] = {}

# Looked up on the type by the interpreter, so ``__getattr__`` never sees them.
_FORWARDED_SPECIAL_METHODS = (
    "__call__",
    "__len__",
    "__bool__",
    "__iter__",
    "__next__",
    "__reversed__",
    "__contains__",
    "__getitem__",
    "__setitem__",
    "__delitem__",
    "__enter__",
    "__exit__",
    "__aenter__",
    "__aexit__",
    "__aiter__",
    "__anext__",
    "__await__",
    "__str__",
)

_WRAPPER_ATTRIBUTES = frozenset({"inner", "_inner", "service_type", "implementation_type"})

# Bookkeeping attributes of ``Generic`` bases stay on the wrapper class.
_TYPING_MODULES = frozenset({"typing", "typing_extensions"})


class IServiceIndirect(ABC):
    """Capability implemented by every indirect wrapper of one service type.

    ``IServiceIndirect[Logger]`` returns the cached capability class for
    ``Logger``.
    """

    service_type: ClassVar[Any] = None

    def __class_getitem__(cls, service_type: Any) -> type[IServiceIndirect]:
        return get_indirect_service_type(service_type)

    @property
    @abstractmethod
    def inner(self) -> Any:
        """Return the wrapped implementation instance."""


class ServiceIndirect(IServiceIndirect):
    """Forward every call to a resolved implementation instance.

    ``ServiceIndirect[Logger, ConsoleLogger]`` returns the cached concrete
    wrapper class for the pair. Attribute reads, method calls and the special
    methods listed in this module go to ``inner``.
    """

    implementation_type: ClassVar[Any] = None

    def __init__(self, inner: Any) -> None:
        object.__setattr__(self, "_inner", inner)

    def __class_getitem__(cls, params: tuple[Any, Any]) -> type[ServiceIndirect]:  # type: ignore[override]
        service_type, implementation_type = params
        return get_indirect_type(service_type, implementation_type)

    @property
    def inner(self) -> Any:
        """Return the wrapped implementation instance."""
        return object.__getattribute__(self, "_inner")

    def __getattr__(self, name: str) -> Any:
        try:
            inner = object.__getattribute__(self, "_inner")
        except AttributeError:
            raise AttributeError(name) from None
        return getattr(inner, name)

    def __repr__(self) -> str:
        return f"{type(self).__qualname__}({self.inner!r})"


def get_indirect_service_type(service_type: Any) -> type[IServiceIndirect]:
    """Return the cached ``IServiceIndirect`` capability class for ``service_type``."""
    with _generated_types_lock:
        indirect_service_type = _indirect_service_types.get(service_type)
        if indirect_service_type is None:
            name = f"IServiceIndirect[{format_service_type(service_type)}]"
            indirect_service_type = type(
                name,
                (IServiceIndirect,),
                {
                    "__module__": __name__,
                    "__qualname__": name,
                    "service_type": service_type,
                },
            )
            _indirect_service_types[service_type] = indirect_service_type
    return indirect_service_type


def get_indirect_type(service_type: Any, implementation_type: Any) -> type[ServiceIndirect]:
    """Return the cached concrete wrapper class for a service/implementation pair.

    Raises:
        DaciaIndirectionError: If ``service_type`` cannot be used as a base of
            the wrapper (for example a final class or a metaclass conflict).

    """
    indirect_service_type = get_indirect_service_type(service_type)
    key = (service_type, implementation_type)
    with _generated_types_lock:
        indirect_type = _indirect_types.get(key)
        if indirect_type is None:
            indirect_type = _build_indirect_type(
                service_type=service_type,
                implementation_type=implementation_type,
                indirect_service_type=indirect_service_type,
            )
            _indirect_types[key] = indirect_type
    return indirect_type


def _build_indirect_type(
    *,
    service_type: Any,
    implementation_type: Any,
    indirect_service_type: type[IServiceIndirect],
) -> type[ServiceIndirect]:
    def __init__(self: ServiceIndirect, inner: Any) -> None:  # noqa: N807
        ServiceIndirect.__init__(self, inner)

    # The container infers the dependency from this annotation.
    __init__.__annotations__ = {"inner": implementation_type, "return": None}

    name = (
        f"ServiceIndirect[{format_service_type(service_type)}, "
        f"{format_service_type(implementation_type)}]"
    )
    __init__.__qualname__ = f"{name}.__init__"

    namespace: dict[str, Any] = {
        "__module__": __name__,
        "__qualname__": name,
        "__init__": __init__,
        "service_type": service_type,
        "implementation_type": implementation_type,
    }

    bases: tuple[type[Any], ...] = (ServiceIndirect, indirect_service_type)
    register_virtual = False
    if isinstance(service_type, type) and not is_protocol(service_type):
        if isinstance(service_type, ABCMeta):
            register_virtual = True
        elif service_type is not object:
            bases = (*bases, service_type)
            for member_name in _member_names(service_type):
                namespace[member_name] = _forward_attribute(member_name)

    for method_name in _FORWARDED_SPECIAL_METHODS:
        if _defines_special_method(service_type, method_name) or _defines_special_method(
            implementation_type,
            method_name,
        ):
            namespace[method_name] = _forward_method(method_name)

    try:
        indirect_type = type(name, bases, namespace)
    except TypeError as error:
        msg = (
            f"Cannot build an indirect wrapper for {format_service_type(service_type)}: "
            f"{error}"
        )
        raise DaciaIndirectionError(msg) from error

    if register_virtual:
        service_type.register(indirect_type)
    return indirect_type


def _member_names(service_type: type[Any]) -> set[str]:
    names: set[str] = set()
    for cls in service_type.__mro__:
        if cls is object or cls.__module__ in _TYPING_MODULES:
            continue
        names.update(
            member_name
            for member_name in vars(cls)
            if not (member_name.startswith("__") and member_name.endswith("__"))
            and member_name not in _WRAPPER_ATTRIBUTES
        )
    return names


def _defines_special_method(candidate: Any, method_name: str) -> bool:
    if not isinstance(candidate, type):
        return False
    # ``getattr`` on a class would also find methods of its metaclass.
    return any(method_name in vars(cls) for cls in candidate.__mro__ if cls is not object)


def _forward_attribute(member_name: str) -> property:
    def fget(self: ServiceIndirect) -> Any:
        return getattr(self.inner, member_name)

    def fset(self: ServiceIndirect, value: Any) -> None:
        setattr(self.inner, member_name, value)

    def fdel(self: ServiceIndirect) -> None:
        delattr(self.inner, member_name)

    return property(fget, fset, fdel, doc=f"Forwarded to ``inner.{member_name}``.")


def _forward_method(method_name: str) -> Callable[..., Any]:
    def forward(self: ServiceIndirect, *args: Any, **kwargs: Any) -> Any:
        return getattr(self.inner, method_name)(*args, **kwargs)

    forward.__name__ = method_name
    return forward


def is_service_indirect(descriptor: ServiceDescriptor, service_type: Any) -> bool:
    """Return whether ``descriptor`` already registers an indirect wrapper of ``service_type``."""
    implementation_type = descriptor.implementation_type
    return (
        implementation_type is not None
        and issubclass(implementation_type, ServiceIndirect)
        and implementation_type.service_type == service_type
    )


def add_service_indirects(services: ServiceCollection, service_type: Any) -> ServiceCollection:
    """Rewrite every registration of ``service_type`` into indirect form.

    Registrations that already use an indirect wrapper for ``service_type``
    are left untouched, so applying the rewrite twice is a no-op the second
    time. All remaining registrations are validated, and their wrapper
    classes built, before any is modified.

    Args:
        services: Collection to rewrite in place.
        service_type: Service type whose registrations are rewritten.

    Returns:
        The same collection for chaining.

    Raises:
        DaciaIndirectionError: If a registration is backed by a factory or an
            instance, registers a type as itself, or its wrapper class cannot
            be built.

    """
    rewrites: list[tuple[ServiceDescriptor, type[Any], type[ServiceIndirect]]] = []
    for descriptor in services.find_all(service_type):
        if is_service_indirect(descriptor, service_type):
            continue

        implementation_type = descriptor.implementation_type
        if implementation_type is None:
            msg = (
                f"Cannot rewrite {descriptor!r} into indirect form: "
                "it has no implementation type to wrap."
            )
            raise DaciaIndirectionError(msg)
        if implementation_type is service_type:
            msg = (
                f"Cannot rewrite {descriptor!r} into indirect form: "
                "the implementation type is the service type itself."
            )
            raise DaciaIndirectionError(msg)
        rewrites.append(
            (descriptor, implementation_type, get_indirect_type(service_type, implementation_type)),
        )

    for descriptor, implementation_type, indirect_type in rewrites:
        services.remove(descriptor)
        services.add(
            ServiceDescriptor.describe_type(
                implementation_type,
                implementation_type,
                lifetime=descriptor.lifetime,
            ),
        )
        services.add(
            ServiceDescriptor.describe_type(
                service_type,
                indirect_type,
                lifetime=descriptor.lifetime,
            ),
        )
        logger.debug(
            "Rewrote %s -> %s into indirect form (%s)",
            format_service_type(service_type),
            format_service_type(implementation_type),
            descriptor.lifetime.value,
        )

    return services
