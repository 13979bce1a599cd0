from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any, TypeVar

from dacia.exceptions import DaciaInvalidMarkerError

C = TypeVar("C", bound=type[Any])

SERVICE_IMPLEMENTATION_MARKER_ATTRIBUTE = "__dacia_service_implementation__"


def service_implementation_marker(
    is_service_implementation: bool = True,  # noqa: FBT001, FBT002
) -> Callable[[C], C]:
    """Mark a class as being, or explicitly not being, a service implementation.

    Useful when a service implementation lives outside the usual service
    implementations location, or when an unrelated helper class sits next to
    service implementations and should be excluded by an external scanner.
    The marker is not inherited by subclasses.

    Args:
        is_service_implementation: Marker value stored on the class.

    Raises:
        DaciaInvalidMarkerError: If the decorated object is not a class or is
            already marked.

    Examples:
        .. code-block:: python

            @service_implementation_marker()
            class ConsoleLogger: ...


            @service_implementation_marker(is_service_implementation=False)
            class LoggerFormattingHelpers: ...

    """

    def decorator(cls: C) -> C:
        if not inspect.isclass(cls):
            msg = f"service_implementation_marker() can only decorate classes, got {cls!r}."
            raise DaciaInvalidMarkerError(msg)
        if SERVICE_IMPLEMENTATION_MARKER_ATTRIBUTE in vars(cls):
            msg = f"Class '{cls.__qualname__}' is already marked."
            raise DaciaInvalidMarkerError(msg)

        setattr(cls, SERVICE_IMPLEMENTATION_MARKER_ATTRIBUTE, is_service_implementation)
        return cls

    return decorator


def is_service_implementation(cls: type[Any]) -> bool | None:
    """Return the marker value of ``cls``, or ``None`` when it is not marked."""
    return vars(cls).get(SERVICE_IMPLEMENTATION_MARKER_ATTRIBUTE)
