"""Null services: optional collaborators with a do-nothing default.

A ``NullService`` subclass stands for "not configured". Passing one to
``add_singleton_as_type_if_instance_null`` registers its type instead of the
instance, and ``try_get_service`` reports it as missing.
"""

from __future__ import annotations

from dacia import NullService, ServiceCollection


class Metrics:
    def increment(self, name: str) -> str:
        return f"metrics: {name}"


class NullMetrics(NullService, Metrics):
    def increment(self, name: str) -> str:
        return f"skipped: {name}"


def describe(metrics: Metrics) -> str:
    services = ServiceCollection()
    services.add_singleton_as_type_if_instance_null(Metrics, metrics)

    with services.build_service_provider() as provider:
        found, service = provider.try_get_service(Metrics)
        assert service is not None
        return f"found={found} {service.increment('requests')}"


def main() -> None:
    print(describe(Metrics()))  # => found=True metrics: requests
    print(describe(NullMetrics()))  # => found=False skipped: requests


if __name__ == "__main__":
    main()
