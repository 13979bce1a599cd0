"""Multiple services: gather several implementations of one capability.

Each ``add_singleton_multiple_service`` call registers the implementation as
itself plus a holder keyed by the capability. ``get_multiple_services``
returns the held implementations in registration order.
"""

from __future__ import annotations

from typing import Protocol

from dacia import ServiceCollection


class HealthCheck(Protocol):
    name: str

    def check(self) -> bool: ...


class DatabaseCheck:
    name = "database"

    def check(self) -> bool:
        return True


class QueueCheck:
    name = "queue"

    def check(self) -> bool:
        return False


def add_health_checks(services: ServiceCollection) -> None:
    services.add_singleton_multiple_service(HealthCheck, DatabaseCheck)
    services.add_singleton_multiple_service(HealthCheck, QueueCheck)


def main() -> None:
    services = ServiceCollection().add_multiple_services(add_health_checks)

    with services.build_service_provider() as provider:
        checks = provider.get_multiple_services(HealthCheck)
        report = ", ".join(f"{check.name}={check.check()}" for check in checks)

        print(report)  # => database=True, queue=False
        print(f"capability_registered={provider.has_service(HealthCheck)}")  # => capability_registered=False


if __name__ == "__main__":
    main()
