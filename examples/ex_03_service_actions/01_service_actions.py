"""Service actions: reusable registration units that run once per collection.

A library exposes ``ServiceAction`` values; applications compose them without
worrying about registering the same services twice.
"""

from __future__ import annotations

from typing import Protocol

from dacia import ServiceAction, ServiceCollection, add_singleton_forward_action, service_action


class Clock(Protocol):
    def now(self) -> str: ...


class FixedClock:
    def now(self) -> str:
        return "2024-01-01T00:00:00"


@service_action(FixedClock)
def add_fixed_clock(services: ServiceCollection) -> None:
    services.add_singleton(FixedClock)


add_clock: ServiceAction[Clock] = add_singleton_forward_action(Clock, FixedClock, add_fixed_clock)


def main() -> None:
    services = ServiceCollection()

    services.run(add_clock).run(add_clock).run(add_fixed_clock)

    print(f"registrations={len(services)}")  # => registrations=2
    print(f"applied={add_fixed_clock.has_run(services)}")  # => applied=True

    with services.build_service_provider() as provider:
        clock = provider.get_required_service(Clock)

        print(f"now={clock.now()}")  # => now=2024-01-01T00:00:00
        print(
            f"forwarded={clock is provider.get_required_service(FixedClock)}",
        )  # => forwarded=True


if __name__ == "__main__":
    main()
