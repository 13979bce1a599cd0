"""Service indirects: keep the implementation resolvable behind a wrapper.

``add_service_indirects`` rewrites every registration of a service type so the
implementation is registered as itself and the service type resolves to a
generated ``ServiceIndirect`` wrapping it. Every call is forwarded to
the wrapped implementation.
"""

from __future__ import annotations

from typing import Protocol

from dacia import ServiceCollection, ServiceIndirect


class Notifier(Protocol):
    def notify(self, message: str) -> str: ...


class EmailNotifier:
    def notify(self, message: str) -> str:
        return f"email: {message}"


def main() -> None:
    services = ServiceCollection()
    services.add_singleton(Notifier, EmailNotifier).add_service_indirects(Notifier)

    names = [descriptor.implementation_type.__name__ for descriptor in services]
    print(f"registrations={names}")  # => registrations=['EmailNotifier', 'ServiceIndirect[Notifier, EmailNotifier]']

    with services.build_service_provider() as provider:
        notifier = provider.get_required_service(Notifier)
        email = provider.get_required_service(EmailNotifier)

        print(f"wrapped={isinstance(notifier, ServiceIndirect)}")  # => wrapped=True
        print(f"same_inner={notifier.inner is email}")  # => same_inner=True
        print(notifier.notify("deployed"))  # => email: deployed


if __name__ == "__main__":
    main()
