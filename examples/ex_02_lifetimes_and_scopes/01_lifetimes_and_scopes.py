"""Singleton, scoped, and transient lifetimes.

Singletons are shared by the provider and all of its scopes. Scoped services
are cached per scope. Transient services are built on every request.
"""

from __future__ import annotations

from dacia import ServiceCollection


class Settings:
    pass


class RequestContext:
    pass


class Handler:
    def __init__(self, context: RequestContext) -> None:
        self.context = context


def main() -> None:
    services = ServiceCollection()
    services.add_singleton(Settings).add_scoped(RequestContext).add_transient(Handler)

    with services.build_service_provider() as provider:
        with provider.create_scope() as scope:
            first = scope.get_required_service(Handler)
            second = scope.get_required_service(Handler)

            print(f"same_handler={first is second}")  # => same_handler=False
            print(f"same_context={first.context is second.context}")  # => same_context=True
            settings = scope.get_required_service(Settings)
            print(
                f"shared_settings={settings is provider.get_required_service(Settings)}",
            )  # => shared_settings=True

        with provider.create_scope() as other_scope:
            other = other_scope.get_required_service(RequestContext)
            print(f"new_scope_context={other is not first.context}")  # => new_scope_context=True


if __name__ == "__main__":
    main()
