"""Tests for building providers and resolving services."""

from __future__ import annotations

import pytest
from diwire import DIWireError, DIWireScopeMismatchError, LockMode

from dacia import (
    DaciaProviderClosedError,
    DaciaServiceNotRegisteredError,
    ServiceCollection,
    ServiceProvider,
    ServiceProviderOptions,
    ServiceResolver,
)
from tests.fakes import (
    ConsoleLogger,
    FileLogger,
    Greeter,
    Logger,
    RequestContext,
    Settings,
)


class TestSingleService:
    def test_last_registration_wins(self, services: ServiceCollection) -> None:
        services.add_singleton(Logger, ConsoleLogger).add_singleton(Logger, FileLogger)

        with services.build_service_provider() as provider:
            assert isinstance(provider.get_service(Logger), FileLogger)

    def test_get_service_returns_none_for_unregistered_type(
        self,
        services: ServiceCollection,
    ) -> None:
        with services.build_service_provider() as provider:
            assert provider.get_service(Settings) is None
            assert provider.try_get_service(Settings) == (False, None)
            assert not provider.has_service(Settings)

    def test_get_required_service_raises_for_unregistered_type(
        self,
        services: ServiceCollection,
    ) -> None:
        with (
            services.build_service_provider() as provider,
            pytest.raises(DaciaServiceNotRegisteredError, match="Settings"),
        ):
            provider.get_required_service(Settings)

    def test_constructor_dependencies_are_injected(self, services: ServiceCollection) -> None:
        services.add_singleton(Logger, ConsoleLogger).add_transient(Greeter)

        with services.build_service_provider() as provider:
            greeter = provider.get_required_service(Greeter)

            assert greeter.logger is provider.get_required_service(Logger)
            assert greeter.greet("ada") == "console: hello ada"

    def test_missing_constructor_dependency_error_propagates(
        self,
        services: ServiceCollection,
    ) -> None:
        services.add_singleton(Greeter)

        with pytest.raises(DIWireError):
            provider = services.build_service_provider()
            provider.get_required_service(Greeter)


class TestMultipleRegistrations:
    def test_get_services_returns_all_in_registration_order(
        self,
        services: ServiceCollection,
    ) -> None:
        services.add_singleton(Logger, ConsoleLogger).add_singleton(Logger, FileLogger)

        with services.build_service_provider() as provider:
            loggers = provider.get_services(Logger)

            assert [type(logger) for logger in loggers] == [ConsoleLogger, FileLogger]
            assert loggers[1] is provider.get_required_service(Logger)

    def test_earlier_registrations_keep_their_lifetime(self, services: ServiceCollection) -> None:
        services.add_singleton(Logger, ConsoleLogger).add_transient(Logger, FileLogger)

        with services.build_service_provider() as provider:
            first = provider.get_services(Logger)
            second = provider.get_services(Logger)

        assert first[0] is second[0]
        assert first[1] is not second[1]

    def test_get_services_for_unregistered_type_is_empty(self, services: ServiceCollection) -> None:
        with services.build_service_provider() as provider:
            assert provider.get_services(Logger) == []


class TestLifetimes:
    def test_singleton_is_shared(self, services: ServiceCollection) -> None:
        services.add_singleton(Logger, ConsoleLogger)

        with services.build_service_provider() as provider:
            assert provider.get_required_service(Logger) is provider.get_required_service(Logger)

    def test_transient_is_new_every_time(self, services: ServiceCollection) -> None:
        services.add_transient(Logger, ConsoleLogger)

        with services.build_service_provider() as provider:
            first = provider.get_required_service(Logger)
            second = provider.get_required_service(Logger)

        assert first is not second

    def test_scoped_is_shared_within_a_scope(self, services: ServiceCollection) -> None:
        services.add_scoped(RequestContext)

        with services.build_service_provider() as provider:
            with provider.create_scope() as scope:
                first = scope.get_required_service(RequestContext)
                second = scope.get_required_service(RequestContext)

            with provider.create_scope() as scope:
                third = scope.get_required_service(RequestContext)

        assert first is second
        assert first is not third

    def test_scoped_is_not_resolvable_from_root(self, services: ServiceCollection) -> None:
        services.add_scoped(RequestContext)

        with (
            services.build_service_provider() as provider,
            pytest.raises(DIWireScopeMismatchError),
        ):
            provider.get_required_service(RequestContext)

    def test_scope_shares_singletons_with_root(self, services: ServiceCollection) -> None:
        services.add_singleton(Logger, ConsoleLogger)

        with services.build_service_provider() as provider, provider.create_scope() as scope:
            assert scope.get_required_service(Logger) is provider.get_required_service(Logger)


class TestFactoriesAndInstances:
    def test_factory_receives_provider(self, services: ServiceCollection) -> None:
        received: list[ServiceProvider] = []

        def build_settings(provider: ServiceProvider) -> Settings:
            received.append(provider)
            return Settings()

        services.add_singleton(Settings, factory=build_settings)

        with services.build_service_provider() as provider:
            settings = provider.get_required_service(Settings)

            assert provider.get_required_service(Settings) is settings
            assert received == [provider]

    def test_factory_can_resolve_other_services(self, services: ServiceCollection) -> None:
        services.add_singleton(Logger, ConsoleLogger).add_transient(
            Greeter,
            factory=lambda provider: Greeter(provider.get_required_service(Logger)),
        )

        with services.build_service_provider() as provider:
            greeter = provider.get_required_service(Greeter)

            assert greeter.logger is provider.get_required_service(Logger)

    def test_instance_is_returned_as_is(self, services: ServiceCollection) -> None:
        settings = Settings()
        services.add_instance(Settings, settings)

        with services.build_service_provider() as provider:
            assert provider.get_required_service(Settings) is settings

    def test_provider_resolves_itself(self, services: ServiceCollection) -> None:
        with services.build_service_provider() as provider:
            assert provider.get_required_service(ServiceProvider) is provider


class TestClose:
    def test_use_after_close_raises(self, services: ServiceCollection) -> None:
        services.add_singleton(Settings)
        provider = services.build_service_provider()

        provider.close()

        with pytest.raises(DaciaProviderClosedError):
            provider.get_service(Settings)
        with pytest.raises(DaciaProviderClosedError):
            provider.create_scope()

    def test_close_is_idempotent(self, services: ServiceCollection) -> None:
        provider = services.build_service_provider()

        provider.close()
        provider.close()

    def test_scope_use_after_close_raises(self, services: ServiceCollection) -> None:
        services.add_scoped(RequestContext)

        with services.build_service_provider() as provider:
            scope = provider.create_scope()
            scope.close()

            with pytest.raises(DaciaProviderClosedError):
                scope.get_service(RequestContext)


def test_options_are_kept_on_provider(services: ServiceCollection) -> None:
    options = ServiceProviderOptions(lock_mode=LockMode.NONE)
    services.add_singleton(Settings)

    with services.build_service_provider(options) as provider:
        assert provider.options is options
        assert isinstance(provider.get_required_service(Settings), Settings)


def test_resolver_base_cannot_be_instantiated() -> None:
    with pytest.raises(TypeError, match="abstract"):
        ServiceResolver({})  # type: ignore[abstract]
