"""Tests for rewriting registrations into indirect form."""

from __future__ import annotations

import pytest

from dacia import (
    DaciaIndirectionError,
    IServiceIndirect,
    ServiceCollection,
    ServiceIndirect,
    ServiceLifetime,
)
from dacia.indirects import is_service_indirect
from tests.fakes import (
    Cache,
    CacheReport,
    ConsoleLogger,
    DoubleHandler,
    FileLogger,
    Greeter,
    Handler,
    Logger,
    MemoryCache,
    Settings,
)


class TestRewrite:
    def test_rewrite_replaces_registration_with_self_and_indirect(
        self,
        services: ServiceCollection,
    ) -> None:
        services.add_transient(Logger, ConsoleLogger).add_service_indirects(Logger)

        (implementation,) = services.find_all(ConsoleLogger)
        (indirect,) = services.find_all(Logger)

        assert implementation.implementation_type is ConsoleLogger
        assert indirect.implementation_type is ServiceIndirect[Logger, ConsoleLogger]
        assert implementation.lifetime is ServiceLifetime.TRANSIENT
        assert indirect.lifetime is ServiceLifetime.TRANSIENT

    def test_every_registration_of_the_type_is_rewritten(self, services: ServiceCollection) -> None:
        services.add_singleton(Logger, ConsoleLogger).add_scoped(Logger, FileLogger)

        services.add_service_indirects(Logger)

        indirect_types = [descriptor.implementation_type for descriptor in services.find_all(Logger)]
        assert indirect_types == [
            ServiceIndirect[Logger, ConsoleLogger],
            ServiceIndirect[Logger, FileLogger],
        ]
        assert services.find_all(FileLogger)[0].lifetime is ServiceLifetime.SCOPED

    def test_second_rewrite_is_a_noop(self, services: ServiceCollection) -> None:
        services.add_singleton(Logger, ConsoleLogger).add_service_indirects(Logger)
        before = list(services)

        services.add_service_indirects(Logger)

        assert list(services) == before

    def test_is_service_indirect_detects_rewritten_registration(
        self,
        services: ServiceCollection,
    ) -> None:
        services.add_singleton(Logger, ConsoleLogger)
        (original,) = services.find_all(Logger)

        services.add_service_indirects(Logger)

        (indirect,) = services.find_all(Logger)
        assert is_service_indirect(indirect, Logger)
        assert not is_service_indirect(original, Logger)
        assert not is_service_indirect(indirect, Settings)

    def test_other_service_types_are_untouched(self, services: ServiceCollection) -> None:
        services.add_singleton(Settings).add_singleton(Logger, ConsoleLogger)
        (settings,) = services.find_all(Settings)

        services.add_service_indirects(Logger)

        assert services.find_all(Settings) == [settings]

    def test_factory_registration_fails_fast_without_changes(
        self,
        services: ServiceCollection,
    ) -> None:
        services.add_singleton(Logger, ConsoleLogger).add_singleton(
            Logger,
            factory=lambda _provider: FileLogger(),
        )
        before = list(services)

        with pytest.raises(DaciaIndirectionError, match="no implementation type"):
            services.add_service_indirects(Logger)

        assert list(services) == before

    def test_instance_registration_is_rejected(self, services: ServiceCollection) -> None:
        services.add_instance(Logger, ConsoleLogger())

        with pytest.raises(DaciaIndirectionError, match="no implementation type"):
            services.add_service_indirects(Logger)

    def test_self_registration_is_rejected(self, services: ServiceCollection) -> None:
        services.add_singleton(Settings)

        with pytest.raises(DaciaIndirectionError, match="service type itself"):
            services.add_service_indirects(Settings)


class TestResolution:
    def test_singleton_wrappers_share_the_same_inner_instance(
        self,
        services: ServiceCollection,
    ) -> None:
        services.add_singleton(Logger, ConsoleLogger).add_service_indirects(Logger)

        with services.build_service_provider() as provider:
            first = provider.get_required_service(Logger)
            second = provider.get_required_service(Logger)
            implementation = provider.get_required_service(ConsoleLogger)

        assert isinstance(first, ServiceIndirect)
        assert isinstance(first, IServiceIndirect[Logger])
        assert first.inner is second.inner
        assert first.inner is implementation

    def test_wrapper_forwards_calls_to_implementation(self, services: ServiceCollection) -> None:
        services.add_singleton(Logger, ConsoleLogger).add_service_indirects(Logger)

        with services.build_service_provider() as provider:
            logger = provider.get_required_service(Logger)
            implementation = provider.get_required_service(ConsoleLogger)

            assert logger.log("started") == implementation.log("started")
            assert implementation.messages == ["started", "started"]
            assert logger.id == implementation.id

    def test_transient_rewrite_keeps_transient_instances(self, services: ServiceCollection) -> None:
        services.add_transient(Logger, ConsoleLogger).add_service_indirects(Logger)

        with services.build_service_provider() as provider:
            first = provider.get_required_service(Logger)
            second = provider.get_required_service(Logger)

        assert first is not second
        assert first.inner is not second.inner

    def test_scoped_rewrite_shares_inner_within_a_scope_only(
        self,
        services: ServiceCollection,
    ) -> None:
        services.add_scoped(Logger, ConsoleLogger).add_service_indirects(Logger)

        with services.build_service_provider() as provider:
            with provider.create_scope() as scope:
                first = scope.get_required_service(Logger)
                second = scope.get_required_service(Logger)
                implementation = scope.get_required_service(ConsoleLogger)

            with provider.create_scope() as other_scope:
                third = other_scope.get_required_service(Logger)

        assert first is second
        assert first.inner is implementation
        assert third.inner is not first.inner

    def test_dependents_receive_the_wrapper(self, services: ServiceCollection) -> None:
        services.add_singleton(Logger, ConsoleLogger).add_singleton(Greeter)
        services.add_service_indirects(Logger)

        with services.build_service_provider() as provider:
            greeter = provider.get_required_service(Greeter)

            assert isinstance(greeter.logger, ServiceIndirect)
            assert greeter.greet("ada") == "console: hello ada"


class TestGeneratedTypes:
    def test_indirect_types_are_cached_per_pair(self) -> None:
        assert ServiceIndirect[Logger, ConsoleLogger] is ServiceIndirect[Logger, ConsoleLogger]
        assert ServiceIndirect[Logger, ConsoleLogger] is not ServiceIndirect[Logger, FileLogger]

    def test_indirect_type_implements_service_indirect_capability(self) -> None:
        indirect_type = ServiceIndirect[Logger, ConsoleLogger]

        assert issubclass(indirect_type, IServiceIndirect[Logger])
        assert indirect_type.service_type is Logger
        assert indirect_type.implementation_type is ConsoleLogger
        assert indirect_type.__name__ == "ServiceIndirect[Logger, ConsoleLogger]"

    def test_indirect_capability_is_abstract(self) -> None:
        with pytest.raises(TypeError, match="abstract"):
            IServiceIndirect[Logger]()  # type: ignore[abstract]

    def test_missing_attribute_raises_attribute_error(self) -> None:
        wrapper = ServiceIndirect[Logger, ConsoleLogger](ConsoleLogger())

        with pytest.raises(AttributeError):
            _ = wrapper.missing_attribute


class TestServiceTypeCapabilities:
    def test_abstract_service_wrapper_is_an_instance_of_the_service(self) -> None:
        cache = MemoryCache()
        cache.values["key"] = "value"

        wrapper = ServiceIndirect[Cache, MemoryCache](cache)

        assert isinstance(wrapper, Cache)
        assert wrapper.get("key") == "value"
        assert len(wrapper) == 1
        assert "key" in wrapper

    def test_callable_service_wrapper_forwards_calls(self) -> None:
        handler = DoubleHandler()

        wrapper = ServiceIndirect[Handler, DoubleHandler](handler)

        assert isinstance(wrapper, Handler)
        assert wrapper(3) == 6
        assert handler.calls == 1
        assert wrapper.describe() == "double after 1 calls"
        assert wrapper.kind == "double"

    def test_class_members_are_written_to_inner(self) -> None:
        handler = DoubleHandler()
        wrapper = ServiceIndirect[Handler, DoubleHandler](handler)

        wrapper.kind = "changed"

        assert handler.kind == "changed"

    def test_wrapper_without_special_methods_is_not_callable(self) -> None:
        wrapper = ServiceIndirect[Logger, ConsoleLogger](ConsoleLogger())

        assert not callable(wrapper)
        assert str(wrapper) == repr(wrapper)

    def test_dependents_dispatching_on_service_type_see_the_wrapper_as_service(
        self,
        services: ServiceCollection,
    ) -> None:
        services.add_singleton(Cache, MemoryCache).add_transient(CacheReport)
        services.add_service_indirects(Cache)

        with services.build_service_provider() as provider:
            report = provider.get_required_service(CacheReport)

            assert isinstance(report.cache, ServiceIndirect)
            assert report.source() == "cache"

    def test_callable_service_resolves_through_the_wrapper(
        self,
        services: ServiceCollection,
    ) -> None:
        services.add_singleton(Handler, DoubleHandler).add_service_indirects(Handler)

        with services.build_service_provider() as provider:
            handler = provider.get_required_service(Handler)

            assert handler(5) == 10
            assert provider.get_required_service(DoubleHandler).calls == 1
