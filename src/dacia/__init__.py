from dacia.actions import (
    ServiceAction,
    add_singleton_forward,
    add_singleton_forward_action,
    rerun_service_action,
    run_service_action,
    run_service_actions,
    service_action,
)
from dacia.collection import ServiceCollection
from dacia.descriptors import ServiceDescriptor, ServiceFactory
from dacia.exceptions import (
    DaciaConfigurationError,
    DaciaError,
    DaciaIndirectionError,
    DaciaInvalidDescriptorError,
    DaciaInvalidMarkerError,
    DaciaProviderClosedError,
    DaciaServiceNotRegisteredError,
)
from dacia.indirects import IServiceIndirect, ServiceIndirect, add_service_indirects
from dacia.intermediate import (
    build_intermediate_service_provider,
    get_intermediate_required_service,
    open_intermediate_required_service,
)
from dacia.lifetime import ServiceLifetime
from dacia.markers import is_service_implementation, service_implementation_marker
from dacia.multiple import (
    IMultipleServiceHolder,
    MultipleServiceHolder,
    add_singleton_multiple_service,
    get_multiple_services,
)
from dacia.null_services import NullService, add_singleton_as_type_if_instance_null, is_null_service
from dacia.options import ServiceProviderOptions
from dacia.provider import ServiceProvider, ServiceResolver, ServiceScope

__all__ = [
    "DaciaConfigurationError",
    "DaciaError",
    "DaciaIndirectionError",
    "DaciaInvalidDescriptorError",
    "DaciaInvalidMarkerError",
    "DaciaProviderClosedError",
    "DaciaServiceNotRegisteredError",
    "IMultipleServiceHolder",
    "IServiceIndirect",
    "MultipleServiceHolder",
    "NullService",
    "ServiceAction",
    "ServiceCollection",
    "ServiceDescriptor",
    "ServiceFactory",
    "ServiceIndirect",
    "ServiceLifetime",
    "ServiceProvider",
    "ServiceProviderOptions",
    "ServiceResolver",
    "ServiceScope",
    "add_service_indirects",
    "add_singleton_as_type_if_instance_null",
    "add_singleton_forward",
    "add_singleton_forward_action",
    "add_singleton_multiple_service",
    "build_intermediate_service_provider",
    "get_intermediate_required_service",
    "get_multiple_services",
    "is_null_service",
    "is_service_implementation",
    "open_intermediate_required_service",
    "rerun_service_action",
    "run_service_action",
    "run_service_actions",
    "service_action",
    "service_implementation_marker",
]
