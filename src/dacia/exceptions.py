class DaciaError(Exception):
    """Represent a base class for all dacia-specific failures.

    Catch this type when you want to handle any dacia error path without
    matching each concrete exception class individually. Errors raised by the
    underlying ``diwire`` container during resolution are not wrapped and
    propagate unchanged.
    """


class DaciaConfigurationError(DaciaError):
    """Signal invalid service configuration during the composition phase.

    Configuration errors are raised at the point of the offending call so that
    composition halts before any resolver is built or used.
    """


class DaciaInvalidDescriptorError(DaciaConfigurationError):
    """Signal a service descriptor that does not describe exactly one provider.

    Raised by ``ServiceDescriptor`` when none or more than one of
    ``implementation_type``, ``factory`` and ``instance`` is given, and by
    ``add_singleton_as_type_if_instance_null`` when no implementation type can
    be determined.

    Typical fix is passing exactly one provider, or passing an explicit
    ``implementation_type`` when the instance may be ``None``.
    """


class DaciaIndirectionError(DaciaConfigurationError):
    """Signal a registration that cannot be rewritten into indirect form.

    Raised by ``add_service_indirects`` for factory- or instance-backed
    registrations (there is no implementation type to wrap) and for
    self-registrations (the wrapper would resolve itself). No registration is
    modified when this error is raised.

    Typical fix is registering the service with a concrete implementation type
    that differs from the service type.
    """


class DaciaInvalidMarkerError(DaciaConfigurationError):
    """Signal invalid use of the service implementation marker.

    Raised when ``service_implementation_marker`` is applied to something that
    is not a class, or more than once to the same class.
    """


class DaciaServiceNotRegisteredError(DaciaConfigurationError):
    """Signal that a required service type has no registration.

    Raised by ``get_required_service`` and the intermediate resolver helpers.

    Typical fix is registering the service before building the provider, or
    using ``get_service`` when the service is optional.
    """


class DaciaProviderClosedError(DaciaError):
    """Signal use of a service provider or scope after it was closed.

    Values resolved before closing stay usable only when neither they nor their
    dependencies own resources released by the provider.
    """
