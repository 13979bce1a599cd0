from __future__ import annotations

from typing import Any, cast

import pytest

from dacia import DaciaInvalidMarkerError, is_service_implementation, service_implementation_marker


@service_implementation_marker()
class _MarkedService:
    pass


@service_implementation_marker(is_service_implementation=False)
class _MarkedHelper:
    pass


class _UnmarkedService:
    pass


class _MarkedServiceSubclass(_MarkedService):
    pass


def test_marker_records_value() -> None:
    assert is_service_implementation(_MarkedService) is True
    assert is_service_implementation(_MarkedHelper) is False


def test_unmarked_class_returns_none() -> None:
    assert is_service_implementation(_UnmarkedService) is None


def test_marker_is_not_inherited() -> None:
    assert is_service_implementation(_MarkedServiceSubclass) is None


def test_marking_twice_is_rejected() -> None:
    with pytest.raises(DaciaInvalidMarkerError, match="already marked"):
        service_implementation_marker()(_MarkedService)


def test_marker_rejects_non_class() -> None:
    with pytest.raises(DaciaInvalidMarkerError, match="only decorate classes"):
        service_implementation_marker()(cast("Any", lambda: None))
