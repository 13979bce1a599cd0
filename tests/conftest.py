"""Shared pytest fixtures for dacia tests."""

from __future__ import annotations

import pytest

from dacia import ServiceCollection


@pytest.fixture()
def services() -> ServiceCollection:
    """Empty service collection."""
    return ServiceCollection()
