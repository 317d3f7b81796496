# tests/test_device_catalog.py
"""Tests for the device type catalog helpers."""

import pytest

from ictdesk.core.errors import DuplicateError, NotFoundError, ValidationError
from ictdesk.services import device_catalog


def test_add_and_list_sorted(db_session) -> None:
    device_catalog.add_device_type(db_session, "Tablet")
    device_catalog.add_device_type(db_session, "  Laptop ")

    names = [d.device_name for d in device_catalog.list_device_types(db_session)]
    assert names == ["Laptop", "Tablet"]


def test_add_duplicate_name(db_session) -> None:
    device_catalog.add_device_type(db_session, "Laptop")
    with pytest.raises(DuplicateError, match="already exists"):
        device_catalog.add_device_type(db_session, "Laptop")


def test_add_blank_name(db_session) -> None:
    with pytest.raises(ValidationError):
        device_catalog.add_device_type(db_session, "   ")


def test_delete(db_session) -> None:
    device_catalog.add_device_type(db_session, "Projector")
    device_catalog.delete_device_type(db_session, "Projector")

    assert device_catalog.list_device_types(db_session) == []
    with pytest.raises(NotFoundError, match="Device not found"):
        device_catalog.delete_device_type(db_session, "Projector")
