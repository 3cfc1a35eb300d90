from __future__ import annotations

import pytest
from pydantic import ValidationError

from modules.accounts.dtos import RegisterUserDTO

pytestmark = pytest.mark.unit


def test_password_minimum_length():
    with pytest.raises(ValidationError):
        RegisterUserDTO(name="Eve", email="eve@example.com", password="short")


def test_invalid_email_rejected():
    with pytest.raises(ValidationError):
        RegisterUserDTO(name="Eve", email="not-an-email", password="longenough")


def test_blank_name_rejected():
    with pytest.raises(ValidationError):
        RegisterUserDTO(name="   ", email="eve@example.com", password="longenough")


def test_name_is_stripped():
    dto = RegisterUserDTO(name="  Eve  ", email="eve@example.com", password="longenough")
    assert dto.name == "Eve"
