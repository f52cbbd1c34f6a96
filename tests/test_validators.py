from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from argprompt import FieldErrors, StructuralError, validate_with_model


class Service(BaseModel):
    name: str = Field(min_length=2)
    port: int = Field(ge=1, le=65535)
    mode: Literal["dev", "prod"] = "dev"


def test_valid_input_returns_model() -> None:
    result = validate_with_model(Service)({"name": "api", "port": 80})
    assert isinstance(result, Service)
    assert result.port == 80
    assert result.mode == "dev"


def test_invalid_fields_become_field_errors() -> None:
    result = validate_with_model(Service)({"name": "a", "port": 0, "mode": "dev"})
    assert isinstance(result, FieldErrors)
    assert [name for name, _message in result.errors] == ["name", "port"]


def test_missing_field_is_structural() -> None:
    result = validate_with_model(Service)({"name": "api"})
    assert isinstance(result, StructuralError)
    assert "port" in result.message


def test_errors_outside_correctable_fields_are_structural() -> None:
    result = validate_with_model(Service, fields=["name"])({"name": "api", "port": 0})
    assert isinstance(result, StructuralError)
