# opsadmin/application/dtos/permission_dto.py

"""
Schemas for permissions.

A permission is named uniquely and decomposed into a ``resource`` and
an ``action`` (ex: ``user`` / ``create``).
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from opsadmin.application.dtos.base_dto import CustomBaseModel
from opsadmin.shared.utils.input_validation import InputValidator


def _check_identifier(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip().lower()
    is_valid, error_msg = InputValidator.validate_identifier(v)
    if not is_valid:
        raise ValueError(error_msg)
    return v


class PermissionCreate(CustomBaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Unique permission name.")
    description: Optional[str] = Field(None, max_length=255)
    resource: str = Field(..., description="Resource part, ex: user.")
    action: str = Field(..., description="Action part, ex: create.")

    @field_validator('resource', 'action')
    def validate_parts(cls, v):
        return _check_identifier(v)


class PermissionUpdate(CustomBaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=255)
    resource: Optional[str] = None
    action: Optional[str] = None

    @field_validator('resource', 'action')
    def validate_parts(cls, v):
        return _check_identifier(v)


class PermissionOutput(CustomBaseModel):
    id: int
    name: str
    description: Optional[str] = None
    resource: str
    action: str
    created_at: datetime
    updated_at: Optional[datetime] = None
