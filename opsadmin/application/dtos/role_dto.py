# opsadmin/application/dtos/role_dto.py

"""
Schemas for roles.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from opsadmin.application.dtos.base_dto import CustomBaseModel
from opsadmin.application.dtos.permission_dto import PermissionOutput
from opsadmin.shared.utils.input_validation import InputValidator


def _check_role_name(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = InputValidator.sanitize_name(v)
    is_valid, error_msg = InputValidator.validate_name(v)
    if not is_valid:
        raise ValueError(error_msg)
    return v


class RoleCreate(CustomBaseModel):
    name: str = Field(..., max_length=50, description="Unique role name.")
    description: Optional[str] = Field(None, max_length=255)

    @field_validator('name')
    def validate_name(cls, v):
        return _check_role_name(v)


class RoleUpdate(CustomBaseModel):
    name: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = Field(None, max_length=255)

    @field_validator('name')
    def validate_name(cls, v):
        return _check_role_name(v)


class RoleOutput(CustomBaseModel):
    id: int
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class RoleDetailOutput(RoleOutput):
    """
    Role with its permissions and the number of users holding it.
    """
    permissions: List[PermissionOutput] = Field(default_factory=list)
    user_count: int = Field(0, ge=0)
