# opsadmin/application/dtos/user_dto.py

"""
Schemas for user data.

Pydantic DTOs for validating and serializing users, including
creation, updates and the role association payload.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import EmailStr, Field, field_validator

from opsadmin.application.dtos.base_dto import CustomBaseModel, EntityId
from opsadmin.shared.utils.input_validation import InputValidator

UserStatus = Literal["active", "inactive", "pending"]


def _check_name(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = InputValidator.sanitize_name(v)
    is_valid, error_msg = InputValidator.validate_name(v)
    if not is_valid:
        raise ValueError(error_msg)
    return v


def _check_password(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    is_valid, error_msg = InputValidator.validate_password(v)
    if not is_valid:
        raise ValueError(error_msg)
    return v


class UserBase(CustomBaseModel):
    """
    Attributes shared by every user schema.
    """
    name: str = Field(..., description="Display name, copied into audit records.")
    email: EmailStr = Field(..., description="User email. Must be valid and unique.")
    department: Optional[str] = Field(None, max_length=100, description="Organisational unit.")

    @field_validator('name')
    def validate_name(cls, v):
        return _check_name(v)


class UserCreate(UserBase):
    """
    Schema for creating a new user.
    """
    password: str = Field(..., description="User password.")
    status: UserStatus = Field("active", description="Initial status.")

    @field_validator('password')
    def validate_password_security(cls, v):
        return _check_password(v)


class UserUpdate(CustomBaseModel):
    """
    Schema for administrators updating any user.

    Only the fields that are present are changed.
    """
    name: Optional[str] = Field(None, description="Display name.")
    email: Optional[EmailStr] = Field(None, description="User email. Must be valid and unique.")
    password: Optional[str] = Field(None, description="New password.")
    department: Optional[str] = Field(None, max_length=100)
    status: Optional[UserStatus] = Field(None, description="active / inactive / pending")

    @field_validator('name')
    def validate_name(cls, v):
        return _check_name(v)

    @field_validator('password')
    def validate_password_security(cls, v):
        return _check_password(v)


class RoleBrief(CustomBaseModel):
    id: int
    name: str
    description: Optional[str] = None


class UserOutput(CustomBaseModel):
    """
    User as returned by the API, without sensitive data.
    """
    id: int = Field(..., description="Unique identifier.")
    name: str
    email: str
    department: Optional[str] = None
    status: str
    roles: List[RoleBrief] = Field(default_factory=list, description="Assigned roles.")
    created_at: datetime
    updated_at: Optional[datetime] = None


class UserRolesInput(CustomBaseModel):
    """
    Body of ``POST|DELETE /users/{userId}/roles``.

    An empty list is accepted and changes nothing.
    """
    role_ids: List[EntityId] = Field(..., description="Role IDs to assign or remove.")
