# opsadmin/application/dtos/auth_dto.py

"""
Schemas for authentication.
"""

from datetime import datetime

from pydantic import EmailStr, Field

from opsadmin.application.dtos.base_dto import CustomBaseModel
from opsadmin.application.dtos.user_dto import UserOutput


class LoginRequest(CustomBaseModel):
    email: EmailStr = Field(..., description="User email.")
    password: str = Field(..., min_length=1, description="User password.")


class LoginResponse(CustomBaseModel):
    """
    JWT access token and the authenticated user.
    """
    token: str = Field(..., description="JWT access token.")
    expires_at: datetime = Field(..., description="Token expiration time.")
    user: UserOutput
