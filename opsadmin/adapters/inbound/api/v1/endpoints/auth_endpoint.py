# opsadmin/adapters/inbound/api/v1/endpoints/auth_endpoint.py

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from opsadmin.adapters.inbound.api.deps import get_auth_manager, get_current_user, get_logger, get_session
from opsadmin.adapters.outbound.persistence.models import User
from opsadmin.adapters.outbound.security.auth_user_manager import UserAuthManager
from opsadmin.application.dtos.auth_dto import LoginRequest, LoginResponse
from opsadmin.application.dtos.response_dto import ApiResponse, success
from opsadmin.application.dtos.user_dto import UserOutput
from opsadmin.application.use_cases.auth_use_cases import AsyncAuthService

router = APIRouter()


@router.post(
    "/login",
    response_model=ApiResponse[LoginResponse],
    summary="Login - Obtain an access token",
    description="Authenticates by email and password and returns a JWT access token.",
    responses={
        401: {
            "description": "Invalid credentials or inactive account",
            "content": {
                "application/json": {
                    "example": {
                        "detail": "Incorrect email or password",
                        "code": "INVALID_CREDENTIALS",
                        "errors": {}
                    }
                }
            }
        }
    }
)
async def login(
        credentials: LoginRequest,
        db: AsyncSession = Depends(get_session),
        auth_manager: UserAuthManager = Depends(get_auth_manager),
        logger: logging.Logger = Depends(get_logger),
):
    service = AsyncAuthService(db, auth_manager, logger)
    return success(await service.login_user(credentials), message="Login successful")


@router.get(
    "/me",
    response_model=ApiResponse[UserOutput],
    summary="Get My Data - Logged in user data",
    description="Returns the authenticated user data via JWT token.",
)
async def get_my_data(current_user: User = Depends(get_current_user)):
    return success(UserOutput.model_validate(current_user))
