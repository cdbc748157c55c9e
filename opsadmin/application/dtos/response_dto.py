# opsadmin/application/dtos/response_dto.py

"""
Response envelopes.

Successful responses are wrapped as ``{"bizCode": 0, "message": ..., "data": ...}``.
Paginated payloads carry ``{"items", "total", "page", "pageSize"}``.
"""

from typing import Generic, List, Optional, TypeVar

from pydantic import Field

from opsadmin.application.dtos.base_dto import CustomBaseModel

T = TypeVar("T")

BIZ_CODE_SUCCESS = 0


class ApiResponse(CustomBaseModel, Generic[T]):
    biz_code: int = Field(BIZ_CODE_SUCCESS, description="Business status code, 0 on success.")
    message: str = Field("success", description="Human readable outcome.")
    data: Optional[T] = Field(None, description="Payload.")


class PaginatedData(CustomBaseModel, Generic[T]):
    items: List[T] = Field(default_factory=list)
    total: int = Field(0, ge=0)
    page: int = Field(1, ge=1)
    page_size: int = Field(10, ge=1)


def success(data=None, message: str = "success") -> ApiResponse:
    """Build a success envelope."""
    return ApiResponse(biz_code=BIZ_CODE_SUCCESS, message=message, data=data)
