# opsadmin/shared/utils/pagination.py

from typing import Callable, Type, TypeVar

from fastapi import Query
from fastapi_pagination import Page, Params
from fastapi_pagination.ext.sqlalchemy import apaginate
from sqlalchemy.ext.asyncio import AsyncSession

from opsadmin.application.dtos.response_dto import PaginatedData

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

T = TypeVar("T")


def pagination_params(
        page: int = Query(1, ge=1, description="Page number"),
        page_size: int = Query(
            DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, alias="pageSize", description="Items per page"
        ),
) -> Params:
    return Params(page=page, size=page_size)


async def paginate_query(
        db: AsyncSession,
        query,
        params: Params,
        schema: Type[T],
) -> PaginatedData[T]:
    """
    Run ``query`` through fastapi-pagination and convert the ORM rows
    to ``schema``.
    """
    transformer: Callable = lambda items: [schema.model_validate(item) for item in items]
    page: Page = await apaginate(db, query, params, transformer=transformer)
    return PaginatedData[schema](
        items=list(page.items),
        total=page.total or 0,
        page=page.page or params.page,
        page_size=page.size or params.size,
    )
