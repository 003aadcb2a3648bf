import math
from typing import Any, Generic, List, Optional, TypeVar

from fastapi import Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Query as SAQuery

from app.config.database import get_settings
from app.config.settings import Settings

T = TypeVar("T")


class PageParams(BaseModel):
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def get_page_params(
    page: int = Query(1, ge=1, description="Número de página"),
    limit: Optional[int] = Query(None, ge=1, description="Resultados por página"),
    settings: Settings = Depends(get_settings)
) -> PageParams:
    limit = limit or settings.default_page_size
    return PageParams(page=page, limit=min(limit, settings.max_page_size))


class Page(BaseModel, Generic[T]):
    page: int
    limit: int
    total: int
    totalPages: int = Field(..., description="Total de páginas")
    data: List[T]

    @classmethod
    def build(cls, data: List[Any], total: int, params: PageParams) -> "Page":
        return cls(
            page=params.page,
            limit=params.limit,
            total=total,
            totalPages=math.ceil(total / params.limit) if params.limit else 0,
            data=data
        )


def paginate(query: SAQuery, params: PageParams) -> List[Any]:
    return query.limit(params.limit).offset(params.offset).all()
