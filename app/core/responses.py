"""
➡️ But : Formats de sortie communs à toutes les routes.

ApiSchema : base des schémas I/O (JSON en camelCase, lecture depuis les objets ORM).

ApiResponse[T] : enveloppe uniforme {success, statusCode, message, data, errors}.

Page[T] : page offset {items, page, limit, total, totalPages}.
"""

import math
from typing import Any, Generic, List, Optional, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiSchema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(ApiSchema, Generic[T]):
    success: bool = True
    status_code: int = 200
    message: str = "OK"
    data: Optional[T] = None
    errors: List[Any] = []


class Page(ApiSchema, Generic[T]):
    items: List[T]
    page: int
    limit: int
    total: int
    total_pages: int


def ok(data: Any = None, message: str = "OK", status_code: int = 200) -> ApiResponse:
    return ApiResponse(status_code=status_code, message=message, data=data)


def make_page(items: Sequence[Any], *, page: int, limit: int, total: int) -> Page:
    return Page(
        items=list(items),
        page=page,
        limit=limit,
        total=total,
        total_pages=math.ceil(total / limit) if limit else 0,
    )
