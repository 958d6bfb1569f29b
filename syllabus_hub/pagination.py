import math
from dataclasses import dataclass

from fastapi import Query

MAX_LIMIT = 100


@dataclass
class PageParams:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def page_params(default_limit: int = 20):
    """Build a dependency parsing ?page= and ?limit= with the given default"""
    def dependency(
        page: int = Query(1, ge=1),
        limit: int = Query(default_limit, ge=1, le=MAX_LIMIT)
    ) -> PageParams:
        return PageParams(page=page, limit=limit)
    return dependency


def paginated(items: list, params: PageParams, total: int) -> dict:
    return {
        "items": items,
        "page": params.page,
        "limit": params.limit,
        "total": total,
        "pages": math.ceil(total / params.limit) if total else 0,
    }


def empty_page(params: PageParams) -> dict:
    return paginated([], params, 0)
