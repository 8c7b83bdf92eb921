"""Pagination contract shared by every list operation.

Input is ``{page >= 1, limit >= 1, sort_by, sort_order: asc|desc}``; output is
``{items, total, page, limit, pages = ceil(total / limit)}``. Pages are
1-indexed.
"""

import math
from dataclasses import dataclass, field

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = 10
    sort_by: str = "created_at"
    sort_order: str = "desc"

    def __post_init__(self) -> None:
        errors = {}
        if self.page < 1:
            errors["page"] = ["Page must be at least 1"]
        if self.limit < 1:
            errors["limit"] = ["Limit must be at least 1"]
        if self.sort_order not in ("asc", "desc"):
            errors["sort_order"] = ["Sort order must be 'asc' or 'desc'"]
        if errors:
            raise ValidationError(errors)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def ordering(self) -> str:
        return self.sort_by if self.sort_order == "asc" else f"-{self.sort_by}"


@dataclass(frozen=True)
class Page:
    items: list = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit)

    def to_dict(self, serializer=None) -> dict:
        serialize = serializer or (lambda item: item.to_dict())
        return {
            "items": [serialize(item) for item in self.items],
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "pages": self.pages,
        }


def paginate(aggregate_cls, filters: dict, request: PageRequest, sortable: frozenset) -> Page:
    """Run a filtered, sorted, paged query against an aggregate's repository."""
    if request.sort_by not in sortable:
        raise ValidationError({"sort_by": [f"Cannot sort by '{request.sort_by}'. Allowed: {', '.join(sorted(sortable))}"]})

    query = current_domain.repository_for(aggregate_cls)._dao.query
    if filters:
        query = query.filter(**filters)

    results = query.order_by(request.ordering).offset(request.offset).limit(request.limit).all()
    return Page(items=list(results.items), total=results.total, page=request.page, limit=request.limit)
