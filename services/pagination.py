"""Translation of client page/size/sort parameters into a bounded page request."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

from app.errors import GeneralError, ResponseCode
from app.schemas import PageableRequest

logger = logging.getLogger(__name__)

DEFAULT_SORT_BY = "createdAt"
DEFAULT_SORT_DIRECTION = "desc"

# transport field name -> ORM attribute
SORTABLE_FIELDS: Dict[str, str] = {
    "id": "id",
    "deviceName": "device_name",
    "location": "location",
    "temperature": "temperature",
    "time": "time",
    "createdAt": "created_at",
}


@dataclass(frozen=True)
class PageRequest:
    page_index: int
    size: int
    sort_by: str
    descending: bool

    @property
    def offset(self) -> int:
        return self.page_index * self.size


def _resolve_sort_field(sort_by: str) -> str:
    if sort_by in SORTABLE_FIELDS:
        return SORTABLE_FIELDS[sort_by]
    if sort_by in SORTABLE_FIELDS.values():
        return sort_by
    raise GeneralError(ResponseCode.BAD_REQUEST.code, f"Invalid sort field: {sort_by}")


def build_page_request(request: PageableRequest, max_size: int) -> PageRequest:
    """Validate pagination input.

    ``page`` is 1-based. Sizes above ``max_size`` are clamped, blank sort
    values fall back to ``createdAt``/``desc`` and any direction other than
    ``asc`` sorts descending.
    """
    page, size = request.page, request.size
    if page < 1:
        raise GeneralError(ResponseCode.BAD_REQUEST.code, "Page minimum is 1")
    if size <= 0:
        raise GeneralError(ResponseCode.BAD_REQUEST.code, "Size minimum is 1")

    if size > max_size:
        logger.info(
            "Requested size exceeds maximum of %s, clamping",
            max_size,
            extra={"size": size},
        )
        size = max_size

    sort_by = (request.sort_by or "").strip() or DEFAULT_SORT_BY
    sort_direction = (request.sort_direction or "").strip() or DEFAULT_SORT_DIRECTION

    page_request = PageRequest(
        page_index=page - 1,
        size=size,
        sort_by=_resolve_sort_field(sort_by),
        descending=sort_direction.lower() != "asc",
    )
    logger.debug(
        "Built page request",
        extra={
            "page": page_request.page_index,
            "size": page_request.size,
            "sort_by": page_request.sort_by,
            "sort_direction": "desc" if page_request.descending else "asc",
        },
    )
    return page_request
