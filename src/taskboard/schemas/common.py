"""Response envelopes shared by every resource.

- DataResponse: ``{"data": ...}`` around a single resource
- Paginated: ``{"data": [...], "links": {...}, "meta": {...}}`` for lists
- UTCDateTime: timestamps always leave the API as UTC
"""

from datetime import datetime, timezone
from typing import Annotated, Generic, Optional, TypeVar

from pydantic import AfterValidator, BaseModel, Field
from starlette.datastructures import URL

from taskboard.query import Page

T = TypeVar("T")


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they were written as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UTCDateTime = Annotated[datetime, AfterValidator(_as_utc)]


class DataResponse(BaseModel, Generic[T]):
    data: T


class PageLinks(BaseModel):
    first: str
    last: str
    prev: Optional[str] = None
    next: Optional[str] = None


class PageMeta(BaseModel):
    current_page: int
    from_: Optional[int] = Field(None, alias="from")
    to: Optional[int] = None
    last_page: int
    per_page: int
    total: int
    path: str

    model_config = {"populate_by_name": True}


class Paginated(BaseModel, Generic[T]):
    data: list[T]
    links: PageLinks
    meta: PageMeta

    @classmethod
    def build(cls, page: Page, items: list, url: URL) -> "Paginated":
        """Wrap one page of serialized items with navigation for ``url``.

        Links keep the caller's filter/sort/include parameters and only
        swap the page number.
        """
        def link(n: int) -> str:
            return str(url.include_query_params(page=n))

        return cls(
            data=items,
            links=PageLinks(
                first=link(1),
                last=link(page.last_page),
                prev=link(page.page - 1) if page.page > 1 else None,
                next=link(page.page + 1) if page.page < page.last_page else None,
            ),
            meta=PageMeta(
                current_page=page.page,
                from_=page.first_index,
                to=page.last_index,
                last_page=page.last_page,
                per_page=page.per_page,
                total=page.total,
                path=str(url.replace(query="")),
            ),
        )
