"""Allow-list descriptors and the query runner.

Learn: each resource declares a ResourceQuery — a closed table of what a
client may filter on, sort by and include. ResourceQuery.run() is the whole
pipeline:

  validate → scope to owner → AND filters → order (+ id tie-break)
           → count + slice in one transaction → eager-load includes

Ordering always ends with ``id ASC`` so rows with equal sort keys have a
fixed position; that is what makes page N+1 start exactly where page N
stopped.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Optional, Sequence, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskboard.errors import InvalidQuery
from taskboard.query.params import ListParams, SortKey

T = TypeVar("T")

_TRUE = {"1", "true"}
_FALSE = {"0", "false"}


def parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"`{raw}` is not a boolean")


# ─── Descriptors ─────────────────────────────────────────


@dataclass(frozen=True)
class ExactFilter:
    """``filter[name]=v`` → ``column = v``; ``filter[name]=a,b`` → ``column IN (a, b)``."""

    name: str
    column: Any
    parse: Callable[[str], Any] = str

    def clause(self, raw_values: Sequence[str]):
        try:
            values = [self.parse(raw) for raw in raw_values]
        except ValueError as e:
            raise InvalidQuery.for_field(
                f"filter[{self.name}]", f"Invalid value for filter `{self.name}`: {e}."
            ) from e
        if len(values) == 1:
            return self.column == values[0]
        return self.column.in_(values)


@dataclass(frozen=True)
class Sort:
    name: str
    column: Any

    def order_by(self, descending: bool):
        return self.column.desc() if descending else self.column.asc()


@dataclass(frozen=True)
class Include:
    """A relationship the client may ask to have attached to each row."""

    name: str
    relationship: Any


# ─── Result ──────────────────────────────────────────────


@dataclass
class Page(Generic[T]):
    items: list[T]
    total: int
    page: int
    per_page: int

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total / self.per_page))

    @property
    def first_index(self) -> Optional[int]:
        """1-based position of the first row in the full ordering."""
        if not self.items:
            return None
        return (self.page - 1) * self.per_page + 1

    @property
    def last_index(self) -> Optional[int]:
        if not self.items:
            return None
        return (self.page - 1) * self.per_page + len(self.items)


# ─── Resource table ──────────────────────────────────────


def _not_allowed(kind: str, requested: Sequence[str], allowed: Sequence[str]) -> InvalidQuery:
    if allowed:
        tail = f"Allowed {kind}(s) are `{', '.join(allowed)}`."
    else:
        tail = f"No {kind}s are allowed."
    return InvalidQuery.for_field(
        kind,
        f"Requested {kind}(s) `{', '.join(requested)}` are not allowed. {tail}",
    )


@dataclass(frozen=True)
class ResourceQuery:
    """The allow-list for one resource collection."""

    model: type
    id_column: Any
    owner_column: Any
    filters: tuple[ExactFilter, ...] = ()
    sorts: tuple[Sort, ...] = ()
    includes: tuple[Include, ...] = ()
    default_sort: tuple[SortKey, ...] = (SortKey("created_at", descending=True),)
    _sorts_by_name: dict = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        by_name = {s.name: s for s in self.sorts}
        missing = [k.name for k in self.default_sort if k.name not in by_name]
        if missing:
            raise ValueError(f"default sort keys not in allow-list: {missing}")
        object.__setattr__(self, "_sorts_by_name", by_name)

    # ─── Validation ─────────────────────────────────────

    def validate(self, params: ListParams) -> None:
        """Reject anything outside the allow-list. Never silently ignore."""
        allowed_filters = [f.name for f in self.filters]
        unknown = [name for name in params.filters if name not in allowed_filters]
        if unknown:
            raise _not_allowed("filter", unknown, allowed_filters)

        unknown = [s.name for s in params.sorts if s.name not in self._sorts_by_name]
        if unknown:
            raise _not_allowed("sort", unknown, list(self._sorts_by_name))

        allowed_includes = [i.name for i in self.includes]
        unknown = [name for name in params.includes if name not in allowed_includes]
        if unknown:
            raise _not_allowed("include", unknown, allowed_includes)

    # ─── Statement building ─────────────────────────────

    def where(self, params: ListParams, owner_id: Optional[int]) -> Select:
        """Filtered, unordered, unpaged SELECT of the model."""
        stmt = select(self.model)
        if owner_id is not None:
            stmt = stmt.where(self.owner_column == owner_id)
        for f in self.filters:
            if f.name in params.filters:
                stmt = stmt.where(f.clause(params.filters[f.name]))
        return stmt

    def ordering(self, params: ListParams) -> list:
        keys = params.sorts or self.default_sort
        clauses = [self._sorts_by_name[k.name].order_by(k.descending) for k in keys]
        if all(self._sorts_by_name[k.name].column is not self.id_column for k in keys):
            clauses.append(self.id_column.asc())
        return clauses

    def loaders(self, params: ListParams) -> list:
        return [selectinload(i.relationship) for i in self.includes if i.name in params.includes]

    # ─── Execution ──────────────────────────────────────

    async def run(
        self,
        db: AsyncSession,
        params: ListParams,
        *,
        owner_id: Optional[int],
        per_page: int,
    ) -> Page:
        """Validate, then count and fetch one page.

        Both statements run on the same session (one transaction), built
        from the same filtered SELECT, so the total and the slice describe
        the same row set.
        """
        self.validate(params)
        base = self.where(params, owner_id)

        total = int(await db.scalar(select(func.count()).select_from(base.subquery())) or 0)
        offset = (params.page - 1) * per_page

        # Past the end: empty page. The offset may not fit a database integer.
        if offset >= total:
            return Page(items=[], total=total, page=params.page, per_page=per_page)

        stmt = (
            base.order_by(*self.ordering(params))
            .limit(per_page)
            .offset(offset)
            .options(*self.loaders(params))
        )
        result = await db.execute(stmt)
        return Page(
            items=list(result.scalars().all()),
            total=total,
            page=params.page,
            per_page=per_page,
        )
