"""Query-string grammar for list endpoints.

    ?filter[is_done]=true          equality (comma list → any of)
    ?sort=-created_at,title        leading "-" = descending
    ?include=tasks                 also include[]=tasks, repeatable
    ?page=2                        1-based

Parameters outside this grammar (e.g. cache busters) are ignored;
malformed ones inside it raise InvalidQuery.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable

from fastapi import Request

from taskboard.errors import InvalidQuery

_FILTER_KEY = re.compile(r"^filter\[([^\[\]]*)\]$")
_PAGE = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class SortKey:
    name: str
    descending: bool = False

    @classmethod
    def parse(cls, token: str) -> "SortKey":
        if token.startswith("-"):
            return cls(token[1:], True)
        return cls(token, False)

    def __str__(self) -> str:
        return f"-{self.name}" if self.descending else self.name


@dataclass(frozen=True)
class ListParams:
    filters: dict[str, tuple[str, ...]] = field(default_factory=dict)
    sorts: tuple[SortKey, ...] = ()
    includes: tuple[str, ...] = ()
    page: int = 1


def _split(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def _parse_page(raw: str) -> int:
    raw = raw.strip()
    if not _PAGE.fullmatch(raw) or int(raw) < 1:
        raise InvalidQuery.for_field("page", "The page must be a positive integer.")
    return int(raw)


def parse_list_params(pairs: Iterable[tuple[str, str]]) -> ListParams:
    """Build ListParams from (key, value) query pairs, preserving order."""
    filters: dict[str, tuple[str, ...]] = {}
    sorts: list[SortKey] = []
    includes: list[str] = []
    page = 1

    for key, value in pairs:
        match = _FILTER_KEY.match(key)
        if match:
            name = match.group(1).strip()
            if not name:
                raise InvalidQuery.for_field("filter", "Filter names may not be empty.")
            values = tuple(_split(value))
            if not values:
                raise InvalidQuery.for_field(
                    f"filter[{name}]", f"The filter[{name}] value may not be empty."
                )
            filters[name] = values
        elif key == "sort":
            for token in _split(value):
                sort = SortKey.parse(token)
                if not sort.name:
                    raise InvalidQuery.for_field("sort", "Sort names may not be empty.")
                if all(s.name != sort.name for s in sorts):
                    sorts.append(sort)
        elif key in ("include", "include[]"):
            for name in _split(value):
                if name not in includes:
                    includes.append(name)
        elif key == "page":
            page = _parse_page(value)
        elif key == "filter":
            raise InvalidQuery.for_field(
                "filter", "Filters must be given as filter[name]=value."
            )

    return ListParams(
        filters=filters,
        sorts=tuple(sorts),
        includes=tuple(includes),
        page=page,
    )


async def list_params(request: Request) -> ListParams:
    """FastAPI dependency — parse the current request's query string."""
    return parse_list_params(request.query_params.multi_items())
