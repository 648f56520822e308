"""List-query pipeline: allow-listed filter, sort, include and paginate.

Learn: every collection endpoint goes through the same two steps.
1. params.parse_list_params() turns the raw query string into ListParams
   (syntax only — it knows nothing about any resource).
2. A ResourceQuery (the per-resource allow-list table) validates those
   params and runs them against the database, returning a Page.

Nothing from the query string ever reaches SQL except through a column
object looked up in an allow-list.
"""

from taskboard.query.params import ListParams, SortKey, list_params, parse_list_params
from taskboard.query.pipeline import (
    ExactFilter,
    Include,
    Page,
    ResourceQuery,
    Sort,
    parse_bool,
)

__all__ = [
    "ExactFilter",
    "Include",
    "ListParams",
    "Page",
    "ResourceQuery",
    "Sort",
    "SortKey",
    "list_params",
    "parse_bool",
    "parse_list_params",
]
