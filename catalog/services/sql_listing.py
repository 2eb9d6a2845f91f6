from __future__ import annotations

from typing import Iterable

from sqlalchemy import asc, desc, false, inspect
from sqlalchemy.orm import Query

from catalog.schemas.listing import FilterClause, OrderClause, PageRequest, PageResult
from catalog.services.query_shaper import (
    ListingConfig,
    build_page_result,
    clamp_page_request,
    coerce_value,
    resolve_filters,
    resolve_ordering,
    validate_config,
)


def _like_pattern(value, *, prefix_only: bool) -> str:
    text = str(value if value is not None else "")
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"{escaped}%" if prefix_only else f"%{escaped}%"


def _clause_expression(col, clause: FilterClause, kind: str):
    if clause.op in {"icontains", "istartswith"}:
        if kind != "str":
            return false()
        return col.ilike(_like_pattern(clause.value, prefix_only=clause.op == "istartswith"), escape="\\")
    try:
        value = coerce_value(kind, clause.value)
    except ValueError:
        return false()
    if clause.op == "exact":
        return col == value
    if clause.op == "lte":
        return col <= value
    if clause.op == "gte":
        return col >= value
    if clause.op == "lt":
        return col < value
    if clause.op == "gt":
        return col > value
    return false()


def apply_listing(
    q: Query,
    model,
    config: ListingConfig,
    filters: Iterable[FilterClause],
    ordering: Iterable[OrderClause],
) -> Query:
    """Push the filter and order steps of a listing down into the SQL query."""
    validate_config(config)
    for clause in resolve_filters(config, filters):
        col = getattr(model, clause.field, None)
        if col is None:
            q = q.filter(false())
            continue
        q = q.filter(_clause_expression(col, clause, config.filter_fields[clause.field]))
    for clause in resolve_ordering(config, ordering):
        col = getattr(model, clause.field, None)
        if col is None:
            continue
        q = q.order_by(asc(col).nulls_last() if clause.dir == "asc" else desc(col).nulls_first())
    # Primary key last so equal rows come back in the same order on every page.
    for pk_col in inspect(model).primary_key:
        q = q.order_by(pk_col.asc())
    return q


def paginate_query(q: Query, config: ListingConfig, page_request: PageRequest) -> PageResult:
    page_request = clamp_page_request(config, page_request)
    total = q.order_by(None).count()
    if page_request.offset >= total:
        return build_page_result([], total, page_request)
    rows = q.offset(page_request.offset).limit(page_request.size).all()
    return build_page_result(rows, total, page_request)
