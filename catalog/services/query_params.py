from __future__ import annotations

from typing import Iterable

from catalog.schemas.listing import LOOKUPS, FilterClause, OrderClause, PageRequest
from catalog.services.query_shaper import ListingConfig, ListingQueryError

LOOKUP_SEP = "__"


def _parse_int(raw) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def parse_filters(params: Iterable[tuple[str, str]], config: ListingConfig) -> list[FilterClause]:
    """Turn ``?title=algebra&price__lte=400`` style pairs into filter clauses.

    Whitelisting happens later, when the clauses are applied; only the lookup
    suffix is checked here.
    """
    reserved = set(config.reserved_params) | {config.page_size_param}
    clauses = []
    for name, value in params:
        if name in reserved:
            continue
        field, op = name, "exact"
        if LOOKUP_SEP in name:
            head, _, suffix = name.rpartition(LOOKUP_SEP)
            if suffix in LOOKUPS:
                field, op = head, suffix
            elif config.strict:
                raise ListingQueryError(name, "unknown lookup")
        clauses.append(FilterClause(field=field, op=op, value=value))
    return clauses


def parse_ordering(raw: str | None) -> list[OrderClause]:
    clauses = []
    for part in str(raw or "").split(","):
        token = part.strip()
        if token.startswith("-"):
            name, direction = token[1:].strip(), "desc"
        else:
            name, direction = token.lstrip("+").strip(), "asc"
        if name:
            clauses.append(OrderClause(field=name, dir=direction))
    return clauses


def parse_page_request(raw_page, raw_size, config: ListingConfig) -> PageRequest:
    page = _parse_int(raw_page)
    if page is None or page < 1:
        page = 1
    size = _parse_int(raw_size)
    if size is None:
        size = config.default_page_size
    size = min(max(size, 1), config.max_page_size)
    return PageRequest(page=page, size=size, max_size=config.max_page_size)
