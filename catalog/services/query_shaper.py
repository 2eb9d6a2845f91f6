from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable

from catalog.schemas.listing import FilterClause, OrderClause, PageRequest, PageResult

_LOG = logging.getLogger("catalog.listing")

FIELD_KINDS = ("str", "int", "float", "decimal", "date", "datetime", "bool")


class ListingConfigError(ValueError):
    pass


class ListingQueryError(ValueError):
    """Raised in strict mode when a request names a field or lookup it may not use."""

    def __init__(self, param: str, reason: str):
        super().__init__(f'{reason}: "{param}"')
        self.param = param
        self.reason = reason


class _Uncoercible(ValueError):
    pass


@dataclass(frozen=True)
class ListingConfig:
    filter_fields: Mapping[str, str] | None
    order_fields: frozenset[str] | None
    default_ordering: tuple[OrderClause, ...] | None
    default_page_size: int | None
    max_page_size: int = 100
    strict: bool = False
    page_size_param: str = "perpage"
    reserved_params: frozenset[str] = field(default_factory=lambda: frozenset({"ordering", "page"}))


def validate_config(config: ListingConfig) -> None:
    if config.filter_fields is None:
        raise ListingConfigError("filter whitelist is not configured")
    if config.order_fields is None:
        raise ListingConfigError("ordering whitelist is not configured")
    if not config.default_ordering:
        raise ListingConfigError("default ordering is not configured")
    if config.default_page_size is None:
        raise ListingConfigError("default page size is not configured")
    unknown_kinds = sorted(k for k, kind in config.filter_fields.items() if kind not in FIELD_KINDS)
    if unknown_kinds:
        raise ListingConfigError(f"unsupported field type for: {', '.join(unknown_kinds)}")
    for clause in config.default_ordering:
        if clause.field not in config.order_fields:
            raise ListingConfigError(f'default ordering field "{clause.field}" is not in the ordering whitelist')
    if config.max_page_size < 1:
        raise ListingConfigError("max page size must be at least 1")
    if not 1 <= config.default_page_size <= config.max_page_size:
        raise ListingConfigError("default page size must be between 1 and the max page size")


def _coerce_bool(value):
    if isinstance(value, bool):
        return value
    text = str(value or "").strip().lower()
    if text in {"1", "true", "yes", "y", "on"}:
        return True
    if text in {"0", "false", "no", "n", "off"}:
        return False
    raise _Uncoercible("boolean")


def _coerce_number(value, python_type):
    if isinstance(value, bool):
        raise _Uncoercible("number")
    if python_type is int and isinstance(value, float) and not value.is_integer():
        raise _Uncoercible("number")
    if python_type in {int, float} and isinstance(value, (int, float)):
        result = python_type(value)
    elif python_type is Decimal and isinstance(value, (Decimal, int)):
        result = Decimal(value)
    else:
        text = str(value).strip()
        if not text:
            raise _Uncoercible("number")
        normalized = text.replace(",", ".")
        try:
            if python_type is int:
                result = int(normalized)
            elif python_type is float:
                result = float(normalized)
            else:
                result = Decimal(normalized)
        except (ValueError, TypeError, InvalidOperation):
            raise _Uncoercible("number")
    # NaN and infinities have no ordering.
    if python_type is Decimal and not result.is_finite():
        raise _Uncoercible("number")
    if python_type is float and not math.isfinite(result):
        raise _Uncoercible("number")
    return result


def _coerce_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        # YYYY-MM-DD or a full ISO datetime reduced to its date part.
        if "T" in text or " " in text:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        return date.fromisoformat(text)
    except ValueError:
        raise _Uncoercible("date")


def _coerce_datetime(value):
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, datetime.min.time())
    else:
        text = str(value).strip()
        try:
            if "T" not in text and " " not in text and len(text) == 10:
                parsed = datetime.combine(date.fromisoformat(text), datetime.min.time())
            else:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            raise _Uncoercible("datetime")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def coerce_value(kind: str, value):
    """Convert a raw wire or record value to the declared field type.

    Raises ValueError when the value has no sensible reading as that type.
    """
    if value is None:
        raise _Uncoercible("null")
    if kind == "str":
        return value if isinstance(value, str) else str(value)
    if kind == "bool":
        return _coerce_bool(value)
    if kind == "int":
        return _coerce_number(value, int)
    if kind == "float":
        return _coerce_number(value, float)
    if kind == "decimal":
        return _coerce_number(value, Decimal)
    if kind == "date":
        return _coerce_date(value)
    if kind == "datetime":
        return _coerce_datetime(value)
    raise _Uncoercible(kind)


def field_value(record, name: str):
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def resolve_filters(config: ListingConfig, filters: Iterable[FilterClause]) -> list[FilterClause]:
    kept = []
    for clause in filters:
        if clause.field not in config.filter_fields:
            if config.strict:
                raise ListingQueryError(clause.field, "field is not filterable")
            _LOG.debug("dropping filter on non-whitelisted field %s", clause.field)
            continue
        kept.append(clause)
    return kept


def resolve_ordering(config: ListingConfig, ordering: Iterable[OrderClause]) -> list[OrderClause]:
    kept: list[OrderClause] = []
    seen: set[str] = set()
    for clause in ordering:
        if clause.field not in config.order_fields:
            if config.strict:
                raise ListingQueryError(clause.field, "field is not sortable")
            _LOG.debug("dropping ordering on non-whitelisted field %s", clause.field)
            continue
        if clause.field in seen:
            continue
        seen.add(clause.field)
        kept.append(clause)
    return kept or list(config.default_ordering)


def _never(record) -> bool:
    return False


def _compile_clause(clause: FilterClause, kind: str) -> Callable[[Any], bool]:
    name = clause.field

    if clause.op in {"icontains", "istartswith"}:
        if kind != "str":
            return _never
        needle = str(clause.value if clause.value is not None else "").lower()

        def text_match(record) -> bool:
            value = field_value(record, name)
            if not isinstance(value, str):
                return False
            if clause.op == "icontains":
                return needle in value.lower()
            return value.lower().startswith(needle)

        return text_match

    try:
        expected = coerce_value(kind, clause.value)
    except ValueError:
        return _never

    def compare(record) -> bool:
        try:
            value = coerce_value(kind, field_value(record, name))
        except ValueError:
            return False
        try:
            if clause.op == "exact":
                return value == expected
            if clause.op == "lte":
                return value <= expected
            if clause.op == "gte":
                return value >= expected
            if clause.op == "lt":
                return value < expected
            if clause.op == "gt":
                return value > expected
        except (TypeError, ArithmeticError):
            return False
        return False

    return compare


def _sort_key(name: str, kind: str | None):
    def key(record):
        value = field_value(record, name)
        if value is not None and kind is not None:
            try:
                value = coerce_value(kind, value)
            except ValueError:
                value = None
        if value is None:
            return (1, 0)
        return (0, value)

    return key


def build_page_result(items: Sequence, total: int, page_request: PageRequest) -> PageResult:
    total_pages = -(-total // page_request.size) if total else 0
    page = page_request.page
    return PageResult(
        items=tuple(items),
        total=total,
        page=page,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_previous=page > 1,
    )


def clamp_page_request(config: ListingConfig, page_request: PageRequest) -> PageRequest:
    limit = min(page_request.max_size, config.max_page_size)
    if page_request.size <= limit and page_request.max_size == limit:
        return page_request
    return PageRequest(page=page_request.page, size=min(page_request.size, limit), max_size=limit)


class QueryShaper:
    """Filter, order and paginate an in-memory collection for one list endpoint."""

    def __init__(self, config: ListingConfig):
        validate_config(config)
        self.config = config

    def shape(
        self,
        records: Sequence,
        filters: Iterable[FilterClause],
        ordering: Iterable[OrderClause],
        page_request: PageRequest,
    ) -> PageResult:
        predicates = [
            _compile_clause(clause, self.config.filter_fields[clause.field])
            for clause in resolve_filters(self.config, filters)
        ]
        rows = [record for record in records if all(check(record) for check in predicates)]

        for clause in reversed(resolve_ordering(self.config, ordering)):
            kind = self.config.filter_fields.get(clause.field)
            rows.sort(key=_sort_key(clause.field, kind), reverse=clause.dir == "desc")

        page_request = clamp_page_request(self.config, page_request)
        start = page_request.offset
        return build_page_result(rows[start:start + page_request.size], len(rows), page_request)
