from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from catalog.core.config import settings
from catalog.db.session import get_db
from catalog.models.course import Course
from catalog.schemas.listing import ListEnvelope, ListQuery, OrderClause, PageResult
from catalog.services.query_params import parse_filters, parse_ordering, parse_page_request
from catalog.services.query_shaper import ListingConfig, ListingQueryError, QueryShaper
from catalog.services.sql_listing import apply_listing, paginate_query

router = APIRouter()

COURSE_FILTER_FIELDS = {
    "title": "str",
    "slug": "str",
    "category": "str",
    "level": "str",
    "price": "decimal",
    "rating": "float",
    "duration_hours": "int",
    "published_on": "date",
}
COURSE_ORDER_FIELDS = frozenset({"title", "price", "rating", "duration_hours", "published_on", "created_at"})


def get_course_listing_config() -> ListingConfig:
    return ListingConfig(
        filter_fields=COURSE_FILTER_FIELDS,
        order_fields=COURSE_ORDER_FIELDS,
        default_ordering=(OrderClause(field="title", dir="asc"),),
        default_page_size=settings.LISTING_DEFAULT_PAGE_SIZE,
        max_page_size=settings.LISTING_MAX_PAGE_SIZE,
        strict=settings.LISTING_STRICT,
        page_size_param=settings.LISTING_PAGE_SIZE_PARAM,
    )


def _bad_query_param(exc: ListingQueryError) -> HTTPException:
    return HTTPException(status_code=400, detail=f'Invalid query parameter "{exc.param}" ({exc.reason})')


def _course_row(c: Course) -> dict:
    return {
        "id": str(c.id),
        "slug": c.slug,
        "title": c.title,
        "category": c.category,
        "level": c.level,
        "price": float(c.price) if c.price is not None else None,
        "rating": c.rating,
        "duration_hours": c.duration_hours,
        "published_on": c.published_on.isoformat() if c.published_on else None,
    }


def _page_link(base_url, page: int | None) -> str | None:
    if page is None:
        return None
    return str(base_url.include_query_params(page=page))


def _envelope(result: PageResult, base_url, response: Response) -> dict:
    next_page = result.page + 1 if result.has_next else None
    # Past the last page, "previous" points at the last real page.
    previous_page = min(result.page - 1, max(result.total_pages, 1)) if result.has_previous else None
    response.headers["X-Total-Count"] = str(result.total)
    return {
        "count": result.total,
        "next": _page_link(base_url, next_page),
        "previous": _page_link(base_url, previous_page),
        "page": result.page,
        "total_pages": result.total_pages,
        "results": [_course_row(c) for c in result.items],
    }


def _list_query_params(lq: ListQuery, config: ListingConfig) -> list[tuple[str, str]]:
    params = []
    for f in lq.filters:
        name = f.field if f.op == "exact" else f"{f.field}__{f.op}"
        value = f.value
        if isinstance(value, bool):
            value = "true" if value else "false"
        params.append((name, "" if value is None else str(value)))
    if lq.ordering:
        params.append(("ordering", ",".join(("-" if o.dir == "desc" else "") + o.field for o in lq.ordering)))
    if lq.perpage is not None:
        params.append((config.page_size_param, str(lq.perpage)))
    return params


@router.get("", response_model=ListEnvelope)
def list_courses(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    config: ListingConfig = Depends(get_course_listing_config),
):
    params = request.query_params
    try:
        shaper = QueryShaper(config)
        filters = parse_filters(params.multi_items(), config)
        ordering = parse_ordering(params.get("ordering"))
        page_request = parse_page_request(params.get("page"), params.get(config.page_size_param), config)
        rows = db.query(Course).filter(Course.is_active == True).all()
        result = shaper.shape(rows, filters, ordering, page_request)
    except ListingQueryError as exc:
        raise _bad_query_param(exc)
    return _envelope(result, request.url, response)


@router.post("/query", response_model=ListEnvelope)
def query_courses(
    lq: ListQuery,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    config: ListingConfig = Depends(get_course_listing_config),
):
    try:
        page_request = parse_page_request(lq.page, lq.perpage, config)
        q = apply_listing(db.query(Course).filter(Course.is_active == True), Course, config, lq.filters, lq.ordering)
        result = paginate_query(q, config, page_request)
    except ListingQueryError as exc:
        raise _bad_query_param(exc)
    # Page links point at the equivalent GET listing.
    base_url = request.url_for("list_courses").replace(query=urlencode(_list_query_params(lq, config)))
    return _envelope(result, base_url, response)
