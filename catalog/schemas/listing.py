from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Literal, Optional, Tuple, get_args

Op = Literal["exact", "icontains", "istartswith", "lte", "gte", "lt", "gt"]
Dir = Literal["asc", "desc"]

LOOKUPS = get_args(Op)

class FilterClause(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    op: Op = "exact"
    value: Any

class OrderClause(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    dir: Dir = "asc"

class PageRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int = Field(default=1, ge=1)
    size: int = Field(default=10, ge=1)
    max_size: int = Field(default=100, ge=1)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size

class PageResult(BaseModel):
    """One page of a shaped collection. Built once per request, never mutated."""

    model_config = ConfigDict(frozen=True)

    items: Tuple[Any, ...] = ()
    total: int = 0
    page: int = 1
    total_pages: int = 0
    has_next: bool = False
    has_previous: bool = False

class ListQuery(BaseModel):
    filters: List[FilterClause] = []
    ordering: List[OrderClause] = []
    page: Any = 1
    perpage: Any = None

class ListEnvelope(BaseModel):
    count: int
    next: Optional[str] = None
    previous: Optional[str] = None
    page: int
    total_pages: int
    results: List[Any] = []
