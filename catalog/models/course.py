from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, Float, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from catalog.db.session import Base
from catalog.models.common import UUIDMixin, TimestampMixin

class Course(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "courses"
    slug: Mapped[str] = mapped_column(String(120), unique=True, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(80), nullable=False, index=True)
    level: Mapped[str] = mapped_column(String(40), nullable=False, default="beginner")
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    duration_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    published_on: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
