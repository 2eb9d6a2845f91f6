from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from catalog.data.demo_courses import DEMO_COURSES
from catalog.db.session import SessionLocal
from catalog.models.course import Course

_LOG = logging.getLogger("catalog.seed")

_SYNCED_FIELDS = ("title", "category", "level", "price", "rating", "duration_hours", "published_on", "is_active")


def _normalize(item: dict) -> dict:
    published_on = item.get("published_on")
    return {
        "slug": str(item["slug"]).strip(),
        "title": str(item["title"]).strip(),
        "category": str(item.get("category") or "general").strip(),
        "level": str(item.get("level") or "beginner").strip(),
        "price": Decimal(str(item.get("price") or "0")),
        "rating": float(item["rating"]) if item.get("rating") is not None else None,
        "duration_hours": int(item.get("duration_hours") or 0),
        "published_on": date.fromisoformat(published_on) if published_on else None,
        "is_active": bool(item.get("is_active", True)),
    }


def upsert_courses(db: Session, courses: list[dict]) -> tuple[int, int]:
    created = 0
    updated = 0

    for item in courses:
        values = _normalize(item)
        row = db.query(Course).filter(Course.slug == values["slug"]).first()
        if row is None:
            db.add(Course(**values))
            created += 1
            continue

        changed = False
        for name in _SYNCED_FIELDS:
            if getattr(row, name) != values[name]:
                setattr(row, name, values[name])
                changed = True

        if changed:
            row.updated_at = datetime.now(timezone.utc)
            db.add(row)
            updated += 1

    db.commit()
    return created, updated


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    db = SessionLocal()
    try:
        created, updated = upsert_courses(db, DEMO_COURSES)
        total = db.query(Course).count()
    finally:
        db.close()
    _LOG.info("courses upsert done: created=%s, updated=%s, total=%s", created, updated, total)


if __name__ == "__main__":
    main()
