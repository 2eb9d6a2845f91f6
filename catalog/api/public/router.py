from fastapi import APIRouter
from catalog.api.public import courses

router = APIRouter()
router.include_router(courses.router, prefix="/courses", tags=["Public"])
