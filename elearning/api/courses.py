"""
Course catalog API endpoints
"""
import math

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, joinedload, selectinload
from typing import Optional
import logging

from elearning.database import get_db
from elearning.exceptions import BadRequestError, NotFoundError
from elearning.models import Course
from elearning.schemas.course import CourseDetailResponse, CourseListResponse, CourseResponse
from elearning.utils.cache import cache_service

router = APIRouter(prefix="/courses", tags=["courses"])
logger = logging.getLogger(__name__)

# JSON field name -> sortable column
SORTABLE_COLUMNS = {
    "id": Course.id,
    "title": Course.title,
    "price": Course.price,
    "rating": Course.rating,
    "totalEnrollment": Course.total_enrollment,
    "startDate": Course.start_date,
    "durationHours": Course.duration_hours,
    "createdAt": Course.created_at,
}


def _sort_clause(sort: str):
    descending = sort.startswith("-")
    column_name = sort[1:] if descending else sort

    column = SORTABLE_COLUMNS.get(column_name)
    if column is None:
        raise BadRequestError(f"Cannot sort by '{column_name}'")

    return column.desc() if descending else column.asc()


@router.get("", response_model=CourseListResponse)
async def get_all_courses(
    search: Optional[str] = None,
    sort: Optional[str] = None,
    category_id: Optional[int] = Query(None, alias="filter"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """
    List courses with search, sort, category filter and pagination

    - search: case-insensitive match on title
    - sort: column name, prefix with '-' for descending (e.g. -price)
    - filter: category id
    """
    cache_key = cache_service.generate_course_list_key({
        "search": search,
        "sort": sort,
        "filter": category_id,
        "page": page,
        "limit": limit,
    })
    cached = cache_service.get(cache_key)
    if cached:
        return cached

    query = db.query(Course).options(joinedload(Course.category))

    if search:
        query = query.filter(Course.title.ilike(f"%{search}%"))
    if category_id is not None:
        query = query.filter(Course.category_id == category_id)

    total = query.count()

    query = query.order_by(_sort_clause(sort)) if sort else query.order_by(Course.id.asc())
    courses = query.offset(limit * (page - 1)).limit(limit).all()

    response = CourseListResponse(
        page=page,
        max_page=math.ceil(total / limit),
        page_data=len(courses),
        total_data=total,
        data=[CourseResponse.model_validate(course) for course in courses]
    )

    cache_service.set(cache_key, response.model_dump(mode="json", by_alias=True))
    return response


@router.get("/{course_id}", response_model=CourseDetailResponse)
async def get_course_by_id(course_id: int, db: Session = Depends(get_db)):
    """Single course with its category and reviews"""
    course = (
        db.query(Course)
        .options(joinedload(Course.category), selectinload(Course.reviews))
        .filter(Course.id == course_id)
        .first()
    )
    if not course:
        raise NotFoundError("Course not found")

    return course
