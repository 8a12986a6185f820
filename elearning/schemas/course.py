"""
Pydantic schemas for the course catalog
"""
from datetime import datetime
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional


class CatalogModel(BaseModel):
    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class CategoryResponse(CatalogModel):
    id: int
    cat_name: str
    prog_lang: str


class ReviewResponse(CatalogModel):
    id: int
    name: str
    rating: float
    description: Optional[str] = Field(None, alias="desc")
    course_id: int = Field(alias="CourseId")


class CourseResponse(CatalogModel):
    """Course with its category, as listed in the catalog"""
    id: int
    title: str
    price: int
    price_in_rupiah: str
    rating: float
    total_enrollment: int
    start_date: datetime
    description: str = Field(alias="desc")
    course_img: Optional[str] = None
    duration_hours: int
    code: str
    category_id: int = Field(alias="CategoryId")
    category: Optional[CategoryResponse] = Field(None, alias="Category")


class CourseDetailResponse(CourseResponse):
    reviews: List[ReviewResponse] = Field(default_factory=list, alias="Reviews")


class CourseListResponse(CatalogModel):
    page: int
    max_page: int
    page_data: int
    total_data: int
    data: List[CourseResponse]
