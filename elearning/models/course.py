"""
Course model - catalog entries sold through checkout
"""
from datetime import date, datetime, time

from sqlalchemy import Column, Integer, String, Float, Text, TIMESTAMP, ForeignKey, event, func
from sqlalchemy.orm import relationship, validates

from elearning.database import Base
from elearning.exceptions import BadRequestError
from elearning.models._validators import URL_PATTERN, require, require_float, require_int


def format_rupiah(amount: int) -> str:
    """Format an amount as Indonesian Rupiah, e.g. Rp 1.500.000,00"""
    grouped = f"{amount:,.2f}"
    return "Rp " + grouped.replace(",", "_").replace(".", ",").replace("_", ".")


def generate_course_code(title: str, start_date) -> str:
    """First five characters of the lower-cased title plus the start date as YYYYMMDD"""
    if isinstance(start_date, (datetime, date)):
        date_str = start_date.strftime("%Y%m%d")
    else:
        date_str = "00000000"
    return f"{title.lower()[:5]}_{date_str}"


class Course(Base):
    """
    Courses table - one purchasable course
    """
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    price = Column(Integer, nullable=False)
    rating = Column(Float, nullable=False)
    total_enrollment = Column(Integer, nullable=False, default=0)
    start_date = Column(TIMESTAMP, nullable=False)
    description = Column("desc", Text, nullable=False)
    course_img = Column(String(500))
    duration_hours = Column(Integer, nullable=False)
    code = Column(String(50), nullable=False)
    category_id = Column(
        Integer,
        ForeignKey("categories.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False
    )
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    category = relationship("Category", back_populates="courses")
    order_details = relationship("OrderDetail", back_populates="course")
    reviews = relationship("Review", back_populates="course", cascade="all, delete-orphan")

    @property
    def price_in_rupiah(self) -> str:
        return format_rupiah(self.price or 0)

    @validates("title")
    def validate_title(self, key, value):
        return require(value, "Title is required", "Title cannot be empty")

    @validates("price")
    def validate_price(self, key, value):
        return require_int(value, "Price is required", "Price cannot be empty", "Price must be an integer")

    @validates("rating")
    def validate_rating(self, key, value):
        return require_float(value, "Rating is required", "Rating cannot be empty", "Rating must be a float")

    @validates("total_enrollment")
    def validate_total_enrollment(self, key, value):
        return require_int(
            value,
            "Total enrollment is required",
            "Total enrollment cannot be empty",
            "Total enrollment must be an integer"
        )

    @validates("start_date")
    def validate_start_date(self, key, value):
        require(value, "Start date is required", "Start date cannot be empty")
        if not isinstance(value, (datetime, date)):
            raise BadRequestError("Start date must be a valid date")
        if not isinstance(value, datetime):
            value = datetime.combine(value, time())
        return value

    @validates("description")
    def validate_description(self, key, value):
        return require(value, "Description is required", "Description cannot be empty")

    @validates("course_img")
    def validate_course_img(self, key, value):
        if value is not None and not URL_PATTERN.match(value):
            raise BadRequestError("Course image must be a valid URL")
        return value

    @validates("duration_hours")
    def validate_duration_hours(self, key, value):
        return require_int(
            value,
            "Duration in hours is required",
            "Duration in hours cannot be empty",
            "Duration in hours must be an integer"
        )

    @validates("category_id")
    def validate_category_id(self, key, value):
        return require(value, "Category ID is required", "Category ID cannot be empty")

    def __repr__(self):
        return f"<Course(id={self.id}, title={self.title}, price={self.price})>"


@event.listens_for(Course, "before_insert")
def assign_course_code(mapper, connection, target):
    target.code = generate_course_code(target.title, target.start_date)
