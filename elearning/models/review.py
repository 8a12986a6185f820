"""
Review model - learner feedback on a course
"""
from sqlalchemy import Column, Integer, String, Float, Text, TIMESTAMP, ForeignKey, func
from sqlalchemy.orm import relationship, validates

from elearning.database import Base
from elearning.models._validators import require, require_float


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    rating = Column(Float, nullable=False)
    description = Column("desc", Text)
    course_id = Column(
        Integer,
        ForeignKey("courses.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False
    )
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    course = relationship("Course", back_populates="reviews")

    @validates("name")
    def validate_name(self, key, value):
        return require(value, "Name is required", "Name cannot be empty")

    @validates("rating")
    def validate_rating(self, key, value):
        return require_float(value, "Rating is required", "Rating cannot be empty", "Rating must be a float")

    def __repr__(self):
        return f"<Review(id={self.id}, course_id={self.course_id}, rating={self.rating})>"
