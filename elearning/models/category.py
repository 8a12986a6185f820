"""
Category model - groups courses by programming language
"""
from sqlalchemy import Column, Integer, String, TIMESTAMP, func
from sqlalchemy.orm import relationship, validates

from elearning.database import Base
from elearning.models._validators import require


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    cat_name = Column(String(255), nullable=False)
    prog_lang = Column(String(255), nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    courses = relationship("Course", back_populates="category")

    @validates("cat_name")
    def validate_cat_name(self, key, value):
        return require(value, "Category name is required", "Category name cannot be empty")

    @validates("prog_lang")
    def validate_prog_lang(self, key, value):
        return require(value, "Programming language is required", "Programming language cannot be empty")

    def __repr__(self):
        return f"<Category(id={self.id}, name={self.cat_name})>"
