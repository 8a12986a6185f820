"""
Database models package
"""
from elearning.models.user import User
from elearning.models.category import Category
from elearning.models.course import Course
from elearning.models.order import Order
from elearning.models.order_detail import OrderDetail
from elearning.models.review import Review

__all__ = ["User", "Category", "Course", "Order", "OrderDetail", "Review"]
