"""
OrderDetail model - course line items of an order
"""
from sqlalchemy import Column, Integer, TIMESTAMP, ForeignKey, func
from sqlalchemy.orm import relationship, validates

from elearning.database import Base
from elearning.models._validators import require_int


class OrderDetail(Base):
    __tablename__ = "order_details"

    id = Column(Integer, primary_key=True, index=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Integer, nullable=False)
    order_id = Column(
        Integer,
        ForeignKey("orders.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False
    )
    course_id = Column(
        Integer,
        ForeignKey("courses.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False
    )
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    order = relationship("Order", back_populates="details")
    course = relationship("Course", back_populates="order_details")

    @validates("quantity")
    def validate_quantity(self, key, value):
        return require_int(value, "Quantity is required", "Quantity cannot be empty", "Quantity must be an integer")

    @validates("price")
    def validate_price(self, key, value):
        return require_int(value, "Price is required", "Price cannot be empty", "Price must be an integer")

    def __repr__(self):
        return f"<OrderDetail(order_id={self.order_id}, course_id={self.course_id}, qty={self.quantity})>"
