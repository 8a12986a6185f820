"""
Order model - one checkout attempt and its payment state
"""
from sqlalchemy import Column, Integer, String, TIMESTAMP, ForeignKey, func
from sqlalchemy.orm import relationship, validates

from elearning.database import Base
from elearning.models._validators import require, require_int


class Order(Base):
    """
    Orders table - payment status is driven by gateway notifications
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_at = Column(TIMESTAMP, nullable=False)
    payment_method = Column(String(100), nullable=False)
    payment_status = Column(String(20), nullable=False, default="pending")
    total_price = Column(Integer, nullable=False)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False,
        index=True
    )
    midtrans_order_id = Column(String(100), nullable=True, index=True)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="orders")
    details = relationship("OrderDetail", back_populates="order", cascade="all, delete-orphan")

    @validates("order_at")
    def validate_order_at(self, key, value):
        return require(value, "Order date is required", "Order date cannot be empty")

    @validates("payment_method")
    def validate_payment_method(self, key, value):
        return require(value, "Payment method is required", "Payment method cannot be empty")

    @validates("payment_status")
    def validate_payment_status(self, key, value):
        return require(value, "Payment status is required", "Payment status cannot be empty")

    @validates("total_price")
    def validate_total_price(self, key, value):
        return require_int(
            value,
            "Total price is required",
            "Total price cannot be empty",
            "Total price must be an integer"
        )

    def __repr__(self):
        return f"<Order(id={self.id}, user_id={self.user_id}, status={self.payment_status})>"
