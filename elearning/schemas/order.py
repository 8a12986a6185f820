"""
Pydantic schemas for checkout and order endpoints
"""
from datetime import datetime
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional

from elearning.schemas.course import CourseResponse


class OrderModel(BaseModel):
    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class CheckoutRequest(OrderModel):
    course_id: Optional[int] = None
    course_id_legacy: Optional[int] = Field(None, alias="CourseId")
    payment_method: Optional[str] = None


class CheckoutOrder(OrderModel):
    id: int
    order_at: datetime
    payment_method: str
    payment_status: str
    total_price: int
    course_name: str


class PaymentSession(OrderModel):
    token: str
    redirect_url: str


class CheckoutResponse(OrderModel):
    message: str
    order: CheckoutOrder
    payment: PaymentSession


class OrderDetailResponse(OrderModel):
    id: int
    quantity: int
    price: int
    order_id: int = Field(alias="OrderId")
    course_id: int = Field(alias="CourseId")
    course: Optional[CourseResponse] = Field(None, alias="Course")


class OrderResponse(OrderModel):
    id: int
    order_at: datetime
    payment_method: str
    payment_status: str
    total_price: int
    user_id: int = Field(alias="UserId")
    midtrans_order_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    details: List[OrderDetailResponse] = Field(default_factory=list, alias="OrderDetails")
