"""
Checkout and order API endpoints
"""
import time
from datetime import datetime

from fastapi import APIRouter, Body, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, joinedload, selectinload
from starlette.concurrency import run_in_threadpool
from typing import List, Optional
import logging

from elearning.api.dependencies import get_current_user
from elearning.database import get_db
from elearning.exceptions import AppError, BadRequestError, ForbiddenError, NotFoundError, PaymentGatewayError
from elearning.models import Course, Order, OrderDetail, User
from elearning.schemas.order import CheckoutRequest, CheckoutResponse, OrderResponse
from elearning.services.payment_service import PaymentService, get_payment_service, resolve_payment_status
from elearning.utils.cache import cache_service

router = APIRouter(prefix="/orders", tags=["orders"])
logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_METHOD = "Credit Card"


def _order_query(db: Session):
    return db.query(Order).options(
        selectinload(Order.details).joinedload(OrderDetail.course).joinedload(Course.category)
    )


@router.post("/checkout", response_model=CheckoutResponse, status_code=201)
async def checkout(
    payload: Optional[CheckoutRequest] = Body(None),
    course_id_param: Optional[int] = Query(None, alias="courseId"),
    payment_method_param: Optional[str] = Query(None, alias="paymentMethod"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    payment: PaymentService = Depends(get_payment_service)
):
    """
    Buy a single course

    - Creates a pending order and its line item
    - Opens a Midtrans Snap session and returns its token and redirect URL
    - Payment status is settled later by the notification webhook
    """
    payload = payload or CheckoutRequest()
    course_id = payload.course_id or payload.course_id_legacy or course_id_param
    payment_method = payload.payment_method or payment_method_param or DEFAULT_PAYMENT_METHOD

    if not course_id:
        raise BadRequestError("Course ID is required")

    course = db.get(Course, course_id)
    if not course:
        raise NotFoundError("Course not found")

    order = Order(
        order_at=datetime.now(),
        payment_method=payment_method,
        payment_status="pending",
        total_price=course.price,
        user_id=current_user.id
    )
    db.add(order)
    db.flush()

    db.add(OrderDetail(quantity=1, price=course.price, order_id=order.id, course_id=course.id))
    db.commit()
    db.refresh(order)

    gateway_order_id = f"ORDER-{order.id}-{int(time.time() * 1000)}"

    try:
        session = await run_in_threadpool(
            payment.create_session,
            order_id=gateway_order_id,
            amount=course.price,
            name=current_user.full_name,
            email=current_user.email,
            items=[{
                "id": course.id,
                "name": course.title,
                "price": course.price,
                "quantity": 1
            }]
        )
    except Exception as e:
        logger.error(f"Midtrans Error: {str(e)}")
        raise PaymentGatewayError("Failed to create payment transaction")

    order.midtrans_order_id = gateway_order_id
    db.commit()

    logger.info(f"Checkout created: order={order.id}, gateway_order={gateway_order_id}")

    return {
        "message": "Checkout successful",
        "order": {
            "id": order.id,
            "order_at": order.order_at,
            "payment_method": order.payment_method,
            "payment_status": order.payment_status,
            "total_price": order.total_price,
            "course_name": course.title
        },
        "payment": {
            "token": session["token"],
            "redirect_url": session["redirect_url"]
        }
    }


@router.post("/notification")
async def handle_notification(
    request: Request,
    db: Session = Depends(get_db),
    payment: PaymentService = Depends(get_payment_service)
):
    """
    Midtrans webhook - no bearer token, the payload is verified with Midtrans

    Errors are answered here with 500 so the gateway retries the delivery.
    """
    try:
        notification = await request.json()
        status = await run_in_threadpool(payment.verify_notification, notification)
        gateway_order_id = status["order_id"]

        order = _order_query(db).filter(Order.midtrans_order_id == gateway_order_id).first()
        if not order:
            raise NotFoundError(f"Order with Midtrans ID {gateway_order_id} not found")

        payment_status = resolve_payment_status(status["transaction_status"], status["fraud_status"])
        newly_paid = payment_status == "success" and order.payment_status != "success"

        if payment_status:
            order.payment_status = payment_status

        # Enrollment is counted once per order, even if the webhook is redelivered
        if newly_paid:
            for detail in order.details:
                if detail.course:
                    detail.course.total_enrollment = detail.course.total_enrollment + detail.quantity

        db.commit()

        if newly_paid:
            cache_service.clear_course_cache()

        logger.info(f"Notification processed: {gateway_order_id} -> {payment_status}")
        return {"success": True}

    except Exception as e:
        db.rollback()
        logger.error(f"Notification Error: {str(e)}", exc_info=True)
        message = e.message if isinstance(e, AppError) else str(e)
        return JSONResponse(status_code=500, content={"success": False, "message": message})


@router.get("/history", response_model=List[OrderResponse])
async def get_order_history(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """All orders of the authenticated user, newest first"""
    return (
        _order_query(db)
        .filter(Order.user_id == current_user.id)
        .order_by(Order.order_at.desc(), Order.id.desc())
        .all()
    )


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order_status(
    order_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    order = _order_query(db).filter(Order.id == order_id).first()
    if not order:
        raise NotFoundError("Order not found")

    if order.user_id != current_user.id:
        raise ForbiddenError("You don't have permission to view this order")

    return order
