"""
Order API endpoints
"""
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status

from storefront.api.deps import get_dispatcher, get_order_service, require_admin
from storefront.schemas.order import (
    OrderCreate,
    OrderCreatedResponse,
    OrderListResponse,
    OrderPaymentUpdate,
    OrderResponse,
    OrderStatus,
    OrderStatusUpdate,
)
from storefront.services.errors import (
    DuplicateInvoiceError,
    InvalidOrderError,
    InvalidStatusTransitionError,
    OrderNotFoundError,
)
from storefront.services.fulfillment import FulfillmentDispatcher
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def _not_found(e: OrderNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("", response_model=OrderCreatedResponse, status_code=status.HTTP_201_CREATED, summary="Create order")
def create_order(
    order_data: OrderCreate,
    background_tasks: BackgroundTasks,
    service: OrderService = Depends(get_order_service),
    dispatcher: FulfillmentDispatcher = Depends(get_dispatcher)
):
    """
    Create a new order (guest checkout allowed)

    Process:
    1. Look up every product (must be active)
    2. Check stock for each line
    3. Price lines from the catalog; client prices are ignored
    4. Apply shipping fee policy
    5. Save order with a unique invoice number
    6. After the response: stock update, invoice email, WhatsApp confirmation

    - **customer**: name, phone (exactly 8 digits), optional email
    - **shippingAddress**: area, block, street, optional avenue, houseNo, optional notes
    - **items**: list of {product | productId, qty}
    """
    try:
        order = service.create_order(order_data)
    except InvalidOrderError as e:
        # Product missing/inactive or insufficient stock
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except DuplicateInvoiceError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

    dispatcher.dispatch(background_tasks, OrderResponse.model_validate(order))
    return OrderCreatedResponse.model_validate(order)


@router.get(
    "",
    response_model=OrderListResponse,
    summary="Get all orders",
    dependencies=[Depends(require_admin)]
)
def get_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status", description="Filter by status"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: Optional[int] = Query(None, ge=1, description="Orders per page (capped at PAGE_SIZE_MAX)"),
    service: OrderService = Depends(get_order_service)
):
    """Retrieve orders newest first (admin)"""
    return service.list_orders(status=status_filter, page=page, limit=limit)


@router.get(
    "/invoice/{invoice_no}",
    response_model=OrderResponse,
    summary="Get order by invoice number",
    dependencies=[Depends(require_admin)]
)
def get_order_by_invoice(
    invoice_no: str,
    service: OrderService = Depends(get_order_service)
):
    """Retrieve an order by its invoice number (admin)"""
    try:
        return service.get_order_by_invoice(invoice_no)
    except OrderNotFoundError as e:
        raise _not_found(e)


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    summary="Get order by ID",
    dependencies=[Depends(require_admin)]
)
def get_order(
    order_id: int,
    service: OrderService = Depends(get_order_service)
):
    """Retrieve a specific order by ID (admin)"""
    try:
        return service.get_order(order_id)
    except OrderNotFoundError as e:
        raise _not_found(e)


@router.patch(
    "/{order_id}/status",
    response_model=OrderResponse,
    summary="Update order status",
    dependencies=[Depends(require_admin)]
)
def update_order_status(
    order_id: int,
    status_data: OrderStatusUpdate,
    service: OrderService = Depends(get_order_service)
):
    """
    Update order status (admin)

    Allowed moves:
    - pending -> confirmed, processing, cancelled
    - confirmed -> processing, shipped, cancelled
    - processing -> shipped, cancelled
    - shipped -> completed, fulfilled
    """
    try:
        return service.update_order_status(order_id, status_data.status)
    except OrderNotFoundError as e:
        raise _not_found(e)
    except InvalidStatusTransitionError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )


@router.patch(
    "/{order_id}/payment",
    response_model=OrderResponse,
    summary="Update payment details",
    dependencies=[Depends(require_admin)]
)
def update_order_payment(
    order_id: int,
    payment_data: OrderPaymentUpdate,
    service: OrderService = Depends(get_order_service)
):
    """
    Update payment method and/or payment status (admin)

    - **paymentMethod**: e.g. "cash", "knet"
    - **paymentStatus**: e.g. "unpaid", "paid"
    """
    try:
        return service.update_payment(order_id, payment_data)
    except OrderNotFoundError as e:
        raise _not_found(e)
