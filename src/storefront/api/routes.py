"""FastAPI routes for the Storefront domain: orders, payments, carts, vouchers and stock."""

from fastapi import APIRouter
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AddToCartRequest,
    ChangePriceRequest,
    CaptureRequest,
    CreateOrderRequest,
    CreateOrderResponse,
    CreatePayPalPaymentRequest,
    CreateVoucherRequest,
    ExpiredCountResponse,
    ExpireStaleOrdersRequest,
    IdResponse,
    ModifiedCountResponse,
    OrderListResponse,
    OrderResponse,
    PayPalPaymentResponse,
    RegisterProductRequest,
    RestockRequest,
    StatusResponse,
    UpdateOrderStatusRequest,
)
from storefront.cart.items import AddToCart, RemoveFromCart
from storefront.inventory.management import ChangePrice, RegisterProduct, Restock
from storefront.order.expiry import expire_stale_orders as sweep_stale_orders
from storefront.order.placement import create_order as place_order
from storefront.order.queries import get_order, list_orders_for_user, order_as_dict
from storefront.order.status import update_order_status
from storefront.payment.capture import CaptureHandler
from storefront.payment.dispatch import Redirect, RequiresExternalCapture, retry_dispatch
from storefront.payment.paypal_checkout import create_paypal_payment
from storefront.pricing.management import CreateVoucher


def _create_order_response(order_id: str, outcome) -> CreateOrderResponse:
    if isinstance(outcome, Redirect):
        return CreateOrderResponse(order_id=order_id, pay_url=outcome.url)
    if isinstance(outcome, RequiresExternalCapture):
        return CreateOrderResponse(
            order_id=order_id,
            requires_payment=True,
            message="PayPal order created, awaiting payment",
        )
    return CreateOrderResponse(order_id=order_id, message="Cash on delivery order created")


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post(
    "",
    status_code=201,
    response_model=CreateOrderResponse,
    response_model_exclude_none=True,
)
async def create_order(body: CreateOrderRequest) -> CreateOrderResponse:
    result = place_order(
        user_id=body.user_id,
        line_items=[item.model_dump() for item in body.line_items],
        address_id=body.address_id,
        payment_method=body.payment_method,
        voucher_code=body.voucher_code,
    )
    return _create_order_response(result.order_id, result.outcome)


@order_router.post("/capture", response_model=OrderResponse)
async def capture_payment(body: CaptureRequest) -> OrderResponse:
    """Finalize a PayPal/MoMo payment after the customer approved it."""
    order = CaptureHandler().capture(
        order_id=body.order_id,
        payment_id=body.payment_id,
        payer_id=body.payer_id,
    )
    return OrderResponse(order=order_as_dict(order))


@order_router.post("/maintenance/expire-stale", response_model=ExpiredCountResponse)
async def expire_stale_orders(body: ExpireStaleOrdersRequest) -> ExpiredCountResponse:
    """Reject unpaid online orders past the threshold (called by a scheduler)."""
    expired = sweep_stale_orders(threshold_hours=body.threshold_hours, as_of=body.as_of)
    return ExpiredCountResponse(expired_count=expired)


@order_router.get("/user/{user_id}", response_model=OrderListResponse)
async def list_user_orders(user_id: str) -> OrderListResponse:
    return OrderListResponse(orders=[order_as_dict(order) for order in list_orders_for_user(user_id)])


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order_details(order_id: str) -> OrderResponse:
    return OrderResponse(order=order_as_dict(get_order(order_id)))


@order_router.post(
    "/{order_id}/payment/retry",
    response_model=CreateOrderResponse,
    response_model_exclude_none=True,
)
async def retry_payment(order_id: str) -> CreateOrderResponse:
    """Dispatch an unpaid order to its gateway again."""
    return _create_order_response(order_id, retry_dispatch(order_id))


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin/orders", tags=["admin"])


@admin_router.put("/{order_id}/status", response_model=ModifiedCountResponse)
async def update_status(order_id: str, body: UpdateOrderStatusRequest) -> ModifiedCountResponse:
    modified = update_order_status(order_id, body.order_status)
    return ModifiedCountResponse(modified_count=modified)


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/paypal/create", status_code=201, response_model=PayPalPaymentResponse)
async def create_paypal(body: CreatePayPalPaymentRequest) -> PayPalPaymentResponse:
    checkout = create_paypal_payment(
        amount=body.amount,
        currency=body.currency,
        description=body.description,
        order_id=body.order_id,
    )
    return PayPalPaymentResponse(**checkout.as_dict())


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.post("/{user_id}/items", response_model=StatusResponse)
async def add_cart_item(user_id: str, body: AddToCartRequest) -> StatusResponse:
    command = AddToCart(user_id=user_id, product_id=body.product_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/{user_id}/items/{product_id}", response_model=StatusResponse)
async def remove_cart_item(user_id: str, product_id: str) -> StatusResponse:
    current_domain.process(RemoveFromCart(user_id=user_id, product_id=product_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Voucher Router
# ---------------------------------------------------------------------------
voucher_router = APIRouter(prefix="/vouchers", tags=["vouchers"])


@voucher_router.post("", status_code=201, response_model=IdResponse)
async def create_voucher(body: CreateVoucherRequest) -> IdResponse:
    command = CreateVoucher(
        code=body.code,
        discount_type=body.discount_type,
        value=body.value,
        max_discount=body.max_discount,
        min_order_amount=body.min_order_amount,
        expired_at=body.expired_at,
    )
    code = current_domain.process(command, asynchronous=False)
    return IdResponse(id=code)


# ---------------------------------------------------------------------------
# Stock Router
# ---------------------------------------------------------------------------
stock_router = APIRouter(prefix="/stock", tags=["stock"])


@stock_router.post("", status_code=201, response_model=IdResponse)
async def register_product(body: RegisterProductRequest) -> IdResponse:
    command = RegisterProduct(
        product_id=body.product_id,
        title=body.title,
        price=body.price,
        total_stock=body.total_stock,
    )
    product_id = current_domain.process(command, asynchronous=False)
    return IdResponse(id=product_id)


@stock_router.post("/{product_id}/restock", response_model=StatusResponse)
async def restock_product(product_id: str, body: RestockRequest) -> StatusResponse:
    current_domain.process(Restock(product_id=product_id, quantity=body.quantity), asynchronous=False)
    return StatusResponse()


@stock_router.put("/{product_id}/price", response_model=StatusResponse)
async def change_price(product_id: str, body: ChangePriceRequest) -> StatusResponse:
    current_domain.process(ChangePrice(product_id=product_id, price=body.price), asynchronous=False)
    return StatusResponse()


ALL_ROUTERS = [order_router, admin_router, payment_router, cart_router, voucher_router, stock_router]
