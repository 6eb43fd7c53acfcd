"""FastAPI endpoints for the Storefront domain."""

import json
from decimal import Decimal

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AddCartItemRequest,
    AddProductRequest,
    AddVariantRequest,
    AdjustStockRequest,
    CartResponse,
    CheckoutRequest,
    ComboOfferIdResponse,
    CouponIdResponse,
    CouponResponse,
    CouponValidationResponse,
    CreateComboOfferRequest,
    CreateCouponRequest,
    MergeCartRequest,
    OrderResponse,
    OrderSummaryResponse,
    PaymentStatusRequest,
    ProductIdResponse,
    StatusResponse,
    TrackingUpdateRequest,
    TransitionStatusRequest,
    UpdateCartItemRequest,
    UpdateCouponRequest,
    UpdatePricingRequest,
    VariantIdResponse,
    money,
)
from storefront.cart.items import AddCartItem, ClearCart, MergeGuestCart, RemoveCartItem, UpdateCartItemQuantity
from storefront.cart.snapshot import cart_snapshot
from storefront.catalogue.management import (
    AddProduct,
    AddVariant,
    AdjustProductStock,
    CreateComboOffer,
    DeactivateComboOffer,
    DeactivateProduct,
    UpdateProductPricing,
)
from storefront.coupon.engine import get_coupon, list_coupons
from storefront.coupon.management import CreateCoupon, DeactivateCoupon, UpdateCoupon
from storefront.order.checkout import PlaceOrder
from storefront.order.fulfillment import AddTrackingUpdate, RecordPaymentStatus, TransitionOrderStatus
from storefront.order.queries import find_order_by_number, get_order, list_orders

cart_router = APIRouter(prefix="/carts", tags=["carts"])
coupon_router = APIRouter(prefix="/coupons", tags=["coupons"])
order_router = APIRouter(prefix="/orders", tags=["orders"])
product_router = APIRouter(prefix="/products", tags=["products"])
combo_router = APIRouter(prefix="/combo-offers", tags=["combo-offers"])


# --- Cart endpoints ---


@cart_router.get("/{owner_id}", response_model=CartResponse)
async def get_cart(owner_id: str) -> CartResponse:
    return CartResponse.from_snapshot(cart_snapshot(owner_id))


@cart_router.delete("/{owner_id}", response_model=CartResponse)
async def clear_cart(owner_id: str) -> CartResponse:
    snapshot = current_domain.process(ClearCart(owner_id=owner_id), asynchronous=False)
    return CartResponse.from_snapshot(snapshot)


@cart_router.post("/{owner_id}/items", response_model=CartResponse)
async def add_cart_item(owner_id: str, body: AddCartItemRequest) -> CartResponse:
    command = AddCartItem(
        owner_id=owner_id,
        product_id=body.product_id,
        variant_id=body.variant_id,
        combo_offer_id=body.combo_offer_id,
        quantity=body.quantity,
    )
    snapshot = current_domain.process(command, asynchronous=False)
    return CartResponse.from_snapshot(snapshot)


@cart_router.put("/{owner_id}/items/{line_id}", response_model=CartResponse)
async def update_cart_item(owner_id: str, line_id: str, body: UpdateCartItemRequest) -> CartResponse:
    command = UpdateCartItemQuantity(owner_id=owner_id, line_id=line_id, quantity=body.quantity)
    snapshot = current_domain.process(command, asynchronous=False)
    return CartResponse.from_snapshot(snapshot)


@cart_router.delete("/{owner_id}/items/{line_id}", response_model=CartResponse)
async def remove_cart_item(owner_id: str, line_id: str) -> CartResponse:
    snapshot = current_domain.process(RemoveCartItem(owner_id=owner_id, line_id=line_id), asynchronous=False)
    return CartResponse.from_snapshot(snapshot)


@cart_router.post("/{owner_id}/merge", response_model=CartResponse)
async def merge_guest_cart(owner_id: str, body: MergeCartRequest) -> CartResponse:
    command = MergeGuestCart(owner_id=owner_id, guest_owner_id=body.guest_owner_id)
    snapshot = current_domain.process(command, asynchronous=False)
    return CartResponse.from_snapshot(snapshot)


@cart_router.post("/{owner_id}/checkout", status_code=201, response_model=OrderResponse)
async def checkout(owner_id: str, body: CheckoutRequest) -> OrderResponse:
    command = PlaceOrder(
        owner_id=owner_id,
        shipping_address=json.dumps(body.shipping_address.model_dump()),
        billing_address=json.dumps(body.billing_address.model_dump()) if body.billing_address else None,
        payment_method=body.payment_method,
        payment_status=body.payment_status,
        coupon_code=body.coupon_code,
        guest_email=body.guest_email,
        contact_email=body.contact_email,
        notes=body.notes,
    )
    order = current_domain.process(command, asynchronous=False)
    return OrderResponse.from_order(order)


# --- Coupon endpoints ---


@coupon_router.post("", status_code=201, response_model=CouponIdResponse)
async def create_coupon(body: CreateCouponRequest) -> CouponIdResponse:
    command = CreateCoupon(
        code=body.code,
        coupon_type=body.coupon_type,
        amount=body.amount,
        min_cart_total=body.min_cart_total,
        min_quantity=body.min_quantity,
        max_uses=body.max_uses,
        expires_at=body.expires_at,
        description=body.description,
    )
    return CouponIdResponse(coupon_id=current_domain.process(command, asynchronous=False))


@coupon_router.get("", response_model=list[CouponResponse])
async def get_coupons(active_only: bool = False) -> list[CouponResponse]:
    return [CouponResponse.from_coupon(c) for c in list_coupons(active_only=active_only)]


@coupon_router.patch("/{code}", response_model=CouponResponse)
async def update_coupon(code: str, body: UpdateCouponRequest) -> CouponResponse:
    command = UpdateCoupon(code=code, **body.model_dump(exclude_none=True))
    return CouponResponse.from_coupon(current_domain.process(command, asynchronous=False))


@coupon_router.get("/{code}/validate", response_model=CouponValidationResponse)
async def validate_coupon(
    code: str,
    subtotal: Decimal = Query(..., ge=0),
    item_count: int | None = Query(None, ge=0),
) -> CouponValidationResponse:
    coupon = get_coupon(code)
    discount = coupon.evaluate(subtotal, item_count=item_count)
    return CouponValidationResponse(
        code=coupon.code,
        coupon_type=coupon.coupon_type,
        amount=money(coupon.amount),
        description=coupon.description,
        discount=money(discount),
    )


@coupon_router.post("/{code}/deactivate", response_model=StatusResponse)
async def deactivate_coupon(code: str) -> StatusResponse:
    current_domain.process(DeactivateCoupon(code=code), asynchronous=False)
    return StatusResponse()


# --- Order endpoints ---


@order_router.get("", response_model=list[OrderSummaryResponse])
async def get_orders(customer_id: str | None = None, status: str | None = None) -> list[OrderSummaryResponse]:
    return [OrderSummaryResponse.from_summary(s) for s in list_orders(customer_id=customer_id, status=status)]


@order_router.get("/track/{order_number}", response_model=OrderResponse)
async def track_order(order_number: str, email: str | None = None) -> OrderResponse:
    return OrderResponse.from_order(find_order_by_number(order_number, email=email))


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order_detail(order_id: str) -> OrderResponse:
    return OrderResponse.from_order(get_order(order_id))


@order_router.post("/{order_id}/status", response_model=OrderResponse)
async def transition_order_status(order_id: str, body: TransitionStatusRequest) -> OrderResponse:
    command = TransitionOrderStatus(
        order_id=order_id,
        status=body.status,
        tracking_number=body.tracking_number,
        reason=body.reason,
    )
    return OrderResponse.from_order(current_domain.process(command, asynchronous=False))


@order_router.post("/{order_id}/tracking", status_code=201, response_model=OrderResponse)
async def add_tracking_update(order_id: str, body: TrackingUpdateRequest) -> OrderResponse:
    command = AddTrackingUpdate(
        order_id=order_id,
        status=body.status,
        date=body.date,
        location=body.location,
        description=body.description,
    )
    return OrderResponse.from_order(current_domain.process(command, asynchronous=False))


@order_router.post("/{order_id}/payment", response_model=OrderResponse)
async def record_payment_status(order_id: str, body: PaymentStatusRequest) -> OrderResponse:
    command = RecordPaymentStatus(order_id=order_id, payment_status=body.payment_status)
    return OrderResponse.from_order(current_domain.process(command, asynchronous=False))


# --- Catalogue endpoints ---


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def add_product(body: AddProductRequest) -> ProductIdResponse:
    command = AddProduct(
        title=body.title,
        base_price=body.base_price,
        sale_price=body.sale_price,
        sale_starts_at=body.sale_starts_at,
        sale_ends_at=body.sale_ends_at,
        stock=body.stock,
        sku=body.sku,
        image_url=body.image_url,
        allow_backorder=body.allow_backorder,
    )
    return ProductIdResponse(product_id=current_domain.process(command, asynchronous=False))


@product_router.put("/{product_id}/pricing", response_model=StatusResponse)
async def update_product_pricing(product_id: str, body: UpdatePricingRequest) -> StatusResponse:
    command = UpdateProductPricing(
        product_id=product_id,
        base_price=body.base_price,
        sale_price=body.sale_price,
        sale_starts_at=body.sale_starts_at,
        sale_ends_at=body.sale_ends_at,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.put("/{product_id}/stock", response_model=StatusResponse)
async def adjust_product_stock(product_id: str, body: AdjustStockRequest) -> StatusResponse:
    command = AdjustProductStock(product_id=product_id, variant_id=body.variant_id, stock=body.stock)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.post("/{product_id}/variants", status_code=201, response_model=VariantIdResponse)
async def add_variant(product_id: str, body: AddVariantRequest) -> VariantIdResponse:
    command = AddVariant(
        product_id=product_id,
        option_name=body.option_name,
        option_value=body.option_value,
        price=body.price,
        stock=body.stock,
        sku=body.sku,
    )
    return VariantIdResponse(variant_id=current_domain.process(command, asynchronous=False))


@product_router.post("/{product_id}/deactivate", response_model=StatusResponse)
async def deactivate_product(product_id: str) -> StatusResponse:
    current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
    return StatusResponse()


@combo_router.post("", status_code=201, response_model=ComboOfferIdResponse)
async def create_combo_offer(body: CreateComboOfferRequest) -> ComboOfferIdResponse:
    command = CreateComboOffer(
        name=body.name,
        product_ids=json.dumps(body.product_ids),
        combo_price=body.combo_price,
        original_price=body.original_price,
        description=body.description,
        image_url=body.image_url,
        starts_at=body.starts_at,
        ends_at=body.ends_at,
    )
    return ComboOfferIdResponse(combo_offer_id=current_domain.process(command, asynchronous=False))


@combo_router.post("/{combo_offer_id}/deactivate", response_model=StatusResponse)
async def deactivate_combo_offer(combo_offer_id: str) -> StatusResponse:
    current_domain.process(DeactivateComboOffer(combo_offer_id=combo_offer_id), asynchronous=False)
    return StatusResponse()
