"""Pydantic request/response schemas for the Storefront API.

Money leaves the API as strings with two decimal places so clients never
see a binary float.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

# --- Shared ---


class StatusResponse(BaseModel):
    status: str = "ok"


def money(value) -> str | None:
    return None if value is None else f"{value:.2f}"


# --- Catalogue Request Schemas ---


class AddProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "title": "Waterproof Dog Jacket",
                    "sku": "DOG-JKT-01",
                    "base_price": "49.99",
                    "sale_price": "39.99",
                    "stock": 25,
                }
            ]
        }
    }

    title: str = Field(..., max_length=255)
    base_price: Decimal = Field(..., ge=0)
    sale_price: Decimal | None = Field(None, ge=0)
    sale_starts_at: datetime | None = None
    sale_ends_at: datetime | None = None
    stock: int = Field(0, ge=0)
    sku: str | None = Field(None, max_length=50)
    image_url: str | None = Field(None, max_length=1024)
    allow_backorder: bool = False


class UpdatePricingRequest(BaseModel):
    base_price: Decimal = Field(..., ge=0)
    sale_price: Decimal | None = Field(None, ge=0)
    sale_starts_at: datetime | None = None
    sale_ends_at: datetime | None = None


class AdjustStockRequest(BaseModel):
    stock: int = Field(..., ge=0)
    variant_id: str | None = None


class AddVariantRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [{"option_name": "Size", "option_value": "XL", "price": "54.99", "stock": 5}]
        }
    }

    option_name: str = Field(..., max_length=50)
    option_value: str = Field(..., max_length=100)
    price: Decimal | None = Field(None, ge=0)
    stock: int | None = Field(None, ge=0)
    sku: str | None = Field(None, max_length=50)


class CreateComboOfferRequest(BaseModel):
    name: str = Field(..., max_length=255)
    product_ids: list[str] = Field(..., min_length=1)
    combo_price: Decimal = Field(..., ge=0)
    original_price: Decimal | None = Field(None, ge=0)
    description: str | None = None
    image_url: str | None = Field(None, max_length=1024)
    starts_at: datetime | None = None
    ends_at: datetime | None = None


class ProductIdResponse(BaseModel):
    product_id: str


class VariantIdResponse(BaseModel):
    variant_id: str


class ComboOfferIdResponse(BaseModel):
    combo_offer_id: str


# --- Cart Schemas ---


class AddCartItemRequest(BaseModel):
    model_config = {
        "json_schema_extra": {"examples": [{"product_id": "0b7c6f1e-3a5d-4f0a-9d3e-2a1b4c5d6e7f", "quantity": 2}]}
    }

    product_id: str
    quantity: int = 1
    variant_id: str | None = None
    combo_offer_id: str | None = None


class UpdateCartItemRequest(BaseModel):
    quantity: int


class MergeCartRequest(BaseModel):
    guest_owner_id: str


class CartLineResponse(BaseModel):
    line_id: str
    product_id: str
    variant_id: str | None = None
    combo_offer_id: str | None = None
    title: str | None = None
    option: str | None = None
    sku: str | None = None
    image_url: str | None = None
    quantity: int
    unit_price: str | None = None
    line_total: str | None = None
    available: bool = True


class CartResponse(BaseModel):
    owner_id: str
    lines: list[CartLineResponse]
    count: int
    subtotal: str

    @classmethod
    def from_snapshot(cls, snapshot) -> CartResponse:
        return cls(
            owner_id=snapshot.owner_id,
            lines=[
                CartLineResponse(
                    line_id=line.line_id,
                    product_id=line.product_id,
                    variant_id=line.variant_id,
                    combo_offer_id=line.combo_offer_id,
                    title=line.title,
                    option=line.option,
                    sku=line.sku,
                    image_url=line.image_url,
                    quantity=line.quantity,
                    unit_price=money(line.unit_price),
                    line_total=money(line.line_total),
                    available=line.available,
                )
                for line in snapshot.lines
            ],
            count=snapshot.count,
            subtotal=money(snapshot.subtotal),
        )


# --- Checkout Schemas ---


class AddressSchema(BaseModel):
    name: str | None = Field(None, max_length=255)
    street: str = Field(..., max_length=255)
    city: str = Field(..., max_length=100)
    state: str | None = Field(None, max_length=100)
    postal_code: str = Field(..., max_length=20)
    country: str = Field(..., max_length=100)
    phone: str | None = Field(None, max_length=50)


class CheckoutRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address": {
                        "name": "Jane Doe",
                        "street": "12 Harbour Road",
                        "city": "Portland",
                        "state": "OR",
                        "postal_code": "97201",
                        "country": "US",
                    },
                    "payment_method": "card",
                    "payment_status": "paid",
                    "coupon_code": "SAVE10",
                    "contact_email": "jane@example.com",
                }
            ]
        }
    }

    shipping_address: AddressSchema
    billing_address: AddressSchema | None = None
    payment_method: str | None = Field(None, max_length=50)
    payment_status: str = Field("pending", max_length=20)
    coupon_code: str | None = Field(None, max_length=50)
    guest_email: str | None = Field(None, max_length=254)
    contact_email: str | None = Field(None, max_length=254)
    notes: str | None = None


# --- Coupon Schemas ---


class CreateCouponRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [{"code": "SAVE10", "coupon_type": "percentage", "amount": "10", "max_uses": 100}]
        }
    }

    code: str = Field(..., max_length=50)
    coupon_type: str
    amount: Decimal = Field(..., ge=0)
    min_cart_total: Decimal | None = Field(None, ge=0)
    min_quantity: int | None = Field(None, ge=1)
    max_uses: int | None = Field(None, ge=1)
    expires_at: datetime | None = None
    description: str | None = None


class UpdateCouponRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"amount": "15", "max_uses": 200}]}}

    amount: Decimal | None = Field(None, ge=0)
    min_cart_total: Decimal | None = Field(None, ge=0)
    min_quantity: int | None = Field(None, ge=1)
    max_uses: int | None = Field(None, ge=1)
    expires_at: datetime | None = None
    description: str | None = None
    is_active: bool | None = None


class CouponIdResponse(BaseModel):
    coupon_id: str


class CouponResponse(BaseModel):
    coupon_id: str
    code: str
    coupon_type: str
    amount: str
    min_cart_total: str | None = None
    min_quantity: int | None = None
    max_uses: int | None = None
    used_count: int = 0
    expires_at: datetime | None = None
    description: str | None = None
    is_active: bool
    created_at: datetime | None = None

    @classmethod
    def from_coupon(cls, coupon) -> CouponResponse:
        return cls(
            coupon_id=str(coupon.id),
            code=coupon.code,
            coupon_type=coupon.coupon_type,
            amount=money(coupon.amount),
            min_cart_total=money(coupon.min_cart_total),
            min_quantity=coupon.min_quantity,
            max_uses=coupon.max_uses,
            used_count=coupon.used_count or 0,
            expires_at=coupon.expires_at,
            description=coupon.description,
            is_active=bool(coupon.is_active),
            created_at=coupon.created_at,
        )


class CouponValidationResponse(BaseModel):
    code: str
    coupon_type: str
    amount: str
    description: str | None = None
    discount: str


# --- Order Schemas ---


class TransitionStatusRequest(BaseModel):
    status: str
    tracking_number: str | None = None
    reason: str | None = Field(None, max_length=500)


class TrackingUpdateRequest(BaseModel):
    status: str = Field(..., max_length=100)
    date: str | None = None
    location: str | None = Field(None, max_length=255)
    description: str | None = None


class PaymentStatusRequest(BaseModel):
    payment_status: str


class OrderItemResponse(BaseModel):
    item_id: str
    product_id: str
    variant_id: str | None = None
    combo_offer_id: str | None = None
    title: str
    option: str | None = None
    sku: str | None = None
    image_url: str | None = None
    unit_price: str
    quantity: int
    line_total: str


class TrackingUpdateResponse(BaseModel):
    date: str
    status: str
    location: str | None = None
    description: str | None = None


class OrderResponse(BaseModel):
    order_id: str
    order_number: str
    customer_id: str | None = None
    guest_email: str | None = None
    status: str
    items: list[OrderItemResponse]
    subtotal: str
    discount: str
    total: str
    currency: str
    coupon_code: str | None = None
    payment_method: str | None = None
    payment_status: str
    shipping_address: AddressSchema | None = None
    billing_address: AddressSchema | None = None
    notes: str | None = None
    tracking_number: str | None = None
    tracking_status: str | None = None
    tracking_updates: list[TrackingUpdateResponse]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_order(cls, order) -> OrderResponse:
        return cls(
            order_id=str(order.id),
            order_number=order.order_number,
            customer_id=str(order.customer_id) if order.customer_id else None,
            guest_email=order.guest_email,
            status=order.status,
            items=[OrderItemResponse(**item.to_dict()) for item in order.items],
            subtotal=money(order.subtotal),
            discount=money(order.discount),
            total=money(order.total),
            currency=order.currency,
            coupon_code=order.coupon_code,
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            shipping_address=_address(order.shipping_address),
            billing_address=_address(order.billing_address),
            notes=order.notes,
            tracking_number=order.tracking_number,
            tracking_status=order.tracking_status,
            tracking_updates=[TrackingUpdateResponse(**update) for update in order.tracking_history],
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


def _address(value) -> AddressSchema | None:
    if value is None:
        return None
    return AddressSchema(**{name: getattr(value, name) for name in AddressSchema.model_fields})


class OrderSummaryResponse(BaseModel):
    order_id: str
    order_number: str
    customer_id: str | None = None
    status: str
    payment_status: str | None = None
    item_count: int
    total: str | None = None
    currency: str
    created_at: datetime | None = None

    @classmethod
    def from_summary(cls, summary) -> OrderSummaryResponse:
        return cls(
            order_id=str(summary.order_id),
            order_number=summary.order_number,
            customer_id=str(summary.customer_id) if summary.customer_id else None,
            status=summary.status,
            payment_status=summary.payment_status,
            item_count=summary.item_count or 0,
            total=money(summary.total),
            currency=summary.currency or "USD",
            created_at=summary.created_at,
        )
