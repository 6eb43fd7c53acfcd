"""Storefront FastAPI application.

Processes commands synchronously over HTTP. Every request under a storefront
prefix runs inside the Storefront domain context; Protean exceptions are
mapped to HTTP statuses by the integration's exception handlers.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from storefront.domain import storefront
from storefront.utils.logging import bind_request_context, clear_request_context, configure_logging

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV selects the config overlay:
#   - "test"       → event_processing = "sync"  (projectors fire in the UoW)
#   - "production" → event_processing = "async" (projectors fire via Engine)
configure_logging()
storefront.init()

_DOMAIN_PREFIXES = ("/carts", "/coupons", "/orders", "/products", "/combo-offers")


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="Carts, pricing, coupons and the order lifecycle",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the Storefront domain context and tag log lines with a request id."""
    if not request.url.path.startswith(_DOMAIN_PREFIXES):
        return await call_next(request)

    request_id = request.headers.get("X-Request-ID") or uuid4().hex
    bind_request_context(request_id=request_id, path=request.url.path)
    try:
        with storefront.domain_context():
            response = await call_next(request)
    finally:
        clear_request_context()
    response.headers["X-Request-ID"] = request_id
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from storefront.api import cart_router, combo_router, coupon_router, order_router, product_router  # noqa: E402

app.include_router(cart_router)
app.include_router(coupon_router)
app.include_router(order_router)
app.include_router(product_router)
app.include_router(combo_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": {"name": storefront.name}})
