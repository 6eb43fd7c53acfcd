import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from protean.integrations.fastapi import register_exception_handlers

from storefront.api import cart_router, combo_router, coupon_router, order_router, product_router


@pytest.fixture
def app(storefront_bed):
    application = FastAPI()
    register_exception_handlers(application)

    @application.middleware("http")
    async def domain_context(request: Request, call_next):
        with storefront_bed.domain.domain_context():
            return await call_next(request)

    for router in (cart_router, coupon_router, order_router, product_router, combo_router):
        application.include_router(router)
    return application


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def shipping_payload():
    return {
        "name": "Jane Doe",
        "street": "12 Harbour Road",
        "city": "Portland",
        "state": "OR",
        "postal_code": "97201",
        "country": "US",
    }
