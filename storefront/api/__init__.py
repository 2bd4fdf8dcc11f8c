# storefront/api/__init__.py
from fastapi import FastAPI

from storefront.api.handlers import register_error_handlers
from storefront.api.routers import carts, categories, health, products, users


def include_routers(app: FastAPI) -> FastAPI:
    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(categories.router)
    app.include_router(products.router)
    app.include_router(carts.router)

    return app
