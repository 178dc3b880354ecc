# app/api/__init__.py
from fastapi import FastAPI

from app.api.routers import carts, health, inventory, orders, payments

# nazwa store'a -> router
STORE_ROUTERS = {
    "inventory": inventory.router,
    "cart": carts.router,
    "orders": orders.router,
    "payments": payments.router,
}


def include_routers(app: FastAPI, stores: list[str]) -> list[str]:
    unknown = [s for s in stores if s not in STORE_ROUTERS]
    if unknown:
        raise ValueError(f"Unknown store(s) in ENABLED_SERVICES: {unknown}")

    app.include_router(health.router)
    for store in stores:
        app.include_router(STORE_ROUTERS[store])
    return stores
