# app/main.py
from fastapi import FastAPI
import uvicorn

from app.api import include_routers
from app.api.errors import register_exception_handlers
from app.data.database import Base, engine
from app.gateway.authorization import RoleGateMiddleware
from app.utils.logging import get_logger
from app.utils.settings import ENABLED_SERVICES, ENFORCE_ROLE_GATE, SERVICE_NAME

# IMPORT WSZYSTKICH MODELI NA POCZĄTKU (PRZED JAKIMKOLWIEK CREATE_ALL)
from app.data import models  # noqa: F401

logger = get_logger(__name__)


def init_db() -> None:
    logger.info(f"Initializing database, tables: {list(Base.metadata.tables.keys())}")
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise
    logger.info("Database tables created")


def create_app(stores: list[str] | None = None, enforce_role_gate: bool | None = None, create_tables: bool = True) -> FastAPI:
    stores = ENABLED_SERVICES if stores is None else stores
    enforce_role_gate = ENFORCE_ROLE_GATE if enforce_role_gate is None else enforce_role_gate

    app = FastAPI(
        title=SERVICE_NAME,
        version="1.0.0",
    )

    include_routers(app, stores)
    register_exception_handlers(app)

    if enforce_role_gate:
        app.add_middleware(RoleGateMiddleware)
        logger.info("Role gate middleware enabled")

    if create_tables:
        init_db()

    logger.info(f"{SERVICE_NAME} serving stores: {', '.join(stores)}")
    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
