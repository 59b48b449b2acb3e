# storefront/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import uvicorn

from storefront.api.routers import auth, carts, checkout, health, products
from storefront.data.database import Base, SessionLocal, engine
from storefront.domain.errors import PaymentGatewayFailure, StoreFailure
from storefront.services.auth_service import AuthService
from storefront.utils.security import TokenService
from storefront.utils.settings import ADMIN_USERNAME, ADMIN_PASSWORD
from storefront.utils.logging import get_logger

# register every model in Base.metadata before create_all
import storefront.data.models  # noqa: F401

logger = get_logger(__name__)


def init_db() -> None:
    logger.info(f"Initializing database, tables: {list(Base.metadata.tables.keys())}")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        AuthService(db, TokenService()).ensure_admin(ADMIN_USERNAME, ADMIN_PASSWORD)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        init_db()
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise
    yield
    engine.dispose()


async def payment_gateway_failure_handler(request: Request, exc: PaymentGatewayFailure):
    logger.error(f"{request.method} {request.url.path}: payment gateway failure: {exc!r}", exc_info=exc)
    return JSONResponse(status_code=502, content={"detail": "Checkout failed due to a payment error."})


async def store_failure_handler(request: Request, exc: StoreFailure):
    logger.error(f"{request.method} {request.url.path}: store failure: {exc!r}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error."})


def create_app() -> FastAPI:
    app = FastAPI(
        title="Storefront",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(PaymentGatewayFailure, payment_gateway_failure_handler)
    app.add_exception_handler(StoreFailure, store_failure_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(products.router)
    app.include_router(carts.router)
    app.include_router(checkout.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
