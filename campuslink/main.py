# campuslink/main.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from campuslink.data.database import Base, engine
from campuslink.api.routers import users, carts, orders, verification, health
from campuslink.domain.errors import DomainError
from campuslink.utils.logging import get_logger
import uvicorn

logger = get_logger(__name__)

# IMPORT WSZYSTKICH MODELI PRZED CREATE_ALL
import campuslink.data.models  # noqa: F401


def init_db():
    logger.info(f"Models registered in Base.metadata: {list(Base.metadata.tables.keys())}")
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created")
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise


async def domain_error_handler(request: Request, exc: DomainError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": exc.detail},
    )


def create_app() -> FastAPI:
    init_db()

    app = FastAPI(
        title="CampusLink Marketplace",
        version="1.0.0",
    )

    app.add_exception_handler(DomainError, domain_error_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(verification.router)
    app.include_router(carts.router)
    app.include_router(orders.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
