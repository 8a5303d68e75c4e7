# storefront/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from storefront.api.routers import cart, coupons, health, orders, products
from storefront.data.database import init_db
from storefront.errors import StorefrontError, ProductNotFound
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


async def storefront_error_handler(request: Request, exc: StorefrontError):
    if isinstance(exc, ProductNotFound):
        logger.info(f"{request.method} {request.url.path}: product reference {exc.reference!r} not found")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # nieznana sciezka, zla metoda itp. tez w kopercie
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else first.get("msg", message)
    return JSONResponse(status_code=400, content={"success": False, "message": message})


async def unexpected_error_handler(request: Request, exc: Exception):
    # bez szczegolow wewnetrznych w odpowiedzi
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Something went wrong, please try again later"},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Creating database tables")
    init_db()
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Storefront Pricing Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(products.router)
    app.include_router(cart.router)
    app.include_router(coupons.router)
    app.include_router(orders.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
