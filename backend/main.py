import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from api import orders_router
from config import settings
from paypal import close_paypal_client
from schemas import ErrorResponse
from services.orders_service import CheckoutError, get_shipping_options

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger("checkout-broker")

app = FastAPI(title="Checkout Broker API")

if settings.allowed_origins == ["*"]:
    allow_origins = ["*"]
else:
    allow_origins = settings.allowed_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(orders_router)


@app.on_event("startup")
async def _on_startup() -> None:
    options = get_shipping_options()
    logger.info(
        "Checkout broker ready env=%s currency=%s shipping_options=%d",
        settings.paypal_environment,
        settings.currency,
        len(options),
    )
    if allow_origins == ["*"]:
        logger.warning(
            "CORS is set to allow all origins with credentials; set ALLOWED_ORIGINS to explicit values outside local dev."
        )


@app.on_event("shutdown")
async def _on_shutdown() -> None:
    await close_paypal_client()


@app.exception_handler(CheckoutError)
async def _checkout_error_handler(request: Request, exc: CheckoutError) -> JSONResponse:
    body = ErrorResponse(error=exc.message, code=exc.code)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request.", "details": jsonable_encoder(exc.errors())},
    )


@app.middleware("http")
async def log_requests(request, call_next):
    response = await call_next(request)
    if request.url.path.startswith("/api/"):
        logger.info("%s %s -> %s", request.method, request.url.path, response.status_code)
    return response


@app.get("/health")
async def health():
    return {"status": "ok"}


if settings.static_dir.is_dir():
    app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")


def run() -> None:
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
