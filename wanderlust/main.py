import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from wanderlust.api.v1.routes.expense import router as expense_router
from wanderlust.api.v1.routes.itinerary import router as itinerary_router
from wanderlust.api.v1.routes.poll import router as poll_router
from wanderlust.api.v1.routes.system import router as system_router
from wanderlust.api.v1.routes.trip import router as trip_router
from wanderlust.core.config import settings
from wanderlust.core.errors import ErrorCode, WanderlustError
from wanderlust.core.logging import configure_logging

logger = logging.getLogger(__name__)

configure_logging()

app = FastAPI(title="Wanderlust Backend")


def error_response(status_code: int, code: str, message: str, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({
            "success": False,
            "error": {"code": code, "message": message, "details": details},
        }),
    )


@app.exception_handler(WanderlustError)
async def wanderlust_error_handler(request: Request, exc: WanderlustError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning(
            "Client error %s %s on %s %s: %s",
            exc.status_code, exc.code.value, request.method, request.url.path, exc.message,
        )
    return error_response(exc.status_code, exc.code.value, exc.message, exc.details)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {
            "path": ".".join(str(p) for p in err["loc"] if p != "body") or "body",
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    logger.warning("Validation failed on %s %s: %s", request.method, request.url.path, details)
    return error_response(422, ErrorCode.VALIDATION_ERROR.value, "Validation failed", details)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = "An unexpected error occurred" if settings.ENVIRONMENT == "production" else str(exc)
    return error_response(500, ErrorCode.INTERNAL_ERROR.value, message)


@app.get("/")
async def root():
    return {"message": "Wanderlust Backend is live"}


app.include_router(system_router, prefix="/api/v1/system")
app.include_router(expense_router, prefix="/api/v1/expenses")
app.include_router(trip_router, prefix="/api/v1/trips")
app.include_router(itinerary_router, prefix="/api/v1/trips")
app.include_router(poll_router, prefix="/api/v1/trips")
