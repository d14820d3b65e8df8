"""FastAPI application setup for the Sunset Walk Planner."""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .api import router as api_router
from .errors import UpstreamUnavailable, ValidationError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="app/main")

app = FastAPI(title="Sunset Walk Planner")


@app.exception_handler(ValidationError)
async def handle_validation_error(request: Request, exc: ValidationError):
    logger.info("Rejected request", extra={"path": request.url.path, "error": exc.message})
    return JSONResponse(status_code=400, content=exc.to_payload())


@app.exception_handler(UpstreamUnavailable)
async def handle_upstream_unavailable(request: Request, exc: UpstreamUnavailable):
    logger.warning("Upstream unavailable", extra={"path": request.url.path, "service": exc.service})
    return JSONResponse(status_code=502, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    # Echoed inputs can hold NaN or infinity, which strict JSON cannot carry.
    errors = [{k: v for k, v in err.items() if k not in ("input", "ctx")} for err in exc.errors()]
    logger.info("Rejected request body", extra={"path": request.url.path, "errors": len(errors)})
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(errors)})


@app.get("/health")
def health():
    """Liveness probe."""
    return {"status": "ok"}


# API routes
app.include_router(api_router, prefix="/v1")
