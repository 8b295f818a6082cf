from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from timing_asgi import TimingMiddleware, TimingClient  # type: ignore
from timing_asgi.integrations import StarletteScopeToName  # type: ignore

from azdo_access.core import config
from azdo_access.core.errors import (
    AmbiguousIdentityError,
    AzdoAccessError,
    DependencyFailureError,
    InvalidInputError,
    NotFoundError,
)
from azdo_access.features.identities.routes import router as identity_router
from azdo_access.features.permissions.routes import router as permission_router
from azdo_access.utils import get_logger


log = get_logger(__name__)
log.info("Initializing server")
app = FastAPI(
    title="AzDO Access",
    description="Azure DevOps identity resolution and permission translation",
    version="0.1.0",
    docs_url="/docs" if config.ENABLE_DOCS else None,
    redoc_url="/redoc" if config.ENABLE_DOCS else None,
    openapi_url="/openapi.json" if config.ENABLE_DOCS else None
)
limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter


class PrintTimings(TimingClient):
    def timing(self, metric_name, timing, tags):
        log.debug(dict(route=metric_name.removeprefix("main.azdo_access.features."), timing=timing, tags=tags))


app.add_middleware(TimingMiddleware, client=PrintTimings(), metric_namer=StarletteScopeToName("main", app))

if config.ENABLE_DOCS:
    log.warning("Docs enabled")
if config.ALLOW_ORIGIN:
    log.warning("Setting allow origin to %s", config.ALLOW_ORIGIN)
    origins = [config.ALLOW_ORIGIN]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def error_status(exc: AzdoAccessError) -> int:
    """HTTP status for a package error."""
    if isinstance(exc, InvalidInputError):
        return 400
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, AmbiguousIdentityError):
        return 409
    if isinstance(exc, DependencyFailureError):
        return 502
    return 500


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    errors = dict()
    for error in exc.errors():
        if "loc" not in error or "msg" not in error:
            continue
        key = error["loc"][-1]
        if key == "__root__":
            key = "root"
        errors[key] = error["msg"]
    log.info("Request validation error %s", errors)
    return JSONResponse(status_code=400, content=jsonable_encoder(errors))


@app.exception_handler(AzdoAccessError)
async def azdo_access_exception_handler(_request: Request, exc: AzdoAccessError):
    status_code = error_status(exc)
    content = {"error": type(exc).__name__, "detail": exc.message}
    if isinstance(exc, AmbiguousIdentityError):
        content["hint"] = exc.hint
    if status_code >= 500:
        log.error(f"{type(exc).__name__}: {exc.message}")
    else:
        log.info(f"{type(exc).__name__}: {exc.message}")
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(RateLimitExceeded)
def rate_limit_exceeded_handler(_request: Request, _exc: RateLimitExceeded) -> Response:
    return JSONResponse({"error": "You are going too fast"}, status_code=429)


@app.get("/")
async def root():
    """Root endpoint - API health check."""
    return {
        "message": "AzDO Access API",
        "version": "0.1.0",
        "status": "online",
        "docs": "/docs" if config.ENABLE_DOCS else None,
        "organization": config.AZDO_ORGANIZATION,
        "features": {
            "identities": "Classify subject tokens and resolve them to identities and graph subjects",
            "permissions": "Encode and decode namespace bitmasks and classify per-subject permission states",
        }
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


app.include_router(identity_router, prefix="/identities", tags=["identities"])
app.include_router(permission_router, prefix="/permissions", tags=["permissions"])
