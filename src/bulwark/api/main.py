import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bulwark.access.policy import AccessPolicy
from bulwark.config import settings
from bulwark.exceptions import ConfigError, OrgTreeError
from bulwark.api.middleware import add_request_id, log_requests
from bulwark.org.tree import OrgTree
import bulwark.api.deps as deps

# Routers
from bulwark.api.routers import access, content, selector, system, units

# Configure logging
logging.basicConfig(level=getattr(logging, settings.logging.level.upper(), logging.INFO))
logger = logging.getLogger("bulwark.api")


def _error_payload(request: Request, error: str, detail: str) -> dict:
    payload = {"error": error, "detail": detail}
    rid = getattr(request.state, "request_id", None)
    if rid:
        payload["request_id"] = rid
    return payload


def create_app(tree: Optional[OrgTree] = None, policy: Optional[AccessPolicy] = None) -> FastAPI:
    """
    Factory to build the FastAPI application.
    A tree or policy passed here replaces the cached instances (tests, reloads);
    otherwise they are loaded lazily from the configured paths.
    """
    if tree is not None:
        deps.set_tree(tree)
    if policy is not None:
        deps.set_policy(policy)

    app = FastAPI(title="Bulwark API", version=settings.app.version)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Custom Middleware
    app.middleware("http")(add_request_id)
    if settings.logging.log_requests:
        app.middleware("http")(log_requests)

    # Include Routers
    app.include_router(system.router)
    app.include_router(units.router)
    app.include_router(access.router)
    app.include_router(content.router)
    app.include_router(selector.router)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        from starlette.exceptions import HTTPException as StarletteHTTPException
        if isinstance(exc, StarletteHTTPException):
            return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

        rid = getattr(request.state, "request_id", None)
        logger.exception("Unhandled error", extra={"path": str(request.url), "request_id": rid})
        return JSONResponse(status_code=500, content=_error_payload(request, "internal_error", "Unexpected server error"))

    @app.exception_handler(OrgTreeError)
    async def org_tree_exception_handler(request: Request, exc: OrgTreeError):
        logger.error(f"Organization tree rejected: {exc}")
        return JSONResponse(status_code=422, content=_error_payload(request, "invalid_org_tree", str(exc)))

    @app.exception_handler(ConfigError)
    async def config_exception_handler(request: Request, exc: ConfigError):
        logger.error(f"Configuration error: {exc}")
        return JSONResponse(status_code=422, content=_error_payload(request, "invalid_config", str(exc)))

    return app

# Module-level app for uvicorn entrypoint
app = create_app()
