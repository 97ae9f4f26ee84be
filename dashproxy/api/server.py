"""FastAPI server for dashproxy.

The dashboard calls ``GET /api/services/proxy?group=&service=&endpoint=``; the
server resolves the widget from config, forwards the JSON-RPC call and returns
the envelope. Service URLs and credentials never leave the process.
"""

import hmac
from contextlib import asynccontextmanager
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from dashproxy import __version__
from dashproxy.api.http.proxy_methods import (
    list_services_response,
    list_widgets_response,
    proxy_service_response,
)
from dashproxy.config.access import get_config as get_cached_config
from dashproxy.config.schema import Config
from dashproxy.proxy.transport import HttpTransport
from dashproxy.services.resolver import ServiceResolver
from dashproxy.utils.exceptions import (
    DashProxyError,
    classify_exception,
    classify_http_status,
    sanitize_error_message,
    unknown_error_detail,
)
from loguru import logger

app_state: dict[str, Any] = {
    "config": None,
    "resolver": None,
    "transport": None,
}


def _current_config() -> Config:
    config = app_state.get("config")
    if config is None:
        config = get_cached_config()
        app_state["config"] = config
    return config


def _current_resolver() -> ServiceResolver:
    resolver = app_state.get("resolver")
    if resolver is None:
        resolver = ServiceResolver.from_config(_current_config())
        app_state["resolver"] = resolver
    return resolver


def _current_transport():
    transport = app_state.get("transport")
    if transport is None:
        transport = HttpTransport.from_config(_current_config())
        app_state["transport"] = transport
    return transport


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build resolver and transport once at start-up; injected state is kept as is."""
    resolver = _current_resolver()
    _current_transport()
    logger.info(
        "dashproxy API ready: {} widget types, {} services",
        len(resolver.registry),
        sum(1 for _ in _current_config().iter_services()),
    )
    try:
        yield
    finally:
        logger.info("dashproxy API stopped")


app = FastAPI(
    title="dashproxy API",
    description="JSON-RPC forwarding for dashboard widgets",
    version=__version__,
    lifespan=lifespan,
)


@app.exception_handler(DashProxyError)
async def dashproxy_exception_handler(request: Request, exc: DashProxyError):
    status_code = classify_http_status(exc)
    return JSONResponse(
        status_code=status_code,
        content=exc.to_dict()
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    code, category, _ = classify_exception(exc)
    sanitized = sanitize_error_message(str(exc))
    logger.exception(f"Unhandled exception [{code}]: {sanitized}")
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": "An unexpected error occurred", "code": code}
    )


def _extract_http_api_credential(request: Request) -> str | None:
    """Extract credential from Authorization: Bearer or X-API-Key."""
    auth = request.headers.get("Authorization")
    if auth and auth.startswith("Bearer "):
        return auth[7:].strip()
    return request.headers.get("X-API-Key", "").strip() or None


async def verify_http_api_token(request: Request) -> None:
    """Dependency: when server.api_token is set, require a matching credential for /api."""
    token = (_current_config().server.api_token or "").strip()
    if not token:
        return
    provided = _extract_http_api_credential(request)
    if provided and hmac.compare_digest(token, provided):
        return
    raise HTTPException(status_code=401, detail="Invalid or missing API token")


# API router: all JSON API routes under /api
api_router = APIRouter(dependencies=[Depends(verify_http_api_token)])


@api_router.get("/services/proxy")
async def proxy_service(request: Request):
    """Forward ?endpoint= as a JSON-RPC method to the widget of ?group=&service=."""
    return await proxy_service_response(
        query=dict(request.query_params),
        resolver=_current_resolver(),
        transport=_current_transport(),
        log_debug=logger.debug,
        log_warning=logger.warning,
    )


@api_router.get("/widgets")
async def list_widgets():
    """Widget types known to the proxy and whether they accept API calls."""
    return list_widgets_response(registry=_current_resolver().registry)


@api_router.get("/services")
async def list_services():
    """Configured services (no credentials)."""
    try:
        return list_services_response(config=_current_config(), registry=_current_resolver().registry)
    except Exception as e:
        logger.error(f"List services error: {e}")
        raise HTTPException(status_code=500, detail=unknown_error_detail(e))


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "dashproxy",
        "version": __version__,
        "status": "running"
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"ok": True, "service": "dashproxy"}


app.include_router(api_router, prefix="/api")


def create_app(config: Config | None = None, *, transport: Any = None) -> FastAPI:
    """Return the FastAPI application, optionally bound to a config and transport."""
    app_state["config"] = config
    app_state["resolver"] = None
    app_state["transport"] = transport
    cors_origins = (config or _current_config()).server.cors_origins
    if cors_origins and not app_state.get("_cors_installed"):
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=False,
            allow_methods=["GET"],
            allow_headers=["*"],
        )
        app_state["_cors_installed"] = True
    return app


def run_server(config: Config | None = None, host: str | None = None, port: int | None = None):
    """Run the API server."""
    api_app = create_app(config)
    server_cfg = _current_config().server
    uvicorn.run(
        api_app,
        host=host or server_cfg.host,
        port=port or server_cfg.port,
        timeout_keep_alive=30,
        timeout_graceful_shutdown=10,
        log_level="warning",
    )
