"""
Base service class for Recipes API services.
"""

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Dict, Optional
import time
import os

from prometheus_client import CONTENT_TYPE_LATEST

from .config import get_config
from .logging import configure_logging, get_logger, set_request_id, clear_context
from .metrics import get_metrics_collector
from .errors import (
    RecipesException, RecipeNotFoundError, ValidationError, InfrastructureError, ErrorResponse
)


REQUEST_ID_HEADER = "X-Request-ID"
UNMATCHED_ENDPOINT = "unmatched"


def status_code_for(exc: RecipesException) -> int:
    """Map an error kind onto an HTTP status code."""
    if isinstance(exc, RecipeNotFoundError):
        return 404
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, InfrastructureError):
        return 500
    return 400


def route_template(request: Request) -> str:
    """Path template of the matched route, e.g. ``/recipes/{recipe_id}``.

    Used as the metrics label so recipe ids never become label values.
    """
    route = request.scope.get("route")
    if route is None:
        return UNMATCHED_ENDPOINT
    return route.path


def internal_error_response(request_id: Optional[str] = None) -> JSONResponse:
    """500 body for exceptions outside the RecipesException hierarchy."""
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            request_id=request_id,
            code="INTERNAL_ERROR",
            message="Internal server error"
        ).model_dump()
    )


class BaseService:
    """Base service class with common functionality."""

    def __init__(self, service_name: str, port: Optional[int] = None):
        self.service_name = service_name
        self.config = get_config(service_name, port)
        self.port = self.config.port
        self.logger = get_logger(f"{service_name}.service")
        self.metrics = get_metrics_collector(service_name)
        self._start_time = time.time()

        # Configure logging
        configure_logging(service_name, self.config.log_level)

        # Create FastAPI app
        self.app = self._create_app()

        # Set up middleware
        self._setup_middleware()

        # Set up routes
        self._setup_routes()

    def _create_app(self) -> FastAPI:
        """Create FastAPI application."""
        return FastAPI(
            title=f"{self.service_name.title()} API",
            description=f"{self.service_name.title()} Service",
            version="1.0.0",
            docs_url="/docs" if self.config.env == "local" else None,
            redoc_url="/redoc" if self.config.env == "local" else None,
            lifespan=self._lifespan,
        )

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        """Start backing resources before serving, stop them on shutdown."""
        await self.start()
        try:
            yield
        finally:
            await self.stop()

    def _setup_middleware(self):
        """Set up middleware."""

        # CORS middleware
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"] if self.config.env == "local" else [],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        # Request timing and correlation middleware
        @self.app.middleware("http")
        async def add_request_timing(request: Request, call_next):
            start_time = time.time()
            request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))

            try:
                try:
                    response = await call_next(request)
                except Exception as exc:
                    # 500s carry the request ID like typed errors do
                    self.logger.error(
                        "Unhandled exception",
                        error=str(exc),
                        method=request.method,
                        path=request.url.path,
                        exc_info=True
                    )
                    response = internal_error_response(request_id)
                    self.metrics.record_error("INTERNAL_ERROR")

                response.headers[REQUEST_ID_HEADER] = request_id

                duration = time.time() - start_time

                self.metrics.record_http_request(
                    method=request.method,
                    endpoint=route_template(request),
                    status_code=response.status_code,
                    duration=duration
                )

                self.logger.info(
                    "HTTP request",
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code,
                    duration_ms=round(duration * 1000, 2)
                )

                return response
            finally:
                clear_context()

    def _setup_routes(self):
        """Set up common routes."""

        @self.app.get("/health")
        async def health_check():
            """Health check endpoint."""
            dependencies = await self._check_dependencies()
            healthy = all(status == "ok" for status in dependencies.values())
            status = "ok" if healthy else "error"
            self.metrics.record_health_check(status)

            body = {
                "service": self.service_name,
                "status": status,
                "uptime_seconds": self._get_uptime(),
                "dependencies": dependencies,
                "version": "1.0.0",
                "commit": os.getenv("GIT_COMMIT", "unknown")
            }
            if not healthy:
                self.logger.error("Health check failed", dependencies=dependencies)
                return JSONResponse(status_code=503, content=body)
            return body

        @self.app.get("/metrics")
        async def metrics_endpoint():
            """Prometheus metrics endpoint."""
            return Response(
                content=self.metrics.export(),
                media_type=CONTENT_TYPE_LATEST
            )

        # Error handlers
        @self.app.exception_handler(RecipesException)
        async def recipes_exception_handler(request: Request, exc: RecipesException):
            """Handle RecipesException."""
            status_code = status_code_for(exc)
            log = self.logger.error if status_code >= 500 else self.logger.info
            log(
                "Request failed",
                code=exc.code,
                message=exc.message,
                details=exc.details,
                status_code=status_code
            )
            self.metrics.record_error(exc.code)
            return JSONResponse(
                status_code=status_code,
                content=exc.to_response().model_dump()
            )

        @self.app.exception_handler(RequestValidationError)
        async def request_validation_handler(request: Request, exc: RequestValidationError):
            """Report malformed request bodies as 400s."""
            error = ValidationError(
                "Invalid request body",
                {"errors": [
                    {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
                    for err in exc.errors()
                ]}
            )
            self.metrics.record_error(error.code)
            return JSONResponse(
                status_code=400,
                content=error.to_response().model_dump()
            )

        @self.app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            """Handle general exceptions."""
            self.logger.error("Unhandled exception", error=str(exc), exc_info=True)
            self.metrics.record_error("INTERNAL_ERROR")
            return internal_error_response()

    async def _check_dependencies(self) -> Dict[str, str]:
        """Check service dependencies. Override in subclasses."""
        return {}

    async def start(self):
        """Start service resources. Override in subclasses."""

    async def stop(self):
        """Stop service resources. Override in subclasses."""

    def _get_uptime(self) -> float:
        """Get service uptime in seconds."""
        return time.time() - self._start_time

    def run(self):
        """Run the service."""
        import uvicorn
        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level.lower()
        )
