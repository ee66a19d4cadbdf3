import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse

from .api.v1.api import router as api_router
from .api.v1.deps import STATUS_BY_KIND
from .core.config import Settings, get_settings
from .core.events import ChangeBus
from .core.exceptions import SkillSwapError
from .core.supabase import check_rest_endpoint
from .services.store import SkillSwapStore, create_store

logger = logging.getLogger(__name__)

def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

def create_app(settings: Optional[Settings] = None, store: Optional[SkillSwapStore] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: connect the store and create the change bus
        settings.check_production_secrets()
        app.state.store = store or create_store(settings)
        app.state.bus = ChangeBus()
        logger.info(
            f"Starting up: {app.state.store.name} store in {settings.environment} environment"
        )

        yield

        # Shutdown
        logger.info("Shutting down")

    app = FastAPI(
        title=settings.app_name,
        description="""
        API for the SkillSwap skill exchange.

        ## Authentication

        Requests are authenticated with a Supabase access token:

        1. Sign in through Supabase Auth in the frontend and copy the session's access token.
        2. Click the "Authorize" button at the top of this page and paste the token (no "Bearer" prefix).

        Outside production, `/api/v1/users/dev/token` issues a token for any user id.

        ## Real-time updates

        Connect to `/api/v1/notifications/ws?token=...` to receive a signal whenever
        your swap requests or ratings change, then re-fetch the collection.
        """,
        version="1.0.0",
        debug=settings.debug,
        lifespan=lifespan,
        swagger_ui_parameters={
            "persistAuthorization": True,
            "displayRequestDuration": True,
            "docExpansion": "none",
        }
    )
    app.state.settings = settings

    # Configure CORS
    origins = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
        settings.frontend_url,  # Include the frontend URL from environment
    ]
    logger.debug(f"CORS origins: {origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API router
    app.include_router(api_router)

    # Custom OpenAPI schema
    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
        )

        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "bearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "bearerFormat": "JWT",
                "description": "Enter the token without the 'Bearer' prefix"
            }
        }

        for path, operations in openapi_schema.get("paths", {}).items():
            # Public endpoints
            if path in ("/", "/health") or path.endswith("/dev/token"):
                continue
            for method in operations:
                if method != "parameters":
                    operations[method]["security"] = [{"bearerAuth": []}]

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi

    @app.get("/")
    async def root():
        return {"message": f"Welcome to the {settings.app_name}", "environment": settings.environment}

    @app.get("/health")
    async def health_check(request: Request):
        store_name = request.app.state.store.name
        healthy = True
        if store_name == "supabase":
            healthy = await check_rest_endpoint(settings)
        return {
            "status": "healthy" if healthy else "degraded",
            "environment": settings.environment,
            "store": store_name,
        }

    # Store and lookup failures raised outside an Outcome, e.g. by list endpoints
    @app.exception_handler(SkillSwapError)
    async def skillswap_exception_handler(request: Request, exc: SkillSwapError):
        if exc.__cause__ is not None:
            logger.error(f"{request.method} {request.url.path} failed: {exc.detail} ({exc.__cause__!r})")
        return JSONResponse(
            status_code=STATUS_BY_KIND.get(exc.kind, 500),
            content={"detail": exc.detail}
        )

    return app

app = create_app()
