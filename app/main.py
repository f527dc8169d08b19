import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from app.config import settings
from app.core.log_config import configure_logging
from app.modules.auth import routes as auth_routes
from app.modules.events import routes as events_routes
from app.modules.registrations import routes as registrations_routes
from app.modules.roles import routes as roles_routes
from app.modules.notifications import routes as notifications_routes
from app.modules.site_settings import routes as site_settings_routes
from app.modules.team import routes as team_routes
from app.modules.gallery import routes as gallery_routes
from app.modules.reviews import routes as reviews_routes

configure_logging()
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include module routes
app.include_router(auth_routes.router, prefix="/api/v1")
app.include_router(events_routes.router, prefix="/api/v1")
app.include_router(registrations_routes.event_router, prefix="/api/v1")
app.include_router(registrations_routes.router, prefix="/api/v1")
app.include_router(reviews_routes.router, prefix="/api/v1")
app.include_router(roles_routes.router, prefix="/api/v1")
app.include_router(notifications_routes.router, prefix="/api/v1")
app.include_router(site_settings_routes.router, prefix="/api/v1")
app.include_router(team_routes.router, prefix="/api/v1")
app.include_router(gallery_routes.router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup")

    if settings.realtime_enabled:
        # Site settings stay in memory and reload on every change; without
        # realtime they are queried per request.
        from app.database.supabase_client import get_async_supabase
        from app.modules.site_settings.store import SiteSettingsStore
        try:
            store = SiteSettingsStore(await get_async_supabase())
            await store.start()
            app.state.site_settings_store = store
        except Exception as e:
            logger.error(f"Site settings subscription failed, falling back to per-request loads: {e}")


@app.on_event("shutdown")
async def shutdown_event():
    store = getattr(app.state, "site_settings_store", None)
    if store is not None:
        await store.stop()
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.app_name}", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness probe: extend here with Supabase checks if needed."""
    return {"status": "ready"}
