import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.config import maintenance, settings
from app.core.exceptions import LoginRequired
from app.core.rate_limit import limiter
from app.modules.auth import routes as auth_routes
from app.modules.auth.service import session_cookie_headers, sets_session_cookie
from app.modules.profiles import routes as profiles_routes
from app.modules.courses import routes as courses_routes
from app.modules.events import routes as events_routes
from app.modules.attendance import routes as attendance_routes
from app.modules.dashboard import routes as dashboard_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired):
    return RedirectResponse(exc.redirect_to, status_code=302)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


def maintenance_payload() -> dict:
    return {"status": "maintenance", "message": maintenance.MAINTENANCE_MESSAGE}


class MaintenanceMiddleware:
    """Short-circuits every route to the maintenance response while the switch is on."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if (
            scope["type"] != "http"
            or not maintenance.MAINTENANCE_MODE
            or scope["path"] in maintenance.MAINTENANCE_ALLOWED_PATHS
        ):
            await self.app(scope, receive, send)
            return

        response = JSONResponse(status_code=503, content=maintenance_payload())
        await response(scope, receive, send)


class SessionCookieMiddleware:
    """Puts a session the client rotated while restoring it back into the cookies."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_cookies(message):
            if message["type"] == "http.response.start":
                session = scope.get("state", {}).get("rotated_session")
                headers = list(message.get("headers", []))
                # a route that set or cleared the cookies itself wins
                if session is not None and not sets_session_cookie(headers):
                    message["headers"] = headers + session_cookie_headers(session)
            await send(message)

        await self.app(scope, receive, send_with_cookies)


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


app.add_middleware(MaintenanceMiddleware)
app.add_middleware(SessionCookieMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Page routes live at the root so the OAuth redirect targets stay stable
app.include_router(auth_routes.router)
app.include_router(profiles_routes.router)
app.include_router(dashboard_routes.router)
app.include_router(events_routes.router)
app.include_router(attendance_routes.router)
app.include_router(courses_routes.router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup")
    if maintenance.MAINTENANCE_MODE:
        logger.warning("Maintenance mode is ON; all routes serve the maintenance page")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": "Welcome to acetrack", "status": "healthy"}


@app.get("/maintenance")
@limiter.exempt
async def maintenance_page():
    return maintenance_payload()


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness probe: extend here with a Supabase check if needed."""
    return {"status": "ready"}
