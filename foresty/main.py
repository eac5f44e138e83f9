"""
Foresty (فرصتي) - Main Application

Server-rendered job board for forestry jobs in Tunisia:
- Hosted backend (Supabase-style) for auth, tables and rpc
- Signed session cookie for the auth session and toasts
- Jinja2 templates for every page

Run: uvicorn foresty.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from foresty import __version__
from foresty.api.routes import page_router
from foresty.api.routes.public_routes import fallback_router
from foresty.core.config import get_settings
from foresty.core.guard import GuardDecision, RouteBlocked
from foresty.core.templating import STATIC_DIR, render
from foresty.db.supabase import close_supabase

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("foresty")

# Create FastAPI app
app = FastAPI(
    title="Foresty - فرصتي",
    description="""
    Job board for the forestry sector in Tunisia.

    ## Features
    - **Jobs**: Search and filter active offers, apply with a resume
    - **Job posters**: Three-step job posting wizard
    - **Profiles**: About, skills, experience, education, settings
    - **Feedback**: Public reviews
    - **Admin**: Stats, users and jobs management
    """,
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url=None,
)

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret_key,
    session_cookie=settings.session_cookie,
    max_age=settings.session_max_age,
    same_site="lax",
    https_only=not settings.debug,
)

app.include_router(page_router)
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")


@app.exception_handler(RouteBlocked)
async def route_blocked_handler(request: Request, exc: RouteBlocked):
    if exc.decision == GuardDecision.LOADING:
        return render(request, "loading.html", headers={"Refresh": "1"})
    return RedirectResponse(exc.location, status_code=303)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return render(request, "not_found.html", {"detail": exc.detail}, status_code=404)
    return render(request, "error.html", {"detail": exc.detail}, status_code=exc.status_code)


@app.on_event("startup")
async def startup_event():
    if not settings.supabase_anon_key:
        log.warning("SUPABASE_ANON_KEY is not set; backend calls will be rejected")
    log.info("Foresty %s started (backend: %s)", __version__, settings.supabase_url)


@app.on_event("shutdown")
async def shutdown_event():
    await close_supabase()


@app.get("/health", tags=["Health"])
async def health_check():
    return {"status": "healthy", "app": settings.app_name, "version": __version__}


# Must stay last: it matches every path
app.include_router(fallback_router)
