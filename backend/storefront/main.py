from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.config import settings
from storefront.middleware.exceptions import register_exception_handlers
from storefront.middleware.security import SecurityHeadersMiddleware
from storefront.routers import access, auth, health, media
from storefront.storage import reset_store


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await reset_store()


app = FastAPI(
    title="Storefront Access",
    description="Access rules, onboarding reconciliation and media visibility for the storefront dashboard",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware (outermost first) ─────────────────────────────
app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────
app.include_router(health.router)
app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(access.router, prefix="/api/v1/access", tags=["access"])
app.include_router(media.router, prefix="/api/v1/media", tags=["media"])
