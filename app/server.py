"""Application wiring for the FastTrack API.

Importing this module builds the FastAPI instance: the schema is created and
upgraded, middleware is installed, and the auth, timer and fast-history
routers are mounted. ``app.main`` adds the operational endpoints on top.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.errors import install_exception_handlers
from .db.migrate import run_migrations
from .db.session import Base, engine
from .middlewares import RequestIdMiddleware, SecurityHeadersMiddleware

# Importing the models registers their tables on ``Base.metadata``.
from .models import fast as _fast  # noqa: F401
from .models import timer as _timer  # noqa: F401
from .models import user as _user  # noqa: F401

app = FastAPI(title=settings.APP_NAME)

# ---------- DB init/migrations ----------
Base.metadata.create_all(bind=engine)
run_migrations(engine)

# ---------- Middleware ----------
# Starlette runs the last-added middleware first, so request ids wrap everything.
app.add_middleware(SecurityHeadersMiddleware)
if settings.ALLOWED_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Authorization", "Content-Type", "X-API-Key", "X-Request-ID"],
    )
app.add_middleware(RequestIdMiddleware)

# ---------- Routers ----------
from .routers import api_auth as api_auth_router  # noqa: E402
from .routers import api_fasts as api_fasts_router  # noqa: E402
from .routers import api_timer as api_timer_router  # noqa: E402

app.include_router(api_auth_router.router)
app.include_router(api_timer_router.router)
app.include_router(api_fasts_router.router)

# ---------- Exception handling ----------
install_exception_handlers(app)


__all__ = ["app"]
