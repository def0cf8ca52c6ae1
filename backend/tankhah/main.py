# tankhah/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tankhah.config import settings
from tankhah.core.db import init_db, close_db
from tankhah.core.bootstrap import ensure_default_admin

from tankhah.api.v1.routers import auth, license, admin, calendar

logger = logging.getLogger("uvicorn.error")

app = FastAPI(title=settings.APP_NAME)

# CORS (with Cookie)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def on_startup():
    await init_db()
    # Ensure there's a default admin account on first run
    await ensure_default_admin()
    logger.info("[startup] %s ready (env=%s)", settings.APP_NAME, settings.env)


@app.on_event("shutdown")
async def on_shutdown():
    await close_db()


app.include_router(auth.router, prefix="/api/v1")
app.include_router(license.router, prefix="/api/v1")
app.include_router(admin.router, prefix="/api/v1")
app.include_router(calendar.router, prefix="/api/v1")


@app.get("/healthz")
def healthz():
    return {"ok": True}
