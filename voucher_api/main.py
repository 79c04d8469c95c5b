# voucher_api/main.py
import logging

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.orm import Session

from voucher_api import __version__
from voucher_api.core.config import settings
from voucher_api.core.deps import get_db
from voucher_api.core.errors import register_exception_handlers
from voucher_api.db.mixins import Base
from voucher_api.db.session import engine
# load DB models so Base.metadata is populated
import voucher_api.db.models  # noqa: F401

# Routers
from voucher_api.api.admin import router as admin_router
from voucher_api.api.auth import router as auth_router
from voucher_api.api.public import router as public_router
from voucher_api.api.vouchers import router as vouchers_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME, version=__version__)


@app.on_event("startup")
def on_startup():
    if settings.DB_CREATE_ALL:
        Base.metadata.create_all(bind=engine)
        logger.info("create_all done. Tables: %s", sorted(Base.metadata.tables.keys()))


# Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Retry-After"],
)

register_exception_handlers(app)

# Routers
app.include_router(auth_router)
app.include_router(admin_router)
app.include_router(vouchers_router)
app.include_router(public_router)


@app.get("/health")
def health(db: Session = Depends(get_db)):
    db.execute(text("SELECT 1"))
    return {"status": "ok", "app": settings.APP_NAME, "db": "ok"}


def run() -> None:
    import uvicorn

    uvicorn.run("voucher_api.main:app", host="0.0.0.0", port=settings.PORT)
