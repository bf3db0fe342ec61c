from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Depends
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from linkhub.api import auth, profiles
from linkhub.api.deps import get_rate_limit_store, track_rate_limiter
from linkhub.api.error_handlers import register_error_handlers
from linkhub.api.routes import router as links_router
from linkhub.core.config import settings
from linkhub.core.observability import setup_logging
from linkhub.db import models  # noqa: F401  registers tables on Base.metadata
from linkhub.db.base import Base
from linkhub.db.session import engine, get_db
from linkhub.scheduler import build_scheduler
from linkhub.services.click_tracker import track_click

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level, settings.log_format)
    Base.metadata.create_all(bind=engine)

    scheduler = build_scheduler(get_rate_limit_store(), settings.rate_limit_sweep_seconds)
    scheduler.start()
    logger.info("Rate limit sweep scheduled every %ds", settings.rate_limit_sweep_seconds)
    try:
        yield
    finally:
        scheduler.shutdown(wait=False)


app = FastAPI(title="LinkHub API", lifespan=lifespan)
register_error_handlers(app)
app.include_router(auth.router)
app.include_router(links_router)
app.include_router(profiles.router)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/r/{link_id}", dependencies=[Depends(track_rate_limiter)])
def redirect(link_id: str, db: Session = Depends(get_db)):
    # counts the click, then sends the visitor on
    link = track_click(db, link_id)
    return RedirectResponse(url=link.url, status_code=307)
