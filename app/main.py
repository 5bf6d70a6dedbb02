# main.py
import logging
from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app import models  # noqa: F401  (registers tables on Base.metadata)
from app.core.config import settings
from app.core.database import Base, engine
from app.routes.quiz import router as quiz_router
from app.services.quiz import build_quiz_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and schedule the purge of abandoned quiz sessions"""
    Base.metadata.create_all(bind=engine)

    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        app.state.quiz_engine.sessions.purge_expired,
        "interval",
        minutes=settings.SESSION_PURGE_INTERVAL_MINUTES,
    )
    scheduler.start()
    try:
        yield
    finally:
        scheduler.shutdown()
        logger.info("Stop Server")


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
app.state.quiz_engine = build_quiz_engine()

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,  # Frontend URL
    allow_credentials=True,
    allow_methods=["*"],  # Allows all methods (GET, POST, PUT, DELETE, etc.)
    allow_headers=["*"],  # Allows all headers
)


@app.get("/")
def read_root():
    return {"message": "Trivia tournament quiz service is running"}


app.include_router(quiz_router)
