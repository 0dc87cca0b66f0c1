import logging
from contextlib import asynccontextmanager

from daybook.journals import routes as journals_router
from daybook.analysis import routes as analysis_router
from daybook.chat import routes as chat_router
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from daybook.core.config import CORS_ORIGINS, LOG_LEVEL
from daybook.core.database import Base, engine
from daybook.core.dependency import get_orchestrator

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # DB Tables
    Base.metadata.create_all(bind=engine)
    yield
    orchestrator = app.dependency_overrides.get(get_orchestrator, get_orchestrator)()
    await orchestrator.aclose()


app = FastAPI(
    title="Daybook API",
    version="1.0.0",
    description="Backend for Daybook: daily journaling, streaks, mood trends, AI-driven insights and a journal companion chat.",
    lifespan=lifespan,
)

# CORS config
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(journals_router.router)
app.include_router(analysis_router.router)
app.include_router(chat_router.router)
