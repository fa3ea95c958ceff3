import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import get_cors_origins
from app.core.logging import setup_logging
from app.database.db import Base, engine
from app.models import events, registrations  # noqa: F401  (register tables)
from app.routes import events as event_routes
from app.routes import registrations as registration_routes
from app.routes import reports as report_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    # Create all tables (in production, use migrations such as Alembic)
    Base.metadata.create_all(bind=engine)
    logger.info("Gather API started")
    yield


app = FastAPI(title="Gather", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include the routers
app.include_router(event_routes.router)
app.include_router(registration_routes.router)
app.include_router(report_routes.router)
