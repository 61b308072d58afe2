"""
Academy API

Main FastAPI application for the tutoring academy backend: administrative
users, teachers, grades, groups, students, registrations and programs.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from database import init_db
from services import AcademyError
from api import routers, academy_error_handler


logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# --------------- Lifespan ---------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler – initialise DB on startup."""
    logger.info("Initializing database...")
    init_db()
    yield


# --------------- FastAPI app ---------------

app = FastAPI(
    title="Academy API",
    description="""
API for running a tutoring academy.

## Roles
- **Superadmin**: manages admins, plus everything an admin can do
- **Admin**: manages grades, groups, teachers, students, programs and registrations
- **Teacher**: manages their own profile and gallery
- **Anonymous**: browses grades, groups, teachers and programs, submits registrations

## Consistency rules
- A group's subject must be one its teacher teaches
- A student only joins groups of the declared teacher and of the student's grade
- A grade cannot be deleted while students, groups or programs refer to it
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(AcademyError, academy_error_handler)

# Include routers
for router in routers:
    app.include_router(router)


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - API health check."""
    return {
        "status": "online",
        "service": "Academy API",
        "version": "1.0.0"
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
