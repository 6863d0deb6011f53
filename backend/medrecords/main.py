"""
MedRecords - Patient Records API
Role-gated CRUD over patient records with filtering, sorting and pagination.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import auth, patients
from .bootstrap import bootstrap_admin
from .core.config import settings
from .core.errors import register_error_handlers
from .core.logging_config import configure_logging
from .core.request_logging import RequestLoggingMiddleware
from .models.base import Base, engine

configure_logging(settings.LOG_LEVEL)

# NOTE: In production, use Alembic migrations instead of create_all()
Base.metadata.create_all(bind=engine)

bootstrap_admin()

app = FastAPI(
    title=settings.APP_NAME,
    description="Patient record management: authenticated, role-gated CRUD with filtered, paged queries.",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

register_error_handlers(app)

app.include_router(auth.router, prefix=settings.API_PREFIX)
app.include_router(patients.router, prefix=settings.API_PREFIX)


@app.get("/health")
def health_check():
    return {"status": "healthy", "service": settings.APP_NAME, "version": settings.VERSION}
