"""
Career Guidance Platform - Main Application

FastAPI backend with:
- MongoDB document store (in-memory fallback when MONGODB_URI is unset)
- JWT authentication with email verification
- SMTP emails for verification, password reset and decisions
- Front end served from /frontend/public when present

Run: uvicorn careerguide.main:app --reload
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from careerguide import __version__
from careerguide.api.routes import api_router
from careerguide.core.config import Settings, get_settings
from careerguide.core.errors import register_exception_handlers
from careerguide.core.log_config import configure_logging
from careerguide.db import DocumentStore, MemoryDocumentStore, build_store
from careerguide.db.seed import seed_store
from careerguide.services.email_service import EmailService

logger = logging.getLogger(__name__)

# Get the project root directory
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
FRONTEND_DIR = os.path.join(PROJECT_ROOT, "frontend", "public")

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "X-XSS-Protection": "1; mode=block",
}


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[DocumentStore] = None,
    email_service: Optional[EmailService] = None,
) -> FastAPI:
    """
    Build the FastAPI app.

    The store and email service are created here (or passed in by tests)
    and live on ``app.state`` for the lifetime of the app.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        description="""
    Career guidance platform connecting students, institutions and companies.

    ## Features
    - **Authentication**: registration with email verification, JWT login, password reset
    - **Institutions**: listings, courses, faculties, admissions
    - **Students**: course applications, transcripts, job applications, recommendations
    - **Companies**: job postings and applicant review
    - **Admin**: moderation and reports
    """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.store = store or build_store(settings)
    app.state.email_service = email_service or EmailService(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response

    register_exception_handlers(app)

    # Include API routes
    app.include_router(api_router, prefix="/api")

    # Serve static files (for any additional assets)
    if os.path.exists(FRONTEND_DIR):
        app.mount("/static", StaticFiles(directory=FRONTEND_DIR), name="static")

    @app.on_event("startup")
    async def startup_event():
        """Create indexes; load sample data into an empty in-memory store."""
        store = app.state.store
        await store.init_indexes()
        if settings.seed_sample_data and isinstance(store, MemoryDocumentStore):
            await seed_store(store)
        logger.info("%s started (%s)", settings.app_name, settings.environment)

    @app.on_event("shutdown")
    async def shutdown_event():
        await app.state.store.close()

    @app.get("/", tags=["Frontend"])
    async def serve_frontend():
        """Serve the front end."""
        index_path = os.path.join(FRONTEND_DIR, "index.html")
        if os.path.exists(index_path):
            return FileResponse(index_path)
        return {
            "success": True,
            "message": f"{settings.app_name} API is running",
            "version": __version__,
            "docs": "/docs",
        }

    @app.get("/api/health", tags=["Health"])
    async def health_check(request: Request):
        """Detailed health check."""
        store = request.app.state.store
        connected = await store.ping()
        return {
            "success": True,
            "status": "healthy" if connected else "degraded",
            "environment": settings.environment,
            "database": "connected" if connected else "disconnected",
            "store": type(store).__name__,
            "email": "configured" if settings.smtp_configured else "not configured",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("careerguide.main:app", host=settings.host, port=settings.port, reload=settings.debug)
