"""
AIO Citation Tracker - AI Overview Citation Analytics
Main FastAPI Application
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from aio_tracker.config import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    from aio_tracker.utils import init_db, close_db
    await init_db()
    yield
    await close_db()


def create_app() -> FastAPI:
    """Factory function to create FastAPI app"""
    settings = get_settings()

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    application = FastAPI(
        title=settings.APP_NAME,
        description="""
        AI Overview Citation Analytics

        Track which sources Google's AI Overviews cite for your keywords,
        where your brand ranks among them, and how that changes over time.

        ## Features
        - Import provider results from JSON or fetch them live
        - Brand citation rank and mention detection
        - Competitor citation and mention metrics
        - Session-to-session change tracking
        - Trends, overview and CSV export
        """,
        version=settings.API_VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc" if settings.is_development else None,
    )

    # CORS middleware
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handler
    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle unexpected errors"""
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        settings = get_settings()
        if settings.DEBUG:
            return JSONResponse(
                status_code=500,
                content={
                    "detail": str(exc),
                    "type": type(exc).__name__,
                },
            )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    # Import and include API routes
    from aio_tracker.api.routes import api_router
    application.include_router(api_router, prefix="/api/v1")

    # Health check
    @application.get("/health")
    async def health_check():
        """Health check endpoint"""
        settings = get_settings()
        return {
            "status": "healthy",
            "version": settings.API_VERSION,
            "environment": settings.APP_ENV,
        }

    # Root
    @application.get("/")
    async def root():
        """Root endpoint"""
        settings = get_settings()
        return {
            "name": settings.APP_NAME,
            "version": settings.API_VERSION,
            "docs": "/docs",
        }

    return application


# Create the app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()

    uvicorn.run(
        "aio_tracker.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development,
        workers=1 if settings.is_development else settings.WORKERS,
    )
