"""
FastAPI application entry point for the Persona mock verification engine.
"""
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1 import api_router
from app.core.config import settings
from app.repositories.customer_repository import CustomerDirectory, InMemoryCustomerDirectory
from app.services.kyc_service import KYCService
from app.services.persona_mock import PersonaMockService
from app.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def create_app(
    persona_mock: Optional[PersonaMockService] = None,
    customers: Optional[CustomerDirectory] = None
) -> FastAPI:
    """
    Build the application and wire one engine, customer directory and KYC service.

    Args:
        persona_mock: Engine to serve, a default-configured one if omitted
        customers: Customer directory, an empty in-memory one if omitted

    Returns:
        Configured FastAPI application
    """
    setup_logging()

    app = FastAPI(
        title=settings.APP_NAME,
        description="In-memory mock of the Persona identity verification provider",
        version=settings.VERSION,
        docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_HOSTS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    persona_mock = persona_mock or PersonaMockService()
    customers = customers or InMemoryCustomerDirectory()

    app.state.persona_mock = persona_mock
    app.state.customers = customers
    app.state.kyc_service = KYCService(persona_mock, customers)

    # Include API routes
    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": "persona-mock",
            "environment": persona_mock.environment,
        }

    logger.info(
        "Application configured",
        environment=settings.ENVIRONMENT,
        persona_environment=persona_mock.environment,
    )
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
