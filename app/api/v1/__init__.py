"""
API version 1 router configuration.
"""

from fastapi import APIRouter

from app.api.v1 import kyc, persona_mock

api_router = APIRouter()

# Include KYC verification routes
api_router.include_router(kyc.router, prefix="/kyc", tags=["kyc"])

# Include Persona mock administration routes
api_router.include_router(persona_mock.router, prefix="/persona-mock", tags=["persona-mock"])
