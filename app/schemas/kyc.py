"""
KYC and Persona mock request and response schemas.
"""
from typing import List, Optional

from pydantic import BaseModel, Field, validator

from app.models.persona import IdClass, Inquiry, InquiryStatus


class CreateInquiryRequest(BaseModel):
    """Inquiry creation schema."""

    customer_id: str = Field(..., min_length=1, description="Customer to verify")


class SubmitGovernmentIdRequest(BaseModel):
    """Government ID submission schema."""

    front_photo: str = Field(..., description="Front of the document, base64 or URL")
    back_photo: Optional[str] = Field(None, description="Back of the document, base64 or URL")
    country: str = Field("US", description="ISO 3166-1 alpha-2 country code")
    id_class: IdClass = Field(IdClass.DRIVER_LICENSE, description="dl, pp or id")

    @validator("country")
    def validate_country_code(cls, v):
        """Validate country code format."""
        if len(v) != 2:
            raise ValueError("Country code must be 2 characters (ISO 3166-1 alpha-2)")
        return v.upper()


class SubmitSelfieRequest(BaseModel):
    """Selfie submission schema."""

    image_data: str = Field(..., description="Base64 encoded image")


class DeclineInquiryRequest(BaseModel):
    """Manual decline schema."""

    reason: str = Field(..., min_length=1, description="Decline reason")


class UpdateInquiryStatusRequest(BaseModel):
    """Inquiry status update schema."""

    status: InquiryStatus = Field(..., description="New inquiry status")


class InquiryListResponse(BaseModel):
    """Inquiry list response schema."""

    items: List[Inquiry] = Field(..., description="Inquiries, newest first")
    total: int = Field(..., description="Number of inquiries returned")
    page_size: int = Field(..., description="Page size applied")


class StatsResponse(BaseModel):
    """Persona mock statistics schema."""

    inquiries: int = Field(..., description="Stored inquiries")
    verifications: int = Field(..., description="Stored verifications")
    webhook_callbacks: int = Field(..., description="Registered webhook callbacks")
    scheduled_tasks: int = Field(..., description="Outstanding background jobs")
