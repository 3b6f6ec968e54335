"""
KYC verification API endpoints.
"""
from fastapi import APIRouter, Depends, status

from app.api.deps import get_kyc_service, raise_http_error
from app.core.exceptions import PersonaMockException
from app.models.persona import GovernmentIdDocument, Inquiry, SelfieData, Verification
from app.schemas.kyc import (
    CreateInquiryRequest,
    DeclineInquiryRequest,
    SubmitGovernmentIdRequest,
    SubmitSelfieRequest,
)
from app.services.kyc_service import KYCService


router = APIRouter()


@router.post("/inquiries", response_model=Inquiry, status_code=status.HTTP_201_CREATED)
async def create_inquiry(
    request_data: CreateInquiryRequest,
    kyc_service: KYCService = Depends(get_kyc_service)
):
    """
    Create a KYC inquiry for a customer.

    Returns the customer's in-flight inquiry when one exists.

    Args:
        request_data: Customer to verify
        kyc_service: KYC service

    Returns:
        New or existing inquiry

    Raises:
        HTTPException: If the customer is unknown or already verified
    """
    try:
        return await kyc_service.create_inquiry(request_data.customer_id)
    except PersonaMockException as e:
        raise_http_error(e)


@router.get("/inquiries/{inquiry_id}", response_model=Inquiry)
async def get_inquiry(
    inquiry_id: str,
    kyc_service: KYCService = Depends(get_kyc_service)
):
    """
    Get inquiry status by ID.

    Raises:
        HTTPException: If the inquiry or its customer is not found
    """
    try:
        return await kyc_service.get_inquiry(inquiry_id)
    except PersonaMockException as e:
        raise_http_error(e)


@router.post("/inquiries/{inquiry_id}/government-id", response_model=Verification)
async def submit_government_id(
    inquiry_id: str,
    request_data: SubmitGovernmentIdRequest,
    kyc_service: KYCService = Depends(get_kyc_service)
):
    """
    Submit a government ID for verification.

    Automatic decisioning starts in the background when the customer has a
    driver license number on file.

    Raises:
        HTTPException: If the inquiry is missing, the photo is empty or the
            inquiry no longer accepts evidence
    """
    document = GovernmentIdDocument(
        front_photo=request_data.front_photo,
        back_photo=request_data.back_photo,
        country=request_data.country,
        id_class=request_data.id_class,
    )

    try:
        return await kyc_service.submit_government_id(inquiry_id, document)
    except PersonaMockException as e:
        raise_http_error(e)


@router.post("/inquiries/{inquiry_id}/selfie", response_model=Verification)
async def submit_selfie(
    inquiry_id: str,
    request_data: SubmitSelfieRequest,
    kyc_service: KYCService = Depends(get_kyc_service)
):
    """Submit a selfie for verification."""
    try:
        return await kyc_service.submit_selfie(
            inquiry_id, SelfieData(image=request_data.image_data)
        )
    except PersonaMockException as e:
        raise_http_error(e)


@router.post("/inquiries/{inquiry_id}/approve", response_model=Inquiry)
async def approve_inquiry(
    inquiry_id: str,
    kyc_service: KYCService = Depends(get_kyc_service)
):
    """Approve an inquiry (test endpoint)."""
    try:
        return await kyc_service.approve_inquiry(inquiry_id)
    except PersonaMockException as e:
        raise_http_error(e)


@router.post("/inquiries/{inquiry_id}/decline", response_model=Inquiry)
async def decline_inquiry(
    inquiry_id: str,
    request_data: DeclineInquiryRequest,
    kyc_service: KYCService = Depends(get_kyc_service)
):
    """Decline an inquiry (test endpoint)."""
    try:
        return await kyc_service.decline_inquiry(inquiry_id, request_data.reason)
    except PersonaMockException as e:
        raise_http_error(e)
