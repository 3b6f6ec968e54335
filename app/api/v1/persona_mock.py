"""
Persona mock administration endpoints.

Direct access to the engine for local testing: listing and status overrides,
liveness checks, statistics and bulk reset.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_kyc_service, get_persona_mock, raise_http_error
from app.core.exceptions import PersonaMockException
from app.models.persona import Inquiry, InquiryFilter, InquiryStatus, Verification
from app.schemas.kyc import InquiryListResponse, StatsResponse, UpdateInquiryStatusRequest
from app.services.kyc_service import KYCService
from app.services.persona_mock import PersonaMockService


router = APIRouter()


@router.get("/inquiries", response_model=InquiryListResponse)
async def list_inquiries(
    reference_id: Optional[str] = Query(None, description="Filter by reference id"),
    status_filter: Optional[InquiryStatus] = Query(None, alias="status", description="Filter by inquiry status"),
    page_size: Optional[int] = Query(None, ge=1, description="Maximum number of inquiries to return"),
    persona_mock: PersonaMockService = Depends(get_persona_mock)
):
    """
    List inquiries newest first.

    Args:
        reference_id: Exact reference id to match
        status_filter: Exact status to match
        page_size: Maximum number of results, configured default when omitted
        persona_mock: Persona mock engine

    Returns:
        Matching inquiries and the page size applied
    """
    try:
        inquiries = await persona_mock.list_inquiries(
            InquiryFilter(reference_id=reference_id, status=status_filter),
            page_size=page_size,
        )
    except PersonaMockException as e:
        raise_http_error(e)

    return InquiryListResponse(
        items=inquiries,
        total=len(inquiries),
        page_size=page_size or persona_mock.default_page_size,
    )


@router.patch("/inquiries/{inquiry_id}/status", response_model=Inquiry)
async def update_inquiry_status(
    inquiry_id: str,
    request_data: UpdateInquiryStatusRequest,
    persona_mock: PersonaMockService = Depends(get_persona_mock)
):
    """
    Force an inquiry into a status.

    Terminal statuses emit the matching webhook event.

    Raises:
        HTTPException: If the inquiry is not found
    """
    try:
        return await persona_mock.update_inquiry_status(inquiry_id, request_data.status)
    except PersonaMockException as e:
        raise_http_error(e)


@router.post("/inquiries/{inquiry_id}/liveness", response_model=Verification)
async def check_liveness(
    inquiry_id: str,
    persona_mock: PersonaMockService = Depends(get_persona_mock)
):
    """Run a liveness check for an inquiry."""
    try:
        return await persona_mock.check_liveness(inquiry_id)
    except PersonaMockException as e:
        raise_http_error(e)


@router.get("/stats", response_model=StatsResponse)
async def get_stats(persona_mock: PersonaMockService = Depends(get_persona_mock)):
    """Get record, callback and background job counts."""
    return StatsResponse(**persona_mock.get_stats())


@router.post("/reset", response_model=StatsResponse)
async def reset(
    persona_mock: PersonaMockService = Depends(get_persona_mock),
    kyc_service: KYCService = Depends(get_kyc_service)
):
    """
    Drop all inquiries, verifications and webhook callbacks.

    Outstanding background jobs are cancelled. The KYC service callback is
    registered again afterwards.
    """
    persona_mock.clear_all()
    kyc_service.register_webhook()
    return StatsResponse(**persona_mock.get_stats())
