"""
Domain records for the Persona mock verification engine.
"""

from app.models.customer import Customer, CustomerKYCStatus
from app.models.persona import (
    CheckStatus,
    GovernmentIdDocument,
    IdClass,
    Inquiry,
    InquiryEventData,
    InquiryFields,
    InquiryFilter,
    InquiryFieldValue,
    InquiryStatus,
    SelfieData,
    Verification,
    VerificationCheck,
    VerificationEventData,
    VerificationKind,
    VerificationStatus,
    WebhookEvent,
    WebhookEventType,
)

__all__ = [
    # Customer records
    "Customer",
    "CustomerKYCStatus",
    # Inquiry records
    "Inquiry",
    "InquiryFields",
    "InquiryFieldValue",
    "InquiryStatus",
    "InquiryFilter",
    # Verification records
    "Verification",
    "VerificationCheck",
    "VerificationKind",
    "VerificationStatus",
    "CheckStatus",
    "IdClass",
    "GovernmentIdDocument",
    "SelfieData",
    # Webhook events
    "WebhookEvent",
    "WebhookEventType",
    "InquiryEventData",
    "VerificationEventData",
]
