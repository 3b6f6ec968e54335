"""
Verification record store: in-memory storage of inquiries and verifications.
"""
from typing import List, Optional

from app.core.exceptions import NotFoundError
from app.models.persona import Inquiry, InquiryStatus, Verification
from app.repositories.base import InMemoryRepository


class InquiryRepository(InMemoryRepository[Inquiry]):
    """Repository for inquiries."""

    def get_or_raise(self, inquiry_id: str) -> Inquiry:
        """
        Get inquiry by ID.

        Raises:
            NotFoundError: If the inquiry does not exist
        """
        inquiry = self.get(inquiry_id)
        if inquiry is None:
            raise NotFoundError("inquiry", inquiry_id)
        return inquiry

    def find(
        self,
        reference_id: Optional[str] = None,
        status: Optional[InquiryStatus] = None
    ) -> List[Inquiry]:
        """
        Find inquiries by exact reference id and/or status, newest first.

        Inquiries created at the same instant are ordered by insertion,
        most recent insertion first.
        """
        matches = self.get_multi(reference_id=reference_id, status=status)
        ordered = sorted(
            enumerate(matches),
            key=lambda item: (item[1].created_at, item[0]),
            reverse=True
        )
        return [inquiry for _, inquiry in ordered]


class VerificationRepository(InMemoryRepository[Verification]):
    """Repository for verifications."""

    def get_or_raise(self, verification_id: str) -> Verification:
        """
        Get verification by ID.

        Raises:
            NotFoundError: If the verification does not exist
        """
        verification = self.get(verification_id)
        if verification is None:
            raise NotFoundError("verification", verification_id)
        return verification


class PersonaStore:
    """Process-lifetime storage for both entity kinds."""

    def __init__(self):
        self.inquiries = InquiryRepository()
        self.verifications = VerificationRepository()

    def clear(self) -> None:
        """Empty both inquiries and verifications."""
        self.inquiries.clear()
        self.verifications.clear()
