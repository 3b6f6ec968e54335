"""
Customer record as seen by the KYC consumer adapter.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class CustomerKYCStatus(str, Enum):
    """Customer-side KYC status enumeration."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    APPROVED = "approved"
    REJECTED = "rejected"


ACTIVE_KYC_STATUSES = frozenset({CustomerKYCStatus.PENDING, CustomerKYCStatus.IN_PROGRESS})


class Customer(BaseModel):
    """Customer whose identity is verified through an inquiry."""

    id: str = Field(..., description="Customer identifier, used as the inquiry reference id")
    email: Optional[str] = Field(None, description="Customer email address")
    first_name: Optional[str] = Field(None, description="Customer's first name")
    last_name: Optional[str] = Field(None, description="Customer's last name")
    date_of_birth: Optional[date] = Field(None, description="Customer's date of birth")
    driver_license_number: Optional[str] = Field(None, description="Driver license or ID number")
    kyc_status: CustomerKYCStatus = Field(
        default=CustomerKYCStatus.PENDING, description="Current KYC status"
    )
    kyc_inquiry_id: Optional[str] = Field(None, description="Active inquiry id, if any")
    kyc_verified_at: Optional[datetime] = Field(None, description="When KYC was approved")

    def __repr__(self) -> str:
        """String representation of the customer."""
        return f"<Customer(id={self.id}, kyc_status={self.kyc_status.value})>"

    @property
    def is_verified(self) -> bool:
        """Check if the customer passed KYC."""
        return self.kyc_status == CustomerKYCStatus.APPROVED

    @property
    def has_active_inquiry(self) -> bool:
        """Check if the customer has an inquiry still in flight."""
        return bool(self.kyc_inquiry_id) and self.kyc_status in ACTIVE_KYC_STATUSES
