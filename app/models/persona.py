"""
Inquiry, Verification and webhook event records for the Persona mock engine.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    """Current UTC time; default clock for the engine."""
    return datetime.now(timezone.utc)


def generate_id(prefix: str) -> str:
    """Build a kind-prefixed globally unique identifier."""
    return f"{prefix}{uuid4()}"


# Identifier prefixes consumers pattern-match on
INQUIRY_ID_PREFIX = "inq_mock_"
GOVERNMENT_ID_VERIFICATION_PREFIX = "ver_gov_id_"
SELFIE_VERIFICATION_PREFIX = "ver_selfie_"
LIVENESS_VERIFICATION_PREFIX = "ver_liveness_"
EVENT_ID_PREFIX = "evt_"


class InquiryStatus(str, Enum):
    """Inquiry lifecycle status enumeration."""
    CREATED = "created"
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    EXPIRED = "expired"


TERMINAL_STATUSES = frozenset(
    {InquiryStatus.COMPLETED, InquiryStatus.FAILED, InquiryStatus.EXPIRED}
)

# Statuses that reject further evidence. Expired inquiries still accept it.
LOCKED_STATUSES = frozenset({InquiryStatus.COMPLETED, InquiryStatus.FAILED})


class VerificationKind(str, Enum):
    """Kind of evidence a verification records."""
    GOVERNMENT_ID = "government-id"
    SELFIE = "selfie"
    DATABASE = "database"


class VerificationStatus(str, Enum):
    """Verification status enumeration."""
    INITIATED = "initiated"
    SUBMITTED = "submitted"
    PASSED = "passed"
    FAILED = "failed"


class CheckStatus(str, Enum):
    """Status of a single verification sub-check."""
    NOT_APPLICABLE = "not_applicable"
    PASSED = "passed"
    FAILED = "failed"


class IdClass(str, Enum):
    """Government ID document class."""
    DRIVER_LICENSE = "dl"
    PASSPORT = "pp"
    ID_CARD = "id"


class WebhookEventType(str, Enum):
    """Webhook event type enumeration."""
    INQUIRY_CREATED = "inquiry.created"
    INQUIRY_COMPLETED = "inquiry.completed"
    INQUIRY_FAILED = "inquiry.failed"
    INQUIRY_EXPIRED = "inquiry.expired"
    VERIFICATION_PASSED = "verification.passed"
    VERIFICATION_FAILED = "verification.failed"


# Terminal inquiry status -> event emitted when it is reached
STATUS_EVENT_TYPES = {
    InquiryStatus.COMPLETED: WebhookEventType.INQUIRY_COMPLETED,
    InquiryStatus.FAILED: WebhookEventType.INQUIRY_FAILED,
    InquiryStatus.EXPIRED: WebhookEventType.INQUIRY_EXPIRED,
}


class InquiryFieldValue(BaseModel):
    """Typed value collected for an inquiry field."""

    type: str = "string"
    value: str


class InquiryFields(BaseModel):
    """Identity attributes collected by an inquiry."""

    name_first: Optional[InquiryFieldValue] = None
    name_last: Optional[InquiryFieldValue] = None
    birthdate: Optional[InquiryFieldValue] = None
    address_street_1: Optional[InquiryFieldValue] = None
    address_street_2: Optional[InquiryFieldValue] = None
    address_city: Optional[InquiryFieldValue] = None
    address_subdivision: Optional[InquiryFieldValue] = None
    address_postal_code: Optional[InquiryFieldValue] = None
    identification_number: Optional[InquiryFieldValue] = None

    def is_empty(self) -> bool:
        """Check whether no field has been populated."""
        return not self.model_dump(exclude_none=True)


class Inquiry(BaseModel):
    """A single identity-verification session."""

    id: str = Field(default_factory=lambda: generate_id(INQUIRY_ID_PREFIX))
    status: InquiryStatus = InquiryStatus.CREATED
    reference_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    expired_at: Optional[datetime] = None
    fields: InquiryFields = Field(default_factory=InquiryFields)

    @property
    def is_terminal(self) -> bool:
        """Check if the inquiry reached a terminal status."""
        return self.status in TERMINAL_STATUSES

    @property
    def accepts_evidence(self) -> bool:
        """Check if evidence may still be submitted against this inquiry."""
        return self.status not in LOCKED_STATUSES

    def apply_status(self, new_status: InquiryStatus, now: datetime) -> None:
        """
        Set status and stamp the matching terminal timestamp.

        Reaching a terminal status clears the other two terminal timestamps so
        that at most one of them is ever set.
        """
        self.status = new_status

        if new_status == InquiryStatus.COMPLETED:
            self.completed_at, self.failed_at, self.expired_at = now, None, None
        elif new_status == InquiryStatus.FAILED:
            self.completed_at, self.failed_at, self.expired_at = None, now, None
        elif new_status == InquiryStatus.EXPIRED:
            self.completed_at, self.failed_at, self.expired_at = None, None, now


class VerificationCheck(BaseModel):
    """A named sub-check of a verification."""

    name: str
    status: CheckStatus = CheckStatus.PASSED
    reasons: List[str] = Field(default_factory=list)


class Verification(BaseModel):
    """One unit of submitted evidence and its simulated checks."""

    id: str
    kind: VerificationKind
    status: VerificationStatus
    created_at: datetime
    submitted_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    checks: List[VerificationCheck] = Field(default_factory=list)


class GovernmentIdDocument(BaseModel):
    """Government ID evidence submitted against an inquiry."""

    front_photo: Optional[str] = None
    back_photo: Optional[str] = None
    country: str = "US"
    id_class: IdClass = IdClass.DRIVER_LICENSE


class SelfieData(BaseModel):
    """Selfie evidence submitted against an inquiry."""

    image: Optional[str] = None


class InquiryFilter(BaseModel):
    """Exact-match filter for listing inquiries."""

    reference_id: Optional[str] = None
    status: Optional[InquiryStatus] = None


class InquiryEventData(BaseModel):
    """Webhook payload describing an inquiry."""

    type: Literal["inquiry"] = "inquiry"
    id: str
    attributes: Inquiry


class VerificationEventData(BaseModel):
    """Webhook payload describing a verification."""

    type: Literal["verification"] = "verification"
    id: str
    attributes: Verification


WebhookEventData = Annotated[
    Union[InquiryEventData, VerificationEventData], Field(discriminator="type")
]


class WebhookEvent(BaseModel):
    """Notification delivered to registered webhook callbacks."""

    id: str = Field(default_factory=lambda: generate_id(EVENT_ID_PREFIX))
    type: WebhookEventType
    created_at: datetime = Field(default_factory=utcnow)
    data: WebhookEventData

    @classmethod
    def from_entity(
        cls,
        event_type: WebhookEventType,
        entity: Union[Inquiry, Verification],
        created_at: Optional[datetime] = None
    ) -> "WebhookEvent":
        """Build an event carrying a deep snapshot of ``entity``."""
        snapshot = entity.model_copy(deep=True)

        if isinstance(entity, Inquiry):
            data = InquiryEventData(id=entity.id, attributes=snapshot)
        else:
            data = VerificationEventData(id=entity.id, attributes=snapshot)

        return cls(type=event_type, created_at=created_at or utcnow(), data=data)
