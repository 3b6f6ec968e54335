"""
Persona mock service: in-memory simulation of a KYC provider's inquiry workflow.

No network calls are made. Inquiries and verifications live in process memory,
lifecycle events are delivered to in-process webhook callbacks, and automatic
decisions are simulated from the submitted ID number.
"""
import asyncio
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from app.core.config import settings
from app.core.exceptions import InvalidInputError, InvalidStateError
from app.models.persona import (
    GOVERNMENT_ID_VERIFICATION_PREFIX,
    LIVENESS_VERIFICATION_PREFIX,
    SELFIE_VERIFICATION_PREFIX,
    STATUS_EVENT_TYPES,
    GovernmentIdDocument,
    Inquiry,
    InquiryFields,
    InquiryFieldValue,
    InquiryFilter,
    InquiryStatus,
    SelfieData,
    Verification,
    VerificationCheck,
    VerificationKind,
    VerificationStatus,
    WebhookEventType,
    generate_id,
    utcnow,
)
from app.repositories.persona_repository import PersonaStore
from app.services.outcome_simulator import OutcomeSimulator
from app.services.webhook_dispatcher import WebhookCallback, WebhookDispatcher
from app.tasks.scheduler import AsyncioTaskScheduler, ScheduledTask, TaskScheduler
from app.utils.logging import get_logger, log_business_event

logger = get_logger(__name__)


# Sub-checks simulated for each evidence kind
GOVERNMENT_ID_CHECKS = ("id-photo-quality", "id-authenticity", "id-number-match")
SELFIE_CHECKS = ("selfie-quality", "liveness-check", "selfie-match")
LIVENESS_CHECKS = ("liveness-detected",)


def approved_identity_fields() -> InquiryFields:
    """Identity payload recorded on auto-approved inquiries."""
    return InquiryFields(
        name_first=InquiryFieldValue(type="string", value="John"),
        name_last=InquiryFieldValue(type="string", value="Doe"),
        birthdate=InquiryFieldValue(type="date", value="1990-01-01"),
        address_street_1=InquiryFieldValue(type="string", value="123 Main St"),
        address_city=InquiryFieldValue(type="string", value="San Francisco"),
        address_subdivision=InquiryFieldValue(type="string", value="CA"),
        address_postal_code=InquiryFieldValue(type="string", value="94102"),
        identification_number=InquiryFieldValue(type="string", value="D1234560000"),
    )


class PersonaMockService:
    """Inquiry lifecycle engine and public surface of the Persona mock."""

    def __init__(
        self,
        store: Optional[PersonaStore] = None,
        dispatcher: Optional[WebhookDispatcher] = None,
        scheduler: Optional[TaskScheduler] = None,
        processing_delay: Optional[float] = None,
        default_page_size: Optional[int] = None,
        environment: Optional[str] = None,
        clock: Callable[[], datetime] = utcnow,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        """
        Initialize the engine.

        Args:
            store: Record store, a fresh one by default
            dispatcher: Webhook dispatcher, a fresh one by default
            scheduler: Background job scheduler, asyncio-based by default
            processing_delay: Simulated latency in seconds for auto decisions
            default_page_size: Page size used when listing without one
            environment: Environment recorded when creating inquiries
            clock: Source of timestamps
            sleep: Coroutine function used to wait out the processing delay
        """
        self.store = store or PersonaStore()
        self.dispatcher = dispatcher or WebhookDispatcher(clock=clock)
        self.scheduler = scheduler or AsyncioTaskScheduler()
        self.processing_delay = (
            settings.PERSONA_PROCESSING_DELAY_SECONDS
            if processing_delay is None else processing_delay
        )
        self.default_page_size = default_page_size or settings.PERSONA_DEFAULT_PAGE_SIZE
        self.environment = environment or settings.PERSONA_ENVIRONMENT
        self._clock = clock
        self._sleep = sleep
        self.simulator = OutcomeSimulator(self, self.scheduler, self.processing_delay)

    # Inquiries

    async def create_inquiry(
        self,
        reference_id: Optional[str],
        environment: Optional[str] = None
    ) -> Inquiry:
        """
        Create a new inquiry in ``created`` status and emit ``inquiry.created``.

        Args:
            reference_id: Caller's correlation key, usually a customer id
            environment: ``sandbox`` or ``production``; logged only

        Returns:
            Created inquiry
        """
        logger.info(
            "Creating mock Persona inquiry",
            reference_id=reference_id,
            environment=environment or self.environment,
        )

        inquiry = Inquiry(reference_id=reference_id, created_at=self._clock())
        self.store.inquiries.put(inquiry)

        log_business_event(
            "inquiry_created", "inquiry", inquiry.id, reference_id=reference_id
        )

        await self.dispatcher.emit(WebhookEventType.INQUIRY_CREATED, inquiry)

        return inquiry

    async def retrieve_inquiry(self, inquiry_id: str) -> Inquiry:
        """
        Retrieve an inquiry by ID.

        Raises:
            NotFoundError: If the inquiry does not exist
        """
        return self.store.inquiries.get_or_raise(inquiry_id)

    async def update_inquiry_status(
        self,
        inquiry_id: str,
        status: Union[InquiryStatus, str]
    ) -> Inquiry:
        """
        Move an inquiry to ``status``.

        Terminal statuses stamp their timestamp and emit the matching
        ``inquiry.<status>`` event after the record is stored. Moving to
        ``created`` or ``pending`` emits nothing.

        Raises:
            NotFoundError: If the inquiry does not exist
            InvalidInputError: If ``status`` is not an inquiry status
        """
        new_status = self._coerce_status(status)
        inquiry = await self.retrieve_inquiry(inquiry_id)
        old_status = inquiry.status

        logger.info(
            "Updating inquiry status",
            inquiry_id=inquiry_id,
            old_status=old_status.value,
            new_status=new_status.value,
        )

        inquiry.apply_status(new_status, self._clock())
        self.store.inquiries.put(inquiry)

        log_business_event(
            "inquiry_status_changed",
            "inquiry",
            inquiry_id,
            details={"old_status": old_status.value, "new_status": new_status.value},
        )

        event_type = STATUS_EVENT_TYPES.get(new_status)
        if event_type is not None:
            await self.dispatcher.emit(event_type, inquiry)

        return inquiry

    async def list_inquiries(
        self,
        filters: Optional[Union[InquiryFilter, Dict[str, Any]]] = None,
        page_size: Optional[int] = None
    ) -> List[Inquiry]:
        """
        List inquiries newest first.

        Args:
            filters: Exact match on ``reference_id`` and/or ``status``
            page_size: Maximum number of results, defaults to the configured size

        Returns:
            At most ``page_size`` inquiries

        Raises:
            InvalidInputError: If ``page_size`` is negative
        """
        if isinstance(filters, dict):
            filters = InquiryFilter(**filters)
        filters = filters or InquiryFilter()

        size = page_size or self.default_page_size
        if size < 1:
            raise InvalidInputError("Page size must be positive", field="page_size")

        inquiries = self.store.inquiries.find(
            reference_id=filters.reference_id, status=filters.status
        )
        return inquiries[:size]

    # Evidence

    async def submit_government_id(
        self,
        inquiry_id: str,
        document: GovernmentIdDocument
    ) -> Verification:
        """
        Submit a government ID against an inquiry.

        Raises:
            NotFoundError: If the inquiry does not exist
            InvalidInputError: If the front photo is empty
            InvalidStateError: If the inquiry is completed or failed
        """
        inquiry = await self.retrieve_inquiry(inquiry_id)

        logger.info(
            "Submitting government ID",
            inquiry_id=inquiry_id,
            country=document.country,
            id_class=document.id_class.value,
        )

        if not document.front_photo:
            raise InvalidInputError("Front photo is required", field="front_photo")

        verification = self._record_submission(
            inquiry,
            VerificationKind.GOVERNMENT_ID,
            GOVERNMENT_ID_VERIFICATION_PREFIX,
            GOVERNMENT_ID_CHECKS,
            action="document",
        )

        logger.info(
            "Government ID submitted",
            inquiry_id=inquiry_id,
            verification_id=verification.id,
        )
        return verification

    async def submit_selfie(self, inquiry_id: str, selfie: SelfieData) -> Verification:
        """
        Submit a selfie against an inquiry.

        Raises:
            NotFoundError: If the inquiry does not exist
            InvalidInputError: If the image is empty
            InvalidStateError: If the inquiry is completed or failed
        """
        inquiry = await self.retrieve_inquiry(inquiry_id)

        logger.info("Submitting selfie", inquiry_id=inquiry_id)

        if not selfie.image:
            raise InvalidInputError("Selfie image is required", field="image")

        verification = self._record_submission(
            inquiry,
            VerificationKind.SELFIE,
            SELFIE_VERIFICATION_PREFIX,
            SELFIE_CHECKS,
            action="selfie",
        )

        logger.info(
            "Selfie submitted",
            inquiry_id=inquiry_id,
            verification_id=verification.id,
        )
        return verification

    async def check_liveness(self, inquiry_id: str) -> Verification:
        """
        Run the synchronous liveness check; it passes immediately.

        Raises:
            NotFoundError: If the inquiry does not exist
        """
        await self.retrieve_inquiry(inquiry_id)

        logger.info("Checking liveness", inquiry_id=inquiry_id)

        now = self._clock()
        verification = Verification(
            id=generate_id(LIVENESS_VERIFICATION_PREFIX),
            kind=VerificationKind.DATABASE,
            status=VerificationStatus.PASSED,
            created_at=now,
            submitted_at=now,
            completed_at=now,
            checks=[VerificationCheck(name=name) for name in LIVENESS_CHECKS],
        )
        self.store.verifications.put(verification)

        return verification

    def _record_submission(
        self,
        inquiry: Inquiry,
        kind: VerificationKind,
        prefix: str,
        check_names: tuple,
        action: str
    ) -> Verification:
        """Guard the inquiry state, store a submitted verification and advance to pending."""
        if not inquiry.accepts_evidence:
            raise InvalidStateError(inquiry.status.value, action, inquiry_id=inquiry.id)

        now = self._clock()
        verification = Verification(
            id=generate_id(prefix),
            kind=kind,
            status=VerificationStatus.SUBMITTED,
            created_at=now,
            submitted_at=now,
            checks=[VerificationCheck(name=name) for name in check_names],
        )
        self.store.verifications.put(verification)

        if inquiry.status == InquiryStatus.CREATED:
            inquiry.status = InquiryStatus.PENDING
            self.store.inquiries.put(inquiry)

        return verification

    async def retrieve_verification(self, verification_id: str) -> Verification:
        """
        Retrieve a verification by ID.

        Raises:
            NotFoundError: If the verification does not exist
        """
        return self.store.verifications.get_or_raise(verification_id)

    async def list_verifications(self) -> List[Verification]:
        """List every verification in submission order."""
        return self.store.verifications.list_all()

    # Decisions

    async def auto_approve_inquiry(self, inquiry_id: str) -> Inquiry:
        """
        Populate verified identity fields, wait the processing delay, complete.

        Raises:
            NotFoundError: If the inquiry does not exist, now or after the delay
        """
        inquiry = await self.retrieve_inquiry(inquiry_id)

        logger.info("Auto-approving inquiry", inquiry_id=inquiry_id)

        inquiry.fields = approved_identity_fields()

        await self._sleep(self.processing_delay)

        return await self.update_inquiry_status(inquiry_id, InquiryStatus.COMPLETED)

    async def auto_decline_inquiry(self, inquiry_id: str, reason: str) -> Inquiry:
        """
        Wait the processing delay, then fail the inquiry.

        The reason is logged, not stored on the inquiry.

        Raises:
            NotFoundError: If the inquiry does not exist, now or after the delay
        """
        await self.retrieve_inquiry(inquiry_id)

        logger.info("Auto-declining inquiry", inquiry_id=inquiry_id, reason=reason)

        await self._sleep(self.processing_delay)

        return await self.update_inquiry_status(inquiry_id, InquiryStatus.FAILED)

    async def process_automatic_verification(
        self,
        inquiry_id: str,
        id_number: str
    ) -> Optional[ScheduledTask]:
        """
        Schedule the automatic decision for ``id_number`` and return at once.

        Returns:
            Handle of the background job, or None when left for manual review
        """
        logger.info(
            "Processing automatic verification",
            inquiry_id=inquiry_id,
            id_number=id_number,
        )
        return self.simulator.process(inquiry_id, id_number)

    # Webhooks

    def register_webhook_callback(self, callback_id: str, callback: WebhookCallback) -> None:
        """Register a webhook callback, replacing one with the same id."""
        self.dispatcher.register(callback_id, callback)

    def unregister_webhook_callback(self, callback_id: str) -> None:
        """Unregister a webhook callback if present."""
        self.dispatcher.unregister(callback_id)

    # Administration

    def clear_all(self) -> None:
        """Cancel scheduled jobs and drop all inquiries, verifications and callbacks."""
        cancelled = self.scheduler.cancel_all()
        self.store.clear()
        self.dispatcher.clear()
        logger.info("All mock Persona data cleared", cancelled_tasks=cancelled)

    def get_stats(self) -> Dict[str, int]:
        """Counts of stored records, callbacks and outstanding jobs."""
        return {
            "inquiries": self.store.inquiries.count(),
            "verifications": self.store.verifications.count(),
            "webhook_callbacks": self.dispatcher.count,
            "scheduled_tasks": self.scheduler.pending_count,
        }

    @staticmethod
    def _coerce_status(status: Union[InquiryStatus, str]) -> InquiryStatus:
        """Convert a raw status value to ``InquiryStatus``."""
        try:
            return InquiryStatus(status)
        except ValueError:
            raise InvalidInputError(f"Unknown inquiry status: {status}", field="status")
