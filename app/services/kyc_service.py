"""
KYC service: customer-facing verification workflows on top of the Persona mock.

Creates inquiries for customers, forwards evidence, triggers automatic
decisioning and projects terminal inquiry outcomes back onto customer records
through the registered webhook callback.
"""

from datetime import date
from typing import Any, Dict, Optional

from app.core.config import settings
from app.core.exceptions import (
    BusinessLogicError,
    InvalidStateError,
    PersonaMockException,
    ServiceError,
)
from app.models.customer import CustomerKYCStatus
from app.models.persona import (
    GovernmentIdDocument,
    Inquiry,
    SelfieData,
    Verification,
    WebhookEvent,
    WebhookEventType,
    utcnow,
)
from app.repositories.customer_repository import CustomerDirectory
from app.services.persona_mock import PersonaMockService
from app.utils.logging import get_logger, log_business_event

logger = get_logger(__name__)


class KYCService:
    """Service for customer KYC verification workflows."""

    def __init__(
        self,
        engine: PersonaMockService,
        customers: CustomerDirectory,
        callback_name: Optional[str] = None
    ):
        """
        Initialize KYC service and register its webhook callback.

        Args:
            engine: Persona mock engine
            customers: Directory owning customer records
            callback_name: Name the webhook callback is registered under
        """
        self.engine = engine
        self.customers = customers
        self.callback_name = callback_name or settings.KYC_WEBHOOK_CALLBACK_NAME

        self.register_webhook()

    def register_webhook(self) -> None:
        """Register (or re-register after a reset) the webhook callback."""
        self.engine.register_webhook_callback(self.callback_name, self.handle_webhook)

    async def create_inquiry(self, customer_id: str) -> Inquiry:
        """
        Create a KYC inquiry for a customer.

        An inquiry still in flight for the customer is returned instead of
        creating a new one.

        Args:
            customer_id: Customer ID, used as the inquiry reference id

        Returns:
            New or existing inquiry

        Raises:
            NotFoundError: If the customer does not exist
            BusinessLogicError: If the customer is already verified
            ServiceError: If the inquiry could not be created
        """
        logger.info("Creating KYC inquiry", customer_id=customer_id)

        try:
            customer = await self.customers.find_customer(customer_id)

            if customer.is_verified:
                raise BusinessLogicError("Customer is already verified", customer_id=customer_id)

            if customer.has_active_inquiry:
                existing = await self.engine.retrieve_inquiry(customer.kyc_inquiry_id)
                logger.info(
                    "Returning existing inquiry",
                    customer_id=customer_id,
                    inquiry_id=existing.id,
                )
                return existing

            inquiry = await self.engine.create_inquiry(
                reference_id=customer_id, environment=self.engine.environment
            )

            await self.customers.update_customer(customer_id, {
                "kyc_inquiry_id": inquiry.id,
                "kyc_status": CustomerKYCStatus.IN_PROGRESS,
            })

            logger.info(
                "KYC inquiry created",
                customer_id=customer_id,
                inquiry_id=inquiry.id,
            )
            return inquiry

        except PersonaMockException:
            raise
        except Exception as e:
            logger.error(
                "Failed to create KYC inquiry",
                customer_id=customer_id,
                error=str(e),
                exc_info=True,
            )
            raise ServiceError("KYC inquiry creation failed")

    async def get_inquiry(self, inquiry_id: str) -> Inquiry:
        """
        Get an inquiry that belongs to a known customer.

        Raises:
            NotFoundError: If the inquiry or its customer does not exist
            ServiceError: If retrieval failed unexpectedly
        """
        logger.debug("Retrieving KYC inquiry", inquiry_id=inquiry_id)

        try:
            inquiry = await self.engine.retrieve_inquiry(inquiry_id)

            if inquiry.reference_id:
                await self.customers.find_customer(inquiry.reference_id)

            return inquiry

        except PersonaMockException:
            raise
        except Exception as e:
            logger.error(
                "Failed to retrieve KYC inquiry",
                inquiry_id=inquiry_id,
                error=str(e),
                exc_info=True,
            )
            raise ServiceError("KYC inquiry retrieval failed")

    async def submit_government_id(
        self,
        inquiry_id: str,
        document: GovernmentIdDocument
    ) -> Verification:
        """
        Submit a government ID and trigger automatic decisioning.

        Automatic decisioning runs in the background when the customer has a
        driver license number on file.

        Raises:
            NotFoundError: If the inquiry or its customer does not exist
            InvalidInputError: If the front photo is empty
            InvalidStateError: If the inquiry is completed or failed
            ServiceError: If submission failed unexpectedly
        """
        logger.info(
            "Submitting government ID",
            inquiry_id=inquiry_id,
            country=document.country,
            id_class=document.id_class.value,
        )

        try:
            inquiry = await self.get_inquiry(inquiry_id)
            self._ensure_accepts_evidence(inquiry, "document")

            verification = await self.engine.submit_government_id(inquiry_id, document)

            log_business_event(
                "verification_submitted",
                "verification",
                verification.id,
                inquiry_id=inquiry_id,
            )

            if inquiry.reference_id:
                customer = await self.customers.find_customer(inquiry.reference_id)
                if customer.driver_license_number:
                    await self.engine.process_automatic_verification(
                        inquiry_id, customer.driver_license_number
                    )

            return verification

        except PersonaMockException:
            raise
        except Exception as e:
            logger.error(
                "Failed to submit government ID",
                inquiry_id=inquiry_id,
                error=str(e),
                exc_info=True,
            )
            raise ServiceError("Government ID submission failed")

    async def submit_selfie(self, inquiry_id: str, selfie: SelfieData) -> Verification:
        """
        Submit a selfie for an inquiry.

        Raises:
            NotFoundError: If the inquiry or its customer does not exist
            InvalidInputError: If the image is empty
            InvalidStateError: If the inquiry is completed or failed
            ServiceError: If submission failed unexpectedly
        """
        logger.info("Submitting selfie", inquiry_id=inquiry_id)

        try:
            inquiry = await self.get_inquiry(inquiry_id)
            self._ensure_accepts_evidence(inquiry, "selfie")

            verification = await self.engine.submit_selfie(inquiry_id, selfie)

            log_business_event(
                "verification_submitted",
                "verification",
                verification.id,
                inquiry_id=inquiry_id,
            )
            return verification

        except PersonaMockException:
            raise
        except Exception as e:
            logger.error(
                "Failed to submit selfie",
                inquiry_id=inquiry_id,
                error=str(e),
                exc_info=True,
            )
            raise ServiceError("Selfie submission failed")

    async def approve_inquiry(self, inquiry_id: str) -> Inquiry:
        """
        Approve an inquiry through the auto-approve path (test helper).

        Raises:
            NotFoundError: If the inquiry or its customer does not exist
            ServiceError: If approval failed unexpectedly
        """
        logger.info("Manually approving inquiry", inquiry_id=inquiry_id)

        try:
            await self.get_inquiry(inquiry_id)
            inquiry = await self.engine.auto_approve_inquiry(inquiry_id)

            logger.info(
                "Inquiry manually approved",
                inquiry_id=inquiry_id,
                status=inquiry.status.value,
            )
            return inquiry

        except PersonaMockException:
            raise
        except Exception as e:
            logger.error(
                "Failed to approve inquiry",
                inquiry_id=inquiry_id,
                error=str(e),
                exc_info=True,
            )
            raise ServiceError("Inquiry approval failed")

    async def decline_inquiry(self, inquiry_id: str, reason: str) -> Inquiry:
        """
        Decline an inquiry through the auto-decline path (test helper).

        Raises:
            NotFoundError: If the inquiry or its customer does not exist
            ServiceError: If decline failed unexpectedly
        """
        logger.info("Manually declining inquiry", inquiry_id=inquiry_id, reason=reason)

        try:
            await self.get_inquiry(inquiry_id)
            inquiry = await self.engine.auto_decline_inquiry(inquiry_id, reason)

            logger.info(
                "Inquiry manually declined",
                inquiry_id=inquiry_id,
                status=inquiry.status.value,
                reason=reason,
            )
            return inquiry

        except PersonaMockException:
            raise
        except Exception as e:
            logger.error(
                "Failed to decline inquiry",
                inquiry_id=inquiry_id,
                error=str(e),
                exc_info=True,
            )
            raise ServiceError("Inquiry decline failed")

    async def handle_webhook(self, event: WebhookEvent) -> None:
        """
        Project terminal inquiry events onto the customer record.

        Errors are logged and swallowed; webhook delivery never fails.

        Args:
            event: Event emitted by the engine
        """
        logger.info(
            "KYC webhook received",
            event_type=event.type.value,
            event_id=event.id,
            data_id=event.data.id,
        )

        handlers = {
            WebhookEventType.INQUIRY_COMPLETED: self._handle_inquiry_completed,
            WebhookEventType.INQUIRY_FAILED: self._handle_inquiry_failed,
            WebhookEventType.INQUIRY_EXPIRED: self._handle_inquiry_expired,
        }

        handler = handlers.get(event.type)
        if handler is None:
            logger.debug("Unhandled webhook event", event_type=event.type.value)
            return

        try:
            await handler(event)
        except Exception as e:
            logger.error(
                "Failed to handle webhook event",
                event_type=event.type.value,
                event_id=event.id,
                error=str(e),
                exc_info=True,
            )

    async def _handle_inquiry_completed(self, event: WebhookEvent) -> None:
        """Mark the customer approved and copy verified identity fields."""
        inquiry = await self._resolve_event_inquiry(event)
        if inquiry is None:
            return

        update_data: Dict[str, Any] = {
            "kyc_status": CustomerKYCStatus.APPROVED,
            "kyc_verified_at": utcnow(),
        }

        fields = inquiry.fields
        if fields.name_first and fields.name_first.value:
            update_data["first_name"] = fields.name_first.value
        if fields.name_last and fields.name_last.value:
            update_data["last_name"] = fields.name_last.value
        if fields.birthdate and fields.birthdate.value:
            update_data["date_of_birth"] = date.fromisoformat(fields.birthdate.value)
        if fields.identification_number and fields.identification_number.value:
            update_data["driver_license_number"] = fields.identification_number.value

        await self.customers.update_customer(inquiry.reference_id, update_data)

        log_business_event(
            "customer_kyc_approved", "customer", inquiry.reference_id, inquiry_id=inquiry.id
        )

    async def _handle_inquiry_failed(self, event: WebhookEvent) -> None:
        """Mark the customer rejected."""
        inquiry = await self._resolve_event_inquiry(event)
        if inquiry is None:
            return

        await self.customers.update_customer(
            inquiry.reference_id, {"kyc_status": CustomerKYCStatus.REJECTED}
        )

        log_business_event(
            "customer_kyc_rejected", "customer", inquiry.reference_id, inquiry_id=inquiry.id
        )

    async def _handle_inquiry_expired(self, event: WebhookEvent) -> None:
        """Reset the customer to pending so a new inquiry can be created."""
        inquiry = await self._resolve_event_inquiry(event)
        if inquiry is None:
            return

        await self.customers.update_customer(inquiry.reference_id, {
            "kyc_status": CustomerKYCStatus.PENDING,
            "kyc_inquiry_id": None,
        })

        log_business_event(
            "customer_kyc_expired", "customer", inquiry.reference_id, inquiry_id=inquiry.id
        )

    async def _resolve_event_inquiry(self, event: WebhookEvent) -> Optional[Inquiry]:
        """Re-fetch the event's inquiry; None when it has no reference id."""
        inquiry = await self.engine.retrieve_inquiry(event.data.id)

        if not inquiry.reference_id:
            logger.warning("Inquiry has no reference_id", inquiry_id=inquiry.id)
            return None

        return inquiry

    @staticmethod
    def _ensure_accepts_evidence(inquiry: Inquiry, action: str) -> None:
        """Raise if the inquiry is completed or failed."""
        if not inquiry.accepts_evidence:
            raise InvalidStateError(inquiry.status.value, action, inquiry_id=inquiry.id)
