"""
Unit tests for the KYC service consumer adapter and orchestration.
"""
from datetime import date
from unittest.mock import AsyncMock, patch

import pytest

from app.core.exceptions import (
    BusinessLogicError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    ServiceError,
)
from app.models.customer import Customer, CustomerKYCStatus
from app.models.persona import (
    GovernmentIdDocument,
    InquiryStatus,
    SelfieData,
)
from app.services.kyc_service import KYCService


@pytest.fixture
def customer():
    """Customer without a license number on file."""
    return Customer(
        id="cust_123",
        email="jane@example.com",
        first_name="Jane",
        last_name="Roe",
    )


@pytest.fixture
def kyc_service(persona_mock, customer_directory, customer):
    """KYC service over the manual-scheduling engine."""
    customer_directory.add_customer(customer)
    return KYCService(persona_mock, customer_directory)


@pytest.fixture
def document():
    """Valid government ID document."""
    return GovernmentIdDocument(front_photo="front.png")


class TestKYCServiceRegistration:
    """Test cases for callback registration."""

    def test_registers_callback_on_construction(self, kyc_service, persona_mock):
        """Test the service registers itself under kyc-service."""
        assert persona_mock.dispatcher.callback_names == ["kyc-service"]

    def test_custom_callback_name(self, persona_mock, customer_directory):
        """Test the callback name is configurable."""
        KYCService(persona_mock, customer_directory, callback_name="crm")

        assert persona_mock.dispatcher.callback_names == ["crm"]

    def test_register_webhook_after_reset(self, kyc_service, persona_mock):
        """Test the callback can be restored after a bulk reset."""
        persona_mock.clear_all()
        kyc_service.register_webhook()

        assert persona_mock.get_stats()["webhook_callbacks"] == 1


class TestKYCServiceCreateInquiry:
    """Test cases for inquiry creation."""

    @pytest.mark.asyncio
    async def test_create_inquiry(self, kyc_service, customer_directory):
        """Test an inquiry is created and linked to the customer."""
        inquiry = await kyc_service.create_inquiry("cust_123")

        assert inquiry.reference_id == "cust_123"
        assert inquiry.status == InquiryStatus.CREATED

        customer = await customer_directory.find_customer("cust_123")
        assert customer.kyc_inquiry_id == inquiry.id
        assert customer.kyc_status == CustomerKYCStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_create_inquiry_returns_active_inquiry(self, kyc_service, persona_mock):
        """Test an in-flight inquiry is reused."""
        first = await kyc_service.create_inquiry("cust_123")
        second = await kyc_service.create_inquiry("cust_123")

        assert second.id == first.id
        assert persona_mock.get_stats()["inquiries"] == 1

    @pytest.mark.asyncio
    async def test_create_inquiry_unknown_customer(self, kyc_service):
        """Test unknown customers raise NotFoundError."""
        with pytest.raises(NotFoundError):
            await kyc_service.create_inquiry("cust_missing")

    @pytest.mark.asyncio
    async def test_create_inquiry_already_verified(self, kyc_service, customer_directory):
        """Test verified customers cannot start a new inquiry."""
        await customer_directory.update_customer(
            "cust_123", {"kyc_status": CustomerKYCStatus.APPROVED}
        )

        with pytest.raises(BusinessLogicError):
            await kyc_service.create_inquiry("cust_123")

    @pytest.mark.asyncio
    async def test_create_inquiry_unexpected_error_wrapped(self, kyc_service, persona_mock):
        """Test unexpected errors surface as ServiceError."""
        with patch.object(
            persona_mock, "create_inquiry", AsyncMock(side_effect=RuntimeError("store down"))
        ):
            with pytest.raises(ServiceError) as exc_info:
                await kyc_service.create_inquiry("cust_123")

        assert exc_info.value.message == "KYC inquiry creation failed"


class TestKYCServiceEvidence:
    """Test cases for evidence submission and automatic decisioning."""

    @pytest.mark.asyncio
    async def test_get_inquiry_requires_known_customer(self, kyc_service, persona_mock):
        """Test inquiries referencing unknown customers are not exposed."""
        orphan = await persona_mock.create_inquiry("cust_unknown")

        with pytest.raises(NotFoundError):
            await kyc_service.get_inquiry(orphan.id)

    @pytest.mark.asyncio
    async def test_submit_government_id_without_license(self, kyc_service, document, manual_scheduler):
        """Test no automatic decision is scheduled without a license number."""
        inquiry = await kyc_service.create_inquiry("cust_123")

        verification = await kyc_service.submit_government_id(inquiry.id, document)

        assert verification.id.startswith("ver_gov_id_")
        assert manual_scheduler.queued == []

    @pytest.mark.asyncio
    async def test_submit_government_id_triggers_auto_approval(
        self, kyc_service, customer_directory, document, manual_scheduler
    ):
        """Test a license ending in 0000 leads to an approved customer."""
        await customer_directory.update_customer(
            "cust_123", {"driver_license_number": "D5550000"}
        )
        inquiry = await kyc_service.create_inquiry("cust_123")

        await kyc_service.submit_government_id(inquiry.id, document)
        assert len(manual_scheduler.queued) == 1

        await manual_scheduler.run_all()

        customer = await customer_directory.find_customer("cust_123")
        assert customer.kyc_status == CustomerKYCStatus.APPROVED
        assert customer.kyc_verified_at is not None
        assert customer.first_name == "John"
        assert customer.last_name == "Doe"
        assert customer.date_of_birth == date(1990, 1, 1)
        assert customer.driver_license_number == "D1234560000"

    @pytest.mark.asyncio
    async def test_submit_government_id_triggers_auto_decline(
        self, kyc_service, customer_directory, document, manual_scheduler
    ):
        """Test a license ending in 9999 leads to a rejected customer."""
        await customer_directory.update_customer(
            "cust_123", {"driver_license_number": "D5559999"}
        )
        inquiry = await kyc_service.create_inquiry("cust_123")

        await kyc_service.submit_government_id(inquiry.id, document)
        await manual_scheduler.run_all()

        customer = await customer_directory.find_customer("cust_123")
        assert customer.kyc_status == CustomerKYCStatus.REJECTED
        assert customer.first_name == "Jane"

    @pytest.mark.asyncio
    async def test_submit_to_completed_inquiry(self, kyc_service, persona_mock, document):
        """Test completed inquiries reject evidence with InvalidStateError."""
        inquiry = await kyc_service.create_inquiry("cust_123")
        await persona_mock.update_inquiry_status(inquiry.id, InquiryStatus.COMPLETED)

        with pytest.raises(InvalidStateError):
            await kyc_service.submit_government_id(inquiry.id, document)
        with pytest.raises(InvalidStateError):
            await kyc_service.submit_selfie(inquiry.id, SelfieData(image="face.png"))

    @pytest.mark.asyncio
    async def test_submit_selfie(self, kyc_service):
        """Test selfie submission passes through to the engine."""
        inquiry = await kyc_service.create_inquiry("cust_123")

        verification = await kyc_service.submit_selfie(inquiry.id, SelfieData(image="face.png"))

        assert verification.id.startswith("ver_selfie_")

    @pytest.mark.asyncio
    async def test_submit_selfie_empty_image(self, kyc_service):
        """Test input errors pass through unchanged."""
        inquiry = await kyc_service.create_inquiry("cust_123")

        with pytest.raises(InvalidInputError):
            await kyc_service.submit_selfie(inquiry.id, SelfieData(image=""))


class TestKYCServiceDecisions:
    """Test cases for manual approve/decline helpers and webhook projection."""

    @pytest.mark.asyncio
    async def test_approve_inquiry(self, kyc_service, customer_directory):
        """Test manual approval completes the inquiry and approves the customer."""
        inquiry = await kyc_service.create_inquiry("cust_123")

        approved = await kyc_service.approve_inquiry(inquiry.id)

        assert approved.status == InquiryStatus.COMPLETED
        customer = await customer_directory.find_customer("cust_123")
        assert customer.is_verified

    @pytest.mark.asyncio
    async def test_decline_inquiry(self, kyc_service, customer_directory):
        """Test manual decline fails the inquiry and rejects the customer."""
        inquiry = await kyc_service.create_inquiry("cust_123")

        declined = await kyc_service.decline_inquiry(inquiry.id, "Document expired")

        assert declined.status == InquiryStatus.FAILED
        customer = await customer_directory.find_customer("cust_123")
        assert customer.kyc_status == CustomerKYCStatus.REJECTED

    @pytest.mark.asyncio
    async def test_approve_unknown_inquiry(self, kyc_service):
        """Test approving an unknown inquiry raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await kyc_service.approve_inquiry("inq_mock_missing")

    @pytest.mark.asyncio
    async def test_expired_inquiry_resets_customer(self, kyc_service, persona_mock, customer_directory):
        """Test expiry returns the customer to pending and allows a new inquiry."""
        inquiry = await kyc_service.create_inquiry("cust_123")

        await persona_mock.update_inquiry_status(inquiry.id, InquiryStatus.EXPIRED)

        customer = await customer_directory.find_customer("cust_123")
        assert customer.kyc_status == CustomerKYCStatus.PENDING
        assert customer.kyc_inquiry_id is None

        fresh = await kyc_service.create_inquiry("cust_123")
        assert fresh.id != inquiry.id

    @pytest.mark.asyncio
    async def test_inquiry_without_reference_id_ignored(self, kyc_service, persona_mock, customer_directory):
        """Test terminal events for unreferenced inquiries change no customer."""
        inquiry = await persona_mock.create_inquiry(None)

        await persona_mock.update_inquiry_status(inquiry.id, InquiryStatus.COMPLETED)

        customer = await customer_directory.find_customer("cust_123")
        assert customer.kyc_status == CustomerKYCStatus.PENDING

    @pytest.mark.asyncio
    async def test_non_terminal_events_ignored(self, kyc_service, persona_mock, customer_directory):
        """Test inquiry.created does not touch the customer."""
        with patch.object(customer_directory, "update_customer", AsyncMock()) as update:
            inquiry = await persona_mock.create_inquiry("cust_123")
            await persona_mock.update_inquiry_status(inquiry.id, InquiryStatus.PENDING)

        update.assert_not_called()

    @pytest.mark.asyncio
    async def test_handler_failure_swallowed(self, kyc_service, persona_mock, customer_directory):
        """Test projection failures are logged, not raised."""
        inquiry = await persona_mock.create_inquiry("cust_gone")

        # No customer cust_gone exists; the update fails inside the handler
        updated = await persona_mock.update_inquiry_status(inquiry.id, InquiryStatus.FAILED)

        assert updated.status == InquiryStatus.FAILED
