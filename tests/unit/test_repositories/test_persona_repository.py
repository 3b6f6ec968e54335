"""
Unit tests for the inquiry and verification record store.
"""
from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import NotFoundError
from app.models.persona import (
    Inquiry,
    InquiryStatus,
    Verification,
    VerificationKind,
    VerificationStatus,
)
from app.repositories.persona_repository import (
    InquiryRepository,
    PersonaStore,
    VerificationRepository,
)


BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class TestInquiryRepository:
    """Test cases for InquiryRepository."""

    @pytest.fixture
    def repository(self):
        """Empty inquiry repository."""
        return InquiryRepository()

    def test_put_and_get(self, repository):
        """Test storing and fetching by id."""
        inquiry = repository.put(Inquiry(reference_id="cust_1"))

        assert repository.get(inquiry.id) is inquiry
        assert repository.exists(inquiry.id)
        assert repository.count() == 1

    def test_put_replaces_by_id(self, repository):
        """Test putting the same id twice keeps one record."""
        inquiry = repository.put(Inquiry(reference_id="cust_1"))
        replacement = inquiry.model_copy(update={"status": InquiryStatus.PENDING})

        repository.put(replacement)

        assert repository.count() == 1
        assert repository.get(inquiry.id).status == InquiryStatus.PENDING

    def test_get_missing(self, repository):
        """Test missing ids return None or raise NotFoundError."""
        assert repository.get("inq_mock_missing") is None

        with pytest.raises(NotFoundError) as exc_info:
            repository.get_or_raise("inq_mock_missing")

        assert exc_info.value.details["resource_type"] == "inquiry"

    def test_find_orders_newest_first(self, repository):
        """Test find returns newest first regardless of insertion order."""
        older = repository.put(Inquiry(created_at=BASE_TIME))
        newest = repository.put(Inquiry(created_at=BASE_TIME + timedelta(minutes=2)))
        middle = repository.put(Inquiry(created_at=BASE_TIME + timedelta(minutes=1)))

        assert [i.id for i in repository.find()] == [newest.id, middle.id, older.id]

    def test_find_filters(self, repository):
        """Test reference id and status filters are exact and combinable."""
        match = repository.put(Inquiry(reference_id="cust_1", status=InquiryStatus.PENDING))
        repository.put(Inquiry(reference_id="cust_1"))
        repository.put(Inquiry(reference_id="cust_2", status=InquiryStatus.PENDING))

        assert len(repository.find(reference_id="cust_1")) == 2
        assert len(repository.find(status=InquiryStatus.PENDING)) == 2
        assert [i.id for i in repository.find("cust_1", InquiryStatus.PENDING)] == [match.id]
        assert repository.find(reference_id="cust_") == []

    def test_list_all_and_clear(self, repository):
        """Test listing in insertion order and clearing."""
        first = repository.put(Inquiry())
        second = repository.put(Inquiry())

        assert [i.id for i in repository.list_all()] == [first.id, second.id]

        repository.clear()

        assert repository.list_all() == []


class TestPersonaStore:
    """Test cases for PersonaStore."""

    def test_clear_empties_both_kinds(self):
        """Test clear empties inquiries and verifications."""
        store = PersonaStore()
        store.inquiries.put(Inquiry())
        store.verifications.put(Verification(
            id="ver_selfie_1",
            kind=VerificationKind.SELFIE,
            status=VerificationStatus.SUBMITTED,
            created_at=BASE_TIME,
        ))

        store.clear()

        assert store.inquiries.count() == 0
        assert store.verifications.count() == 0

    def test_verification_not_found(self):
        """Test missing verifications raise NotFoundError."""
        with pytest.raises(NotFoundError) as exc_info:
            VerificationRepository().get_or_raise("ver_selfie_missing")

        assert exc_info.value.message == "Verification ver_selfie_missing not found"
