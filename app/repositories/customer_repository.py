"""
Customer directory used by the KYC consumer adapter.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from app.core.exceptions import NotFoundError
from app.models.customer import Customer
from app.repositories.base import InMemoryRepository
from app.utils.logging import get_logger

logger = get_logger(__name__)


class CustomerDirectory(ABC):
    """Abstract interface over the store that owns customer records."""

    @abstractmethod
    async def find_customer(self, customer_id: str) -> Customer:
        """
        Get customer by ID.

        Args:
            customer_id: Customer ID

        Returns:
            Customer record

        Raises:
            NotFoundError: If the customer does not exist
        """
        pass

    @abstractmethod
    async def update_customer(self, customer_id: str, fields: Dict[str, Any]) -> Customer:
        """
        Apply a partial update to a customer.

        Args:
            customer_id: Customer ID
            fields: Attribute name to new value

        Returns:
            Updated customer record

        Raises:
            NotFoundError: If the customer does not exist
        """
        pass


class InMemoryCustomerDirectory(CustomerDirectory):
    """Customer directory backed by process memory."""

    def __init__(self):
        self._customers = InMemoryRepository[Customer]()

    def add_customer(self, customer: Customer) -> Customer:
        """Insert or replace a customer record."""
        return self._customers.put(customer)

    async def find_customer(self, customer_id: str) -> Customer:
        """Get customer by ID."""
        customer = self._customers.get(customer_id)
        if customer is None:
            raise NotFoundError("customer", customer_id)
        return customer

    async def update_customer(self, customer_id: str, fields: Dict[str, Any]) -> Customer:
        """Apply a partial update to a customer."""
        customer = await self.find_customer(customer_id)

        unknown = set(fields) - set(Customer.model_fields)
        if unknown:
            raise ValueError(f"Unknown customer fields: {sorted(unknown)}")

        updated = customer.model_copy(update=fields)
        self._customers.put(updated)

        logger.debug(
            "Customer updated",
            customer_id=customer_id,
            updated_fields=sorted(fields),
        )
        return updated

    def clear(self) -> None:
        """Remove every customer."""
        self._customers.clear()
