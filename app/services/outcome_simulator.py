"""
Deterministic outcome simulator for automatic inquiry decisioning.

A submitted government ID number decides what happens next:

* ends in ``0000`` - the inquiry is auto-approved after the processing delay
* ends in ``9999`` - the inquiry is auto-declined after the processing delay
* anything else   - nothing is scheduled; the inquiry waits for manual review
"""
import re
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from pydantic import BaseModel

from app.tasks.scheduler import ScheduledTask, TaskScheduler
from app.utils.logging import get_logger

if TYPE_CHECKING:
    from app.services.persona_mock import PersonaMockService


logger = get_logger(__name__)


class VerificationOutcome(str, Enum):
    """Automatic decision for a submitted ID number."""
    APPROVED = "approved"
    DECLINED = "declined"
    MANUAL_REVIEW = "manual_review"


class OutcomeRule(BaseModel):
    """Pattern rule mapping an ID number to an outcome."""

    pattern: str
    outcome: VerificationOutcome
    reason: Optional[str] = None

    def matches(self, id_number: str) -> bool:
        """Check whether ``id_number`` satisfies this rule."""
        return re.search(self.pattern, id_number) is not None


AUTO_DECLINE_REASON = "Document verification failed"

# Evaluated in order, first match wins
OUTCOME_RULES: List[OutcomeRule] = [
    OutcomeRule(pattern=r"0000$", outcome=VerificationOutcome.APPROVED),
    OutcomeRule(pattern=r"9999$", outcome=VerificationOutcome.DECLINED, reason=AUTO_DECLINE_REASON),
]


class OutcomeSimulator:
    """Schedules automatic terminal transitions based on ID number rules."""

    def __init__(
        self,
        engine: "PersonaMockService",
        scheduler: TaskScheduler,
        delay: float,
        rules: Optional[List[OutcomeRule]] = None
    ):
        """
        Initialize simulator.

        Args:
            engine: Lifecycle engine performing the transitions
            scheduler: Scheduler running the delayed jobs
            delay: Seconds to wait before the transition starts
            rules: Ordered rule set, defaults to ``OUTCOME_RULES``
        """
        self.engine = engine
        self.scheduler = scheduler
        self.delay = delay
        self.rules = rules if rules is not None else OUTCOME_RULES

    def match(self, id_number: str) -> Optional[OutcomeRule]:
        """Return the first rule matching ``id_number``."""
        for rule in self.rules:
            if rule.matches(id_number):
                return rule
        return None

    def evaluate(self, id_number: str) -> VerificationOutcome:
        """Decide the outcome for ``id_number`` without scheduling anything."""
        rule = self.match(id_number)
        return rule.outcome if rule else VerificationOutcome.MANUAL_REVIEW

    def process(self, inquiry_id: str, id_number: str) -> Optional[ScheduledTask]:
        """
        Schedule the automatic transition for an inquiry, if any applies.

        Returns immediately; the transition runs in the background.

        Args:
            inquiry_id: Inquiry to transition
            id_number: Submitted government ID number

        Returns:
            Handle of the scheduled job, or None when left for manual review
        """
        rule = self.match(id_number)

        if rule is None:
            logger.info(
                "Inquiry left for manual review",
                inquiry_id=inquiry_id,
                outcome=VerificationOutcome.MANUAL_REVIEW.value,
            )
            return None

        if rule.outcome == VerificationOutcome.APPROVED:
            async def job():
                await self._auto_approve(inquiry_id)
        else:
            reason = rule.reason or AUTO_DECLINE_REASON

            async def job():
                await self._auto_decline(inquiry_id, reason)

        handle = self.scheduler.schedule(
            self.delay, job, name=f"auto-{rule.outcome.value}:{inquiry_id}"
        )

        logger.info(
            "Automatic verification scheduled",
            inquiry_id=inquiry_id,
            outcome=rule.outcome.value,
            delay=self.delay,
        )
        return handle

    async def _auto_approve(self, inquiry_id: str) -> None:
        """Background auto-approve; failures are logged and dropped."""
        try:
            await self.engine.auto_approve_inquiry(inquiry_id)
        except Exception as e:
            logger.warning(
                "Auto-approve background job failed",
                inquiry_id=inquiry_id,
                error=str(e),
            )

    async def _auto_decline(self, inquiry_id: str, reason: str) -> None:
        """Background auto-decline; failures are logged and dropped."""
        try:
            await self.engine.auto_decline_inquiry(inquiry_id, reason)
        except Exception as e:
            logger.warning(
                "Auto-decline background job failed",
                inquiry_id=inquiry_id,
                error=str(e),
            )
