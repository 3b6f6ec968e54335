"""
In-process webhook dispatcher delivering engine events to registered callbacks.
"""
import inspect
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Union

from app.models.persona import Inquiry, Verification, WebhookEvent, WebhookEventType, utcnow
from app.utils.logging import get_logger

logger = get_logger(__name__)

WebhookCallback = Callable[[WebhookEvent], Union[None, Awaitable[None]]]


class WebhookDispatcher:
    """Registry of named callbacks with failure-isolated, ordered delivery."""

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        """
        Initialize dispatcher.

        Args:
            clock: Source of event timestamps
        """
        self._clock = clock
        self._callbacks: Dict[str, WebhookCallback] = {}

    def register(self, name: str, callback: WebhookCallback) -> None:
        """Register ``callback`` under ``name``, replacing any previous one."""
        self._callbacks[name] = callback
        logger.debug("Webhook callback registered", callback_id=name)

    def unregister(self, name: str) -> None:
        """Remove the callback registered under ``name``, if any."""
        if self._callbacks.pop(name, None) is not None:
            logger.debug("Webhook callback unregistered", callback_id=name)

    async def emit(
        self,
        event_type: WebhookEventType,
        entity: Union[Inquiry, Verification]
    ) -> WebhookEvent:
        """
        Build an event for ``entity`` and deliver it to every callback.

        Callbacks run one after another in registration order. A callback
        that raises is logged and skipped; the error never reaches the caller.

        Args:
            event_type: Type of event to emit
            entity: Inquiry or verification that triggered the event

        Returns:
            The emitted event
        """
        event = WebhookEvent.from_entity(event_type, entity, created_at=self._clock())

        logger.info(
            "Emitting webhook event",
            event_type=event_type.value,
            event_id=event.id,
            data_id=entity.id,
            callbacks=len(self._callbacks),
        )

        for callback_id, callback in list(self._callbacks.items()):
            try:
                result = callback(event)
                if inspect.isawaitable(result):
                    await result
                logger.debug(
                    "Webhook callback executed",
                    callback_id=callback_id,
                    event_type=event_type.value,
                )
            except Exception as e:
                logger.error(
                    "Webhook callback failed",
                    callback_id=callback_id,
                    event_type=event_type.value,
                    event_id=event.id,
                    error=str(e),
                    exc_info=True,
                )

        return event

    def clear(self) -> None:
        """Remove every registered callback."""
        self._callbacks.clear()

    @property
    def count(self) -> int:
        """Number of registered callbacks."""
        return len(self._callbacks)

    @property
    def callback_names(self) -> List[str]:
        """Registered callback names in delivery order."""
        return list(self._callbacks)
