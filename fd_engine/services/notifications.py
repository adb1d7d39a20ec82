"""Fire-and-forget event publication."""

import logging
import uuid
from typing import Any

from fd_engine.clock import ClockProvider
from fd_engine.models import (
    Account,
    AccountAlertEvent,
    AlertType,
    CommunicationRequestedEvent,
    ProductConfig,
)
from fd_engine.sinks.base import EventSink

logger = logging.getLogger(__name__)


def new_event_id() -> str:
    return str(uuid.uuid4())


class Notifier:
    """Publish events after a commit without letting sink failures propagate.

    A failed publish is logged with its traceback and reported through the
    return value; the caller's committed state is never affected.
    """

    def __init__(self, sink: EventSink, clock: ClockProvider) -> None:
        self.sink = sink
        self.clock = clock

    def publish(self, event: Any) -> bool:
        account_number = getattr(event, "account_number", None)
        try:
            self.sink.publish(event)
        except Exception:
            logger.exception(
                "Failed to publish %s for account %s",
                type(event).__name__,
                account_number,
                extra={"account_number": account_number},
            )
            return False
        return True

    def alert_event(
        self,
        account: Account,
        alert_type: AlertType,
        message: str,
        details: str = "",
    ) -> AccountAlertEvent:
        return AccountAlertEvent(
            account_number=account.account_number,
            alert_type=alert_type,
            alert_message=message,
            customer_id=account.primary_customer_id or "SYSTEM",
            timestamp=self.clock.logical_datetime(),
            event_id=new_event_id(),
            details=details,
        )

    def alert(
        self,
        account: Account,
        alert_type: AlertType,
        message: str,
        details: str = "",
    ) -> bool:
        return self.publish(self.alert_event(account, alert_type, message, details))

    def communicate(
        self,
        account: Account,
        product: ProductConfig,
        communication_event: str,
        variables: dict[str, str] | None = None,
    ) -> int:
        """Request every product communication configured for ``communication_event``.

        Returns
        -------
        int
            Number of requests published successfully.
        """
        published = 0
        for comm in product.communications_for(communication_event):
            event = CommunicationRequestedEvent(
                event_id=new_event_id(),
                account_number=account.account_number,
                customer_id=account.primary_customer_id or "",
                communication_type=comm.communication_type,
                channel=comm.channel,
                communication_event=communication_event,
                template=comm.template,
                template_variables=dict(variables or {}),
                timestamp=self.clock.logical_datetime(),
            )
            if self.publish(event):
                published += 1
        return published
