from django.db import transaction
from django.dispatch import Signal, receiver
import logging

from .events import LowStockCrossed, OutOfStock

logger = logging.getLogger(__name__)

# Sent once per domain event after the transaction that raised it commits.
# Receivers get the event as the `event` keyword argument.
domain_event = Signal()


def dispatch_on_commit(events, sender=None):
    """Queue events for delivery once the current transaction commits."""
    for event in list(events):
        transaction.on_commit(
            lambda event=event: domain_event.send(sender=sender, event=event)
        )


@receiver(domain_event)
def log_domain_event(sender, event, **kwargs):
    if isinstance(event, (LowStockCrossed, OutOfStock)):
        logger.warning(f"Stock alert: {event.to_dict()}")
    else:
        logger.info(f"Order #{event.order_number}: {event.name}")
