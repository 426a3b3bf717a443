"""
Django signals for the catalog app.
Handles automatic creation of price history records.
"""

import logging

from django.db.models.signals import pre_save
from django.dispatch import receiver
from simple_history.models import HistoricalRecords

from .models import ProductVariant, PriceHistory

logger = logging.getLogger(__name__)


def _current_user():
    # Set by simple_history's HistoryRequestMiddleware during a request
    request = getattr(HistoricalRecords.context, 'request', None)
    user = getattr(request, 'user', None)
    if user is not None and user.is_authenticated:
        return user
    return None


@receiver(pre_save, sender=ProductVariant)
def track_price_changes(sender, instance, **kwargs):
    """
    Create PriceHistory records when variant prices change.
    """
    if not instance.pk:
        # New variant, no history to track
        return

    old_price = ProductVariant.objects.filter(pk=instance.pk).values_list('price', flat=True).first()
    if old_price is None or old_price == instance.price:
        return

    PriceHistory.objects.create(
        variant=instance,
        old_price=old_price,
        new_price=instance.price,
        changed_by=_current_user(),
    )
    logger.debug("Price of variant %s changed: %s -> %s", instance.pk, old_price, instance.price)
