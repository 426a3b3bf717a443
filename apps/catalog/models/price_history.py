from django.db import models
from django.conf import settings


class PriceHistory(models.Model):
    """
    Track price changes for variants for audit purposes.
    Automatically created when variant prices change.
    """
    variant = models.ForeignKey(
        'catalog.ProductVariant',
        on_delete=models.CASCADE,
        related_name='price_history',
        verbose_name='Biến thể'
    )
    old_price = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        null=True,
        blank=True,
        verbose_name='Giá cũ'
    )
    new_price = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        null=True,
        blank=True,
        verbose_name='Giá mới'
    )
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        verbose_name='Người thay đổi'
    )
    changed_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name='Thời điểm'
    )
    notes = models.TextField(
        blank=True,
        verbose_name='Ghi chú'
    )

    class Meta:
        ordering = ['-changed_at', '-id']
        verbose_name = 'Lịch sử giá'
        verbose_name_plural = 'Lịch sử giá'

    def __str__(self):
        return f"{self.variant} : {self.old_price} → {self.new_price}"

    @property
    def price_difference(self):
        if self.old_price is None or self.new_price is None:
            return None
        return self.new_price - self.old_price

    @property
    def percentage_change(self):
        if self.old_price is None or self.old_price == 0:
            return None
        diff = self.price_difference
        if diff is None:
            return None
        return (diff / self.old_price) * 100
